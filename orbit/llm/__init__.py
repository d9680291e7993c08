"""LLM subsystem -- providers, wire types, and stream decoding."""

from orbit.llm.types import (
    ChatResult,
    Message,
    StreamChunk,
    ToolCallRequest,
)
from orbit.llm.stream_decoder import StreamDecoder, decode_stream

__all__ = [
    "ChatResult",
    "Message",
    "StreamChunk",
    "StreamDecoder",
    "ToolCallRequest",
    "decode_stream",
]
