"""
Mock LLM providers for testing.

Provides canned responses so tests can exercise the agent loop without
hitting real APIs.
"""

from __future__ import annotations

from typing import AsyncIterator

from orbit.llm.providers.base import Provider
from orbit.llm.types import ChatResult, Message, StreamChunk, ToolCallRequest


class MockProvider(Provider):
    """
    A provider that replays pre-configured results.

    Usage::

        provider = MockProvider(results=[
            ChatResult(tool_calls=[ToolCallRequest("c1", "calculator", '{"expression": "6*7"}')]),
            ChatResult(content="42"),
        ])

    Parameters
    ----------
    results:
        ``ChatResult`` objects returned by successive ``send`` calls.  The
        last one is repeated once the list is exhausted.
    chunks:
        ``StreamChunk`` objects yielded by ``send_streaming``.
    error:
        If set, raised by both ``send`` and ``send_streaming``.
    """

    def __init__(
        self,
        results: list[ChatResult] | None = None,
        chunks: list[StreamChunk] | None = None,
        error: Exception | None = None,
        credentials: bool = True,
    ) -> None:
        self._results = results or [ChatResult(content="")]
        self._chunks = chunks or [StreamChunk(done=True)]
        self._error = error
        self._credentials = credentials
        self.call_count = 0
        self.calls: list[dict] = []
        self.stream_closed = False

    @property
    def name(self) -> str:
        return "mock"

    @property
    def has_credentials(self) -> bool:
        return self._credentials

    @property
    def last_messages(self) -> list[Message] | None:
        return self.calls[-1]["messages"] if self.calls else None

    @property
    def last_tools(self) -> list[dict] | None:
        return self.calls[-1]["tools"] if self.calls else None

    async def send(
        self,
        messages: list[Message],
        *,
        tools: list[dict] | None = None,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        timeout_ms: int = 60_000,
    ) -> ChatResult:
        self.calls.append({
            "messages": list(messages),
            "tools": tools,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "timeout_ms": timeout_ms,
        })
        self.call_count += 1
        if self._error is not None:
            raise self._error
        index = min(self.call_count - 1, len(self._results) - 1)
        return self._results[index]

    async def send_streaming(
        self,
        messages: list[Message],
        *,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        timeout_ms: int = 60_000,
    ) -> AsyncIterator[StreamChunk]:
        self.calls.append({"messages": list(messages), "tools": None})
        self.call_count += 1
        try:
            for chunk in self._chunks:
                if self._error is not None and chunk.done:
                    raise self._error
                yield chunk
            if self._error is not None:
                raise self._error
        finally:
            self.stream_closed = True


# ---------------------------------------------------------------------------
# Factory helpers
# ---------------------------------------------------------------------------

def make_text_provider(text: str = "Hello, world!") -> MockProvider:
    """Provider whose every response is plain text."""
    return MockProvider(results=[ChatResult(content=text)])


def make_tool_call_provider(
    tool_name: str,
    arguments_json: str,
    final_text: str = "Done.",
    call_id: str = "call_001",
) -> MockProvider:
    """Provider that requests one tool call, then answers with *final_text*."""
    return MockProvider(results=[
        ChatResult(tool_calls=[ToolCallRequest(call_id, tool_name, arguments_json)]),
        ChatResult(content=final_text),
    ])


def make_looping_provider(tool_name: str, arguments_json: str) -> MockProvider:
    """Provider that requests a tool call on every response."""
    return MockProvider(results=[
        ChatResult(tool_calls=[ToolCallRequest("call_loop", tool_name, arguments_json)]),
    ])


def make_stream_provider(*deltas: str) -> MockProvider:
    """Provider that streams *deltas* followed by a terminal chunk."""
    chunks = [StreamChunk(delta=d) for d in deltas] + [StreamChunk(done=True)]
    return MockProvider(chunks=chunks)
