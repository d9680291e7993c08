"""Core types for the LLM subsystem."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

ROLES = ("system", "user", "assistant", "tool")


@dataclass(frozen=True)
class ToolCallRequest:
    """
    A tool call requested by the model.

    ``arguments_json`` is kept raw; the tool executor parses and validates it.
    """

    id: str
    name: str
    arguments_json: str = ""

    def to_wire(self) -> dict:
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.arguments_json},
        }


@dataclass(frozen=True)
class Message:
    """A single message in a conversation."""

    role: str  # "system", "user", "assistant", "tool"
    content: Any = ""
    tool_calls: tuple[ToolCallRequest, ...] | None = None
    tool_call_id: str | None = None

    def __post_init__(self) -> None:
        if self.role not in ROLES:
            raise ValueError(f"Unknown message role: {self.role!r}")
        if self.role == "tool" and not self.tool_call_id:
            raise ValueError("tool messages require a tool_call_id")
        if self.tool_calls is not None and not isinstance(self.tool_calls, tuple):
            object.__setattr__(self, "tool_calls", tuple(self.tool_calls))

    def to_wire(self) -> dict:
        m: dict = {"role": self.role, "content": self.content}
        if self.tool_calls:
            m["tool_calls"] = [tc.to_wire() for tc in self.tool_calls]
        if self.tool_call_id:
            m["tool_call_id"] = self.tool_call_id
        return m


@dataclass(frozen=True)
class StreamChunk:
    """
    A single chunk yielded while streaming a chat completion.

    *delta* carries new text content; *done* is ``True`` on the final chunk.
    """

    delta: str = ""
    done: bool = False


@dataclass
class ChatResult:
    """The complete assistant turn from a non-streaming request."""

    content: str = ""
    tool_calls: list[ToolCallRequest] = field(default_factory=list)
    model: str | None = None
    finish_reason: str | None = None
    usage: dict = field(default_factory=dict)
