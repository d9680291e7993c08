"""
Bounded in-memory conversation history for one agent.

The session stores only the user-visible conversation.  The system message
is never stored: it is synthesized from ``system_message`` and
``context_block`` each time an outbound message list is built, and it
reserves one slot of the history budget whenever it is non-empty.

Trimming is pure recency: after an append that overflows the budget, the
oldest stored entries are dropped.
"""

from __future__ import annotations

from typing import Iterable

from orbit.llm.types import Message

CONTEXT_HEADER = "=== CONTEXT ==="


class ConversationSession:
    """
    Manages the message history of a single conversation.

    Parameters
    ----------
    max_history_length:
        Upper bound on ``len(history())`` plus the synthesized system slot.
    system_message:
        Base system prompt.
    context_block:
        Opaque data (e.g. a formatted profile) appended to the system prompt.
    """

    def __init__(
        self,
        max_history_length: int = 50,
        system_message: str = "",
        context_block: str = "",
    ) -> None:
        self._check_length(max_history_length)
        self._max_history_length = max_history_length
        self.system_message = system_message
        self.context_block = context_block
        self._history: list[Message] = []

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    @staticmethod
    def _check_length(value: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ValueError(f"max_history_length must be a positive integer, got {value!r}")

    @property
    def max_history_length(self) -> int:
        return self._max_history_length

    @max_history_length.setter
    def max_history_length(self, value: int) -> None:
        # Stored history is not re-trimmed until the next append.
        self._check_length(value)
        self._max_history_length = value

    def set_system_message(self, text: str) -> None:
        self.system_message = text

    def set_context_block(self, text: str) -> None:
        self.context_block = text

    def system_prompt(self) -> str | None:
        """The synthesized system text, or ``None`` when there is none."""
        if not self.system_message and not self.context_block:
            return None
        text = self.system_message
        if self.context_block:
            text += f"\n\n{CONTEXT_HEADER}\n{self.context_block}"
        return text

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def append(self, message: Message) -> None:
        if message.role == "system":
            raise ValueError("system messages are synthesized, not stored")
        self._history.append(message)
        self.trim()

    def extend(self, messages: Iterable[Message]) -> None:
        messages = list(messages)
        if any(m.role == "system" for m in messages):
            raise ValueError("system messages are synthesized, not stored")
        self._history.extend(messages)
        self.trim()

    def history(self) -> list[Message]:
        """Return a copy of the stored history."""
        return list(self._history)

    def clear(self) -> None:
        self._history.clear()

    def trim(self) -> None:
        capacity = self._max_history_length
        if self.system_prompt() is not None:
            capacity -= 1
        if len(self._history) > capacity:
            self._history = self._history[-capacity:] if capacity > 0 else []

    def outbound(self, user_message: Message) -> list[Message]:
        """Build ``[system?] + history + [user_message]`` for a new turn."""
        messages: list[Message] = []
        prompt = self.system_prompt()
        if prompt is not None:
            messages.append(Message(role="system", content=prompt))
        messages.extend(self._history)
        messages.append(user_message)
        return messages

    def __len__(self) -> int:
        return len(self._history)
