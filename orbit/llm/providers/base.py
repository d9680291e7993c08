"""Abstract base class for LLM providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import AsyncIterator

from orbit.llm.types import ChatResult, Message, StreamChunk


class Provider(ABC):
    """
    A provider encapsulates access to a single LLM endpoint.

    Implementations must support:
      - One request/response cycle (``send``).
      - Incremental delivery (``send_streaming``).

    Neither call retries.  Retry policy belongs to the caller.
    """

    @abstractmethod
    async def send(
        self,
        messages: list[Message],
        *,
        tools: list[dict] | None = None,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        timeout_ms: int = 60_000,
    ) -> ChatResult:
        """Run one non-streaming chat completion."""
        ...

    @abstractmethod
    async def send_streaming(
        self,
        messages: list[Message],
        *,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        timeout_ms: int = 60_000,
    ) -> AsyncIterator[StreamChunk]:
        """
        Start a streaming chat completion.

        Yields ``StreamChunk`` objects.  The last chunk has ``done=True``.
        The sequence cannot be restarted; call again to retry.
        """
        ...
        # Make the method an async generator so sub-classes can ``yield``.
        # This line is unreachable but satisfies the type checker.
        if False:  # pragma: no cover
            yield StreamChunk()  # type: ignore[misc]

    @property
    def has_credentials(self) -> bool:
        """Whether the provider has what it needs to authenticate."""
        return True

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable provider name (e.g. ``"openai-compat"``)."""
        ...
