"""
Orchestrator core -- the tool-calling loop that ties everything together.

The agent:
1. Takes user input
2. Builds the outbound message list from the session (system + history + user)
3. Sends to the provider with the registered tool schemas
4. Executes any requested tool calls and feeds the results back
5. Loops until the model responds with no tool calls (final response)
6. Commits only the user message and the final answer to history

Tool-call scaffolding lives in a per-turn working list and is discarded once
the turn ends, successfully or not.
"""

from __future__ import annotations

import contextlib
import enum
import logging
from typing import AsyncIterator, Iterable

from orbit.config import AgentConfig
from orbit.errors import MaxIterationsExceeded
from orbit.llm.providers.base import Provider
from orbit.llm.types import Message
from orbit.session.session import ConversationSession
from orbit.tools.base import Tool
from orbit.tools.executor import ToolExecutor
from orbit.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class AgentState(str, enum.Enum):
    IDLE = "idle"
    BUILDING_REQUEST = "building_request"
    AWAITING_RESPONSE = "awaiting_response"
    HAS_TOOL_CALLS = "has_tool_calls"
    EXECUTING_TOOLS = "executing_tools"
    NO_TOOL_CALLS = "no_tool_calls"
    DONE = "done"
    FAILED = "failed"


class Agent:
    """
    One conversation partner: a provider, a tool registry and a session.

    Parameters
    ----------
    provider : Provider
        Transport used for every model call.
    config : AgentConfig
        Loop and sampling settings.  Defaults to ``AgentConfig()``.
    tools : iterable of Tool
        Registered on construction.
    registry : ToolRegistry
        Use an existing registry instead of a fresh one.

    An agent runs one turn at a time.  Callers that share an agent across
    tasks must serialize turns (see ``AgentSessions.lock``).
    """

    def __init__(
        self,
        provider: Provider,
        config: AgentConfig | None = None,
        *,
        tools: Iterable[Tool] | None = None,
        registry: ToolRegistry | None = None,
    ) -> None:
        self.provider = provider
        self.config = config if config is not None else AgentConfig()
        self.registry = registry if registry is not None else ToolRegistry()
        if tools:
            self.add_tools(tools)
        self.executor = ToolExecutor(self.registry)
        self.session = ConversationSession(
            max_history_length=self.config.max_history_length,
            system_message=self.config.system_message,
        )
        self.state = AgentState.IDLE

    # ------------------------------------------------------------------
    # Turns
    # ------------------------------------------------------------------

    async def send(self, user_text: str) -> str:
        """
        Run one full turn and return the final answer.

        Raises ``TransportError``, ``RequestTimeoutError``, ``ProtocolError``
        or ``MaxIterationsExceeded``.  On any failure the history is left
        exactly as it was.
        """
        user_message = Message(role="user", content=user_text)
        self.state = AgentState.BUILDING_REQUEST
        working = self.session.outbound(user_message)
        limit = self.config.max_tool_iterations
        iterations = 0

        try:
            while True:
                if iterations >= limit:
                    logger.warning("Max tool iterations (%d) exceeded", limit)
                    raise MaxIterationsExceeded(limit)

                self.state = AgentState.AWAITING_RESPONSE
                tools_schema = self.registry.to_openai_schema()
                result = await self.provider.send(
                    working,
                    tools=tools_schema or None,
                    temperature=self.config.temperature,
                    max_tokens=self.config.max_tokens,
                    timeout_ms=self.config.timeout_ms,
                )
                logger.info(
                    "iteration=%d tool_calls=%d", iterations, len(result.tool_calls)
                )

                if not result.tool_calls:
                    self.state = AgentState.NO_TOOL_CALLS
                    answer = result.content
                    break

                self.state = AgentState.HAS_TOOL_CALLS
                working.append(
                    Message(
                        role="assistant",
                        content=result.content,
                        tool_calls=result.tool_calls,
                    )
                )

                self.state = AgentState.EXECUTING_TOOLS
                tool_results = await self.executor.execute_all(result.tool_calls)
                for tr in tool_results:
                    working.append(
                        Message(
                            role="tool",
                            content=tr.to_content(),
                            tool_call_id=tr.tool_call_id,
                        )
                    )

                iterations += 1
                self.state = AgentState.BUILDING_REQUEST
        except BaseException:
            self.state = AgentState.FAILED
            raise

        self.session.extend([user_message, Message(role="assistant", content=answer)])
        self.state = AgentState.DONE
        return answer

    async def send_stream(self, user_text: str) -> AsyncIterator[str]:
        """
        Stream the answer to *user_text* as text deltas.

        No tools are offered on this path.  The user message and the full
        answer are committed only after the stream completes cleanly.
        """
        user_message = Message(role="user", content=user_text)
        self.state = AgentState.BUILDING_REQUEST
        working = self.session.outbound(user_message)
        parts: list[str] = []

        try:
            self.state = AgentState.AWAITING_RESPONSE
            # Closing this generator early must also close the provider stream.
            async with contextlib.aclosing(
                self.provider.send_streaming(
                    working,
                    temperature=self.config.temperature,
                    max_tokens=self.config.max_tokens,
                    timeout_ms=self.config.timeout_ms,
                )
            ) as stream:
                async for chunk in stream:
                    if chunk.delta:
                        parts.append(chunk.delta)
                        yield chunk.delta
        except BaseException:
            self.state = AgentState.FAILED
            raise

        self.session.extend(
            [user_message, Message(role="assistant", content="".join(parts))]
        )
        self.state = AgentState.DONE

    # ------------------------------------------------------------------
    # Tools
    # ------------------------------------------------------------------

    def add_tool(self, tool: Tool) -> None:
        self.registry.register(tool)

    def add_tools(self, tools: Iterable[Tool]) -> None:
        for tool in tools:
            self.registry.register(tool)

    def remove_tool(self, name: str) -> bool:
        return self.registry.unregister(name)

    def get_tools(self) -> list[Tool]:
        return self.registry.list()

    # ------------------------------------------------------------------
    # History and settings
    # ------------------------------------------------------------------

    def clear_history(self) -> None:
        self.session.clear()

    def get_history(self) -> list[Message]:
        return self.session.history()

    @property
    def history_length(self) -> int:
        return len(self.session)

    def set_system_message(self, text: str) -> None:
        self.update_options(system_message=text)

    def set_context_block(self, text: str) -> None:
        self.session.set_context_block(text)

    def update_options(
        self,
        *,
        system_message: str | None = None,
        max_history_length: int | None = None,
        max_tool_iterations: int | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> None:
        """
        Change settings between turns.  All values are validated first; if
        any is invalid ``ConfigurationError`` is raised and nothing changes.
        Stored history is not re-trimmed until the next append.
        """
        new_config = self.config.updated(
            system_message=system_message,
            max_history_length=max_history_length,
            max_tool_iterations=max_tool_iterations,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        self.config = new_config
        self.session.max_history_length = new_config.max_history_length
        self.session.set_system_message(new_config.system_message)

    def is_configured(self) -> bool:
        return self.provider.has_credentials
