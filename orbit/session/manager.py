"""
Process-wide map of live agents keyed by conversation id.

An entry is created on first reference and removed only by an explicit
``clear``.  There is no eviction; callers that need one must add it.  Each
entry has an ``asyncio.Lock`` so a request handler can serialize turns for
one key while other keys run concurrently.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from orbit.orchestrator.core import Agent

logger = logging.getLogger(__name__)


class AgentSessions:
    """
    Parameters
    ----------
    factory:
        Called as ``factory(**options)`` to build an agent for a new key.
    """

    def __init__(self, factory: Callable[..., Agent]) -> None:
        self._factory = factory
        self._agents: dict[str, Agent] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def get_or_create(self, key: str, **options: Any) -> Agent:
        agent = self._agents.get(key)
        if agent is None:
            agent = self._factory(**options)
            self._agents[key] = agent
            self._locks[key] = asyncio.Lock()
            logger.info("Created agent session %s", key)
        return agent

    def get(self, key: str) -> Agent | None:
        return self._agents.get(key)

    def lock(self, key: str) -> asyncio.Lock:
        """Per-key turn lock.  Raises ``KeyError`` for unknown keys."""
        return self._locks[key]

    def clear(self, key: str) -> bool:
        """Clear the agent's history and drop it.  Returns ``False`` if unknown."""
        agent = self._agents.pop(key, None)
        self._locks.pop(key, None)
        if agent is None:
            return False
        agent.clear_history()
        logger.info("Cleared agent session %s", key)
        return True

    def list(self) -> list[dict]:
        return [
            {
                "id": key,
                "history_length": agent.history_length,
                "tools_count": len(agent.get_tools()),
            }
            for key, agent in self._agents.items()
        ]

    def __contains__(self, key: object) -> bool:
        return key in self._agents

    def __len__(self) -> int:
        return len(self._agents)
