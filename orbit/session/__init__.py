"""Session management: bounded history, context injection, agent map."""

from orbit.session.context import (
    ContextSource,
    ProfileContextSource,
    format_profile_context,
    load_context,
)
from orbit.session.manager import AgentSessions
from orbit.session.session import ConversationSession

__all__ = [
    "AgentSessions",
    "ContextSource",
    "ConversationSession",
    "ProfileContextSource",
    "format_profile_context",
    "load_context",
]
