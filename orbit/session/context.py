"""
Context injection from the profile store.

The agent only ever sees an opaque string.  Stores satisfy the narrow
:class:`ContextSource` protocol; :func:`format_profile_context` renders the
structured profile shape (likes, dislikes, notes, important dates) used by
the bundled in-memory source and by the CLI's ``--context-file`` option.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable

NO_PROFILE = "No profile data found."


@runtime_checkable
class ContextSource(Protocol):
    def format_context(self, entity_id: str) -> str: ...


class ContextTarget(Protocol):
    def set_context_block(self, text: str) -> None: ...


def _items(section: Any) -> list:
    if not isinstance(section, list):
        return []
    return [entry for entry in section if isinstance(entry, Mapping)]


def _joined(values: Any) -> str:
    if isinstance(values, (list, tuple)):
        return ", ".join(map(str, values))
    return str(values)


def format_profile_context(profile: Mapping[str, Any] | None) -> str:
    """Render one profile into the text block injected into the system prompt."""
    if not isinstance(profile, Mapping) or not profile:
        return NO_PROFILE

    lines = [
        f"Profile: {profile.get('name', '')}",
        f"Relationship: {profile.get('relationship', '')}",
        f"Birthday: {profile.get('birthday', '')}",
        "",
    ]

    likes = _items(profile.get("likes"))
    if likes:
        lines.append("LIKES:")
        for cat in likes:
            lines.append(f"  - {cat.get('name', '')}:")
            for item in _items(cat.get("items")):
                line = f"    {item.get('rank', '-')}. {item.get('name', '')}"
                if item.get("description"):
                    line += f" - {item['description']}"
                if item.get("tags"):
                    line += f" (tags: {_joined(item['tags'])})"
                lines.append(line)
        lines.append("")

    dislikes = _items(profile.get("dislikes"))
    if dislikes:
        lines.append("DISLIKES:")
        for cat in dislikes:
            lines.append(f"  - {cat.get('name', '')}:")
            for item in _items(cat.get("items")):
                line = f"    - {item.get('name', '')}"
                if item.get("description"):
                    line += f" - {item['description']}"
                lines.append(line)
        lines.append("")

    notes = _items(profile.get("notes"))
    if notes:
        lines.append("NOTES:")
        for note in notes:
            lines.append(f"  [{note.get('category', 'general')}] {note.get('content', '')}")
        lines.append("")

    dates = _items(profile.get("important_dates"))
    if dates:
        lines.append("IMPORTANT DATES:")
        for d in dates:
            line = f"  - {d.get('name', '')} ({d.get('date', '')}) - {d.get('type', '')}"
            if d.get("gift_ideas"):
                line += f" - Gift ideas: {_joined(d['gift_ideas'])}"
            lines.append(line)

    return "\n".join(lines).rstrip("\n") + "\n"


class ProfileContextSource:
    """In-memory ``ContextSource`` over a mapping of profile id -> profile."""

    def __init__(self, profiles: Mapping[str, Mapping[str, Any]]) -> None:
        self._profiles = profiles

    def format_context(self, entity_id: str) -> str:
        return format_profile_context(self._profiles.get(entity_id))


def load_context(target: ContextTarget, source: ContextSource, entity_id: str) -> str:
    """Fetch *entity_id*'s context from *source* and inject it into *target*."""
    text = source.format_context(entity_id)
    target.set_context_block(text)
    return text
