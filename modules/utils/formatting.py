"""Display formatting helpers."""

from __future__ import annotations

from datetime import datetime


def format_timestamp(value: str) -> str:
    """Render an ISO-8601 timestamp as ``Jan 5, 2025, 03:04 PM``.

    Values that cannot be parsed are returned unchanged.
    """
    if not value:
        return ""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        moment = datetime.fromisoformat(text)
    except ValueError:
        return value
    return f"{moment:%b} {moment.day}, {moment.year}, {moment:%I:%M %p}"


def preview(text: str, limit: int = 80) -> str:
    """Collapse whitespace and truncate text for table cells."""
    collapsed = " ".join((text or "").split())
    if len(collapsed) <= limit:
        return collapsed
    return collapsed[: limit - 1].rstrip() + "…"
