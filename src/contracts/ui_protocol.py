"""Status websocket event constants."""

from __future__ import annotations

# Websocket event types
EVENT_HELLO = "hello"
EVENT_CYCLE = "cycle"
EVENT_EXPIRE = "expire"

STICKY_EVENT_TYPES: frozenset[str] = frozenset(
    {
        EVENT_CYCLE,
        EVENT_EXPIRE,
    }
)

STICKY_EVENT_ORDER: tuple[str, ...] = (
    EVENT_EXPIRE,
    EVENT_CYCLE,
)
