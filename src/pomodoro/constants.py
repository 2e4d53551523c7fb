"""State, phase, and event constants used by the countdown and cycle engine."""

from __future__ import annotations

DEFAULT_LONG_BREAK_INTERVAL = 4
DEFAULT_TICK_SECONDS = 60

STATE_STOPPED = "stopped"
STATE_RUNNING = "running"
STATE_PAUSED = "paused"
STATE_EXPIRED = "expired"

ACTIVE_STATES: frozenset[str] = frozenset({STATE_RUNNING, STATE_PAUSED})

PHASE_FOCUS = "focus"
PHASE_SHORT_BREAK = "short_break"
PHASE_LONG_BREAK = "long_break"

BREAK_PHASES: frozenset[str] = frozenset({PHASE_SHORT_BREAK, PHASE_LONG_BREAK})

ACTION_START = "start"
ACTION_PAUSE = "pause"
ACTION_RESUME = "resume"
ACTION_STOP = "stop"

EVENT_START = "start"
EVENT_TICK = "tick"
EVENT_PAUSE = "pause"
EVENT_RESUME = "resume"
EVENT_STOP = "stop"
EVENT_EXPIRE = "expire"
EVENT_CHANGE = "change"

LIFECYCLE_EVENTS: tuple[str, ...] = (
    EVENT_START,
    EVENT_TICK,
    EVENT_PAUSE,
    EVENT_RESUME,
    EVENT_STOP,
    EVENT_EXPIRE,
)

EVENT_NAMES: frozenset[str] = frozenset((*LIFECYCLE_EVENTS, EVENT_CHANGE))

# Observer method invoked for each lifecycle event.
OBSERVER_CALLBACKS: dict[str, str] = {
    event: f"on_{event}" for event in LIFECYCLE_EVENTS
}
