"""Status and expiration text builders for the focus/break cycle."""

from __future__ import annotations

import math

from pomodoro import CycleSnapshot
from pomodoro.constants import (
    BREAK_PHASES,
    PHASE_FOCUS,
    PHASE_LONG_BREAK,
    PHASE_SHORT_BREAK,
    STATE_EXPIRED,
    STATE_PAUSED,
    STATE_RUNNING,
)

PHASE_TITLES: dict[str, str] = {
    PHASE_FOCUS: "Focus",
    PHASE_SHORT_BREAK: "Short Break",
    PHASE_LONG_BREAK: "Long Break",
}


def format_duration(seconds: float) -> str:
    """Format a duration in seconds as `MM:SS`."""
    minutes, remainder = divmod(max(0, int(math.ceil(seconds))), 60)
    return f"{minutes:02d}:{remainder:02d}"


def rounded_minutes(seconds: float) -> int:
    """Round seconds to whole minutes, halves rounding up."""
    return int(math.floor(max(0.0, seconds) / 60 + 0.5))


def badge_text(remaining_seconds: float) -> str:
    minutes = rounded_minutes(remaining_seconds)
    return f"{minutes}m" if minutes else "<1m"


def pomodoro_count(count: int) -> str:
    if count == 0:
        return "No Pomodoros"
    if count == 1:
        return "1 Pomodoro"
    return f"{count:,} Pomodoros"


def long_break_message(pomodoros: int) -> str:
    """Return `N Pomodoros until long break`, or an empty string when disabled."""
    if pomodoros == 0:
        return ""
    return f"{pomodoro_count(pomodoros)} until long break"


def break_name(next_phase: str, *, has_long_break: bool) -> str:
    if not has_long_break:
        return "break"
    if next_phase == PHASE_LONG_BREAK:
        return "long break"
    return "short break"


def expiration_title(phase: str, next_phase: str, *, has_long_break: bool) -> str:
    """Headline shown when `phase` runs out, e.g. `Take a Short Break`."""
    if phase in BREAK_PHASES:
        return "Start Focusing"
    return f"Take a {break_name(next_phase, has_long_break=has_long_break).title()}"


def expiration_action(phase: str, next_phase: str, *, has_long_break: bool) -> str:
    if phase in BREAK_PHASES:
        return "Start focusing now"
    return f"Start {break_name(next_phase, has_long_break=has_long_break)} now"


def status_message(snapshot: CycleSnapshot) -> str:
    """Build a one-line status for the current cycle snapshot."""
    title = PHASE_TITLES.get(snapshot.phase, snapshot.phase)
    remaining = format_duration(snapshot.remaining_seconds)
    if snapshot.state == STATE_RUNNING:
        text = f"{title} running ({remaining} remaining)"
    elif snapshot.state == STATE_PAUSED:
        text = f"{title} paused ({remaining} remaining)"
    elif snapshot.state == STATE_EXPIRED:
        text = f"{title} finished"
    else:
        text = f"{title} ready"

    until_long_break = long_break_message(snapshot.long_break_pomodoros)
    if until_long_break:
        text = f"{text}, {until_long_break}"
    return text
