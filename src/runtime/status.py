"""Badge-style status observer attached to every phase timer."""

from __future__ import annotations

import logging
from typing import Optional

from pomodoro import TimerSnapshot

from .messages import badge_text

PAUSED_TEXT = "-"


class StatusObserver:
    """Keeps a short `24m` badge and a tooltip in sync with one countdown run."""

    def __init__(self, title: str, logger: Optional[logging.Logger] = None):
        self.title = title
        self.text = ""
        self.tooltip = ""
        self._logger = logger or logging.getLogger("runtime.status")

    def on_start(self, snapshot: TimerSnapshot) -> None:
        self._update_remaining(snapshot)

    def on_tick(self, snapshot: TimerSnapshot) -> None:
        self._update_remaining(snapshot)

    def on_resume(self, snapshot: TimerSnapshot) -> None:
        self._update_remaining(snapshot)

    def on_pause(self, snapshot: TimerSnapshot) -> None:
        self._update(PAUSED_TEXT, f"{self.title}: Timer Paused")

    def on_stop(self, snapshot: TimerSnapshot) -> None:
        self._update("", "")

    def on_expire(self, snapshot: TimerSnapshot) -> None:
        self._update("", "")

    def _update_remaining(self, snapshot: TimerSnapshot) -> None:
        text = badge_text(snapshot.remaining_seconds)
        self._update(text, f"{self.title}: {text} Remaining")

    def _update(self, text: str, tooltip: str) -> None:
        self.text = text
        self.tooltip = tooltip
        if tooltip:
            self._logger.info(tooltip)
