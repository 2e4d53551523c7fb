from __future__ import annotations

from typing import Any, Optional, Protocol

from contracts.ui_protocol import EVENT_CYCLE, EVENT_EXPIRE
from pomodoro import CycleSnapshot

from .messages import PHASE_TITLES


class UIServerLike(Protocol):
    def publish(self, event_type: str, **payload: Any) -> None:
        ...

    def forget(self, event_type: str) -> None:
        ...


class RuntimeUIPublisher:
    def __init__(self, ui_server: Optional[UIServerLike]):
        self._ui_server = ui_server

    def publish(self, event_type: str, **payload: Any) -> None:
        if self._ui_server:
            self._ui_server.publish(event_type, **payload)

    def clear_expiration(self) -> None:
        """Stop replaying the last expiration notice to newly connected clients."""
        if self._ui_server:
            self._ui_server.forget(EVENT_EXPIRE)

    def publish_cycle_update(self, snapshot: CycleSnapshot) -> None:
        self.publish(EVENT_CYCLE, **cycle_payload(snapshot))

    def publish_expiration(
        self,
        snapshot: CycleSnapshot,
        *,
        title: str,
        action: str,
        messages: tuple[str, ...] = (),
    ) -> None:
        payload = cycle_payload(snapshot)
        payload["title"] = title
        payload["action"] = action
        if messages:
            payload["messages"] = list(messages)
        self.publish(EVENT_EXPIRE, **payload)


def cycle_payload(snapshot: CycleSnapshot) -> dict[str, Any]:
    return {
        "phase": snapshot.phase,
        "phase_title": PHASE_TITLES.get(snapshot.phase, snapshot.phase),
        "state": snapshot.state,
        "duration_seconds": snapshot.timer.duration_seconds,
        "remaining_seconds": round(snapshot.remaining_seconds, 3),
        "display_remaining_seconds": snapshot.timer.display_remaining_seconds,
        "focus_count": snapshot.focus_count,
        "long_break_pomodoros": snapshot.long_break_pomodoros,
    }
