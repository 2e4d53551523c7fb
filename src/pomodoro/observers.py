"""Observer fan-out: capability-set observers and named event listeners.

Observers implement any subset of ``on_start``, ``on_tick``, ``on_pause``,
``on_resume``, ``on_stop`` and ``on_expire``; missing callbacks are skipped.
A failing callback is logged and never stops delivery to the others.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Protocol

from .constants import OBSERVER_CALLBACKS

Listener = Callable[..., None]


class TimerObserver(Protocol):
    """Full observer surface; implementations may provide only some methods."""

    def on_start(self, snapshot: Any) -> None: ...

    def on_tick(self, snapshot: Any) -> None: ...

    def on_pause(self, snapshot: Any) -> None: ...

    def on_resume(self, snapshot: Any) -> None: ...

    def on_stop(self, snapshot: Any) -> None: ...

    def on_expire(self, snapshot: Any) -> None: ...


class ObserverSet:
    """Ordered registry of observers notified in registration order."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._observers: list[object] = []
        self._logger = logger or logging.getLogger("pomodoro.observers")

    def __len__(self) -> int:
        return len(self._observers)

    def __contains__(self, observer: object) -> bool:
        return any(item is observer for item in self._observers)

    def add(self, observer: object) -> None:
        if observer in self:
            return
        self._observers.append(observer)

    def remove(self, observer: object) -> None:
        self._observers = [item for item in self._observers if item is not observer]

    def clear(self) -> None:
        self._observers = []

    def notify(self, event: str, *args: Any) -> None:
        method_name = OBSERVER_CALLBACKS[event]
        for observer in tuple(self._observers):
            # Removed during this dispatch.
            if observer not in self:
                continue
            callback = getattr(observer, method_name, None)
            if callback is None:
                continue
            try:
                callback(*args)
            except Exception:
                self._logger.error(
                    "Observer %s failed handling %s",
                    type(observer).__name__,
                    event,
                    exc_info=True,
                )


@dataclass(eq=False)
class _Registration:
    listener: Listener
    once: bool = False


class EventEmitter:
    """Named-event listeners with `on`/`once`/`off` registration."""

    def __init__(
        self,
        events: Iterable[str],
        logger: Optional[logging.Logger] = None,
    ):
        self._events = frozenset(events)
        self._listeners: dict[str, list[_Registration]] = {}
        self._logger = logger or logging.getLogger("pomodoro.observers")

    def on(self, event: str, listener: Listener) -> Listener:
        self._register(event, listener, once=False)
        return listener

    def once(self, event: str, listener: Listener) -> Listener:
        self._register(event, listener, once=True)
        return listener

    def off(self, event: str, listener: Listener) -> None:
        self._validate(event)
        registrations = self._listeners.get(event, [])
        self._listeners[event] = [
            item for item in registrations if item.listener is not listener
        ]

    def clear(self) -> None:
        self._listeners = {}

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    def emit(self, event: str, *args: Any) -> None:
        self._validate(event)
        for registration in tuple(self._listeners.get(event, [])):
            current = self._listeners.get(event, [])
            if not any(item is registration for item in current):
                continue
            if registration.once:
                self._listeners[event] = [
                    item for item in current if item is not registration
                ]
            try:
                registration.listener(*args)
            except Exception:
                self._logger.error(
                    "Listener for %s event failed",
                    event,
                    exc_info=True,
                )

    def _register(self, event: str, listener: Listener, *, once: bool) -> None:
        self._validate(event)
        if not callable(listener):
            raise TypeError("listener must be callable")
        self._listeners.setdefault(event, []).append(
            _Registration(listener=listener, once=once)
        )

    def _validate(self, event: str) -> None:
        if event not in self._events:
            allowed = ", ".join(sorted(self._events))
            raise ValueError(f"Unknown event '{event}'; expected one of: {allowed}")
