"""Countdown timer with pause/resume/stop and drift-free tick scheduling."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Literal, Optional

from .constants import (
    ACTION_PAUSE,
    ACTION_RESUME,
    ACTION_START,
    ACTION_STOP,
    ACTIVE_STATES,
    DEFAULT_TICK_SECONDS,
    EVENT_CHANGE,
    EVENT_EXPIRE,
    EVENT_NAMES,
    EVENT_PAUSE,
    EVENT_RESUME,
    EVENT_START,
    EVENT_STOP,
    EVENT_TICK,
    STATE_EXPIRED,
    STATE_PAUSED,
    STATE_RUNNING,
    STATE_STOPPED,
)
from .errors import InvalidTransitionError
from .observers import EventEmitter, Listener, ObserverSet
from .scheduling import ScheduledCall, TickScheduler

TimerState = Literal["stopped", "running", "paused", "expired"]

# Absorbs float error when comparing elapsed time against tick boundaries.
_EPSILON = 1e-6


@dataclass(frozen=True)
class TimerSnapshot:
    """Immutable countdown snapshot handed to observers and listeners."""
    state: TimerState
    duration_seconds: float
    tick_seconds: float
    elapsed_seconds: float
    remaining_seconds: float

    @property
    def is_active(self) -> bool:
        return self.state in ACTIVE_STATES

    @property
    def display_remaining_seconds(self) -> float:
        """Remaining time rounded to the nearest tick boundary."""
        ticks = math.floor(self.remaining_seconds / self.tick_seconds + 0.5)
        return ticks * self.tick_seconds


class CountdownTimer:
    """One countdown run that emits start/tick/pause/resume/stop/expire events.

    Elapsed time is checkpointed on every pause so that the expiration instant
    is always recomputed from an absolute deadline. A timer runs once: after it
    expires or is stopped, a new instance is needed.
    """

    def __init__(
        self,
        duration_seconds: float,
        tick_seconds: float = DEFAULT_TICK_SECONDS,
        *,
        scheduler: TickScheduler,
        logger: Optional[logging.Logger] = None,
    ):
        if duration_seconds <= 0:
            raise ValueError("duration_seconds must be greater than zero")
        if tick_seconds <= 0:
            raise ValueError("tick_seconds must be greater than zero")

        self._duration = float(duration_seconds)
        self._tick = float(tick_seconds)
        self._scheduler = scheduler
        self._logger = logger or logging.getLogger("pomodoro.timer")

        self._state: TimerState = STATE_STOPPED
        self._has_started = False
        self._checkpoint_elapsed = 0.0
        # Monotonic instant of the last start or resume; only read while running.
        self._checkpoint_at = 0.0
        self._ticks_emitted = 0
        self._total_ticks = int(math.floor(self._duration / self._tick + _EPSILON))
        self._pending: Optional[ScheduledCall] = None

        self._observers = ObserverSet(self._logger)
        self._events = EventEmitter(EVENT_NAMES, self._logger)

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def tick_interval(self) -> float:
        return self._tick

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def has_started(self) -> bool:
        return self._has_started

    @property
    def is_running(self) -> bool:
        return self._state == STATE_RUNNING

    @property
    def is_paused(self) -> bool:
        return self._state == STATE_PAUSED

    @property
    def is_stopped(self) -> bool:
        return self._state == STATE_STOPPED

    @property
    def is_expired(self) -> bool:
        return self._state == STATE_EXPIRED

    @property
    def elapsed(self) -> float:
        elapsed = self._checkpoint_elapsed
        if self._state == STATE_RUNNING:
            elapsed += max(0.0, self._scheduler.now() - self._checkpoint_at)
        return min(self._duration, elapsed)

    @property
    def remaining(self) -> float:
        return max(0.0, self._duration - self.elapsed)

    def snapshot(self) -> TimerSnapshot:
        elapsed = self.elapsed
        return TimerSnapshot(
            state=self._state,
            duration_seconds=self._duration,
            tick_seconds=self._tick,
            elapsed_seconds=elapsed,
            remaining_seconds=max(0.0, self._duration - elapsed),
        )

    def observe(self, observer: object) -> None:
        self._observers.add(observer)

    def unobserve(self, observer: object) -> None:
        self._observers.remove(observer)

    def on(self, event: str, listener: Listener) -> Listener:
        return self._events.on(event, listener)

    def once(self, event: str, listener: Listener) -> Listener:
        return self._events.once(event, listener)

    def off(self, event: str, listener: Listener) -> None:
        self._events.off(event, listener)

    def start(self) -> None:
        if self._state != STATE_STOPPED or self._has_started:
            raise InvalidTransitionError(ACTION_START, self._describe_state())

        self._has_started = True
        self._state = STATE_RUNNING
        self._checkpoint_at = self._scheduler.now()
        self._schedule_next()
        self._logger.info(
            "Timer started: duration=%ss tick=%ss",
            _format_seconds(self._duration),
            _format_seconds(self._tick),
        )
        self._emit(EVENT_START)

    def pause(self) -> None:
        if self._state != STATE_RUNNING:
            raise InvalidTransitionError(ACTION_PAUSE, self._describe_state())

        self._checkpoint_elapsed = self.elapsed
        self._cancel_pending()
        self._state = STATE_PAUSED
        self._logger.info(
            "Timer paused: remaining=%ss",
            _format_seconds(self.remaining),
        )
        self._emit(EVENT_PAUSE)

    def resume(self) -> None:
        if self._state != STATE_PAUSED:
            raise InvalidTransitionError(ACTION_RESUME, self._describe_state())

        self._state = STATE_RUNNING
        self._checkpoint_at = self._scheduler.now()
        self._schedule_next()
        self._logger.info(
            "Timer resumed: remaining=%ss",
            _format_seconds(self.remaining),
        )
        self._emit(EVENT_RESUME)

    def stop(self) -> None:
        if self._state not in ACTIVE_STATES:
            raise InvalidTransitionError(ACTION_STOP, self._describe_state())

        self._checkpoint_elapsed = self.elapsed
        self._cancel_pending()
        self._state = STATE_STOPPED
        self._logger.info(
            "Timer stopped: remaining=%ss",
            _format_seconds(self.remaining),
        )
        self._emit(EVENT_STOP)

    def _schedule_next(self) -> None:
        if self._ticks_emitted < self._total_ticks:
            target = min(self._duration, (self._ticks_emitted + 1) * self._tick)
        else:
            target = self._duration

        when = self._checkpoint_at + (target - self._checkpoint_elapsed)
        self._pending = self._scheduler.call_at(when, self._on_deadline)

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _on_deadline(self) -> None:
        self._pending = None
        if self._state != STATE_RUNNING:
            return

        elapsed = self.elapsed
        due_ticks = min(
            self._total_ticks,
            int(math.floor((elapsed + _EPSILON) / self._tick)),
        )
        # Late deadlines still deliver every boundary tick, in order.
        while self._ticks_emitted < due_ticks:
            self._ticks_emitted += 1
            self._logger.debug(
                "Timer tick %d/%d: remaining=%ss",
                self._ticks_emitted,
                self._total_ticks,
                _format_seconds(self.remaining),
            )
            self._emit(EVENT_TICK)
            if self._state != STATE_RUNNING or self._pending is not None:
                return

        if elapsed + _EPSILON >= self._duration:
            self._expire()
            return

        self._schedule_next()

    def _expire(self) -> None:
        self._checkpoint_elapsed = self._duration
        self._state = STATE_EXPIRED
        self._logger.info("Timer expired: duration=%ss", _format_seconds(self._duration))
        self._emit(EVENT_EXPIRE)

    def _emit(self, event: str) -> None:
        snapshot = self.snapshot()
        self._observers.notify(event, snapshot)
        self._events.emit(event, snapshot)
        self._events.emit(EVENT_CHANGE, snapshot)

    def _describe_state(self) -> str:
        if self._state == STATE_STOPPED and self._has_started:
            return "stopped after a run"
        return self._state


def _format_seconds(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}"
