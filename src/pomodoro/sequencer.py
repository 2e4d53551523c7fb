"""Phase sequencer that cycles focus and break countdowns automatically."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import Callable, Literal, Optional

from .constants import (
    ACTION_PAUSE,
    ACTION_RESUME,
    ACTION_START,
    ACTION_STOP,
    ACTIVE_STATES,
    DEFAULT_LONG_BREAK_INTERVAL,
    EVENT_CHANGE,
    EVENT_EXPIRE,
    EVENT_NAMES,
    LIFECYCLE_EVENTS,
    PHASE_FOCUS,
    PHASE_LONG_BREAK,
    PHASE_SHORT_BREAK,
    STATE_EXPIRED,
    STATE_PAUSED,
    STATE_RUNNING,
    STATE_STOPPED,
)
from .errors import InvalidTransitionError, SequencerDisposedError
from .observers import EventEmitter, Listener, ObserverSet
from .timer import CountdownTimer, TimerSnapshot, TimerState

Phase = Literal["focus", "short_break", "long_break"]
TimerFactory = Callable[[Phase, Phase], CountdownTimer]

PHASES: tuple[Phase, ...] = (PHASE_FOCUS, PHASE_SHORT_BREAK, PHASE_LONG_BREAK)


@dataclass(frozen=True)
class CycleSnapshot:
    """Phase-aware snapshot delivered to sequencer observers and listeners."""
    phase: Phase
    focus_count: int
    long_break_pomodoros: int
    timer: TimerSnapshot

    @property
    def state(self) -> TimerState:
        return self.timer.state

    @property
    def remaining_seconds(self) -> float:
        return self.timer.remaining_seconds


class PhaseSequencer:
    """Focus/break state machine that rebuilds a countdown timer for every phase.

    The sequencer holds at most one timer. When it expires the next phase is
    chosen, ``focus_count`` is updated, and ``timer_factory(next_phase,
    phase_after_that)`` supplies the timer that is started straight away.
    Observers registered here follow the cycle across timer replacements.
    """

    def __init__(
        self,
        timer_factory: TimerFactory,
        *,
        initial_phase: Phase = PHASE_FOCUS,
        long_break_interval: int = DEFAULT_LONG_BREAK_INTERVAL,
        logger: Optional[logging.Logger] = None,
    ):
        if long_break_interval < 0:
            raise ValueError("long_break_interval must not be negative")
        _validate_phase(initial_phase)

        self._timer_factory = timer_factory
        self._long_break_interval = int(long_break_interval)
        self._logger = logger or logging.getLogger("pomodoro.sequencer")

        self._phase: Phase = initial_phase
        self._focus_count = 0
        self._timer: Optional[CountdownTimer] = None
        self._disposed = False

        self._observers = ObserverSet(self._logger)
        self._events = EventEmitter(EVENT_NAMES, self._logger)

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def focus_count(self) -> int:
        return self._focus_count

    @property
    def long_break_interval(self) -> int:
        return self._long_break_interval

    @property
    def has_long_break(self) -> bool:
        return self._long_break_interval > 0

    @property
    def long_break_pomodoros(self) -> int:
        """Focus intervals still to complete before the next long break."""
        if not self.has_long_break:
            return 0
        return self._long_break_interval - (self._focus_count % self._long_break_interval)

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def state(self) -> TimerState:
        self._ensure_usable("query state")
        if self._timer is None:
            return STATE_STOPPED
        return self._timer.state

    @property
    def is_running(self) -> bool:
        return self.state == STATE_RUNNING

    @property
    def is_paused(self) -> bool:
        return self.state == STATE_PAUSED

    @property
    def is_stopped(self) -> bool:
        return self.state == STATE_STOPPED

    @property
    def is_expired(self) -> bool:
        return self.state == STATE_EXPIRED

    def snapshot(self) -> CycleSnapshot:
        """Snapshot of the held timer.

        Before the first start this prepares the current phase's timer through
        the factory; a later ``start()`` runs that same timer.
        """
        timer = self._ensure_timer("snapshot")
        return self._cycle_snapshot(timer.snapshot())

    def observe(self, observer: object) -> None:
        self._ensure_usable("observe")
        self._observers.add(observer)

    def unobserve(self, observer: object) -> None:
        self._observers.remove(observer)

    def on(self, event: str, listener: Listener) -> Listener:
        self._ensure_usable("add listener")
        return self._events.on(event, listener)

    def once(self, event: str, listener: Listener) -> Listener:
        self._ensure_usable("add listener")
        return self._events.once(event, listener)

    def off(self, event: str, listener: Listener) -> None:
        self._events.off(event, listener)

    def start(self, phase: Optional[Phase] = None) -> None:
        """Begin `phase` fresh, or start/resume the current phase when omitted."""
        self._ensure_usable(ACTION_START)

        if phase is not None:
            _validate_phase(phase)
            self._start_active_timer(self._replace_timer(phase))
            return

        timer = self._timer
        if timer is not None and timer.state == STATE_PAUSED:
            timer.resume()
            return
        if timer is not None and timer.state == STATE_RUNNING:
            self._logger.debug("Start ignored: phase=%s already running", self._phase)
            return
        if timer is not None and timer.state == STATE_EXPIRED:
            # A previous automatic advance failed; retry it.
            self._advance()
            return
        if timer is None or timer.has_started:
            timer = self._replace_timer(self._phase)
        self._start_active_timer(timer)

    def start_cycle(self) -> None:
        """Jump straight into a fresh focus phase without touching the counter."""
        self.start(PHASE_FOCUS)

    def pause(self) -> None:
        self._delegate(ACTION_PAUSE).pause()

    def resume(self) -> None:
        self._delegate(ACTION_RESUME).resume()

    def stop(self) -> None:
        self._delegate(ACTION_STOP).stop()

    def dispose(self) -> None:
        if self._disposed:
            return

        timer = self._timer
        if timer is not None and timer.state in ACTIVE_STATES:
            timer.stop()

        self._observers.clear()
        self._events.clear()
        self._timer = None
        self._disposed = True
        self._logger.info("Phase sequencer disposed: phase=%s", self._phase)

    def next_phase(self) -> Phase:
        """Phase that follows the current one if it completes now."""
        return self._following_phase(self._phase, self._focus_count)

    def _following_phase(self, phase: Phase, focus_count: int) -> Phase:
        if phase != PHASE_FOCUS:
            return PHASE_FOCUS
        completed = focus_count + 1
        if self.has_long_break and completed % self._long_break_interval == 0:
            return PHASE_LONG_BREAK
        return PHASE_SHORT_BREAK

    def _advance(self) -> None:
        completed_phase = self._phase
        focus_count = self._focus_count

        if completed_phase == PHASE_FOCUS:
            focus_count += 1
            if self.has_long_break and focus_count % self._long_break_interval == 0:
                next_phase: Phase = PHASE_LONG_BREAK
            else:
                next_phase = PHASE_SHORT_BREAK
        else:
            next_phase = PHASE_FOCUS
            if completed_phase == PHASE_LONG_BREAK:
                focus_count = 0

        if next_phase == PHASE_LONG_BREAK:
            focus_count = 0

        previous_count = self._focus_count
        # The factory sees the committed phase and count of the phase it builds.
        self._phase = next_phase
        self._focus_count = focus_count
        try:
            timer = self._replace_timer(next_phase)
        except Exception:
            self._phase = completed_phase
            self._focus_count = previous_count
            raise

        self._logger.info(
            "Phase completed: completed=%s next=%s focus_count=%d",
            completed_phase,
            next_phase,
            focus_count,
        )
        self._start_active_timer(timer)

    def _replace_timer(self, phase: Phase) -> CountdownTimer:
        following = self._following_phase(phase, self._focus_count)
        timer = self._timer_factory(phase, following)
        self._attach(timer)

        previous = self._timer
        if previous is not None and previous.state in ACTIVE_STATES:
            previous.stop()
        self._phase = phase
        self._timer = timer
        return timer

    def _start_active_timer(self, timer: CountdownTimer) -> None:
        self._logger.info(
            "Phase started: phase=%s duration=%ss focus_count=%d",
            self._phase,
            int(timer.duration),
            self._focus_count,
        )
        timer.start()

    def _attach(self, timer: CountdownTimer) -> None:
        for event in LIFECYCLE_EVENTS:
            timer.on(event, partial(self._relay, timer, event))

    def _relay(self, timer: CountdownTimer, event: str, snapshot: TimerSnapshot) -> None:
        if timer is not self._timer or self._disposed:
            return

        cycle_snapshot = self._cycle_snapshot(snapshot)
        self._observers.notify(event, cycle_snapshot)
        self._events.emit(event, cycle_snapshot)
        self._events.emit(EVENT_CHANGE, cycle_snapshot)

        if event != EVENT_EXPIRE:
            return
        try:
            self._advance()
        except Exception:
            self._logger.error(
                "Phase advance failed: phase=%s stays expired",
                self._phase,
                exc_info=True,
            )

    def _cycle_snapshot(self, snapshot: TimerSnapshot) -> CycleSnapshot:
        return CycleSnapshot(
            phase=self._phase,
            focus_count=self._focus_count,
            long_break_pomodoros=self.long_break_pomodoros,
            timer=snapshot,
        )

    def _delegate(self, action: str) -> CountdownTimer:
        self._ensure_usable(action)
        if self._timer is None:
            raise InvalidTransitionError(action, STATE_STOPPED)
        return self._timer

    def _ensure_timer(self, action: str) -> CountdownTimer:
        self._ensure_usable(action)
        timer = self._timer
        if timer is None:
            timer = self._replace_timer(self._phase)
        return timer

    def _ensure_usable(self, action: str) -> None:
        if self._disposed:
            raise SequencerDisposedError(action)


def _validate_phase(phase: str) -> None:
    if phase not in PHASES:
        allowed = ", ".join(PHASES)
        raise ValueError(f"Unknown phase '{phase}'; expected one of: {allowed}")
