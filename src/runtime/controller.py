"""Cycle controller that owns the phase sequencer and builds per-phase timers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from app_config import AppConfig
from pomodoro import CountdownTimer, CycleSnapshot, Phase, PhaseSequencer, TickScheduler
from pomodoro.constants import (
    EVENT_CHANGE,
    EVENT_EXPIRE,
    PHASE_FOCUS,
    PHASE_LONG_BREAK,
    PHASE_SHORT_BREAK,
)

from .messages import (
    PHASE_TITLES,
    expiration_action,
    expiration_title,
    long_break_message,
    status_message,
)
from .status import StatusObserver
from .ui import RuntimeUIPublisher


@dataclass(frozen=True)
class PhaseOptions:
    """Per-phase timer configuration and the text shown when it runs out."""
    phase: Phase
    next_phase: Phase
    title: str
    duration_seconds: int
    tick_seconds: float
    expire_title: str
    expire_action: str
    messages: tuple[str, ...] = ()


@dataclass(frozen=True)
class ExpirationNotice:
    """Latest phase-boundary notice, kept until the user starts something new."""
    phase: Phase
    next_phase: Phase
    title: str
    action: str
    messages: tuple[str, ...] = ()


class CycleController:
    """Wires configured durations, status observers and UI updates into the cycle."""

    def __init__(
        self,
        settings: AppConfig,
        *,
        scheduler: TickScheduler,
        ui: Optional[RuntimeUIPublisher] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._settings = settings
        self._scheduler = scheduler
        self._ui = ui or RuntimeUIPublisher(None)
        self._logger = logger or logging.getLogger("runtime")
        self.last_expiration: Optional[ExpirationNotice] = None
        self.status: Optional[StatusObserver] = None
        self._active_options: Optional[PhaseOptions] = None
        self._sequencer = self._build_sequencer(PHASE_FOCUS)

    @property
    def settings(self) -> AppConfig:
        return self._settings

    @property
    def sequencer(self) -> PhaseSequencer:
        return self._sequencer

    @property
    def phase(self) -> Phase:
        return self._sequencer.phase

    @property
    def state(self) -> str:
        return self._sequencer.state

    def snapshot(self) -> CycleSnapshot:
        return self._sequencer.snapshot()

    def status_message(self) -> str:
        return status_message(self._sequencer.snapshot())

    def toggle(self) -> None:
        """Pause a running timer, resume a paused one, otherwise start."""
        if self._sequencer.is_running:
            self.pause()
        elif self._sequencer.is_paused:
            self.resume()
        else:
            self.start()

    def start(self) -> None:
        self._close_expiration()
        self._sequencer.start()

    def pause(self) -> None:
        self._sequencer.pause()

    def resume(self) -> None:
        self._close_expiration()
        self._sequencer.resume()

    def stop(self) -> None:
        self._sequencer.stop()

    def start_cycle(self) -> None:
        self._close_expiration()
        self._sequencer.start_cycle()

    def start_focus(self) -> None:
        self._start_phase(PHASE_FOCUS)

    def start_short_break(self) -> None:
        self._start_phase(PHASE_SHORT_BREAK)

    def start_long_break(self) -> None:
        self._start_phase(PHASE_LONG_BREAK)

    def reload(self, settings: AppConfig) -> None:
        """Apply new settings, keeping the current phase but not its progress."""
        phase = self._sequencer.phase
        self._sequencer.dispose()
        self._settings = settings
        self._sequencer = self._build_sequencer(phase)
        self._logger.info("Settings reloaded: phase=%s", phase)

    def dispose(self) -> None:
        self._sequencer.dispose()

    def phase_options(self, phase: Phase, next_phase: Phase) -> PhaseOptions:
        settings = self._settings
        has_long_break = settings.long_break.interval > 0
        if phase == PHASE_FOCUS:
            phase_settings = settings.focus
        elif phase == PHASE_SHORT_BREAK:
            phase_settings = settings.short_break
        else:
            phase_settings = settings.long_break

        until_long_break = long_break_message(self._pomodoros_after(phase))
        return PhaseOptions(
            phase=phase,
            next_phase=next_phase,
            title=PHASE_TITLES[phase],
            duration_seconds=phase_settings.duration_seconds,
            tick_seconds=settings.timer.tick_seconds,
            expire_title=expiration_title(phase, next_phase, has_long_break=has_long_break),
            expire_action=expiration_action(
                phase,
                next_phase,
                has_long_break=has_long_break,
            ),
            messages=(until_long_break,) if until_long_break else (),
        )

    def _pomodoros_after(self, phase: Phase) -> int:
        """Focus intervals left before a long break once `phase` completes."""
        sequencer = self._sequencer
        if not sequencer.has_long_break:
            return 0
        if phase == PHASE_LONG_BREAK:
            return sequencer.long_break_interval
        if phase == PHASE_FOCUS:
            return sequencer.long_break_pomodoros - 1
        return sequencer.long_break_pomodoros

    def _build_sequencer(self, phase: Phase) -> PhaseSequencer:
        sequencer = PhaseSequencer(
            self._create_timer,
            initial_phase=phase,
            long_break_interval=self._settings.long_break.interval,
            logger=logging.getLogger("pomodoro.sequencer"),
        )
        sequencer.on(EVENT_CHANGE, self._ui.publish_cycle_update)
        sequencer.on(EVENT_EXPIRE, self._handle_expire)
        return sequencer

    def _create_timer(self, phase: Phase, next_phase: Phase) -> CountdownTimer:
        options = self.phase_options(phase, next_phase)
        timer = CountdownTimer(
            options.duration_seconds,
            options.tick_seconds,
            scheduler=self._scheduler,
            logger=logging.getLogger("pomodoro.timer"),
        )
        self.status = StatusObserver(options.title)
        timer.observe(self.status)
        self._active_options = options
        return timer

    def _handle_expire(self, snapshot: CycleSnapshot) -> None:
        options = self._active_options
        if options is None:
            return
        notice = ExpirationNotice(
            phase=options.phase,
            next_phase=options.next_phase,
            title=options.expire_title,
            action=options.expire_action,
            messages=options.messages,
        )
        self.last_expiration = notice
        self._logger.info(
            "%s finished: %s (%s)",
            PHASE_TITLES[options.phase],
            notice.title,
            "; ".join(notice.messages) or notice.action,
        )
        self._ui.publish_expiration(
            snapshot,
            title=notice.title,
            action=notice.action,
            messages=notice.messages,
        )

    def _start_phase(self, phase: Phase) -> None:
        self._close_expiration()
        self._sequencer.start(phase)

    def _close_expiration(self) -> None:
        if self.last_expiration is not None:
            self._logger.debug("Closing expiration notice: %s", self.last_expiration.title)
            self.last_expiration = None
            self._ui.clear_expiration()
