from .errors import InvalidTransitionError, PomodoroError, SequencerDisposedError
from .observers import EventEmitter, ObserverSet, TimerObserver
from .scheduling import CooperativeScheduler, ScheduledCall, TickScheduler
from .sequencer import CycleSnapshot, Phase, PhaseSequencer, TimerFactory
from .timer import CountdownTimer, TimerSnapshot, TimerState

__all__ = [
    "CooperativeScheduler",
    "CountdownTimer",
    "CycleSnapshot",
    "EventEmitter",
    "InvalidTransitionError",
    "ObserverSet",
    "Phase",
    "PhaseSequencer",
    "PomodoroError",
    "ScheduledCall",
    "SequencerDisposedError",
    "TickScheduler",
    "TimerFactory",
    "TimerObserver",
    "TimerSnapshot",
    "TimerState",
]
