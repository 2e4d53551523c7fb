"""Cooperative deadline scheduler that drives countdown callbacks from a loop."""

from __future__ import annotations

import heapq
import itertools
import time
from typing import Callable, Optional, Protocol


class ScheduledCall:
    """Handle for a callback registered with a scheduler."""

    __slots__ = ("when", "_callback", "_cancelled")

    def __init__(self, when: float, callback: Callable[[], None]):
        self.when = when
        self._callback = callback
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def run(self) -> None:
        if not self._cancelled:
            self._callback()


class TickScheduler(Protocol):
    """Clock plus absolute-deadline callbacks used by countdown timers."""

    def now(self) -> float: ...

    def call_at(self, when: float, callback: Callable[[], None]) -> ScheduledCall: ...


class CooperativeScheduler:
    """Single-threaded scheduler; the owning loop calls `run_due()` to fire callbacks.

    Nothing runs on its own: callbacks execute only inside `run_due()`, in
    deadline order, on the thread that calls it.
    """

    def __init__(self, *, monotonic_fn: Optional[Callable[[], float]] = None):
        self._monotonic = monotonic_fn or time.monotonic
        self._queue: list[tuple[float, int, ScheduledCall]] = []
        self._sequence = itertools.count()

    def now(self) -> float:
        return self._monotonic()

    def call_at(self, when: float, callback: Callable[[], None]) -> ScheduledCall:
        call = ScheduledCall(float(when), callback)
        heapq.heappush(self._queue, (call.when, next(self._sequence), call))
        return call

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        return self.call_at(self.now() + max(0.0, delay), callback)

    @property
    def pending(self) -> int:
        return sum(1 for _, _, call in self._queue if not call.cancelled)

    def next_deadline(self) -> Optional[float]:
        self._discard_cancelled()
        if not self._queue:
            return None
        return self._queue[0][0]

    def seconds_until_next(self, limit: float) -> float:
        """Return how long the loop may wait before the next callback is due."""
        deadline = self.next_deadline()
        if deadline is None:
            return limit
        return max(0.0, min(limit, deadline - self.now()))

    def run_due(self) -> int:
        """Run every callback whose deadline has passed and return how many ran."""
        ran = 0
        while True:
            self._discard_cancelled()
            if not self._queue:
                return ran
            when, _, call = self._queue[0]
            if when > self.now():
                return ran
            heapq.heappop(self._queue)
            call.run()
            ran += 1

    def _discard_cancelled(self) -> None:
        while self._queue and self._queue[0][2].cancelled:
            heapq.heappop(self._queue)
