import math
import unittest

from pomodoro import CooperativeScheduler, CountdownTimer, InvalidTransitionError


class _FakeClock:
    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now


def _advance(clock: _FakeClock, scheduler: CooperativeScheduler, seconds: float) -> None:
    target = clock.now + seconds
    while True:
        deadline = scheduler.next_deadline()
        if deadline is None or deadline > target:
            break
        clock.now = max(clock.now, deadline)
        scheduler.run_due()
    clock.now = target
    scheduler.run_due()


class _Recorder:
    def __init__(self):
        self.events: list[tuple[str, object]] = []

    def names(self) -> list[str]:
        return [name for name, _ in self.events]

    def on_start(self, snapshot) -> None:
        self.events.append(("start", snapshot))

    def on_tick(self, snapshot) -> None:
        self.events.append(("tick", snapshot))

    def on_pause(self, snapshot) -> None:
        self.events.append(("pause", snapshot))

    def on_resume(self, snapshot) -> None:
        self.events.append(("resume", snapshot))

    def on_stop(self, snapshot) -> None:
        self.events.append(("stop", snapshot))

    def on_expire(self, snapshot) -> None:
        self.events.append(("expire", snapshot))


class _TickOnly:
    def __init__(self):
        self.ticks = 0

    def on_tick(self, snapshot) -> None:
        self.ticks += 1


class _FailingTick:
    def on_tick(self, snapshot) -> None:
        raise RuntimeError("badge rendering failed")


class CountdownTimerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = _FakeClock()
        self.scheduler = CooperativeScheduler(monotonic_fn=self.clock)

    def _timer(self, duration: float, tick: float) -> CountdownTimer:
        return CountdownTimer(duration, tick, scheduler=self.scheduler)

    def test_rejects_non_positive_duration_and_tick(self) -> None:
        with self.assertRaises(ValueError):
            self._timer(0, 1)
        with self.assertRaises(ValueError):
            self._timer(10, 0)

    def test_full_run_emits_floor_ticks_then_single_expire(self) -> None:
        cases = [(10, 3), (9, 3), (1, 60), (1500, 60), (7.5, 2.5), (5, 10), (61, 60)]
        for duration, tick in cases:
            with self.subTest(duration=duration, tick=tick):
                recorder = _Recorder()
                timer = self._timer(duration, tick)
                timer.observe(recorder)

                timer.start()
                _advance(self.clock, self.scheduler, duration + 5 * tick)

                names = recorder.names()
                self.assertEqual("start", names[0])
                self.assertEqual("expire", names[-1])
                self.assertEqual(1, names.count("expire"))
                self.assertEqual(math.floor(duration / tick), names.count("tick"))
                self.assertEqual("expired", timer.state)
                self.assertEqual(0.0, timer.remaining)

    def test_late_scheduler_still_delivers_every_tick_before_expire(self) -> None:
        recorder = _Recorder()
        timer = self._timer(10, 3)
        timer.observe(recorder)

        timer.start()
        self.clock.now += 50
        self.scheduler.run_due()

        self.assertEqual(["start", "tick", "tick", "tick", "expire"], recorder.names())

    def test_tick_snapshots_count_down_and_final_boundary_precedes_expire(self) -> None:
        recorder = _Recorder()
        timer = self._timer(9, 3)
        timer.observe(recorder)

        timer.start()
        _advance(self.clock, self.scheduler, 9)

        remaining = [
            snapshot.remaining_seconds
            for name, snapshot in recorder.events
            if name == "tick"
        ]
        self.assertEqual([6.0, 3.0, 0.0], remaining)
        self.assertEqual(["start", "tick", "tick", "tick", "expire"], recorder.names())

    def test_no_events_after_expire(self) -> None:
        recorder = _Recorder()
        timer = self._timer(4, 1)
        timer.observe(recorder)

        timer.start()
        _advance(self.clock, self.scheduler, 4)
        count = len(recorder.events)
        _advance(self.clock, self.scheduler, 100)

        self.assertEqual(count, len(recorder.events))
        self.assertEqual(0, self.scheduler.pending)

    def test_pause_resume_ignores_real_time_spent_paused(self) -> None:
        timer = self._timer(10, 3)
        timer.start()
        _advance(self.clock, self.scheduler, 4)

        timer.pause()
        self.assertEqual(6.0, timer.remaining)
        _advance(self.clock, self.scheduler, 10_000)
        self.assertEqual(6.0, timer.remaining)
        self.assertEqual(4.0, timer.elapsed)

        timer.resume()
        self.assertEqual(6.0, timer.remaining)

        _advance(self.clock, self.scheduler, 5.5)
        self.assertEqual("running", timer.state)
        _advance(self.clock, self.scheduler, 0.5)
        self.assertEqual("expired", timer.state)

    def test_repeated_pause_resume_keeps_tick_boundaries(self) -> None:
        observer = _TickOnly()
        timer = self._timer(10, 3)
        timer.observe(observer)
        timer.start()

        for _ in range(5):
            _advance(self.clock, self.scheduler, 0.5)
            timer.pause()
            _advance(self.clock, self.scheduler, 7)
            timer.resume()

        # 2.5s of countdown elapsed so far, first boundary is at 3s.
        self.assertEqual(0, observer.ticks)
        _advance(self.clock, self.scheduler, 0.5)
        self.assertEqual(1, observer.ticks)
        _advance(self.clock, self.scheduler, 7)
        self.assertEqual(3, observer.ticks)
        self.assertEqual("expired", timer.state)

    def test_resume_rejected_when_stopped_or_running(self) -> None:
        timer = self._timer(10, 1)
        with self.assertRaises(InvalidTransitionError):
            timer.resume()
        self.assertEqual("stopped", timer.state)
        self.assertEqual(0.0, timer.elapsed)

        timer.start()
        _advance(self.clock, self.scheduler, 2.5)
        with self.assertRaises(InvalidTransitionError) as context:
            timer.resume()
        self.assertEqual("resume", context.exception.action)
        self.assertEqual("running", context.exception.state)
        self.assertEqual("running", timer.state)
        self.assertEqual(2.5, timer.elapsed)

    def test_pause_and_stop_rejected_when_not_active(self) -> None:
        timer = self._timer(10, 1)
        with self.assertRaises(InvalidTransitionError):
            timer.pause()
        with self.assertRaises(InvalidTransitionError):
            timer.stop()
        self.assertEqual("stopped", timer.state)

    def test_start_rejected_unless_fresh(self) -> None:
        timer = self._timer(10, 1)
        timer.start()
        with self.assertRaises(InvalidTransitionError):
            timer.start()

        timer.stop()
        with self.assertRaises(InvalidTransitionError) as context:
            timer.start()
        self.assertEqual("stopped after a run", context.exception.state)

    def test_stop_cancels_pending_ticks(self) -> None:
        recorder = _Recorder()
        timer = self._timer(10, 1)
        timer.observe(recorder)

        timer.start()
        _advance(self.clock, self.scheduler, 3)
        timer.stop()
        _advance(self.clock, self.scheduler, 20)

        self.assertEqual(["start", "tick", "tick", "tick", "stop"], recorder.names())
        self.assertEqual(7.0, timer.remaining)

    def test_stop_from_paused(self) -> None:
        timer = self._timer(10, 1)
        timer.start()
        timer.pause()
        timer.stop()
        self.assertTrue(timer.is_stopped)

    def test_observer_failure_does_not_block_other_observers(self) -> None:
        counter = _TickOnly()
        timer = self._timer(3, 1)
        timer.observe(_FailingTick())
        timer.observe(counter)

        timer.start()
        with self.assertLogs("pomodoro.timer", level="ERROR"):
            _advance(self.clock, self.scheduler, 1)

        self.assertEqual(1, counter.ticks)
        self.assertEqual("running", timer.state)

    def test_named_events_fire_with_change_after_each(self) -> None:
        seen: list[str] = []
        timer = self._timer(2, 1)
        timer.on("start", lambda snapshot: seen.append("start"))
        timer.on("tick", lambda snapshot: seen.append("tick"))
        timer.once("expire", lambda snapshot: seen.append("expire"))
        timer.on("change", lambda snapshot: seen.append("change"))

        timer.start()
        _advance(self.clock, self.scheduler, 2)

        self.assertEqual(
            ["start", "change", "tick", "change", "tick", "change", "expire", "change"],
            seen,
        )

    def test_observer_may_pause_from_tick_callback(self) -> None:
        timer = self._timer(10, 1)

        class _PauseOnTick:
            def on_tick(self, snapshot) -> None:
                timer.pause()

        timer.observe(_PauseOnTick())
        timer.start()
        _advance(self.clock, self.scheduler, 5)

        self.assertEqual("paused", timer.state)
        self.assertEqual(9.0, timer.remaining)
        self.assertEqual(0, self.scheduler.pending)

    def test_observer_added_mid_run_sees_only_later_events(self) -> None:
        recorder = _Recorder()
        timer = self._timer(5, 1)
        timer.start()
        _advance(self.clock, self.scheduler, 2)

        timer.observe(recorder)
        _advance(self.clock, self.scheduler, 1)
        timer.unobserve(recorder)
        _advance(self.clock, self.scheduler, 5)

        self.assertEqual(["tick"], recorder.names())

    def test_snapshot_rounds_display_to_tick_boundary(self) -> None:
        timer = self._timer(1500, 60)
        timer.start()
        self.clock.now += 89

        snapshot = timer.snapshot()
        self.assertEqual(1411.0, snapshot.remaining_seconds)
        self.assertEqual(1440.0, snapshot.display_remaining_seconds)
        self.assertTrue(snapshot.is_active)


if __name__ == "__main__":
    unittest.main()
