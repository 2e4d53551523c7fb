import unittest

from pomodoro import CooperativeScheduler, EventEmitter, ObserverSet


class _FakeClock:
    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now


class CooperativeSchedulerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = _FakeClock()
        self.scheduler = CooperativeScheduler(monotonic_fn=self.clock)

    def test_run_due_fires_only_passed_deadlines_in_order(self) -> None:
        calls: list[str] = []
        self.scheduler.call_at(3.0, lambda: calls.append("c"))
        self.scheduler.call_at(1.0, lambda: calls.append("a"))
        self.scheduler.call_at(2.0, lambda: calls.append("b"))

        self.clock.now = 2.0
        self.assertEqual(2, self.scheduler.run_due())
        self.assertEqual(["a", "b"], calls)
        self.assertEqual(1, self.scheduler.pending)

    def test_equal_deadlines_run_in_registration_order(self) -> None:
        calls: list[int] = []
        for index in range(3):
            self.scheduler.call_at(1.0, lambda index=index: calls.append(index))

        self.clock.now = 1.0
        self.scheduler.run_due()
        self.assertEqual([0, 1, 2], calls)

    def test_cancelled_calls_are_skipped(self) -> None:
        calls: list[str] = []
        handle = self.scheduler.call_at(1.0, lambda: calls.append("cancelled"))
        self.scheduler.call_at(2.0, lambda: calls.append("kept"))
        handle.cancel()

        self.assertTrue(handle.cancelled)
        self.assertEqual(2.0, self.scheduler.next_deadline())
        self.clock.now = 5.0
        self.assertEqual(1, self.scheduler.run_due())
        self.assertEqual(["kept"], calls)
        self.assertIsNone(self.scheduler.next_deadline())

    def test_callbacks_scheduled_while_running_fire_in_same_pass_when_due(self) -> None:
        calls: list[str] = []

        def first() -> None:
            calls.append("first")
            self.scheduler.call_at(1.5, lambda: calls.append("chained"))
            self.scheduler.call_at(9.0, lambda: calls.append("later"))

        self.scheduler.call_at(1.0, first)
        self.clock.now = 2.0
        self.scheduler.run_due()

        self.assertEqual(["first", "chained"], calls)
        self.assertEqual(9.0, self.scheduler.next_deadline())

    def test_seconds_until_next_is_capped_and_never_negative(self) -> None:
        self.assertEqual(0.25, self.scheduler.seconds_until_next(0.25))

        self.scheduler.call_later(10.0, lambda: None)
        self.assertEqual(0.25, self.scheduler.seconds_until_next(0.25))

        self.clock.now = 9.9
        self.assertAlmostEqual(0.1, self.scheduler.seconds_until_next(0.25))

        self.clock.now = 11.0
        self.assertEqual(0.0, self.scheduler.seconds_until_next(0.25))

    def test_call_later_clamps_negative_delay(self) -> None:
        self.clock.now = 4.0
        handle = self.scheduler.call_later(-3.0, lambda: None)
        self.assertEqual(4.0, handle.when)


class _Partial:
    def __init__(self, name: str, log: list[str]):
        self.name = name
        self.log = log

    def on_tick(self, snapshot) -> None:
        self.log.append(f"{self.name}:{snapshot}")


class _Failing:
    def on_tick(self, snapshot) -> None:
        raise ValueError("boom")


class ObserverSetTests(unittest.TestCase):
    def test_notifies_in_registration_order_and_skips_missing_callbacks(self) -> None:
        log: list[str] = []
        observers = ObserverSet()
        observers.add(_Partial("a", log))
        observers.add(object())
        observers.add(_Partial("b", log))

        observers.notify("tick", 7)
        observers.notify("expire", 8)

        self.assertEqual(["a:7", "b:7"], log)
        self.assertEqual(3, len(observers))

    def test_duplicate_registration_is_ignored(self) -> None:
        log: list[str] = []
        observer = _Partial("a", log)
        observers = ObserverSet()
        observers.add(observer)
        observers.add(observer)

        observers.notify("tick", 1)
        self.assertEqual(["a:1"], log)

    def test_failure_is_logged_and_delivery_continues(self) -> None:
        log: list[str] = []
        observers = ObserverSet()
        observers.add(_Failing())
        observers.add(_Partial("b", log))

        with self.assertLogs("pomodoro.observers", level="ERROR") as captured:
            observers.notify("tick", 1)

        self.assertEqual(["b:1"], log)
        self.assertIn("_Failing failed handling tick", captured.output[0])

    def test_changes_during_dispatch_apply_to_later_notifications(self) -> None:
        log: list[str] = []
        observers = ObserverSet()
        late = _Partial("late", log)
        victim = _Partial("victim", log)

        class _Mutator:
            def on_tick(self, snapshot) -> None:
                log.append("mutator")
                observers.add(late)
                observers.remove(victim)

        observers.add(_Mutator())
        observers.add(victim)

        observers.notify("tick", 1)
        self.assertEqual(["mutator"], log)

        observers.notify("tick", 2)
        self.assertEqual(["mutator", "mutator", "late:2"], log)


class EventEmitterTests(unittest.TestCase):
    def setUp(self) -> None:
        self.emitter = EventEmitter(("tick", "expire"))

    def test_once_listener_fires_a_single_time(self) -> None:
        calls: list[int] = []
        self.emitter.once("tick", calls.append)

        self.emitter.emit("tick", 1)
        self.emitter.emit("tick", 2)

        self.assertEqual([1], calls)
        self.assertEqual(0, self.emitter.listener_count("tick"))

    def test_off_removes_listener(self) -> None:
        calls: list[int] = []
        listener = self.emitter.on("expire", calls.append)
        self.emitter.off("expire", listener)

        self.emitter.emit("expire", 1)
        self.assertEqual([], calls)

    def test_unknown_event_and_non_callable_are_rejected(self) -> None:
        with self.assertRaises(ValueError):
            self.emitter.on("lunch", print)
        with self.assertRaises(ValueError):
            self.emitter.emit("lunch")
        with self.assertRaises(TypeError):
            self.emitter.on("tick", "not callable")

    def test_listener_failure_is_isolated(self) -> None:
        calls: list[int] = []

        def broken(value: int) -> None:
            raise RuntimeError("listener failed")

        self.emitter.on("tick", broken)
        self.emitter.on("tick", calls.append)

        with self.assertLogs("pomodoro.observers", level="ERROR"):
            self.emitter.emit("tick", 3)

        self.assertEqual([3], calls)


if __name__ == "__main__":
    unittest.main()
