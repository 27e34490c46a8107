import unittest
from dataclasses import FrozenInstanceError

from daymate import timer
from daymate.models import TimerMode, TimerState

SAMPLE_STATES = [
    TimerState(),
    TimerState(TimerMode.WORK, 10_000, 10_000, True),
    TimerState(TimerMode.WORK, 10_000, 4_000, False),
    TimerState(TimerMode.BREAK, 300_000, 1, True),
    TimerState(TimerMode.PAUSED, 1_500_000, 1_500_000, False),
    TimerState(TimerMode.WORK, 10_000, 0, False),
]


class TimerStateTests(unittest.TestCase):
    def test_defaults(self) -> None:
        state = TimerState()
        self.assertEqual(TimerMode.PAUSED, state.mode)
        self.assertEqual(0, state.total_millis)
        self.assertEqual(0, state.remaining_millis)
        self.assertFalse(state.is_running)

    def test_running_requires_remaining_time(self) -> None:
        with self.assertRaises(ValueError):
            TimerState(TimerMode.WORK, 1000, 0, True)

    def test_remaining_must_fit_in_total(self) -> None:
        with self.assertRaises(ValueError):
            TimerState(TimerMode.WORK, 1000, 2000, False)
        with self.assertRaises(ValueError):
            TimerState(TimerMode.WORK, 1000, -1, False)

    def test_is_immutable(self) -> None:
        with self.assertRaises(FrozenInstanceError):
            TimerState().remaining_millis = 5


class TransitionTests(unittest.TestCase):
    def test_tick_zero_is_noop(self) -> None:
        for state in SAMPLE_STATES:
            with self.subTest(state=state):
                self.assertEqual(state, timer.tick(state, 0))

    def test_tick_past_remaining_stops_at_zero(self) -> None:
        for state in SAMPLE_STATES:
            r = state.remaining_millis
            if r == 0:
                continue
            for elapsed in (r, r + 1, r * 3):
                with self.subTest(state=state, elapsed=elapsed):
                    result = timer.tick(state, elapsed)
                    self.assertEqual(0, result.remaining_millis)
                    self.assertFalse(result.is_running)

    def test_tick_within_remaining_counts_down(self) -> None:
        state = TimerState(TimerMode.WORK, 10_000, 10_000, True)
        result = timer.tick(state, 2_500)

        self.assertEqual(7_500, result.remaining_millis)
        self.assertTrue(result.is_running)
        self.assertEqual(TimerMode.WORK, result.mode)
        self.assertEqual(10_000, state.remaining_millis)

    def test_tick_rejects_negative_elapsed(self) -> None:
        with self.assertRaises(ValueError):
            timer.tick(TimerState(), -1)

    def test_pause_after_start_is_paused_and_stopped(self) -> None:
        for state in SAMPLE_STATES:
            with self.subTest(state=state):
                result = timer.pause(timer.start(state))
                self.assertEqual(TimerMode.PAUSED, result.mode)
                self.assertFalse(result.is_running)
                self.assertEqual(state.remaining_millis, result.remaining_millis)

    def test_start_keeps_progress(self) -> None:
        state = TimerState(TimerMode.PAUSED, 10_000, 4_000, False)
        result = timer.start(state)

        self.assertEqual(TimerMode.WORK, result.mode)
        self.assertTrue(result.is_running)
        self.assertEqual(4_000, result.remaining_millis)

    def test_start_with_nothing_left_does_not_run(self) -> None:
        result = timer.start(TimerState())
        self.assertEqual(TimerMode.WORK, result.mode)
        self.assertFalse(result.is_running)

    def test_is_complete(self) -> None:
        self.assertTrue(timer.is_complete(TimerState(TimerMode.WORK, 10_000, 0, False)))
        self.assertFalse(timer.is_complete(TimerState()))
        self.assertFalse(timer.is_complete(TimerState(TimerMode.WORK, 10_000, 1, True)))

    def test_enter_break_runs_for_duration(self) -> None:
        result = timer.enter_break(TimerState(TimerMode.WORK, 10_000, 0, False), 300_000)

        self.assertEqual(TimerState(TimerMode.BREAK, 300_000, 300_000, True), result)

    def test_enter_break_rejects_empty_duration(self) -> None:
        with self.assertRaises(ValueError):
            timer.enter_break(TimerState(), 0)

    def test_reset_prepares_paused_period(self) -> None:
        result = timer.reset(TimerState(TimerMode.BREAK, 300_000, 100, True), 1_500_000)

        self.assertEqual(TimerState(TimerMode.PAUSED, 1_500_000, 1_500_000, False), result)


if __name__ == "__main__":
    unittest.main()
