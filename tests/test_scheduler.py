import unittest
from datetime import datetime, timedelta

from daymate.errors import ParseError
from daymate.models import (
    DAILY_REMINDER_ID,
    POMODORO_BREAK_ID,
    Recurrence,
    ReminderKind,
    Todo,
)
from daymate.scheduler import (
    BREAK_FINISHED_CONTENT,
    DAILY_REMINDER_TITLE,
    LONG_BREAK,
    ReminderScheduler,
)
from daymate.timeutils import combine_date_and_time

NOW = datetime(2025, 11, 7, 9, 0).astimezone()


class RecordingRegistry:
    """Alarm registry double that keeps the pending alarms in memory."""

    def __init__(self) -> None:
        self.calls = []
        self.alarms = {}

    def register(self, alarm_id, fire_at, recurrence, payload) -> None:
        self.calls.append(("register", alarm_id))
        self.alarms[alarm_id] = (fire_at, recurrence, payload)

    def cancel(self, alarm_id) -> None:
        self.calls.append(("cancel", alarm_id))
        self.alarms.pop(alarm_id, None)


def _todo(**overrides) -> Todo:
    fields = {
        "id": 7,
        "title": "Call the dentist",
        "description": "Ask about Tuesday",
        "date": "2099-01-01",
        "time": "09:30",
        "remind_me": True,
    }
    fields.update(overrides)
    return Todo(**fields)


class ScheduleTodoTests(unittest.TestCase):
    def setUp(self) -> None:
        self.registry = RecordingRegistry()
        self.scheduler = ReminderScheduler(self.registry, now=lambda: NOW)

    def test_remind_me_off_registers_nothing(self) -> None:
        self.assertFalse(self.scheduler.schedule(_todo(remind_me=False)))
        self.assertEqual([], self.registry.calls)

    def test_past_instant_registers_nothing(self) -> None:
        self.assertFalse(self.scheduler.schedule(_todo(date="1970-01-01")))
        self.assertEqual([], self.registry.calls)

    def test_future_todo_registers_one_shot(self) -> None:
        self.assertTrue(self.scheduler.schedule(_todo()))

        fire_at, recurrence, payload = self.registry.alarms[1007]
        self.assertEqual(combine_date_and_time("2099-01-01", "09:30"), fire_at)
        self.assertEqual(Recurrence.NONE, recurrence)
        self.assertEqual("Call the dentist", payload.title)
        self.assertEqual("Ask about Tuesday", payload.description)
        self.assertEqual(ReminderKind.TODO, payload.kind)
        self.assertEqual(1007, payload.notification_id)

    def test_malformed_time_raises(self) -> None:
        with self.assertRaises(ParseError):
            self.scheduler.schedule(_todo(time="half past nine"))
        self.assertEqual([], self.registry.calls)

    def test_cancel_targets_todo_alarm(self) -> None:
        self.scheduler.schedule(_todo())
        self.scheduler.cancel(7)
        self.scheduler.cancel(8)

        self.assertEqual({}, self.registry.alarms)
        self.assertEqual([("register", 1007), ("cancel", 1007), ("cancel", 1008)], self.registry.calls)


class PomodoroBreakTests(unittest.TestCase):
    def test_scheduling_twice_keeps_one_pending_break(self) -> None:
        registry = RecordingRegistry()
        scheduler = ReminderScheduler(registry, now=lambda: NOW)

        scheduler.schedule_pomodoro_break(NOW + timedelta(minutes=5))
        scheduler.schedule_pomodoro_break(NOW + timedelta(minutes=15), LONG_BREAK)

        self.assertEqual([POMODORO_BREAK_ID], list(registry.alarms))
        self.assertEqual(
            [
                ("cancel", POMODORO_BREAK_ID),
                ("register", POMODORO_BREAK_ID),
                ("cancel", POMODORO_BREAK_ID),
                ("register", POMODORO_BREAK_ID),
            ],
            registry.calls,
        )
        fire_at, recurrence, payload = registry.alarms[POMODORO_BREAK_ID]
        self.assertEqual(NOW + timedelta(minutes=15), fire_at)
        self.assertEqual(Recurrence.NONE, recurrence)
        self.assertEqual("Long Break finished", payload.title)
        self.assertEqual(BREAK_FINISHED_CONTENT, payload.description)

    def test_cancel_without_pending_break(self) -> None:
        registry = RecordingRegistry()
        ReminderScheduler(registry, now=lambda: NOW).cancel_pomodoro_break()
        self.assertEqual([("cancel", POMODORO_BREAK_ID)], registry.calls)


class DailyReminderTests(unittest.TestCase):
    def test_fire_time_is_within_next_day_at_any_hour(self) -> None:
        for hour in range(24):
            now = datetime(2025, 11, 7, hour, 30).astimezone()
            registry = RecordingRegistry()
            scheduler = ReminderScheduler(registry, now=lambda now=now: now)

            with self.subTest(hour=hour):
                fire_at = scheduler.schedule_daily_reminder(hour=0, minute=1)

                self.assertGreater(fire_at, now)
                self.assertLessEqual(fire_at - now, timedelta(hours=24))
                self.assertEqual((0, 1), (fire_at.hour, fire_at.minute))
                self.assertEqual([DAILY_REMINDER_ID], list(registry.alarms))

    def test_rescheduling_replaces(self) -> None:
        registry = RecordingRegistry()
        scheduler = ReminderScheduler(registry, now=lambda: NOW)

        scheduler.schedule_daily_reminder(10, 0)
        scheduler.schedule_daily_reminder(7, 45)

        self.assertEqual(1, len(registry.alarms))
        fire_at, recurrence, payload = registry.alarms[DAILY_REMINDER_ID]
        self.assertEqual(Recurrence.DAILY, recurrence)
        self.assertEqual(DAILY_REMINDER_TITLE, payload.title)
        self.assertEqual(ReminderKind.DAILY, payload.kind)
        self.assertEqual((7, 45), (fire_at.hour, fire_at.minute))
        self.assertEqual(NOW.date() + timedelta(days=1), fire_at.date())

    def test_default_time_is_ten_oclock(self) -> None:
        registry = RecordingRegistry()
        fire_at = ReminderScheduler(registry, now=lambda: NOW).schedule_daily_reminder()
        self.assertEqual((NOW.date(), 10, 0), (fire_at.date(), fire_at.hour, fire_at.minute))

    def test_cancel_daily_reminder(self) -> None:
        registry = RecordingRegistry()
        scheduler = ReminderScheduler(registry, now=lambda: NOW)
        scheduler.schedule_daily_reminder()
        scheduler.cancel_daily_reminder()
        self.assertEqual({}, registry.alarms)


if __name__ == "__main__":
    unittest.main()
