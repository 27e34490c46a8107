"""Reminder scheduling on top of the alarm registry."""

import logging
from datetime import datetime
from typing import Callable

from .models import (
    DAILY_REMINDER_ID,
    POMODORO_BREAK_ID,
    Recurrence,
    ReminderKind,
    ReminderRequest,
    Todo,
    alarm_id_for,
)
from .storage import AlarmRegistry
from .timeutils import combine_date_and_time, local_now, next_daily_occurrence

logger = logging.getLogger(__name__)

DAILY_REMINDER_TITLE = "Plan your day"
DAILY_REMINDER_CONTENT = "Check your to-do list and pick what to focus on."
BREAK_FINISHED_CONTENT = "Time to get back to focus."
SHORT_BREAK = "Short Break"
LONG_BREAK = "Long Break"


class ReminderScheduler:
    """Turns todos and pomodoro breaks into registered alarms.

    At most one daily reminder and one break reminder exist at a time; both use
    fixed alarm ids so registering again replaces the previous alarm.
    """

    def __init__(
        self,
        registry: AlarmRegistry,
        now: Callable[[], datetime] = local_now,
    ):
        """Initialize scheduler.

        Args:
            registry: Alarm registry to register with
            now: Clock returning the current aware datetime
        """
        self.registry = registry
        self._now = now

    def _register(self, request: ReminderRequest) -> None:
        self.registry.register(
            request.alarm_id,
            request.fire_at,
            request.recurrence,
            request.payload,
        )

    def schedule_daily_reminder(self, hour: int = 10, minute: int = 0) -> datetime:
        """Register the recurring daily reminder.

        Args:
            hour: Hour of day (0-23)
            minute: Minute (0-59)

        Returns:
            Instant of the first firing
        """
        fire_at = next_daily_occurrence(hour, minute, self._now())
        self._register(
            ReminderRequest(
                subject_id=DAILY_REMINDER_ID,
                title=DAILY_REMINDER_TITLE,
                description=DAILY_REMINDER_CONTENT,
                fire_at=fire_at,
                recurrence=Recurrence.DAILY,
                kind=ReminderKind.DAILY,
            )
        )
        logger.info(f"Daily reminder set for {hour:02d}:{minute:02d}, first at {fire_at.isoformat()}")
        return fire_at

    def schedule(self, todo: Todo) -> bool:
        """Register a one-shot reminder for a todo.

        Args:
            todo: Todo to remind about

        Returns:
            True if an alarm was registered, False if scheduling was skipped

        Raises:
            ParseError: if the todo's date or time is malformed
        """
        if not todo.remind_me:
            return False

        fire_at = combine_date_and_time(todo.date, todo.time)
        if fire_at <= self._now():
            logger.info(f"Skipping reminder for todo {todo.id}: {fire_at.isoformat()} is in the past")
            return False

        self._register(
            ReminderRequest(
                subject_id=todo.id,
                title=todo.title,
                description=todo.description,
                fire_at=fire_at,
                kind=ReminderKind.TODO,
            )
        )
        logger.info(f"Reminder for todo {todo.id} set at {fire_at.isoformat()}")
        return True

    def schedule_pomodoro_break(self, fire_at: datetime, break_label: str = SHORT_BREAK) -> None:
        """Register the break-finished reminder, replacing any pending one.

        Args:
            fire_at: When the break ends
            break_label: Break name shown in the notification title
        """
        self.cancel_pomodoro_break()
        self._register(
            ReminderRequest(
                subject_id=POMODORO_BREAK_ID,
                title=f"{break_label} finished",
                description=BREAK_FINISHED_CONTENT,
                fire_at=fire_at,
                kind=ReminderKind.POMODORO_BREAK,
            )
        )
        logger.info(f"{break_label} reminder set at {fire_at.isoformat()}")

    def cancel(self, subject_id: int) -> None:
        """Cancel the reminder of a todo, if any."""
        self.registry.cancel(alarm_id_for(ReminderKind.TODO, subject_id))

    def cancel_pomodoro_break(self) -> None:
        """Cancel the pending break reminder, if any."""
        self.registry.cancel(POMODORO_BREAK_ID)

    def cancel_daily_reminder(self) -> None:
        """Cancel the recurring daily reminder, if any."""
        self.registry.cancel(DAILY_REMINDER_ID)
