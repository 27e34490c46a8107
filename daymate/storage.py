"""SQLite-backed alarm registry for DayMate."""

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional, Protocol

from .errors import SchedulingError
from .models import Alarm, ReminderPayload, Recurrence
from .timeutils import from_millis, next_daily_occurrence, to_millis

logger = logging.getLogger(__name__)


SCHEMA = """
-- Pending alarms, one row per alarm id
CREATE TABLE IF NOT EXISTS alarms (
    alarm_id INTEGER PRIMARY KEY,
    fire_at INTEGER NOT NULL,
    recurrence TEXT NOT NULL,
    kind TEXT NOT NULL,
    subject_id INTEGER NOT NULL,
    title TEXT,
    description TEXT,
    created_at TEXT
);

CREATE INDEX IF NOT EXISTS idx_alarms_fire_at ON alarms(fire_at);
"""


class AlarmRegistry(Protocol):
    """Facility that delivers a payload at or after a given instant."""

    def register(
        self,
        alarm_id: int,
        fire_at: datetime,
        recurrence: Recurrence,
        payload: ReminderPayload,
    ) -> None:
        ...

    def cancel(self, alarm_id: int) -> None:
        ...


class SqliteAlarmRegistry:
    """Alarm registry persisted in SQLite so alarms survive restarts."""

    def __init__(self, db_path: Path):
        """Initialize registry with database path.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path
        self._init_db()

    def _init_db(self) -> None:
        """Initialize database schema."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._connection() as conn:
            conn.executescript(SCHEMA)

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Get database connection context manager."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def register(
        self,
        alarm_id: int,
        fire_at: datetime,
        recurrence: Recurrence,
        payload: ReminderPayload,
    ) -> None:
        """Register an alarm, replacing any alarm with the same id.

        Args:
            alarm_id: Alarm identifier
            fire_at: Instant at which the alarm becomes due
            recurrence: Whether the alarm re-arms daily
            payload: Data handed to the delivery handler
        """
        try:
            with self._connection() as conn:
                conn.execute(
                    """
                    INSERT OR REPLACE INTO alarms (alarm_id, fire_at, recurrence, kind,
                                                   subject_id, title, description, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        alarm_id,
                        to_millis(fire_at),
                        recurrence.value,
                        payload.kind.value,
                        payload.subject_id,
                        payload.title,
                        payload.description,
                        datetime.now().isoformat(),
                    ),
                )
        except sqlite3.Error as e:
            raise SchedulingError(f"Failed to register alarm {alarm_id}: {e}") from e
        logger.debug(f"Registered alarm {alarm_id} at {fire_at.isoformat()} ({recurrence.value})")

    def cancel(self, alarm_id: int) -> None:
        """Remove an alarm. Unknown ids are ignored.

        Args:
            alarm_id: Alarm identifier
        """
        try:
            with self._connection() as conn:
                conn.execute("DELETE FROM alarms WHERE alarm_id = ?", (alarm_id,))
        except sqlite3.Error as e:
            raise SchedulingError(f"Failed to cancel alarm {alarm_id}: {e}") from e

    def get(self, alarm_id: int) -> Optional[Alarm]:
        """Get alarm by ID.

        Args:
            alarm_id: Alarm identifier

        Returns:
            Alarm if registered, None otherwise
        """
        with self._connection() as conn:
            cursor = conn.execute(
                "SELECT alarm_id, fire_at, recurrence, kind, subject_id, title, description, "
                "created_at FROM alarms WHERE alarm_id = ?",
                (alarm_id,),
            )
            row = cursor.fetchone()
            if row:
                return Alarm.from_row(tuple(row))
            return None

    def list_alarms(self) -> list[Alarm]:
        """Get all registered alarms ordered by fire time."""
        with self._connection() as conn:
            cursor = conn.execute(
                "SELECT alarm_id, fire_at, recurrence, kind, subject_id, title, description, "
                "created_at FROM alarms ORDER BY fire_at, alarm_id"
            )
            return [Alarm.from_row(tuple(row)) for row in cursor.fetchall()]

    def due(self, now: datetime) -> list[Alarm]:
        """Get alarms whose fire time is at or before now.

        Args:
            now: Current instant

        Returns:
            Due alarms, earliest first
        """
        with self._connection() as conn:
            cursor = conn.execute(
                "SELECT alarm_id, fire_at, recurrence, kind, subject_id, title, description, "
                "created_at FROM alarms WHERE fire_at <= ? ORDER BY fire_at, alarm_id",
                (to_millis(now),),
            )
            return [Alarm.from_row(tuple(row)) for row in cursor.fetchall()]

    def complete(self, alarm: Alarm, now: datetime) -> Optional[datetime]:
        """Consume a fired alarm.

        One-shot alarms are removed; daily alarms move to the next occurrence of
        their wall-clock time after now, skipping any missed days. Rows that were
        re-registered since the alarm was read are left alone.

        Args:
            alarm: Alarm that was delivered
            now: Current aware instant

        Returns:
            Next fire time for daily alarms, None otherwise
        """
        with self._connection() as conn:
            if alarm.recurrence == Recurrence.DAILY:
                fired = from_millis(alarm.fire_at_millis)
                next_fire = next_daily_occurrence(fired.hour, fired.minute, now)
                conn.execute(
                    "UPDATE alarms SET fire_at = ? WHERE alarm_id = ? AND fire_at = ?",
                    (to_millis(next_fire), alarm.alarm_id, alarm.fire_at_millis),
                )
                return next_fire

            conn.execute(
                "DELETE FROM alarms WHERE alarm_id = ? AND fire_at = ?",
                (alarm.alarm_id, alarm.fire_at_millis),
            )
            return None
