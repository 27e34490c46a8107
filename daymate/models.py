"""Data models for DayMate."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

# Alarm id namespaces. Fixed slots sit below the todo base so the kinds never collide.
DAILY_REMINDER_ID = 1
POMODORO_BREAK_ID = 2
TODO_ID_BASE = 1000


class TimerMode(Enum):
    """Timer mode enumeration."""
    WORK = "WORK"
    BREAK = "BREAK"
    PAUSED = "PAUSED"


class Recurrence(Enum):
    """How an alarm re-arms after firing."""
    NONE = "none"
    DAILY = "daily"


class ReminderKind(Enum):
    """Which logical reminder an alarm belongs to."""
    TODO = "todo"
    POMODORO_BREAK = "pomodoro_break"
    DAILY = "daily"


def alarm_id_for(kind: ReminderKind, subject_id: int) -> int:
    """Map a reminder kind and subject to its alarm/notification id."""
    if kind == ReminderKind.DAILY:
        return DAILY_REMINDER_ID
    if kind == ReminderKind.POMODORO_BREAK:
        return POMODORO_BREAK_ID
    if subject_id < 0:
        raise ValueError(f"todo id must be non-negative, got {subject_id}")
    return TODO_ID_BASE + subject_id


@dataclass(frozen=True)
class TimerState:
    """Snapshot of the pomodoro timer."""
    mode: TimerMode = TimerMode.PAUSED
    total_millis: int = 0
    remaining_millis: int = 0
    is_running: bool = False

    def __post_init__(self) -> None:
        if self.total_millis < 0:
            raise ValueError("total_millis must not be negative")
        if not 0 <= self.remaining_millis <= self.total_millis:
            raise ValueError(
                f"remaining_millis {self.remaining_millis} outside [0, {self.total_millis}]"
            )
        if self.is_running and self.remaining_millis == 0:
            raise ValueError("a timer with nothing remaining cannot be running")

    @property
    def remaining_seconds(self) -> int:
        return self.remaining_millis // 1000


@dataclass(frozen=True)
class Todo:
    """A to-do record as read from the external todo store."""
    id: int
    title: str
    description: str = ""
    date: str = ""  # YYYY-MM-DD format
    time: str = ""  # HH:MM format
    remind_me: bool = False


@dataclass(frozen=True)
class ReminderPayload:
    """Data carried with an alarm so delivery needs no extra lookup."""
    subject_id: int
    title: str
    description: str = ""
    kind: ReminderKind = ReminderKind.TODO

    @property
    def notification_id(self) -> int:
        return alarm_id_for(self.kind, self.subject_id)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "subject_id": self.subject_id,
            "title": self.title,
            "description": self.description,
            "kind": self.kind.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ReminderPayload":
        """Create ReminderPayload from dictionary."""
        return cls(
            subject_id=int(data["subject_id"]),
            title=data.get("title") or "",
            description=data.get("description") or "",
            kind=ReminderKind(data.get("kind", ReminderKind.TODO.value)),
        )


@dataclass(frozen=True)
class ReminderRequest:
    """A reminder ready to be handed to the alarm registry."""
    subject_id: int
    title: str
    description: str
    fire_at: datetime
    recurrence: Recurrence = Recurrence.NONE
    kind: ReminderKind = ReminderKind.TODO

    @property
    def alarm_id(self) -> int:
        return alarm_id_for(self.kind, self.subject_id)

    @property
    def payload(self) -> ReminderPayload:
        return ReminderPayload(
            subject_id=self.subject_id,
            title=self.title,
            description=self.description,
            kind=self.kind,
        )


@dataclass
class Alarm:
    """A registered alarm as stored in the registry."""
    alarm_id: int
    fire_at_millis: int
    recurrence: Recurrence
    payload: ReminderPayload
    created_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def from_row(cls, row: tuple) -> "Alarm":
        """Create Alarm from database row."""
        return cls(
            alarm_id=row[0],
            fire_at_millis=row[1],
            recurrence=Recurrence(row[2]),
            payload=ReminderPayload(
                subject_id=row[4],
                title=row[5] or "",
                description=row[6] or "",
                kind=ReminderKind(row[3]),
            ),
            created_at=datetime.fromisoformat(row[7]) if row[7] else datetime.now(),
        )


@dataclass(frozen=True)
class TimelineEvent:
    """An entry on the daily prayer timeline."""
    id: str
    title: str
    description: str
    timestamp: datetime
    time_range: str
    time_label: str
    is_done: bool = False
    progress: Optional[float] = None
