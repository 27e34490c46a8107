"""Date/time conversion helpers for reminders and the prayer timeline."""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from .errors import ParseError

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"


def local_now() -> datetime:
    """Current time as an aware datetime in the local timezone."""
    return datetime.now().astimezone()


def parse_date(value: str) -> date:
    """Parse a YYYY-MM-DD string.

    Raises:
        ParseError: if the string has the wrong shape or names no calendar day
    """
    parts = value.strip().split("-") if value else []
    if len(parts) != 3:
        raise ParseError(f"Invalid date {value!r}: expected YYYY-MM-DD")
    try:
        return datetime.strptime(value.strip(), DATE_FORMAT).date()
    except ValueError as e:
        raise ParseError(f"Invalid date {value!r}: {e}") from e


def parse_time(value: str) -> tuple[int, int]:
    """Parse an HH:MM string into (hour, minute).

    Raises:
        ParseError: if the string has the wrong shape or is out of range
    """
    parts = value.strip().split(":") if value else []
    if len(parts) != 2:
        raise ParseError(f"Invalid time {value!r}: expected HH:MM")
    try:
        parsed = datetime.strptime(value.strip(), TIME_FORMAT)
    except ValueError as e:
        raise ParseError(f"Invalid time {value!r}: {e}") from e
    return parsed.hour, parsed.minute


def combine_date_and_time(date_str: str, time_str: str) -> datetime:
    """Combine date and wall-clock strings into an aware local instant.

    Args:
        date_str: Date in YYYY-MM-DD format
        time_str: Time in HH:MM format

    Returns:
        Timezone-aware datetime in the local timezone
    """
    day = parse_date(date_str)
    hour, minute = parse_time(time_str)
    # Naive local wall-clock; astimezone() resolves it with the system zone rules.
    return datetime(day.year, day.month, day.day, hour, minute).astimezone()


def hour_label(instant: datetime) -> str:
    """Format an instant as a 12-hour label such as '1 PM'."""
    local = instant.astimezone() if instant.tzinfo else instant
    hour = local.hour % 12 or 12
    suffix = "AM" if local.hour < 12 else "PM"
    return f"{hour} {suffix}"


def parse_prayer_time_string(raw: str, today: Optional[date] = None) -> datetime:
    """Turn a prayer time like '04:56 (EET)' into an instant for today.

    Args:
        raw: Time string, optionally followed by a timezone tag
        today: Date to combine with (defaults to the current local date)
    """
    tokens = raw.split() if raw else []
    if not tokens:
        raise ParseError(f"Invalid prayer time {raw!r}")
    if today is None:
        today = local_now().date()
    return combine_date_and_time(today.strftime(DATE_FORMAT), tokens[0])


def next_daily_occurrence(hour: int, minute: int, now: datetime) -> datetime:
    """Next instant strictly after now at which the local wall clock reads hour:minute.

    Args:
        hour: Hour of day (0-23)
        minute: Minute (0-59)
        now: Current aware instant

    Returns:
        Today's occurrence if still ahead, otherwise tomorrow's
    """
    if not 0 <= hour <= 23:
        raise ValueError(f"hour must be 0-23, got {hour}")
    if not 0 <= minute <= 59:
        raise ValueError(f"minute must be 0-59, got {minute}")
    # Resolve each day separately so a DST change between today and tomorrow
    # keeps the wall-clock time.
    today = now.astimezone().date()
    candidate = datetime.combine(today, time(hour, minute)).astimezone()
    if candidate <= now:
        candidate = datetime.combine(today + timedelta(days=1), time(hour, minute)).astimezone()
    return candidate


def to_millis(instant: datetime) -> int:
    """Convert an aware datetime to epoch milliseconds."""
    return int(round(instant.timestamp() * 1000))


def from_millis(millis: int) -> datetime:
    """Convert epoch milliseconds to an aware local datetime."""
    return datetime.fromtimestamp(millis / 1000, tz=timezone.utc).astimezone()
