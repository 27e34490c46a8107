"""Prayer-time timeline built from raw timing strings."""

from datetime import date
from typing import Mapping, Optional

from .errors import ParseError
from .models import TimelineEvent
from .timeutils import hour_label, parse_prayer_time_string

PRAYER_NAMES = ("Fajr", "Dhuhr", "Asr", "Maghrib", "Isha")


def build_prayer_timeline(
    timings: Mapping[str, str],
    today: Optional[date] = None,
) -> list[TimelineEvent]:
    """Build today's prayer events from timings such as {'Fajr': '04:56 (EET)'}.

    Args:
        timings: Prayer name to raw time string
        today: Date of the timeline (defaults to the current local date)

    Returns:
        Events sorted by time; missing prayers are left out

    Raises:
        ParseError: if a listed prayer time is malformed
    """
    events = []
    for name in PRAYER_NAMES:
        raw = timings.get(name)
        if not raw:
            continue
        try:
            timestamp = parse_prayer_time_string(raw, today=today)
        except ParseError as e:
            raise ParseError(f"{name}: {e}") from e
        events.append(
            TimelineEvent(
                id=f"prayer-{name}",
                title=f"{name} Prayer",
                description=f"Time to pray {name}.",
                timestamp=timestamp,
                time_range=raw.split()[0],
                time_label=hour_label(timestamp),
            )
        )
    return sorted(events, key=lambda event: event.timestamp)
