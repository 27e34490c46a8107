import os
import time
import unittest
from contextlib import contextmanager
from datetime import date, datetime, timedelta, timezone

from daymate.errors import ParseError
from daymate.timeutils import (
    combine_date_and_time,
    from_millis,
    hour_label,
    next_daily_occurrence,
    parse_date,
    parse_prayer_time_string,
    parse_time,
    to_millis,
)


@contextmanager
def _local_timezone(name: str):
    previous = os.environ.get("TZ")
    os.environ["TZ"] = name
    time.tzset()
    try:
        yield
    finally:
        if previous is None:
            del os.environ["TZ"]
        else:
            os.environ["TZ"] = previous
        time.tzset()


class ParsingTests(unittest.TestCase):
    def test_parse_date_accepts_iso_day(self) -> None:
        self.assertEqual(date(2025, 11, 7), parse_date("2025-11-07"))

    def test_parse_date_rejects_bad_input(self) -> None:
        for value in ("2025/11/07", "2025-13-01", "2025-02-30", "", "yesterday"):
            with self.subTest(value=value):
                with self.assertRaises(ParseError):
                    parse_date(value)

    def test_parse_time_returns_hour_and_minute(self) -> None:
        self.assertEqual((9, 5), parse_time("09:05"))
        self.assertEqual((23, 59), parse_time("23:59"))

    def test_parse_time_rejects_bad_input(self) -> None:
        for value in ("25:00", "12:60", "9", "12:30:00", ""):
            with self.subTest(value=value):
                with self.assertRaises(ParseError):
                    parse_time(value)

    def test_parse_error_is_a_value_error(self) -> None:
        with self.assertRaises(ValueError):
            parse_time("noon")


class CombineDateAndTimeTests(unittest.TestCase):
    def test_result_is_aware_local_wall_clock(self) -> None:
        instant = combine_date_and_time("2025-11-07", "13:30")

        self.assertIsNotNone(instant.tzinfo)
        self.assertEqual((2025, 11, 7, 13, 30), (instant.year, instant.month, instant.day, instant.hour, instant.minute))

    def test_is_deterministic(self) -> None:
        first = combine_date_and_time("2024-02-29", "06:15")
        second = combine_date_and_time("2024-02-29", "06:15")
        self.assertEqual(first, second)

    def test_propagates_parse_errors(self) -> None:
        with self.assertRaises(ParseError):
            combine_date_and_time("2025-11-07", "7pm")


class HourLabelTests(unittest.TestCase):
    def test_afternoon_label(self) -> None:
        self.assertEqual("1 PM", hour_label(combine_date_and_time("2025-11-07", "13:30")))

    def test_midnight_and_noon(self) -> None:
        self.assertEqual("12 AM", hour_label(datetime(2025, 11, 7, 0, 30)))
        self.assertEqual("12 PM", hour_label(datetime(2025, 11, 7, 12, 0)))
        self.assertEqual("11 PM", hour_label(datetime(2025, 11, 7, 23, 59)))


class PrayerTimeTests(unittest.TestCase):
    def test_ignores_trailing_timezone_tag(self) -> None:
        instant = parse_prayer_time_string("04:56 (EET)", today=date(2025, 11, 7))

        self.assertEqual(date(2025, 11, 7), instant.date())
        self.assertEqual((4, 56), (instant.hour, instant.minute))

    def test_rejects_empty_string(self) -> None:
        with self.assertRaises(ParseError):
            parse_prayer_time_string("   ", today=date(2025, 11, 7))


class NextDailyOccurrenceTests(unittest.TestCase):
    NOW = datetime(2025, 11, 7, 9, 0).astimezone()

    def test_later_today(self) -> None:
        self.assertEqual(
            datetime(2025, 11, 7, 10, 0).astimezone(),
            next_daily_occurrence(10, 0, self.NOW),
        )

    def test_same_minute_rolls_to_tomorrow(self) -> None:
        self.assertEqual(
            datetime(2025, 11, 8, 9, 0).astimezone(),
            next_daily_occurrence(9, 0, self.NOW),
        )

    def test_earlier_today_rolls_to_tomorrow(self) -> None:
        result = next_daily_occurrence(0, 1, self.NOW)
        self.assertEqual(datetime(2025, 11, 8, 0, 1).astimezone(), result)
        self.assertLessEqual(result - self.NOW, timedelta(hours=24))

    def test_accepts_instant_in_another_zone(self) -> None:
        now = self.NOW.astimezone(timezone.utc)
        self.assertEqual(datetime(2025, 11, 7, 10, 0).astimezone(), next_daily_occurrence(10, 0, now))

    @unittest.skipUnless(hasattr(time, "tzset"), "requires time.tzset")
    def test_keeps_wall_clock_across_dst_change(self) -> None:
        with _local_timezone("America/New_York"):
            now = datetime(2025, 3, 8, 12, 0).astimezone()

            result = next_daily_occurrence(10, 0, now)

            self.assertEqual((2025, 3, 9, 10, 0), (result.year, result.month, result.day, result.hour, result.minute))
            self.assertEqual(timedelta(hours=-4), result.utcoffset())
            self.assertEqual(10, result.astimezone().hour)
            self.assertEqual(timedelta(hours=21), result - now)

    def test_rejects_out_of_range(self) -> None:
        with self.assertRaises(ValueError):
            next_daily_occurrence(24, 0, self.NOW)
        with self.assertRaises(ValueError):
            next_daily_occurrence(10, 60, self.NOW)


class MillisTests(unittest.TestCase):
    def test_millis_conversion_preserves_instant(self) -> None:
        instant = datetime(2025, 11, 7, 9, 30, 15, 250000, tzinfo=timezone.utc)

        self.assertEqual(1762507815250, to_millis(instant))
        self.assertEqual(instant, from_millis(to_millis(instant)))


if __name__ == "__main__":
    unittest.main()
