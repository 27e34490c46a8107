import unittest
from datetime import date

from daymate.errors import ParseError
from daymate.timeline import build_prayer_timeline

TODAY = date(2025, 11, 7)


class PrayerTimelineTests(unittest.TestCase):
    def test_events_are_sorted_and_labelled(self) -> None:
        events = build_prayer_timeline(
            {
                "Isha": "18:40 (EET)",
                "Fajr": "04:56 (EET)",
                "Dhuhr": "11:38 (EET)",
                "Asr": "14:32 (EET)",
                "Maghrib": "16:59 (EET)",
            },
            today=TODAY,
        )

        self.assertEqual(
            ["prayer-Fajr", "prayer-Dhuhr", "prayer-Asr", "prayer-Maghrib", "prayer-Isha"],
            [event.id for event in events],
        )
        fajr = events[0]
        self.assertEqual("Fajr Prayer", fajr.title)
        self.assertEqual("Time to pray Fajr.", fajr.description)
        self.assertEqual("04:56", fajr.time_range)
        self.assertEqual("4 AM", fajr.time_label)
        self.assertEqual(TODAY, fajr.timestamp.date())
        self.assertFalse(fajr.is_done)
        self.assertEqual("6 PM", events[-1].time_label)

    def test_missing_prayers_are_skipped(self) -> None:
        events = build_prayer_timeline({"Asr": "14:32", "Sunrise": "06:20"}, today=TODAY)
        self.assertEqual(["prayer-Asr"], [event.id for event in events])

    def test_bad_time_names_the_prayer(self) -> None:
        with self.assertRaisesRegex(ParseError, "Maghrib"):
            build_prayer_timeline({"Fajr": "04:56", "Maghrib": "sunset"}, today=TODAY)


if __name__ == "__main__":
    unittest.main()
