from __future__ import annotations

import unittest
from datetime import datetime

from domain.date_labels import DateLabel, WeekRange, month_label


class DateLabelTests(unittest.TestCase):
    def test_parse_month_and_day(self) -> None:
        label = DateLabel.parse("Apr 15")

        self.assertEqual(label.month, "Apr")
        self.assertEqual(label.day, 15)
        self.assertTrue(label.in_month("Apr"))
        self.assertFalse(label.in_month("May"))

    def test_parse_without_day(self) -> None:
        label = DateLabel.parse("Apr")

        self.assertEqual(label.month, "Apr")
        self.assertIsNone(label.day)

    def test_parse_non_numeric_day(self) -> None:
        self.assertIsNone(DateLabel.parse("Apr xx").day)

    def test_month_label_uses_english_abbreviations(self) -> None:
        self.assertEqual(month_label(datetime(2026, 4, 1)), "Apr")
        self.assertEqual(month_label(datetime(2026, 9, 30)), "Sep")
        self.assertEqual(month_label(datetime(2026, 12, 31)), "Dec")


class WeekRangeTests(unittest.TestCase):
    def test_parse_bucket_name(self) -> None:
        week = WeekRange.parse("Apr 8 - Apr 14")

        self.assertEqual(week, WeekRange(start_day=8, end_day=14))
        self.assertTrue(week.contains(8))
        self.assertTrue(week.contains(14))
        self.assertFalse(week.contains(15))

    def test_malformed_names_are_rejected(self) -> None:
        self.assertIsNone(WeekRange.parse("Apr"))
        self.assertIsNone(WeekRange.parse("Apr 1 to Apr 7"))
        self.assertIsNone(WeekRange.parse("Apr x - Apr 7"))


if __name__ == "__main__":
    unittest.main()
