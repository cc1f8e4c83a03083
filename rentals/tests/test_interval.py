from datetime import date, datetime

from django.test import SimpleTestCase

from rentals.services.errors import InvalidIntervalError
from rentals.services.interval import Interval, ensure_interval, length_in_days, overlaps


def d(day, month=6, year=2024):
    return date(year, month, day)


class IntervalTests(SimpleTestCase):
    def test_start_after_end_is_rejected(self):
        with self.assertRaises(InvalidIntervalError):
            Interval(d(10), d(9))

    def test_single_day_interval_is_valid(self):
        interval = Interval(d(10), d(10))
        self.assertEqual(interval.nights, 0)
        self.assertEqual(list(interval.days()), [d(10)])

    def test_datetime_bounds_are_rejected(self):
        with self.assertRaises(InvalidIntervalError):
            Interval(datetime(2024, 6, 1, 10, 0), d(2))

    def test_parse_accepts_supported_formats(self):
        self.assertEqual(Interval.parse("2024-06-01", "05.06.2024"), Interval(d(1), d(5)))
        self.assertEqual(Interval.parse("01/06/2024", "05-06-2024"), Interval(d(1), d(5)))

    def test_parse_rejects_missing_or_malformed_dates(self):
        with self.assertRaises(InvalidIntervalError):
            Interval.parse("", "2024-06-05")
        with self.assertRaises(InvalidIntervalError):
            Interval.parse("2024-06-01", None)
        with self.assertRaises(InvalidIntervalError):
            Interval.parse("June first", "2024-06-05")

    def test_ensure_interval_accepts_pairs(self):
        self.assertEqual(ensure_interval(("2024-06-01", "2024-06-03")), Interval(d(1), d(3)))
        with self.assertRaises(InvalidIntervalError):
            ensure_interval("2024-06-01")


class OverlapTests(SimpleTestCase):
    def setUp(self):
        self.samples = [
            Interval(d(1), d(1)),
            Interval(d(1), d(10)),
            Interval(d(5), d(7)),
            Interval(d(10), d(10)),
            Interval(d(11), d(15)),
            Interval(d(25, month=5), d(1)),
            Interval(d(20, month=5), d(31, month=5)),
        ]

    def test_overlap_is_symmetric(self):
        for a in self.samples:
            for b in self.samples:
                self.assertEqual(overlaps(a, b), overlaps(b, a), f"{a} vs {b}")

    def test_every_interval_overlaps_itself(self):
        for interval in self.samples:
            self.assertTrue(overlaps(interval, interval))

    def test_shared_boundary_day_overlaps(self):
        self.assertTrue(overlaps(Interval(d(1), d(10)), Interval(d(10), d(12))))
        self.assertTrue(overlaps(Interval(d(25, month=5), d(1)), Interval(d(1), d(10))))

    def test_back_to_back_days_do_not_overlap(self):
        self.assertFalse(overlaps(Interval(d(1), d(10)), Interval(d(11), d(15))))
        self.assertFalse(overlaps(Interval(d(20, month=5), d(31, month=5)), Interval(d(1), d(10))))

    def test_containment_overlaps(self):
        self.assertTrue(overlaps(Interval(d(1), d(10)), Interval(d(5), d(7))))


class LengthInDaysTests(SimpleTestCase):
    def test_nights_stayed_billing(self):
        self.assertEqual(length_in_days(Interval(d(1), d(4))), 3)
        self.assertEqual(length_in_days(Interval(d(1), d(2))), 1)

    def test_same_day_rental_bills_one_day(self):
        self.assertEqual(length_in_days(Interval(d(1), d(1))), 1)

    def test_month_boundary(self):
        self.assertEqual(length_in_days(Interval(d(28, month=2), d(1, month=3))), 2)
