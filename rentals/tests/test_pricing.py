from datetime import date
from decimal import Decimal

from django.test import SimpleTestCase

from rentals.services.errors import InvalidRateError
from rentals.services.interval import Interval
from rentals.services.pricing import compute_total, quote, rate_for_days
from rentals.services.records import Vehicle


def day(n):
    return date(2024, 6, n)


class ComputeTotalTests(SimpleTestCase):
    def test_same_day_rental_bills_minimum_one_day(self):
        self.assertEqual(compute_total(50, Interval(day(1), day(1))), Decimal("50.00"))

    def test_bills_nights_between_dates(self):
        self.assertEqual(compute_total(50, Interval(day(1), day(4))), Decimal("150.00"))

    def test_rounds_final_product_to_cents(self):
        self.assertEqual(compute_total(Decimal("33.333"), Interval(day(1), day(2))), Decimal("33.33"))
        self.assertEqual(compute_total("33.333", Interval(day(1), day(2))), Decimal("33.33"))
        self.assertEqual(compute_total(33.333, Interval(day(1), day(2))), Decimal("33.33"))

    def test_rounding_is_half_up_and_applied_once(self):
        # 3 x 10.005 = 30.015 -> 30.02; rounding per day would give 30.03.
        self.assertEqual(compute_total(Decimal("10.005"), Interval(day(1), day(4))), Decimal("30.02"))
        self.assertEqual(compute_total(Decimal("0.125"), Interval(day(1), day(2))), Decimal("0.13"))

    def test_non_positive_rate_is_rejected(self):
        for rate in (0, Decimal("0.00"), -5, "-1"):
            with self.assertRaises(InvalidRateError):
                compute_total(rate, Interval(day(1), day(2)))

    def test_rate_beyond_stored_precision_is_rejected(self):
        for rate in ("10.0005", Decimal("0.0004"), 0.1 + 0.2, "10000000"):
            with self.assertRaises(InvalidRateError):
                compute_total(rate, Interval(day(1), day(2)))

    def test_trailing_zeros_are_not_extra_precision(self):
        self.assertEqual(compute_total(Decimal("33.3330"), Interval(day(1), day(2))), Decimal("33.33"))

    def test_total_must_fit_stored_price(self):
        with self.assertRaises(InvalidRateError):
            compute_total("9999999.999", Interval(date(2024, 1, 1), date(2030, 1, 1)))

    def test_non_numeric_rate_is_rejected(self):
        for rate in ("abc", None, "", True, "NaN"):
            with self.assertRaises(InvalidRateError):
                compute_total(rate, Interval(day(1), day(2)))


class TieredRateTests(SimpleTestCase):
    def setUp(self):
        self.vehicle = Vehicle(
            id=1,
            plate_number="A001AA",
            daily_rate=Decimal("60.00"),
            tiered_rates=((15, Decimal("40.00")), (5, Decimal("50.00")), (1, Decimal("55.00"))),
        )

    def test_picks_longest_qualifying_tier(self):
        self.assertEqual(rate_for_days(self.vehicle, 3), Decimal("55.00"))
        self.assertEqual(rate_for_days(self.vehicle, 5), Decimal("50.00"))
        self.assertEqual(rate_for_days(self.vehicle, 20), Decimal("40.00"))

    def test_empty_tier_falls_back_to_shorter_tier_then_daily_rate(self):
        vehicle = Vehicle(
            id=2,
            plate_number="B002BB",
            daily_rate=Decimal("60.00"),
            tiered_rates=((15, Decimal("0.00")), (5, Decimal("50.00")), (1, Decimal("0.00"))),
        )
        self.assertEqual(rate_for_days(vehicle, 20), Decimal("50.00"))
        self.assertEqual(rate_for_days(vehicle, 2), Decimal("60.00"))

    def test_quote_uses_tier_for_rental_length(self):
        result = quote(self.vehicle, Interval(day(1), day(6)))
        self.assertEqual(result.days, 5)
        self.assertEqual(result.daily_rate, Decimal("50.00"))
        self.assertEqual(result.total_price, Decimal("250.00"))

    def test_explicit_rate_overrides_vehicle_pricing(self):
        result = quote(self.vehicle, Interval(day(1), day(3)), daily_rate="45")
        self.assertEqual(result.daily_rate, Decimal("45"))
        self.assertEqual(result.total_price, Decimal("90.00"))

    def test_quote_rejects_unpriced_vehicle(self):
        vehicle = Vehicle(id=3, plate_number="C003CC", daily_rate=Decimal("0.00"))
        with self.assertRaises(InvalidRateError):
            quote(vehicle, Interval(day(1), day(3)))
