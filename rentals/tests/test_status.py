from datetime import date, datetime
from decimal import Decimal

from django.test import SimpleTestCase

from rentals.services.interval import Interval
from rentals.services.records import STATUS_CANCELLED, STATUS_CONFIRMED, Contract
from rentals.services.status import ACTIVE, COMPLETED, UPCOMING, classify, display_status


class ClassifyTests(SimpleTestCase):
    def setUp(self):
        self.interval = Interval(date(2024, 3, 10), date(2024, 3, 15))

    def test_boundaries(self):
        self.assertEqual(classify(self.interval, date(2024, 3, 9)), UPCOMING)
        self.assertEqual(classify(self.interval, date(2024, 3, 10)), ACTIVE)
        self.assertEqual(classify(self.interval, date(2024, 3, 12)), ACTIVE)
        self.assertEqual(classify(self.interval, date(2024, 3, 15)), ACTIVE)
        self.assertEqual(classify(self.interval, date(2024, 3, 16)), COMPLETED)

    def test_end_day_is_inclusive_for_datetimes(self):
        self.assertEqual(classify(self.interval, datetime(2024, 3, 15, 23, 59)), ACTIVE)
        self.assertEqual(classify(self.interval, datetime(2024, 3, 10, 0, 0)), ACTIVE)
        self.assertEqual(classify(self.interval, datetime(2024, 3, 9, 23, 59)), UPCOMING)
        self.assertEqual(classify(self.interval, datetime(2024, 3, 16, 0, 1)), COMPLETED)

    def test_single_day_rental(self):
        interval = Interval(date(2024, 3, 10), date(2024, 3, 10))
        self.assertEqual(classify(interval, date(2024, 3, 10)), ACTIVE)
        self.assertEqual(classify(interval, date(2024, 3, 11)), COMPLETED)


class DisplayStatusTests(SimpleTestCase):
    def _contract(self, status):
        return Contract(
            id=1,
            vehicle_id="V",
            customer_id="C",
            interval=Interval(date(2024, 3, 10), date(2024, 3, 15)),
            daily_rate=Decimal("50"),
            total_price=Decimal("250.00"),
            status=status,
        )

    def test_cancelled_contract_reports_cancelled(self):
        self.assertEqual(display_status(self._contract(STATUS_CANCELLED), date(2024, 3, 12)), STATUS_CANCELLED)

    def test_confirmed_contract_reports_date_bucket(self):
        self.assertEqual(display_status(self._contract(STATUS_CONFIRMED), date(2024, 3, 12)), ACTIVE)
