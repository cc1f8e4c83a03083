from datetime import date
from decimal import Decimal

from django.test import SimpleTestCase

from rentals.services.availability import annotate_prices, find_available
from rentals.services.conflicts import assert_no_conflict, find_conflicts
from rentals.services.errors import ConflictError
from rentals.services.interval import Interval
from rentals.services.records import STATUS_CANCELLED, STATUS_CONFIRMED, STATUS_DRAFT, Contract, Vehicle


def day(n, month=6):
    return date(2024, month, n)


def vehicle(plate, rate="50.00"):
    return Vehicle(id=plate, plate_number=plate, daily_rate=Decimal(rate), make="Skoda", model="Octavia")


def contract(contract_id, vehicle_id, start, end, status=STATUS_CONFIRMED):
    interval = Interval(start, end)
    return Contract(
        id=contract_id,
        vehicle_id=vehicle_id,
        customer_id="cust-1",
        interval=interval,
        daily_rate=Decimal("50"),
        total_price=Decimal("50") * max(interval.nights, 1),
        status=status,
    )


class FindAvailableTests(SimpleTestCase):
    def setUp(self):
        self.busy = vehicle("BUSY-1")
        self.free = vehicle("FREE-1")
        self.cancelled_only = vehicle("CANC-1")
        self.fleet = [
            (self.busy, [contract(1, "BUSY-1", day(1), day(10))]),
            (self.free, []),
            (self.cancelled_only, [contract(2, "CANC-1", day(1), day(10), status=STATUS_CANCELLED)]),
        ]

    def test_excludes_vehicles_with_overlapping_contracts(self):
        result = find_available(Interval(day(5), day(7)), self.fleet)
        self.assertEqual(result, [self.free, self.cancelled_only])

    def test_boundary_day_counts_as_busy(self):
        result = find_available(Interval(day(25, month=5), day(1)), self.fleet)
        self.assertNotIn(self.busy, result)

    def test_vehicle_free_after_contract_ends(self):
        result = find_available(Interval(day(11), day(15)), self.fleet)
        self.assertEqual(result, [self.busy, self.free, self.cancelled_only])

    def test_vehicle_without_contracts_is_always_available(self):
        for start, end in [(day(1), day(1)), (day(1), day(30)), (day(1, month=1), day(31, month=12))]:
            self.assertIn(self.free, find_available(Interval(start, end), self.fleet))

    def test_same_snapshot_gives_same_answer(self):
        requested = Interval(day(9), day(12))
        self.assertEqual(find_available(requested, self.fleet), find_available(requested, self.fleet))

    def test_keeps_snapshot_order(self):
        fleet = list(reversed(self.fleet))
        result = find_available(Interval(day(20), day(21)), fleet)
        self.assertEqual([v.id for v in result], ["CANC-1", "FREE-1", "BUSY-1"])

    def test_annotate_prices_quotes_each_vehicle(self):
        unpriced = vehicle("ZERO-1", rate="0.00")
        annotated = annotate_prices([self.free, unpriced], Interval(day(1), day(4)))
        self.assertEqual(annotated[0].total_price, Decimal("150.00"))
        self.assertEqual(annotated[0].daily_rate, Decimal("50.00"))
        self.assertIsNone(annotated[1].total_price)


class ConflictGuardTests(SimpleTestCase):
    def setUp(self):
        self.existing = [
            contract(1, "V", day(1), day(10)),
            contract(2, "V", day(20), day(25)),
            contract(3, "V", day(12), day(14), status=STATUS_CANCELLED),
        ]

    def _candidate(self, start, end, contract_id=None):
        return contract(contract_id, "V", start, end, status=STATUS_DRAFT)

    def test_overlap_raises_with_colliding_contract(self):
        with self.assertRaises(ConflictError) as ctx:
            assert_no_conflict(self._candidate(day(5), day(7)), self.existing)
        self.assertEqual(ctx.exception.contract_id, 1)
        self.assertEqual(ctx.exception.interval, Interval(day(1), day(10)))
        self.assertEqual(
            ctx.exception.as_dict(), {"contract_id": 1, "start_date": "2024-06-01", "end_date": "2024-06-10"}
        )

    def test_cancelled_contracts_are_ignored(self):
        assert_no_conflict(self._candidate(day(12), day(14)), self.existing)

    def test_contract_does_not_conflict_with_itself(self):
        assert_no_conflict(self._candidate(day(2), day(11), contract_id=1), self.existing)

    def test_rescheduled_contract_still_checks_others(self):
        with self.assertRaises(ConflictError) as ctx:
            assert_no_conflict(self._candidate(day(8), day(21), contract_id=1), self.existing)
        self.assertEqual(ctx.exception.contract_id, 2)

    def test_find_conflicts_returns_every_collision(self):
        conflicts = find_conflicts(Interval(day(1), day(30)), self.existing)
        self.assertEqual([c.id for c in conflicts], [1, 2])
