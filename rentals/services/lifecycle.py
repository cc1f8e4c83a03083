"""
Booking lifecycle: create, reschedule, reassign and cancel contracts.

Every write goes through ``assert_no_conflict`` while the repository's vehicle
lock is held, so two overlapping bookings on one car can never both commit.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime
from typing import Callable

from django.conf import settings
from django.utils import timezone

from .availability import AvailableVehicle, annotate_prices, find_available
from .conflicts import assert_no_conflict, find_conflicts
from .errors import NotFoundError, ValidationError
from .interval import ensure_interval
from .pricing import Quote, compute_total, quote
from .records import STATUS_CANCELLED, STATUS_CONFIRMED, STATUS_DRAFT, Contract, Vehicle
from .repository import FleetRepository
from .status import BOOKING_STATUSES, UPCOMING, classify, display_status

logger = logging.getLogger(__name__)


class ContractLifecycleService:
    def __init__(
        self,
        repository: FleetRepository,
        today: Callable[[], date] | None = None,
        include_inactive: bool | None = None,
    ):
        self.repository = repository
        self.today = today or timezone.localdate
        if include_inactive is None:
            include_inactive = getattr(settings, "RENTALS_INCLUDE_INACTIVE_CARS", False)
        self.include_inactive = include_inactive

    # Queries

    def find_available_vehicles(self, interval) -> list[Vehicle]:
        interval = ensure_interval(interval)
        fleet = [
            (vehicle, contracts)
            for vehicle, contracts in self.repository.fleet_snapshot()
            if self.include_inactive or vehicle.is_active
        ]
        return find_available(interval, fleet)

    def find_available_with_prices(self, interval) -> list[AvailableVehicle]:
        interval = ensure_interval(interval)
        return annotate_prices(self.find_available_vehicles(interval), interval)

    def quote_price(self, daily_rate, interval):
        return compute_total(daily_rate, ensure_interval(interval))

    def quote_vehicle(self, vehicle_id, interval, daily_rate=None) -> Quote:
        return quote(self._require_vehicle(vehicle_id), ensure_interval(interval), daily_rate)

    def check_availability(self, vehicle_id, interval) -> tuple[bool, list[Contract]]:
        """Report whether one car is free, with the bookings that keep it busy."""
        interval = ensure_interval(interval)
        vehicle = self._require_vehicle(vehicle_id)
        conflicts = find_conflicts(interval, self.repository.list_contracts_for_vehicle(vehicle.id))
        return not conflicts, conflicts

    def vehicle_schedule(self, vehicle_id, now=None) -> list[dict]:
        """Calendar entries for a car's non-cancelled bookings, earliest first."""
        vehicle = self._require_vehicle(vehicle_id)
        now = now or self.today()
        contracts = sorted(
            self.repository.list_contracts_for_vehicle(vehicle.id),
            key=lambda contract: (contract.interval.start, str(contract.id)),
        )
        return [
            {
                "contract": contract,
                "start_date": contract.interval.start,
                "end_date": contract.interval.end,
                "status": classify(contract.interval, now),
            }
            for contract in contracts
        ]

    def get_booking(self, contract_id) -> Contract:
        contract = self.repository.get_contract(contract_id)
        if contract is None:
            raise NotFoundError(f"Booking {contract_id} not found.")
        return contract

    def list_bookings(self, status: str | None = None, vehicle_id=None, customer_id=None, now=None) -> list[Contract]:
        """
        Filter bookings by persisted state (confirmed/cancelled) or by derived
        state (upcoming/active/completed, cancelled bookings excluded).
        """
        now = now or self.today()
        contracts = self.repository.list_contracts(include_cancelled=True)
        if vehicle_id not in (None, ""):
            contracts = [c for c in contracts if str(c.vehicle_id) == str(vehicle_id)]
        if customer_id not in (None, ""):
            contracts = [c for c in contracts if str(c.customer_id) == str(customer_id)]
        if status in BOOKING_STATUSES:
            contracts = [c for c in contracts if not c.is_cancelled and classify(c.interval, now) == status]
        elif status in (STATUS_CONFIRMED, STATUS_CANCELLED):
            contracts = [c for c in contracts if c.status == status]
        elif status:
            raise ValidationError(f"Unknown booking status {status!r}.", field="status")
        return sorted(contracts, key=lambda c: (c.interval.start, str(c.id)))

    def upcoming_bookings(self, now=None) -> list[Contract]:
        return self.list_bookings(status=UPCOMING, now=now)

    def classify_booking(self, contract: Contract, now: date | datetime | None = None) -> str:
        return classify(contract.interval, now or self.today())

    def display_status(self, contract: Contract, now: date | datetime | None = None) -> str:
        return display_status(contract, now or self.today())

    # Writes

    def create_booking(self, vehicle_id, customer_id, interval, daily_rate=None, notes: str = "") -> Contract:
        if vehicle_id in (None, ""):
            raise ValidationError("Vehicle is required.", field="vehicle")
        if customer_id in (None, ""):
            raise ValidationError("Customer is required.", field="customer")
        interval = ensure_interval(interval)
        if not self.repository.customer_exists(customer_id):
            raise ValidationError(f"Customer {customer_id} does not exist.", field="customer")

        with self.repository.lock_vehicles(vehicle_id):
            vehicle = self._require_bookable_vehicle(vehicle_id)
            _, rate, total = quote(vehicle, interval, daily_rate)
            candidate = Contract(
                id=None,
                vehicle_id=vehicle.id,
                customer_id=customer_id,
                interval=interval,
                daily_rate=rate,
                total_price=total,
                status=STATUS_DRAFT,
                notes=notes or "",
            )
            assert_no_conflict(candidate, self.repository.list_contracts_for_vehicle(vehicle.id))
            contract = self.repository.add_contract(replace(candidate, status=STATUS_CONFIRMED))

        logger.info(
            "Booking %s confirmed: vehicle %s, customer %s, %s, total %s",
            contract.id,
            contract.vehicle_id,
            contract.customer_id,
            contract.interval,
            contract.total_price,
        )
        return contract

    def reschedule_booking(self, contract_id, new_interval) -> Contract:
        new_interval = ensure_interval(new_interval)

        with self._locked_contract(contract_id) as current:
            candidate = replace(
                current,
                interval=new_interval,
                total_price=compute_total(current.daily_rate, new_interval),
            )
            assert_no_conflict(candidate, self.repository.list_contracts_for_vehicle(current.vehicle_id))
            contract = self.repository.update_contract(candidate)

        logger.info("Booking %s rescheduled from %s to %s", contract.id, current.interval, contract.interval)
        return contract

    def reassign_vehicle(self, contract_id, new_vehicle_id) -> Contract:
        if new_vehicle_id in (None, ""):
            raise ValidationError("Vehicle is required.", field="vehicle")

        with self._locked_contract(contract_id, new_vehicle_id) as current:
            vehicle = self._require_bookable_vehicle(new_vehicle_id)
            if vehicle.id == current.vehicle_id:
                return current
            candidate = replace(current, vehicle_id=vehicle.id)
            assert_no_conflict(candidate, self.repository.list_contracts_for_vehicle(vehicle.id))
            contract = self.repository.update_contract(candidate)

        logger.info("Booking %s moved from vehicle %s to %s", contract.id, current.vehicle_id, contract.vehicle_id)
        return contract

    def cancel_booking(self, contract_id, reason: str = "") -> Contract:
        """Cancel unconditionally. Cancelling twice returns the cancelled booking."""
        with self._locked_contract(contract_id, require_open=False) as current:
            if current.is_cancelled:
                return current
            contract = self.repository.update_contract(
                replace(
                    current,
                    status=STATUS_CANCELLED,
                    cancelled_at=timezone.now(),
                    cancellation_reason=reason or "",
                )
            )
        logger.info("Booking %s cancelled", contract.id)
        return contract

    # Helpers

    @contextmanager
    def _locked_contract(self, contract_id, *other_vehicle_ids, require_open: bool = True):
        """
        Lock the contract's vehicle (plus ``other_vehicle_ids``) and yield the
        contract as re-read under that lock.

        A concurrent reassignment can move the contract between the first read
        and the lock; the lock is then released and taken again on the vehicle
        the contract now belongs to.
        """
        load = self._require_open_contract if require_open else self.get_booking
        current = load(contract_id)
        while True:
            with self.repository.lock_vehicles(current.vehicle_id, *other_vehicle_ids):
                fresh = load(contract_id)
                if fresh.vehicle_id == current.vehicle_id:
                    yield fresh
                    return
            logger.debug("Booking %s moved to vehicle %s before it was locked, retrying", contract_id, fresh.vehicle_id)
            current = fresh

    def _require_vehicle(self, vehicle_id) -> Vehicle:
        if vehicle_id in (None, ""):
            raise ValidationError("Vehicle is required.", field="vehicle")
        vehicle = self.repository.get_vehicle(vehicle_id)
        if vehicle is None:
            raise ValidationError(f"Vehicle {vehicle_id} does not exist.", field="vehicle")
        return vehicle

    def _require_bookable_vehicle(self, vehicle_id) -> Vehicle:
        vehicle = self._require_vehicle(vehicle_id)
        if not vehicle.is_active:
            raise ValidationError(f"Vehicle {vehicle.plate_number} is not available for rent.", field="vehicle")
        return vehicle

    def _require_open_contract(self, contract_id) -> Contract:
        contract = self.get_booking(contract_id)
        if contract.is_cancelled:
            raise ValidationError(f"Booking {contract_id} is cancelled and cannot be changed.")
        return contract
