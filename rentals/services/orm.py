from __future__ import annotations

from collections import defaultdict
from contextlib import contextmanager

from django.db import transaction

from ..models import Car, Customer, Rental
from .errors import NotFoundError
from .records import STATUS_CANCELLED, Contract, Vehicle
from .repository import FleetRepository


def _to_pk(value) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class DjangoFleetRepository(FleetRepository):
    """Fleet store backed by the ``Car``/``Rental`` tables."""

    def __init__(self, created_by=None):
        self.created_by = created_by

    def list_vehicles(self) -> list[Vehicle]:
        return [car.to_record() for car in Car.objects.all()]

    def get_vehicle(self, vehicle_id) -> Vehicle | None:
        pk = _to_pk(vehicle_id)
        if pk is None:
            return None
        car = Car.objects.filter(pk=pk).first()
        return car.to_record() if car else None

    def _rentals(self, include_cancelled: bool):
        queryset = Rental.objects.all()
        if not include_cancelled:
            queryset = queryset.exclude(status=STATUS_CANCELLED)
        return queryset

    def list_contracts_for_vehicle(self, vehicle_id, include_cancelled: bool = False) -> list[Contract]:
        pk = _to_pk(vehicle_id)
        if pk is None:
            return []
        return [rental.to_record() for rental in self._rentals(include_cancelled).filter(car_id=pk)]

    def list_contracts(self, include_cancelled: bool = True) -> list[Contract]:
        return [rental.to_record() for rental in self._rentals(include_cancelled)]

    def fleet_snapshot(self, include_cancelled: bool = False) -> list[tuple[Vehicle, list[Contract]]]:
        by_car = defaultdict(list)
        for rental in self._rentals(include_cancelled):
            by_car[rental.car_id].append(rental.to_record())
        return [(car.to_record(), by_car.get(car.pk, [])) for car in Car.objects.all()]

    def get_contract(self, contract_id) -> Contract | None:
        pk = _to_pk(contract_id)
        if pk is None:
            return None
        rental = Rental.objects.filter(pk=pk).first()
        return rental.to_record() if rental else None

    def customer_exists(self, customer_id) -> bool:
        pk = _to_pk(customer_id)
        return pk is not None and Customer.objects.filter(pk=pk).exists()

    def add_contract(self, contract: Contract) -> Contract:
        rental = Rental(
            car_id=_to_pk(contract.vehicle_id),
            customer_id=_to_pk(contract.customer_id),
            start_date=contract.interval.start,
            end_date=contract.interval.end,
            daily_rate=contract.daily_rate,
            total_price=contract.total_price,
            status=contract.status,
            notes=contract.notes,
            created_by=self.created_by,
        )
        rental.save()
        return rental.to_record()

    def update_contract(self, contract: Contract) -> Contract:
        rental = Rental.objects.filter(pk=_to_pk(contract.id)).first()
        if rental is None:
            raise NotFoundError(f"Booking {contract.id} not found.")
        rental.car_id = _to_pk(contract.vehicle_id)
        rental.start_date = contract.interval.start
        rental.end_date = contract.interval.end
        rental.daily_rate = contract.daily_rate
        rental.total_price = contract.total_price
        rental.status = contract.status
        rental.notes = contract.notes
        rental.cancelled_at = contract.cancelled_at
        rental.cancellation_reason = contract.cancellation_reason
        rental.save()
        return rental.to_record()

    @contextmanager
    def lock_vehicles(self, *vehicle_ids):
        """
        Open a transaction and take row locks on the cars.

        Concurrent writers on the same car block on ``SELECT ... FOR UPDATE``
        until this transaction commits or rolls back.
        """
        pks = sorted({pk for pk in map(_to_pk, vehicle_ids) if pk is not None})
        with transaction.atomic():
            list(Car.objects.select_for_update().filter(pk__in=pks).order_by("pk").values_list("pk", flat=True))
            yield
