"""
Fleet stores used by the booking service.

``FleetRepository`` is the contract the engine relies on. Two implementations
ship with the app: an in-memory store (tests, scripts) and the Django ORM store
used by the views. Both provide ``lock_vehicles``, the serialization point for
the check-then-write sequence on a vehicle's contract set.
"""

from __future__ import annotations

import itertools
import threading
from contextlib import ExitStack, contextmanager
from dataclasses import replace
from typing import Iterable, Iterator

from .errors import NotFoundError
from .records import Contract, Vehicle


class FleetRepository:
    def list_vehicles(self) -> list[Vehicle]:
        raise NotImplementedError

    def get_vehicle(self, vehicle_id) -> Vehicle | None:
        raise NotImplementedError

    def list_contracts_for_vehicle(self, vehicle_id, include_cancelled: bool = False) -> list[Contract]:
        raise NotImplementedError

    def list_contracts(self, include_cancelled: bool = True) -> list[Contract]:
        raise NotImplementedError

    def get_contract(self, contract_id) -> Contract | None:
        raise NotImplementedError

    def customer_exists(self, customer_id) -> bool:
        raise NotImplementedError

    def add_contract(self, contract: Contract) -> Contract:
        raise NotImplementedError

    def update_contract(self, contract: Contract) -> Contract:
        raise NotImplementedError

    def lock_vehicles(self, *vehicle_ids):
        """Context manager serializing writes to the given vehicles' contracts."""
        raise NotImplementedError

    def fleet_snapshot(self, include_cancelled: bool = False) -> list[tuple[Vehicle, list[Contract]]]:
        return [
            (vehicle, self.list_contracts_for_vehicle(vehicle.id, include_cancelled=include_cancelled))
            for vehicle in self.list_vehicles()
        ]


class InMemoryFleetRepository(FleetRepository):
    def __init__(self, vehicles: Iterable[Vehicle] = (), customers: Iterable = ()):
        self._vehicles: dict = {}
        self._contracts: dict = {}
        self._customers = set(customers)
        self._ids = itertools.count(1)
        self._data_lock = threading.RLock()
        self._registry_lock = threading.Lock()
        self._vehicle_locks: dict = {}
        for vehicle in vehicles:
            self.add_vehicle(vehicle)

    def add_vehicle(self, vehicle: Vehicle) -> Vehicle:
        with self._data_lock:
            if vehicle.id in self._vehicles:
                raise ValueError(f"Vehicle {vehicle.id} already exists.")
            self._vehicles[vehicle.id] = vehicle
        return vehicle

    def add_customer(self, customer_id):
        with self._data_lock:
            self._customers.add(customer_id)
        return customer_id

    def list_vehicles(self) -> list[Vehicle]:
        with self._data_lock:
            return list(self._vehicles.values())

    def get_vehicle(self, vehicle_id) -> Vehicle | None:
        with self._data_lock:
            return self._vehicles.get(vehicle_id)

    def list_contracts_for_vehicle(self, vehicle_id, include_cancelled: bool = False) -> list[Contract]:
        with self._data_lock:
            return [
                contract
                for contract in self._contracts.values()
                if contract.vehicle_id == vehicle_id and (include_cancelled or not contract.is_cancelled)
            ]

    def list_contracts(self, include_cancelled: bool = True) -> list[Contract]:
        with self._data_lock:
            return [c for c in self._contracts.values() if include_cancelled or not c.is_cancelled]

    def get_contract(self, contract_id) -> Contract | None:
        with self._data_lock:
            return self._contracts.get(contract_id)

    def customer_exists(self, customer_id) -> bool:
        with self._data_lock:
            return customer_id in self._customers

    def add_contract(self, contract: Contract) -> Contract:
        with self._data_lock:
            new_id = next(self._ids)
            stored = replace(contract, id=new_id, contract_number=contract.contract_number or f"{new_id:05d}")
            self._contracts[new_id] = stored
        return stored

    def update_contract(self, contract: Contract) -> Contract:
        with self._data_lock:
            if contract.id not in self._contracts:
                raise NotFoundError(f"Booking {contract.id} not found.")
            self._contracts[contract.id] = contract
        return contract

    def _lock_for(self, vehicle_id) -> threading.Lock:
        with self._registry_lock:
            return self._vehicle_locks.setdefault(vehicle_id, threading.Lock())

    @contextmanager
    def lock_vehicles(self, *vehicle_ids) -> Iterator[None]:
        # Sorted acquisition keeps two reassignments from deadlocking.
        with ExitStack() as stack:
            for vehicle_id in sorted(set(vehicle_ids), key=str):
                stack.enter_context(self._lock_for(vehicle_id))
            yield
