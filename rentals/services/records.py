"""Typed records passed between the repositories and the booking engine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from .interval import Interval

STATUS_DRAFT = "draft"
STATUS_CONFIRMED = "confirmed"
STATUS_CANCELLED = "cancelled"

CONTRACT_STATUSES = (STATUS_DRAFT, STATUS_CONFIRMED, STATUS_CANCELLED)


@dataclass(frozen=True)
class Vehicle:
    id: Any
    plate_number: str
    daily_rate: Decimal
    make: str = ""
    model: str = ""
    year: int | None = None
    is_active: bool = True
    # (minimum rental days, per-day rate), longest tier first.
    tiered_rates: tuple[tuple[int, Decimal], ...] = ()

    @property
    def label(self) -> str:
        return f"{self.plate_number} {self.make} {self.model}".strip()


@dataclass(frozen=True)
class Contract:
    id: Any
    vehicle_id: Any
    customer_id: Any
    interval: Interval
    daily_rate: Decimal
    total_price: Decimal
    status: str = STATUS_DRAFT
    notes: str = ""
    contract_number: str | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str = ""

    @property
    def is_cancelled(self) -> bool:
        return self.status == STATUS_CANCELLED

    @property
    def is_confirmed(self) -> bool:
        return self.status == STATUS_CONFIRMED
