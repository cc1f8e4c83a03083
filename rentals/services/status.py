"""Read-time lifecycle buckets for contracts. Never persisted."""

from datetime import date, datetime

from .interval import Interval
from .records import STATUS_CANCELLED, Contract

UPCOMING = "upcoming"
ACTIVE = "active"
COMPLETED = "completed"

BOOKING_STATUSES = (UPCOMING, ACTIVE, COMPLETED)
DISPLAY_STATUSES = BOOKING_STATUSES + (STATUS_CANCELLED,)


def classify(interval: Interval, now: date | datetime) -> str:
    # Both boundary days count as active; the end day is inclusive.
    today = now.date() if isinstance(now, datetime) else now
    if today < interval.start:
        return UPCOMING
    if today > interval.end:
        return COMPLETED
    return ACTIVE


def display_status(contract: Contract, now: date | datetime) -> str:
    if contract.is_cancelled:
        return STATUS_CANCELLED
    return classify(contract.interval, now)
