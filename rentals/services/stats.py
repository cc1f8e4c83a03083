from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable

from .records import STATUS_CANCELLED, Contract, Vehicle
from .status import ACTIVE, COMPLETED, DISPLAY_STATUSES, UPCOMING, display_status


def rentals_summary(contracts: list[Contract], today: date) -> dict:
    """Basic counts and revenue summary for the dashboard."""
    breakdown = rental_status_breakdown(contracts, today)
    total_revenue = sum(
        (c.total_price for c in contracts if display_status(c, today) == COMPLETED),
        Decimal("0.00"),
    )
    return {
        "total_rentals": sum(breakdown.values()),
        "upcoming_rentals": breakdown[UPCOMING],
        "active_rentals": breakdown[ACTIVE],
        "completed_rentals": breakdown[COMPLETED],
        "cancelled_rentals": breakdown[STATUS_CANCELLED],
        "total_revenue": total_revenue,
    }


def rental_status_breakdown(contracts: Iterable[Contract], today: date) -> dict:
    """Return counts per display status, computed from the dates."""
    status_totals = {code: 0 for code in DISPLAY_STATUSES}
    for contract in contracts:
        status_totals[display_status(contract, today)] += 1
    return status_totals


def car_utilization(vehicles: Iterable[Vehicle], contracts: Iterable[Contract], today: date) -> list[dict]:
    """
    Completed rentals, booked nights and revenue by car, busiest first.

    Cancelled bookings are ignored.
    """
    by_car = defaultdict(lambda: {"num_rentals": 0, "nights": 0, "revenue": Decimal("0.00")})
    for contract in contracts:
        if display_status(contract, today) != COMPLETED:
            continue
        row = by_car[contract.vehicle_id]
        row["num_rentals"] += 1
        row["nights"] += contract.interval.nights
        row["revenue"] += contract.total_price

    rows = [
        {"vehicle": vehicle, **by_car[vehicle.id]}
        for vehicle in vehicles
        if vehicle.id in by_car
    ]
    rows.sort(key=lambda row: (-row["num_rentals"], -row["revenue"]))
    return rows
