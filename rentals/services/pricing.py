from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import NamedTuple

from .errors import InvalidRateError
from .interval import Interval, length_in_days
from .records import Vehicle

CENT = Decimal("0.01")
# Precision of the captured rate and the total as stored on Rental.
RATE_QUANTUM = Decimal("0.001")
MAX_RATE = Decimal("9999999.999")
MAX_TOTAL = Decimal("99999999.99")


class Quote(NamedTuple):
    days: int
    daily_rate: Decimal
    total_price: Decimal


def to_rate(value) -> Decimal:
    """
    Parse a daily rate and reject anything that is not strictly positive.

    Rates must fit the stored precision (at most three decimal places) so the
    rate a booking was priced with is exactly the one persisted.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidRateError("Daily rate is required.")
    try:
        rate = value if isinstance(value, Decimal) else Decimal(str(value).strip().replace(",", "."))
    except (InvalidOperation, ValueError):
        raise InvalidRateError(f"Daily rate {value!r} is not a number.") from None
    if not rate.is_finite() or rate <= 0:
        raise InvalidRateError(f"Daily rate must be greater than zero, got {value}.")
    if rate > MAX_RATE:
        raise InvalidRateError(f"Daily rate {value} exceeds {MAX_RATE}.")
    if rate != rate.quantize(RATE_QUANTUM):
        raise InvalidRateError(f"Daily rate {value} has more than three decimal places.")
    return rate


def compute_total(daily_rate, interval: Interval) -> Decimal:
    """
    Total price for the rental: rate times billable nights.

    Rounded once, half-up, to cents, on the final product.
    """
    rate = to_rate(daily_rate)
    total = (rate * Decimal(length_in_days(interval))).quantize(CENT, rounding=ROUND_HALF_UP)
    if total > MAX_TOTAL:
        raise InvalidRateError(f"Total price {total} exceeds {MAX_TOTAL}.")
    return total


def rate_for_days(vehicle: Vehicle, days: int) -> Decimal:
    """
    Return the per-day rate based on rental duration.

    Tries the longest tier the rental qualifies for, then the shorter ones,
    and falls back to the vehicle's daily_rate when every tier is empty.
    """
    for threshold, value in sorted(vehicle.tiered_rates, key=lambda tier: tier[0], reverse=True):
        if days >= threshold and value and value > 0:
            return value
    return vehicle.daily_rate


def quote(vehicle: Vehicle, interval: Interval, daily_rate=None) -> Quote:
    """
    Calculate rental days, per-day rate, and total price for the vehicle and period.

    An explicit daily_rate overrides the vehicle's own pricing.
    """
    days = length_in_days(interval)
    rate = to_rate(daily_rate if daily_rate is not None else rate_for_days(vehicle, days))
    return Quote(days, rate, compute_total(rate, interval))
