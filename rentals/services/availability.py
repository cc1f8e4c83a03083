from decimal import Decimal
from typing import Iterable, NamedTuple

from .conflicts import find_conflicts
from .errors import InvalidRateError
from .interval import Interval
from .pricing import quote
from .records import Contract, Vehicle


class AvailableVehicle(NamedTuple):
    vehicle: Vehicle
    daily_rate: Decimal | None
    total_price: Decimal | None


def find_available(
    requested: Interval, fleet: Iterable[tuple[Vehicle, Iterable[Contract]]]
) -> list[Vehicle]:
    """
    Vehicles with no non-cancelled contract overlapping ``requested``.

    ``fleet`` is a snapshot of ``(vehicle, contracts)`` pairs; the result keeps
    the snapshot's order. Staleness is handled by the conflict check at write time.
    """
    return [vehicle for vehicle, contracts in fleet if not find_conflicts(requested, contracts)]


def annotate_prices(vehicles: Iterable[Vehicle], interval: Interval) -> list[AvailableVehicle]:
    """Attach a quote to each vehicle; unpriced vehicles (zero rate) get ``None``."""
    annotated = []
    for vehicle in vehicles:
        try:
            _, rate, total = quote(vehicle, interval)
        except InvalidRateError:
            rate, total = None, None
        annotated.append(AvailableVehicle(vehicle, rate, total))
    return annotated
