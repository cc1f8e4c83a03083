import logging
from typing import Iterable

from .errors import ConflictError
from .interval import Interval, overlaps
from .records import Contract

logger = logging.getLogger(__name__)


def find_conflicts(interval: Interval, existing: Iterable[Contract], exclude_id=None) -> list[Contract]:
    """Return every non-cancelled contract whose period overlaps ``interval``."""
    return [
        other
        for other in existing
        if not other.is_cancelled
        and (exclude_id is None or other.id != exclude_id)
        and overlaps(interval, other.interval)
    ]


def assert_no_conflict(candidate: Contract, existing: Iterable[Contract]) -> None:
    """
    Reject the candidate if it overlaps another contract on the same vehicle.

    The candidate's own id is skipped so a reschedule never collides with the
    period it is replacing. Callers must hold the vehicle lock while the check
    and the following write run.
    """
    conflicts = find_conflicts(candidate.interval, existing, exclude_id=candidate.id)
    if not conflicts:
        return
    other = conflicts[0]
    logger.warning(
        "Booking conflict on vehicle %s: %s overlaps contract %s (%s)",
        candidate.vehicle_id,
        candidate.interval,
        other.id,
        other.interval,
    )
    raise ConflictError(other.id, other.interval)
