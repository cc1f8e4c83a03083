"""Booking error taxonomy shared by the engine, the repositories and the views."""

from __future__ import annotations


class BookingError(Exception):
    """Base class for every error raised by the booking engine."""

    default_message = "Booking request rejected."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidIntervalError(BookingError):
    """Start date after end date, or a missing/malformed date."""

    default_message = "Invalid rental period."


class InvalidRateError(BookingError):
    """Daily rate is missing, not a number, or not positive."""

    default_message = "Daily rate must be greater than zero."


class ValidationError(BookingError):
    """A required field (vehicle, customer) is missing or invalid."""

    def __init__(self, message: str | None = None, field: str | None = None):
        self.field = field
        super().__init__(message)


class NotFoundError(BookingError):
    default_message = "Booking not found."


class ConflictError(BookingError):
    """
    The requested period overlaps a non-cancelled contract on the same vehicle.

    Carries the colliding contract's id and interval so callers can show which
    booking keeps the car busy.
    """

    def __init__(self, contract_id, interval, message: str | None = None):
        self.contract_id = contract_id
        self.interval = interval
        super().__init__(
            message
            or f"Vehicle is already booked from {interval.start:%Y-%m-%d} to {interval.end:%Y-%m-%d} "
            f"(contract {contract_id})."
        )

    def as_dict(self) -> dict:
        return {
            "contract_id": self.contract_id,
            "start_date": self.interval.start.isoformat(),
            "end_date": self.interval.end.isoformat(),
        }
