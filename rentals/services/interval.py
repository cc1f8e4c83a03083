from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterator

from .errors import InvalidIntervalError

DATE_FORMATS = ("%Y-%m-%d", "%d.%m.%Y", "%d/%m/%Y", "%d-%m-%Y")


def parse_date(value, field: str = "date") -> date:
    """Coerce a date, datetime or text value into a date."""
    if value in (None, ""):
        raise InvalidIntervalError(f"Missing {field}.")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise InvalidIntervalError(f"Malformed {field}: {text!r}.")


@dataclass(frozen=True)
class Interval:
    """
    Closed calendar-date range ``[start, end]``.

    Single-day rentals have ``start == end``.
    """

    start: date
    end: date

    def __post_init__(self):
        for name in ("start", "end"):
            value = getattr(self, name)
            if isinstance(value, datetime) or not isinstance(value, date):
                raise InvalidIntervalError(f"Interval {name} must be a calendar date, got {value!r}.")
        if self.start > self.end:
            raise InvalidIntervalError(
                f"Start date {self.start:%Y-%m-%d} is after end date {self.end:%Y-%m-%d}."
            )

    @classmethod
    def parse(cls, start, end) -> "Interval":
        return cls(parse_date(start, "start date"), parse_date(end, "end date"))

    @property
    def nights(self) -> int:
        return (self.end - self.start).days

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def days(self) -> Iterator[date]:
        current = self.start
        while current <= self.end:
            yield current
            current += timedelta(days=1)

    def __str__(self):
        return f"{self.start:%Y-%m-%d}..{self.end:%Y-%m-%d}"


def overlaps(a: Interval, b: Interval) -> bool:
    """Two intervals overlap when they share at least one calendar day."""
    return a.start <= b.end and b.start <= a.end


def length_in_days(interval: Interval) -> int:
    """
    Billable length using nights-stayed billing.

    A same-day rental still bills for one day.
    """
    return max(interval.nights, 1)


def ensure_interval(value) -> Interval:
    if isinstance(value, Interval):
        return value
    if isinstance(value, (tuple, list)) and len(value) == 2:
        return Interval.parse(*value)
    raise InvalidIntervalError(f"Expected a rental period, got {value!r}.")
