from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum

from pawsboarding.core.errors import InvalidDateRange, PastDateRequested, RulePatternViolation

# Sunday=0 .. Saturday=6
SUNDAY, MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY = range(7)

WEEKNIGHT_DAYS = frozenset({MONDAY, TUESDAY, WEDNESDAY, THURSDAY})

PATTERN_VIOLATION_REASON = (
    "Bookings are only allowed for weeknights (Monday–Thursday) "
    "or weekend packages (Friday arrival, Monday departure)."
)


def _parse_iso_date(value: str, field: str) -> date:
    try:
        return date.fromisoformat(value.strip())
    except (AttributeError, ValueError):
        raise InvalidDateRange(f"Invalid {field}: expected YYYY-MM-DD")


@dataclass(frozen=True)
class DateRange:
    """Arrival day (inclusive) to departure day (exclusive)."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end <= self.start:
            raise InvalidDateRange("End date must be after start date")

    @classmethod
    def parse(cls, start: str, end: str) -> "DateRange":
        return cls(_parse_iso_date(start, "start date"), _parse_iso_date(end, "end date"))

    @property
    def nights(self) -> int:
        return (self.end - self.start).days


def day_of_week(d: date) -> int:
    # date.weekday() is Monday=0 .. Sunday=6
    return (d.weekday() + 1) % 7


class StayPattern(str, Enum):
    WEEKNIGHT = "WEEKNIGHT"
    WEEKEND_PACKAGE = "WEEKEND_PACKAGE"
    INVALID = "INVALID"


@dataclass(frozen=True)
class BookingClassification:
    pattern: StayPattern
    reason: str | None = None

    @property
    def is_valid(self) -> bool:
        return self.pattern is not StayPattern.INVALID


def classify(date_range: DateRange) -> BookingClassification:
    sd = day_of_week(date_range.start)
    ed = day_of_week(date_range.end)

    if sd == FRIDAY and ed == MONDAY:
        return BookingClassification(StayPattern.WEEKEND_PACKAGE)
    if sd in WEEKNIGHT_DAYS and ed in WEEKNIGHT_DAYS:
        return BookingClassification(StayPattern.WEEKNIGHT)
    return BookingClassification(StayPattern.INVALID, PATTERN_VIOLATION_REASON)


def validate_booking_dates(date_range: DateRange, *, today: date) -> BookingClassification:
    """Caller-side checks run before any calendar lookup.

    ``end > start`` is already guaranteed by ``DateRange``.
    """
    if date_range.start < today:
        raise PastDateRequested("Start date cannot be in the past")

    classification = classify(date_range)
    if not classification.is_valid:
        raise RulePatternViolation(classification.reason or PATTERN_VIOLATION_REASON)
    return classification


def format_date_range(date_range: DateRange) -> str:
    return f"{_fmt_day(date_range.start)}, {date_range.start.year} - {_fmt_day(date_range.end)}, {date_range.end.year}"


def _fmt_day(d: date) -> str:
    return f"{d.strftime('%b')} {d.day}"
