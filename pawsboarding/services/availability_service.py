from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from pawsboarding.core.errors import InvalidDateRange, UpstreamUnavailable
from pawsboarding.services.booking_rules import DateRange, format_date_range
from pawsboarding.services.calendar_gateway import BusyInterval, CalendarGateway

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AvailabilityVerdict:
    is_available: bool
    conflicts: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class BlackoutResult:
    dates: list[date]
    window_start: date
    window_end: date  # inclusive
    error: str | None = None

    @property
    def degraded(self) -> bool:
        return self.error is not None


def _daterange(start: date, end: date):
    cur = start
    while cur <= end:
        yield cur
        cur = cur + timedelta(days=1)


def add_months(d: date, months: int) -> date:
    month_index = d.month - 1 + months
    year = d.year + month_index // 12
    month = month_index % 12 + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def month_window(today: date, horizon_months: int) -> tuple[date, date]:
    """First day of ``today``'s month through the last day of the month ``horizon_months`` ahead."""
    first = today.replace(day=1)
    last_month = add_months(first, horizon_months)
    last = last_month.replace(day=calendar.monthrange(last_month.year, last_month.month)[1])
    return first, last


def blackout_days(intervals: list[BusyInterval], window_start: date, window_end: date) -> list[date]:
    days: list[date] = []
    for d in _daterange(window_start, window_end):
        next_day = d + timedelta(days=1)
        if any(it.overlaps(d, next_day) for it in intervals):
            days.append(d)
    return days


class AvailabilityEngine:
    """Availability verdicts and blackout calendars backed by a calendar gateway.

    Nothing is cached: every call goes to the gateway, which is the source of
    truth. Gateway failures are fail-closed.
    """

    def __init__(self, gateway: CalendarGateway, *, tz: ZoneInfo, max_horizon_months: int = 12):
        self.gateway = gateway
        self.tz = tz
        self.max_horizon_months = max_horizon_months

    def today(self) -> date:
        return datetime.now(tz=self.tz).date()

    async def check_range_availability(self, date_range: DateRange) -> AvailabilityVerdict:
        try:
            intervals = await self.gateway.list_busy_intervals(date_range.start, date_range.end)
        except UpstreamUnavailable as exc:
            logger.warning("Availability check for %s..%s failed closed: %s", date_range.start, date_range.end, exc.message)
            return AvailabilityVerdict(is_available=False, conflicts=[exc.message])

        # Any event counts, all-day or timed
        conflicts = [it.label for it in intervals if it.overlaps(date_range.start, date_range.end)]
        logger.info("Availability %s..%s: %d conflict(s)", date_range.start, date_range.end, len(conflicts))
        return AvailabilityVerdict(is_available=not conflicts, conflicts=conflicts)

    async def compute_blackout_dates(self, horizon_months: int, today: date | None = None) -> BlackoutResult:
        if not 0 <= horizon_months <= self.max_horizon_months:
            raise InvalidDateRange(f"months must be between 0 and {self.max_horizon_months}")

        window_start, window_end = month_window(today or self.today(), horizon_months)

        # One batch fetch for the whole window; per-day evaluation is in memory
        try:
            intervals = await self.gateway.list_busy_intervals(window_start, window_end + timedelta(days=1))
        except UpstreamUnavailable as exc:
            logger.error("Blackout computation for %s..%s failed: %s", window_start, window_end, exc.message)
            return BlackoutResult(dates=[], window_start=window_start, window_end=window_end, error=exc.message)

        dates = blackout_days(intervals, window_start, window_end)
        logger.info("Found %d blackout date(s) in %s..%s", len(dates), window_start, window_end)
        return BlackoutResult(dates=dates, window_start=window_start, window_end=window_end)


def format_availability_message(date_range: DateRange, verdict: AvailabilityVerdict) -> str:
    dates = format_date_range(date_range)
    if verdict.is_available:
        return f"✅ Available: {dates}"
    conflicts = ", ".join(verdict.conflicts) or "Unknown conflicts"
    return f"❌ Not Available: {dates}\nConflicts: {conflicts}"
