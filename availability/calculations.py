"""Helper functions for day classification and rental charges."""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, List, Optional, Tuple

from dateutil.parser import isoparse

from .interval import Interval
from .status import DayStatus

logger = logging.getLogger(__name__)

Bounds = Tuple[date, date, Interval]


def parse_day(value) -> date:
    """
    Reduce a date, datetime or ISO 8601 string to its calendar date.

    Time of day and timezone offset are dropped, not converted.
    Raises ValueError for anything that is not a usable date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Invalid date: {value!r}")
    try:
        return isoparse(value.strip()).date()
    except OverflowError as e:
        raise ValueError(f"Invalid date: {value!r}") from e


def interval_bounds(interval: Interval) -> Tuple[date, date]:
    """Return (start, effective end) of an interval at day granularity."""
    if interval.effective_end_date is None:
        raise ValueError("missing end date")
    start = parse_day(interval.start_date)
    end = parse_day(interval.effective_end_date)
    if end < start:
        raise ValueError(f"end {end} before start {start}")
    return start, end


def usable_intervals(intervals: Optional[Iterable[Interval]]) -> List[Bounds]:
    """
    Resolve the bounds of every interval, skipping malformed ones.

    A bad record is logged and dropped so it cannot blank a whole month.
    """
    resolved = []
    for interval in intervals or []:
        try:
            start, end = interval_bounds(interval)
        except ValueError as e:
            logger.warning("Skipping interval %r: %s", interval, e)
            continue
        resolved.append((start, end, interval))
    return resolved


def classify_bounds(day: date, bounds: List[Bounds]) -> DayStatus:
    """Classify a day against pre-resolved interval bounds."""
    matched = [interval for start, end, interval in bounds if start <= day <= end]
    if any(interval.is_maintenance for interval in matched):
        return DayStatus.MAINTENANCE
    if matched:
        return DayStatus.RENTED
    return DayStatus.AVAILABLE


def classify_day(day, intervals: Optional[Iterable[Interval]]) -> DayStatus:
    """
    Classify one calendar day for an asset.

    - Maintenance wins when it overlaps a booking on the same day
    - Any other covering interval makes the day rented
    - Otherwise the day is available
    """
    return classify_bounds(parse_day(day), usable_intervals(intervals))


def ranges_overlap(start_a: date, end_a: date, start_b: date, end_b: date) -> bool:
    """Closed date ranges overlap when each starts before the other ends."""
    return start_a <= end_b and start_b <= end_a


def rental_days(start, end) -> int:
    """Billable days between two dates, at least one."""
    return max(1, (parse_day(end) - parse_day(start)).days)


@dataclass
class RentalCharge:
    """Amounts owed when a booking is returned."""

    days: int
    daily_rate: float
    base_amount: float
    overdue_days: int = 0
    overdue_fine: float = 0.0

    @property
    def total(self) -> float:
        return self.base_amount + self.overdue_fine


def calc_rental_charge(
    interval: Interval, daily_rate: float, fine_percentage: float = 10
) -> RentalCharge:
    """
    Calculate what a booking costs at its effective end.

    Days past the expected end are fined at fine_percentage of the
    daily rate per day, on top of the base amount.
    """
    start, end = interval_bounds(interval)
    days = rental_days(start, end)
    overdue_days = 0
    fine = 0.0
    expected_end = parse_day(interval.end_date_expected)
    if end > expected_end:
        overdue_days = rental_days(expected_end, end)
        fine = overdue_days * daily_rate * (fine_percentage / 100)
    return RentalCharge(
        days=days,
        daily_rate=daily_rate,
        base_amount=days * daily_rate,
        overdue_days=overdue_days,
        overdue_fine=fine,
    )
