"""MonthView and MonthCalendar for rendering a month of availability."""

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, Iterator, List, Optional, Tuple

from dateutil.relativedelta import relativedelta

from .calculations import classify_bounds, parse_day, usable_intervals
from .feed import IntervalFeed
from .status import DayStatus

WEEKDAY_HEADERS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


class MonthView:
    """The calendar month containing a reference date."""

    def __init__(self, reference=None):
        self.reference = parse_day(reference) if reference is not None else date.today()

    @classmethod
    def from_key(cls, key: Optional[str]) -> "MonthView":
        """Build from a 'YYYY-MM' key; empty key means the current month."""
        if not key:
            return cls()
        try:
            year, month = (int(part) for part in key.split("-", 1))
            return cls(date(year, month, 1))
        except ValueError as e:
            raise ValueError(f"Invalid month: {key!r} (expected YYYY-MM)") from e

    @property
    def key(self) -> str:
        return self.first_day.strftime("%Y-%m")

    @property
    def label(self) -> str:
        return self.first_day.strftime("%B %Y")

    @property
    def first_day(self) -> date:
        return self.reference.replace(day=1)

    @property
    def last_day(self) -> date:
        return self.first_day + relativedelta(months=1, days=-1)

    @property
    def leading_blanks(self) -> int:
        """Empty cells before day 1 in a Sunday-first week row."""
        return (self.first_day.weekday() + 1) % 7

    def days(self) -> Iterator[date]:
        """Yield every date of the month in order."""
        day = self.first_day
        last = self.last_day
        while day <= last:
            yield day
            day += timedelta(days=1)

    def __iter__(self) -> Iterator[date]:
        return self.days()

    def __len__(self) -> int:
        return self.last_day.day

    def __eq__(self, other) -> bool:
        return isinstance(other, MonthView) and self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __repr__(self) -> str:
        return f"MonthView({self.key})"

    def next_month(self) -> "MonthView":
        return MonthView(self.reference + relativedelta(months=1))

    def previous_month(self) -> "MonthView":
        return MonthView(self.reference - relativedelta(months=1))

    def shift(self, months: int) -> "MonthView":
        return MonthView(self.reference + relativedelta(months=months))

    def weeks(self) -> List[List[Optional[date]]]:
        """Rows of seven cells, None where the grid is padded."""
        cells: List[Optional[date]] = [None] * self.leading_blanks
        cells.extend(self.days())
        cells.extend([None] * (-len(cells) % 7))
        return [cells[i : i + 7] for i in range(0, len(cells), 7)]

    def render(self, feed: IntervalFeed) -> "MonthCalendar":
        """Classify every day of the month, unless the feed is still loading."""
        if feed.is_loading:
            return MonthCalendar(view=self, loading=True)
        bounds = usable_intervals(feed.intervals)
        statuses = {day: classify_bounds(day, bounds) for day in self.days()}
        return MonthCalendar(view=self, loading=False, statuses=statuses, error=feed.error)


@dataclass
class MonthCalendar:
    """A month of classified days, or a loading placeholder."""

    view: MonthView
    loading: bool
    statuses: Dict[date, DayStatus] = field(default_factory=dict)
    error: Optional[str] = None

    def status_for(self, day: date) -> Optional[DayStatus]:
        return self.statuses.get(day)

    def weeks(self) -> List[List[Optional[Tuple[date, Optional[DayStatus]]]]]:
        """Grid rows pairing each day with its status."""
        return [
            [(day, self.status_for(day)) if day else None for day in week]
            for week in self.view.weeks()
        ]

    @property
    def counts(self) -> Dict[DayStatus, int]:
        counter = Counter(self.statuses.values())
        return {status: counter.get(status, 0) for status in DayStatus}
