"""Interval class for bookings and maintenance blocks."""
from datetime import date
from typing import Optional, Union

ACTIVE = "active"
RETURNED = "returned"
OVERDUE = "overdue"
CANCELLED = "cancelled"
LOST = "lost"
MAINTENANCE = "maintenance"

BOOKING_STATUSES = (ACTIVE, RETURNED, OVERDUE, CANCELLED, LOST, MAINTENANCE)

DateLike = Union[str, date]


class Interval:
    """A period during which an asset is booked or under maintenance."""

    def __init__(
            self,
            start_date: Optional[DateLike],
            end_date_expected: Optional[DateLike],
            end_date_actual: Optional[DateLike] = None,
            status: str = ACTIVE,
            code: Optional[str] = None,
            customer: Optional[str] = None,
            daily_rate: Optional[float] = None,
            notes: Optional[str] = None,
    ):
        self.start_date = start_date
        self.end_date_expected = end_date_expected
        self.end_date_actual = end_date_actual
        self.status = str(status or ACTIVE).strip().lower()
        self.code = code
        self.customer = customer
        self.daily_rate = daily_rate
        self.notes = notes

    @property
    def effective_end_date(self) -> Optional[DateLike]:
        """Actual end if recorded, otherwise the expected end."""
        return self.end_date_actual or self.end_date_expected

    @property
    def is_maintenance(self) -> bool:
        return self.status == MAINTENANCE

    @property
    def is_cancelled(self) -> bool:
        return self.status == CANCELLED

    def __repr__(self) -> str:
        return (
            f"Interval({self.code or '-'}, {self.start_date}..{self.effective_end_date}, "
            f"{self.status})"
        )
