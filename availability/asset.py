"""Asset class - the main aggregate for a tool and its bookings."""

from datetime import date
from typing import List, Optional

from .calculations import (
    RentalCharge,
    calc_rental_charge,
    classify_bounds,
    interval_bounds,
    parse_day,
    ranges_overlap,
    usable_intervals,
)
from .errors import (
    BookingConflictError,
    BookingStateError,
    UnknownBookingError,
)
from .feed import IntervalFeed
from .interval import ACTIVE, CANCELLED, MAINTENANCE, RETURNED, Interval
from .month import MonthCalendar, MonthView
from .status import DayStatus
from .tool import Tool

CODE_PREFIX = "AL"
MAINTENANCE_PREFIX = "MN"
DEFAULT_FINE_PERCENTAGE = 10


class Asset:
    """Complete asset record with tool info, bookings and state."""

    def __init__(
        self,
        tool: Tool,
        bookings: Optional[List[Interval]] = None,
        state_as_of_date: Optional[str] = None,
        overdue_fine_percentage: Optional[float] = None,
    ):
        self.tool = tool
        self.bookings = bookings or []
        self._state_as_of_date = state_as_of_date
        if overdue_fine_percentage is None:
            overdue_fine_percentage = DEFAULT_FINE_PERCENTAGE
        self.overdue_fine_percentage = overdue_fine_percentage

    @property
    def as_of_date(self) -> date:
        """Date of current state, defaults to today."""
        if self._state_as_of_date:
            return parse_day(self._state_as_of_date)
        return date.today()

    def availability_intervals(self) -> List[Interval]:
        """Bookings that block the calendar (cancelled ones do not)."""
        return [b for b in self.bookings if not b.is_cancelled]

    def get_booking(self, code: str) -> Optional[Interval]:
        """Find a booking by its code (case-insensitive)."""
        for booking in self.bookings:
            if booking.code and booking.code.lower() == code.lower():
                return booking
        return None

    def index_of(self, code: str) -> int:
        """Position of a booking in the file, for in-place updates."""
        booking = self.get_booking(code)
        if booking is None:
            raise UnknownBookingError(f"Unknown booking code '{code}'")
        return self.bookings.index(booking)

    def get_bookings_sorted(
        self, sort_by: str = "start", reverse: bool = True
    ) -> List[Interval]:
        """
        Get bookings sorted by specified field.

        Args:
            sort_by: "start", "end", "status", or "customer"
            reverse: If True, latest/highest first (default)
        """
        if sort_by == "start":
            return sorted(self.bookings, key=lambda b: str(b.start_date), reverse=reverse)
        elif sort_by == "end":
            return sorted(
                self.bookings, key=lambda b: str(b.effective_end_date), reverse=reverse
            )
        elif sort_by == "status":
            return sorted(
                self.bookings, key=lambda b: (b.status, str(b.start_date)), reverse=reverse
            )
        elif sort_by == "customer":
            return sorted(
                self.bookings,
                key=lambda b: (b.customer or "", str(b.start_date)),
                reverse=reverse,
            )
        return self.bookings

    def feed(self) -> IntervalFeed:
        return IntervalFeed.ready(self.availability_intervals())

    def classify(self, day) -> DayStatus:
        """Availability of the asset on one day."""
        return classify_bounds(
            parse_day(day), usable_intervals(self.availability_intervals())
        )

    def bookings_on(self, day) -> List[Interval]:
        """Availability intervals covering a day."""
        day = parse_day(day)
        return [
            interval
            for start, end, interval in usable_intervals(self.availability_intervals())
            if start <= day <= end
        ]

    def render_month(self, view: Optional[MonthView] = None) -> MonthCalendar:
        view = view or MonthView(self.as_of_date)
        return view.render(self.feed())

    def find_conflicts(self, start, end) -> List[Interval]:
        """Availability intervals that overlap the requested range."""
        start, end = parse_day(start), parse_day(end)
        return [
            interval
            for s, e, interval in usable_intervals(self.availability_intervals())
            if ranges_overlap(start, end, s, e)
        ]

    def is_available(self, start, end) -> bool:
        return not self.find_conflicts(start, end)

    def next_code(self, prefix: str = CODE_PREFIX) -> str:
        """Next sequential code, e.g. AL0007 after AL0006."""
        highest = 0
        for booking in self.bookings:
            if booking.code and booking.code.startswith(prefix):
                suffix = booking.code[len(prefix):]
                if suffix.isdigit():
                    highest = max(highest, int(suffix))
        return f"{prefix}{highest + 1:04d}"

    def book(
        self,
        start,
        end,
        customer: Optional[str] = None,
        daily_rate: Optional[float] = None,
        notes: Optional[str] = None,
    ) -> Interval:
        """
        Build a new active booking for a free range.

        The booking is returned, not stored; callers persist it with
        loader.add_booking.
        """
        start, end = parse_day(start), parse_day(end)
        if end < start:
            raise ValueError(f"End date {end} is before start date {start}")
        conflicts = self.find_conflicts(start, end)
        if conflicts:
            raise BookingConflictError(conflicts)
        return Interval(
            start_date=start.isoformat(),
            end_date_expected=end.isoformat(),
            status=ACTIVE,
            code=self.next_code(),
            customer=customer,
            daily_rate=daily_rate if daily_rate is not None else self.tool.daily_rate,
            notes=notes,
        )

    def block_for_maintenance(self, start, end, notes: Optional[str] = None) -> Interval:
        """Build a maintenance block; it may overlap existing bookings."""
        start, end = parse_day(start), parse_day(end)
        if end < start:
            raise ValueError(f"End date {end} is before start date {start}")
        return Interval(
            start_date=start.isoformat(),
            end_date_expected=end.isoformat(),
            status=MAINTENANCE,
            code=self.next_code(MAINTENANCE_PREFIX),
            notes=notes,
        )

    def check_in(self, code: str, returned_on=None) -> Interval:
        """Mark a booking returned on the given day (default: as-of date)."""
        booking = self.get_booking(code)
        if booking is None:
            raise UnknownBookingError(f"Unknown booking code '{code}'")
        if booking.is_maintenance:
            raise BookingStateError(f"{booking.code} is a maintenance block, not a rental")
        if booking.status == RETURNED:
            raise BookingStateError(f"Booking {booking.code} was already returned")
        if booking.status == CANCELLED:
            raise BookingStateError(f"Booking {booking.code} is cancelled")
        returned_on = parse_day(returned_on) if returned_on else self.as_of_date
        if returned_on < parse_day(booking.start_date):
            raise ValueError(f"Return date {returned_on} is before the booking start")
        booking.end_date_actual = returned_on.isoformat()
        booking.status = RETURNED
        return booking

    def cancel(self, code: str) -> Interval:
        booking = self.get_booking(code)
        if booking is None:
            raise UnknownBookingError(f"Unknown booking code '{code}'")
        if booking.status == RETURNED:
            raise BookingStateError(f"Booking {booking.code} was already returned")
        booking.status = CANCELLED
        return booking

    def settle(self, booking: Interval) -> RentalCharge:
        """Charge for a booking up to its effective end."""
        rate = booking.daily_rate
        if rate is None:
            rate = self.tool.daily_rate or 0
        return calc_rental_charge(booking, rate, self.overdue_fine_percentage)

    def overdue_bookings(self) -> List[Interval]:
        """Active bookings whose expected end is before the as-of date."""
        today = self.as_of_date
        overdue = []
        for booking in self.bookings:
            if booking.status != ACTIVE or booking.end_date_actual:
                continue
            try:
                _, end = interval_bounds(booking)
            except ValueError:
                continue
            if end < today:
                overdue.append(booking)
        return overdue
