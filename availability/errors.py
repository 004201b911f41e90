"""Exceptions raised by the availability package."""

from typing import Optional


class AvailabilityError(Exception):
    """Base class for all availability errors."""


class FetchError(AvailabilityError):
    """Interval list could not be fetched from its store."""


class ApiError(FetchError):
    """The rental API answered with an error response."""

    def __init__(self, status_code: int, message: Optional[str] = None):
        self.status_code = status_code
        self.message = message or f"HTTP {status_code}"
        super().__init__(f"{self.message} (status {status_code})")


class AuthError(ApiError):
    """Authorization failed and the session could not be renewed."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(401, message or "Not authenticated")


class BookingError(AvailabilityError):
    """A booking operation was refused."""


class BookingConflictError(BookingError):
    """Requested range overlaps existing bookings."""

    def __init__(self, conflicts):
        self.conflicts = conflicts
        codes = ", ".join(c.code or "?" for c in conflicts)
        super().__init__(f"Range overlaps existing bookings: {codes}")


class BookingStateError(BookingError):
    """Booking is not in a state that allows the operation."""


class UnknownBookingError(BookingError):
    """No booking with the given code."""
