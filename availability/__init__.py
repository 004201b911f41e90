"""
Rental tool availability models.

This package provides data models for tracking when a tool can be rented:
- DayStatus: Day classification (MAINTENANCE, RENTED, AVAILABLE)
- Tool: Tool identification and pricing
- Interval: Bookings and maintenance blocks
- Asset: Main aggregate combining a tool with its bookings
- MonthView / MonthCalendar: A displayed month and its classified days
- IntervalFeed: Load state of an interval list
- ApiClient / Session: Remote rental API access
"""

from .status import DayStatus
from .tool import Tool
from .interval import Interval
from .errors import (
    AvailabilityError,
    FetchError,
    ApiError,
    AuthError,
    BookingError,
    BookingConflictError,
    BookingStateError,
    UnknownBookingError,
)
from .calculations import (
    RentalCharge,
    calc_rental_charge,
    classify_day,
    parse_day,
    rental_days,
)
from .feed import FeedState, IntervalFeed
from .month import MonthCalendar, MonthView
from .asset import Asset
from .loader import (
    load_asset,
    intervals_from_records,
    add_booking,
    save_booking,
    update_booking,
    delete_booking,
    save_as_of_date,
    create_asset,
)
from .client import ApiClient, Session
from .store import ApiIntervalStore, YamlIntervalStore

__all__ = [
    "DayStatus",
    "Tool",
    "Interval",
    "AvailabilityError",
    "FetchError",
    "ApiError",
    "AuthError",
    "BookingError",
    "BookingConflictError",
    "BookingStateError",
    "UnknownBookingError",
    "RentalCharge",
    "calc_rental_charge",
    "classify_day",
    "parse_day",
    "rental_days",
    "FeedState",
    "IntervalFeed",
    "MonthCalendar",
    "MonthView",
    "Asset",
    "load_asset",
    "intervals_from_records",
    "add_booking",
    "save_booking",
    "update_booking",
    "delete_booking",
    "save_as_of_date",
    "create_asset",
    "ApiClient",
    "Session",
    "ApiIntervalStore",
    "YamlIntervalStore",
]
