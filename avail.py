#!/usr/bin/env python3
"""
Unified CLI for rental tool availability.

Commands:
  month     - Show the availability calendar for a month
  day       - Show the status of one day and what covers it
  bookings  - List bookings and maintenance blocks
  book      - Add a new booking for a free date range
  block     - Block a date range for maintenance
  return    - Check a booking in and show what it costs
  cancel    - Cancel a booking
"""

import argparse
import logging
import os
import sys
from pathlib import Path
import yaml
from tabulate import tabulate
from typing import List, Optional

from availability import (
    ApiClient,
    ApiIntervalStore,
    AvailabilityError,
    DayStatus,
    Interval,
    IntervalFeed,
    MonthCalendar,
    MonthView,
    RentalCharge,
    Session,
    add_booking,
    classify_day,
    load_asset,
    parse_day,
    save_booking,
)
from availability.month import WEEKDAY_HEADERS

logger = logging.getLogger("avail")

STATUS_MARKERS = {
    DayStatus.AVAILABLE: " ",
    DayStatus.RENTED: "R",
    DayStatus.MAINTENANCE: "M",
}

# =============================================================================
# Formatting helpers
# =============================================================================


def format_money(amount: Optional[float]) -> str:
    """Format an amount for display."""
    return f"${amount:,.2f}" if amount is not None else "-"


def format_day_cell(cell) -> str:
    """Format one calendar cell as day number plus status marker."""
    if cell is None:
        return ""
    day, status = cell
    marker = STATUS_MARKERS.get(status, "?") if status else "?"
    return f"{day.day:>2}{marker}".rstrip()


def truncate(text: Optional[str], max_len: int = 30) -> str:
    """Truncate text with ellipsis if too long."""
    if text is None:
        return "-"
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def make_month_table(calendar: MonthCalendar) -> List[List[str]]:
    """Convert a rendered month to grid rows."""
    return [[format_day_cell(cell) for cell in week] for week in calendar.weeks()]


def make_bookings_table(bookings: List[Interval]) -> List[List[str]]:
    """Convert bookings to table rows."""
    rows = []
    for booking in bookings:
        rows.append(
            [
                booking.code or "-",
                str(booking.start_date),
                str(booking.end_date_expected),
                str(booking.end_date_actual) if booking.end_date_actual else "-",
                booking.status,
                booking.customer or "-",
                truncate(booking.notes),
            ]
        )
    return rows


def print_charge(charge: RentalCharge) -> None:
    print(f"  Days:    {charge.days} x {format_money(charge.daily_rate)}")
    print(f"  Amount:  {format_money(charge.base_amount)}")
    if charge.overdue_days:
        print(f"  Overdue: {charge.overdue_days}d, fine {format_money(charge.overdue_fine)}")
    print(f"  Total:   {format_money(charge.total)}")


def print_calendar(calendar: MonthCalendar) -> None:
    print(calendar.view.label)
    if calendar.loading:
        print("Loading...")
        return
    if calendar.error:
        print(f"Warning: could not load bookings ({calendar.error}); showing all days free")
    print(tabulate(make_month_table(calendar), headers=WEEKDAY_HEADERS, tablefmt="simple"))
    print()
    counts = calendar.counts
    print(
        f"Available: {counts[DayStatus.AVAILABLE]}  "
        f"Rented (R): {counts[DayStatus.RENTED]}  "
        f"Maintenance (M): {counts[DayStatus.MAINTENANCE]}"
    )


def api_feed(args) -> IntervalFeed:
    """Fetch intervals from the remote API instead of the asset file."""
    with ApiClient(args.api, Session.from_env()) as client:
        return IntervalFeed.fetch(ApiIntervalStore(client, args.tool_id).fetch)


# =============================================================================
# Month command
# =============================================================================


def cmd_month(args):
    """Show the availability calendar for a month."""
    asset = load_asset(args.asset_file)

    try:
        view = MonthView.from_key(args.month) if args.month else MonthView(asset.as_of_date)
    except ValueError as e:
        print(f"Error: {e}")
        return 1
    view = view.shift(args.next - args.prev)

    feed = api_feed(args) if args.api else asset.feed()

    print(f"Tool: {asset.tool.label}")
    print(f"Bookings: {len(asset.bookings)}")
    print()
    print_calendar(view.render(feed))
    return 0


# =============================================================================
# Day command
# =============================================================================


def cmd_day(args):
    """Show the status of one day."""
    asset = load_asset(args.asset_file)
    try:
        day = parse_day(args.date)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    if args.api:
        feed = api_feed(args)
        if feed.error:
            print(f"Warning: could not load bookings ({feed.error})")
        intervals = list(feed.intervals)
    else:
        intervals = asset.availability_intervals()

    status = classify_day(day, intervals)
    print(f"Tool: {asset.tool.label}")
    print(f"{day.isoformat()}: {status.tag.upper()}")
    covering = [] if args.api else asset.bookings_on(day)
    if covering:
        print()
        print(
            tabulate(
                make_bookings_table(covering),
                headers=["Code", "Start", "Expected End", "Returned", "Status", "Customer", "Notes"],
                tablefmt="simple",
            )
        )
    return 0


# =============================================================================
# Bookings command
# =============================================================================


def cmd_bookings(args):
    """List bookings and maintenance blocks."""
    asset = load_asset(args.asset_file)

    bookings = asset.get_bookings_sorted(sort_by=args.sort, reverse=not args.asc)

    if args.status:
        bookings = [b for b in bookings if b.status.lower() == args.status.lower()]

    if args.since:
        bookings = [b for b in bookings if str(b.start_date) >= args.since]

    print(f"Tool: {asset.tool.label}")
    print(f"Total bookings: {len(asset.bookings)}")
    if args.status or args.since:
        print(f"Showing: {len(bookings)} (filtered)")
    overdue = asset.overdue_bookings()
    if overdue:
        print(f"Overdue: {', '.join(b.code or '?' for b in overdue)}")
    print()

    if not bookings:
        print("No bookings found.")
        return 0

    headers = ["Code", "Start", "Expected End", "Returned", "Status", "Customer", "Notes"]
    print(tabulate(make_bookings_table(bookings), headers=headers, tablefmt="simple"))
    return 0


# =============================================================================
# Book / block commands
# =============================================================================


def cmd_book(args):
    """Add a new booking."""
    asset = load_asset(args.asset_file)

    try:
        booking = asset.book(
            args.start, args.end, customer=args.customer, daily_rate=args.rate, notes=args.notes
        )
    except (AvailabilityError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    print(f"Adding booking to {args.asset_file}:")
    print(f"  Code:     {booking.code}")
    print(f"  Dates:    {booking.start_date} to {booking.end_date_expected}")
    if booking.customer:
        print(f"  Customer: {booking.customer}")
    if booking.daily_rate is not None:
        print(f"  Rate:     {format_money(booking.daily_rate)}/day")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    add_booking(args.asset_file, booking)
    logger.info("Booked %s on %s", booking.code, args.asset_file)
    print("Booking saved.")
    return 0


def cmd_block(args):
    """Block a date range for maintenance."""
    asset = load_asset(args.asset_file)

    try:
        block = asset.block_for_maintenance(args.start, args.end, notes=args.notes)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    print(f"Adding maintenance block to {args.asset_file}:")
    print(f"  Code:  {block.code}")
    print(f"  Dates: {block.start_date} to {block.end_date_expected}")
    overlapping = [c for c in asset.find_conflicts(args.start, args.end) if not c.is_maintenance]
    if overlapping:
        print(f"  Overrides bookings: {', '.join(c.code or '?' for c in overlapping)}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    add_booking(args.asset_file, block)
    print("Block saved.")
    return 0


# =============================================================================
# Return / cancel commands
# =============================================================================


def cmd_return(args):
    """Check a booking in."""
    asset = load_asset(args.asset_file)

    try:
        booking = asset.check_in(args.code, args.date)
        charge = asset.settle(booking)
    except (AvailabilityError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    print(f"Returning {booking.code} on {booking.end_date_actual}:")
    print_charge(charge)
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    save_booking(args.asset_file, booking)
    print("Return saved.")
    return 0


def cmd_cancel(args):
    """Cancel a booking."""
    asset = load_asset(args.asset_file)

    try:
        booking = asset.cancel(args.code)
    except AvailabilityError as e:
        print(f"Error: {e}")
        return 1

    print(f"Cancelling {booking.code} ({booking.start_date} to {booking.end_date_expected})")

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    save_booking(args.asset_file, booking)
    print("Booking cancelled.")
    return 0


# =============================================================================
# Main
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Rental tool availability tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s assets/rotary-hammer.yaml month
  %(prog)s assets/rotary-hammer.yaml month --month 2024-03 --next 1
  %(prog)s assets/rotary-hammer.yaml day 2024-03-05
  %(prog)s assets/rotary-hammer.yaml bookings --status active
  %(prog)s assets/rotary-hammer.yaml book 2024-04-01 2024-04-05 --customer "Maria Souza"
  %(prog)s assets/rotary-hammer.yaml block 2024-04-10 2024-04-12 --notes "Brush swap"
  %(prog)s assets/rotary-hammer.yaml return AL0003 --date 2024-03-12
  %(prog)s assets/rotary-hammer.yaml --api http://localhost:4000/api \\
      --tool-id 6f1c... month
""",
    )
    parser.add_argument(
        "asset_file",
        type=Path,
        help="Path to asset YAML file",
    )
    parser.add_argument(
        "--api",
        type=str,
        help="Read intervals from the rental API at this URL (month/day only)",
    )
    parser.add_argument(
        "--tool-id",
        type=str,
        help="Tool id on the rental API (required with --api)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # Month subcommand
    month_parser = subparsers.add_parser("month", help="Show the availability calendar")
    month_parser.add_argument("--month", type=str, help="Month in YYYY-MM format (default: as-of month)")
    month_parser.add_argument("--next", type=int, default=0, help="Move forward N months")
    month_parser.add_argument("--prev", type=int, default=0, help="Move back N months")

    # Day subcommand
    day_parser = subparsers.add_parser("day", help="Show the status of one day")
    day_parser.add_argument("date", type=str, help="Date in YYYY-MM-DD format")

    # Bookings subcommand
    bookings_parser = subparsers.add_parser("bookings", help="List bookings")
    bookings_parser.add_argument("--status", type=str, help="Only bookings with this status")
    bookings_parser.add_argument("--since", type=str, help="Only bookings starting since date (YYYY-MM-DD)")
    bookings_parser.add_argument(
        "--sort",
        choices=["start", "end", "status", "customer"],
        default="start",
        help="Sort order (default: start)",
    )
    bookings_parser.add_argument("--asc", action="store_true", help="Sort ascending instead of descending")

    # Book subcommand
    book_parser = subparsers.add_parser("book", help="Add a booking for a free date range")
    book_parser.add_argument("start", type=str, help="First day (YYYY-MM-DD)")
    book_parser.add_argument("end", type=str, help="Expected last day (YYYY-MM-DD)")
    book_parser.add_argument("--customer", type=str, help="Customer name")
    book_parser.add_argument("--rate", type=float, help="Agreed daily rate (default: tool rate)")
    book_parser.add_argument("--notes", type=str, help="Notes about the booking")
    book_parser.add_argument("--dry-run", action="store_true", help="Show what would be added without saving")

    # Block subcommand
    block_parser = subparsers.add_parser("block", help="Block a date range for maintenance")
    block_parser.add_argument("start", type=str, help="First day (YYYY-MM-DD)")
    block_parser.add_argument("end", type=str, help="Last day (YYYY-MM-DD)")
    block_parser.add_argument("--notes", type=str, help="What the maintenance is for")
    block_parser.add_argument("--dry-run", action="store_true", help="Show what would be added without saving")

    # Return subcommand
    return_parser = subparsers.add_parser("return", help="Check a booking in")
    return_parser.add_argument("code", type=str, help="Booking code (e.g., AL0003)")
    return_parser.add_argument("--date", type=str, help="Return date (default: as-of date)")
    return_parser.add_argument("--dry-run", action="store_true", help="Show the settlement without saving")

    # Cancel subcommand
    cancel_parser = subparsers.add_parser("cancel", help="Cancel a booking")
    cancel_parser.add_argument("code", type=str, help="Booking code")
    cancel_parser.add_argument("--dry-run", action="store_true", help="Show what would change without saving")

    return parser


COMMANDS = {
    "month": cmd_month,
    "day": cmd_day,
    "bookings": cmd_bookings,
    "book": cmd_book,
    "block": cmd_block,
    "return": cmd_return,
    "cancel": cmd_cancel,
}


def main(argv=None):
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "WARNING").upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )
    args = build_parser().parse_args(argv)

    # Validate asset file exists
    if not args.asset_file.exists():
        print(f"Error: File not found: {args.asset_file}")
        return 1

    if args.api and not args.tool_id:
        print("Error: --tool-id is required with --api")
        return 1

    try:
        return COMMANDS[args.command](args)
    except (ValueError, yaml.YAMLError) as e:
        print(f"Error: Cannot read {args.asset_file}: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
