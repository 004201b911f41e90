"""Flask web application for rental tool availability."""

import logging
import os
from pathlib import Path

import yaml
from flask import Flask, abort, render_template, request, redirect, url_for, flash

# Add parent directory to path for package imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from availability import (
    AvailabilityError,
    DayStatus,
    IntervalFeed,
    MonthView,
    YamlIntervalStore,
    add_booking,
    load_asset,
    save_booking,
)
from availability.interval import ACTIVE
from availability.month import WEEKDAY_HEADERS

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.secret_key = os.environ.get("SECRET_KEY", "dev-secret-key-change-in-prod")

# Directory of asset YAML files (relative to project root unless ASSETS_DIR is set)
app.config["ASSETS_DIR"] = Path(
    os.environ.get("ASSETS_DIR", Path(__file__).parent.parent / "assets")
)


def get_asset_files():
    """Get all asset YAML files."""
    return sorted(Path(app.config["ASSETS_DIR"]).glob("*.yaml"))


def get_asset_path(asset_id: str) -> Path:
    """Get full path for an asset ID (filename without extension)."""
    return Path(app.config["ASSETS_DIR"]) / f"{asset_id}.yaml"


def existing_asset_path(asset_id: str) -> Path:
    path = get_asset_path(asset_id)
    if not path.exists():
        abort(404)
    return path


def read_asset(path: Path):
    """Load an asset file, or None (logged) when it cannot be read."""
    try:
        return load_asset(path)
    except (yaml.YAMLError, ValueError) as e:
        logger.warning("Cannot load asset file %s: %s", path, e)
        return None


def load_existing_asset(asset_id: str):
    """Path and asset for form handlers; 404 if missing, 422 if unreadable."""
    path = existing_asset_path(asset_id)
    asset = read_asset(path)
    if asset is None:
        abort(422)
    return path, asset


def format_money(amount):
    """Format an amount with two decimals."""
    if amount is None:
        return "—"
    return f"${amount:,.2f}"


def day_color(status) -> str:
    """Get Tailwind color classes for a calendar day."""
    colors = {
        DayStatus.AVAILABLE: "bg-emerald-50 text-emerald-600 hover:bg-emerald-100",
        DayStatus.RENTED: "bg-red-50 text-red-600",
        DayStatus.MAINTENANCE: "bg-amber-50 text-amber-600",
    }
    return colors.get(status, "bg-gray-50 text-gray-400")


def booking_badge_color(status: str) -> str:
    """Get Tailwind color classes for a booking status badge."""
    colors = {
        "active": "bg-blue-500 text-white",
        "overdue": "bg-red-500 text-white",
        "returned": "bg-green-500 text-white",
        "maintenance": "bg-amber-500 text-white",
        "cancelled": "bg-gray-400 text-white",
        "lost": "bg-black text-white",
    }
    return colors.get(str(status).lower(), "bg-gray-500 text-white")


# Register template filters
app.jinja_env.filters["format_money"] = format_money
app.jinja_env.filters["day_color"] = day_color
app.jinja_env.filters["booking_badge_color"] = booking_badge_color


def month_from_args() -> MonthView:
    try:
        return MonthView.from_key(request.args.get("month"))
    except ValueError:
        abort(400)


@app.route("/")
def index():
    """Dashboard showing all assets."""
    assets = []
    broken = []
    for path in get_asset_files():
        asset = read_asset(path)
        if asset is None:
            broken.append(path.name)
            continue
        today = asset.as_of_date
        assets.append({
            "id": path.stem,
            "asset": asset,
            "today": asset.classify(today),
            "active": sum(1 for b in asset.bookings if b.status == ACTIVE),
            "overdue": len(asset.overdue_bookings()),
            "total_bookings": len(asset.bookings),
        })

    return render_template("index.html", assets=assets, broken=broken, DayStatus=DayStatus)


@app.route("/asset/<asset_id>")
def asset_detail(asset_id: str):
    """Asset page; the calendar itself loads lazily via HTMX."""
    path = get_asset_path(asset_id)
    if not path.exists():
        flash(f"Asset '{asset_id}' not found", "error")
        return redirect(url_for("index"))

    asset = read_asset(path)
    if asset is None:
        flash(f"Asset '{asset_id}' could not be read", "error")
        return redirect(url_for("index"))
    if request.args.get("month"):
        view = month_from_args()
    else:
        view = MonthView(asset.as_of_date)

    return render_template(
        "asset.html",
        asset_id=asset_id,
        asset=asset,
        view=view,
        prev_key=view.previous_month().key,
        next_key=view.next_month().key,
        active_tab="calendar",
    )


@app.route("/asset/<asset_id>/calendar")
def asset_calendar_partial(asset_id: str):
    """HTMX partial: classified month grid for an asset."""
    path = existing_asset_path(asset_id)
    view = month_from_args()

    feed = IntervalFeed.fetch(YamlIntervalStore(path).fetch)
    calendar = view.render(feed)

    return render_template(
        "partials/calendar.html",
        asset_id=asset_id,
        calendar=calendar,
        weekday_headers=WEEKDAY_HEADERS,
        DayStatus=DayStatus,
    )


@app.route("/asset/<asset_id>/bookings")
def asset_bookings(asset_id: str):
    """Bookings list for an asset."""
    path = get_asset_path(asset_id)
    if not path.exists():
        flash(f"Asset '{asset_id}' not found", "error")
        return redirect(url_for("index"))

    asset = read_asset(path)
    if asset is None:
        flash(f"Asset '{asset_id}' could not be read", "error")
        return redirect(url_for("index"))
    status_filter = request.args.get("status", "").lower() or None
    bookings = asset.get_bookings_sorted(sort_by="start", reverse=True)
    if status_filter:
        bookings = [b for b in bookings if b.status.lower() == status_filter]

    return render_template(
        "bookings.html",
        asset_id=asset_id,
        asset=asset,
        bookings=bookings,
        status_filter=status_filter,
        overdue_codes={b.code for b in asset.overdue_bookings()},
        active_tab="bookings",
    )


@app.route("/asset/<asset_id>/book", methods=["GET"])
def book_form(asset_id: str):
    """HTMX partial: new booking form."""
    _, asset = load_existing_asset(asset_id)
    return render_template(
        "partials/book_form.html",
        asset_id=asset_id,
        asset=asset,
        today=asset.as_of_date.isoformat(),
    )


@app.route("/asset/<asset_id>/book", methods=["POST"])
def book(asset_id: str):
    """Handle new booking form submission."""
    path, asset = load_existing_asset(asset_id)

    start = request.form.get("start_date")
    end = request.form.get("end_date")
    customer = request.form.get("customer") or None
    notes = request.form.get("notes") or None
    rate = request.form.get("daily_rate")

    if not start or not end:
        flash("Please enter start and end dates", "error")
        return redirect(url_for("asset_detail", asset_id=asset_id))

    try:
        rate_val = float(rate) if rate else None
        booking = asset.book(start, end, customer=customer, daily_rate=rate_val, notes=notes)
    except (AvailabilityError, ValueError) as e:
        flash(str(e), "error")
        return redirect(url_for("asset_detail", asset_id=asset_id))

    add_booking(path, booking)
    logger.info("Booked %s on %s", booking.code, asset_id)
    flash(f"Booked {booking.code}", "success")
    return redirect(url_for("asset_detail", asset_id=asset_id, month=booking.start_date[:7]))


@app.route("/asset/<asset_id>/block", methods=["POST"])
def block(asset_id: str):
    """Handle maintenance block form submission."""
    path, asset = load_existing_asset(asset_id)

    start = request.form.get("start_date")
    end = request.form.get("end_date")
    notes = request.form.get("notes") or None

    if not start or not end:
        flash("Please enter start and end dates", "error")
        return redirect(url_for("asset_detail", asset_id=asset_id))

    try:
        interval = asset.block_for_maintenance(start, end, notes=notes)
    except ValueError as e:
        flash(str(e), "error")
        return redirect(url_for("asset_detail", asset_id=asset_id))

    add_booking(path, interval)
    flash(f"Blocked {interval.start_date} to {interval.end_date_expected} for maintenance", "success")
    return redirect(url_for("asset_detail", asset_id=asset_id, month=interval.start_date[:7]))


@app.route("/asset/<asset_id>/bookings/<code>/return", methods=["POST"])
def return_booking(asset_id: str, code: str):
    """Check a booking in."""
    path, asset = load_existing_asset(asset_id)

    try:
        booking = asset.check_in(code, request.form.get("date") or None)
        charge = asset.settle(booking)
    except (AvailabilityError, ValueError) as e:
        flash(str(e), "error")
        return redirect(url_for("asset_bookings", asset_id=asset_id))

    save_booking(path, booking)
    flash(f"Returned {booking.code}: total {format_money(charge.total)}", "success")
    return redirect(url_for("asset_bookings", asset_id=asset_id))


@app.route("/asset/<asset_id>/bookings/<code>/cancel", methods=["POST"])
def cancel_booking(asset_id: str, code: str):
    """Cancel a booking."""
    path, asset = load_existing_asset(asset_id)

    try:
        booking = asset.cancel(code)
    except AvailabilityError as e:
        flash(str(e), "error")
        return redirect(url_for("asset_bookings", asset_id=asset_id))

    save_booking(path, booking)
    flash(f"Cancelled {booking.code}", "success")
    return redirect(url_for("asset_bookings", asset_id=asset_id))


if __name__ == "__main__":
    # Using 5001 to avoid conflict with macOS AirPlay Receiver on 5000
    app.run(debug=True, host="0.0.0.0", port=5001)
