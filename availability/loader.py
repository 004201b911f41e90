"""YAML loading and saving utilities for asset data."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import yaml

from .asset import Asset
from .interval import Interval
from .tool import Tool

logger = logging.getLogger(__name__)


def _parse_object(dct: Dict[str, Any]) -> Union[Tool, Interval, Asset, dict]:
    """Parse dictionary into appropriate object type."""
    # Booking or maintenance block
    if "startDate" in dct:
        return interval_from_dict(dct)
    # Top-level asset object (inner objects are already parsed)
    elif "tool" in dct:
        state = dct.get("state") or {}
        settings = dct.get("settings") or {}
        return Asset(
            dct["tool"],
            _only_intervals(dct.get("bookings") or []),
            state.get("asOfDate"),
            settings.get("overdueFinePercentage"),
        )
    # Tool object (inside 'tool' key)
    elif "name" in dct:
        return Tool(
            dct["name"],
            dct.get("category"),
            dct.get("serialNumber"),
            dct.get("dailyRate"),
        )
    else:
        # Return dict as-is for unknown structures (like 'state')
        return dct


def _only_intervals(items: Iterable[Any]) -> List[Interval]:
    intervals = []
    for item in items:
        if isinstance(item, Interval):
            intervals.append(item)
        else:
            logger.warning("Skipping booking record without startDate: %r", item)
    return intervals


def interval_from_dict(dct: Dict[str, Any]) -> Interval:
    """Build an Interval from a camelCase record (file or API)."""
    return Interval(
        dct.get("startDate"),
        dct.get("endDateExpected"),
        dct.get("endDateActual"),
        dct.get("status") or "active",
        dct.get("code") or dct.get("rentalCode") or dct.get("id"),
        dct.get("customer"),
        dct.get("dailyRate"),
        dct.get("notes"),
    )


def intervals_from_records(records: Optional[Iterable[Any]]) -> List[Interval]:
    """
    Convert API availability records into Intervals.

    Records that are not objects or carry no startDate are skipped.
    Dates are kept as given; bad values are dropped later, per interval,
    when the calendar is classified.
    """
    intervals = []
    for record in records or []:
        if not isinstance(record, dict) or "startDate" not in record:
            logger.warning("Skipping malformed availability record: %r", record)
            continue
        intervals.append(interval_from_dict(record))
    return intervals


def load_asset(filename: Union[str, Path]) -> Asset:
    """
    Load an asset from a YAML file.

    Raises ValueError when the file is empty or has no top-level tool.
    """
    with open(filename, "rb") as fp:
        json_data = json.dumps(
            yaml.load(fp, Loader=yaml.SafeLoader), indent=4, default=str
        )
    asset = json.loads(json_data, object_hook=_parse_object)
    if not isinstance(asset, Asset):
        raise ValueError(f"{filename} does not describe an asset (missing tool)")
    return asset


def _load_raw(filename: Union[str, Path]) -> Dict[str, Any]:
    with open(filename, "r") as fp:
        return yaml.load(fp, Loader=yaml.SafeLoader)


def _dump_raw(filename: Union[str, Path], data: Dict[str, Any]) -> None:
    with open(filename, "w") as fp:
        yaml.dump(
            data,
            fp,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
            width=120,
        )


def _as_text(value: Any) -> Any:
    return value.isoformat() if hasattr(value, "isoformat") else value


def _interval_to_dict(interval: Interval) -> Dict[str, Any]:
    """Serialize an Interval to the YAML dict format (camelCase keys)."""
    d: Dict[str, Any] = {}
    if interval.code is not None:
        d["code"] = interval.code
    d["startDate"] = _as_text(interval.start_date)
    d["endDateExpected"] = _as_text(interval.end_date_expected)
    if interval.end_date_actual is not None:
        d["endDateActual"] = _as_text(interval.end_date_actual)
    d["status"] = interval.status
    if interval.customer is not None:
        d["customer"] = interval.customer
    if interval.daily_rate is not None:
        d["dailyRate"] = interval.daily_rate
    if interval.notes is not None:
        d["notes"] = interval.notes
    return d


def _tool_to_dict(tool: Tool) -> Dict[str, Any]:
    """Serialize a Tool to the YAML dict format (camelCase keys)."""
    d: Dict[str, Any] = {"name": tool.name}
    if tool.category is not None:
        d["category"] = tool.category
    if tool.serial_number is not None:
        d["serialNumber"] = tool.serial_number
    if tool.daily_rate is not None:
        d["dailyRate"] = tool.daily_rate
    return d


def add_booking(filename: Union[str, Path], interval: Interval) -> None:
    """
    Append a booking to an asset YAML file.

    Loads the raw YAML, appends the booking to the bookings list,
    and writes back to the file.
    """
    data = _load_raw(filename)
    if data.get("bookings") is None:
        data["bookings"] = []
    data["bookings"].append(_interval_to_dict(interval))
    _dump_raw(filename, data)


def update_booking(filename: Union[str, Path], index: int, interval: Interval) -> None:
    """Replace the booking at the given index in an asset YAML file."""
    data = _load_raw(filename)
    bookings = data.get("bookings") or []
    if index < 0 or index >= len(bookings):
        raise IndexError(f"Booking index {index} out of range (0..{len(bookings) - 1})")
    bookings[index] = _interval_to_dict(interval)
    _dump_raw(filename, data)


def save_booking(filename: Union[str, Path], interval: Interval) -> None:
    """
    Write back a changed booking, matched by code.

    Raises KeyError when no stored booking carries the interval's code.
    """
    data = _load_raw(filename)
    bookings = data.get("bookings") or []
    for index, raw in enumerate(bookings):
        if isinstance(raw, dict) and interval.code and raw.get("code") == interval.code:
            bookings[index] = _interval_to_dict(interval)
            _dump_raw(filename, data)
            return
    raise KeyError(f"No booking with code {interval.code!r} in {filename}")


def delete_booking(filename: Union[str, Path], index: int) -> None:
    """Remove the booking at the given index in an asset YAML file."""
    data = _load_raw(filename)
    bookings = data.get("bookings") or []
    if index < 0 or index >= len(bookings):
        raise IndexError(f"Booking index {index} out of range (0..{len(bookings) - 1})")
    del bookings[index]
    _dump_raw(filename, data)


def save_as_of_date(filename: Union[str, Path], as_of_date: str) -> None:
    """Update state.asOfDate in an asset YAML file."""
    data = _load_raw(filename)
    if data.get("state") is None:
        data["state"] = {}
    data["state"]["asOfDate"] = as_of_date
    _dump_raw(filename, data)


def create_asset(
    filename: Union[str, Path],
    tool: Tool,
    as_of_date: Optional[str] = None,
) -> None:
    """Create a new asset YAML file with the given tool and no bookings."""
    data: Dict[str, Any] = {"tool": _tool_to_dict(tool), "bookings": []}
    if as_of_date is not None:
        data["state"] = {"asOfDate": as_of_date}
    _dump_raw(filename, data)
