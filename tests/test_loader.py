#!/usr/bin/env python3
"""Tests for YAML loading and saving utilities."""

import logging

import pytest
import yaml

from availability import (
    Asset,
    Interval,
    Tool,
    add_booking,
    create_asset,
    delete_booking,
    intervals_from_records,
    load_asset,
    save_as_of_date,
    save_booking,
    update_booking,
)

ASSET_YAML = """
tool:
  name: Rotary hammer
  category: Drilling
  serialNumber: BSH-0042
  dailyRate: 45.0

state:
  asOfDate: '2024-03-20'

settings:
  overdueFinePercentage: 15

bookings:
  - code: AL0001
    startDate: '2024-03-01'
    endDateExpected: '2024-03-10'
    endDateActual: '2024-03-08'
    status: returned
    customer: Maria Souza
    dailyRate: 40.0
    notes: Returned early
  - code: MN0001
    startDate: '2024-03-12'
    endDateExpected: '2024-03-13'
    status: maintenance
"""


@pytest.fixture
def asset_file(tmp_path):
    path = tmp_path / "hammer.yaml"
    path.write_text(ASSET_YAML)
    return path


# =============================================================================
# load_asset tests
# =============================================================================


class TestLoadAsset:
    """Tests for load_asset function."""

    def test_loads_full_asset(self, asset_file):
        asset = load_asset(asset_file)

        assert isinstance(asset, Asset)
        assert isinstance(asset.tool, Tool)
        assert asset.tool.name == "Rotary hammer"
        assert asset.tool.serial_number == "BSH-0042"
        assert asset.tool.daily_rate == 45.0
        assert asset.overdue_fine_percentage == 15
        assert str(asset.as_of_date) == "2024-03-20"
        assert len(asset.bookings) == 2
        first = asset.bookings[0]
        assert isinstance(first, Interval)
        assert first.code == "AL0001"
        assert first.end_date_actual == "2024-03-08"
        assert first.customer == "Maria Souza"
        assert first.daily_rate == 40.0
        assert asset.bookings[1].is_maintenance

    def test_loads_minimal_asset(self, tmp_path):
        path = tmp_path / "minimal.yaml"
        path.write_text("tool:\n  name: Ladder\n")
        asset = load_asset(path)
        assert asset.tool.name == "Ladder"
        assert asset.bookings == []
        assert asset.overdue_fine_percentage == 10

    def test_unquoted_yaml_dates_become_strings(self, tmp_path):
        path = tmp_path / "dates.yaml"
        path.write_text(
            "tool:\n  name: Ladder\nbookings:\n"
            "  - startDate: 2024-03-01\n    endDateExpected: 2024-03-02\n    status: active\n"
        )
        asset = load_asset(path)
        assert asset.bookings[0].start_date == "2024-03-01"
        assert asset.classify("2024-03-02").tag == "rented"

    def test_booking_without_start_skipped(self, tmp_path, caplog):
        path = tmp_path / "broken.yaml"
        path.write_text(
            "tool:\n  name: Ladder\nbookings:\n"
            "  - endDateExpected: '2024-03-02'\n    status: active\n"
            "  - startDate: '2024-03-05'\n    endDateExpected: '2024-03-06'\n"
        )
        with caplog.at_level(logging.WARNING, logger="availability.loader"):
            asset = load_asset(path)
        assert len(asset.bookings) == 1
        assert asset.bookings[0].status == "active"
        assert "without startDate" in caplog.text

    @pytest.mark.parametrize("content", ["", "- just\n- a list\n", "bookings: []\n"])
    def test_not_an_asset_raises(self, tmp_path, content):
        path = tmp_path / "odd.yaml"
        path.write_text(content)
        with pytest.raises(ValueError):
            load_asset(path)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_asset(tmp_path / "missing.yaml")


class TestIntervalsFromRecords:
    """Tests for converting API availability records."""

    def test_converts_api_records(self):
        records = [
            {
                "id": "9b1c",
                "startDate": "2024-03-01T03:00:00.000Z",
                "endDateExpected": "2024-03-10T03:00:00.000Z",
                "endDateActual": None,
                "status": "active",
            }
        ]
        intervals = intervals_from_records(records)
        assert len(intervals) == 1
        assert intervals[0].code == "9b1c"
        assert intervals[0].effective_end_date == "2024-03-10T03:00:00.000Z"

    def test_skips_non_mappings_and_missing_start(self, caplog):
        with caplog.at_level(logging.WARNING, logger="availability.loader"):
            intervals = intervals_from_records(
                ["oops", {"endDateExpected": "2024-03-10"}, {"startDate": "2024-03-01", "endDateExpected": "2024-03-02"}]
            )
        assert len(intervals) == 1
        assert "malformed" in caplog.text

    def test_none_is_empty(self):
        assert intervals_from_records(None) == []


# =============================================================================
# Saving tests
# =============================================================================


class TestAddBooking:
    """Tests for add_booking."""

    def test_appends_booking(self, asset_file):
        add_booking(
            asset_file,
            Interval("2024-04-01", "2024-04-05", status="active", code="AL0002", customer="Joao"),
        )
        data = yaml.safe_load(asset_file.read_text())
        assert len(data["bookings"]) == 3
        assert data["bookings"][-1] == {
            "code": "AL0002",
            "startDate": "2024-04-01",
            "endDateExpected": "2024-04-05",
            "status": "active",
            "customer": "Joao",
        }

    def test_creates_bookings_list(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("tool:\n  name: Ladder\n")
        add_booking(path, Interval("2024-04-01", "2024-04-05"))
        assert len(load_asset(path).bookings) == 1

    def test_round_trip_preserves_other_keys(self, asset_file):
        add_booking(asset_file, Interval("2024-04-01", "2024-04-05", code="AL0002"))
        asset = load_asset(asset_file)
        assert asset.overdue_fine_percentage == 15
        assert asset.tool.category == "Drilling"


class TestSaveBooking:
    """Tests for save_booking."""

    def test_replaces_by_code(self, asset_file):
        asset = load_asset(asset_file)
        block = asset.get_booking("MN0001")
        block.end_date_actual = "2024-03-12"
        save_booking(asset_file, block)
        reloaded = load_asset(asset_file).get_booking("MN0001")
        assert reloaded.end_date_actual == "2024-03-12"
        assert len(load_asset(asset_file).bookings) == 2

    def test_unknown_code_raises(self, asset_file):
        with pytest.raises(KeyError):
            save_booking(asset_file, Interval("2024-03-01", "2024-03-02", code="AL0999"))


class TestUpdateDeleteBooking:
    """Tests for index-based update_booking / delete_booking."""

    def test_update_booking(self, asset_file):
        update_booking(asset_file, 1, Interval("2024-03-12", "2024-03-14", status="maintenance", code="MN0001"))
        assert load_asset(asset_file).bookings[1].end_date_expected == "2024-03-14"

    def test_delete_booking(self, asset_file):
        delete_booking(asset_file, 0)
        codes = [b.code for b in load_asset(asset_file).bookings]
        assert codes == ["MN0001"]

    @pytest.mark.parametrize("index", [-1, 2])
    def test_index_out_of_range(self, asset_file, index):
        with pytest.raises(IndexError):
            delete_booking(asset_file, index)
        with pytest.raises(IndexError):
            update_booking(asset_file, index, Interval("2024-03-12", "2024-03-14"))


class TestCreateAndState:
    """Tests for create_asset / save_as_of_date."""

    def test_create_asset(self, tmp_path):
        path = tmp_path / "new.yaml"
        create_asset(path, Tool("Scaffold", "Access", "SCF-1", 12.5), as_of_date="2024-05-01")
        asset = load_asset(path)
        assert asset.tool.label == "Scaffold (SCF-1)"
        assert asset.tool.daily_rate == 12.5
        assert asset.bookings == []
        assert str(asset.as_of_date) == "2024-05-01"

    def test_save_as_of_date(self, asset_file):
        save_as_of_date(asset_file, "2024-04-02")
        assert str(load_asset(asset_file).as_of_date) == "2024-04-02"

    def test_save_as_of_date_creates_state(self, tmp_path):
        path = tmp_path / "nostate.yaml"
        create_asset(path, Tool("Ladder"))
        save_as_of_date(path, "2024-04-02")
        assert yaml.safe_load(path.read_text())["state"] == {"asOfDate": "2024-04-02"}
