#!/usr/bin/env python3
"""
Validate asset YAML files.

Checks each file against schema.yaml, with YAML dates read as ISO strings
the same way the loader reads them, then checks what the schema cannot
express: booking dates must parse and end on or after their start, and
booking codes must be unique within a file.
"""
import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, List

import yaml
from jsonschema import Draft202012Validator

from availability import parse_day


def load_schema() -> dict:
    """Load the JSON schema from schema.yaml."""
    schema_path = Path(__file__).parent / "schema.yaml"
    with open(schema_path) as f:
        return yaml.safe_load(f)


def _format_path(path) -> str:
    return ".".join(str(p) for p in path)


def check_bookings(bookings: List[Dict[str, Any]]) -> List[str]:
    """Date and code checks for schema-valid booking records."""
    errors = []
    seen = {}
    for i, booking in enumerate(bookings):
        where = f"bookings.{i}"
        try:
            start = parse_day(booking["startDate"])
            end = parse_day(booking.get("endDateActual") or booking["endDateExpected"])
        except ValueError as e:
            errors.append(f"Date error: {e}")
            errors.append(f"  at path: {where}")
            continue
        if end < start:
            errors.append(f"Date error: ends {end} before it starts {start}")
            errors.append(f"  at path: {where}")
        code = booking.get("code")
        if code:
            if code in seen:
                errors.append(f"Duplicate code {code} (also at bookings.{seen[code]})")
                errors.append(f"  at path: {where}.code")
            else:
                seen[code] = i
    return errors


def validate_asset_file(filepath: Path, schema: dict) -> list[str]:
    """Validate a single asset YAML file. Returns list of errors."""
    try:
        with open(filepath) as f:
            data = json.loads(json.dumps(yaml.safe_load(f), default=str))
    except yaml.YAMLError as e:
        return [f"YAML parse error: {e}"]
    except OSError as e:
        return [f"Error: {e}"]

    errors = []
    validator = Draft202012Validator(schema, format_checker=Draft202012Validator.FORMAT_CHECKER)
    for error in sorted(validator.iter_errors(data), key=lambda e: _format_path(e.path)):
        errors.append(f"Schema validation error: {error.message}")
        if error.path:
            errors.append(f"  at path: {_format_path(error.path)}")
    if errors:
        return errors

    return check_bookings(data.get("bookings") or [])


def main(argv=None):
    """Validate the given files, or every asset file in ASSETS_DIR."""
    parser = argparse.ArgumentParser(description="Validate asset YAML files")
    parser.add_argument("files", nargs="*", type=Path, help="Files to check (default: all in ASSETS_DIR)")
    args = parser.parse_args(argv)

    schema = load_schema()
    if args.files:
        yaml_files = args.files
    else:
        assets_dir = Path(os.environ.get("ASSETS_DIR", Path(__file__).parent / "assets"))
        if not assets_dir.exists():
            print(f"Error: assets directory not found: {assets_dir}")
            return 1
        yaml_files = list(assets_dir.glob("*.yaml")) + list(assets_dir.glob("*.yml"))
        if not yaml_files:
            print(f"Warning: No YAML files found in {assets_dir}")
            return 0

    all_valid = True
    for filepath in sorted(yaml_files):
        errors = validate_asset_file(filepath, schema)
        if errors:
            print(f"FAIL: {filepath.name}")
            for error in errors:
                print(f"  {error}")
            all_valid = False
        else:
            print(f"OK: {filepath.name}")

    return 0 if all_valid else 1


if __name__ == "__main__":
    sys.exit(main())
