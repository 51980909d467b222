#!/usr/bin/env python3
"""Validate logbook YAML files against the schema and the record rules."""
import sys
from pathlib import Path

import yaml
from jsonschema import Draft7Validator

from fuellog import ValidationError, load_logbook, validate_fuel_entry
from fuellog.config import load_settings
from fuellog.reminders import validate_reminder


def load_schema() -> dict:
    """Load the JSON schema from schema.yaml."""
    schema_path = Path(__file__).parent / "schema.yaml"
    with open(schema_path) as f:
        return yaml.safe_load(f)


def _stringify_dates(value):
    """Unquoted YAML dates load as date objects; the schema expects strings."""
    if isinstance(value, dict):
        return {k: _stringify_dates(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_stringify_dates(v) for v in value]
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


def schema_errors(data: dict, schema: dict) -> list[str]:
    """Every schema violation in the document, in path order."""
    errors = []
    validator = Draft7Validator(schema)
    for error in sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path]):
        errors.append(f"Schema validation error: {error.message}")
        if error.path:
            errors.append(f"  at path: {'.'.join(str(p) for p in error.path)}")
    return errors


def record_errors(filepath: Path) -> list[str]:
    """Rules the schema can't express: unique ids and per-type reminder fields."""
    errors = []
    logbook = load_logbook(filepath)

    for kind, records, check in (
        ("fuel entry", logbook.fuel_entries, validate_fuel_entry),
        ("reminder", logbook.reminders, validate_reminder),
    ):
        seen = set()
        for record in records:
            if record.id in seen:
                errors.append(f"Duplicate {kind} id: {record.id}")
            seen.add(record.id)
            try:
                check(record)
            except ValidationError as e:
                errors.append(f"Invalid {kind} {record.id}: {e}")
    return errors


def validate_logbook_file(filepath: Path, schema: dict) -> list[str]:
    """Validate a single logbook YAML file. Returns list of errors."""
    try:
        with open(filepath) as f:
            data = yaml.load(f, Loader=yaml.SafeLoader)
    except yaml.YAMLError as e:
        return [f"YAML parse error: {e}"]
    except OSError as e:
        return [f"Error: {e}"]

    errors = schema_errors(_stringify_dates(data or {}), schema)
    if errors or not data:
        return errors
    return record_errors(filepath)


def main():
    """Validate all logbook YAML files in the data directory."""
    schema = load_schema()
    data_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else load_settings().data_dir

    if not data_dir.exists():
        print(f"Error: data directory not found: {data_dir}")
        return 1

    yaml_files = sorted(data_dir.glob("*.yaml")) + sorted(data_dir.glob("*.yml"))
    if not yaml_files:
        print(f"Warning: No logbooks found in {data_dir}")
        return 0

    failed = 0
    for filepath in yaml_files:
        errors = validate_logbook_file(filepath, schema)
        if not errors:
            print(f"OK: {filepath.name}")
            continue
        failed += 1
        print(f"FAIL: {filepath.name}")
        for error in errors:
            print(f"  {error}")

    print()
    print(f"{len(yaml_files) - failed} of {len(yaml_files)} logbooks valid")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
