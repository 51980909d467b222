"""YAML loading and saving utilities for logbook data."""

import json
import re
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from loguru import logger

from .entries import validate_fuel_entry
from .errors import StoreUnavailable, ValidationError
from .fuel_entry import FuelEntry
from .fuel_type import FuelType
from .logbook import Logbook
from .reminder import Reminder, ReminderType
from .reminders import check_reminder_fields

_SCOPE_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


def _json_default(value: Any) -> str:
    # YAML turns unquoted dates into date objects
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    raise TypeError(f"Unserializable value: {value!r}")


def _parse_object(dct: Dict[str, Any]) -> Union[FuelEntry, Reminder, Logbook, dict]:
    """Parse dictionary into appropriate object type."""
    # Fuel entry
    if "kmEnd" in dct and "totalValue" in dct:
        return FuelEntry(
            dct["id"],
            dct["date"],
            dct["totalValue"],
            dct["pricePerLiter"],
            dct["kmEnd"],
            FuelType.parse(dct.get("fuelType", FuelType.GASOLINE.value)),
            dct.get("notes") or "",
        )
    # Reminder
    elif "type" in dct and "name" in dct:
        return Reminder(
            id=dct["id"],
            name=dct["name"],
            type=ReminderType.parse(dct["type"]),
            is_recurring=dct.get("isRecurring", False),
            recurring_km_interval=dct.get("recurringKmInterval"),
            last_completion_km=dct.get("lastCompletionKm"),
            km_value=dct.get("kmValue"),
            recurring_days_interval=dct.get("recurringDaysInterval"),
            last_completion_date=dct.get("lastCompletionDate"),
            date_value=dct.get("dateValue"),
        )
    # Top-level logbook document
    elif "fuelEntries" in dct or "reminders" in dct:
        return Logbook(dct.get("fuelEntries"), dct.get("reminders"))
    else:
        return dct


def _entry_to_dict(entry: FuelEntry) -> Dict[str, Any]:
    """Serialize a FuelEntry to the YAML dict format (camelCase keys)."""
    d: Dict[str, Any] = {
        "id": entry.id,
        "date": entry.date,
        "totalValue": entry.total_value,
        "pricePerLiter": entry.price_per_liter,
        "kmEnd": entry.km_end,
        "fuelType": entry.fuel_type.value,
    }
    if entry.notes:
        d["notes"] = entry.notes
    return d


def _reminder_to_dict(reminder: Reminder) -> Dict[str, Any]:
    """Serialize a Reminder to the YAML dict format, omitting None values."""
    d: Dict[str, Any] = {
        "id": reminder.id,
        "name": reminder.name,
        "type": reminder.type.value,
        "isRecurring": reminder.is_recurring,
    }
    optional = {
        "recurringKmInterval": reminder.recurring_km_interval,
        "lastCompletionKm": reminder.last_completion_km,
        "kmValue": reminder.km_value,
        "recurringDaysInterval": reminder.recurring_days_interval,
        "lastCompletionDate": reminder.last_completion_date,
        "dateValue": reminder.date_value,
    }
    for key, value in optional.items():
        if value is not None:
            d[key] = value
    return d


def load_logbook(filename: Union[str, Path]) -> Logbook:
    """Load a logbook from a YAML file. An empty file is an empty logbook."""
    with open(filename, "rb") as fp:
        raw = yaml.load(fp, Loader=yaml.SafeLoader)
    if not raw:
        return Logbook()
    json_data = json.dumps(raw, indent=4, default=_json_default)
    parsed = json.loads(json_data, object_hook=_parse_object)
    if not isinstance(parsed, Logbook):
        raise ValueError(f"{filename} is not a logbook document")
    return parsed


def save_logbook(
    filename: Union[str, Path],
    fuel_entries: Optional[List[FuelEntry]] = None,
    reminders: Optional[List[Reminder]] = None,
) -> None:
    """
    Write collections to a logbook YAML file.

    Only the collections that are passed are replaced; the rest of the
    document is left as it was.
    """
    path = Path(filename)
    data: Dict[str, Any] = {}
    if path.exists():
        with open(path, "r") as fp:
            data = yaml.load(fp, Loader=yaml.SafeLoader) or {}

    if fuel_entries is not None:
        data["fuelEntries"] = [_entry_to_dict(e) for e in fuel_entries]
    if reminders is not None:
        data["reminders"] = [_reminder_to_dict(r) for r in reminders]
    data.setdefault("fuelEntries", [])
    data.setdefault("reminders", [])

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as fp:
        yaml.dump(
            data,
            fp,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
            width=120,
        )


def check_records(logbook: Logbook) -> None:
    """Raise ValidationError if a loaded record can't be processed."""
    for key, records in (("fuelEntries", logbook.fuel_entries), ("reminders", logbook.reminders)):
        if not isinstance(records, list):
            raise ValidationError(f"{key} must be a list")
    for entry in logbook.fuel_entries:
        if not isinstance(entry, FuelEntry):
            raise ValidationError(f"Unrecognized fuel entry record: {entry!r}")
        validate_fuel_entry(entry)
    for reminder in logbook.reminders:
        if not isinstance(reminder, Reminder):
            raise ValidationError(f"Unrecognized reminder record: {reminder!r}")
        check_reminder_fields(reminder)


class LogbookStore:
    """One YAML logbook document per user scope inside a data directory."""

    def __init__(self, data_dir: Union[str, Path]):
        self.data_dir = Path(data_dir)

    def path_for(self, user_scope: str) -> Path:
        """File backing a user scope."""
        if not user_scope or not _SCOPE_PATTERN.match(user_scope) or user_scope.startswith("."):
            raise ValidationError(f"Invalid user scope: {user_scope!r}")
        return self.data_dir / f"{user_scope}.yaml"

    def scopes(self) -> List[str]:
        """User scopes that have a logbook on disk."""
        if not self.data_dir.exists():
            return []
        return sorted(p.stem for p in self.data_dir.glob("*.yaml"))

    def load(self, user_scope: str) -> Logbook:
        """Load a scope's logbook. A scope with no file yet is empty."""
        path = self.path_for(user_scope)
        if not path.exists():
            return Logbook()
        try:
            logbook = load_logbook(path)
        except (OSError, yaml.YAMLError, KeyError, TypeError, ValueError) as e:
            logger.error("Failed to load logbook {}: {}", path, e)
            raise StoreUnavailable(f"Could not load logbook '{user_scope}'", e) from e
        try:
            check_records(logbook)
        except ValidationError as e:
            logger.error("Logbook {} holds an invalid record: {}", path, e)
            raise StoreUnavailable(f"Logbook '{user_scope}' holds an invalid record", e) from e
        return logbook

    def save(
        self,
        user_scope: str,
        fuel_entries: Optional[List[FuelEntry]] = None,
        reminders: Optional[List[Reminder]] = None,
    ) -> None:
        """Persist the given collections for a scope."""
        path = self.path_for(user_scope)
        try:
            save_logbook(path, fuel_entries=fuel_entries, reminders=reminders)
        except (OSError, yaml.YAMLError, TypeError) as e:
            logger.error("Failed to save logbook {}: {}", path, e)
            raise StoreUnavailable(f"Could not save logbook '{user_scope}'", e) from e
        logger.debug("Saved logbook {}", path)
