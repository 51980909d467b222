"""Validate, add, edit and delete fuel entries on a snapshot."""

import uuid
from typing import List, Optional

from loguru import logger

from .calculations import parse_timestamp
from .errors import NotFound, ValidationError
from .fuel_entry import FuelEntry
from .fuel_type import FuelType

_EDITABLE_FIELDS = (
    "date",
    "total_value",
    "price_per_liter",
    "km_end",
    "fuel_type",
    "notes",
)


def validate_fuel_entry(entry: FuelEntry) -> None:
    """Raise ValidationError if the entry can't be stored."""
    if not entry.id or not str(entry.id).strip():
        raise ValidationError("Fuel entry id must not be empty")
    try:
        parse_timestamp(entry.date)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date: {entry.date!r}")
    if not isinstance(entry.fuel_type, FuelType):
        raise ValidationError(f"Invalid fuel type: {entry.fuel_type!r}")
    for name in ("total_value", "price_per_liter"):
        value = getattr(entry, name)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            raise ValidationError(f"{name} must be a positive number, got {value!r}")
    if isinstance(entry.km_end, bool) or not isinstance(entry.km_end, int) or entry.km_end < 0:
        raise ValidationError(f"km_end must be a non-negative integer, got {entry.km_end!r}")


def new_fuel_entry(
    date: str,
    total_value: float,
    price_per_liter: float,
    km_end: int,
    fuel_type: FuelType = FuelType.GASOLINE,
    notes: str = "",
    entry_id: Optional[str] = None,
) -> FuelEntry:
    """Build a fuel entry, generating an id if none is given."""
    return FuelEntry(
        id=entry_id or uuid.uuid4().hex,
        date=date,
        total_value=total_value,
        price_per_liter=price_per_liter,
        km_end=km_end,
        fuel_type=fuel_type,
        notes=notes,
    )


def find_fuel_entry(entries: List[FuelEntry], entry_id: str) -> FuelEntry:
    """Return the entry with the given id or raise NotFound."""
    for entry in entries:
        if entry.id == entry_id:
            return entry
    raise NotFound("fuel entry", entry_id)


def add_fuel_entry(entries: List[FuelEntry], entry: FuelEntry) -> List[FuelEntry]:
    """Return a new collection with the entry appended."""
    validate_fuel_entry(entry)
    if any(e.id == entry.id for e in entries):
        raise ValidationError(f"Fuel entry id '{entry.id}' already exists")
    logger.debug("Adding fuel entry {} at {} km", entry.id, entry.km_end)
    return list(entries) + [entry]


def edit_fuel_entry(entries: List[FuelEntry], entry_id: str, **changes) -> List[FuelEntry]:
    """
    Return a new collection with the entry's fields replaced.

    The id can't change. Unknown field names are a ValidationError.
    """
    current = find_fuel_entry(entries, entry_id)
    if "id" in changes and changes["id"] != entry_id:
        raise ValidationError("Fuel entry id is immutable")
    changes.pop("id", None)
    unknown = set(changes) - set(_EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown fuel entry fields: {', '.join(sorted(unknown))}")

    fields = {name: getattr(current, name) for name in _EDITABLE_FIELDS}
    fields.update(changes)
    updated = FuelEntry(id=entry_id, **fields)
    validate_fuel_entry(updated)

    logger.debug("Editing fuel entry {}", entry_id)
    return [updated if e.id == entry_id else e for e in entries]


def delete_fuel_entry(entries: List[FuelEntry], entry_id: str) -> List[FuelEntry]:
    """Return a new collection without the entry."""
    find_fuel_entry(entries, entry_id)
    logger.debug("Deleting fuel entry {}", entry_id)
    return [e for e in entries if e.id != entry_id]
