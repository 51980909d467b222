"""
Reminder lifecycle: create, evaluate, complete, edit and delete.

Every operation takes the current reminder collection and returns a new
one; the input list and its reminders are never modified. Due status is
computed on read from the anchor (last completion) and is never stored.

Completing a recurring reminder moves its anchor to the current mileage
(km reminders) or today (date reminders). Completing a one-time reminder
removes it.
"""

import dataclasses
import uuid
from datetime import date
from typing import List, Optional, Tuple

from loguru import logger

from .calculations import calc_due_date, calc_due_km, check_due, parse_day
from .errors import NotFound, ValidationError
from .reminder import Reminder, ReminderType
from .reminder_due import ReminderDue
from .status import Status

_KM_FIELDS = ("recurring_km_interval", "last_completion_km", "km_value")
_DATE_FIELDS = ("recurring_days_interval", "last_completion_date", "date_value")
_EDITABLE_FIELDS = ("name", "type", "is_recurring") + _KM_FIELDS + _DATE_FIELDS


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_day(value, field: str) -> None:
    try:
        parse_day(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a YYYY-MM-DD date, got {value!r}")


def _normalize(reminder: Reminder) -> Reminder:
    """Clear the attribute family that doesn't belong to the reminder's type."""
    unused = _DATE_FIELDS if reminder.type == ReminderType.KM else _KM_FIELDS
    cleared = {name: None for name in unused}
    if reminder.is_recurring:
        cleared["km_value" if reminder.type == ReminderType.KM else "date_value"] = None
    else:
        cleared[
            "recurring_km_interval"
            if reminder.type == ReminderType.KM
            else "recurring_days_interval"
        ] = None
    return dataclasses.replace(reminder, **cleared)


def check_reminder_fields(reminder: Reminder) -> None:
    """
    Raise ValidationError if a field holds a value of the wrong kind.

    Completeness isn't checked here: a stored reminder that lacks its
    anchor or target is still readable and evaluates as UNKNOWN.
    """
    if not isinstance(reminder.id, str) or not reminder.id.strip():
        raise ValidationError("Reminder id must not be empty")
    if not isinstance(reminder.name, str):
        raise ValidationError(f"Reminder name must be text, got {reminder.name!r}")
    if not isinstance(reminder.type, ReminderType):
        raise ValidationError(f"Invalid reminder type: {reminder.type!r}")
    if not isinstance(reminder.is_recurring, bool):
        raise ValidationError(f"is_recurring must be true or false, got {reminder.is_recurring!r}")
    for name in ("recurring_km_interval", "last_completion_km", "km_value", "recurring_days_interval"):
        value = getattr(reminder, name)
        if value is not None and not _is_int(value):
            raise ValidationError(f"{name} must be an integer, got {value!r}")
    for name in ("last_completion_date", "date_value"):
        value = getattr(reminder, name)
        if value is not None and not isinstance(value, str):
            raise ValidationError(f"{name} must be a YYYY-MM-DD string, got {value!r}")


def validate_reminder(reminder: Reminder) -> None:
    """Raise ValidationError if the reminder can't be stored."""
    check_reminder_fields(reminder)
    if not reminder.name.strip():
        raise ValidationError("Reminder name must not be empty")

    if reminder.type == ReminderType.KM:
        if reminder.is_recurring:
            interval = reminder.recurring_km_interval
            if not _is_int(interval) or interval <= 0:
                raise ValidationError(
                    f"Recurring km reminders need a positive km interval, got {interval!r}"
                )
        elif not _is_int(reminder.km_value) or reminder.km_value < 0:
            raise ValidationError(
                f"One-time km reminders need a target mileage, got {reminder.km_value!r}"
            )
        anchor = reminder.last_completion_km
        if anchor is not None and (not _is_int(anchor) or anchor < 0):
            raise ValidationError(
                f"last_completion_km must be a non-negative integer, got {anchor!r}"
            )
        if reminder.is_recurring and anchor is None:
            raise ValidationError("Recurring km reminders need a last completion mileage")
    else:
        if reminder.is_recurring:
            interval = reminder.recurring_days_interval
            if not _is_int(interval) or interval <= 0:
                raise ValidationError(
                    f"Recurring date reminders need a positive day interval, got {interval!r}"
                )
            if reminder.last_completion_date is None:
                raise ValidationError("Recurring date reminders need a last completion date")
        elif reminder.date_value is None:
            raise ValidationError("One-time date reminders need a target date")
        if reminder.last_completion_date is not None:
            _check_day(reminder.last_completion_date, "last_completion_date")
        if reminder.date_value is not None:
            _check_day(reminder.date_value, "date_value")


def find_reminder(reminders: List[Reminder], reminder_id: str) -> Reminder:
    """Return the reminder with the given id or raise NotFound."""
    for reminder in reminders:
        if reminder.id == reminder_id:
            return reminder
    raise NotFound("reminder", reminder_id)


def create_reminder(
    reminders: List[Reminder],
    name: str,
    reminder_type,
    is_recurring: bool = True,
    interval: Optional[int] = None,
    anchor=None,
    target=None,
    current_mileage: int = 0,
    today: Optional[date] = None,
    reminder_id: Optional[str] = None,
) -> Tuple[List[Reminder], Reminder]:
    """
    Create a reminder and return (new collection, new reminder).

    Args:
        interval: km or days between completions (recurring only)
        anchor: last completion mileage/date, defaults to current mileage/today
        target: one-time due mileage/date (non-recurring only)
    """
    try:
        kind = ReminderType.parse(reminder_type)
    except ValueError:
        raise ValidationError(f"Invalid reminder type: {reminder_type!r}")
    if isinstance(name, str):
        name = name.strip()
    today = today or date.today()
    reminder_id = reminder_id or uuid.uuid4().hex
    if any(r.id == reminder_id for r in reminders):
        raise ValidationError(f"Reminder id '{reminder_id}' already exists")

    if kind == ReminderType.KM:
        reminder = Reminder(
            id=reminder_id,
            name=name,
            type=kind,
            is_recurring=is_recurring,
            recurring_km_interval=interval if is_recurring else None,
            last_completion_km=anchor if anchor is not None else current_mileage,
            km_value=None if is_recurring else target,
        )
    else:
        if isinstance(anchor, date):
            anchor = anchor.isoformat()
        if isinstance(target, date):
            target = target.isoformat()
        reminder = Reminder(
            id=reminder_id,
            name=name,
            type=kind,
            is_recurring=is_recurring,
            recurring_days_interval=interval if is_recurring else None,
            last_completion_date=anchor or today.isoformat(),
            date_value=None if is_recurring else target,
        )
    validate_reminder(reminder)

    logger.info("Created {} reminder '{}' ({})", kind.value, reminder.name, reminder.id)
    return list(reminders) + [reminder], reminder


def evaluate_reminder(
    reminder: Reminder, current_mileage: int, today: Optional[date] = None
) -> ReminderDue:
    """
    Calculate whether a reminder is due.

    - Recurring km: due once current - last_completion_km >= interval
    - Recurring date: due once today - last_completion_date >= interval days
    - One-time: due once the target mileage/date is reached
    - UNKNOWN when the threshold can't be computed from the stored data
    """
    today = today or date.today()

    if reminder.type == ReminderType.KM:
        due_km = calc_due_km(reminder.last_completion_km, reminder.interval, reminder.km_value)
        if due_km is None:
            return ReminderDue(reminder=reminder, status=Status.UNKNOWN)
        status = Status.DUE if check_due(current_mileage, due_km) else Status.PENDING
        return ReminderDue(
            reminder=reminder,
            status=status,
            due_km=due_km,
            km_remaining=due_km - current_mileage,
        )

    try:
        last_date = parse_day(reminder.last_completion_date) if reminder.last_completion_date else None
        target = parse_day(reminder.date_value) if reminder.date_value else None
    except ValueError:
        logger.warning("Reminder {} has an unreadable date", reminder.id)
        return ReminderDue(reminder=reminder, status=Status.UNKNOWN)

    due_date = calc_due_date(last_date, reminder.interval, target)
    if due_date is None:
        return ReminderDue(reminder=reminder, status=Status.UNKNOWN)
    status = (
        Status.DUE if check_due(today.toordinal(), due_date.toordinal()) else Status.PENDING
    )
    return ReminderDue(
        reminder=reminder,
        status=status,
        due_date=due_date.isoformat(),
        days_remaining=(due_date - today).days,
    )


def is_due(reminder: Reminder, current_mileage: int, today: Optional[date] = None) -> bool:
    """True when the reminder has reached its next threshold."""
    return evaluate_reminder(reminder, current_mileage, today).is_due


def evaluate_reminders(
    reminders: List[Reminder], current_mileage: int, today: Optional[date] = None
) -> List[ReminderDue]:
    """Evaluate all reminders, most urgent first."""
    today = today or date.today()
    statuses = [evaluate_reminder(r, current_mileage, today) for r in reminders]
    statuses.sort(key=lambda s: (s.status.value, s.reminder.name.lower()))
    return statuses


def complete_reminder(
    reminders: List[Reminder],
    reminder_id: str,
    current_mileage: int,
    today: Optional[date] = None,
) -> List[Reminder]:
    """
    Mark a reminder as done.

    Recurring reminders get a new anchor; one-time reminders are removed.
    """
    reminder = find_reminder(reminders, reminder_id)
    if not reminder.is_recurring:
        logger.info("Completed one-time reminder '{}' ({}), removing it", reminder.name, reminder.id)
        return [r for r in reminders if r.id != reminder_id]

    today = today or date.today()
    if reminder.type == ReminderType.KM:
        updated = dataclasses.replace(reminder, last_completion_km=current_mileage)
    else:
        updated = dataclasses.replace(reminder, last_completion_date=today.isoformat())
    logger.info("Completed reminder '{}' ({}), anchor now {}", reminder.name, reminder.id, updated.anchor)
    return [updated if r.id == reminder_id else r for r in reminders]


def edit_reminder(reminders: List[Reminder], reminder_id: str, **changes) -> List[Reminder]:
    """
    Replace fields of a reminder. The id is immutable.

    Fields of the other reminder type are cleared, so switching a reminder
    from km to date needs the date fields supplied in the same edit.
    """
    current = find_reminder(reminders, reminder_id)
    if "id" in changes and changes["id"] != reminder_id:
        raise ValidationError("Reminder id is immutable")
    changes.pop("id", None)
    unknown = set(changes) - set(_EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown reminder fields: {', '.join(sorted(unknown))}")
    if "type" in changes:
        try:
            changes["type"] = ReminderType.parse(changes["type"])
        except ValueError:
            raise ValidationError(f"Invalid reminder type: {changes['type']!r}")
    if isinstance(changes.get("name"), str):
        changes["name"] = changes["name"].strip()

    updated = _normalize(dataclasses.replace(current, **changes))
    validate_reminder(updated)

    logger.info("Edited reminder '{}' ({})", updated.name, reminder_id)
    return [updated if r.id == reminder_id else r for r in reminders]


def delete_reminder(reminders: List[Reminder], reminder_id: str) -> List[Reminder]:
    """Remove a reminder. Confirmation is up to the caller."""
    reminder = find_reminder(reminders, reminder_id)
    logger.info("Deleted reminder '{}' ({})", reminder.name, reminder_id)
    return [r for r in reminders if r.id != reminder_id]
