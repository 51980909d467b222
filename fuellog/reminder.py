"""Reminder class for maintenance reminders driven by mileage or date."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ReminderType(Enum):
    """Which dimension drives a reminder."""

    KM = "km"
    DATE = "date"

    @classmethod
    def parse(cls, value) -> "ReminderType":
        if isinstance(value, ReminderType):
            return value
        return cls(str(value).strip().lower())


@dataclass(frozen=True)
class Reminder:
    """
    A maintenance reminder.

    Only the attributes of its own type are populated:
    - KM: recurring_km_interval, last_completion_km, km_value
    - DATE: recurring_days_interval, last_completion_date, date_value

    Recurring reminders are due at anchor + interval. One-time reminders
    are due at a fixed target (km_value / date_value).
    """

    id: str
    name: str
    type: ReminderType
    is_recurring: bool = True
    recurring_km_interval: Optional[int] = None
    last_completion_km: Optional[int] = None
    km_value: Optional[int] = None
    recurring_days_interval: Optional[int] = None
    last_completion_date: Optional[str] = None  # 'YYYY-MM-DD'
    date_value: Optional[str] = None  # 'YYYY-MM-DD'

    @property
    def interval(self) -> Optional[int]:
        """Recurrence interval in km or days, None for one-time reminders."""
        if not self.is_recurring:
            return None
        if self.type == ReminderType.KM:
            return self.recurring_km_interval
        return self.recurring_days_interval

    @property
    def anchor(self):
        """Last completion mileage or date."""
        if self.type == ReminderType.KM:
            return self.last_completion_km
        return self.last_completion_date

    @property
    def describe_interval(self) -> str:
        """Short human-readable schedule, e.g. 'every 5,000 km'."""
        if self.type == ReminderType.KM:
            if self.is_recurring:
                return f"every {self.recurring_km_interval:,} km"
            if self.km_value is not None:
                return f"once at {self.km_value:,} km"
        else:
            if self.is_recurring:
                return f"every {self.recurring_days_interval} days"
            if self.date_value is not None:
                return f"once on {self.date_value}"
        return "-"
