"""ReminderDue dataclass for evaluated reminder status."""

from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from .status import Status

if TYPE_CHECKING:
    from .reminder import Reminder


@dataclass
class ReminderDue:
    """Calculated due information for a reminder."""

    reminder: "Reminder"
    status: Status
    due_km: Optional[int] = None
    due_date: Optional[str] = None
    km_remaining: Optional[int] = None
    days_remaining: Optional[int] = None

    @property
    def is_due(self) -> bool:
        return self.status == Status.DUE
