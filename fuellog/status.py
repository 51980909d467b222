"""Status enum for reminder urgency."""

from enum import Enum


class Status(Enum):
    """Reminder status categories. Lower value = more urgent."""

    DUE = 1
    PENDING = 2
    UNKNOWN = 3  # Threshold can't be computed (missing anchor or target)
