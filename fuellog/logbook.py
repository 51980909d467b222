"""Logbook class - the snapshot of one user's fuel entries and reminders."""

from datetime import date
from typing import List, Optional

from .fuel_entry import FuelEntry
from .monthly_summary import FuelStats, MonthlySummary
from .processed_entry import ProcessedFuelEntry
from .processor import (
    aggregate_monthly,
    current_mileage,
    entries_in_month,
    fuel_stats,
    process_entries,
)
from .reminder import Reminder
from .reminder_due import ReminderDue
from .reminders import evaluate_reminders


class Logbook:
    """Fuel entries and reminders with the views derived from them."""

    def __init__(
        self,
        fuel_entries: Optional[List[FuelEntry]] = None,
        reminders: Optional[List[Reminder]] = None,
    ):
        self.fuel_entries = fuel_entries or []
        self.reminders = reminders or []

    @property
    def current_mileage(self) -> int:
        """Highest odometer reading on record, 0 for an empty logbook."""
        return current_mileage(self.fuel_entries)

    @property
    def processed_entries(self) -> List[ProcessedFuelEntry]:
        return process_entries(self.fuel_entries)

    @property
    def monthly_summaries(self) -> List[MonthlySummary]:
        return aggregate_monthly(self.processed_entries)

    @property
    def stats(self) -> FuelStats:
        return fuel_stats(self.processed_entries)

    def get_month_entries(self, year: int, month: int) -> List[ProcessedFuelEntry]:
        """Processed entries for one month, in date order."""
        return entries_in_month(self.processed_entries, year, month)

    def get_processed_sorted(self, reverse: bool = True) -> List[ProcessedFuelEntry]:
        """
        Processed entries for display.

        Args:
            reverse: If True, newest first (default)
        """
        processed = self.processed_entries
        if reverse:
            processed.reverse()
        return processed

    def get_reminder_status(self, today: Optional[date] = None) -> List[ReminderDue]:
        """Evaluate all reminders against the current mileage."""
        return evaluate_reminders(self.reminders, self.current_mileage, today)
