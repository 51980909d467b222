"""
Vehicle fuel-expense tracking models.

This package provides the data models and calculations for a fuel log:
- FuelEntry / ProcessedFuelEntry: fill-up records and derived consumption
- MonthlySummary / FuelStats: aggregated spend and efficiency
- Reminder / ReminderDue / Status: maintenance reminders and their due state
- Logbook: one user's fuel entries and reminders
- LogbookStore: YAML persistence per user scope
- Advisor: optional natural-language summaries
"""

from .errors import (
    FuelLogError,
    ValidationError,
    NotFound,
    CollaboratorUnavailable,
    StoreUnavailable,
)
from .status import Status
from .fuel_type import FuelType
from .fuel_entry import FuelEntry
from .processed_entry import ProcessedFuelEntry
from .monthly_summary import MonthlySummary, FuelStats
from .reminder import Reminder, ReminderType
from .reminder_due import ReminderDue
from .calculations import (
    calc_liters,
    calc_distance,
    calc_avg_kmpl,
    calc_mean,
    calc_due_km,
    calc_due_date,
    check_due,
)
from .processor import (
    process_entries,
    aggregate_monthly,
    entries_in_month,
    current_mileage,
    fuel_stats,
)
from .entries import (
    new_fuel_entry,
    validate_fuel_entry,
    add_fuel_entry,
    edit_fuel_entry,
    delete_fuel_entry,
)
from .reminders import (
    create_reminder,
    evaluate_reminder,
    evaluate_reminders,
    is_due,
    complete_reminder,
    edit_reminder,
    delete_reminder,
)
from .logbook import Logbook
from .loader import LogbookStore, load_logbook, save_logbook
from .advisor import Advisor, DISABLED_MESSAGE

__all__ = [
    "FuelLogError",
    "ValidationError",
    "NotFound",
    "CollaboratorUnavailable",
    "StoreUnavailable",
    "Status",
    "FuelType",
    "FuelEntry",
    "ProcessedFuelEntry",
    "MonthlySummary",
    "FuelStats",
    "Reminder",
    "ReminderType",
    "ReminderDue",
    "calc_liters",
    "calc_distance",
    "calc_avg_kmpl",
    "calc_mean",
    "calc_due_km",
    "calc_due_date",
    "check_due",
    "process_entries",
    "aggregate_monthly",
    "entries_in_month",
    "current_mileage",
    "fuel_stats",
    "new_fuel_entry",
    "validate_fuel_entry",
    "add_fuel_entry",
    "edit_fuel_entry",
    "delete_fuel_entry",
    "create_reminder",
    "evaluate_reminder",
    "evaluate_reminders",
    "is_due",
    "complete_reminder",
    "edit_reminder",
    "delete_reminder",
    "Logbook",
    "LogbookStore",
    "load_logbook",
    "save_logbook",
    "Advisor",
    "DISABLED_MESSAGE",
]
