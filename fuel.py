#!/usr/bin/env python3
"""
Unified CLI for vehicle fuel tracking.

Commands:
  stats            - Show overall spend and consumption
  entries          - List fill-ups with derived distance and km/L
  monthly          - Show the monthly spend/efficiency series
  add-entry        - Record a fill-up
  edit-entry       - Change a fill-up
  delete-entry     - Remove a fill-up
  reminders        - Show which reminders are due
  add-reminder     - Create a maintenance reminder
  edit-reminder    - Change a reminder
  complete         - Mark a reminder as done
  delete-reminder  - Remove a reminder
  summarize        - AI summary of one month
  trip             - AI trip cost estimate
"""

import argparse
import sys
from datetime import date
from pathlib import Path
from tabulate import tabulate
from typing import List, Optional

from loguru import logger

from fuellog import (
    Advisor,
    FuelLogError,
    FuelType,
    LogbookStore,
    MonthlySummary,
    ProcessedFuelEntry,
    ReminderDue,
    ReminderType,
    Status,
    add_fuel_entry,
    complete_reminder,
    create_reminder,
    delete_fuel_entry,
    delete_reminder,
    edit_fuel_entry,
    edit_reminder,
    new_fuel_entry,
)
from fuellog.config import configure_logging, load_settings

# =============================================================================
# Formatting helpers
# =============================================================================


def format_km(km: Optional[float]) -> str:
    """Format a distance or odometer reading for display."""
    return f"{km:,.0f}" if km is not None else "-"


def format_money(value: Optional[float]) -> str:
    """Format a currency amount for display."""
    return f"{value:,.2f}" if value is not None else "-"


def format_kmpl(value: Optional[float]) -> str:
    """Format consumption for display."""
    return f"{value:.1f}" if value is not None else "-"


def format_liters(value: Optional[float]) -> str:
    """Format a volume for display."""
    return f"{value:.2f}" if value is not None else "-"


def format_remaining(svc: ReminderDue) -> str:
    """Format what is left before a reminder is due (e.g. '1,200 km' or '-3d')."""
    if svc.km_remaining is not None:
        if svc.km_remaining < 0:
            return f"-{abs(svc.km_remaining):,} km"
        return f"{svc.km_remaining:,} km"
    if svc.days_remaining is not None:
        return f"{svc.days_remaining}d"
    return "-"


def truncate(text: Optional[str], max_len: int = 30) -> str:
    """Truncate text with ellipsis if too long."""
    if not text:
        return "-"
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def parse_month(value: str) -> tuple:
    """Parse 'YYYY-MM' into (year, month)."""
    try:
        year_str, month_str = value.split("-")
        year, month = int(year_str), int(month_str)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM, got {value!r}")
    if not 1 <= month <= 12:
        raise argparse.ArgumentTypeError(f"month out of range in {value!r}")
    return year, month


def parse_fuel_type(value: str) -> FuelType:
    try:
        return FuelType.parse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def confirm(prompt: str) -> bool:
    """Ask a yes/no question on stdin."""
    answer = input(f"{prompt} [y/N] ")
    return answer.strip().lower() in ("y", "yes")


# =============================================================================
# Fuel commands
# =============================================================================


def make_entries_table(entries: List[ProcessedFuelEntry]) -> List[List[str]]:
    """Convert processed entries to table rows."""
    rows = []
    for e in entries:
        rows.append(
            [
                e.timestamp.date().isoformat(),
                format_km(e.km_end),
                format_km(e.distance),
                format_money(e.total_value),
                format_money(e.price_per_liter),
                format_liters(e.liters),
                format_kmpl(e.avg_kmpl),
                e.fuel_type.name.lower(),
                truncate(e.notes),
                e.id,
            ]
        )
    return rows


def make_monthly_table(summaries: List[MonthlySummary]) -> List[List[str]]:
    """Convert monthly summaries to table rows."""
    return [
        [
            s.label,
            str(s.entry_count),
            format_money(s.total_spend),
            format_km(s.total_distance),
            format_liters(s.total_liters),
            format_kmpl(s.mean_avg_kmpl),
        ]
        for s in summaries
    ]


def cmd_stats(args, store: LogbookStore):
    """Show overall spend and consumption."""
    logbook = store.load(args.scope)
    stats = logbook.stats

    print(f"Logbook: {args.scope}")
    print(f"Current mileage: {format_km(logbook.current_mileage)} km")
    print(f"Fill-ups: {stats.entry_count}")
    print(f"Total spend: {format_money(stats.total_spend)}")
    print(f"Total liters: {format_liters(stats.total_liters)}")
    print(f"Distance tracked: {format_km(stats.total_distance)} km")
    print(f"Average consumption: {format_kmpl(stats.avg_kmpl)} km/L")
    print(f"Average price per liter: {format_money(stats.avg_price_per_liter)}")

    due = [s for s in logbook.get_reminder_status() if s.is_due]
    if due:
        print()
        print(f"Reminders due: {', '.join(s.reminder.name for s in due)}")
    return 0


def cmd_entries(args, store: LogbookStore):
    """List fill-ups."""
    logbook = store.load(args.scope)
    entries = logbook.get_processed_sorted(reverse=not args.asc)
    if args.month:
        year, month = args.month
        entries = [e for e in entries if (e.timestamp.year, e.timestamp.month) == (year, month)]

    print(f"Logbook: {args.scope}")
    print(f"Fill-ups: {len(logbook.fuel_entries)}")
    if args.month:
        print(f"Showing: {len(entries)} (filtered)")
    print()

    if not entries:
        print("No fuel entries found.")
        return 0

    headers = ["Date", "Odometer", "Distance", "Total", "Price/L", "Liters", "km/L", "Fuel", "Notes", "Id"]
    print(tabulate(make_entries_table(entries), headers=headers, tablefmt="simple"))
    return 0


def cmd_monthly(args, store: LogbookStore):
    """Show the monthly series."""
    logbook = store.load(args.scope)
    summaries = logbook.monthly_summaries
    if not summaries:
        print("No fuel entries found.")
        return 0
    headers = ["Month", "Fill-ups", "Spend", "Distance", "Liters", "Mean km/L"]
    print(tabulate(make_monthly_table(summaries), headers=headers, tablefmt="simple"))
    return 0


def cmd_add_entry(args, store: LogbookStore):
    """Record a fill-up."""
    logbook = store.load(args.scope)
    entry = new_fuel_entry(
        date=args.date or date.today().isoformat(),
        total_value=args.total,
        price_per_liter=args.price,
        km_end=args.km,
        fuel_type=args.fuel,
        notes=args.notes or "",
    )
    entries = add_fuel_entry(logbook.fuel_entries, entry)

    print(f"Adding fill-up to {args.scope}:")
    print(f"  Date:     {entry.date}")
    print(f"  Odometer: {format_km(entry.km_end)} km")
    print(f"  Total:    {format_money(entry.total_value)}")
    print(f"  Price/L:  {format_money(entry.price_per_liter)}")
    print(f"  Liters:   {format_liters(entry.liters)}")
    print(f"  Fuel:     {entry.fuel_type.name.lower()}")
    if entry.notes:
        print(f"  Notes:    {entry.notes}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    store.save(args.scope, fuel_entries=entries)
    print(f"Entry saved ({entry.id}).")
    return 0


def cmd_edit_entry(args, store: LogbookStore):
    """Change fields of a fill-up."""
    logbook = store.load(args.scope)
    changes = {}
    if args.date is not None:
        changes["date"] = args.date
    if args.total is not None:
        changes["total_value"] = args.total
    if args.price is not None:
        changes["price_per_liter"] = args.price
    if args.km is not None:
        changes["km_end"] = args.km
    if args.fuel is not None:
        changes["fuel_type"] = args.fuel
    if args.notes is not None:
        changes["notes"] = args.notes
    if not changes:
        print("Error: nothing to change")
        return 1

    entries = edit_fuel_entry(logbook.fuel_entries, args.entry_id, **changes)
    store.save(args.scope, fuel_entries=entries)
    print(f"Entry {args.entry_id} updated.")
    return 0


def cmd_delete_entry(args, store: LogbookStore):
    """Remove a fill-up."""
    logbook = store.load(args.scope)
    entries = delete_fuel_entry(logbook.fuel_entries, args.entry_id)
    if not args.yes and not confirm(f"Delete fuel entry {args.entry_id}?"):
        print("Cancelled.")
        return 0
    store.save(args.scope, fuel_entries=entries)
    print(f"Entry {args.entry_id} deleted.")
    return 0


# =============================================================================
# Reminder commands
# =============================================================================


def make_reminder_table(statuses: List[ReminderDue]) -> List[List[str]]:
    """Convert reminder statuses to table rows."""
    rows = []
    for svc in statuses:
        reminder = svc.reminder
        if reminder.type == ReminderType.KM:
            last_done = format_km(reminder.last_completion_km)
            due_at = format_km(svc.due_km)
        else:
            last_done = reminder.last_completion_date or "-"
            due_at = svc.due_date or "-"
        rows.append(
            [
                reminder.name,
                reminder.describe_interval,
                last_done,
                due_at,
                format_remaining(svc),
                reminder.id,
            ]
        )
    return rows


def cmd_reminders(args, store: LogbookStore):
    """Show which reminders are due."""
    logbook = store.load(args.scope)
    statuses = logbook.get_reminder_status()

    print(f"Logbook: {args.scope}")
    print(f"Current mileage: {format_km(logbook.current_mileage)} km")
    print(f"Reminders: {len(statuses)}")
    print()

    headers = ["Reminder", "Schedule", "Last Done", "Due At", "Remaining", "Id"]
    due = [s for s in statuses if s.status == Status.DUE]
    pending = [s for s in statuses if s.status == Status.PENDING]
    unknown = [s for s in statuses if s.status == Status.UNKNOWN]

    if due:
        print("DUE:")
        print(tabulate(make_reminder_table(due), headers=headers, tablefmt="simple"))
        print()

    if pending:
        print("PENDING:")
        print(tabulate(make_reminder_table(pending), headers=headers, tablefmt="simple"))
        print()

    if unknown:
        print("UNKNOWN (incomplete reminder data):")
        for svc in unknown:
            print(f"  {svc.reminder.name}")
        print()

    if not statuses:
        print("No reminders.")
    return 0


def cmd_add_reminder(args, store: LogbookStore):
    """Create a maintenance reminder."""
    logbook = store.load(args.scope)
    kind = ReminderType.parse(args.type)
    anchor = args.anchor
    target = args.target
    if kind == ReminderType.KM:
        try:
            anchor = int(anchor) if anchor is not None else None
            target = int(target) if target is not None else None
        except ValueError:
            print("Error: --anchor and --target must be whole kilometers for km reminders")
            return 1

    reminders, reminder = create_reminder(
        logbook.reminders,
        name=args.name,
        reminder_type=kind,
        is_recurring=not args.once,
        interval=args.interval,
        anchor=anchor,
        target=target,
        current_mileage=logbook.current_mileage,
    )

    print(f"Adding reminder to {args.scope}:")
    print(f"  Name:     {reminder.name}")
    print(f"  Schedule: {reminder.describe_interval}")
    print(f"  Anchor:   {reminder.anchor}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    store.save(args.scope, reminders=reminders)
    print(f"Reminder saved ({reminder.id}).")
    return 0


def cmd_edit_reminder(args, store: LogbookStore):
    """Change fields of a reminder."""
    logbook = store.load(args.scope)
    changes = {}
    if args.name is not None:
        changes["name"] = args.name
    if args.km_interval is not None:
        changes["recurring_km_interval"] = args.km_interval
    if args.days_interval is not None:
        changes["recurring_days_interval"] = args.days_interval
    if args.last_km is not None:
        changes["last_completion_km"] = args.last_km
    if args.last_date is not None:
        changes["last_completion_date"] = args.last_date
    if not changes:
        print("Error: nothing to change")
        return 1

    reminders = edit_reminder(logbook.reminders, args.reminder_id, **changes)
    store.save(args.scope, reminders=reminders)
    print(f"Reminder {args.reminder_id} updated.")
    return 0


def cmd_complete(args, store: LogbookStore):
    """Mark a reminder as done."""
    logbook = store.load(args.scope)
    mileage = args.mileage if args.mileage is not None else logbook.current_mileage
    before = len(logbook.reminders)
    reminders = complete_reminder(logbook.reminders, args.reminder_id, mileage)
    store.save(args.scope, reminders=reminders)
    if len(reminders) < before:
        print(f"One-time reminder {args.reminder_id} completed and removed.")
    else:
        print(f"Reminder {args.reminder_id} completed.")
    return 0


def cmd_delete_reminder(args, store: LogbookStore):
    """Remove a reminder."""
    logbook = store.load(args.scope)
    reminders = delete_reminder(logbook.reminders, args.reminder_id)
    if not args.yes and not confirm(f"Delete reminder {args.reminder_id}?"):
        print("Cancelled.")
        return 0
    store.save(args.scope, reminders=reminders)
    print(f"Reminder {args.reminder_id} deleted.")
    return 0


# =============================================================================
# AI commands
# =============================================================================


def cmd_summarize(args, store: LogbookStore, advisor: Advisor):
    """Print an AI summary of one month."""
    logbook = store.load(args.scope)
    year, month = args.month
    entries = logbook.get_month_entries(year, month)
    label = MonthlySummary(year=year, month=month).display_name
    print(advisor.summarize_month(entries, label))
    return 0


def cmd_trip(args, store: LogbookStore, advisor: Advisor):
    """Print an AI trip cost estimate."""
    avg = args.avg
    if avg is None:
        avg = store.load(args.scope).stats.avg_kmpl
        if avg is None:
            print("Error: no consumption data yet, pass --avg")
            return 1
    print(advisor.estimate_trip(args.distance, avg))
    return 0


# =============================================================================
# Main
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Vehicle fuel tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s me stats
  %(prog)s me entries --month 2025-01
  %(prog)s me add-entry --date 2025-01-20 --total 120 --price 6 --km 10400
  %(prog)s me add-reminder "Oil change" --type km --interval 5000
  %(prog)s me add-reminder "Insurance" --type date --once --target 2025-09-01
  %(prog)s me complete 3f2a...
  %(prog)s me summarize 2025-01
  %(prog)s me trip 450
""",
    )
    parser.add_argument("scope", type=str, help="Logbook (user scope) name")
    parser.add_argument(
        "--data-dir",
        type=Path,
        help="Directory holding logbook YAML files (default: $FUELLOG_DATA_DIR or ./data)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("stats", help="Show overall spend and consumption")

    entries_parser = subparsers.add_parser("entries", help="List fill-ups")
    entries_parser.add_argument("--month", type=parse_month, help="Only this month (YYYY-MM)")
    entries_parser.add_argument("--asc", action="store_true", help="Oldest first")

    subparsers.add_parser("monthly", help="Show the monthly spend/efficiency series")

    add_entry_parser = subparsers.add_parser("add-entry", help="Record a fill-up")
    add_entry_parser.add_argument("--date", type=str, help="Fill-up date YYYY-MM-DD (default: today)")
    add_entry_parser.add_argument("--total", type=float, required=True, help="Total paid")
    add_entry_parser.add_argument("--price", type=float, required=True, help="Price per liter")
    add_entry_parser.add_argument("--km", type=int, required=True, help="Odometer reading")
    add_entry_parser.add_argument(
        "--fuel", type=parse_fuel_type, default=FuelType.GASOLINE, help="gasoline or ethanol"
    )
    add_entry_parser.add_argument("--notes", type=str, help="Notes about the fill-up")
    add_entry_parser.add_argument("--dry-run", action="store_true", help="Show without saving")

    edit_entry_parser = subparsers.add_parser("edit-entry", help="Change a fill-up")
    edit_entry_parser.add_argument("entry_id", type=str)
    edit_entry_parser.add_argument("--date", type=str)
    edit_entry_parser.add_argument("--total", type=float)
    edit_entry_parser.add_argument("--price", type=float)
    edit_entry_parser.add_argument("--km", type=int)
    edit_entry_parser.add_argument("--fuel", type=parse_fuel_type)
    edit_entry_parser.add_argument("--notes", type=str)

    delete_entry_parser = subparsers.add_parser("delete-entry", help="Remove a fill-up")
    delete_entry_parser.add_argument("entry_id", type=str)
    delete_entry_parser.add_argument("--yes", action="store_true", help="Don't ask for confirmation")

    subparsers.add_parser("reminders", help="Show which reminders are due")

    add_reminder_parser = subparsers.add_parser("add-reminder", help="Create a reminder")
    add_reminder_parser.add_argument("name", type=str)
    add_reminder_parser.add_argument("--type", choices=["km", "date"], default="km")
    add_reminder_parser.add_argument("--once", action="store_true", help="One-time reminder")
    add_reminder_parser.add_argument("--interval", type=int, help="km or days between completions")
    add_reminder_parser.add_argument(
        "--anchor", type=str, help="Last completion km or date (default: now)"
    )
    add_reminder_parser.add_argument("--target", type=str, help="One-time due km or date")
    add_reminder_parser.add_argument("--dry-run", action="store_true", help="Show without saving")

    edit_reminder_parser = subparsers.add_parser("edit-reminder", help="Change a reminder")
    edit_reminder_parser.add_argument("reminder_id", type=str)
    edit_reminder_parser.add_argument("--name", type=str)
    edit_reminder_parser.add_argument("--km-interval", type=int)
    edit_reminder_parser.add_argument("--days-interval", type=int)
    edit_reminder_parser.add_argument("--last-km", type=int)
    edit_reminder_parser.add_argument("--last-date", type=str)

    complete_parser = subparsers.add_parser("complete", help="Mark a reminder as done")
    complete_parser.add_argument("reminder_id", type=str)
    complete_parser.add_argument(
        "--mileage", type=int, help="Mileage at completion (default: current mileage)"
    )

    delete_reminder_parser = subparsers.add_parser("delete-reminder", help="Remove a reminder")
    delete_reminder_parser.add_argument("reminder_id", type=str)
    delete_reminder_parser.add_argument("--yes", action="store_true", help="Don't ask for confirmation")

    summarize_parser = subparsers.add_parser("summarize", help="AI summary of one month")
    summarize_parser.add_argument("month", type=parse_month, help="Month (YYYY-MM)")

    trip_parser = subparsers.add_parser("trip", help="AI trip cost estimate")
    trip_parser.add_argument("distance", type=float, help="Trip distance in km")
    trip_parser.add_argument("--avg", type=float, help="km/L (default: logbook average)")

    return parser


COMMANDS = {
    "stats": cmd_stats,
    "entries": cmd_entries,
    "monthly": cmd_monthly,
    "add-entry": cmd_add_entry,
    "edit-entry": cmd_edit_entry,
    "delete-entry": cmd_delete_entry,
    "reminders": cmd_reminders,
    "add-reminder": cmd_add_reminder,
    "edit-reminder": cmd_edit_reminder,
    "complete": cmd_complete,
    "delete-reminder": cmd_delete_reminder,
}

AI_COMMANDS = {
    "summarize": cmd_summarize,
    "trip": cmd_trip,
}


def main(argv=None):
    args = build_parser().parse_args(argv)
    settings = load_settings()
    configure_logging(settings.log_level)

    store = LogbookStore(args.data_dir or settings.data_dir)

    try:
        if args.command in AI_COMMANDS:
            advisor = Advisor.from_settings(settings)
            return AI_COMMANDS[args.command](args, store, advisor)
        return COMMANDS[args.command](args, store)
    except FuelLogError as e:
        logger.debug("Command {} failed: {!r}", args.command, e)
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
