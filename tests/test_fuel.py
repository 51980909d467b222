#!/usr/bin/env python3
"""Tests for fuel CLI formatting, table helpers and commands."""

import argparse

import pytest

from fuellog import (
    DISABLED_MESSAGE,
    FuelEntry,
    LogbookStore,
    MonthlySummary,
    Reminder,
    ReminderDue,
    ReminderType,
    Status,
    process_entries,
)
from fuel import (
    format_km,
    format_money,
    format_kmpl,
    format_remaining,
    main,
    make_entries_table,
    make_monthly_table,
    make_reminder_table,
    parse_month,
    truncate,
)

OIL = Reminder("oil", "Oil change", ReminderType.KM, True, recurring_km_interval=5000, last_completion_km=10000)
INSURANCE = Reminder(
    "ins", "Insurance", ReminderType.DATE, True, recurring_days_interval=30, last_completion_date="2025-05-01"
)


class TestFormatKm:
    """Tests for format_km."""

    def test_formats_number(self):
        assert format_km(50000) == "50,000"
        assert format_km(0) == "0"

    def test_none_returns_dash(self):
        assert format_km(None) == "-"


class TestFormatMoney:
    """Tests for format_money."""

    def test_formats_number(self):
        assert format_money(1234.5) == "1,234.50"
        assert format_money(0) == "0.00"

    def test_none_returns_dash(self):
        assert format_money(None) == "-"


class TestFormatKmpl:
    def test_one_decimal(self):
        assert format_kmpl(17.456) == "17.5"
        assert format_kmpl(None) == "-"


class TestFormatRemaining:
    """Tests for format_remaining."""

    def test_none_returns_dash(self):
        assert format_remaining(ReminderDue(reminder=OIL, status=Status.UNKNOWN)) == "-"

    def test_km_remaining(self):
        svc = ReminderDue(reminder=OIL, status=Status.PENDING, km_remaining=1200)
        assert format_remaining(svc) == "1,200 km"

    def test_km_overdue(self):
        svc = ReminderDue(reminder=OIL, status=Status.DUE, km_remaining=-300)
        assert format_remaining(svc) == "-300 km"

    def test_days_remaining(self):
        svc = ReminderDue(reminder=INSURANCE, status=Status.DUE, days_remaining=-3)
        assert format_remaining(svc) == "-3d"


class TestTruncate:
    """Tests for truncate."""

    def test_none_returns_dash(self):
        assert truncate(None) == "-"
        assert truncate("") == "-"

    def test_short_text_unchanged(self):
        assert truncate("short") == "short"

    def test_long_text_truncated_with_ellipsis(self):
        assert truncate("a" * 40) == "a" * 27 + "..."

    def test_custom_max_len(self):
        assert truncate("abcdefghij", max_len=6) == "abc..."


class TestParseMonth:
    """Tests for parse_month."""

    def test_valid(self):
        assert parse_month("2025-01") == (2025, 1)

    @pytest.mark.parametrize("value", ["2025", "2025-13", "jan-2025", "2025-01-01"])
    def test_invalid(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_month(value)


class TestMakeEntriesTable:
    """Tests for make_entries_table."""

    def test_empty_list_returns_empty_rows(self):
        assert make_entries_table([]) == []

    def test_rows(self):
        processed = process_entries(
            [
                FuelEntry("a", "2025-01-05", 100.0, 5.0, 10000),
                FuelEntry("b", "2025-01-20", 120.0, 6.0, 10400, notes="highway"),
            ]
        )
        rows = make_entries_table(processed)
        assert rows[0] == ["2025-01-05", "10,000", "-", "100.00", "5.00", "20.00", "-", "gasoline", "-", "a"]
        assert rows[1] == ["2025-01-20", "10,400", "400", "120.00", "6.00", "20.00", "20.0", "gasoline", "highway", "b"]


class TestMakeMonthlyTable:
    def test_rows(self):
        summary = MonthlySummary(
            year=2025, month=1, total_spend=220.0, total_distance=400,
            total_liters=40.0, mean_avg_kmpl=20.0, entry_count=2,
        )
        assert make_monthly_table([summary]) == [["2025-01", "2", "220.00", "400", "40.00", "20.0"]]


class TestMakeReminderTable:
    """Tests for make_reminder_table."""

    def test_km_row(self):
        svc = ReminderDue(reminder=OIL, status=Status.PENDING, due_km=15000, km_remaining=1000)
        assert make_reminder_table([svc]) == [
            ["Oil change", "every 5,000 km", "10,000", "15,000", "1,000 km", "oil"]
        ]

    def test_date_row(self):
        svc = ReminderDue(reminder=INSURANCE, status=Status.DUE, due_date="2025-05-31", days_remaining=-1)
        assert make_reminder_table([svc]) == [
            ["Insurance", "every 30 days", "2025-05-01", "2025-05-31", "-1d", "ins"]
        ]


# =============================================================================
# Command tests
# =============================================================================


@pytest.fixture
def run(tmp_path, monkeypatch):
    """Run the CLI against a scratch data directory with AI disabled."""
    monkeypatch.setenv("GEMINI_API_KEY", "")
    monkeypatch.setenv("API_KEY", "")

    def _run(*argv):
        return main(["--data-dir", str(tmp_path), "me", *argv])

    return _run


class TestCommands:
    """End-to-end command tests."""

    def test_add_entry_then_list(self, run, tmp_path, capsys):
        assert run("add-entry", "--date", "2025-01-05", "--total", "100", "--price", "5", "--km", "10000") == 0
        assert run("add-entry", "--date", "2025-01-20", "--total", "120", "--price", "6", "--km", "10400",
                   "--fuel", "etanol") == 0
        capsys.readouterr()

        assert run("entries", "--asc") == 0
        out = capsys.readouterr().out
        assert "Fill-ups: 2" in out
        assert out.index("2025-01-05") < out.index("2025-01-20")
        assert "ethanol" in out

        entries = LogbookStore(tmp_path).load("me").fuel_entries
        assert [e.km_end for e in entries] == [10000, 10400]

    def test_add_entry_dry_run(self, run, tmp_path, capsys):
        assert run("add-entry", "--total", "100", "--price", "5", "--km", "10000", "--dry-run") == 0
        assert "dry run" in capsys.readouterr().out
        assert not (tmp_path / "me.yaml").exists()

    def test_add_entry_invalid(self, run, capsys):
        assert run("add-entry", "--total", "100", "--price", "0", "--km", "10000") == 1
        assert capsys.readouterr().out.startswith("Error:")

    def test_stats_and_monthly(self, run, capsys):
        run("add-entry", "--date", "2025-01-05", "--total", "100", "--price", "5", "--km", "10000")
        run("add-entry", "--date", "2025-02-05", "--total", "120", "--price", "6", "--km", "10400")
        capsys.readouterr()

        assert run("stats") == 0
        out = capsys.readouterr().out
        assert "Current mileage: 10,400 km" in out
        assert "Average consumption: 20.0 km/L" in out

        assert run("monthly") == 0
        out = capsys.readouterr().out
        assert "2025-01" in out and "2025-02" in out

    def test_edit_and_delete_entry(self, run, tmp_path, capsys):
        run("add-entry", "--date", "2025-01-05", "--total", "100", "--price", "5", "--km", "10000")
        entry_id = LogbookStore(tmp_path).load("me").fuel_entries[0].id

        assert run("edit-entry", entry_id, "--notes", "full tank") == 0
        assert LogbookStore(tmp_path).load("me").fuel_entries[0].notes == "full tank"

        assert run("delete-entry", entry_id, "--yes") == 0
        assert LogbookStore(tmp_path).load("me").fuel_entries == []

    def test_delete_entry_cancelled(self, run, tmp_path, monkeypatch, capsys):
        run("add-entry", "--date", "2025-01-05", "--total", "100", "--price", "5", "--km", "10000")
        entry_id = LogbookStore(tmp_path).load("me").fuel_entries[0].id
        monkeypatch.setattr("builtins.input", lambda prompt: "n")

        assert run("delete-entry", entry_id) == 0
        assert "Cancelled." in capsys.readouterr().out
        assert len(LogbookStore(tmp_path).load("me").fuel_entries) == 1

    def test_reminder_lifecycle(self, run, tmp_path, capsys):
        run("add-entry", "--date", "2025-01-05", "--total", "100", "--price", "5", "--km", "10000")
        assert run("add-reminder", "Oil change", "--interval", "5000") == 0
        reminder = LogbookStore(tmp_path).load("me").reminders[0]
        assert reminder.last_completion_km == 10000

        run("add-entry", "--date", "2025-04-05", "--total", "100", "--price", "5", "--km", "15000")
        capsys.readouterr()
        assert run("reminders") == 0
        assert "DUE:" in capsys.readouterr().out

        assert run("complete", reminder.id) == 0
        assert LogbookStore(tmp_path).load("me").reminders[0].last_completion_km == 15000

        assert run("delete-reminder", reminder.id, "--yes") == 0
        assert LogbookStore(tmp_path).load("me").reminders == []

    def test_one_time_reminder_removed_on_complete(self, run, tmp_path, capsys):
        assert run("add-reminder", "Inspection", "--type", "date", "--once", "--target", "2025-09-01") == 0
        reminder = LogbookStore(tmp_path).load("me").reminders[0]

        assert run("complete", reminder.id) == 0
        assert "removed" in capsys.readouterr().out
        assert LogbookStore(tmp_path).load("me").reminders == []

    def test_add_reminder_bad_km_anchor(self, run, capsys):
        assert run("add-reminder", "Oil", "--interval", "5000", "--anchor", "lots") == 1
        assert "Error:" in capsys.readouterr().out

    def test_unknown_reminder(self, run, capsys):
        assert run("complete", "missing") == 1
        assert "Error: reminder 'missing' not found" in capsys.readouterr().out

    def test_summarize_without_api_key(self, run, capsys):
        assert run("summarize", "2025-01") == 0
        assert DISABLED_MESSAGE in capsys.readouterr().out

    def test_trip_without_data(self, run, capsys):
        assert run("trip", "300") == 1
        assert "no consumption data" in capsys.readouterr().out

    def test_trip_with_avg(self, run, capsys):
        assert run("trip", "300", "--avg", "12.5") == 0
        assert DISABLED_MESSAGE in capsys.readouterr().out
