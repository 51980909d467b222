"""Helper functions for fuel statistics and reminder due calculations."""

from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from dateutil import parser as date_parser
from dateutil import tz


def parse_timestamp(value) -> datetime:
    """
    Parse a fill-up timestamp into an aware UTC datetime.

    Accepts 'YYYY-MM-DD', full ISO-8601 timestamps, and date/datetime
    objects. Values without an offset are taken as UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        parsed = date_parser.isoparse(str(value))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=tz.UTC)
    return parsed.astimezone(tz.UTC)


def parse_day(value) -> date:
    """Parse a 'YYYY-MM-DD' string (or date) into a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def calc_liters(total_value: float, price_per_liter: float) -> Optional[float]:
    """Liters bought: total / price. None when the price is not positive."""
    if price_per_liter is None or price_per_liter <= 0:
        return None
    return total_value / price_per_liter


def calc_distance(km_start: Optional[int], km_end: int) -> Optional[int]:
    """
    Distance since the previous fill-up.

    None when there is no previous reading or the odometer went backwards.
    """
    if km_start is None or km_end < km_start:
        return None
    return km_end - km_start


def calc_avg_kmpl(distance: Optional[float], liters: Optional[float]) -> Optional[float]:
    """Kilometers per liter, None unless both sides are computable."""
    if distance is None or not liters:
        return None
    return distance / liters


def calc_mean(values: Iterable[Optional[float]]) -> Optional[float]:
    """Arithmetic mean of the defined values, None if there are none."""
    defined = [v for v in values if v is not None]
    if not defined:
        return None
    return sum(defined) / len(defined)


def calc_due_km(
    last_km: Optional[int], interval: Optional[int], target: Optional[int] = None
) -> Optional[int]:
    """
    Calculate the mileage a reminder is due at.

    - Recurring: last_km + interval
    - One-time: the fixed target
    """
    if interval is not None:
        if last_km is None:
            return None
        return last_km + interval
    return target


def calc_due_date(
    last_date: Optional[date], interval_days: Optional[int], target: Optional[date] = None
) -> Optional[date]:
    """Calculate the date a reminder is due: last + interval days, or the target."""
    if interval_days is not None:
        if last_date is None:
            return None
        return last_date + timedelta(days=interval_days)
    return target


def check_due(current: float, due: float) -> bool:
    """A threshold is reached once the current value meets or passes it."""
    return current >= due
