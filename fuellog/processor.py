"""
Derive statistics from raw fuel entries.

Raw entries are placed in chronological order and each one is compared
with the fill-up before it:

- km_start: odometer of the previous fill-up (None for the first one)
- distance: km_end - km_start (None if not computable or negative)
- avg_kmpl: distance / liters (None if either side is missing)

Entries with the same timestamp keep the order they were given in, so
several fill-ups on one day are processed in the order they were logged.
"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from loguru import logger

from .calculations import (
    calc_avg_kmpl,
    calc_distance,
    calc_mean,
    parse_timestamp,
)
from .errors import ValidationError
from .fuel_entry import FuelEntry
from .monthly_summary import FuelStats, MonthlySummary
from .processed_entry import ProcessedFuelEntry


def _timestamped(entries: Iterable[FuelEntry]) -> List[Tuple[datetime, FuelEntry]]:
    pairs = []
    for entry in entries:
        try:
            pairs.append((parse_timestamp(entry.date), entry))
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Fuel entry '{entry.id}' has an invalid date: {entry.date!r}") from e
    return pairs


def process_entries(entries: Iterable[FuelEntry]) -> List[ProcessedFuelEntry]:
    """Sort entries by date and derive distance and consumption pairwise."""
    # sorted() is stable: same-timestamp entries keep insertion order
    ordered = sorted(_timestamped(entries), key=lambda pair: pair[0])

    processed = []
    previous: Optional[FuelEntry] = None
    for timestamp, entry in ordered:
        liters = entry.liters
        km_start = previous.km_end if previous is not None else None
        distance = calc_distance(km_start, entry.km_end)
        if km_start is not None and distance is None:
            logger.warning(
                "Odometer went backwards at entry {} ({} -> {}); distance left undefined",
                entry.id,
                km_start,
                entry.km_end,
            )
        processed.append(
            ProcessedFuelEntry(
                entry=entry,
                timestamp=timestamp,
                liters=liters,
                km_start=km_start,
                distance=distance,
                avg_kmpl=calc_avg_kmpl(distance, liters),
            )
        )
        previous = entry
    return processed


def aggregate_monthly(processed: Iterable[ProcessedFuelEntry]) -> List[MonthlySummary]:
    """
    Group processed entries by calendar month (UTC).

    Returns one summary per month that has entries, oldest first. Months
    without entries are not filled in.
    """
    groups: Dict[Tuple[int, int], List[ProcessedFuelEntry]] = {}
    for item in processed:
        key = (item.timestamp.year, item.timestamp.month)
        groups.setdefault(key, []).append(item)

    summaries = []
    for (year, month), items in sorted(groups.items()):
        summaries.append(
            MonthlySummary(
                year=year,
                month=month,
                total_spend=sum(i.total_value for i in items),
                total_distance=sum(i.distance or 0 for i in items),
                total_liters=sum(i.liters or 0 for i in items),
                mean_avg_kmpl=calc_mean(i.avg_kmpl for i in items),
                entry_count=len(items),
            )
        )
    return summaries


def entries_in_month(
    processed: Iterable[ProcessedFuelEntry], year: int, month: int
) -> List[ProcessedFuelEntry]:
    """Processed entries that fall in the given month."""
    return [
        p for p in processed if p.timestamp.year == year and p.timestamp.month == month
    ]


def current_mileage(entries: Iterable[FuelEntry], default: int = 0) -> int:
    """Highest odometer reading on record."""
    readings = [e.km_end for e in entries if e.km_end is not None]
    if not readings:
        return default
    return max(readings)


def fuel_stats(processed: List[ProcessedFuelEntry]) -> FuelStats:
    """Overall spend, liters, distance and consumption."""
    if not processed:
        return FuelStats()

    total_spend = sum(p.total_value for p in processed)
    total_liters = sum(p.liters or 0 for p in processed)
    total_distance = sum(p.distance or 0 for p in processed)

    # Only liters burnt over a known distance count towards consumption
    measured_liters = sum(
        p.liters for p in processed if p.distance is not None and p.liters
    )
    avg_kmpl = calc_avg_kmpl(total_distance, measured_liters) if total_distance else None
    avg_price = total_spend / total_liters if total_liters else None

    return FuelStats(
        entry_count=len(processed),
        total_spend=total_spend,
        total_liters=total_liters,
        total_distance=total_distance,
        avg_kmpl=avg_kmpl,
        avg_price_per_liter=avg_price,
        current_mileage=current_mileage(p.entry for p in processed),
    )
