"""MonthlySummary and FuelStats dataclasses for aggregated fuel data."""

import calendar
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class MonthlySummary:
    """Spend and efficiency totals for one calendar month."""

    year: int
    month: int
    total_spend: float = 0.0
    total_distance: int = 0
    total_liters: float = 0.0
    mean_avg_kmpl: Optional[float] = None
    entry_count: int = 0

    @property
    def label(self) -> str:
        """Sortable period label, e.g. '2025-01'."""
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def display_name(self) -> str:
        """Human-readable period, e.g. 'January 2025'."""
        return f"{calendar.month_name[self.month]} {self.year}"

    def to_series_point(self) -> Dict[str, Any]:
        """Chart series point in the presentation layer's key format."""
        return {
            "label": self.label,
            "totalSpend": round(self.total_spend, 2),
            "totalDistance": self.total_distance,
            "meanAvgKmpl": (
                round(self.mean_avg_kmpl, 2) if self.mean_avg_kmpl is not None else None
            ),
        }


@dataclass
class FuelStats:
    """Overall figures across every fill-up on record."""

    entry_count: int = 0
    total_spend: float = 0.0
    total_liters: float = 0.0
    total_distance: int = 0
    avg_kmpl: Optional[float] = None
    avg_price_per_liter: Optional[float] = None
    current_mileage: Optional[int] = None
