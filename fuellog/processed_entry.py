"""ProcessedFuelEntry dataclass for fill-ups placed in chronological order."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .fuel_entry import FuelEntry


@dataclass
class ProcessedFuelEntry:
    """A fuel entry with the values derived from its predecessor."""

    entry: "FuelEntry"
    timestamp: datetime
    liters: Optional[float] = None
    km_start: Optional[int] = None
    distance: Optional[int] = None
    avg_kmpl: Optional[float] = None

    @property
    def id(self) -> str:
        return self.entry.id

    @property
    def total_value(self) -> float:
        return self.entry.total_value

    @property
    def price_per_liter(self) -> float:
        return self.entry.price_per_liter

    @property
    def km_end(self) -> int:
        return self.entry.km_end

    @property
    def fuel_type(self):
        return self.entry.fuel_type

    @property
    def notes(self) -> str:
        return self.entry.notes
