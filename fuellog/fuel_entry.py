"""FuelEntry class for raw fill-up records."""

from datetime import datetime
from typing import Optional

from .calculations import calc_liters, parse_timestamp
from .fuel_type import FuelType


class FuelEntry:
    """A single refueling: cost, price per liter and odometer reading."""

    def __init__(
            self,
            id: str,
            date: str,
            total_value: float,
            price_per_liter: float,
            km_end: int,
            fuel_type: FuelType = FuelType.GASOLINE,
            notes: str = "",
    ):
        self.id = id
        self.date = date
        self.total_value = total_value
        self.price_per_liter = price_per_liter
        self.km_end = km_end
        self.fuel_type = fuel_type
        self.notes = notes or ""

    @property
    def timestamp(self) -> datetime:
        """Fill-up time in UTC."""
        return parse_timestamp(self.date)

    @property
    def liters(self) -> Optional[float]:
        """Liters bought, derived from total and price."""
        return calc_liters(self.total_value, self.price_per_liter)

    def __eq__(self, other):
        if not isinstance(other, FuelEntry):
            return NotImplemented
        return vars(self) == vars(other)

    def __repr__(self):
        return (
            f"FuelEntry(id={self.id!r}, date={self.date!r}, "
            f"total_value={self.total_value!r}, km_end={self.km_end!r})"
        )
