"""FuelType enum for the kind of fuel bought at a fill-up."""

from enum import Enum


class FuelType(Enum):
    """Fuel kinds. Values are the ones stored in logbook documents."""

    ETHANOL = "ETANOL"
    GASOLINE = "GASOLINA"

    @classmethod
    def parse(cls, value: str) -> "FuelType":
        """Accept either the stored value or the member name, any case."""
        if isinstance(value, FuelType):
            return value
        text = str(value).strip().upper()
        for member in cls:
            if text in (member.value, member.name):
                return member
        raise ValueError(f"Unknown fuel type: {value!r}")
