"""Unit conversion and display formatting."""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

KELVIN_OFFSET = Decimal("273.15")
SUPPORTED_PLACES = (1, 2)


def kelvin_to_celsius(kelvin: float) -> float:
    return kelvin - 273.15


def format_celsius(kelvin: float, places: int = 1) -> str:
    """Format a Kelvin temperature as Celsius with a fixed number of decimals.

    Rounds half away from zero, so 273.20 K gives "0.1" and 273.10 K gives "-0.1".

    Raises:
        ValueError: If places is not 1 or 2
    """
    if places not in SUPPORTED_PLACES:
        raise ValueError(f"Unsupported precision: {places} (expected 1 or 2)")

    # str() keeps the decimal digits the API sent instead of the binary float
    celsius = Decimal(str(kelvin)) - KELVIN_OFFSET
    quantum = Decimal(1).scaleb(-places)
    rounded = celsius.quantize(quantum, rounding=ROUND_HALF_UP)
    if rounded.is_zero():
        rounded = abs(rounded)
    return f"{rounded:.{places}f}"


def format_visibility_km(meters: Optional[float]) -> str:
    if meters is None:
        return "n/a"
    km = Decimal(str(meters)) / 1000
    return f"{km.normalize():f}"
