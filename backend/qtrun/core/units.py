"""Distance and speed conversion between metric and imperial units."""

from enum import Enum

from qtrun.core.constants import METERS_TO_KM, METERS_TO_MILES, MPS_TO_KMH, MPS_TO_MPH


class MeasurementUnit(str, Enum):
    metric = "metric"
    imperial = "imperial"


def convert_distance(meters: float, unit: MeasurementUnit = MeasurementUnit.metric) -> float:
    """Convert meters to km (metric) or miles (imperial). No rounding."""
    if unit == MeasurementUnit.imperial:
        return meters * METERS_TO_MILES
    return meters * METERS_TO_KM


def get_distance_unit(unit: MeasurementUnit = MeasurementUnit.metric) -> str:
    return "mi" if unit == MeasurementUnit.imperial else "km"


def format_distance(
    meters: float,
    unit: MeasurementUnit = MeasurementUnit.metric,
    decimals: int = 1,
) -> str:
    """Format a distance with its unit label, e.g. '10.0 km'."""
    value = convert_distance(meters, unit)
    return f"{value:.{decimals}f} {get_distance_unit(unit)}"


def convert_speed(mps: float, unit: MeasurementUnit = MeasurementUnit.metric) -> float:
    """Convert meters per second to km/h (metric) or mph (imperial)."""
    if unit == MeasurementUnit.imperial:
        return mps * MPS_TO_MPH
    return mps * MPS_TO_KMH


def get_speed_unit(unit: MeasurementUnit = MeasurementUnit.metric) -> str:
    return "mph" if unit == MeasurementUnit.imperial else "km/h"


def format_speed(
    mps: float,
    unit: MeasurementUnit = MeasurementUnit.metric,
    decimals: int = 1,
) -> str:
    """Format a speed with its unit label, e.g. '12.0 km/h'."""
    value = convert_speed(mps, unit)
    return f"{value:.{decimals}f} {get_speed_unit(unit)}"
