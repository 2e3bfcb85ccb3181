import pytest

from qtrun.core.units import (
    MeasurementUnit,
    convert_distance,
    convert_speed,
    format_distance,
    format_speed,
    get_distance_unit,
    get_speed_unit,
)


def test_convert_distance_metric_is_km():
    assert convert_distance(1000, MeasurementUnit.metric) == 1
    assert convert_distance(42195) == pytest.approx(42.195)


def test_convert_distance_imperial_is_miles():
    assert convert_distance(1609.34, "imperial") == pytest.approx(1.0, rel=1e-4)


def test_negative_distance_passes_through():
    assert convert_distance(-1000, MeasurementUnit.metric) == -1


def test_unit_labels():
    assert get_distance_unit(MeasurementUnit.metric) == "km"
    assert get_distance_unit(MeasurementUnit.imperial) == "mi"
    assert get_speed_unit(MeasurementUnit.metric) == "km/h"
    assert get_speed_unit(MeasurementUnit.imperial) == "mph"


def test_speed_conversion():
    assert convert_speed(10, MeasurementUnit.metric) == pytest.approx(36.0)
    assert convert_speed(10, MeasurementUnit.imperial) == pytest.approx(22.3694)


def test_formatting_rounds_for_display():
    assert format_speed(10, MeasurementUnit.metric) == "36.0 km/h"
    assert format_speed(10, MeasurementUnit.imperial) == "22.4 mph"
    assert format_distance(5000) == "5.0 km"
    assert format_distance(21097, MeasurementUnit.imperial, decimals=2) == "13.11 mi"
