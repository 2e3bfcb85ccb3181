from datetime import datetime, timezone

import pytest

from qtrun.core.time_utils import (
    compute_pace,
    hhmmss_to_seconds,
    seconds_to_hhmmss,
    to_local_datetime,
)
from qtrun.core.units import MeasurementUnit


def test_hhmmss_to_seconds():
    assert hhmmss_to_seconds("00:45:32") == 2732
    assert hhmmss_to_seconds("01:00:00") == 3600


def test_hhmmss_rejects_bad_input():
    with pytest.raises(ValueError):
        hhmmss_to_seconds("45:32")
    with pytest.raises(ValueError):
        hhmmss_to_seconds("aa:bb:cc")
    with pytest.raises(ValueError):
        hhmmss_to_seconds("00:75:00")


def test_seconds_to_hhmmss():
    assert seconds_to_hhmmss(2732) == "00:45:32"
    assert seconds_to_hhmmss(0) == "00:00:00"


def test_compute_pace_metric():
    assert compute_pace(1500, 5000) == "5:00/km"
    assert compute_pace(100, 0) == "0:00/km"


def test_compute_pace_imperial():
    assert compute_pace(1500, 5000, MeasurementUnit.imperial) == "8:02/mi"
    assert compute_pace(100, 0, MeasurementUnit.imperial) == "0:00/mi"


def test_to_local_datetime_named_zone():
    zoneinfo = pytest.importorskip("zoneinfo")
    try:
        zoneinfo.ZoneInfo("America/New_York")
    except zoneinfo.ZoneInfoNotFoundError:
        pytest.skip("no tz database")

    local = to_local_datetime(datetime(2024, 1, 15, 12, 0), "America/New_York")
    assert local.hour == 7
    assert local.utcoffset().total_seconds() == -5 * 3600


def test_to_local_datetime_unknown_zone_falls_back():
    dt = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)
    local = to_local_datetime(dt, "Not/AZone")
    assert local.tzinfo is not None
    assert local == dt
