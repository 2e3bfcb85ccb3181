import math

import pytest

from qtrun.core.hr_drift import calculate_hr_drift
from qtrun.core.trimp import calculate_total_trimp, calculate_trimp
from qtrun.schemas.metrics import ActivityMetrics


def _activity(seconds, avg_hr):
    return ActivityMetrics(moving_time_sec=seconds, average_heart_rate=avg_hr)


def test_trimp_value():
    ratio = 150 / 190
    expected = 3600 * ratio * math.exp(1.92 * ratio) / 60
    assert calculate_trimp(_activity(3600, 150), 190) == pytest.approx(expected)


def test_trimp_grows_with_intensity():
    assert calculate_trimp(_activity(3600, 150), 190) > calculate_trimp(_activity(3600, 120), 190)


def test_trimp_guards():
    assert calculate_trimp(_activity(3600, 150), 0) == 0
    assert calculate_trimp(_activity(100, None), 190) == 0
    assert calculate_trimp(_activity(100, 0), 190) == 0


def test_trimp_allows_hr_above_max():
    assert calculate_trimp(_activity(600, 200), 190) > calculate_trimp(_activity(600, 190), 190)


def test_trimp_is_deterministic():
    a = _activity(2700, 162)
    assert calculate_trimp(a, 185) == calculate_trimp(a, 185)


def test_total_trimp_sums_activities():
    week = [_activity(3600, 150), _activity(1800, None), _activity(2400, 140)]
    expected = calculate_trimp(week[0], 190) + calculate_trimp(week[2], 190)
    assert calculate_total_trimp(week, 190) == pytest.approx(expected)
    assert calculate_total_trimp([], 190) == 0


def test_hr_drift_needs_ten_samples():
    assert calculate_hr_drift([]) == 0
    assert calculate_hr_drift([140] * 9) == 0


def test_hr_drift_rising_heart_rate():
    samples = list(range(100, 200))
    # first 10 average 104.5, last 10 average 194.5
    assert calculate_hr_drift(samples) == pytest.approx((194.5 - 104.5) / 104.5 * 100)
    assert calculate_hr_drift(samples) > 0


def test_hr_drift_flat_and_falling():
    assert calculate_hr_drift([150] * 60) == 0
    assert calculate_hr_drift(list(range(200, 100, -1))) < 0


def test_hr_drift_zero_opening_segment():
    assert calculate_hr_drift([0, 0] + [150] * 18) == 0
