"""Training impulse (TRIMP) load estimates."""

import math
from typing import Iterable

from qtrun.core.constants import TRIMP_INTENSITY_EXPONENT
from qtrun.schemas.metrics import ActivityMetrics


def calculate_trimp(activity: ActivityMetrics, athlete_max_hr: float) -> float:
    """Calculate TRIMP for a single activity.

    TRIMP = minutes × HR ratio × e^(1.92 × HR ratio)

    Args:
        activity: Activity with moving time and average heart rate
        athlete_max_hr: Athlete's maximum heart rate (bpm)

    Returns:
        Training load, or 0.0 without heart rate data or a usable max HR.
        A ratio above 1 is not clamped.
    """
    if not activity.average_heart_rate or athlete_max_hr <= 0:
        return 0.0

    hr_ratio = activity.average_heart_rate / athlete_max_hr
    intensity_factor = math.exp(TRIMP_INTENSITY_EXPONENT * hr_ratio)

    return (activity.moving_time_sec * hr_ratio * intensity_factor) / 60


def calculate_total_trimp(activities: Iterable[ActivityMetrics], athlete_max_hr: float) -> float:
    """Sum TRIMP over a set of activities (e.g. one training week)."""
    return sum(calculate_trimp(a, athlete_max_hr) for a in activities)
