"""Five-zone heart rate model derived from maximum heart rate."""

import math

from qtrun.core.constants import HR_ZONE_BOUNDS, HR_ZONE_NAMES, HR_ZONE_REFERENCE_PCT
from qtrun.schemas.metrics import HeartRateZone, ZoneTime


def _round_half_up(value: float) -> int:
    # round() is banker's rounding; zone boundaries round .5 up
    return int(math.floor(value + 0.5))


def calculate_max_heart_rate(age: float) -> int:
    """Estimate max heart rate with the Tanaka formula: 208 - 0.7 × age."""
    return _round_half_up(208 - 0.7 * age)


def calculate_heart_rate_zones(max_hr: int) -> list[HeartRateZone]:
    """Build the 5 HR zones for an athlete.

    Boundaries sit at 50/60/70/80/90% of max HR. Zone 5 ends exactly at
    ``max_hr`` rather than at a rounded fraction.
    """
    zones: list[HeartRateZone] = []
    for i, name in enumerate(HR_ZONE_NAMES):
        lower = HR_ZONE_BOUNDS[i]
        upper = HR_ZONE_BOUNDS[i + 1]
        is_last = i == len(HR_ZONE_NAMES) - 1
        zones.append(
            HeartRateZone(
                zone=i + 1,
                name=name,
                min_hr=_round_half_up(max_hr * lower),
                max_hr=max_hr if is_last else _round_half_up(max_hr * upper),
                percentage=HR_ZONE_REFERENCE_PCT[i],
            )
        )
    return zones


def get_heart_rate_zone(hr: float, max_hr: int) -> int:
    """Return the zone number (1-5) containing ``hr``.

    Values outside the table clamp: above max HR is zone 5, anything
    else below zone 1's floor is zone 1.
    """
    for zone in calculate_heart_rate_zones(max_hr):
        if zone.min_hr <= hr <= zone.max_hr:
            return zone.zone
    return 5 if hr > max_hr else 1


def calculate_time_in_zones(hr_samples: list[float], max_hr: int) -> list[ZoneTime]:
    """Count seconds spent in each zone, one sample per second.

    Samples <= 0 are dropouts and are skipped entirely. Percentages are
    relative to the number of valid samples.
    """
    counts = [0, 0, 0, 0, 0]
    for hr in hr_samples:
        if hr > 0:
            counts[get_heart_rate_zone(hr, max_hr) - 1] += 1

    total = sum(counts)
    return [
        ZoneTime(
            zone=i + 1,
            seconds=count,
            percentage=(count / total) * 100 if total > 0 else 0.0,
        )
        for i, count in enumerate(counts)
    ]
