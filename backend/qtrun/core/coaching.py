"""Coaching brief built from an activity's metrics.

The brief is the prompt handed to the external AI coach. Building it is
plain text assembly over the training metrics; the model call happens
elsewhere.
"""

from typing import Optional

from qtrun.core.constants import (
    PACE_DRIFT_HEAD_END,
    PACE_DRIFT_MIN_SAMPLES,
    PACE_DRIFT_TAIL_START,
)
from qtrun.core.hr_drift import calculate_hr_drift
from qtrun.core.hr_zones import calculate_heart_rate_zones, calculate_time_in_zones
from qtrun.schemas.metrics import ActivityMetrics

COACHING_SYSTEM_PROMPT = """You are an elite endurance coach analyzing workout data. Your role is to provide detailed, actionable performance insights based on heart rate, pacing, and effort data.

Focus on:

1. **Run Classification** - Identify the workout type (recovery, easy aerobic, tempo, threshold, interval, race)
2. **Heart Rate Analysis** - Examine HR zones, drift patterns, and cardiovascular response
3. **Pacing Analysis** - Evaluate split consistency, positive/negative split patterns
4. **Performance Implications** - What this workout means for fitness and goals
5. **Actionable Recommendations** - Specific next steps and training advice

Be technical but clear. Use specific metrics."""

RUN_CLASSIFICATIONS = ("recovery", "easy", "aerobic", "tempo", "threshold", "interval", "race")


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def calculate_pace_drift(pace_samples: list[float]) -> float:
    """Percent change in pace between the first and last quarter.

    Pace is time per distance, so a positive value means the athlete slowed.
    Needs more than 10 samples; returns 0.0 otherwise.
    """
    n = len(pace_samples)
    if n <= PACE_DRIFT_MIN_SAMPLES:
        return 0.0

    first_avg = _mean(pace_samples[: int(n * PACE_DRIFT_HEAD_END)])
    last_avg = _mean(pace_samples[int(n * PACE_DRIFT_TAIL_START):])
    if first_avg <= 0:
        return 0.0
    return ((last_avg - first_avg) / first_avg) * 100


def _format_min_per_km(seconds_per_km: float) -> str:
    minutes = int(seconds_per_km // 60)
    seconds = int(seconds_per_km % 60)
    return f"{minutes}:{seconds:02d}"


def build_coaching_prompt(
    name: Optional[str],
    activity: ActivityMetrics,
    athlete_max_hr: int,
    hr_samples: Optional[list[float]] = None,
    pace_samples: Optional[list[float]] = None,
) -> str:
    """Assemble the analysis prompt for one activity.

    ``pace_samples`` are seconds per meter (inverse of Strava's velocity
    stream). Sections without data are left out.
    """
    distance = activity.distance or 0.0
    moving_time = activity.moving_time_sec or 0

    distance_km = distance / 1000
    duration_min = moving_time // 60
    avg_pace = "0:00"
    if moving_time and distance > 0:
        avg_pace = _format_min_per_km(moving_time / distance_km)

    lines = [
        "Analyze this running activity:",
        "",
        f"**Activity**: {name or 'Unnamed Activity'}",
        f"**Distance**: {distance_km:.2f} km",
        f"**Duration**: {duration_min} minutes",
        f"**Average Pace**: {avg_pace} min/km",
        f"**Elevation Gain**: {activity.elevation or 0:.0f} m",
        "",
    ]

    if activity.average_heart_rate and athlete_max_hr:
        hr_percent = activity.average_heart_rate / athlete_max_hr * 100
        lines.append("**Heart Rate**:")
        lines.append(f"- Average: {activity.average_heart_rate} bpm ({hr_percent:.0f}% of max)")

        if hr_samples:
            zones = calculate_heart_rate_zones(athlete_max_hr)
            lines.append(f"- HR Drift: {calculate_hr_drift(hr_samples):.1f}%")
            lines.append("- Time in Zones:")
            for zt in calculate_time_in_zones(hr_samples, athlete_max_hr):
                if zt.percentage > 5:
                    zone_name = zones[zt.zone - 1].name
                    lines.append(f"  - Zone {zt.zone} ({zone_name}): {zt.percentage:.0f}%")
        lines.append("")

    if pace_samples and len(pace_samples) > PACE_DRIFT_MIN_SAMPLES:
        n = len(pace_samples)
        first_avg = _mean(pace_samples[: int(n * PACE_DRIFT_HEAD_END)])
        last_avg = _mean(pace_samples[int(n * PACE_DRIFT_TAIL_START):])
        drift = calculate_pace_drift(pace_samples)
        lines.append("**Pacing**:")
        lines.append(f"- First 25%: {_format_min_per_km(first_avg * 1000)} min/km")
        lines.append(f"- Last 25%: {_format_min_per_km(last_avg * 1000)} min/km")
        lines.append(f"- Pace Drift: {'+' if drift > 0 else ''}{drift:.1f}%")
        lines.append("")

    lines.extend([
        "Provide a comprehensive coaching analysis covering:",
        "1. What type of workout was this? (classification)",
        "2. What does the heart rate data tell you about effort and fatigue?",
        "3. What does the pacing pattern indicate?",
        "4. What are the performance implications?",
        "5. What should the athlete do next?",
    ])
    return "\n".join(lines)


def extract_run_classification(text: str) -> str:
    """Pick the first known workout type mentioned in a coach response."""
    lowered = text.lower()
    for kind in RUN_CLASSIFICATIONS:
        if kind in lowered:
            return kind.capitalize()
    return "General Training"
