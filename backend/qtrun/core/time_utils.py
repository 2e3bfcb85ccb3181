from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from qtrun.core.constants import MILE_M
from qtrun.core.units import MeasurementUnit, get_distance_unit


def hhmmss_to_seconds(hhmmss: str) -> int:
    """
    Parse an 'HH:MM:SS' duration into whole seconds.
    Example: '00:45:32' -> 2732

    Minutes and seconds must be below 60; hours are unbounded for ultras.
    """
    parts = hhmmss.strip().split(":")
    if len(parts) != 3:
        raise ValueError("Duration must be in HH:MM:SS format")

    hours, minutes, seconds = (int(p) for p in parts)
    if hours < 0 or not (0 <= minutes < 60 and 0 <= seconds < 60):
        raise ValueError("Duration must be in HH:MM:SS format")
    return (hours * 60 + minutes) * 60 + seconds


def seconds_to_hhmmss(total_seconds: int) -> str:
    """Format whole seconds as 'HH:MM:SS' (2732 -> '00:45:32')."""
    minutes, seconds = divmod(max(0, int(total_seconds)), 60)
    hours, minutes = divmod(minutes, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def compute_pace(
    duration_seconds: int,
    distance_m: float,
    unit: MeasurementUnit = MeasurementUnit.metric,
) -> str:
    """
    Compute pace per km or mile as 'M:SS/km' or 'M:SS/mi'.
    Example: duration=1500 sec, distance=5000 m, metric -> '5:00/km'
    """
    label = get_distance_unit(unit)
    if distance_m <= 0:
        return f"0:00/{label}"

    unit_m = MILE_M if unit == MeasurementUnit.imperial else 1000.0
    minutes, seconds = divmod(int(duration_seconds / (distance_m / unit_m)), 60)
    return f"{minutes}:{seconds:02d}/{label}"


def to_local_datetime(dt: datetime, tz_name: str | None = None) -> datetime:
    """Express ``dt`` in the display timezone.

    Naive datetimes are taken as UTC (that is how SQLite hands them back).
    ``tz_name`` is an IANA name such as 'America/New_York'; 'local', None or
    an unknown name fall back to the system timezone.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    if not tz_name or tz_name == "local":
        return dt.astimezone()
    try:
        return dt.astimezone(ZoneInfo(tz_name))
    except ZoneInfoNotFoundError:
        return dt.astimezone()
