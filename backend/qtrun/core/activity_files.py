"""Parse uploaded GPX and FIT activity files into plain activity data."""

import math
from datetime import datetime
from typing import Optional

import gpxpy
import gpxpy.gpx
from fitparse import FitFile, FitParseError
from pydantic import BaseModel

from qtrun.core.constants import EARTH_RADIUS_M, MOVING_SPEED_MPS


class ParsedActivity(BaseModel):
    start_date_time: Optional[datetime] = None
    moving_time_sec: int = 0
    distance_m: float = 0.0
    elevation_m: float = 0.0
    average_heart_rate: Optional[int] = None
    max_heart_rate: Optional[int] = None
    hr_samples: list[int] = []
    speed_samples: list[float] = []  # m/s


def haversine(lat1, lon1, lat2, lon2):
    """Return great‑circle distance in meters between two WGS84 points.

    Uses the standard haversine formula; sufficient for per‑point distances
    over a typical GPS activity track.
    """
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def _hr_summary(hr_samples: list[int]) -> tuple[Optional[int], Optional[int]]:
    valid = [hr for hr in hr_samples if hr > 0]
    if not valid:
        return None, None
    return int(sum(valid) / len(valid)), max(valid)


def parse_gpx(path: str) -> ParsedActivity:
    """Read a GPX track.

    Distance and elevation gain come from the track points. Moving time only
    counts segments faster than MOVING_SPEED_MPS. GPX rarely carries heart
    rate, so HR fields stay empty.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            gpx = gpxpy.parse(f)
    except gpxpy.gpx.GPXException as e:
        raise ValueError(f"Unreadable GPX file: {e}") from e

    first_time = None
    total_m = 0.0
    elev_gain = 0.0
    moving_s = 0.0
    speeds: list[float] = []
    prev = None

    for track in gpx.tracks:
        for segment in track.segments:
            for p in segment.points:
                if p.time and first_time is None:
                    first_time = p.time
                if prev is not None:
                    d = haversine(prev.latitude, prev.longitude, p.latitude, p.longitude)
                    total_m += d
                    if p.elevation is not None and prev.elevation is not None:
                        de = p.elevation - prev.elevation
                        if de > 0:
                            elev_gain += de
                    if p.time and prev.time:
                        dt = (p.time - prev.time).total_seconds()
                        if dt > 0:
                            speed = d / dt
                            speeds.append(speed)
                            if speed >= MOVING_SPEED_MPS:
                                moving_s += dt
                prev = p

    return ParsedActivity(
        start_date_time=first_time,
        moving_time_sec=int(moving_s),
        distance_m=total_m,
        elevation_m=elev_gain,
        speed_samples=speeds,
    )


def _semicircles_to_degrees(val):
    return val * (180 / 2**31) if val is not None else None


def parse_fit(path: str) -> ParsedActivity:
    """Read a FIT file.

    Session totals win when present (treadmill runs have no GPS); otherwise
    distance is summed from record positions. HR and speed samples come from
    the per-record stream.
    """
    try:
        ff = FitFile(path)
        ff.parse()
    except FitParseError as e:
        raise ValueError(f"Unreadable FIT file: {e}") from e

    session_distance_m = None
    session_timer_s = None
    session_ascent_m = None
    for session in ff.get_messages("session"):
        fields = {f.name: f.value for f in session}
        if fields.get("total_distance") is not None and session_distance_m is None:
            session_distance_m = float(fields["total_distance"])
        if fields.get("total_timer_time") is not None and session_timer_s is None:
            session_timer_s = int(fields["total_timer_time"])
        if fields.get("total_ascent") is not None and session_ascent_m is None:
            session_ascent_m = float(fields["total_ascent"])

    start_ts = None
    end_ts = None
    total_m = 0.0
    elev_gain = 0.0
    prev_pos = None
    prev_alt = None
    hr_samples: list[int] = []
    speeds: list[float] = []

    for record in ff.get_messages("record"):
        fields = {f.name: f.value for f in record}
        ts = fields.get("timestamp")
        if ts and start_ts is None:
            start_ts = ts
        if ts:
            end_ts = ts

        lat = _semicircles_to_degrees(fields.get("position_lat"))
        lon = _semicircles_to_degrees(fields.get("position_long"))
        if lat is not None and lon is not None:
            if prev_pos is not None:
                total_m += haversine(prev_pos[0], prev_pos[1], lat, lon)
            prev_pos = (lat, lon)

        alt = fields.get("enhanced_altitude", fields.get("altitude"))
        if alt is not None:
            if prev_alt is not None and alt > prev_alt:
                elev_gain += alt - prev_alt
            prev_alt = alt

        hr = fields.get("heart_rate")
        if hr is not None:
            hr_samples.append(int(hr))
        speed = fields.get("enhanced_speed", fields.get("speed"))
        if speed is not None:
            speeds.append(float(speed))

    duration_s = (
        session_timer_s if session_timer_s is not None else
        (int((end_ts - start_ts).total_seconds()) if start_ts and end_ts else 0)
    )
    avg_hr, max_hr = _hr_summary(hr_samples)

    return ParsedActivity(
        start_date_time=start_ts,
        moving_time_sec=duration_s,
        distance_m=session_distance_m if session_distance_m is not None else total_m,
        elevation_m=session_ascent_m if session_ascent_m is not None else elev_gain,
        average_heart_rate=avg_hr,
        max_heart_rate=max_hr,
        hr_samples=hr_samples,
        speed_samples=speeds,
    )
