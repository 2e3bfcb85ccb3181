from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ActivityMetrics(BaseModel):
    """Activity fields the training-metric calculations read.

    Values are not validated beyond their types; callers default missing
    data before building one of these.
    """

    model_config = ConfigDict(frozen=True)

    start_date_time: Optional[datetime] = None
    moving_time_sec: int = 0
    average_heart_rate: Optional[int] = None  # bpm
    max_heart_rate: Optional[int] = None
    average_power: Optional[float] = None  # watts
    distance: Optional[float] = None  # meters
    elevation: Optional[float] = None  # meters


class HeartRateZone(BaseModel):
    model_config = ConfigDict(frozen=True)

    zone: int
    name: str
    min_hr: int
    max_hr: int
    percentage: int  # reference midpoint, % of max HR


class ZoneTime(BaseModel):
    zone: int
    seconds: int
    percentage: float


class EddingtonResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    eddington: int
    next: int
    needed_for_next: int


class StandardDistance(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    meters: float
    tolerance: float  # fraction, e.g. 0.02 for ±2%


class RaceCandidate(BaseModel):
    """What the race detector looks at for one activity."""

    activity_id: str
    activity_name: Optional[str] = None
    date: Optional[datetime] = None
    distance: Optional[float] = None  # meters
    workout_type: Optional[str] = None  # Strava workout_type as string
    suffer_score: Optional[int] = None


class RaceDetectionResult(BaseModel):
    activity_id: str
    activity_name: str
    date: Optional[datetime] = None
    distance: float
    detected_distance_class: Optional[str] = None
    confidence: float
    reasons: list[str] = []
