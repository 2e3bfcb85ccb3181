from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from qtrun.schemas.metrics import HeartRateZone, ZoneTime


class ActivityBase(BaseModel):
    name: Optional[str] = None
    sport_type: str = "Run"
    start_date_time: datetime

    distance_m: Optional[float] = None  # meters, what the watch reports
    elevation_m: Optional[float] = None
    average_heart_rate: Optional[int] = None
    max_heart_rate: Optional[int] = None
    average_power: Optional[float] = None


class ActivityCreate(ActivityBase):
    """Schema for creating a manual activity."""

    duration: str  # "HH:MM:SS" moving time
    hr_series: Optional[list[int]] = None


class ActivityUpdate(BaseModel):
    """Schema for updating an existing activity (all fields optional)."""

    name: Optional[str] = None
    sport_type: Optional[str] = None
    start_date_time: Optional[datetime] = None
    distance_m: Optional[float] = None
    elevation_m: Optional[float] = None
    duration: Optional[str] = None  # still "HH:MM:SS"
    average_heart_rate: Optional[int] = None
    max_heart_rate: Optional[int] = None
    average_power: Optional[float] = None

    # Be lenient with extra fields from clients
    model_config = ConfigDict(extra="ignore")


class ActivityRead(ActivityBase):
    """Schema returned to the frontend when reading an activity."""

    id: int
    source: Optional[str] = None
    start_local: Optional[datetime] = None  # start time in the configured timezone
    duration: str
    distance: float  # in preferred units
    distance_unit: str
    pace: str  # e.g. "5:10/km"
    is_race: bool = False
    race_name: Optional[str] = None
    race_distance_class: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class MarkAsRace(BaseModel):
    race_name: Optional[str] = None
    race_distance_class: Optional[str] = None
    official_time_sec: Optional[int] = None
    placement: Optional[int] = None
    age_group_placement: Optional[int] = None
    gender_placement: Optional[int] = None
    is_pr: bool = False
    race_notes: Optional[str] = None
    linked_race_id: Optional[int] = None


class ActivityAnalysis(BaseModel):
    activity_id: int
    max_hr: int
    trimp: float
    hr_drift: float
    pace_drift: float
    zones: list[HeartRateZone]
    time_in_zones: list[ZoneTime]
    average_speed: Optional[str] = None  # formatted in preferred units
    coaching_system_prompt: str  # instructions for the AI coach
    coaching_prompt: str


class WeeklySummaryPoint(BaseModel):
    week_start: date
    distance: float
    distance_unit: str
    moving_time_sec: int
    trimp: float
    activity_count: int
