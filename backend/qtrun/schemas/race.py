from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class RaceStatus(str, Enum):
    upcoming = "upcoming"
    completed = "completed"
    dns = "dns"
    dnf = "dnf"


class RaceStatusFilter(str, Enum):
    upcoming = "upcoming"
    completed = "completed"
    all = "all"


class RaceBase(BaseModel):
    name: str
    date: date
    distance_m: Optional[float] = None
    distance_class: Optional[str] = None
    location: Optional[str] = None
    goal_time_sec: Optional[int] = None
    priority: str = "A"
    race_url: Optional[str] = None
    course_url: Optional[str] = None
    bib_number: Optional[str] = None
    notes: Optional[str] = None


class RaceCreate(RaceBase):
    """Schema for adding a race to the calendar."""
    pass


class RaceUpdate(BaseModel):
    """Schema for updating a race (all fields optional)."""

    name: Optional[str] = None
    # Accept date as string for updates; parsed in the router
    date: Optional[str] = None
    distance_m: Optional[float] = None
    distance_class: Optional[str] = None
    location: Optional[str] = None
    goal_time_sec: Optional[int] = None
    priority: Optional[str] = None
    status: Optional[RaceStatus] = None
    race_url: Optional[str] = None
    course_url: Optional[str] = None
    bib_number: Optional[str] = None
    notes: Optional[str] = None
    linked_activity_id: Optional[int] = None
    result_time_sec: Optional[int] = None
    result_placement: Optional[int] = None
    is_pr: Optional[bool] = None

    model_config = ConfigDict(extra="ignore")


class RaceRead(RaceBase):
    id: int
    status: RaceStatus
    linked_activity_id: Optional[int] = None
    result_time_sec: Optional[int] = None
    result_placement: Optional[int] = None
    is_pr: bool = False

    model_config = ConfigDict(from_attributes=True)
