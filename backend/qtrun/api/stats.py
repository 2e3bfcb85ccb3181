from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from qtrun.api.activities import to_activity_metrics
from qtrun.core.config import settings
from qtrun.core.constants import RIDE_SPORT_TYPES, RUN_SPORT_TYPES
from qtrun.core.eddington import calculate_eddington
from qtrun.core.hr_zones import calculate_heart_rate_zones, calculate_max_heart_rate
from qtrun.core.trimp import calculate_total_trimp
from qtrun.core.units import MeasurementUnit, convert_distance, get_distance_unit
from qtrun.db import get_db
from qtrun.models.activity import Activity
from qtrun.schemas.activity import WeeklySummaryPoint
from qtrun.schemas.metrics import HeartRateZone

router = APIRouter(prefix="/stats", tags=["stats"])


class EddingtonSport(str, Enum):
    run = "run"
    ride = "ride"


SPORT_TYPES = {
    EddingtonSport.run: RUN_SPORT_TYPES,
    EddingtonSport.ride: RIDE_SPORT_TYPES,
}


@router.get("/eddington")
def get_eddington(
    sport: EddingtonSport = Query(EddingtonSport.run),
    unit: Optional[MeasurementUnit] = Query(None),
    db: Session = Depends(get_db),
):
    """Eddington number for runs or rides, counted in the preferred unit."""
    preferred = unit or settings.units
    rows = (
        db.query(Activity.distance_m)
        .filter(Activity.sport_type.in_(SPORT_TYPES[sport]))
        .all()
    )
    distances = [convert_distance(d or 0.0, preferred) for (d,) in rows]
    result = calculate_eddington(distances)

    return {
        "sport": sport.value,
        "unit": get_distance_unit(preferred),
        "activity_count": len(distances),
        **result.model_dump(),
    }


@router.get("/heart-rate-zones", response_model=list[HeartRateZone])
def get_heart_rate_zones(
    max_hr: Optional[int] = Query(None, gt=0),
    age: Optional[int] = Query(None, gt=0, lt=120),
):
    """Zone table from an explicit max HR, an age (Tanaka), or the configured athlete."""
    if max_hr is not None and age is not None:
        raise HTTPException(status_code=422, detail="Pass either max_hr or age, not both")
    if max_hr is None:
        max_hr = calculate_max_heart_rate(age) if age is not None else settings.athlete_max_hr
    return calculate_heart_rate_zones(max_hr)


@router.get("/weekly", response_model=list[WeeklySummaryPoint])
def get_weekly_summary(
    weeks: int = Query(12, ge=1, le=104),
    unit: Optional[MeasurementUnit] = Query(None),
    db: Session = Depends(get_db),
):
    """
    Return weekly distance and training load (TRIMP) for the last `weeks` weeks
    (including the current week).

    - Weeks are Monday–Sunday.
    - Even if there are no activities in a given week, it appears with zeros.
    """
    preferred = unit or settings.units
    athlete_max_hr = settings.athlete_max_hr
    today = date.today()

    # Monday of the current week
    start_of_this_week = today - timedelta(days=today.weekday())

    # Oldest Monday we care about
    start_date = start_of_this_week - timedelta(weeks=weeks - 1)

    activities = (
        db.query(Activity)
        .filter(Activity.start_date_time >= datetime.combine(start_date, time.min))
        .all()
    )

    by_week: dict[date, list[Activity]] = {}
    for a in activities:
        day = a.start_date_time.date()
        week_start = day - timedelta(days=day.weekday())
        by_week.setdefault(week_start, []).append(a)

    # Build continuous list of weeks from oldest -> newest
    results: list[WeeklySummaryPoint] = []
    for i in range(weeks):
        week_start = start_date + timedelta(weeks=i)
        week = by_week.get(week_start, [])
        total_m = sum(a.distance_m or 0.0 for a in week)

        results.append(
            WeeklySummaryPoint(
                week_start=week_start,
                distance=round(convert_distance(total_m, preferred), 2),
                distance_unit=get_distance_unit(preferred),
                moving_time_sec=sum(a.moving_time_sec or 0 for a in week),
                trimp=round(calculate_total_trimp((to_activity_metrics(a) for a in week), athlete_max_hr), 1),
                activity_count=len(week),
            )
        )

    return results
