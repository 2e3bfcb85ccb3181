from datetime import date, datetime, time, timedelta, timezone
from typing import Optional
import os

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from loguru import logger
from sqlalchemy.orm import Session

from qtrun.core.activity_files import parse_fit, parse_gpx
from qtrun.core.coaching import (
    COACHING_SYSTEM_PROMPT,
    build_coaching_prompt,
    calculate_pace_drift,
)
from qtrun.core.config import settings
from qtrun.core.hr_drift import calculate_hr_drift
from qtrun.core.hr_zones import calculate_heart_rate_zones, calculate_time_in_zones
from qtrun.core.race_detection import detect_race
from qtrun.core.time_utils import (
    compute_pace,
    hhmmss_to_seconds,
    seconds_to_hhmmss,
    to_local_datetime,
)
from qtrun.core.trimp import calculate_trimp
from qtrun.core.units import (
    MeasurementUnit,
    convert_distance,
    format_speed,
    get_distance_unit,
)
from qtrun.db import get_db
from qtrun.models.activity import Activity
from qtrun.schemas.activity import (
    ActivityAnalysis,
    ActivityCreate,
    ActivityRead,
    ActivityUpdate,
    MarkAsRace,
)
from qtrun.schemas.metrics import ActivityMetrics, RaceCandidate, RaceDetectionResult

router = APIRouter(prefix="/activities", tags=["activities"])

# Columns a partial update may change but never clear
ACTIVITY_REQUIRED_FIELDS = ("sport_type", "start_date_time")


def to_activity_metrics(activity: Activity) -> ActivityMetrics:
    """Map a stored activity onto the fields the metric functions read.

    Missing values are defaulted here so the calculations never see NULLs
    for required fields.
    """
    return ActivityMetrics(
        start_date_time=activity.start_date_time,
        moving_time_sec=activity.moving_time_sec or 0,
        average_heart_rate=activity.average_heart_rate,
        max_heart_rate=activity.max_heart_rate,
        average_power=activity.average_power,
        distance=activity.distance_m,
        elevation=activity.elevation_m,
    )


def to_race_candidate(activity: Activity) -> RaceCandidate:
    return RaceCandidate(
        activity_id=str(activity.id),
        activity_name=activity.name,
        date=activity.start_date_time,
        distance=activity.distance_m,
        workout_type=activity.workout_type,
        suffer_score=activity.suffer_score,
    )


def to_activity_read(activity: Activity, unit: MeasurementUnit) -> ActivityRead:
    distance_m = activity.distance_m or 0.0
    return ActivityRead(
        id=activity.id,
        name=activity.name,
        sport_type=activity.sport_type,
        start_date_time=activity.start_date_time,
        distance_m=activity.distance_m,
        elevation_m=activity.elevation_m,
        average_heart_rate=activity.average_heart_rate,
        max_heart_rate=activity.max_heart_rate,
        average_power=activity.average_power,
        source=activity.source,
        start_local=to_local_datetime(activity.start_date_time, settings.timezone),
        duration=seconds_to_hhmmss(activity.moving_time_sec or 0),
        distance=round(convert_distance(distance_m, unit), 2),
        distance_unit=get_distance_unit(unit),
        pace=compute_pace(activity.moving_time_sec or 0, distance_m, unit),
        is_race=bool(activity.is_race),
        race_name=activity.race_name,
        race_distance_class=activity.race_distance_class,
    )


def _get_activity_or_404(db: Session, activity_id: int) -> Activity:
    activity = db.query(Activity).filter(Activity.id == activity_id).first()
    if not activity:
        raise HTTPException(status_code=404, detail="Activity not found")
    return activity


def reject_cleared_fields(update_data: dict, required: tuple[str, ...]) -> None:
    """422 when a partial update sends null for a column that cannot be empty."""
    cleared = [key for key in required if key in update_data and update_data[key] is None]
    if cleared:
        raise HTTPException(status_code=422, detail=f"{', '.join(cleared)} cannot be null")


@router.post("/", response_model=ActivityRead)
def create_activity(payload: ActivityCreate, db: Session = Depends(get_db)):
    try:
        moving_time_sec = hhmmss_to_seconds(payload.duration)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    if payload.distance_m is not None and payload.distance_m <= 0:
        raise HTTPException(status_code=422, detail="distance_m must be > 0")

    activity = Activity(
        name=payload.name,
        sport_type=payload.sport_type,
        start_date_time=payload.start_date_time,
        moving_time_sec=moving_time_sec,
        distance_m=payload.distance_m,
        elevation_m=payload.elevation_m,
        average_heart_rate=payload.average_heart_rate,
        max_heart_rate=payload.max_heart_rate,
        average_power=payload.average_power,
        hr_series=payload.hr_series,
        source="manual",
    )
    db.add(activity)
    db.commit()
    db.refresh(activity)
    logger.info(f"[ACTIVITIES] Created manual activity id={activity.id}")

    return to_activity_read(activity, settings.units)


@router.get("/", response_model=list[ActivityRead])
def list_activities(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    sport_type: Optional[str] = Query(None),
    is_race: Optional[bool] = Query(None),
    unit: Optional[MeasurementUnit] = Query(None),
    db: Session = Depends(get_db),
):
    """
    List activities, optionally filtered by [start_date, end_date] (inclusive days).

      GET /activities?start_date=2025-01-06&end_date=2025-01-12
    """
    query = db.query(Activity)

    if start_date is not None:
        query = query.filter(Activity.start_date_time >= datetime.combine(start_date, time.min))
    if end_date is not None:
        query = query.filter(Activity.start_date_time < datetime.combine(end_date + timedelta(days=1), time.min))
    if sport_type is not None:
        query = query.filter(Activity.sport_type == sport_type)
    if is_race is not None:
        query = query.filter(Activity.is_race == is_race)

    # Most recent first
    activities = query.order_by(Activity.start_date_time.desc()).all()
    preferred = unit or settings.units
    return [to_activity_read(a, preferred) for a in activities]


@router.post("/import", response_model=ActivityRead)
def import_activity(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
):
    filename = file.filename or "import"
    ext = os.path.splitext(filename)[1].lower()
    if ext not in [".gpx", ".fit"]:
        raise HTTPException(status_code=400, detail="Only .gpx or .fit files are supported")

    dir_path = os.path.join(settings.uploads_dir, "imports")
    os.makedirs(dir_path, exist_ok=True)
    save_path = os.path.join(dir_path, os.path.basename(filename))
    with open(save_path, "wb") as out:
        out.write(file.file.read())

    try:
        parsed = parse_gpx(save_path) if ext == ".gpx" else parse_fit(save_path)
    except ValueError as e:
        logger.warning(f"[ACTIVITIES] Rejected upload {filename}: {e}")
        raise HTTPException(status_code=400, detail=f"Invalid file: {e}")

    activity = Activity(
        name=os.path.splitext(filename)[0] or "Imported activity",
        sport_type="Run",
        start_date_time=parsed.start_date_time or datetime.now(timezone.utc),
        moving_time_sec=parsed.moving_time_sec,
        distance_m=parsed.distance_m or None,
        elevation_m=parsed.elevation_m or None,
        average_heart_rate=parsed.average_heart_rate,
        max_heart_rate=parsed.max_heart_rate,
        hr_series=parsed.hr_samples or None,
        speed_series=parsed.speed_samples or None,
        source=ext.lstrip("."),
    )
    db.add(activity)
    db.commit()
    db.refresh(activity)
    logger.info(
        f"[ACTIVITIES] Imported {filename} as activity id={activity.id} "
        f"({len(parsed.hr_samples)} HR samples)"
    )

    return to_activity_read(activity, settings.units)


@router.get("/{activity_id}", response_model=ActivityRead)
def get_activity(
    activity_id: int,
    unit: Optional[MeasurementUnit] = Query(None),
    db: Session = Depends(get_db),
):
    activity = _get_activity_or_404(db, activity_id)
    return to_activity_read(activity, unit or settings.units)


@router.put("/{activity_id}", response_model=ActivityRead)
def update_activity(activity_id: int, payload: ActivityUpdate, db: Session = Depends(get_db)):
    activity = _get_activity_or_404(db, activity_id)

    update_data = payload.model_dump(exclude_unset=True)
    reject_cleared_fields(update_data, ACTIVITY_REQUIRED_FIELDS)

    if "duration" in update_data:
        duration = update_data.pop("duration")
        if duration is not None:
            try:
                activity.moving_time_sec = hhmmss_to_seconds(duration)
            except ValueError as e:
                raise HTTPException(status_code=422, detail=str(e))

    if update_data.get("distance_m") is not None and update_data["distance_m"] <= 0:
        raise HTTPException(status_code=422, detail="distance_m must be > 0")

    for key, value in update_data.items():
        setattr(activity, key, value)

    db.commit()
    db.refresh(activity)
    return to_activity_read(activity, settings.units)


@router.delete("/{activity_id}")
def delete_activity(activity_id: int, db: Session = Depends(get_db)):
    activity = _get_activity_or_404(db, activity_id)
    db.delete(activity)
    db.commit()
    return {"message": "Activity deleted"}


@router.get("/{activity_id}/analysis", response_model=ActivityAnalysis)
def get_activity_analysis(
    activity_id: int,
    max_hr: Optional[int] = Query(None, gt=0, description="Overrides the configured max HR"),
    unit: Optional[MeasurementUnit] = Query(None),
    db: Session = Depends(get_db),
):
    """Training metrics for one activity: load, zones, drift and the coaching brief."""
    activity = _get_activity_or_404(db, activity_id)
    athlete_max_hr = max_hr or settings.athlete_max_hr
    metrics = to_activity_metrics(activity)

    hr_samples = [int(hr) for hr in (activity.hr_series or []) if hr is not None]
    # Velocity stream -> seconds per meter
    pace_samples = [1 / v for v in (activity.speed_series or []) if v and v > 0]

    average_speed = None
    if activity.average_speed:
        average_speed = format_speed(activity.average_speed, unit or settings.units)
    elif activity.distance_m and activity.moving_time_sec:
        average_speed = format_speed(activity.distance_m / activity.moving_time_sec, unit or settings.units)

    return ActivityAnalysis(
        activity_id=activity.id,
        max_hr=athlete_max_hr,
        trimp=calculate_trimp(metrics, athlete_max_hr),
        hr_drift=calculate_hr_drift(hr_samples),
        pace_drift=calculate_pace_drift(pace_samples),
        zones=calculate_heart_rate_zones(athlete_max_hr),
        time_in_zones=calculate_time_in_zones(hr_samples, athlete_max_hr),
        average_speed=average_speed,
        coaching_system_prompt=COACHING_SYSTEM_PROMPT,
        coaching_prompt=build_coaching_prompt(
            activity.name, metrics, athlete_max_hr, hr_samples, pace_samples
        ),
    )


@router.get("/{activity_id}/race-detection", response_model=RaceDetectionResult)
def get_race_detection(activity_id: int, db: Session = Depends(get_db)):
    """Score a single activity as a possible race without storing anything."""
    activity = _get_activity_or_404(db, activity_id)
    return detect_race(to_race_candidate(activity))


@router.post("/{activity_id}/race", response_model=ActivityRead)
def mark_activity_as_race(activity_id: int, payload: MarkAsRace, db: Session = Depends(get_db)):
    activity = _get_activity_or_404(db, activity_id)

    activity.is_race = True
    for key, value in payload.model_dump().items():
        setattr(activity, key, value)

    db.commit()
    db.refresh(activity)
    logger.info(f"[RACES] Activity id={activity.id} marked as race ({activity.race_distance_class})")
    return to_activity_read(activity, settings.units)


@router.delete("/{activity_id}/race", response_model=ActivityRead)
def unmark_activity_as_race(activity_id: int, db: Session = Depends(get_db)):
    activity = _get_activity_or_404(db, activity_id)

    activity.is_race = False
    activity.race_name = None
    activity.race_distance_class = None
    activity.official_time_sec = None
    activity.placement = None
    activity.age_group_placement = None
    activity.gender_placement = None
    activity.is_pr = False
    activity.race_notes = None
    activity.linked_race_id = None
    activity.race_detected = False
    activity.race_detection_confidence = None

    db.commit()
    db.refresh(activity)
    logger.info(f"[RACES] Activity id={activity.id} unmarked as race")
    return to_activity_read(activity, settings.units)
