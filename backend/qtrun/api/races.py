from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from loguru import logger
from sqlalchemy import or_
from sqlalchemy.orm import Session

from qtrun.api.activities import reject_cleared_fields, to_race_candidate
from qtrun.core.config import settings
from qtrun.core.race_detection import STANDARD_DISTANCES, detect_race, is_likely_race
from qtrun.db import get_db
from qtrun.models.activity import Activity
from qtrun.models.race import Race
from qtrun.schemas.metrics import RaceDetectionResult, StandardDistance
from qtrun.schemas.race import RaceCreate, RaceRead, RaceStatus, RaceStatusFilter, RaceUpdate

router = APIRouter(prefix="/races", tags=["races"])

FINISHED_STATUSES = (RaceStatus.completed.value, RaceStatus.dns.value, RaceStatus.dnf.value)
RACE_REQUIRED_FIELDS = ("name", "date", "priority", "status", "is_pr")


def _get_race_or_404(db: Session, race_id: int) -> Race:
    race = db.query(Race).filter(Race.id == race_id).first()
    if not race:
        raise HTTPException(status_code=404, detail="Race not found")
    return race


def _upcoming_query(db: Session):
    return (
        db.query(Race)
        .filter(Race.status == RaceStatus.upcoming.value)
        .filter(Race.date >= date.today())
        .order_by(Race.date.asc())
    )


@router.get("/", response_model=list[RaceRead])
def list_races(
    status: RaceStatusFilter = Query(RaceStatusFilter.all),
    db: Session = Depends(get_db),
):
    query = db.query(Race)
    if status == RaceStatusFilter.upcoming:
        return query.filter(Race.status == RaceStatus.upcoming.value).order_by(Race.date.asc()).all()
    if status == RaceStatusFilter.completed:
        query = query.filter(Race.status.in_(FINISHED_STATUSES))
    return query.order_by(Race.date.desc()).all()


@router.get("/upcoming", response_model=list[RaceRead])
def list_upcoming_races(limit: int = Query(5, ge=1, le=50), db: Session = Depends(get_db)):
    return _upcoming_query(db).limit(limit).all()


@router.get("/next", response_model=RaceRead)
def get_next_race(db: Session = Depends(get_db)):
    race = _upcoming_query(db).first()
    if not race:
        raise HTTPException(status_code=404, detail="No upcoming race")
    return race


@router.get("/standard-distances", response_model=list[StandardDistance])
def list_standard_distances():
    return list(STANDARD_DISTANCES)


@router.post("/", response_model=RaceRead)
def create_race(payload: RaceCreate, db: Session = Depends(get_db)):
    if payload.distance_m is not None and payload.distance_m <= 0:
        raise HTTPException(status_code=422, detail="distance_m must be > 0")

    race = Race(**payload.model_dump(), status=RaceStatus.upcoming.value)
    db.add(race)
    db.commit()
    db.refresh(race)
    logger.info(f"[RACES] Created race id={race.id} '{race.name}' on {race.date}")
    return race


@router.put("/{race_id}", response_model=RaceRead)
def update_race(race_id: int, payload: RaceUpdate, db: Session = Depends(get_db)):
    race = _get_race_or_404(db, race_id)
    update_data = payload.model_dump(exclude_unset=True)
    reject_cleared_fields(update_data, RACE_REQUIRED_FIELDS)

    if "date" in update_data:
        raw = update_data.pop("date")
        if raw is not None:
            try:
                race.date = date.fromisoformat(raw)
            except ValueError:
                raise HTTPException(status_code=422, detail="date must be YYYY-MM-DD")

    if isinstance(update_data.get("status"), RaceStatus):
        update_data["status"] = update_data["status"].value

    for key, value in update_data.items():
        setattr(race, key, value)

    db.commit()
    db.refresh(race)
    return race


@router.delete("/{race_id}")
def delete_race(race_id: int, db: Session = Depends(get_db)):
    race = _get_race_or_404(db, race_id)
    db.delete(race)
    db.commit()
    return {"message": "Race deleted"}


# --------- Auto-detection --------- #

@router.post("/detect", response_model=list[RaceDetectionResult])
def detect_possible_races(db: Session = Depends(get_db)):
    """Scan recent unmarked, unscanned activities for likely races.

    Hits are flagged as detected with their confidence so they are not
    re-scanned; they stay unconfirmed until marked or dismissed.
    """
    candidates = (
        db.query(Activity)
        .filter(Activity.is_race == False)  # noqa: E712
        .filter(or_(Activity.race_detected == False, Activity.race_detected.is_(None)))  # noqa: E712
        .order_by(Activity.start_date_time.desc())
        .limit(settings.race_detection_scan_limit)
        .all()
    )

    detected: list[RaceDetectionResult] = []
    for activity in candidates:
        result = detect_race(to_race_candidate(activity))
        if not is_likely_race(result, settings.race_detection_threshold):
            continue
        activity.race_detected = True
        activity.race_detection_confidence = result.confidence
        detected.append(result)
        logger.debug(
            f"[RACES] Activity id={activity.id} looks like a race "
            f"(confidence={result.confidence:.2f}, class={result.detected_distance_class})"
        )

    db.commit()
    logger.info(f"[RACES] Scanned {len(candidates)} activities, detected {len(detected)} possible races")
    return detected


@router.get("/detections/pending", response_model=list[RaceDetectionResult])
def list_pending_detections(db: Session = Depends(get_db)):
    pending = (
        db.query(Activity)
        .filter(Activity.race_detected == True)  # noqa: E712
        .filter(Activity.is_race == False)  # noqa: E712
        .filter(Activity.race_detection_confidence > 0)
        .order_by(Activity.start_date_time.desc())
        .limit(20)
        .all()
    )
    # Reasons are not stored; recompute them but keep the stored confidence
    results = []
    for activity in pending:
        result = detect_race(to_race_candidate(activity))
        results.append(result.model_copy(update={"confidence": activity.race_detection_confidence or 0.0}))
    return results


@router.post("/detections/{activity_id}/dismiss")
def dismiss_detection(activity_id: int, db: Session = Depends(get_db)):
    activity = db.query(Activity).filter(Activity.id == activity_id).first()
    if not activity:
        raise HTTPException(status_code=404, detail="Activity not found")

    # Detected with zero confidence = dismissed, never shown again
    activity.race_detected = True
    activity.race_detection_confidence = 0.0
    db.commit()
    return {"message": "Detection dismissed"}


@router.post("/{race_id}/link/{activity_id}", response_model=RaceRead)
def link_race_to_activity(race_id: int, activity_id: int, db: Session = Depends(get_db)):
    """Record that ``activity_id`` was the run of ``race_id``."""
    race = _get_race_or_404(db, race_id)
    activity = db.query(Activity).filter(Activity.id == activity_id).first()
    if not activity:
        raise HTTPException(status_code=404, detail="Activity not found")

    race.linked_activity_id = activity.id
    race.status = RaceStatus.completed.value
    race.result_time_sec = activity.moving_time_sec

    activity.is_race = True
    activity.linked_race_id = race.id
    activity.race_name = race.name
    activity.race_distance_class = race.distance_class

    db.commit()
    db.refresh(race)
    logger.info(f"[RACES] Linked race id={race.id} to activity id={activity.id}")
    return race
