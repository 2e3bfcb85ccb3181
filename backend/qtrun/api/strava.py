from fastapi import APIRouter, Depends, HTTPException, Query
from loguru import logger
from sqlalchemy.orm import Session
from qtrun.db import get_db
from qtrun.core.config import settings
from qtrun.models.activity import Activity
import os, json, time
import httpx
from datetime import datetime, timezone
from urllib.parse import urlencode

router = APIRouter(prefix="/strava", tags=["strava"])

STRAVA_OAUTH_URL = "https://www.strava.com/oauth"
STRAVA_API_URL = "https://www.strava.com/api/v3"


def _ensure_dir(path: str):
    os.makedirs(os.path.dirname(path), exist_ok=True)


def activity_from_strava(a: dict) -> Activity:
    """Map a Strava SummaryActivity onto a new Activity row (streams excluded)."""
    start = a.get("start_date")
    start_dt = (
        datetime.fromisoformat(start.replace("Z", "+00:00"))
        if start else datetime.now(timezone.utc)
    )
    avg_hr = a.get("average_heartrate")
    max_hr = a.get("max_heartrate")
    suffer = a.get("suffer_score")
    workout_type = a.get("workout_type")

    return Activity(
        external_id=str(a["id"]),
        source="strava",
        name=a.get("name") or "Strava Activity",
        sport_type=a.get("sport_type") or a.get("type") or "Run",
        start_date_time=start_dt,
        moving_time_sec=int(a.get("moving_time") or 0),
        distance_m=float(a["distance"]) if a.get("distance") else None,
        elevation_m=float(a["total_elevation_gain"]) if a.get("total_elevation_gain") is not None else None,
        average_heart_rate=round(avg_hr) if avg_hr else None,
        max_heart_rate=round(max_hr) if max_hr else None,
        average_power=a.get("average_watts"),
        average_speed=a.get("average_speed"),
        max_speed=a.get("max_speed"),
        workout_type=str(workout_type) if workout_type is not None else None,
        suffer_score=int(suffer) if suffer is not None else None,
    )


def check_rate_limits(headers) -> tuple[int, int, int, int]:
    """Read Strava's X-RateLimit headers -> (minute_limit, minute_used, day_limit, day_used)."""
    ml = headers.get("X-RateLimit-Limit")
    mu = headers.get("X-RateLimit-Usage")
    try:
        minute_limit, day_limit = [int(x) for x in ml.split(",")] if ml else (100, 1000)
        minute_used, day_used = [int(x) for x in mu.split(",")] if mu else (0, 0)
    except ValueError:
        minute_limit, day_limit, minute_used, day_used = 100, 1000, 0, 0
    return minute_limit, minute_used, day_limit, day_used


def _near_minute_limit(resp) -> bool:
    mlim, mused, _, _ = check_rate_limits(resp.headers)
    return mused >= max(1, mlim - 5)


@router.get("/auth_url")
def get_auth_url():
    if not (settings.strava_client_id and settings.strava_redirect_uri):
        raise HTTPException(status_code=400, detail="Strava client not configured")
    params = {
        "client_id": settings.strava_client_id,
        "redirect_uri": settings.strava_redirect_uri,
        "response_type": "code",
        "approval_prompt": "auto",
        "scope": "read,activity:read_all",
    }
    return {"url": f"{STRAVA_OAUTH_URL}/authorize?{urlencode(params)}"}


@router.get("/callback")
def oauth_callback(code: str):
    if not (settings.strava_client_id and settings.strava_client_secret):
        raise HTTPException(status_code=400, detail="Strava client not configured")
    data = {
        "client_id": settings.strava_client_id,
        "client_secret": settings.strava_client_secret,
        "code": code,
        "grant_type": "authorization_code",
    }
    with httpx.Client(timeout=30) as client:
        r = client.post(f"{STRAVA_OAUTH_URL}/token", data=data)
        if r.status_code != 200:
            logger.warning(f"[STRAVA] Token exchange failed: {r.status_code}")
            raise HTTPException(status_code=400, detail=f"Strava auth failed: {r.text}")
        tok = r.json()
    _save_tokens(tok)
    logger.info("[STRAVA] Account linked")
    return {"message": "Strava linked. You can close this window."}


def _load_tokens():
    try:
        with open(settings.strava_tokens_path, "r") as f:
            return json.load(f)
    except FileNotFoundError:
        return None


def _save_tokens(tok):
    _ensure_dir(settings.strava_tokens_path)
    with open(settings.strava_tokens_path, "w") as f:
        json.dump(tok, f)


def _refresh_if_needed(tok):
    now = int(time.time())
    if tok.get("expires_at", 0) - now > 60:
        return tok
    data = {
        "client_id": settings.strava_client_id,
        "client_secret": settings.strava_client_secret,
        "grant_type": "refresh_token",
        "refresh_token": tok.get("refresh_token"),
    }
    with httpx.Client(timeout=30) as client:
        r = client.post(f"{STRAVA_OAUTH_URL}/token", data=data)
        if r.status_code != 200:
            logger.warning(f"[STRAVA] Token refresh failed: {r.status_code}")
            raise HTTPException(status_code=400, detail=f"Strava token refresh failed: {r.text}")
        nt = r.json()
    _save_tokens(nt)
    logger.info("[STRAVA] Access token refreshed")
    return nt


@router.post("/sync")
def sync_recent_activities(
    weeks: int = Query(12, ge=1, le=104, description="Ignored if start_date provided"),
    types: str = Query("Run,TrailRun,Ride,VirtualRide", description="Comma-separated Strava sport types to import"),
    max_activities: int | None = Query(None, ge=1, description="Optional hard cap of activities to import this call"),
    start_date: str | None = Query(None, description="YYYY-MM-DD (inclusive). Overrides weeks when set."),
    end_date: str | None = Query(None, description="YYYY-MM-DD (exclusive). Optional with start_date."),
    start_page: int = Query(1, ge=1, description="Start page when paginating a date window"),
    db: Session = Depends(get_db),
):
    tok = _load_tokens()
    if not tok:
        raise HTTPException(status_code=400, detail="Strava not linked. Hit /strava/auth_url first.")
    tok = _refresh_if_needed(tok)
    hdrs = {"Authorization": f"Bearer {tok['access_token']}"}

    # Build time window: prefer explicit dates
    try:
        if start_date:
            after = int(datetime.fromisoformat(start_date).replace(tzinfo=timezone.utc).timestamp())
            before = (
                int(datetime.fromisoformat(end_date).replace(tzinfo=timezone.utc).timestamp())
                if end_date else None
            )
        else:
            after = int(time.time() - weeks * 7 * 86400)
            before = None
    except ValueError:
        raise HTTPException(status_code=422, detail="Dates must be YYYY-MM-DD")

    imported = 0
    per_page = 200
    if max_activities and max_activities < per_page:
        per_page = max_activities

    page = start_page
    allowed_types = {t.strip() for t in types.split(",") if t.strip()}
    logger.info(f"[STRAVA] Sync starting after={after} before={before} page={page}")

    with httpx.Client(timeout=60, headers=hdrs) as client:
        while True:
            params = {"after": after, "per_page": per_page, "page": page}
            if before:
                params["before"] = before
            r = client.get(f"{STRAVA_API_URL}/athlete/activities", params=params)
            if r.status_code != 200:
                logger.warning(f"[STRAVA] List activities failed: {r.status_code}")
                raise HTTPException(status_code=400, detail=f"Strava list activities failed: {r.text}")
            acts = r.json()
            # Stop early if approaching minute limit
            if _near_minute_limit(r) or not acts:
                break

            for a in acts:
                sport = a.get("sport_type") or a.get("type")
                if allowed_types and sport not in allowed_types:
                    continue
                external_id = str(a.get("id"))
                if db.query(Activity).filter(Activity.external_id == external_id).first():
                    logger.debug(f"[STRAVA] Skipping already imported activity {external_id}")
                    continue

                activity = activity_from_strava(a)
                db.add(activity)

                # Streams for HR analysis
                sr = client.get(
                    f"{STRAVA_API_URL}/activities/{external_id}/streams",
                    params={"keys": "time,heartrate,velocity_smooth", "key_by_type": True},
                )
                if sr.status_code == 200:
                    streams = sr.json()
                    activity.hr_series = streams.get("heartrate", {}).get("data") or None
                    activity.speed_series = streams.get("velocity_smooth", {}).get("data") or None
                else:
                    logger.warning(f"[STRAVA] Streams unavailable for {external_id}: {sr.status_code}")

                imported += 1
                db.commit()

                # Rate limited? Bail gracefully; user can call sync again.
                if _near_minute_limit(sr):
                    logger.info(f"[STRAVA] Rate limit reached after {imported} imports")
                    return {"imported": imported, "note": "rate limit reached; run sync again to continue"}
                if max_activities and imported >= max_activities:
                    logger.info(f"[STRAVA] Imported {imported} activities (cap reached)")
                    return {"imported": imported}

            page += 1

    logger.info(f"[STRAVA] Imported {imported} activities")
    return {"imported": imported}
