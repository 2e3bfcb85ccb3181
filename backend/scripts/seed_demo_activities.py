from datetime import datetime, time, timedelta, timezone
import random

from qtrun.db import Base, SessionLocal, engine
from qtrun.models.activity import Activity
from qtrun.models.race import Race  # noqa: F401  (registers the races table)


def clear_recent_activities(db, days: int = 120) -> None:
    """Delete manual activities in the last N days so we can reseed cleanly."""
    cutoff = datetime.now(timezone.utc) - timedelta(days=days)
    db.query(Activity).filter(Activity.start_date_time >= cutoff).filter(Activity.source == "manual").delete(
        synchronize_session=False
    )
    db.commit()


def _hr_series(seconds: int, start_bpm: int, end_bpm: int) -> list[int]:
    """Linearly drifting HR with a little noise, one sample per second."""
    series = []
    for i in range(seconds):
        base = start_bpm + (end_bpm - start_bpm) * i / max(1, seconds - 1)
        series.append(int(base + random.uniform(-3, 3)))
    return series


def seed_demo_activities(db, weeks: int = 12) -> int:
    """Insert a block of demo runs (easy, workout, long) plus a closing 10K race."""
    now = datetime.now(timezone.utc)
    today = now.date()
    start_day = today - timedelta(weeks=weeks - 1)

    to_add = []

    for week in range(weeks):
        week_start = start_day + timedelta(weeks=week)

        # Tue easy, Thu workout, Sun long run
        for offset, name, km_range, pace_s_per_km, hr in [
            (1, "Easy run", (6.0, 10.0), 340, (135, 145)),
            (3, "Tempo workout", (8.0, 14.0), 290, (150, 165)),
            (6, "Long run", (16.0, 28.0), 330, (140, 155)),
        ]:
            day = week_start + timedelta(days=offset)
            if day > today:
                continue

            distance_m = round(random.uniform(*km_range), 1) * 1000
            moving_time = int(distance_m / 1000 * pace_s_per_km)
            series = _hr_series(moving_time, hr[0], hr[1])
            to_add.append(
                Activity(
                    name=name,
                    sport_type="Run",
                    start_date_time=datetime.combine(day, time(7, 0), tzinfo=timezone.utc),
                    moving_time_sec=moving_time,
                    distance_m=distance_m,
                    elevation_m=round(random.uniform(20, 150)),
                    average_heart_rate=int(sum(series) / len(series)),
                    max_heart_rate=max(series),
                    hr_series=series,
                    source="manual",
                )
            )

    race_day = today - timedelta(days=today.weekday() + 1)
    series = _hr_series(2520, 165, 182)
    to_add.append(
        Activity(
            name="Turkey Trot 10K",
            sport_type="Run",
            start_date_time=datetime.combine(race_day, time(8, 0), tzinfo=timezone.utc),
            moving_time_sec=2520,
            distance_m=10040,
            elevation_m=35,
            average_heart_rate=int(sum(series) / len(series)),
            max_heart_rate=max(series),
            hr_series=series,
            source="manual",
        )
    )

    db.add_all(to_add)
    db.commit()
    return len(to_add)


if __name__ == "__main__":
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        clear_recent_activities(session)
        count = seed_demo_activities(session)
        print(f"Seeded {count} activities")
    finally:
        session.close()
