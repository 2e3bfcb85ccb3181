from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.sql import func
from qtrun.db import Base


class Activity(Base):
    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, index=True)

    # Provider id (e.g. Strava activity id); NULL for manual entries
    external_id = Column(String, nullable=True, unique=True, index=True)
    source = Column(
        String(20),
        nullable=False,
        server_default="manual",  # manual, strava, gpx, fit
    )

    name = Column(String, nullable=True)
    sport_type = Column(String(40), nullable=False, server_default="Run")
    start_date_time = Column(DateTime(timezone=True), nullable=False, index=True)

    # All stored values are SI: seconds, meters, m/s
    moving_time_sec = Column(Integer, nullable=False, default=0)
    distance_m = Column(Float, nullable=True)
    elevation_m = Column(Float, nullable=True)
    average_heart_rate = Column(Integer, nullable=True)
    max_heart_rate = Column(Integer, nullable=True)
    average_power = Column(Float, nullable=True)
    average_speed = Column(Float, nullable=True)
    max_speed = Column(Float, nullable=True)

    # Strava extras used by race detection
    workout_type = Column(String(10), nullable=True)
    suffer_score = Column(Integer, nullable=True)

    # Raw streams, one sample per second
    hr_series = Column(JSON, nullable=True)     # [bpm, ...]
    speed_series = Column(JSON, nullable=True)  # [m/s, ...]

    # Race marking
    is_race = Column(Boolean, nullable=False, default=False)
    race_name = Column(String, nullable=True)
    race_distance_class = Column(String(40), nullable=True)
    official_time_sec = Column(Integer, nullable=True)
    placement = Column(Integer, nullable=True)
    age_group_placement = Column(Integer, nullable=True)
    gender_placement = Column(Integer, nullable=True)
    is_pr = Column(Boolean, nullable=False, default=False)
    race_notes = Column(String, nullable=True)
    linked_race_id = Column(Integer, ForeignKey("races.id", ondelete="SET NULL"), nullable=True)

    # Auto-detection bookkeeping (confidence 0 = dismissed)
    race_detected = Column(Boolean, nullable=False, default=False)
    race_detection_confidence = Column(Float, nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
