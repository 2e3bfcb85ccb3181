from sqlalchemy import Boolean, Column, Date, DateTime, Float, Integer, String
from sqlalchemy.sql import func
from qtrun.db import Base


class Race(Base):
    __tablename__ = "races"

    id = Column(Integer, primary_key=True, index=True)

    name = Column(String, nullable=False)
    date = Column(Date, nullable=False, index=True)
    distance_m = Column(Float, nullable=True)
    distance_class = Column(String(40), nullable=True)  # e.g. "Marathon"
    location = Column(String, nullable=True)
    goal_time_sec = Column(Integer, nullable=True)

    priority = Column(String(1), nullable=False, server_default="A")  # A, B, C
    status = Column(
        String(20),
        nullable=False,
        server_default="upcoming",  # upcoming, completed, dns, dnf
    )

    race_url = Column(String, nullable=True)
    course_url = Column(String, nullable=True)
    bib_number = Column(String(20), nullable=True)
    notes = Column(String, nullable=True)

    # Result, filled when an activity is linked
    linked_activity_id = Column(Integer, nullable=True)
    result_time_sec = Column(Integer, nullable=True)
    result_placement = Column(Integer, nullable=True)
    is_pr = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
