"""Database model for logged and imported workouts."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import Field as ORMField, SQLModel

from ..core.time import utcnow

SOURCE_MANUAL = "manual"
SOURCE_GARMIN = "garmin"


class Workout(SQLModel, table=True):
    """A training session, typed by activity and tagged with its origin."""

    __tablename__ = "workouts"

    id: uuid.UUID = ORMField(default_factory=uuid.uuid4, primary_key=True, nullable=False)
    user_id: uuid.UUID = ORMField(foreign_key="users.id", index=True)
    name: str
    date: str  # YYYY-MM-DD
    duration_minutes: Optional[int] = None
    calories_burned: Optional[float] = None
    notes: Optional[str] = None
    activity_type: str = ORMField(default="strength")
    perceived_effort: Optional[int] = None
    # Unique so a Garmin activity can only ever be imported once.
    garmin_activity_id: Optional[str] = ORMField(default=None, unique=True, index=True)
    source: str = ORMField(default=SOURCE_MANUAL)
    logged_at: datetime = ORMField(default_factory=utcnow)


__all__ = ["SOURCE_GARMIN", "SOURCE_MANUAL", "Workout"]
