"""Import Garmin activities into the local workout log."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..models import SOURCE_GARMIN, User, Workout
from .errors import NotConnectedError
from .garmin import GarminClient, map_activity_type

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 30


@dataclass(frozen=True)
class ImportResult:
    synced: int
    total: int

    @property
    def message(self) -> str:
        if self.synced:
            return f"Synced {self.synced} new activities from Garmin"
        return "Already up to date"


def trailing_window(
    days: int = DEFAULT_WINDOW_DAYS, *, today: Optional[date] = None
) -> tuple[date, date]:
    """Return ``(start, end)`` covering the last ``days`` days up to today."""

    end = today or datetime.now(timezone.utc).date()
    return end - timedelta(days=days), end


def activity_date(activity: Dict[str, Any]) -> str:
    """Calendar day of the activity start, in the activity's local offset when given."""

    if activity.get("startTimeInSeconds") is None:
        raise ValueError("missing startTimeInSeconds")
    seconds = int(activity["startTimeInSeconds"])
    offset = int(activity.get("startTimeOffsetInSeconds") or 0)
    return datetime.fromtimestamp(seconds + offset, tz=timezone.utc).strftime("%Y-%m-%d")


def duration_minutes(activity: Dict[str, Any]) -> Optional[int]:
    seconds = activity.get("durationInSeconds")
    if seconds is None:
        return None
    # Half-up, not banker's rounding.
    return int(math.floor(float(seconds) / 60 + 0.5))


def workout_from_activity(user: User, activity: Dict[str, Any]) -> Workout:
    """Map one Garmin activity onto a workout.

    Raises ``ValueError`` or ``TypeError`` when a field cannot be read, and
    ``OverflowError`` or ``OSError`` for an out-of-range start time.
    """

    calories = activity.get("activeKilocalories")
    name = activity.get("activityName") or activity.get("activityType") or "Garmin activity"
    return Workout(
        user_id=user.id,
        name=str(name),
        date=activity_date(activity),
        duration_minutes=duration_minutes(activity),
        calories_burned=float(calories) if calories is not None else None,
        activity_type=map_activity_type(activity.get("activityType")),
        garmin_activity_id=str(activity["activityId"]),
        source=SOURCE_GARMIN,
    )


def _already_imported(session: Session, garmin_activity_id: str) -> bool:
    existing = session.exec(
        select(Workout.id).where(Workout.garmin_activity_id == garmin_activity_id)
    ).first()
    return existing is not None


def _map_activities(user: User, activities: List[Any]) -> List[Workout]:
    workouts: List[Workout] = []
    for activity in activities:
        if not isinstance(activity, dict) or activity.get("activityId") is None:
            logger.warning("Skipping Garmin activity without an activityId")
            continue
        try:
            workouts.append(workout_from_activity(user, activity))
        except (TypeError, ValueError, OverflowError, OSError) as exc:
            logger.warning(
                "Skipping malformed Garmin activity %s: %s", activity["activityId"], exc
            )
    return workouts


async def import_activities(
    session: Session,
    client: GarminClient,
    user: User,
    start: date,
    end: date,
) -> ImportResult:
    """
    Fetch the user's Garmin activities for ``start``..``end`` and add the new ones.

    Safe to re-run over overlapping windows: an activity whose Garmin id is
    already stored is skipped, and a unique-index violation on insert is
    treated the same way. Activities that cannot be mapped (no id, no start
    time, unreadable numbers) are logged and skipped before anything is
    written.

    Raises:
        NotConnectedError: the user has no stored access token pair
        UpstreamFetchError: the fetch failed; nothing has been written
    """
    if not user.garmin_connected:
        raise NotConnectedError("Garmin not connected")

    activities = await client.fetch_activities(
        user.garmin_access_token,
        user.garmin_access_token_secret,
        start,
        end,
    )
    user_id = user.id
    workouts = _map_activities(user, activities)

    synced = 0
    for workout in workouts:
        garmin_activity_id = workout.garmin_activity_id
        if _already_imported(session, garmin_activity_id):
            continue

        session.add(workout)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            logger.info("Garmin activity %s imported concurrently, skipping", garmin_activity_id)
            continue
        synced += 1

    logger.info(
        "Garmin import for user %s: %s new of %s", user_id, synced, len(activities)
    )
    return ImportResult(synced=synced, total=len(activities))


__all__ = [
    "DEFAULT_WINDOW_DAYS",
    "ImportResult",
    "activity_date",
    "duration_minutes",
    "import_activities",
    "trailing_window",
    "workout_from_activity",
]
