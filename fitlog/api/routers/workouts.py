"""Workout log endpoints and the Garmin import trigger."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlmodel import Session, select

from ...core import get_session
from ...models import User, Workout
from ...services.activity_import import (
    DEFAULT_WINDOW_DAYS,
    import_activities,
    trailing_window,
)
from ...services.errors import NotConnectedError, UpstreamFetchError
from ...services.garmin import GarminClient
from ..deps import current_user, get_garmin_client, require_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/workouts", tags=["workouts"])


def workout_to_dict(workout: Workout) -> Dict[str, Any]:
    return {
        "id": str(workout.id),
        "name": workout.name,
        "date": workout.date,
        "durationMinutes": workout.duration_minutes,
        "caloriesBurned": workout.calories_burned,
        "notes": workout.notes,
        "activityType": workout.activity_type,
        "perceivedEffort": workout.perceived_effort,
        "source": workout.source,
        "garminActivityId": workout.garmin_activity_id,
        "loggedAt": workout.logged_at.isoformat() if workout.logged_at else None,
    }


@router.post("/sync-garmin")
async def sync_garmin(
    days: int = Query(DEFAULT_WINDOW_DAYS, ge=1, le=90),
    user: Optional[User] = Depends(current_user),
    session: Session = Depends(get_session),
    client: GarminClient = Depends(get_garmin_client),
):
    """Import the last ``days`` days of Garmin activities."""

    if user is None:
        return JSONResponse({"error": "Unauthorized"}, status_code=401)

    user_id = user.id
    start, end = trailing_window(days)
    try:
        result = await import_activities(session, client, user, start, end)
    except NotConnectedError:
        return JSONResponse(
            {
                "error": "Garmin not connected",
                "message": "Connect your Garmin account first via Settings.",
                "connected": False,
            },
            status_code=400,
        )
    except UpstreamFetchError as exc:
        logger.error("Garmin sync error for user %s: %s", user_id, exc)
        return JSONResponse(
            {"error": "Garmin sync failed", "details": str(exc)},
            status_code=500,
        )
    except Exception as exc:
        session.rollback()
        logger.exception("Unexpected Garmin sync error for user %s", user_id)
        return JSONResponse(
            {"error": "Garmin sync failed", "details": str(exc)},
            status_code=500,
        )

    return {"synced": result.synced, "total": result.total, "message": result.message}


@router.get("")
def list_workouts(
    limit: int = Query(20, ge=1, le=200),
    date: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}-\d{2}$"),
    user: User = Depends(require_user),
    session: Session = Depends(get_session),
):
    """List the signed-in user's workouts, newest first."""

    query = select(Workout).where(Workout.user_id == user.id)
    if date:
        query = query.where(Workout.date == date)
    workouts = session.exec(
        query.order_by(Workout.date.desc(), Workout.logged_at.desc()).limit(limit)
    ).all()
    return {"workouts": [workout_to_dict(workout) for workout in workouts]}


@router.delete("/{workout_id}")
def delete_workout(
    workout_id: uuid.UUID,
    user: User = Depends(require_user),
    session: Session = Depends(get_session),
):
    """Delete one of the user's workouts, manual or imported."""

    workout = session.get(Workout, workout_id)
    if not workout or workout.user_id != user.id:
        raise HTTPException(404, "Workout not found")

    session.delete(workout)
    session.commit()
    return {"success": True}


__all__ = ["router", "workout_to_dict"]
