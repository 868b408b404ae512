"""Database model exports."""

from .user import User
from .workout import SOURCE_GARMIN, SOURCE_MANUAL, Workout

__all__ = [
    "SOURCE_GARMIN",
    "SOURCE_MANUAL",
    "User",
    "Workout",
]
