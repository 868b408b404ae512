"""Aggregate API routers."""

from fastapi import APIRouter

from .auth import router as auth_router
from .garmin import router as garmin_router
from .system import router as system_router
from .workouts import router as workouts_router

ALL_ROUTERS: tuple[APIRouter, ...] = (
    system_router,
    auth_router,
    garmin_router,
    workouts_router,
)

__all__ = ["ALL_ROUTERS"]
