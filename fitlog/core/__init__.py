"""Core configuration and infrastructure helpers."""

from .config import (
    ALLOWED_CORS_ORIGINS,
    BACKEND_URL,
    COOKIE_DOMAIN,
    COOKIE_SAMESITE,
    COOKIE_SECURE,
    FRONTEND_ORIGIN,
    FRONTEND_ORIGINS,
    GOOGLE_CLIENT_ID,
    GOOGLE_CLIENT_SECRET,
    LOG_LEVEL,
    OAUTH_REDIRECT_URL,
    SECRET_KEY,
    GarminConfig,
    load_garmin_config,
)
from .database import engine, get_session, init_db
from .logging import configure_logging
from .time import utcnow

__all__ = [
    "ALLOWED_CORS_ORIGINS",
    "BACKEND_URL",
    "COOKIE_DOMAIN",
    "COOKIE_SAMESITE",
    "COOKIE_SECURE",
    "FRONTEND_ORIGIN",
    "FRONTEND_ORIGINS",
    "GOOGLE_CLIENT_ID",
    "GOOGLE_CLIENT_SECRET",
    "GarminConfig",
    "LOG_LEVEL",
    "OAUTH_REDIRECT_URL",
    "SECRET_KEY",
    "configure_logging",
    "engine",
    "get_session",
    "init_db",
    "load_garmin_config",
    "utcnow",
]
