"""Application settings and environment helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List

from dotenv import load_dotenv

load_dotenv(override=False)


def _require_env(name: str) -> str:
    """Return a required environment variable or raise an error."""

    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be a number") from exc


def _split_csv(raw: str | None) -> List[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def _unique(values: Iterable[str]) -> List[str]:
    seen = set()
    ordered: List[str] = []
    for value in values:
        if value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered


# Application security -------------------------------------------------------
SECRET_KEY = _require_env("SECRET_KEY")

# FRONTEND_ORIGIN can contain a comma-separated list for multi-domain deploys.
_frontend_origins = _split_csv(_require_env("FRONTEND_ORIGIN"))
_additional_origins = _split_csv(os.getenv("ADDITIONAL_ALLOWED_ORIGINS"))

_local_dev_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

ALLOWED_CORS_ORIGINS = _unique(
    [
        *_frontend_origins,
        *_additional_origins,
        *_local_dev_origins,
    ]
)

FRONTEND_ORIGINS = _frontend_origins
FRONTEND_ORIGIN = FRONTEND_ORIGINS[0] if FRONTEND_ORIGINS else ""


# Runtime behaviour ----------------------------------------------------------
BACKEND_URL = os.getenv("BACKEND_URL", "http://127.0.0.1:3000").rstrip("/")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

COOKIE_DOMAIN = os.getenv("COOKIE_DOMAIN") or None
COOKIE_SECURE = _env_bool("COOKIE_SECURE", False)
COOKIE_SAMESITE = os.getenv("COOKIE_SAMESITE", "lax")

_PROJECT_ROOT = Path(__file__).resolve().parents[2]
DATABASE_URL = os.getenv("DATABASE_URL") or f"sqlite:///{_PROJECT_ROOT / 'data' / 'app.db'}"
DB_RESET = _env_bool("DB_RESET", False)


# Google sign-in -------------------------------------------------------------
GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID")
GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET")
OAUTH_REDIRECT_URL = os.getenv(
    "OAUTH_REDIRECT_URL", f"{BACKEND_URL}/auth/google/callback"
)


# Garmin Connect -------------------------------------------------------------
GARMIN_REQUEST_TOKEN_URL = "https://connectapi.garmin.com/oauth-service/oauth/request_token"
GARMIN_AUTHORIZE_URL = "https://connectapi.garmin.com/oauth-service/oauth/authorize"
GARMIN_ACCESS_TOKEN_URL = "https://connectapi.garmin.com/oauth-service/oauth/access_token"
GARMIN_API_BASE = "https://healthapi.garmin.com/wellness-api/rest"


@dataclass(frozen=True)
class GarminConfig:
    """Garmin Connect client settings, built once at startup."""

    consumer_key: str
    consumer_secret: str
    callback_url: str
    settings_url: str
    signin_url: str
    request_token_url: str = GARMIN_REQUEST_TOKEN_URL
    authorize_url: str = GARMIN_AUTHORIZE_URL
    access_token_url: str = GARMIN_ACCESS_TOKEN_URL
    api_base: str = GARMIN_API_BASE
    timeout: float = 30.0

    @property
    def configured(self) -> bool:
        return bool(self.consumer_key and self.consumer_secret)


def load_garmin_config() -> GarminConfig:
    """Read Garmin settings from the environment."""

    settings_path = os.getenv("GARMIN_SETTINGS_PATH", "/settings")
    return GarminConfig(
        consumer_key=os.getenv("GARMIN_CONSUMER_KEY", ""),
        consumer_secret=os.getenv("GARMIN_CONSUMER_SECRET", ""),
        callback_url=os.getenv(
            "GARMIN_CALLBACK_URL", f"{BACKEND_URL}/api/auth/garmin/callback"
        ),
        settings_url=f"{FRONTEND_ORIGIN}{settings_path}",
        signin_url=f"{FRONTEND_ORIGIN}/auth/signin",
        timeout=_env_float("GARMIN_HTTP_TIMEOUT", 30.0),
    )


__all__ = [
    "ALLOWED_CORS_ORIGINS",
    "BACKEND_URL",
    "COOKIE_DOMAIN",
    "COOKIE_SAMESITE",
    "COOKIE_SECURE",
    "DATABASE_URL",
    "DB_RESET",
    "FRONTEND_ORIGIN",
    "FRONTEND_ORIGINS",
    "GOOGLE_CLIENT_ID",
    "GOOGLE_CLIENT_SECRET",
    "GarminConfig",
    "LOG_LEVEL",
    "OAUTH_REDIRECT_URL",
    "SECRET_KEY",
    "load_garmin_config",
]
