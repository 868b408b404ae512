"""FastAPI application factory and configuration."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from .api.routers import ALL_ROUTERS
from .core import (
    ALLOWED_CORS_ORIGINS,
    COOKIE_DOMAIN,
    COOKIE_SAMESITE,
    COOKIE_SECURE,
    LOG_LEVEL,
    SECRET_KEY,
    GarminConfig,
    configure_logging,
    init_db,
    load_garmin_config,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Database initialized")
    if not app.state.garmin_config.configured:
        logger.warning("Garmin consumer key/secret not set; Garmin connect is disabled")
    yield


def create_app(garmin_config: Optional[GarminConfig] = None) -> FastAPI:
    configure_logging(LOG_LEVEL)

    app = FastAPI(title="Fitlog API", version="0.3.0", lifespan=lifespan)
    app.state.garmin_config = garmin_config or load_garmin_config()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(
        SessionMiddleware,
        secret_key=SECRET_KEY,
        session_cookie="sid",
        https_only=COOKIE_SECURE,
        same_site=COOKIE_SAMESITE,
        domain=COOKIE_DOMAIN,
    )

    for router in ALL_ROUTERS:
        app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("fitlog.app:app", host="127.0.0.1", port=3000, reload=True)
