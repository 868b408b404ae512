"""Garmin Connect authorization routes."""

from __future__ import annotations

import logging
import uuid
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, RedirectResponse
from sqlmodel import Session

from ...core import GarminConfig, get_session
from ...models import User
from ...services.custody import SecretCustody
from ...services.errors import GarminError, UnauthenticatedError
from ...services.garmin import GarminClient
from ...services.garmin_connect import begin_connect, complete_connect, disconnect
from ..deps import (
    current_user,
    current_user_id,
    get_custody,
    get_garmin_client,
    get_garmin_config,
    require_user,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth/garmin", tags=["garmin"])


def _settings_url(config: GarminConfig, **params: str) -> str:
    return f"{config.settings_url}?{urlencode(params)}"


@router.get("/request")
async def garmin_request(
    user_id: Optional[uuid.UUID] = Depends(current_user_id),
    client: GarminClient = Depends(get_garmin_client),
    custody: SecretCustody = Depends(get_custody),
    config: GarminConfig = Depends(get_garmin_config),
):
    """Step 1: obtain a request token and send the browser to Garmin."""

    try:
        return await begin_connect(client, custody, user_id=user_id)
    except UnauthenticatedError:
        return JSONResponse({"error": "Unauthorized"}, status_code=401)
    except GarminError as exc:
        logger.error("Garmin request token error: %s", exc)
        return RedirectResponse(_settings_url(config, error=str(exc)), status_code=302)
    except Exception as exc:
        logger.exception("Unexpected Garmin request token error")
        return RedirectResponse(
            _settings_url(config, error=str(exc) or "Unknown error"), status_code=302
        )


@router.get("/callback")
async def garmin_callback(
    request: Request,
    oauth_token: Optional[str] = None,
    oauth_verifier: Optional[str] = None,
    oauth_problem: Optional[str] = None,
    user: Optional[User] = Depends(current_user),
    session: Session = Depends(get_session),
    client: GarminClient = Depends(get_garmin_client),
    custody: SecretCustody = Depends(get_custody),
    config: GarminConfig = Depends(get_garmin_config),
):
    """Step 3: Garmin sends the browser back here after the consent page."""

    if user is None:
        response = RedirectResponse(config.signin_url, status_code=302)
        custody.clear(response)
        return response

    user_id = user.id
    response = RedirectResponse(_settings_url(config, connected="true"), status_code=302)
    if oauth_problem:
        logger.info("Garmin authorization declined for user %s: %s", user_id, oauth_problem)
        custody.clear(response)
        response.headers["location"] = _settings_url(
            config, error=f"Garmin authorization failed: {oauth_problem}"
        )
        return response

    try:
        await complete_connect(
            client,
            custody,
            request,
            response,
            session,
            user=user,
            oauth_token=oauth_token,
            oauth_verifier=oauth_verifier,
        )
    except GarminError as exc:
        logger.error("Garmin callback error: %s", exc)
        response.headers["location"] = _settings_url(config, error=str(exc))
    except Exception as exc:
        # complete_connect has already cleared custody on ``response``.
        session.rollback()
        logger.exception("Unexpected Garmin callback error for user %s", user_id)
        response.headers["location"] = _settings_url(config, error=str(exc) or "Unknown error")
    return response


@router.get("/status")
def garmin_status(user: User = Depends(require_user)):
    return {"connected": user.garmin_connected}


@router.post("/disconnect")
def garmin_disconnect(
    user: User = Depends(require_user),
    session: Session = Depends(get_session),
):
    return {"ok": True, "disconnected": disconnect(session, user)}


__all__ = ["router"]
