"""Request-scoped dependencies shared by the routers."""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import Depends, HTTPException, Request
from sqlmodel import Session

from ..core import COOKIE_DOMAIN, COOKIE_SECURE, SECRET_KEY, GarminConfig, get_session
from ..models import User
from ..services.custody import SecretCustody
from ..services.garmin import GarminClient


def current_user_id(request: Request) -> Optional[uuid.UUID]:
    """Signed-in user id from the session cookie, or None."""

    uid = request.session.get("uid")
    if not uid:
        return None
    try:
        return uuid.UUID(str(uid))
    except ValueError:
        request.session.pop("uid", None)
        return None


def current_user(
    user_id: Optional[uuid.UUID] = Depends(current_user_id),
    session: Session = Depends(get_session),
) -> Optional[User]:
    if user_id is None:
        return None
    return session.get(User, user_id)


def require_user(user: Optional[User] = Depends(current_user)) -> User:
    if user is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def get_garmin_config(request: Request) -> GarminConfig:
    return request.app.state.garmin_config


def get_garmin_client(config: GarminConfig = Depends(get_garmin_config)) -> GarminClient:
    return GarminClient(config)


def get_custody() -> SecretCustody:
    return SecretCustody(SECRET_KEY, secure=COOKIE_SECURE, domain=COOKIE_DOMAIN)


__all__ = [
    "current_user",
    "current_user_id",
    "get_custody",
    "get_garmin_client",
    "get_garmin_config",
    "require_user",
]
