"""Google sign-in and session routes."""

from __future__ import annotations

import logging
from typing import Optional

from authlib.integrations.starlette_client import OAuth, OAuthError
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse
from sqlmodel import Session, func, select

from ...core import (
    FRONTEND_ORIGIN,
    GOOGLE_CLIENT_ID,
    GOOGLE_CLIENT_SECRET,
    OAUTH_REDIRECT_URL,
    get_session,
)
from ...models import User
from ..deps import current_user

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

oauth = OAuth()
oauth.register(
    name="google",
    client_id=GOOGLE_CLIENT_ID or "unset",
    client_secret=GOOGLE_CLIENT_SECRET or "unset",
    server_metadata_url="https://accounts.google.com/.well-known/openid-configuration",
    client_kwargs={"scope": "openid email profile"},
)


def upsert_google_user(
    session: Session,
    *,
    email: str,
    sub: str,
    name: Optional[str],
    picture: Optional[str],
) -> User:
    email = (email or "").strip().lower()

    user = session.exec(select(User).where(func.lower(User.email) == email)).first()
    if user:
        changed = False
        if not user.provider_sub:
            user.provider_sub = sub
            changed = True
        if name and user.name != name:
            user.name = name
            changed = True
        if picture and user.avatar_url != picture:
            user.avatar_url = picture
            changed = True
        if changed:
            session.add(user)
            session.commit()
            session.refresh(user)
        return user

    user = User(
        email=email,
        name=name,
        avatar_url=picture,
        provider="google",
        provider_sub=sub,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@router.get("/auth/google/start")
async def auth_google_start(request: Request, next: str | None = None):
    if not GOOGLE_CLIENT_ID or not GOOGLE_CLIENT_SECRET:
        raise HTTPException(
            status_code=500,
            detail="Google OAuth not configured. Check GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET.",
        )

    if next:
        request.session["next"] = next
    return await oauth.google.authorize_redirect(request, OAUTH_REDIRECT_URL)


@router.get("/auth/google/callback")
async def auth_google_callback(
    request: Request, session: Session = Depends(get_session)
):
    try:
        token = await oauth.google.authorize_access_token(request)
    except OAuthError as exc:
        logger.warning("Google sign-in failed: %s", exc.error)
        raise HTTPException(status_code=400, detail="Google sign-in failed.") from exc

    userinfo = token.get("userinfo") or await oauth.google.parse_id_token(token, None)
    email = userinfo.get("email")
    sub = userinfo.get("sub")
    name = userinfo.get("name") or (email.split("@")[0] if email else None)
    picture = userinfo.get("picture")
    if not email or not sub:
        raise HTTPException(status_code=400, detail="Unable to read Google profile.")

    user = upsert_google_user(
        session, email=email, sub=sub, name=name, picture=picture
    )
    request.session["uid"] = str(user.id)
    request.session["name"] = user.name or user.email

    next_url = request.session.pop("next", None) or FRONTEND_ORIGIN
    if not str(next_url).startswith(FRONTEND_ORIGIN):
        next_url = FRONTEND_ORIGIN
    return RedirectResponse(next_url, status_code=302)


@router.post("/auth/logout")
def auth_logout(request: Request):
    request.session.clear()
    return JSONResponse({"ok": True})


@router.get("/me")
def me(request: Request, user: Optional[User] = Depends(current_user)):
    if user is None:
        request.session.pop("uid", None)
        return JSONResponse({"user": None})
    return JSONResponse(
        {
            "user": {
                "id": str(user.id),
                "email": user.email,
                "name": user.name or user.email.split("@")[0],
                "avatar_url": user.avatar_url,
                "garmin_connected": user.garmin_connected,
            }
        }
    )


__all__ = ["router", "upsert_google_user"]
