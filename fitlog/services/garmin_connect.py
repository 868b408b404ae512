"""Garmin Connect authorization flow.

Step 1 gets a request token, puts it in custody and sends the browser to
Garmin. Step 2 happens on Garmin's consent page. Step 3 checks the
callback against custody, exchanges the verifier for the long-lived token
pair and stores it on the user.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlmodel import Session
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

from ..models import User
from .custody import SecretCustody
from .errors import (
    ExpiredOrMismatchedSessionError,
    MissingParametersError,
    UnauthenticatedError,
)
from .garmin import GarminClient

logger = logging.getLogger(__name__)


async def begin_connect(
    client: GarminClient,
    custody: SecretCustody,
    *,
    user_id: Optional[uuid.UUID],
) -> RedirectResponse:
    """Start a connect attempt and return the redirect to Garmin's consent page."""

    if user_id is None:
        raise UnauthenticatedError("Sign in before connecting Garmin")

    request_token = await client.get_request_token()
    response = RedirectResponse(request_token.authorize_url, status_code=302)
    custody.store(
        response,
        user_id=user_id,
        request_token=request_token.token,
        request_token_secret=request_token.secret,
    )
    logger.info("Garmin connect started for user %s", user_id)
    return response


async def complete_connect(
    client: GarminClient,
    custody: SecretCustody,
    request: Request,
    response: Response,
    session: Session,
    *,
    user: User,
    oauth_token: Optional[str],
    oauth_verifier: Optional[str],
) -> None:
    """Finish a connect attempt and persist the access token pair on ``user``.

    Custody cookies are cleared on ``response`` whatever the outcome.

    Raises:
        MissingParametersError: callback lacks oauth_token or oauth_verifier
        ExpiredOrMismatchedSessionError: nothing in custody, or another token is
        UpstreamProtocolError: Garmin rejected the exchange
    """
    try:
        if not oauth_token or not oauth_verifier:
            raise MissingParametersError("Missing OAuth parameters")

        custodied = custody.retrieve(request, user_id=user.id)
        if custodied is None or custodied.token != oauth_token:
            raise ExpiredOrMismatchedSessionError(
                "Session expired. Please try connecting again."
            )

        access = await client.exchange_access_token(
            custodied.token, custodied.secret, oauth_verifier
        )

        user.garmin_access_token = access.token
        user.garmin_access_token_secret = access.secret
        session.add(user)
        session.commit()
        logger.info("Garmin connected for user %s", user.id)
    finally:
        custody.clear(response)


def disconnect(session: Session, user: User) -> bool:
    """Forget the stored access token pair. Returns False if none was stored."""

    if not user.garmin_connected:
        return False
    user.garmin_access_token = None
    user.garmin_access_token_secret = None
    session.add(user)
    session.commit()
    logger.info("Garmin disconnected for user %s", user.id)
    return True


__all__ = ["begin_connect", "complete_connect", "disconnect"]
