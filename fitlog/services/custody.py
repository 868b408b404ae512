"""Short-lived custody of the OAuth request token between redirects."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Optional

from itsdangerous import BadSignature, TimestampSigner, URLSafeTimedSerializer
from starlette.requests import Request
from starlette.responses import Response

TOKEN_COOKIE = "garmin_oauth_token"
SECRET_COOKIE = "garmin_oauth_secret"
CUSTODY_MAX_AGE = 60 * 10


class _ClockedSigner(TimestampSigner):
    def __init__(self, *args: Any, clock: Callable[[], float] = time.time, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._clock = clock

    def get_timestamp(self) -> int:
        return int(self._clock())


@dataclass(frozen=True)
class CustodiedToken:
    token: str
    secret: str


class SecretCustody:
    """Holds one in-flight request token pair per browser.

    The pair travels in two HttpOnly cookies, each signed and timestamped
    with the application secret key. Anything expired, tampered with, or
    issued to a different user reads back as ``None``.
    """

    def __init__(
        self,
        secret_key: str,
        *,
        max_age: int = CUSTODY_MAX_AGE,
        secure: bool = False,
        domain: Optional[str] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.max_age = max_age
        self.secure = secure
        self.domain = domain
        signer_kwargs = {"clock": clock}
        self._token_serializer = URLSafeTimedSerializer(
            secret_key,
            salt="garmin-oauth-token",
            signer=_ClockedSigner,
            signer_kwargs=signer_kwargs,
        )
        self._secret_serializer = URLSafeTimedSerializer(
            secret_key,
            salt="garmin-oauth-secret",
            signer=_ClockedSigner,
            signer_kwargs=signer_kwargs,
        )

    def _set(self, response: Response, key: str, value: str) -> None:
        response.set_cookie(
            key,
            value,
            max_age=self.max_age,
            path="/",
            domain=self.domain,
            secure=self.secure,
            httponly=True,
            samesite="lax",
        )

    def store(
        self,
        response: Response,
        *,
        user_id: uuid.UUID,
        request_token: str,
        request_token_secret: str,
    ) -> None:
        """Place the pair in custody, replacing any earlier attempt."""

        self._set(
            response,
            TOKEN_COOKIE,
            self._token_serializer.dumps({"uid": str(user_id), "token": request_token}),
        )
        self._set(response, SECRET_COOKIE, self._secret_serializer.dumps(request_token_secret))

    def retrieve(self, request: Request, *, user_id: uuid.UUID) -> Optional[CustodiedToken]:
        """Return the custodied pair, or ``None`` when no attempt is in progress."""

        raw_token = request.cookies.get(TOKEN_COOKIE)
        raw_secret = request.cookies.get(SECRET_COOKIE)
        if not raw_token or not raw_secret:
            return None
        try:
            payload = self._token_serializer.loads(raw_token, max_age=self.max_age)
            secret = self._secret_serializer.loads(raw_secret, max_age=self.max_age)
        except BadSignature:
            # SignatureExpired is a BadSignature too.
            return None
        if not isinstance(payload, dict) or payload.get("uid") != str(user_id):
            return None
        token = payload.get("token")
        if not token or not secret:
            return None
        return CustodiedToken(token=token, secret=secret)

    def clear(self, response: Response) -> None:
        for key in (TOKEN_COOKIE, SECRET_COOKIE):
            response.delete_cookie(
                key,
                path="/",
                domain=self.domain,
                secure=self.secure,
                httponly=True,
                samesite="lax",
            )


__all__ = [
    "CUSTODY_MAX_AGE",
    "CustodiedToken",
    "SECRET_COOKIE",
    "SecretCustody",
    "TOKEN_COOKIE",
]
