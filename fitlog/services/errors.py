"""Errors raised by the Garmin connect and import workflow."""

from __future__ import annotations

from typing import Optional


class GarminError(Exception):
    """Base Garmin integration error."""


class UnauthenticatedError(GarminError):
    """No signed-in local user."""


class MissingCredentialsError(GarminError):
    """Consumer key or secret is not configured."""


class MissingParametersError(GarminError):
    """Callback arrived without oauth_token or oauth_verifier."""


class ExpiredOrMismatchedSessionError(GarminError):
    """No connect attempt in custody, or the callback token does not match it."""


class UpstreamProtocolError(GarminError):
    """Garmin rejected a token request or returned an incomplete token response."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class NotConnectedError(GarminError):
    """The user has no stored Garmin access token pair."""


class UpstreamFetchError(GarminError):
    """Fetching activities from Garmin failed."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


__all__ = [
    "ExpiredOrMismatchedSessionError",
    "GarminError",
    "MissingCredentialsError",
    "MissingParametersError",
    "NotConnectedError",
    "UnauthenticatedError",
    "UpstreamFetchError",
    "UpstreamProtocolError",
]
