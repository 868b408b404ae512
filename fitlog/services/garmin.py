"""
Garmin Connect API client.

Handles:
- Request token (step 1 of the OAuth 1.0a handshake)
- Access token exchange (step 3)
- Signed activity fetches with a stored access token pair

Every call is signed with ``OAuth1Signer`` and bounded by the configured
timeout. Nothing here touches the database or the browser session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qsl

import httpx

from ..core.config import GarminConfig
from .errors import UpstreamFetchError, UpstreamProtocolError
from .oauth1 import OAuth1Signer, percent_encode

logger = logging.getLogger(__name__)


ACTIVITY_TYPES: Dict[str, str] = {
    "RUNNING": "run",
    "CYCLING": "cycle",
    "SWIMMING": "swim",
    "STRENGTH_TRAINING": "strength",
    "WALKING": "walk",
    "HIKING": "hike",
    "YOGA": "yoga",
    "CARDIO": "cardio",
}


def map_activity_type(garmin_type: Optional[str]) -> str:
    """Map a Garmin activity type onto the local vocabulary."""

    return ACTIVITY_TYPES.get((garmin_type or "").strip().upper(), "other")


@dataclass(frozen=True)
class RequestToken:
    token: str
    secret: str
    authorize_url: str


@dataclass(frozen=True)
class AccessToken:
    token: str
    secret: str


def _parse_token_response(response: httpx.Response, step: str) -> Dict[str, str]:
    if not response.is_success:
        logger.error("Garmin %s failed (%s): %s", step, response.status_code, response.text)
        raise UpstreamProtocolError(
            f"Garmin {step} failed ({response.status_code}): {response.text}",
            status_code=response.status_code,
            body=response.text,
        )
    data = dict(parse_qsl(response.text))
    if not data.get("oauth_token") or not data.get("oauth_token_secret"):
        logger.error("Garmin %s response missing token fields", step)
        raise UpstreamProtocolError(
            f"Garmin returned an invalid {step} response",
            status_code=response.status_code,
            body=response.text,
        )
    return data


def _day_bounds(start: date, end: date) -> tuple[int, int]:
    """Epoch seconds for 00:00:00 UTC of ``start`` and 23:59:59 UTC of ``end``."""

    start_at = datetime.combine(start, time.min, tzinfo=timezone.utc)
    end_at = datetime.combine(end, time(23, 59, 59), tzinfo=timezone.utc)
    return int(start_at.timestamp()), int(end_at.timestamp())


class GarminClient:
    """
    Async client for the Garmin Connect OAuth and Health APIs.

    Usage:
        client = GarminClient(config)
        request_token = await client.get_request_token()
        access = await client.exchange_access_token(token, secret, verifier)
        activities = await client.fetch_activities(access.token, access.secret, start, end)

    ``transport`` is handed to ``httpx.AsyncClient``; tests pass an
    ``httpx.MockTransport``.
    """

    def __init__(
        self,
        config: GarminConfig,
        *,
        signer: Optional[OAuth1Signer] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config
        self.signer = signer or OAuth1Signer(config.consumer_key, config.consumer_secret)
        self._transport = transport

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.config.timeout, transport=self._transport)

    def authorization_url(self, request_token: str) -> str:
        return f"{self.config.authorize_url}?oauth_token={percent_encode(request_token)}"

    async def _post_token_request(
        self,
        url: str,
        step: str,
        *,
        token: Optional[str] = None,
        token_secret: Optional[str] = None,
        callback: Optional[str] = None,
        verifier: Optional[str] = None,
    ) -> Dict[str, str]:
        header, _ = self.signer.sign(
            "POST",
            url,
            token=token,
            token_secret=token_secret,
            callback=callback,
            verifier=verifier,
        )
        try:
            async with self._http() as client:
                response = await client.post(
                    url,
                    headers={
                        "Authorization": header,
                        "Content-Type": "application/x-www-form-urlencoded",
                    },
                )
        except httpx.HTTPError as exc:
            logger.error("Garmin %s request error: %s", step, exc)
            raise UpstreamProtocolError(f"Garmin {step} failed: {exc}") from exc
        return _parse_token_response(response, step)

    async def get_request_token(self) -> RequestToken:
        """
        Obtain an unauthorized request token.

        Returns:
            RequestToken with the token, its secret and the URL the user's
            browser must be sent to.

        Raises:
            MissingCredentialsError: consumer key/secret not configured
            UpstreamProtocolError: non-2xx or incomplete response
        """
        data = await self._post_token_request(
            self.config.request_token_url,
            "request token",
            callback=self.config.callback_url,
        )
        token = data["oauth_token"]
        return RequestToken(
            token=token,
            secret=data["oauth_token_secret"],
            authorize_url=self.authorization_url(token),
        )

    async def exchange_access_token(
        self, request_token: str, request_token_secret: str, verifier: str
    ) -> AccessToken:
        """
        Exchange an authorized request token and verifier for the long-lived pair.

        Raises:
            UpstreamProtocolError: non-2xx or incomplete response
        """
        data = await self._post_token_request(
            self.config.access_token_url,
            "token exchange",
            token=request_token,
            token_secret=request_token_secret,
            verifier=verifier,
        )
        return AccessToken(token=data["oauth_token"], secret=data["oauth_token_secret"])

    async def fetch_activities(
        self,
        access_token: str,
        access_token_secret: str,
        start: date,
        end: date,
    ) -> List[Dict[str, Any]]:
        """
        Fetch activities uploaded between ``start`` and ``end`` (inclusive days).

        The response is either a bare list or ``{"activityList": [...]}``;
        both come back as a list.

        Raises:
            UpstreamFetchError: transport error, non-2xx, or a body that is not JSON
        """
        url = f"{self.config.api_base}/activities"
        start_epoch, end_epoch = _day_bounds(start, end)
        params = {
            "uploadStartTimeInSeconds": str(start_epoch),
            "uploadEndTimeInSeconds": str(end_epoch),
        }
        header, _ = self.signer.sign(
            "GET",
            url,
            token=access_token,
            token_secret=access_token_secret,
            params=params,
        )
        try:
            async with self._http() as client:
                response = await client.get(
                    url, params=params, headers={"Authorization": header}
                )
        except httpx.HTTPError as exc:
            logger.error("Garmin activities request error: %s", exc)
            raise UpstreamFetchError(f"Garmin activities fetch failed: {exc}") from exc

        if not response.is_success:
            logger.error(
                "Garmin activities fetch failed (%s): %s", response.status_code, response.text
            )
            raise UpstreamFetchError(
                f"Garmin activities fetch failed ({response.status_code})",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamFetchError("Garmin returned a malformed activities response") from exc

        if isinstance(data, list):
            return data
        if isinstance(data, dict):
            return list(data.get("activityList") or [])
        raise UpstreamFetchError("Garmin returned a malformed activities response")


__all__ = [
    "ACTIVITY_TYPES",
    "AccessToken",
    "GarminClient",
    "RequestToken",
    "map_activity_type",
]
