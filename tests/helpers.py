"""Shared helpers for exercising the Garmin integration."""

from __future__ import annotations

import base64
import hashlib
import hmac
from http.cookies import SimpleCookie
from typing import Dict, List, Tuple
from urllib.parse import quote, unquote

import httpx
from starlette.requests import Request
from starlette.responses import Response


def parse_authorization(header: str) -> Dict[str, str]:
    """Split an ``OAuth k="v", ...`` header into decoded parameters."""

    assert header.startswith("OAuth ")
    params: Dict[str, str] = {}
    for part in header[len("OAuth "):].split(", "):
        key, _, value = part.partition("=")
        params[unquote(key)] = unquote(value.strip('"'))
    return params


def reference_signature(
    method: str,
    url: str,
    params: Dict[str, str],
    consumer_secret: str,
    token_secret: str = "",
) -> str:
    def enc(value: str) -> str:
        return quote(value, safe="")

    pairs = sorted((enc(k), enc(v)) for k, v in params.items())
    param_string = "&".join(f"{k}={v}" for k, v in pairs)
    base_string = f"{method.upper()}&{enc(url)}&{enc(param_string)}"
    key = f"{enc(consumer_secret)}&{enc(token_secret)}"
    digest = hmac.new(key.encode(), base_string.encode(), hashlib.sha1).digest()
    return base64.b64encode(digest).decode()


def signature_is_valid(request: httpx.Request, consumer_secret: str, token_secret: str = "") -> bool:
    """Recompute the signature of an outgoing request the way the provider would."""

    oauth = parse_authorization(request.headers["Authorization"])
    signature = oauth.pop("oauth_signature")
    params = {**oauth, **dict(request.url.params)}
    url = f"{request.url.scheme}://{request.url.host}{request.url.path}"
    expected = reference_signature(request.method, url, params, consumer_secret, token_secret)
    return hmac.compare_digest(expected, signature)


class FakeGarmin:
    """In-process stand-in for Garmin's OAuth and Health API endpoints."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.responses: Dict[str, Tuple[int, dict]] = {
            "request_token": (
                200,
                {"text": "oauth_token=T1&oauth_token_secret=TS1&oauth_callback_confirmed=true"},
            ),
            "access_token": (200, {"text": "oauth_token=A1&oauth_token_secret=AS1"}),
            "activities": (200, {"json": []}),
        }

    def respond(self, endpoint: str, status_code: int, **content) -> None:
        self.responses[endpoint] = (status_code, content)

    def _endpoint(self, request: httpx.Request) -> str:
        path = request.url.path
        if path.endswith("/request_token"):
            return "request_token"
        if path.endswith("/access_token"):
            return "access_token"
        if path.endswith("/activities"):
            return "activities"
        raise AssertionError(f"unexpected Garmin call: {request.method} {request.url}")

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status_code, content = self.responses[self._endpoint(request)]
        return httpx.Response(status_code, **content)

    def calls(self, endpoint: str) -> List[httpx.Request]:
        return [r for r in self.requests if self._endpoint(r) == endpoint]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def set_cookie_headers(response) -> List[str]:
    """``Set-Cookie`` values from a Starlette or an httpx response."""

    if isinstance(response, httpx.Response):
        return response.headers.get_list("set-cookie")
    return response.headers.getlist("set-cookie")


def cookies_set_by(response) -> Dict[str, SimpleCookie]:
    jar: Dict[str, SimpleCookie] = {}
    for header in set_cookie_headers(response):
        cookie = SimpleCookie()
        cookie.load(header)
        for name in cookie:
            jar[name] = cookie
    return jar


def request_with_cookies(cookies: Dict[str, str]) -> Request:
    header = "; ".join(f"{name}={value}" for name, value in cookies.items())
    return Request({"type": "http", "headers": [(b"cookie", header.encode("latin-1"))]})


def carry_cookies(response: Response) -> Request:
    """Build the next request a browser would send after ``response``."""

    jar = cookies_set_by(response)
    return request_with_cookies({name: cookie[name].value for name, cookie in jar.items()})
