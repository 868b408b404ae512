"""OAuth 1.0a request signing (HMAC-SHA1) on authlib's RFC 5849 client."""

from __future__ import annotations

from typing import Callable, Dict, List, Mapping, Optional, Tuple

from authlib.oauth1 import SIGNATURE_HMAC_SHA1, ClientAuth
from authlib.oauth1.rfc5849.client_auth import generate_nonce, generate_timestamp
from authlib.oauth1.rfc5849.parameters import prepare_headers
from authlib.oauth1.rfc5849.signature import (
    construct_base_string,
    hmac_sha1_signature,
)
from authlib.oauth1.rfc5849.util import escape

from .errors import MissingCredentialsError


def percent_encode(value: str) -> str:
    """Percent-encode per RFC 3986, leaving only unreserved characters.

    Unlike ``encodeURIComponent``-style encoders this also escapes
    ``! ' ( ) *``.
    """

    return escape(str(value))


def signature_base_string(method: str, url: str, params: Mapping[str, str]) -> str:
    return construct_base_string(method, url, list(params.items()))


class OAuth1Signer:
    """Builds signed Authorization headers for one consumer (application).

    ``nonce_factory`` and ``clock`` default to authlib's nonce and unix
    timestamp generators; tests pass fixed callables to reproduce a signature.
    """

    def __init__(
        self,
        consumer_key: str,
        consumer_secret: str,
        *,
        nonce_factory: Callable[[], str] = generate_nonce,
        clock: Callable[[], str] = generate_timestamp,
    ) -> None:
        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret
        self._nonce_factory = nonce_factory
        self._clock = clock

    def client_auth(
        self,
        *,
        token: Optional[str] = None,
        token_secret: Optional[str] = None,
        callback: Optional[str] = None,
        verifier: Optional[str] = None,
    ) -> ClientAuth:
        return ClientAuth(
            self.consumer_key,
            client_secret=self.consumer_secret,
            token=token,
            token_secret=token_secret,
            redirect_uri=callback,
            verifier=verifier,
            signature_method=SIGNATURE_HMAC_SHA1,
        )

    def sign(
        self,
        method: str,
        url: str,
        *,
        token: Optional[str] = None,
        token_secret: Optional[str] = None,
        callback: Optional[str] = None,
        verifier: Optional[str] = None,
        params: Optional[Mapping[str, str]] = None,
    ) -> Tuple[str, Dict[str, str]]:
        """Sign a request and return ``(header, oauth_params)``.

        ``params`` are the request's own query or body parameters. They are
        covered by the signature but left out of the header, so the caller
        must still send them with the request.
        """

        if not self.consumer_key or not self.consumer_secret:
            raise MissingCredentialsError("Garmin consumer key and secret are not configured")

        auth = self.client_auth(
            token=token, token_secret=token_secret, callback=callback, verifier=verifier
        )
        oauth_params: List[Tuple[str, str]] = auth.get_oauth_params(
            self._nonce_factory(), str(self._clock())
        )
        signed_params = oauth_params + [(k, str(v)) for k, v in (params or {}).items()]
        base_string = construct_base_string(method, url, signed_params)
        signature = hmac_sha1_signature(base_string, auth.client_secret, auth.token_secret)
        oauth_params.append(("oauth_signature", signature))
        header = prepare_headers(oauth_params)["Authorization"]
        return header, dict(oauth_params)


__all__ = [
    "OAuth1Signer",
    "percent_encode",
    "signature_base_string",
]
