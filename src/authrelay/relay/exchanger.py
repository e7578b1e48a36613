# Token exchange with the identity provider.
# Created: 2026-10-19
#
# Server-to-server calls only. Failures surface as UpstreamError with the
# provider's status and body for the logs; nothing here retries.

from __future__ import annotations

import logging
import time
from typing import Any

import httpx
import jwt

from authrelay.relay.errors import UpstreamError
from authrelay.relay.models import TokenData

logger = logging.getLogger(__name__)

DEFAULT_EXPIRES_IN = 3600
DEFAULT_TIMEOUT = 10.0


def decode_id_token(id_token: str) -> dict[str, Any] | None:
    """Read the claims of an ID token without verifying its signature.

    The token arrives directly from the provider's token endpoint over TLS,
    which already authenticates it. Returns None for a malformed token.
    """
    try:
        return jwt.decode(id_token, options={"verify_signature": False})
    except jwt.PyJWTError as exc:
        logger.warning("Failed to decode ID token: %s", exc)
        return None


def _error_body(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return resp.text


async def post_token_request(
    token_url: str, payload: dict[str, str], timeout: float = DEFAULT_TIMEOUT
) -> dict[str, Any]:
    """POST a form-encoded grant to ``token_url`` and return the JSON body."""
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            resp = await client.post(
                token_url,
                data=payload,
                headers={"Accept": "application/json"},
            )
    except httpx.TimeoutException as exc:
        raise UpstreamError("Token endpoint timed out") from exc
    except httpx.HTTPError as exc:
        raise UpstreamError(f"Token endpoint unreachable: {exc}") from exc

    if not resp.is_success:
        raise UpstreamError(
            "Token endpoint rejected the request",
            status=resp.status_code,
            body=_error_body(resp),
        )

    try:
        data = resp.json()
    except ValueError as exc:
        raise UpstreamError("Token endpoint returned invalid JSON", status=resp.status_code) from exc

    if not isinstance(data, dict) or not data.get("access_token"):
        raise UpstreamError(
            "Token endpoint response has no access_token", status=resp.status_code, body=data
        )
    return data


def build_token_data(data: dict[str, Any], keep_refresh_token: str | None = None) -> TokenData:
    """Normalize a provider token response.

    ``expires_in`` becomes an absolute ``expires_at`` in milliseconds. When an
    ID token is present its profile claims are copied over and its ``exp``
    takes precedence for the expiry. A response that cannot be normalized is
    reported as an ``UpstreamError``.
    """
    try:
        expires_in = data.get("expires_in") or DEFAULT_EXPIRES_IN
        tokens = TokenData(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token") or keep_refresh_token,
            expires_at=int(time.time() * 1000) + int(expires_in) * 1000,
            scope=data.get("scope") or "",
        )

        id_token = data.get("id_token")
        claims = decode_id_token(id_token) if isinstance(id_token, str) and id_token else None
        if isinstance(claims, dict):
            tokens.name = claims.get("name")
            tokens.email = claims.get("email")
            tokens.picture = claims.get("picture")
            if claims.get("exp"):
                tokens.expires_at = int(claims["exp"]) * 1000
    except (TypeError, ValueError, OverflowError) as exc:
        raise UpstreamError("Token endpoint returned a malformed response", body=data) from exc
    return tokens


class TokenExchanger:
    """Authorization-code and refresh-token grants against one provider."""

    def __init__(
        self,
        token_url: str,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.token_url = token_url
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.timeout = timeout

    async def exchange(self, code: str, code_verifier: str) -> TokenData:
        """Exchange an authorization code plus PKCE verifier for tokens."""
        data = await post_token_request(
            self.token_url,
            {
                "code": code,
                "code_verifier": code_verifier,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "redirect_uri": self.redirect_uri,
                "grant_type": "authorization_code",
            },
            timeout=self.timeout,
        )
        logger.info("Exchanged authorization code for tokens")
        return build_token_data(data)

    async def refresh(self, refresh_token: str) -> TokenData:
        """Obtain a fresh access token.

        Providers that do not rotate refresh tokens omit one from the
        response; the caller's token is then carried over.
        """
        data = await post_token_request(
            self.token_url,
            {
                "refresh_token": refresh_token,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "grant_type": "refresh_token",
            },
            timeout=self.timeout,
        )
        logger.info("Refreshed access token")
        return build_token_data(data, keep_refresh_token=refresh_token)
