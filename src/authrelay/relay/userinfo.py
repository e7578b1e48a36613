# Profile lookup proxy.
# Created: 2026-10-19

from __future__ import annotations

import logging

import httpx

from authrelay.relay.errors import Unauthorized, UpstreamError
from authrelay.relay.exchanger import DEFAULT_TIMEOUT
from authrelay.relay.models import Profile

logger = logging.getLogger(__name__)


class UserInfoProxy:
    """Forwards a bearer token to the provider's profile endpoint."""

    def __init__(self, userinfo_url: str, timeout: float = DEFAULT_TIMEOUT):
        self.userinfo_url = userinfo_url
        self.timeout = timeout

    async def fetch_profile(self, access_token: str) -> Profile:
        if not access_token:
            raise Unauthorized("Access token required")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.get(
                    self.userinfo_url,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
        except httpx.TimeoutException as exc:
            raise UpstreamError("Profile endpoint timed out") from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Profile endpoint unreachable: {exc}") from exc

        if resp.status_code == 401:
            raise Unauthorized()
        if not resp.is_success:
            raise UpstreamError(
                "Profile endpoint rejected the request",
                status=resp.status_code,
                body=resp.text,
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise UpstreamError("Profile endpoint returned invalid JSON") from exc
        if not isinstance(data, dict):
            raise UpstreamError(
                "Profile endpoint returned unexpected JSON", status=resp.status_code, body=data
            )

        return Profile(
            name=data.get("name"),
            email=data.get("email"),
            picture=data.get("picture"),
        )
