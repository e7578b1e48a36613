# Relay error taxonomy.
# Created: 2026-10-19
#
# Each error carries the HTTP status the API layer answers with. Messages
# are safe to show to clients; provider bodies stay on UpstreamError.body
# and only reach the logs.

from __future__ import annotations

from typing import Any


class RelayError(Exception):
    """Base class for every error the broker reports to a client."""

    status_code = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__


class ClientError(RelayError):
    """Malformed or missing request parameters."""

    status_code = 400


class InvalidState(ClientError):
    """Callback ``state`` does not match any live write-key."""

    def __init__(self, message: str = "Invalid state parameter") -> None:
        super().__init__(message)


class NotFound(ClientError):
    """Unknown, expired, or already-consumed session key."""

    def __init__(self, message: str = "Invalid key") -> None:
        super().__init__(message)


class Forbidden(RelayError):
    """Request origin is not on the allow-list."""

    status_code = 403

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message)


class Unauthorized(RelayError):
    """Missing, invalid, or expired bearer token."""

    status_code = 401

    def __init__(self, message: str = "Invalid or expired token") -> None:
        super().__init__(message)


class UpstreamError(RelayError):
    """The identity provider call failed or timed out.

    ``status`` is None for transport failures (timeouts, DNS, resets).
    """

    status_code = 500

    def __init__(
        self,
        message: str = "Identity provider request failed",
        *,
        status: int | None = None,
        body: Any = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.body = body

    def __str__(self) -> str:
        if self.status is None:
            return self.message
        return f"{self.message} (status {self.status})"
