# Session relay data models.
# Created: 2026-10-19

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any


@dataclass
class TokenData:
    """Tokens and profile fields handed to the polling client."""

    access_token: str
    expires_at: int  # milliseconds since epoch
    scope: str = ""
    refresh_token: str | None = None
    name: str | None = None
    email: str | None = None
    picture: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_at": self.expires_at,
            "scope": self.scope,
        }
        for key in ("name", "email", "picture"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


@dataclass
class Profile:
    """Normalized user profile."""

    name: str | None = None
    email: str | None = None
    picture: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "email": self.email, "picture": self.picture}


@dataclass
class Session:
    """One in-flight or completed authorization attempt.

    ``write_key`` doubles as the OAuth ``state``. ``code_verifier`` is set
    once, when the popup starts authorization, and never leaves the server.
    """

    read_key: str
    write_key: str
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    code_verifier: str | None = field(default=None, repr=False)
    result: TokenData | None = field(default=None, repr=False)

    @property
    def completed(self) -> bool:
        return self.result is not None

    def age(self, now: datetime | None = None) -> timedelta:
        return (now or datetime.now(UTC)) - self.created_at

    def is_expired(self, max_age: timedelta, now: datetime | None = None) -> bool:
        return self.age(now) > max_age


@dataclass
class PKCEPair:
    verifier: str
    challenge: str
    method: str = "S256"
