# Relay API schemas.
# Created: 2026-10-19

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, Field


class KeysResponse(BaseModel):
    """Freshly issued key pair."""

    readKey: str
    writeKey: str


class PendingResponse(BaseModel):
    message: str = "Waiting for authentication"


class TokenResponse(BaseModel):
    """Tokens delivered by poll or refresh."""

    access_token: str
    refresh_token: str | None = None
    expires_at: int
    scope: str = ""
    name: str | None = None
    email: str | None = None
    picture: str | None = None


class RefreshRequest(BaseModel):
    refresh_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("refresh_token", "refreshToken"),
    )


class ProfileResponse(BaseModel):
    name: str | None = None
    email: str | None = None
    picture: str | None = None


class ErrorResponse(BaseModel):
    error: str
