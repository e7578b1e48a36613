# Site / diagnostics schemas.
# Created: 2026-10-19

from __future__ import annotations

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str = "ok"
    sessions: int


class DebugRequest(BaseModel):
    token: str | None = None


class DebugSession(BaseModel):
    """Non-secret view of a live session."""

    key_prefix: str
    age_seconds: float
    authorizing: bool
    completed: bool


class DebugResponse(BaseModel):
    count: int
    sessions: list[DebugSession]
