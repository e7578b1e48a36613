# Shared FastAPI dependencies for the API layer.
# Created: 2026-10-19

from __future__ import annotations

from fastapi import Request

from authrelay.config import Settings
from authrelay.relay.broker import AuthBroker
from authrelay.relay.errors import Forbidden


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_broker(request: Request) -> AuthBroker:
    return request.app.state.broker


async def require_allowed_origin(request: Request) -> None:
    """Reject cross-origin callers that are not on the allow-list.

    Requests without an Origin header (same-origin GETs, server-to-server
    calls) pass; CORS headers are handled separately by the middleware.
    """
    origin = request.headers.get("origin")
    if origin is None:
        return
    settings: Settings = request.app.state.settings
    if not settings.is_origin_allowed(origin):
        raise Forbidden(f"Origin not allowed: {origin}")
