# Profile router: user info lookup and token refresh.
# Created: 2026-10-19

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from authrelay.api.deps import get_broker, require_allowed_origin
from authrelay.api.routes.schemas.relay import (
    ErrorResponse,
    ProfileResponse,
    RefreshRequest,
    TokenResponse,
)
from authrelay.relay.broker import AuthBroker
from authrelay.relay.errors import ClientError, Unauthorized, UpstreamError

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Profile"],
    dependencies=[Depends(require_allowed_origin)],
    responses={code: {"model": ErrorResponse} for code in (400, 401, 403, 500)},
)


@router.get("/auth/user", response_model=ProfileResponse)
async def get_user(request: Request, broker: AuthBroker = Depends(get_broker)):
    """Fetch the normalized profile for the caller's bearer token."""
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        raise Unauthorized("Access token required")
    access_token = auth_header.removeprefix("Bearer ").strip()
    if not access_token:
        raise Unauthorized("Access token required")

    try:
        profile = await broker.fetch_profile(access_token)
    except UpstreamError as exc:
        logger.error("User info error: %s body=%r", exc, exc.body)
        return JSONResponse(status_code=500, content={"error": "Failed to fetch user information"})
    return ProfileResponse(**profile.to_dict())


@router.post("/auth/refresh", response_model=TokenResponse)
async def refresh(request: Request, broker: AuthBroker = Depends(get_broker)):
    """Renew an access token with a refresh token."""
    try:
        body = await request.json()
        data = RefreshRequest.model_validate(body)
    except (ValueError, ValidationError):
        raise ClientError("Refresh token required") from None

    try:
        tokens = await broker.refresh(data.refresh_token)
    except UpstreamError as exc:
        logger.error("Token refresh error: %s body=%r", exc, exc.body)
        return JSONResponse(status_code=500, content={"error": "Failed to refresh access token"})
    return JSONResponse(content=tokens.to_dict())
