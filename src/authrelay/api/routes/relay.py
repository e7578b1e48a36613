# Relay router: keys, authorize, callback, poll.
# Created: 2026-10-19
#
# authorize and callback are browser navigations in the popup window and
# answer with HTML; keys and poll are JSON calls from the relay page.

from __future__ import annotations

import html
import logging

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from authrelay.api.deps import get_broker, require_allowed_origin
from authrelay.api.routes.schemas.relay import (
    ErrorResponse,
    KeysResponse,
    PendingResponse,
    TokenResponse,
)
from authrelay.relay.broker import AuthBroker
from authrelay.relay.errors import RelayError, UpstreamError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Relay"])

STATE_COOKIE = "auth_write_key"

_PAGE_HTML = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<meta name="robots" content="noindex">
<link rel="icon" href="/favicon.ico" type="image/x-icon">
<title>Authentication</title>
<style>
body {{ font-family: Arial, sans-serif; text-align: center; padding-top: 50px; }}
.success {{ color: green; }}
.error {{ color: firebrick; }}
</style>
</head>
<body>
{body}
</body>
{script}
</html>"""

_SUCCESS_BODY = """<h2 class="success">You are authenticated!</h2>
<p>You can return to the plugin.</p>
<p>This window will close in <span class="countdown">5</span> seconds.</p>"""

_CLOSE_SCRIPT = """<script>
document.addEventListener('DOMContentLoaded', () => {
  const countdownEl = document.querySelector('.countdown');
  let seconds = parseInt(countdownEl.textContent, 10);
  const timer = setInterval(() => {
    seconds--;
    countdownEl.textContent = seconds;
    if (seconds <= 0) {
      clearInterval(timer);
      window.close();
    }
  }, 1000);
});
</script>"""


def _success_page() -> HTMLResponse:
    return HTMLResponse(_PAGE_HTML.format(body=_SUCCESS_BODY, script=_CLOSE_SCRIPT))


def _error_page(message: str, status_code: int) -> HTMLResponse:
    body = f'<h2 class="error">Authentication failed</h2>\n<p>{html.escape(message)}</p>'
    return HTMLResponse(_PAGE_HTML.format(body=body, script=""), status_code=status_code)


@router.get(
    "/auth/keys",
    response_model=KeysResponse,
    responses={403: {"model": ErrorResponse}},
    dependencies=[Depends(require_allowed_origin)],
)
async def issue_keys(broker: AuthBroker = Depends(get_broker)):
    """Create a read/write key pair for a new auth attempt."""
    read_key, write_key = broker.issue_keys()
    return KeysResponse(readKey=read_key, writeKey=write_key)


@router.get("/auth/authorize")
@router.get("/auth/google", include_in_schema=False)
async def authorize(
    request: Request,
    readKey: str | None = Query(None),
    broker: AuthBroker = Depends(get_broker),
):
    """Redirect the popup to the provider with the PKCE challenge."""
    try:
        url, write_key = broker.authorization_url(readKey)
    except RelayError as exc:
        return _error_page(exc.message, exc.status_code)

    settings = request.app.state.settings
    response = RedirectResponse(url, status_code=302)
    response.set_cookie(
        key=STATE_COOKIE,
        value=write_key,
        httponly=True,
        secure=settings.site_url.startswith("https://"),
        samesite="lax",
        max_age=settings.state_cookie_max_age_seconds,
    )
    return response


@router.get("/auth/callback")
async def callback(
    request: Request,
    code: str | None = Query(None),
    state: str | None = Query(None),
    error: str | None = Query(None),
    broker: AuthBroker = Depends(get_broker),
):
    """Provider return trip: validate state, exchange the code, store the result."""
    if error:
        logger.warning("Provider returned error on callback: %s", error)
        return _error_page(f"Authorization was not granted ({error}).", 400)

    try:
        await broker.complete_callback(code, state, request.cookies.get(STATE_COOKIE))
    except UpstreamError as exc:
        logger.error("Token exchange error: %s body=%r", exc, exc.body)
        return _error_page("Failed to exchange authorization code for tokens", 500)
    except RelayError as exc:
        return _error_page(exc.message, exc.status_code)

    response = _success_page()
    response.delete_cookie(STATE_COOKIE)
    return response


@router.get(
    "/auth/poll",
    responses={
        200: {"model": TokenResponse},
        202: {"model": PendingResponse},
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
    },
    dependencies=[Depends(require_allowed_origin)],
)
async def poll(
    key: str | None = Query(None),
    broker: AuthBroker = Depends(get_broker),
):
    """Return the tokens once, then forget the session."""
    result = broker.poll(key)
    if result.pending:
        return JSONResponse(status_code=202, content=PendingResponse().model_dump())
    return JSONResponse(content=result.tokens.to_dict())
