# Site router: relay page, favicon, health, diagnostics.
# Created: 2026-10-19

from __future__ import annotations

import base64
import hmac
import json
import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response

from authrelay.api.deps import get_broker, get_settings_dep
from authrelay.api.messages import message_types_js
from authrelay.api.routes.schemas.site import (
    DebugRequest,
    DebugResponse,
    DebugSession,
    HealthResponse,
)
from authrelay.config import Settings
from authrelay.relay.broker import AuthBroker
from authrelay.relay.errors import Unauthorized

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Site"])

# 32x32 key icon.
_FAVICON = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAACAAAAAgCAYAAABzenr0AAAB+0lEQVR4AcXBA3BsQQDG8f+322fbtm3btm3b"
    "to1n27Zt27Z9zTttd7vZ3MlMvt8AxP9kxHVTPS4DpEYNhJY+Rax1Ij6XLhPi9cZr/g5jacSAWqjhKoh/ZKra"
    "a7xxRE4K0pKnEasdB0BIWSfCqnkSZlcgusLLqtsRWhGfoZkdEVbZi5BFbiMSHpxDyAIXXEYYEb/AxbcuEZTf"
    "jOC5LmG76gZBs1wwOqohbIqu8rFrcoBG+QwImuECdBGa95CQpe547TohbLLLkseMTgieex+fi45I8LwHheip"
    "Rch895BN19X3ILTiiQf6VosOCJzmFF75NOLnOYVuuTuOUVSPUEw3QvZOS1G/vYDgOQ9HPPIPvmHZlohPVKUK"
    "aJwA9cv/IL5G3WlFF7kUuzGLQO2ay5mcoQn0IFSR0ICuSYf47/mtDgSFZugVYZXPiOgzXxhFbABXxE8/LC5D"
    "42rBhddtNgSFlnEga801RLTLZ4wZ3QwIByo1hsAL6/6B8EqnvbOa2RGyJQ6ZoQH1CLb+dP8/ENXgKoJnOx+0"
    "9/ENsaFiPVgj/khcbjWNIN/tDQje15bwypdfKZt2A/E/OGOLre0zIv6H1+4LBIXW8FH4kXeALhPCJ+sOl9cY"
    "QpHVT4vGhQzIntfqoxE+0ZFzVwuCouqeEPErislJa50OcZmdDYg/Tdfn/QZUnAzdUa0rOQAAAABJRU5ErkJg"
    "gg=="
)

_RELAY_HTML = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<meta name="robots" content="noindex">
<link rel="icon" href="/favicon.ico" type="image/x-icon">
<title>Authentication</title>
<style>
body {{ font-family: Arial, sans-serif; text-align: center; padding-top: 50px; }}
.progress {{ color: slateblue; }}
</style>
</head>
<body>
<h2 class="progress">Authenticating...</h2>
</body>
<script>
const SITE_URL = {site_url};
const PLUGIN_ID = {plugin_id};
const MSG = {message_types};
const POLL_INTERVAL_MS = {poll_interval_ms};
const POLL_DEADLINE_MS = {poll_deadline_ms};

// Every message names its type and, once known, the readKey it belongs to.
function send(type, readKey, payload) {{
  parent.postMessage({{ pluginMessage: {{ type, readKey: readKey || null, ...(payload || {{}}) }}, pluginId: PLUGIN_ID }}, '*');
}}

send(MSG.UI_READY, null);

window.onmessage = async (event) => {{
  const message = event.data && event.data.pluginMessage;
  if (!message) return;

  if (message.type === MSG.START_AUTH) {{
    let readKey = null;
    try {{
      const keyResponse = await fetch(SITE_URL + '/auth/keys');
      if (!keyResponse.ok) throw new Error('Failed to get authentication keys');
      readKey = (await keyResponse.json()).readKey;
      window.open(SITE_URL + '/auth/authorize?readKey=' + encodeURIComponent(readKey), '_blank');
      send(MSG.AUTH_STARTED, readKey);
      pollForAuthResult(readKey, Date.now() + POLL_DEADLINE_MS);
    }} catch (error) {{
      send(MSG.AUTH_ERROR, readKey, {{ error: error.message }});
    }}
  }} else if (message.type === MSG.GET_USER_INFO) {{
    try {{
      const response = await fetch(SITE_URL + '/auth/user', {{
        headers: {{ 'Authorization': 'Bearer ' + message.accessToken }},
        credentials: 'include',
      }});
      if (response.ok) {{
        send(MSG.USER_INFO_RESULT, message.readKey, {{ user: await response.json() }});
      }} else if (response.status === 401) {{
        send(MSG.AUTH_EXPIRED, message.readKey);
      }} else {{
        throw new Error('Failed to fetch user data');
      }}
    }} catch (error) {{
      send(MSG.USER_INFO_ERROR, message.readKey, {{ error: error.message }});
    }}
  }}
}};

async function pollForAuthResult(readKey, deadline) {{
  if (Date.now() > deadline) {{
    send(MSG.AUTH_TIMEOUT, readKey);
    return;
  }}
  try {{
    const response = await fetch(SITE_URL + '/auth/poll?key=' + encodeURIComponent(readKey));
    if (response.status === 200) {{
      const data = await response.json();
      send(MSG.AUTH_SUCCESS, readKey, {{
        token: data.access_token,
        refresh_token: data.refresh_token,
        expires_at: data.expires_at,
        scope: data.scope,
        email: data.email,
        name: data.name,
        picture: data.picture,
      }});
      return;
    }}
    if (response.status === 400) {{
      send(MSG.AUTH_ERROR, readKey, {{ error: 'Authentication session expired' }});
      return;
    }}
  }} catch (error) {{
    console.error('Polling error:', error);
  }}
  setTimeout(() => pollForAuthResult(readKey, deadline), POLL_INTERVAL_MS);
}}
</script>
</html>"""


def _js_string(value: str) -> str:
    # A literal "</script>" would end the inline script early.
    return json.dumps(value).replace("<", "\\u003c")


def render_relay_page(settings: Settings) -> str:
    return _RELAY_HTML.format(
        site_url=_js_string(settings.site_url),
        plugin_id=_js_string(settings.plugin_id),
        message_types=message_types_js(),
        poll_interval_ms=settings.poll_interval_ms,
        poll_deadline_ms=settings.session_ttl_ms,
    )


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def relay_page(settings: Settings = Depends(get_settings_dep)):
    """Page loaded in the host's UI iframe; drives keys → popup → poll."""
    return HTMLResponse(render_relay_page(settings))


@router.get("/favicon.ico", include_in_schema=False)
async def favicon():
    return Response(
        content=_FAVICON,
        media_type="image/x-icon",
        headers={"Cache-Control": "public, max-age=604800"},
    )


@router.get("/health", response_model=HealthResponse)
async def health(broker: AuthBroker = Depends(get_broker)):
    return HealthResponse(sessions=len(broker.store))


@router.post("/auth/debug", response_model=DebugResponse)
async def debug_sessions(
    request: Request,
    broker: AuthBroker = Depends(get_broker),
    settings: Settings = Depends(get_settings_dep),
):
    """List live sessions without any key material or tokens."""
    try:
        body = DebugRequest.model_validate(await request.json())
    except ValueError:
        body = DebugRequest()

    expected = settings.debug_token
    if (
        not expected
        or not body.token
        or not hmac.compare_digest(body.token.encode(), expected.encode())
    ):
        logger.error("Unauthorized debug access attempt")
        raise Unauthorized("Unauthorized")

    now = datetime.now(UTC)
    sessions = [
        DebugSession(
            key_prefix=s.read_key[:6],
            age_seconds=round(s.age(now).total_seconds(), 1),
            authorizing=s.code_verifier is not None,
            completed=s.completed,
        )
        for s in broker.store.snapshot()
    ]
    return JSONResponse(content=DebugResponse(count=len(sessions), sessions=sessions).model_dump())
