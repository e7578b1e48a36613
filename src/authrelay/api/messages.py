# Message types exchanged between the plugin host and the relay page.
# Created: 2026-10-19
#
# The relay page (GET /) sits in the host's UI iframe and talks to the host
# via postMessage. Every message carries one of these types plus the
# readKey of the attempt it belongs to, once one exists.

from __future__ import annotations

import json
from enum import Enum


class MessageType(str, Enum):
    # relay page → host
    UI_READY = "ui-ready"
    AUTH_STARTED = "auth-started"
    AUTH_SUCCESS = "auth-success"
    AUTH_ERROR = "auth-error"
    AUTH_TIMEOUT = "auth-timeout"
    AUTH_EXPIRED = "auth-expired"
    USER_INFO_RESULT = "user-info-result"
    USER_INFO_ERROR = "user-info-error"

    # host → relay page
    START_AUTH = "start-auth"
    GET_USER_INFO = "get-user-info"


def message_types_js() -> str:
    """JSON object literal ``{"UI_READY": "ui-ready", ...}`` for the page script."""
    return json.dumps({m.name: m.value for m in MessageType}, sort_keys=True)
