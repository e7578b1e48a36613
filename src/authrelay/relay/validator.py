# OAuth callback validation: state must equal a live write-key.
# Created: 2026-10-19

from __future__ import annotations

import hmac
import logging

from authrelay.relay.errors import ClientError, InvalidState
from authrelay.relay.models import Session
from authrelay.relay.store import SessionStore

logger = logging.getLogger(__name__)


class CallbackValidator:
    """Authenticates the provider's return trip before any code is exchanged.

    The callback only carries the write-side capability, so the lookup goes
    through the store's write-key index. When ``require_cookie`` is set the
    browser must also present the write-key cookie planted by the authorize
    redirect, binding the callback to the browser that started the flow.
    """

    def __init__(self, store: SessionStore, require_cookie: bool = False):
        self.store = store
        self.require_cookie = require_cookie

    def validate(self, code: str | None, state: str | None, cookie: str | None = None) -> Session:
        if not code or not state:
            raise ClientError("Missing code or state parameter")

        if self.require_cookie and (
            not cookie or not hmac.compare_digest(cookie.encode(), state.encode())
        ):
            logger.warning("State/cookie mismatch on callback")
            raise InvalidState("Invalid state parameter or write key")

        session = self.store.find_by_write_key(state)
        if session is None:
            logger.warning("Callback with unknown state")
            raise InvalidState()

        # No challenge was ever sent for this session, so no code can be valid.
        if session.code_verifier is None:
            logger.warning("Callback for session %s… before authorization", session.read_key[:6])
            raise InvalidState()

        if session.completed:
            logger.warning("Repeated callback for session %s…", session.read_key[:6])
            raise InvalidState()

        return session
