# AuthBroker: wires the relay components behind one object.
# Created: 2026-10-19
#
# Flow: issue_keys() → authorization_url() (popup) → complete_callback()
# (provider return trip) → poll() (plugin host, once).

from __future__ import annotations

import logging
import urllib.parse
from datetime import timedelta

from authrelay.config import Settings
from authrelay.relay.errors import ClientError, InvalidState
from authrelay.relay.exchanger import TokenExchanger
from authrelay.relay.keys import KeyIssuer
from authrelay.relay.models import Profile, Session, TokenData
from authrelay.relay.pkce import CHALLENGE_METHOD, generate_code_challenge, generate_code_verifier
from authrelay.relay.poller import PollHandler, PollResult
from authrelay.relay.providers import EXTRA_AUTH_PARAMS, get_provider
from authrelay.relay.store import MemorySessionStore, SessionStore
from authrelay.relay.userinfo import UserInfoProxy
from authrelay.relay.validator import CallbackValidator

logger = logging.getLogger(__name__)


class AuthBroker:
    """Session-relay broker for one identity provider."""

    def __init__(
        self,
        settings: Settings,
        store: SessionStore | None = None,
    ):
        self.settings = settings
        self.provider = get_provider(settings.provider)
        self.store = (
            store
            if store is not None
            else MemorySessionStore(ttl=timedelta(seconds=settings.session_ttl_seconds))
        )

        self.issuer = KeyIssuer(self.store)
        self.validator = CallbackValidator(self.store, require_cookie=settings.state_cookie_required)
        self.exchanger = TokenExchanger(
            token_url=self.provider["token_url"],
            client_id=settings.client_id,
            client_secret=settings.client_secret,
            redirect_uri=settings.redirect_uri,
            timeout=settings.upstream_timeout_seconds,
        )
        self.poller = PollHandler(self.store)
        self.userinfo = UserInfoProxy(
            self.provider["userinfo_url"], timeout=settings.upstream_timeout_seconds
        )

    def issue_keys(self) -> tuple[str, str]:
        return self.issuer.issue()

    def authorization_url(self, read_key: str | None) -> tuple[str, str]:
        """Start authorization for ``read_key``.

        Returns ``(url, write_key)``. The verifier is generated on the first
        call and reused afterwards, so reopening the popup keeps working.
        """
        if not read_key:
            raise ClientError("Invalid read key")

        def _ensure_verifier(session: Session) -> None:
            if session.code_verifier is None:
                session.code_verifier = generate_code_verifier()

        session = self.store.update(read_key, _ensure_verifier)
        if session is None or session.completed:
            raise ClientError("Invalid read key")

        params = {
            "client_id": self.settings.client_id,
            "redirect_uri": self.settings.redirect_uri,
            "response_type": "code",
            "scope": self.settings.scopes,
            "state": session.write_key,
            "code_challenge": generate_code_challenge(session.code_verifier),
            "code_challenge_method": CHALLENGE_METHOD,
            **EXTRA_AUTH_PARAMS.get(self.settings.provider, {}),
        }
        logger.info("Starting authorization for session %s…", read_key[:6])
        return f"{self.provider['auth_url']}?{urllib.parse.urlencode(params)}", session.write_key

    async def complete_callback(
        self, code: str | None, state: str | None, cookie: str | None = None
    ) -> Session:
        """Validate the return trip, exchange the code and store the result."""
        session = self.validator.validate(code, state, cookie)
        tokens = await self.exchanger.exchange(code, session.code_verifier)

        def _set_result(s: Session) -> None:
            if s.result is not None:
                raise InvalidState()
            s.result = tokens

        updated = self.store.update(session.read_key, _set_result)
        if updated is None:
            # Expired while the exchange was in flight.
            raise InvalidState()
        logger.info("Session %s… completed", session.read_key[:6])
        return updated

    def poll(self, read_key: str | None) -> PollResult:
        return self.poller.poll(read_key)

    async def refresh(self, refresh_token: str | None) -> TokenData:
        if not refresh_token:
            raise ClientError("Refresh token required")
        return await self.exchanger.refresh(refresh_token)

    async def fetch_profile(self, access_token: str) -> Profile:
        return await self.userinfo.fetch_profile(access_token)

    def sweep(self) -> int:
        return self.store.sweep_expired()
