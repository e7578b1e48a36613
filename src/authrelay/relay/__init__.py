"""Session-relay core: keys, PKCE, session store, callback validation, token delivery."""

from authrelay.relay.broker import AuthBroker
from authrelay.relay.errors import (
    ClientError,
    Forbidden,
    InvalidState,
    NotFound,
    RelayError,
    Unauthorized,
    UpstreamError,
)
from authrelay.relay.models import Profile, Session, TokenData
from authrelay.relay.store import MemorySessionStore, SessionStore

__all__ = [
    "AuthBroker",
    "ClientError",
    "Forbidden",
    "InvalidState",
    "MemorySessionStore",
    "NotFound",
    "Profile",
    "RelayError",
    "Session",
    "SessionStore",
    "TokenData",
    "Unauthorized",
    "UpstreamError",
]
