# Read/write key issuance.
# Created: 2026-10-19

from __future__ import annotations

import logging
import secrets

from authrelay.relay.models import Session
from authrelay.relay.store import KeyCollisionError, SessionStore

logger = logging.getLogger(__name__)

# 24 random bytes → 32 base64url characters, 192 bits of entropy.
KEY_BYTES = 24
_MAX_ATTEMPTS = 5


def generate_key() -> str:
    return secrets.token_urlsafe(KEY_BYTES)


class KeyIssuer:
    """Mints a read/write key pair and seeds an empty Session for it."""

    def __init__(self, store: SessionStore):
        self.store = store

    def issue(self) -> tuple[str, str]:
        """Return ``(read_key, write_key)`` for a freshly stored session."""
        for _ in range(_MAX_ATTEMPTS):
            read_key, write_key = generate_key(), generate_key()
            if read_key == write_key:
                continue
            try:
                self.store.create(Session(read_key=read_key, write_key=write_key))
            except KeyCollisionError:
                logger.warning("Key collision while issuing session keys, retrying")
                continue
            logger.info("Issued session %s…", read_key[:6])
            return read_key, write_key
        raise RuntimeError("could not issue unique session keys")
