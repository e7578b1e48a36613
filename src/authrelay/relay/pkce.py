# PKCE verifier / challenge generation (RFC 7636).
# Created: 2026-10-19

from __future__ import annotations

import base64
import hashlib
import secrets

from authrelay.relay.models import PKCEPair

VERIFIER_LENGTH = 64
CHALLENGE_METHOD = "S256"


def generate_code_verifier(length: int = VERIFIER_LENGTH) -> str:
    """Random verifier drawn from the base64url alphabet.

    Every base64url character is an RFC 7636 unreserved character, so the
    result is usable as-is. ``length`` must be within 43..128.
    """
    if not 43 <= length <= 128:
        raise ValueError(f"code verifier length must be 43..128, got {length}")
    # 4 characters per 3 bytes; draw enough and cut to size.
    return secrets.token_urlsafe(length)[:length]


def generate_code_challenge(verifier: str) -> str:
    """S256 challenge: BASE64URL(SHA256(verifier)) without padding."""
    return (
        base64.urlsafe_b64encode(hashlib.sha256(verifier.encode("ascii")).digest())
        .rstrip(b"=")
        .decode("ascii")
    )


def generate_pkce(verifier: str | None = None) -> PKCEPair:
    verifier = verifier or generate_code_verifier()
    return PKCEPair(
        verifier=verifier,
        challenge=generate_code_challenge(verifier),
        method=CHALLENGE_METHOD,
    )
