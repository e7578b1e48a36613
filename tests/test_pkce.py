# Tests for relay/pkce.py
# Created: 2026-10-19

import base64
import hashlib
import re

import pytest

from authrelay.relay.pkce import (
    CHALLENGE_METHOD,
    generate_code_challenge,
    generate_code_verifier,
    generate_pkce,
)

_UNRESERVED = re.compile(r"^[A-Za-z0-9\-._~]+$")


class TestCodeVerifier:
    def test_default_length(self):
        assert len(generate_code_verifier()) == 64

    def test_uses_unreserved_characters(self):
        for _ in range(20):
            assert _UNRESERVED.match(generate_code_verifier())

    def test_random(self):
        assert len({generate_code_verifier() for _ in range(50)}) == 50

    @pytest.mark.parametrize("length", [42, 129])
    def test_rejects_out_of_range_length(self, length):
        with pytest.raises(ValueError, match="43..128"):
            generate_code_verifier(length)


class TestCodeChallenge:
    def test_rfc7636_appendix_b_vector(self):
        verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
        assert generate_code_challenge(verifier) == "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"

    def test_matches_manual_s256(self):
        verifier = generate_code_verifier()
        expected = (
            base64.urlsafe_b64encode(hashlib.sha256(verifier.encode()).digest())
            .rstrip(b"=")
            .decode()
        )
        assert generate_code_challenge(verifier) == expected

    def test_no_padding(self):
        assert "=" not in generate_code_challenge(generate_code_verifier())


class TestGeneratePkce:
    def test_pair_is_consistent(self):
        pair = generate_pkce()
        assert pair.method == CHALLENGE_METHOD == "S256"
        assert pair.challenge == generate_code_challenge(pair.verifier)

    def test_deterministic_for_given_verifier(self):
        assert generate_pkce("a" * 43).challenge == generate_pkce("a" * 43).challenge
