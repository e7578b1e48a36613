# Tests for relay/keys.py
# Created: 2026-10-19

from unittest.mock import patch

import pytest

from authrelay.relay.keys import KeyIssuer, generate_key
from authrelay.relay.models import Session
from authrelay.relay.store import MemorySessionStore


@pytest.fixture
def store():
    return MemorySessionStore()


class TestGenerateKey:
    def test_length_and_alphabet(self):
        key = generate_key()
        assert len(key) == 32
        assert all(c.isalnum() or c in "-_" for c in key)


class TestKeyIssuer:
    def test_issue_stores_pending_session(self, store):
        read_key, write_key = KeyIssuer(store).issue()
        session = store.get(read_key)
        assert session.write_key == write_key
        assert session.result is None
        assert session.code_verifier is None

    def test_read_and_write_keys_differ(self, store):
        issuer = KeyIssuer(store)
        for _ in range(100):
            read_key, write_key = issuer.issue()
            assert read_key != write_key

    def test_no_collisions_in_active_set(self, store):
        issuer = KeyIssuer(store)
        keys = set()
        for _ in range(200):
            keys.update(issuer.issue())
        assert len(keys) == 400
        assert len(store) == 200

    def test_retries_on_collision(self, store):
        store.create(Session(read_key="taken-r", write_key="taken-w"))
        sequence = iter(["taken-r", "fresh-w", "fresh-r", "fresh-w2"])
        with patch("authrelay.relay.keys.generate_key", side_effect=lambda: next(sequence)):
            read_key, write_key = KeyIssuer(store).issue()
        assert (read_key, write_key) == ("fresh-r", "fresh-w2")

    def test_gives_up_after_repeated_collisions(self, store):
        with patch("authrelay.relay.keys.generate_key", return_value="same"):
            with pytest.raises(RuntimeError, match="unique session keys"):
                KeyIssuer(store).issue()
