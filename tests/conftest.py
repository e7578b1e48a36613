# Shared fixtures for authrelay tests.
# Created: 2026-10-19

import time

import jwt
import pytest
from fastapi.testclient import TestClient

from authrelay.api.serve import create_app
from authrelay.config import Settings

TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"
AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"


def make_settings(**overrides) -> Settings:
    values = {
        "client_id": "test-client-id",
        "client_secret": "test-client-secret",
        "redirect_uri": "http://testserver/auth/callback",
        "site_url": "http://testserver",
        "cors_allowed_origins": [],
    }
    values.update(overrides)
    return Settings(**values)


def make_id_token(**claims) -> str:
    payload = {
        "email": "ada@example.com",
        "name": "Ada Lovelace",
        "picture": "https://example.com/ada.png",
        "exp": int(time.time()) + 3600,
    }
    payload.update(claims)
    return jwt.encode(payload, "not-the-provider-signing-key-0123456789", algorithm="HS256")


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def broker(app):
    return app.state.broker


@pytest.fixture
def client(app):
    return TestClient(app)
