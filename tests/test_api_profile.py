# Tests for /auth/user and /auth/refresh.
# Created: 2026-10-19

from urllib.parse import parse_qs

import httpx
import pytest
import respx
from starlette.requests import Request

from authrelay.api.routes.profile import refresh
from authrelay.relay.errors import ClientError
from tests.conftest import TOKEN_URL, USERINFO_URL


class TestUserInfo:
    @respx.mock
    def test_returns_normalized_profile(self, client):
        route = respx.get(USERINFO_URL).mock(
            return_value=httpx.Response(
                200,
                json={
                    "id": "123",
                    "name": "Ada Lovelace",
                    "email": "ada@example.com",
                    "picture": "https://example.com/ada.png",
                    "locale": "en",
                },
            )
        )
        resp = client.get("/auth/user", headers={"Authorization": "Bearer at-1"})

        assert resp.status_code == 200
        assert resp.json() == {
            "name": "Ada Lovelace",
            "email": "ada@example.com",
            "picture": "https://example.com/ada.png",
        }
        assert route.calls.last.request.headers["Authorization"] == "Bearer at-1"

    @pytest.mark.parametrize("header", [None, "Basic abc", "Bearer ", "at-1"])
    def test_missing_bearer_token(self, client, header):
        headers = {"Authorization": header} if header is not None else {}
        resp = client.get("/auth/user", headers=headers)
        assert resp.status_code == 401
        assert resp.json() == {"error": "Access token required"}

    @respx.mock
    def test_expired_token(self, client):
        respx.get(USERINFO_URL).mock(return_value=httpx.Response(401, json={"error": "invalid"}))
        resp = client.get("/auth/user", headers={"Authorization": "Bearer stale"})
        assert resp.status_code == 401
        assert resp.json() == {"error": "Invalid or expired token"}

    @respx.mock
    def test_upstream_failure(self, client):
        respx.get(USERINFO_URL).mock(return_value=httpx.Response(503, text="down"))
        resp = client.get("/auth/user", headers={"Authorization": "Bearer at-1"})
        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to fetch user information"}

    @respx.mock
    def test_non_object_profile(self, client):
        respx.get(USERINFO_URL).mock(return_value=httpx.Response(200, json=["not", "an", "object"]))
        resp = client.get("/auth/user", headers={"Authorization": "Bearer at-1"})
        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to fetch user information"}

    def test_disallowed_origin(self, client):
        resp = client.get(
            "/auth/user",
            headers={"Authorization": "Bearer at-1", "Origin": "https://evil.example"},
        )
        assert resp.status_code == 403


class TestRefresh:
    @respx.mock
    def test_refresh(self, client):
        route = respx.post(TOKEN_URL).mock(
            return_value=httpx.Response(200, json={"access_token": "at-2", "expires_in": 3600})
        )
        resp = client.post("/auth/refresh", json={"refresh_token": "rt-1"})

        assert resp.status_code == 200
        data = resp.json()
        assert data["access_token"] == "at-2"
        assert data["refresh_token"] == "rt-1"
        assert isinstance(data["expires_at"], int)
        form = parse_qs(route.calls.last.request.content.decode())
        assert form["grant_type"] == ["refresh_token"]
        assert form["refresh_token"] == ["rt-1"]

    @respx.mock
    def test_camel_case_field_accepted(self, client):
        respx.post(TOKEN_URL).mock(return_value=httpx.Response(200, json={"access_token": "at-2"}))
        resp = client.post("/auth/refresh", json={"refreshToken": "rt-1"})
        assert resp.status_code == 200

    @pytest.mark.parametrize("body", [{}, {"refresh_token": ""}, {"refresh_token": 42}])
    def test_missing_refresh_token(self, client, body):
        resp = client.post("/auth/refresh", json=body)
        assert resp.status_code == 400
        assert resp.json() == {"error": "Refresh token required"}

    def test_invalid_json(self, client):
        resp = client.post(
            "/auth/refresh", content=b"{not json", headers={"Content-Type": "application/json"}
        )
        assert resp.status_code == 400
        assert resp.json() == {"error": "Refresh token required"}

    async def test_invalid_body_error_hides_decode_failure(self, app):
        async def receive():
            return {"type": "http.request", "body": b"{not json", "more_body": False}

        request = Request(
            {"type": "http", "method": "POST", "headers": [], "app": app}, receive
        )
        with pytest.raises(ClientError) as exc_info:
            await refresh(request, broker=app.state.broker)
        assert exc_info.value.__cause__ is None
        assert exc_info.value.__suppress_context__ is True

    @respx.mock
    def test_upstream_failure(self, client):
        respx.post(TOKEN_URL).mock(
            return_value=httpx.Response(400, json={"error": "invalid_grant"})
        )
        resp = client.post("/auth/refresh", json={"refresh_token": "revoked"})
        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to refresh access token"}
