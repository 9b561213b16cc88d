# =============================================================================
# tests/test_api.py - HTTP and WebSocket API Tests
# =============================================================================
# Drives the FastAPI app end to end with TestClient. The lifespan builds its
# controller through app.main.create_session_controller, which is patched to
# return a controller running on the in-memory fakes.
# =============================================================================

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from app.exceptions import AuthServiceError, ProfilePersistError
from app.main import app
from tests.fakes import make_session


@pytest.fixture
def api(controller):
    with patch("app.main.create_session_controller", AsyncMock(return_value=controller)):
        with TestClient(app) as client:
            yield client


@pytest.fixture
def ann_account(auth, store, ann_row):
    store.add(**ann_row)
    auth.accounts[("a@x.com", "secret")] = make_session("u1")


def sign_in(api):
    response = api.post("/api/v1/auth/signin", json={"email": "a@x.com", "password": "secret"})
    assert response.status_code == 200
    return response


# =============================================================================
# Session State
# =============================================================================

class TestSessionState:
    """Tests for /auth/state and /auth/guard."""

    def test_startup_state(self, api):
        data = api.get("/api/v1/auth/state").json()

        assert data["state"] == "unauthenticated"
        assert data["is_loading"] is False
        assert data["user"] is None
        assert data["profile_loaded"] is False

    def test_guard_sends_anonymous_user_to_login(self, api):
        data = api.get("/api/v1/auth/guard").json()

        assert data == {"decision": "login", "redirect_to": "/login"}

    def test_guard_allows_complete_account(self, api, ann_account):
        sign_in(api)

        assert api.get("/api/v1/auth/guard").json()["decision"] == "allow"

    def test_controller_missing(self):
        # No lifespan -> nothing on app.state
        client = TestClient(app)

        response = client.get("/api/v1/auth/state")

        assert response.status_code == 502
        assert response.json()["code"] == "CONTROLLER_UNAVAILABLE"


# =============================================================================
# Sign-up
# =============================================================================

class TestSignUpEndpoints:
    """Tests for the sign-up endpoints."""

    def test_signup_sends_link(self, api, auth):
        response = api.post("/api/v1/auth/signup", json={"email": "new@x.com"})

        assert response.status_code == 202
        data = response.json()
        assert data["redirect_to"] == "https://artfolio.test/set-password"
        assert data["message_id"] == "msg-1"

    def test_signup_duplicate(self, api, ann_account):
        response = api.post("/api/v1/auth/signup", json={"email": "a@x.com"})

        assert response.status_code == 409
        assert response.json()["code"] == "DUPLICATE_ACCOUNT"

    def test_signup_invalid_email(self, api):
        response = api.post("/api/v1/auth/signup", json={"email": "not-an-email"})

        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_link_then_complete(self, api, auth, store):
        auth.otp_codes[("new@x.com", "123456")] = make_session("u7", "new@x.com")

        verified = api.post("/api/v1/auth/otp/verify", json={"email": "new@x.com", "token": "123456"})
        assert verified.json()["state"] == "authenticated"
        assert api.get("/api/v1/auth/guard").json()["decision"] == "set_password"

        response = api.post("/api/v1/auth/signup/complete", json={
            "email": "new@x.com",
            "password": "long-password",
            "account_category": "collector",
            "bio": "Collects prints.",
        })

        assert response.status_code == 200
        assert response.json()["user_type"] == "collector"
        assert store.rows["u7"]["password_set"] is True
        assert api.get("/api/v1/auth/guard").json()["decision"] == "allow"

    def test_complete_weak_password(self, api):
        response = api.post("/api/v1/auth/signup/complete", json={
            "email": "new@x.com",
            "password": "123",
            "account_category": "artist",
        })

        assert response.status_code == 422
        assert response.json()["code"] == "CREDENTIAL_REJECTED"

    def test_complete_unknown_category(self, api):
        response = api.post("/api/v1/auth/signup/complete", json={
            "email": "new@x.com",
            "password": "long-password",
            "account_category": "gallery",
        })

        assert response.status_code == 422

    def test_callback_without_credentials(self, api):
        response = api.post("/api/v1/auth/callback", json={"url": "https://artfolio.test/set-password"})

        assert response.status_code == 502
        assert response.json()["code"] == "LINK_TOKENS_MISSING"

    def test_callback_with_code(self, api):
        response = api.post("/api/v1/auth/callback", json={"url": "https://artfolio.test/cb?code=abc"})

        assert response.status_code == 200
        assert response.json()["user"]["id"] == "code-user"


# =============================================================================
# Sign-in / Sign-out
# =============================================================================

class TestSignInEndpoints:
    """Tests for /auth/signin and /auth/signout."""

    def test_sign_in(self, api, ann_account):
        data = sign_in(api).json()

        assert data["state"] == "authenticated"
        assert data["profile"]["name"] == "Ann"
        assert data["profile"]["certificatePreference"] == "digital"

    def test_wrong_password(self, api, ann_account):
        response = api.post("/api/v1/auth/signin", json={"email": "a@x.com", "password": "nope"})

        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_CREDENTIALS"

    def test_missing_profile(self, api, auth):
        auth.accounts[("b@x.com", "pw")] = make_session("u2", "b@x.com")

        response = api.post("/api/v1/auth/signin", json={"email": "b@x.com", "password": "pw"})

        assert response.status_code == 404
        assert response.json()["code"] == "PROFILE_NOT_FOUND"
        assert api.get("/api/v1/auth/guard").json()["decision"] == "set_password"

    def test_sign_out(self, api, ann_account, store):
        sign_in(api)

        response = api.post("/api/v1/auth/signout")

        assert response.status_code == 200
        assert response.json()["state"] == "unauthenticated"
        assert store.active == {}

    def test_sign_out_remote_failure(self, api, ann_account, auth):
        sign_in(api)
        auth.invalidate_error = AuthServiceError("timeout")

        response = api.post("/api/v1/auth/signout")

        assert response.status_code == 502
        assert api.get("/api/v1/auth/state").json()["state"] == "unauthenticated"


# =============================================================================
# Profile
# =============================================================================

class TestProfileEndpoints:
    """Tests for /profile."""

    def test_requires_session(self, api, store):
        assert api.get("/api/v1/profile").status_code == 401

        response = api.patch("/api/v1/profile", json={"bio": "x"})
        assert response.status_code == 401
        assert response.json()["code"] == "NOT_AUTHENTICATED"
        assert "update" not in store.call_names()

    def test_get_profile(self, api, ann_account):
        sign_in(api)

        data = api.get("/api/v1/profile").json()

        assert data["id"] == "u1"
        assert data["tags"] == ["Painter"]

    def test_patch_profile(self, api, ann_account, store):
        sign_in(api)

        response = api.patch("/api/v1/profile", json={"bio": "Bronze now.", "certificatePreference": "physical"})

        assert response.status_code == 200
        assert response.json()["bio"] == "Bronze now."
        assert store.rows["u1"]["certificatePreference"] == "physical"

    def test_patch_rejects_managed_fields(self, api, ann_account):
        sign_in(api)

        response = api.patch("/api/v1/profile", json={"password_set": False})

        assert response.status_code == 422

    def test_patch_persist_failure(self, api, ann_account, store):
        sign_in(api)
        store.persist_error = ProfilePersistError("row level security")

        response = api.patch("/api/v1/profile", json={"name": "Anna"})

        assert response.status_code == 502
        assert api.get("/api/v1/profile").json()["name"] == "Ann"

    def test_refresh(self, api, ann_account, store):
        sign_in(api)
        store.rows["u1"]["name"] = "Ann B."

        assert api.post("/api/v1/profile/refresh").json()["name"] == "Ann B."


# =============================================================================
# Health / WebSocket
# =============================================================================

class TestHealth:
    """Tests for health endpoints."""

    def test_health(self, api):
        data = api.get("/api/v1/health").json()

        assert data["status"] == "healthy"
        assert data["environment"] == "development"

    def test_ready_after_startup(self, api):
        data = api.get("/api/v1/health/ready").json()

        assert data["status"] == "ready"
        assert data["session_state"] == "unauthenticated"

    def test_live(self, api):
        assert api.get("/api/v1/health/live").json()["status"] == "alive"


class TestSessionWebSocket:
    """Tests for /ws/session."""

    def test_initial_snapshot_and_ping(self, api):
        with api.websocket_connect("/ws/session") as websocket:
            message = websocket.receive_json()
            assert message["type"] == "session_state"
            assert message["state"] == "unauthenticated"

            websocket.send_text("ping")
            assert websocket.receive_text() == "pong"

    def test_pushes_changes(self, api, ann_account):
        with api.websocket_connect("/ws/session") as websocket:
            websocket.receive_json()

            sign_in(api)

            states = []
            while "authenticated" not in states and len(states) < 5:
                states.append(websocket.receive_json()["state"])

            assert states[-1] == "authenticated"
