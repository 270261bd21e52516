"""
Tests for the sign-in flow and session cookie.
"""

import pytest
from fastapi.testclient import TestClient
from starlette.requests import Request

from em_diary import config
from em_diary.auth import (
    authenticate_manager,
    create_session_token,
    decode_session_token,
    hash_password,
    is_signed_in,
    verify_password,
)
from em_diary.main import create_app
from em_diary.utils.safe_redirect import safe_redirect_url

PASSWORD = "correct horse battery staple"


@pytest.fixture
def manager_account(monkeypatch):
    monkeypatch.setattr(config, "DEMO_MODE", False)
    monkeypatch.setattr(config, "SECRET_KEY", "test-secret")
    monkeypatch.setattr(config, "MANAGER_EMAIL", "lead@example.com")
    monkeypatch.setattr(config, "MANAGER_PASSWORD_HASH", hash_password(PASSWORD))


@pytest.fixture
def anon_client(store, manager_account) -> TestClient:
    return TestClient(create_app(store))


class TestPasswords:

    def test_hash_and_verify(self):
        hashed = hash_password("s3cret")
        assert hashed != "s3cret"
        assert verify_password("s3cret", hashed)
        assert not verify_password("wrong", hashed)

    def test_empty_or_malformed_hash(self):
        assert not verify_password("s3cret", "")
        assert not verify_password("s3cret", "not-a-hash")


class TestSessionToken:

    def test_round_trip(self, manager_account):
        token = create_session_token("lead@example.com")
        assert decode_session_token(token)["email"] == "lead@example.com"

    def test_tampered_token_rejected(self, manager_account):
        token = create_session_token("lead@example.com")
        assert decode_session_token(token + "x") is None

    def test_token_signed_with_other_key_rejected(self, manager_account, monkeypatch):
        token = create_session_token("lead@example.com")
        monkeypatch.setattr(config, "SECRET_KEY", "rotated")
        assert decode_session_token(token) is None


class TestAuthenticateManager:

    def test_valid_credentials(self, manager_account):
        manager = authenticate_manager(" Lead@Example.com ", PASSWORD)
        assert manager.email == "lead@example.com"
        assert manager.display_name == "lead"

    def test_wrong_password(self, manager_account):
        assert authenticate_manager("lead@example.com", "nope") is None

    def test_unknown_email(self, manager_account):
        assert authenticate_manager("someone@example.com", PASSWORD) is None

    def test_no_account_configured(self, manager_account, monkeypatch):
        monkeypatch.setattr(config, "MANAGER_EMAIL", "")
        assert authenticate_manager("", PASSWORD) is None


def _request(session_token=None):
    headers = []
    if session_token:
        headers.append((b"cookie", f"session={session_token}".encode()))
    return Request({"type": "http", "headers": headers})


class TestIsSignedIn:

    def test_no_cookie(self, manager_account):
        assert not is_signed_in(_request())

    def test_valid_session_cookie(self, manager_account):
        assert is_signed_in(_request(create_session_token("lead@example.com")))

    def test_cookie_for_other_email(self, manager_account):
        assert not is_signed_in(_request(create_session_token("someone@example.com")))

    def test_demo_mode(self, manager_account, monkeypatch):
        monkeypatch.setattr(config, "DEMO_MODE", True)
        assert is_signed_in(_request())


class TestSignInFlow:
    """Protected pages redirect to sign-in and come back afterwards."""

    def test_protected_page_redirects_to_login(self, anon_client):
        response = anon_client.get("/members/new", follow_redirects=False)

        assert response.status_code == 303
        assert response.headers["location"] == "/login?next=/members/new"

    def test_login_page_renders(self, anon_client):
        response = anon_client.get("/login?next=/members/new")

        assert response.status_code == 200
        assert 'value="/members/new"' in response.text

    def test_bad_credentials(self, anon_client):
        response = anon_client.post(
            "/login", data={"email": "lead@example.com", "password": "nope", "next": "/"}
        )

        assert response.status_code == 401
        assert "Invalid email or password" in response.text

    def test_sign_in_then_sign_out(self, anon_client):
        response = anon_client.post(
            "/login",
            data={"email": "lead@example.com", "password": PASSWORD, "next": "/members/new"},
            follow_redirects=False,
        )
        assert response.status_code == 303
        assert response.headers["location"] == "/members/new"
        assert "session" in response.cookies

        assert anon_client.get("/", follow_redirects=False).status_code == 200

        logout = anon_client.get("/logout", follow_redirects=False)
        assert logout.headers["location"] == "/login"
        assert anon_client.get("/", follow_redirects=False).status_code == 303

    def test_login_ignores_external_next(self, anon_client):
        response = anon_client.post(
            "/login",
            data={"email": "lead@example.com", "password": PASSWORD, "next": "https://evil.example"},
            follow_redirects=False,
        )

        assert response.headers["location"] == "/"

    def test_demo_mode_is_signed_in(self, anon_client, monkeypatch):
        monkeypatch.setattr(config, "DEMO_MODE", True)

        response = anon_client.get("/login", follow_redirects=False)

        assert response.status_code == 303
        assert response.headers["location"] == "/"


class TestSafeRedirect:

    @pytest.mark.parametrize("url", ["/", "/members/abc", "/members/abc?tab=notes"])
    def test_local_paths_allowed(self, url):
        assert safe_redirect_url(url) == url

    @pytest.mark.parametrize("url", [
        "",
        None,
        "https://evil.example/",
        "//evil.example",
        "members",
        "/login",
        "/logout",
    ])
    def test_rejected(self, url):
        assert safe_redirect_url(url) == "/"
