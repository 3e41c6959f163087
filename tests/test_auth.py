"""Tests for registration, login, token refresh, /me and bearer checks."""

from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from app.auth.schemas import UserRegistrationModel
from tests.helpers import auth_headers, make_token


def refresh_cookie(response) -> str:
    header = response.headers["set-cookie"]
    return header.split(";", 1)[0].split("=", 1)[1]


class TestRegistrationModel:
    def test_normalizes_email_and_name(self):
        data = UserRegistrationModel(email=" Sari@Mail.COM ", name="  Sari ", password="Rahasia123")

        assert data.email == "sari@mail.com"
        assert data.name == "Sari"

    @pytest.mark.parametrize(
        "fields",
        [
            {"email": "not-an-email"},
            {"name": "S"},
            {"password": "short1A"},
            {"password": "alllowercase1"},
            {"password": "NoDigitsHere"},
        ],
    )
    def test_rejects_invalid_input(self, fields):
        data = {"email": "sari@mail.com", "name": "Sari", "password": "Rahasia123", **fields}

        with pytest.raises(ValidationError):
            UserRegistrationModel(**data)


class TestRegister:
    def test_creates_user_and_profile(self, client, supabase):
        response = client.post(
            "/auth/register",
            json={"email": "sari@mail.com", "name": "Sari", "password": "Rahasia123"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "sari@mail.com"
        assert body["name"] == "Sari"
        profile = supabase.rows("profiles")[0]
        assert profile["id"] == body["id"]
        assert profile["name"] == "Sari"

    def test_duplicate_email_conflict(self, client, supabase):
        supabase.auth.add_user("sari@mail.com", "Rahasia123")

        response = client.post(
            "/auth/register",
            json={"email": "sari@mail.com", "name": "Sari", "password": "Rahasia123"},
        )

        assert response.status_code == 409
        assert response.json()["code"] == "E_CONFLICT"
        assert supabase.rows("profiles") == []

    def test_weak_password_rejected(self, client):
        response = client.post(
            "/auth/register",
            json={"email": "sari@mail.com", "name": "Sari", "password": "weak"},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "E_INVALID_REQUEST"

    def test_sign_up_without_user_is_upstream(self, client, supabase, monkeypatch):
        monkeypatch.setattr(
            supabase.auth, "sign_up", lambda credentials: SimpleNamespace(user=None, session=None)
        )

        response = client.post(
            "/auth/register",
            json={"email": "sari@mail.com", "name": "Sari", "password": "Rahasia123"},
        )

        assert response.status_code == 500
        assert response.json() == {
            "detail": "Failed to create user.",
            "code": "E_UPSTREAM",
            "details": "Sign-up returned no user.",
        }
        assert supabase.rows("profiles") == []


class TestLogin:
    def test_returns_token_and_sets_refresh_cookie(self, client, supabase):
        supabase.auth.add_user("sari@mail.com", "Rahasia123", user_id="u1")

        response = client.post(
            "/auth/login", json={"email": "sari@mail.com", "password": "Rahasia123"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["access_token"] == "access-u1"
        assert body["user_id"] == "u1"
        cookie = response.headers["set-cookie"]
        assert cookie.startswith("refresh_token=refresh-")
        assert "HttpOnly" in cookie
        assert "Path=/auth/access" in cookie

    def test_wrong_password(self, client, supabase):
        supabase.auth.add_user("sari@mail.com", "Rahasia123")

        response = client.post(
            "/auth/login", json={"email": "sari@mail.com", "password": "nope"}
        )

        assert response.status_code == 401
        assert response.json()["code"] == "E_UNAUTHORIZED"


class TestAccess:
    def test_refresh_rotates_cookie(self, client, supabase):
        supabase.auth.add_user("sari@mail.com", "Rahasia123", user_id="u1")
        login = client.post(
            "/auth/login", json={"email": "sari@mail.com", "password": "Rahasia123"}
        )
        old_refresh = refresh_cookie(login)

        response = client.get(
            "/auth/access", headers={"Cookie": f"refresh_token={old_refresh}"}
        )

        assert response.status_code == 200
        assert response.json()["access_token"] == "access-u1"
        assert refresh_cookie(response) != old_refresh

    def test_missing_cookie(self, client):
        response = client.get("/auth/access")

        assert response.status_code == 401
        assert response.json() == {"detail": "No refresh token provided.", "code": "E_UNAUTHORIZED"}

    def test_invalid_refresh_clears_cookie(self, client):
        response = client.get("/auth/access", headers={"Cookie": "refresh_token=stale"})

        assert response.status_code == 401
        assert response.json() == {
            "detail": "Refresh token invalid or expired. Please log in again.",
            "code": "E_UNAUTHORIZED",
        }
        assert 'refresh_token=""' in response.headers["set-cookie"]


class TestMe:
    def test_profile_and_admin_role(self, client, supabase):
        supabase.add_profile("u1", name="Sari")
        supabase.add_admin("u1", role="superadmin")

        response = client.get("/auth/me", headers=auth_headers("u1", email="sari@mail.com"))

        assert response.status_code == 200
        body = response.json()
        assert body["auth"] == {"id": "u1", "email": "sari@mail.com"}
        assert body["profile"]["name"] == "Sari"
        assert body["is_admin"] is True
        assert body["role"] == "superadmin"

    def test_missing_profile_is_null(self, client):
        response = client.get("/auth/me", headers=auth_headers("u1"))

        body = response.json()
        assert body["profile"] is None
        assert body["is_admin"] is False
        assert body["role"] is None


class TestBearerToken:
    def test_missing_token(self, client):
        response = client.get("/auth/me")

        assert response.status_code == 401
        assert response.json() == {"detail": "Missing bearer token.", "code": "E_UNAUTHORIZED"}

    def test_expired_token(self, client):
        token = make_token("u1", expires_in=-3600)

        response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Token expired"

    def test_wrong_issuer(self, client):
        token = make_token("u1", iss="https://elsewhere.test/auth/v1")

        response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid token"

    def test_garbage_token(self, client):
        response = client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401


class TestLogout:
    def test_clears_cookie(self, client, supabase):
        response = client.post("/auth/logout")

        assert response.status_code == 200
        assert response.json() == {"logged_out": True}
        assert supabase.auth.signed_out
        assert 'refresh_token=""' in response.headers["set-cookie"]


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
        assert response.headers["X-Request-ID"]
