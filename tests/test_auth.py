"""Tests for authentication endpoints and flows."""

from datetime import timedelta
from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from app.models.revoked_token import RevokedToken
from app.models.user import User
from app.services.jwt import TokenClaims, get_token_service


def _register_body(**overrides) -> dict:
    body = {
        "firstName": "Ada",
        "lastName": "Lovelace",
        "email": "ada@example.com",
        "password": "password123",
        "industryType": "tour",
    }
    body.update(overrides)
    return body


def body_fields(response) -> list[str]:
    return [err["field"] for err in response.json()["errors"]]


class TestRegistration:
    """Tests for user registration."""

    def test_register_success(self, client: TestClient, db_session: Session):
        """Register returns the user, a token pair and sets the access cookie."""
        response = client.post("/api/auth/register", json=_register_body())
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "User registered successfully"
        data = body["data"]
        assert data["user"]["email"] == "ada@example.com"
        assert data["user"]["firstName"] == "Ada"
        assert data["user"]["industryType"] == "tour"
        assert data["user"]["role"] == "user"
        assert "passwordHash" not in data["user"]
        assert data["accessToken"]
        assert data["refreshToken"]
        assert response.cookies.get("access_token") == data["accessToken"]

        user = db_session.query(User).filter(User.email == "ada@example.com").one()
        assert user.password_hash != "password123"
        assert user.login_attempts == 0

    def test_register_defaults_to_other(self, client: TestClient):
        body = _register_body()
        del body["industryType"]
        response = client.post("/api/auth/register", json=body)
        assert response.status_code == 201
        assert response.json()["data"]["user"]["industryType"] == "other"

    def test_register_cookie_attributes(self, client: TestClient):
        """The access cookie is HttpOnly, SameSite=Strict and lives as long as the token."""
        response = client.post("/api/auth/register", json=_register_body())
        cookie = response.headers["set-cookie"].lower()
        assert "httponly" in cookie
        assert "samesite=strict" in cookie
        assert "max-age=900" in cookie

    def test_register_duplicate_email(self, client: TestClient, test_user: dict):
        response = client.post("/api/auth/register", json=_register_body(email="test@example.com"))
        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "User already exists with this email"}

    def test_register_short_password(self, client: TestClient):
        """Field validation failures come back as 400 with per-field errors."""
        response = client.post("/api/auth/register", json=_register_body(password="short"))
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Validation failed"
        assert [err["field"] for err in body["errors"]] == ["password"]

    def test_register_invalid_email(self, client: TestClient):
        response = client.post("/api/auth/register", json=_register_body(email="not-an-email"))
        assert response.status_code == 400
        assert body_fields(response) == ["email"]

    def test_register_malformed_emails(self, client: TestClient):
        for email in ("ada@@example.com", "ada lovelace@example.com", "ada@example", "@example.com"):
            response = client.post("/api/auth/register", json=_register_body(email=email))
            assert response.status_code == 400, email
            assert body_fields(response) == ["email"]

    def test_register_keeps_email_as_given(self, client: TestClient, db_session: Session):
        """Valid addresses are stored trimmed but otherwise unchanged."""
        response = client.post("/api/auth/register", json=_register_body(email="  Ada.Lovelace@Example.com "))
        assert response.status_code == 201
        assert response.json()["data"]["user"]["email"] == "Ada.Lovelace@Example.com"
        assert db_session.query(User).filter(User.email == "Ada.Lovelace@Example.com").count() == 1

    def test_register_database_unavailable(self, client: TestClient, db_session: Session):
        """A database outage during registration is a 503, not a crash."""
        outage = OperationalError("SELECT", {}, Exception("connection refused"))
        with patch.object(db_session, "query", side_effect=outage):
            response = client.post("/api/auth/register", json=_register_body())
        assert response.status_code == 503
        assert response.json() == {
            "success": False,
            "message": "Database service unavailable. Please try again later.",
        }

    def test_register_unknown_industry(self, client: TestClient):
        response = client.post("/api/auth/register", json=_register_body(industryType="bakery"))
        assert response.status_code == 400
        assert body_fields(response) == ["industryType"]

    def test_register_missing_names(self, client: TestClient):
        body = _register_body()
        del body["firstName"]
        del body["lastName"]
        response = client.post("/api/auth/register", json=body)
        assert response.status_code == 400
        assert sorted(body_fields(response)) == ["firstName", "lastName"]


class TestLogin:
    """Tests for user login."""

    def test_login_success(self, client: TestClient, test_user: dict, db_session: Session):
        response = client.post("/api/auth/login", json={"email": "test@example.com", "password": "password123"})
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Login successful"
        assert body["data"]["user"]["email"] == "test@example.com"
        assert body["data"]["accessToken"]
        assert body["data"]["refreshToken"]
        assert response.cookies.get("access_token") == body["data"]["accessToken"]

        user = db_session.get(User, test_user["user_id"])
        db_session.refresh(user)
        assert user.last_login_at is not None

    def test_login_wrong_password(self, client: TestClient, test_user: dict):
        response = client.post("/api/auth/login", json={"email": "test@example.com", "password": "wrongpassword"})
        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Invalid credentials"}

    def test_login_unknown_email(self, client: TestClient):
        """Unknown emails get the same answer as wrong passwords."""
        response = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "password123"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"

    def test_login_deactivated(self, client: TestClient, test_user: dict, db_session: Session):
        user = db_session.get(User, test_user["user_id"])
        user.is_active = False
        db_session.commit()

        response = client.post("/api/auth/login", json={"email": "test@example.com", "password": "password123"})
        assert response.status_code == 401
        assert response.json()["message"] == "Account is deactivated."

    def test_locked_account_looks_like_bad_credentials(self, client: TestClient, test_user: dict):
        """After the lockout threshold even the right password is refused, with a Retry-After hint."""
        for _ in range(5):
            client.post("/api/auth/login", json={"email": "test@example.com", "password": "wrongpassword"})

        response = client.post("/api/auth/login", json={"email": "test@example.com", "password": "password123"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"
        retry_after = int(response.headers["retry-after"])
        assert 0 < retry_after <= 2 * 60 * 60


class TestCurrentUser:
    """Tests for /me and token transport."""

    def test_me_with_bearer(self, client: TestClient, test_user: dict):
        response = client.get("/api/auth/me", headers=test_user["headers"])
        assert response.status_code == 200
        assert response.json()["data"]["user"]["id"] == test_user["user_id"]

    def test_me_with_cookie(self, client: TestClient, test_user: dict):
        client.post("/api/auth/login", json={"email": "test@example.com", "password": "password123"})
        response = client.get("/api/auth/me")
        assert response.status_code == 200
        assert response.json()["data"]["user"]["email"] == "test@example.com"

    def test_header_wins_over_cookie(self, client: TestClient, test_user: dict, make_user):
        """A bearer header is used even when a cookie for another user is present."""
        other = make_user("other@example.com")
        client.post("/api/auth/login", json={"email": "test@example.com", "password": "password123"})

        response = client.get("/api/auth/me", headers=other["headers"])
        assert response.status_code == 200
        assert response.json()["data"]["user"]["email"] == "other@example.com"

    def test_me_anonymous(self, client: TestClient):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Not authenticated"}

    def test_me_with_garbage_token(self, client: TestClient):
        """Optional auth treats an unusable token as no token at all."""
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer junk"})
        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Not authenticated"}

    def test_me_with_expired_token(self, client: TestClient, test_user: dict, db_session: Session):
        user = db_session.get(User, test_user["user_id"])
        token = get_token_service().issue_access_token(TokenClaims.from_user(user), expires_delta=timedelta(seconds=-1))

        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["message"] == "Not authenticated"

    def test_me_with_revoked_token(self, client: TestClient, test_user: dict):
        client.post("/api/auth/logout", headers=test_user["headers"])

        response = client.get("/api/auth/me", headers=test_user["headers"])
        assert response.status_code == 401
        assert response.json()["message"] == "Not authenticated"

    def test_protected_route_without_token(self, client: TestClient):
        response = client.get("/api/dashboard")
        assert response.status_code == 401
        assert response.json()["message"] == "Access denied. No token provided."

    def test_expired_access_token(self, client: TestClient, test_user: dict, db_session: Session):
        user = db_session.get(User, test_user["user_id"])
        token = get_token_service().issue_access_token(TokenClaims.from_user(user), expires_delta=timedelta(seconds=-1))

        response = client.get("/api/dashboard", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["message"] == "Token expired."

    def test_garbage_token(self, client: TestClient):
        response = client.get("/api/dashboard", headers={"Authorization": "Bearer invalid.token.here"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid token."

    def test_refresh_token_not_accepted_as_access(self, client: TestClient, test_user: dict):
        response = client.get("/api/dashboard", headers={"Authorization": f"Bearer {test_user['refresh_token']}"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid token."

    def test_token_for_deleted_user(self, client: TestClient, test_user: dict, db_session: Session):
        db_session.delete(db_session.get(User, test_user["user_id"]))
        db_session.commit()

        response = client.get("/api/dashboard", headers=test_user["headers"])
        assert response.status_code == 401
        assert response.json()["message"] == "Token is not valid. User not found."

    def test_token_for_deactivated_user(self, client: TestClient, test_user: dict, db_session: Session):
        db_session.get(User, test_user["user_id"]).is_active = False
        db_session.commit()

        response = client.get("/api/dashboard", headers=test_user["headers"])
        assert response.status_code == 401
        assert response.json()["message"] == "Account is deactivated."


class TestRefresh:
    """Tests for token rotation."""

    def test_refresh_success(self, client: TestClient, test_user: dict):
        response = client.post("/api/auth/refresh", json={"refreshToken": test_user["refresh_token"]})
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["accessToken"] != test_user["access_token"]
        assert data["refreshToken"] != test_user["refresh_token"]
        assert response.cookies.get("access_token") == data["accessToken"]

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['accessToken']}"})
        assert me.json()["data"]["user"]["id"] == test_user["user_id"]

    def test_refresh_reflects_current_industry(self, client: TestClient, test_user: dict, db_session: Session):
        """Claims in the new pair come from the user row, not the old token."""
        db_session.get(User, test_user["user_id"]).industry_type = "logistics"
        db_session.commit()

        response = client.post("/api/auth/refresh", json={"refreshToken": test_user["refresh_token"]})
        access = response.json()["data"]["accessToken"]
        assert get_token_service().verify_access(access).claims.industry_type == "logistics"

    def test_refresh_missing_token(self, client: TestClient):
        response = client.post("/api/auth/refresh", json={})
        assert response.status_code == 401
        assert response.json()["message"] == "Refresh token is required"

    def test_refresh_with_access_token(self, client: TestClient, test_user: dict):
        response = client.post("/api/auth/refresh", json={"refreshToken": test_user["access_token"]})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid refresh token"

    def test_refresh_for_deactivated_user(self, client: TestClient, test_user: dict, db_session: Session):
        db_session.get(User, test_user["user_id"]).is_active = False
        db_session.commit()

        response = client.post("/api/auth/refresh", json={"refreshToken": test_user["refresh_token"]})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid refresh token"


class TestChangePassword:
    """Tests for password changes."""

    def test_change_password_success(self, client: TestClient, test_user: dict):
        response = client.put(
            "/api/auth/change-password",
            json={"currentPassword": "password123", "newPassword": "newpassword456"},
            headers=test_user["headers"],
        )
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Password changed successfully"}

        old = client.post("/api/auth/login", json={"email": "test@example.com", "password": "password123"})
        assert old.status_code == 401
        new = client.post("/api/auth/login", json={"email": "test@example.com", "password": "newpassword456"})
        assert new.status_code == 200

    def test_change_password_wrong_current(self, client: TestClient, test_user: dict):
        response = client.put(
            "/api/auth/change-password",
            json={"currentPassword": "wrongpassword", "newPassword": "newpassword456"},
            headers=test_user["headers"],
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Current password is incorrect"

    def test_change_password_same_as_current(self, client: TestClient, test_user: dict):
        response = client.put(
            "/api/auth/change-password",
            json={"currentPassword": "password123", "newPassword": "password123"},
            headers=test_user["headers"],
        )
        assert response.status_code == 400

    def test_change_password_requires_auth(self, client: TestClient):
        response = client.put(
            "/api/auth/change-password",
            json={"currentPassword": "password123", "newPassword": "newpassword456"},
        )
        assert response.status_code == 401


class TestLogout:
    """Tests for logout and token revocation."""

    def test_logout_revokes_access_token(self, client: TestClient, test_user: dict):
        response = client.post("/api/auth/logout", headers=test_user["headers"])
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Logout successful"}

        again = client.get("/api/dashboard", headers=test_user["headers"])
        assert again.status_code == 401
        assert again.json()["message"] == "Invalid token."

    def test_logout_revokes_refresh_token(self, client: TestClient, test_user: dict, db_session: Session):
        response = client.post(
            "/api/auth/logout",
            json={"refreshToken": test_user["refresh_token"]},
            headers=test_user["headers"],
        )
        assert response.status_code == 200
        assert db_session.query(RevokedToken).filter(RevokedToken.user_id == test_user["user_id"]).count() == 2

        refreshed = client.post("/api/auth/refresh", json={"refreshToken": test_user["refresh_token"]})
        assert refreshed.status_code == 401

    def test_logout_clears_cookie(self, client: TestClient, test_user: dict):
        client.post("/api/auth/login", json={"email": "test@example.com", "password": "password123"})
        response = client.post("/api/auth/logout")
        assert response.status_code == 200
        cookie = response.headers["set-cookie"]
        assert cookie.startswith("access_token=")
        assert "Max-Age=0" in cookie

    def test_logout_requires_auth(self, client: TestClient):
        response = client.post("/api/auth/logout")
        assert response.status_code == 401

    def test_other_sessions_survive_logout(self, client: TestClient, test_user: dict):
        """Only the presented tokens are revoked."""
        login = client.post("/api/auth/login", json={"email": "test@example.com", "password": "password123"})
        second = login.json()["data"]["accessToken"]

        client.post("/api/auth/logout", headers=test_user["headers"])
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {second}"})
        assert response.status_code == 200


class TestAppSurface:
    """Health, root and error envelopes."""

    def test_health(self, client: TestClient):
        for path in ("/health", "/api/health"):
            response = client.get(path)
            assert response.status_code == 200
            body = response.json()
            assert body["status"] == "ok"
            assert body["database"] == "connected"
            assert "uptime" in body
            assert "timestamp" in body

    def test_root(self, client: TestClient):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["message"] == "Welcome to Industry Hub API"

    def test_unknown_route(self, client: TestClient):
        response = client.get("/api/nope")
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Route /api/nope not found"}

    def test_security_headers(self, client: TestClient):
        response = client.get("/health")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
