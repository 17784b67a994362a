"""Tests for login, registration, logout and the current-user endpoint."""

import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from bugsage.core.config import get_settings
from bugsage.core.errors import NotFound
from bugsage.models import AuthSession, User
from bugsage.schemas.auth import SessionContext
from bugsage.services.auth import current_user
from tests.support import DEFAULT_PASSWORD, ApiTestCase


def _register_body(**overrides: str) -> dict[str, str]:
    body = {
        "action": "register",
        "username": "alice",
        "email": "alice@example.com",
        "password": "secret123",
        "confirmPassword": "secret123",
    }
    body.update(overrides)
    return body


class TestRegister(ApiTestCase):
    def test_register_creates_user_and_logs_in(self) -> None:
        resp = self.client.post("/api/auth", json=_register_body())
        self.assertEqual(resp.status_code, 200, resp.text)
        body = resp.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["message"], "Registration successful")
        self.assertEqual(body["user"]["username"], "alice")
        self.assertEqual(body["user"]["role"], "user")
        self.assertNotIn("password", body["user"])
        self.assertNotIn("password_hash", body["user"])

        me = self.client.get("/api/auth")
        self.assertEqual(me.status_code, 200, me.text)
        self.assertEqual(me.json()["user"]["email"], "alice@example.com")

    def test_password_is_stored_hashed(self) -> None:
        self.client.post("/api/auth", json=_register_body())
        with self.Session() as db:
            user = db.query(User).filter(User.username == "alice").one()
            self.assertNotEqual(user.password_hash, "secret123")
            self.assertTrue(user.password_hash.startswith("$2"))
            self.assertEqual(user.status, "active")

    def test_short_password_is_rejected_without_creating_user(self) -> None:
        min_len = get_settings().PASSWORD_MIN_LENGTH
        short = "x" * (min_len - 1)
        resp = self.client.post(
            "/api/auth", json=_register_body(password=short, confirmPassword=short)
        )
        self.assertFailure(resp, 400, f"Password must be at least {min_len} characters")
        self.assertEqual(self.count(User), 0)

    def test_missing_fields(self) -> None:
        resp = self.client.post("/api/auth", json=_register_body(email=""))
        self.assertFailure(resp, 400, "All fields are required")

    def test_malformed_email(self) -> None:
        resp = self.client.post("/api/auth", json=_register_body(email="not-an-email"))
        self.assertFailure(resp, 400, "Invalid email format")

    def test_password_mismatch(self) -> None:
        resp = self.client.post("/api/auth", json=_register_body(confirmPassword="different1"))
        self.assertFailure(resp, 400, "Passwords do not match")
        self.assertEqual(self.count(User), 0)

    def test_duplicate_username_conflicts_and_keeps_original(self) -> None:
        original_id = self.make_user("alice", email="first@example.com")
        resp = self.client.post(
            "/api/auth", json=_register_body(email="second@example.com")
        )
        self.assertFailure(resp, 400, "Username or email already exists")
        self.assertEqual(self.count(User), 1)
        original = self.fetch(User, original_id)
        self.assertEqual(original.email, "first@example.com")

    def test_duplicate_email_conflicts(self) -> None:
        self.make_user("bob", email="alice@example.com")
        resp = self.client.post("/api/auth", json=_register_body())
        self.assertFailure(resp, 400, "Username or email already exists")
        self.assertEqual(self.count(User), 1)


class TestLogin(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user_id = self.make_user("alice")

    def test_login_with_username(self) -> None:
        resp = self.login(self.client, "alice")
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["message"], "Login successful")
        self.assertEqual(resp.json()["user"]["id"], self.user_id)
        self.assertIn(get_settings().SESSION_COOKIE_NAME, resp.cookies)

    def test_login_with_email(self) -> None:
        resp = self.login(self.client, "alice@example.com")
        self.assertEqual(resp.status_code, 200, resp.text)

    def test_login_sets_last_login(self) -> None:
        self.assertIsNone(self.fetch(User, self.user_id).last_login)
        self.login(self.client, "alice")
        self.assertIsNotNone(self.fetch(User, self.user_id).last_login)

    def test_wrong_password_and_unknown_user_look_the_same(self) -> None:
        wrong_password = self.login(self.client, "alice", "wrong-password")
        unknown_user = self.login(self.client, "nobody", DEFAULT_PASSWORD)
        self.assertEqual(wrong_password.status_code, unknown_user.status_code)
        self.assertEqual(wrong_password.json(), unknown_user.json())
        self.assertEqual(wrong_password.json()["message"], "Invalid credentials")

    def test_inactive_account(self) -> None:
        self.make_user("carol", status="inactive")
        resp = self.login(self.client, "carol")
        self.assertFailure(resp, 400, "Account is not active")

    def test_missing_credentials(self) -> None:
        resp = self.client.post("/api/auth", json={"action": "login", "username": "alice"})
        self.assertFailure(resp, 400, "Username and password are required")

    def test_unknown_action(self) -> None:
        resp = self.client.post("/api/auth", json={"action": "reset"})
        self.assertFailure(resp, 400, "Invalid action")

    def test_unsupported_method(self) -> None:
        resp = self.client.put("/api/auth", json={})
        self.assertFailure(resp, 405, "Method not allowed")


class TestSession(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.make_user("alice")

    def test_current_user_requires_session(self) -> None:
        resp = self.client.get("/api/auth")
        self.assertFailure(resp, 401, "Authentication required")

    def test_logout_destroys_session(self) -> None:
        client = self.client_as("alice")
        self.assertEqual(self.count(AuthSession), 1)
        resp = client.post("/api/auth", json={"action": "logout"})
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["message"], "Logout successful")
        self.assertEqual(self.count(AuthSession), 0)
        self.assertFailure(client.get("/api/auth"), 401)

    def test_logout_without_session_succeeds(self) -> None:
        resp = self.client.post("/api/auth", json={"action": "logout"})
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertTrue(resp.json()["success"])

    def test_expired_session_is_rejected(self) -> None:
        client = self.client_as("alice")
        with self.Session() as db:
            db.query(AuthSession).update(
                {AuthSession.expires_at: datetime.now(timezone.utc) - timedelta(minutes=1)}
            )
            db.commit()
        self.assertFailure(client.get("/api/auth"), 401)

    def test_forged_cookie_is_rejected(self) -> None:
        self.client.cookies.set(get_settings().SESSION_COOKIE_NAME, "0" * 64)
        self.assertFailure(self.client.get("/api/auth"), 401)

    def test_token_is_not_stored_in_clear(self) -> None:
        client = self.client_as("alice")
        token = client.cookies.get(get_settings().SESSION_COOKIE_NAME)
        with self.Session() as db:
            stored = db.query(AuthSession).one()
            self.assertNotEqual(stored.token_hash, token)
            self.assertEqual(stored.username, "alice")


class TestCurrentUserService(unittest.TestCase):
    def test_missing_row_is_not_found(self) -> None:
        db = MagicMock()
        db.get.return_value = None
        ctx = SessionContext(user_id=7, username="ghost", role="user", email="g@example.com", token="t")
        with self.assertRaises(NotFound):
            current_user(db, ctx)


if __name__ == "__main__":
    unittest.main()
