"""Tests for the user directory and admin user management."""

import unittest

from bugsage.models import AuthSession, User
from tests.support import ApiTestCase


class TestListUsers(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.make_user("admin", role="admin")
        self.make_user("Bob")
        self.make_user("alice")
        self.make_user("carol", status="inactive")

    def test_admin_sees_everyone(self) -> None:
        resp = self.client_as("admin").get("/api/users")
        self.assertEqual(resp.status_code, 200, resp.text)
        users = resp.json()["users"]
        self.assertEqual([u["username"] for u in users], ["admin", "alice", "Bob", "carol"])
        for user in users:
            self.assertNotIn("password_hash", user)

    def test_regular_user_sees_active_only(self) -> None:
        users = self.client_as("alice").get("/api/users").json()["users"]
        self.assertEqual([u["username"] for u in users], ["admin", "alice", "Bob"])

    def test_requires_session(self) -> None:
        self.assertFailure(self.client.get("/api/users"), 401)


class TestCreateUser(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.make_user("admin", role="admin")
        self.make_user("dev")

    def test_admin_creates_user_with_role(self) -> None:
        resp = self.client_as("admin").post(
            "/api/users",
            json={"username": "lead", "email": "lead@example.com", "password": "secret123", "role": "admin"},
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        body = resp.json()
        self.assertEqual(body["message"], "User created successfully")
        self.assertEqual(body["user"]["role"], "admin")
        self.assertEqual(body["user"]["status"], "active")
        self.assertEqual(self.login(self.new_client(), "lead").status_code, 200)

    def test_validation(self) -> None:
        client = self.client_as("admin")
        cases = [
            ({"username": "x", "email": "x@example.com"}, "All fields are required"),
            ({"username": "x", "email": "nope", "password": "secret123"}, "Invalid email format"),
            ({"username": "x", "email": "x@example.com", "password": "abc"}, "Password must be at least 6 characters"),
            (
                {"username": "x", "email": "x@example.com", "password": "secret123", "role": "owner"},
                "Invalid role",
            ),
            (
                {"username": "dev", "email": "x@example.com", "password": "secret123"},
                "Username or email already exists",
            ),
        ]
        for body, message in cases:
            with self.subTest(message=message):
                self.assertFailure(client.post("/api/users", json=body), 400, message)
        self.assertEqual(self.count(User), 2)

    def test_non_admin_is_refused(self) -> None:
        resp = self.client_as("dev").post(
            "/api/users", json={"username": "x", "email": "x@example.com", "password": "secret123"}
        )
        self.assertFailure(resp, 403, "Admin access required")


class TestUpdateUser(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.admin_id = self.make_user("admin", role="admin")
        self.dev_id = self.make_user("dev")

    def test_promote_drops_existing_sessions(self) -> None:
        dev_client = self.client_as("dev")
        resp = self.client_as("admin").put("/api/users", json={"id": self.dev_id, "role": "admin"})
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(self.fetch(User, self.dev_id).role, "admin")
        self.assertFailure(dev_client.get("/api/auth"), 401)

        fresh = self.client_as("dev")
        self.assertEqual(fresh.get("/api/auth").json()["user"]["role"], "admin")

    def test_deactivated_user_cannot_log_in(self) -> None:
        self.client_as("admin").put("/api/users", json={"id": self.dev_id, "status": "inactive"})
        self.assertFailure(self.login(self.new_client(), "dev"), 400, "Account is not active")
        with self.Session() as db:
            self.assertEqual(db.query(AuthSession).filter(AuthSession.user_id == self.dev_id).count(), 0)

    def test_errors(self) -> None:
        client = self.client_as("admin")
        cases = [
            ({"role": "admin"}, 400, "User ID is required"),
            ({"id": self.dev_id, "role": "owner"}, 400, "Invalid role"),
            ({"id": self.dev_id, "status": "banned"}, 400, "Invalid status"),
            ({"id": self.dev_id}, 400, "No fields to update"),
            ({"id": self.admin_id, "role": "user"}, 400, "You cannot change your own role or status"),
            ({"id": 999, "status": "inactive"}, 404, "User not found"),
        ]
        for body, status_code, message in cases:
            with self.subTest(message=message):
                self.assertFailure(client.put("/api/users", json=body), status_code, message)
        self.assertEqual(self.fetch(User, self.admin_id).role, "admin")

    def test_non_admin_is_refused(self) -> None:
        resp = self.client_as("dev").put("/api/users", json={"id": self.admin_id, "status": "inactive"})
        self.assertFailure(resp, 403)


if __name__ == "__main__":
    unittest.main()
