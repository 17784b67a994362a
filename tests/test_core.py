"""Tests for settings, password/session helpers, health, migrations and the create_user script."""

import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from alembic import command
from alembic.config import Config
from fastapi.testclient import TestClient
from pydantic import ValidationError as SettingsError
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from bugsage.core.config import Settings, settings
from bugsage.core.database import apply_partial_update
from bugsage.core.security import (
    generate_session_token,
    hash_password,
    hash_session_token,
    verify_password,
)
from bugsage.main import app
from bugsage.models import Project, User
from bugsage.scripts import create_user
from bugsage.services.health import build_health
from tests.support import ApiTestCase

ROOT = Path(__file__).resolve().parent.parent


class TestSettings(unittest.TestCase):
    def test_rejects_unknown_database_scheme(self) -> None:
        with self.assertRaises(SettingsError):
            Settings(DATABASE_URL="mysql://root@localhost/bugsage")

    def test_log_level_is_normalised(self) -> None:
        self.assertEqual(Settings(LOG_LEVEL=" debug ").LOG_LEVEL, "DEBUG")
        with self.assertRaises(SettingsError):
            Settings(LOG_LEVEL="chatty")

    def test_bounds(self) -> None:
        for field, value in (
            ("SESSION_EXPIRE_MINUTES", 0),
            ("BCRYPT_ROUNDS", 3),
            ("PASSWORD_MIN_LENGTH", 0),
            ("BUGS_PER_PAGE", 0),
        ):
            with self.subTest(field=field):
                with self.assertRaises(SettingsError):
                    Settings(**{field: value})


class TestSecurity(unittest.TestCase):
    def test_password_round_trip(self) -> None:
        hashed = hash_password("secret123")
        self.assertNotEqual(hashed, "secret123")
        self.assertTrue(verify_password("secret123", hashed))
        self.assertFalse(verify_password("secret124", hashed))

    def test_malformed_hash_does_not_verify(self) -> None:
        self.assertFalse(verify_password("secret123", "not-a-bcrypt-hash"))

    def test_session_tokens(self) -> None:
        token = generate_session_token()
        self.assertEqual(len(token), 64)
        self.assertNotEqual(token, generate_session_token())
        self.assertEqual(hash_session_token(token), hash_session_token(token))
        self.assertNotEqual(hash_session_token(token), token)


class TestPartialUpdate(ApiTestCase):
    def test_updates_given_columns_only(self) -> None:
        project_id = self.make_project("Website")
        with self.Session() as db:
            self.assertEqual(apply_partial_update(db, Project, project_id, {"status": "inactive"}), 1)
            db.commit()
        project = self.fetch(Project, project_id)
        self.assertEqual(project.status, "inactive")
        self.assertEqual(project.name, "Website")
        self.assertIsNotNone(project.updated_at)

    def test_missing_row(self) -> None:
        with self.Session() as db:
            self.assertEqual(apply_partial_update(db, Project, 999, {"name": "X"}), 0)


class TestHealth(ApiTestCase):
    def test_health_reports_database(self) -> None:
        resp = self.client.get("/api/health")
        self.assertEqual(resp.status_code, 200, resp.text)
        body = resp.json()
        self.assertEqual(body["status"], "ok")
        self.assertEqual(body["database"], "connected")
        self.assertEqual(body["environment"], "dev")
        self.assertIsNone(body["schema_revision"])
        self.assertEqual(body["active_sessions"], 0)

    def test_health_counts_live_sessions(self) -> None:
        self.make_user("dev")
        self.client_as("dev")
        self.assertEqual(self.client.get("/api/health").json()["active_sessions"], 1)

    def test_health_reports_applied_migration(self) -> None:
        with self.engine.begin() as conn:
            conn.execute(text("CREATE TABLE alembic_version (version_num VARCHAR(32) NOT NULL)"))
            conn.execute(text("INSERT INTO alembic_version (version_num) VALUES ('20251019100000')"))
        body = self.client.get("/api/health").json()
        self.assertEqual(body["schema_revision"], "20251019100000")

    def test_unreachable_database_is_degraded(self) -> None:
        db = MagicMock()
        db.execute.side_effect = OperationalError("SELECT 1", {}, Exception("down"))
        fake_settings = MagicMock(APP_ENV="dev")
        with self.assertLogs("bugsage.services.health", "WARNING"):
            health = build_health(db, fake_settings)
        self.assertEqual(health.status, "degraded")
        self.assertEqual(health.database, "disconnected")
        self.assertIsNone(health.active_sessions)
        db.rollback.assert_called_once()

    def test_root(self) -> None:
        self.assertEqual(self.client.get("/").json()["success"], True)

    def test_unknown_route_uses_envelope(self) -> None:
        self.assertFailure(self.client.get("/api/nothing-here"), 404)

    def test_malformed_body_is_bad_request(self) -> None:
        self.make_user("dev")
        resp = self.client_as("dev").post("/api/bugs", json={"title": "T", "project_id": "abc"})
        self.assertFailure(resp, 400)
        self.assertIn("project_id", resp.json()["message"])

    def test_unexpected_error_uses_envelope(self) -> None:
        self.make_user("dev")
        client = TestClient(app, raise_server_exceptions=False)
        self._clients.append(client)
        self.login(client, "dev")
        with patch("bugsage.services.bugs.list_bugs", side_effect=RuntimeError("boom")):
            with self.assertLogs("bugsage.main", "ERROR"):
                resp = client.get("/api/bugs")
        self.assertFailure(resp, 500, "Internal server error")

    def test_wildcard_cors_never_allows_credentials(self) -> None:
        resp = self.client.get("/api/health", headers={"Origin": "https://elsewhere.example"})
        self.assertEqual(resp.headers["access-control-allow-origin"], "*")
        self.assertNotIn("access-control-allow-credentials", resp.headers)


class TestMigrations(unittest.TestCase):
    """alembic upgrade head on a fresh SQLite file builds the schema the models describe."""

    def test_upgrade_head(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        url = f"sqlite:///{Path(tmp.name) / 'bugsage.db'}"
        config = Config(str(ROOT / "alembic.ini"))
        config.set_main_option("script_location", str(ROOT / "alembic"))
        with patch.object(settings, "DATABASE_URL", url):
            command.upgrade(config, "head")

        engine = create_engine(url)
        self.addCleanup(engine.dispose)
        self.assertLessEqual(
            {"users", "projects", "bugs", "sessions"}, set(inspect(engine).get_table_names())
        )
        with sessionmaker(bind=engine)() as db:
            health = build_health(db, settings)
        self.assertEqual(health.schema_revision, "20251019100000")
        self.assertEqual(health.active_sessions, 0)


class TestCreateUserScript(ApiTestCase):
    def _run(self, *argv: str) -> int:
        with patch.object(create_user, "SessionLocal", self.Session), patch.object(
            sys, "argv", ["create_user", *argv]
        ):
            return create_user.main()

    def test_creates_admin(self) -> None:
        self.assertEqual(self._run("root", "root@example.com", "secret123", "admin"), 0)
        with self.Session() as db:
            user = db.query(User).filter(User.username == "root").one()
            self.assertEqual(user.role, "admin")
        self.assertEqual(self.login(self.client, "root").status_code, 200)

    def test_rejects_invalid_input(self) -> None:
        self.assertEqual(self._run("root", "not-an-email", "secret123"), 1)
        self.assertEqual(self.count(User), 0)

    def test_rejects_duplicate(self) -> None:
        self.make_user("root")
        self.assertEqual(self._run("root", "other@example.com", "secret123"), 1)
        self.assertEqual(self.count(User), 1)


if __name__ == "__main__":
    unittest.main()
