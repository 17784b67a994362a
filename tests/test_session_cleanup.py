"""Unit and integration tests for expired-session cleanup: run_session_cleanup."""

import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

from bugsage import session_cleanup
from bugsage.core.security import generate_session_token, hash_session_token
from bugsage.models import AuthSession
from bugsage.services.session_cleanup import run_session_cleanup
from tests.support import ApiTestCase


class TestCleanupNothingExpired(unittest.TestCase):
    """When no session has expired, run_session_cleanup returns 0 and still commits."""

    def test_returns_zero(self) -> None:
        session = MagicMock()
        session.query.return_value.filter.return_value.delete.return_value = 0
        self.assertEqual(run_session_cleanup(session), 0)
        session.commit.assert_called_once()


class TestCleanupDeletesExpired(unittest.TestCase):
    """When sessions have expired, run_session_cleanup deletes them and returns the count."""

    def test_deletes_expired(self) -> None:
        session = MagicMock()
        session.query.return_value.filter.return_value.delete.return_value = 3
        self.assertEqual(run_session_cleanup(session), 3)
        session.query.assert_called_once_with(AuthSession)
        session.add.assert_not_called()
        session.commit.assert_called_once()


class TestCleanupCli(unittest.TestCase):
    """The cron entrypoint maps success to 0 and failure to 1, always closing the session."""

    def test_success_exit_code(self) -> None:
        db = MagicMock()
        with patch.object(session_cleanup, "SessionLocal", return_value=db), patch.object(
            session_cleanup, "run_session_cleanup", return_value=2
        ):
            self.assertEqual(session_cleanup.main(), 0)
        db.close.assert_called_once()

    def test_failure_exit_code(self) -> None:
        db = MagicMock()
        with patch.object(session_cleanup, "SessionLocal", return_value=db), patch.object(
            session_cleanup, "run_session_cleanup", side_effect=RuntimeError("db down")
        ):
            with self.assertLogs("bugsage.session_cleanup", level="ERROR"):
                self.assertEqual(session_cleanup.main(), 1)
        db.close.assert_called_once()


class TestCleanupIntegration(ApiTestCase):
    """Real SQLite database: expired rows go, live rows and their cookies keep working."""

    def _add_session(self, user_id: int, expires_at: datetime) -> None:
        with self.Session() as db:
            db.add(
                AuthSession(
                    token_hash=hash_session_token(generate_session_token()),
                    user_id=user_id,
                    username="alice",
                    role="user",
                    email="alice@example.com",
                    expires_at=expires_at,
                )
            )
            db.commit()

    def test_only_expired_sessions_are_deleted(self) -> None:
        user_id = self.make_user("alice")
        now = datetime.now(timezone.utc)
        self._add_session(user_id, now - timedelta(hours=2))
        self._add_session(user_id, now - timedelta(minutes=1))
        live_client = self.client_as("alice")
        self.assertEqual(self.count(AuthSession), 3)

        with self.Session() as db:
            self.assertEqual(run_session_cleanup(db), 2)
        self.assertEqual(self.count(AuthSession), 1)
        self.assertEqual(live_client.get("/api/auth").status_code, 200)

        with self.Session() as db:
            self.assertEqual(run_session_cleanup(db), 0)


if __name__ == "__main__":
    unittest.main()
