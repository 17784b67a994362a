"""Shared fixtures for API tests: a fresh in-memory database per test and logged-in clients."""

import unittest
from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from bugsage.core.database import get_db
from bugsage.core.security import hash_password
from bugsage.main import app
from bugsage.models import Base, Bug, Project, User

DEFAULT_PASSWORD = "secret123"

# Fixed base so created_at ordering in tests never depends on the clock resolution.
BASE_TIME = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


class ApiTestCase(unittest.TestCase):
    """Each test gets its own empty schema; requests and helpers share one SQLite connection."""

    def setUp(self) -> None:
        self.engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(bind=self.engine)
        self.Session = sessionmaker(bind=self.engine, autoflush=False, autocommit=False)

        def override_get_db():
            db = self.Session()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self._clients: list[TestClient] = []
        self.client = self.new_client()

    def tearDown(self) -> None:
        for client in self._clients:
            client.close()
        app.dependency_overrides.clear()
        self.engine.dispose()

    def new_client(self) -> TestClient:
        client = TestClient(app)
        self._clients.append(client)
        return client

    # data helpers (each commits on its own short-lived session)

    def make_user(
        self,
        username: str,
        role: str = "user",
        status: str = "active",
        password: str = DEFAULT_PASSWORD,
        email: str | None = None,
    ) -> int:
        with self.Session() as db:
            user = User(
                username=username,
                email=email or f"{username}@example.com",
                password_hash=hash_password(password),
                role=role,
                status=status,
            )
            db.add(user)
            db.commit()
            return user.id

    def make_project(self, name: str = "Website", status: str = "active", minutes: int = 0) -> int:
        with self.Session() as db:
            project = Project(
                name=name,
                description=f"{name} project",
                status=status,
                created_at=BASE_TIME + timedelta(minutes=minutes),
            )
            db.add(project)
            db.commit()
            return project.id

    def make_bug(
        self,
        project_id: int,
        reported_by: int,
        title: str = "Crash on save",
        minutes: int = 0,
        **fields,
    ) -> int:
        values = {"description": "Steps to reproduce", "priority": "medium", "status": "open"}
        values.update(fields)
        with self.Session() as db:
            bug = Bug(
                title=title,
                project_id=project_id,
                reported_by=reported_by,
                created_at=BASE_TIME + timedelta(minutes=minutes),
                **values,
            )
            db.add(bug)
            db.commit()
            return bug.id

    def fetch(self, model: type, row_id: int):
        with self.Session() as db:
            row = db.get(model, row_id)
            if row is not None:
                db.expunge(row)
            return row

    def count(self, model: type) -> int:
        with self.Session() as db:
            return db.query(model).count()

    # session helpers

    def login(self, client: TestClient, username: str, password: str = DEFAULT_PASSWORD):
        return client.post(
            "/api/auth",
            json={"action": "login", "username": username, "password": password},
        )

    def client_as(self, username: str, password: str = DEFAULT_PASSWORD) -> TestClient:
        """A new client holding a session for username."""
        client = self.new_client()
        resp = self.login(client, username, password)
        self.assertEqual(resp.status_code, 200, resp.text)
        return client

    def assertFailure(self, resp, status_code: int, message: str | None = None) -> None:
        self.assertEqual(resp.status_code, status_code, resp.text)
        body = resp.json()
        self.assertIs(body["success"], False)
        if message is not None:
            self.assertEqual(body["message"], message)
