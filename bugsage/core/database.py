"""Database engine, session factory and the partial-update helper."""

import sqlite3
from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, event, func, update
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from bugsage.core.config import settings

_engine_kwargs: dict[str, Any] = {"pool_pre_ping": True, "echo": settings.DEBUG}
if settings.DATABASE_URL.startswith("sqlite"):
    _engine_kwargs["connect_args"] = {"check_same_thread": False}

engine = create_engine(settings.DATABASE_URL, **_engine_kwargs)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    """SQLite ignores foreign keys unless asked per connection."""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def get_db() -> Generator[Session, None, None]:
    """Dependency that yields a DB session and closes it when done."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def apply_partial_update(
    db: Session,
    model: type,
    row_id: int,
    values: dict[str, Any],
) -> int:
    """
    Update only the given columns of one row and refresh updated_at.

    Column names come from typed update schemas, never from raw request keys;
    values are always bound parameters. Returns the number of affected rows.
    Does not commit.
    """
    stmt = (
        update(model)
        .where(model.id == row_id)
        .values(**values, updated_at=func.now())
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    return result.rowcount
