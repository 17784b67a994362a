"""Alembic environment for BugSage: URL from Settings, metadata from bugsage.models."""

import logging

from alembic import context
from sqlalchemy import create_engine
from sqlalchemy.pool import NullPool

from bugsage.core.config import settings
from bugsage.models import Base

# alembic.ini carries no logging sections; log like the other entry points.
logging.basicConfig(level=settings.LOG_LEVEL, format="%(levelname)s %(name)s %(message)s")

# Importing bugsage.models registers users, projects, bugs and sessions on Base.metadata.
target_metadata = Base.metadata


def _configure(**kwargs) -> None:
    context.configure(target_metadata=target_metadata, compare_type=True, **kwargs)
    with context.begin_transaction():
        context.run_migrations()


if context.is_offline_mode():
    _configure(
        url=settings.DATABASE_URL,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
else:
    with create_engine(settings.DATABASE_URL, poolclass=NullPool).connect() as connection:
        # SQLite cannot ALTER constraints in place.
        _configure(connection=connection, render_as_batch=connection.dialect.name == "sqlite")
