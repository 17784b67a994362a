"""Schema for the service health endpoint."""

from typing import Literal

from pydantic import Field

from bugsage.schemas.common import Envelope


class HealthResponse(Envelope):
    status: Literal["ok", "degraded"] = "ok"
    environment: str
    database: Literal["connected", "disconnected"]
    schema_revision: str | None = Field(
        default=None,
        description="Alembic revision applied to the database, if any",
    )
    active_sessions: int | None = Field(
        default=None,
        description="Unexpired server-side sessions",
    )
