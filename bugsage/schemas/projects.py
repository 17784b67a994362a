"""Request/response schemas for project endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from bugsage.schemas.common import Envelope

NAME_MAX_LENGTH = 100


class ProjectOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str = ""
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    bug_count: int = 0


class ProjectListResponse(Envelope):
    projects: list[ProjectOut]


class ProjectCreatedResponse(Envelope):
    project_id: int


class ProjectCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(default="", max_length=NAME_MAX_LENGTH)
    description: str = ""
    status: str | None = None


class ProjectUpdate(BaseModel):
    """PUT /projects body; empty or missing fields are left unchanged."""

    model_config = ConfigDict(str_strip_whitespace=True)

    id: int = 0
    name: str | None = Field(default=None, max_length=NAME_MAX_LENGTH)
    description: str | None = None
    status: str | None = None
