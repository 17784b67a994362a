"""Request/response schemas for bug endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from bugsage.schemas.common import Envelope

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 10_000


class BugOut(BaseModel):
    """A bug row joined with display names."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    project_id: int
    priority: str
    status: str
    assigned_to: int | None = None
    reported_by: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
    project_name: str | None = None
    assigned_to_name: str | None = None
    reported_by_name: str | None = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class BugListResponse(Envelope):
    bugs: list[BugOut]
    pagination: Pagination


class BugResponse(Envelope):
    bug: BugOut


class BugCreate(BaseModel):
    """POST /bugs body. Empty strings and zero ids count as missing."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(default="", max_length=TITLE_MAX_LENGTH)
    description: str = Field(default="", max_length=DESCRIPTION_MAX_LENGTH)
    project_id: int = 0
    priority: str | None = None
    assigned_to: int | None = None


class BugUpdate(BaseModel):
    """
    PUT /bugs body. Only present, non-empty fields are applied; assigned_to is
    applied whenever the key is present so null (or 0) unassigns.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    id: int = 0
    title: str | None = Field(default=None, max_length=TITLE_MAX_LENGTH)
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    priority: str | None = None
    status: str | None = None
    assigned_to: int | None = None


class BugStatusUpdate(BaseModel):
    """POST /bugs/status body (Kanban drag-and-drop)."""

    model_config = ConfigDict(str_strip_whitespace=True)

    bug_id: int = 0
    status: str = ""


class BugSummary(BaseModel):
    """Short bug view for the possible-duplicates list."""

    id: int
    title: str
    priority: str
    status: str


class DuplicateCheckRequest(BaseModel):
    """POST /bugs/check-duplicates body."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(default="", max_length=TITLE_MAX_LENGTH)


class DuplicateCheckResponse(Envelope):
    duplicates: list[BugSummary]
