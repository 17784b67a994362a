"""Pydantic request/response schemas."""

from bugsage.schemas.auth import AuthRequest, AuthResponse, SessionContext, UserOut
from bugsage.schemas.bugs import (
    BugCreate,
    BugListResponse,
    BugOut,
    BugResponse,
    BugStatusUpdate,
    BugSummary,
    BugUpdate,
    DuplicateCheckRequest,
    DuplicateCheckResponse,
    Pagination,
)
from bugsage.schemas.common import Envelope, ErrorEnvelope, IdRequest
from bugsage.schemas.dashboard import DashboardResponse
from bugsage.schemas.health import HealthResponse
from bugsage.schemas.projects import (
    ProjectCreate,
    ProjectCreatedResponse,
    ProjectListResponse,
    ProjectOut,
    ProjectUpdate,
)
from bugsage.schemas.reports import ReportResponse
from bugsage.schemas.users import UserCreate, UserListItem, UsersListResponse, UserUpdate

__all__ = [
    "AuthRequest",
    "AuthResponse",
    "BugCreate",
    "BugListResponse",
    "BugOut",
    "BugResponse",
    "BugStatusUpdate",
    "BugSummary",
    "BugUpdate",
    "DashboardResponse",
    "DuplicateCheckRequest",
    "DuplicateCheckResponse",
    "Envelope",
    "ErrorEnvelope",
    "HealthResponse",
    "IdRequest",
    "Pagination",
    "ProjectCreate",
    "ProjectCreatedResponse",
    "ProjectListResponse",
    "ProjectOut",
    "ProjectUpdate",
    "ReportResponse",
    "SessionContext",
    "UserCreate",
    "UserListItem",
    "UserOut",
    "UserUpdate",
    "UsersListResponse",
]
