"""Schemas for the dashboard aggregate endpoint."""

from pydantic import BaseModel

from bugsage.schemas.bugs import BugOut
from bugsage.schemas.common import Envelope


class DashboardStats(BaseModel):
    total_bugs: int = 0
    open_bugs: int = 0
    in_progress_bugs: int = 0
    resolved_bugs: int = 0
    critical_bugs: int = 0
    total_projects: int = 0


class StatusCount(BaseModel):
    status: str
    count: int


class PriorityCount(BaseModel):
    priority: str
    count: int


class DashboardCharts(BaseModel):
    status_distribution: list[StatusCount]
    priority_distribution: list[PriorityCount]


class DashboardResponse(Envelope):
    stats: DashboardStats
    recent_bugs: list[BugOut]
    my_bugs: list[BugOut]
    charts: DashboardCharts
