"""Schemas for the reports endpoint (summary cards, charts, tables)."""

from typing import Literal

from pydantic import BaseModel, Field

from bugsage.schemas.common import Envelope

ReportRange = Literal["7d", "30d", "90d", "1y", "all"]
PerformanceClass = Literal["high", "medium", "low"]


class ReportSummary(BaseModel):
    total_bugs: int = 0
    resolved_bugs: int = 0
    critical_bugs: int = 0
    avg_resolution_time: float = Field(default=0.0, description="Days from report to close, 1 decimal")


class TrendSeries(BaseModel):
    labels: list[str] = []
    reported: list[int] = []
    resolved: list[int] = []


class LabelledSeries(BaseModel):
    labels: list[str] = []
    values: list[int] = []


class ReportCharts(BaseModel):
    trend: TrendSeries
    status: LabelledSeries
    priority: LabelledSeries


class ProjectStats(BaseModel):
    id: int
    name: str
    total_bugs: int
    open_bugs: int
    in_progress_bugs: int
    resolved_bugs: int
    resolution_rate: float


class TeamMemberStats(BaseModel):
    id: int
    name: str
    assigned_bugs: int
    resolved_bugs: int
    avg_resolution_time: float
    performance_score: float
    performance_class: PerformanceClass


class ReportTables(BaseModel):
    projects: list[ProjectStats]
    team: list[TeamMemberStats]


class ReportResponse(Envelope):
    range: ReportRange
    summary: ReportSummary
    charts: ReportCharts
    tables: ReportTables
