"""Client views over the BugSage HTTP API."""

from bugsage.client.api import ApiError, BugSageClient
from bugsage.client.views import (
    AdminView,
    BugListView,
    CardNotFound,
    DashboardView,
    KanbanBoard,
    ReportsView,
    render_table,
)

__all__ = [
    "AdminView",
    "ApiError",
    "BugListView",
    "BugSageClient",
    "CardNotFound",
    "DashboardView",
    "KanbanBoard",
    "ReportsView",
    "render_table",
]
