"""API routes."""

from fastapi import APIRouter

from bugsage.api.v1 import auth, bugs, dashboard, health, projects, reports, users

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(bugs.router, prefix="/bugs", tags=["bugs"])
router.include_router(projects.router, prefix="/projects", tags=["projects"])
router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
router.include_router(reports.router, prefix="/reports", tags=["reports"])
router.include_router(users.router, prefix="/users", tags=["users"])
