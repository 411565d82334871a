"""
API router configuration
"""
from fastapi import APIRouter
from tasklog.api.v1 import (
    health,
    version,
    auth,
    employees,
    tasks,
    assignments,
    task_logs,
    reports,
    exchange,
    audit_logs,
    admin,
    announcements,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(version.router, tags=["version"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(employees.router, prefix="/employees", tags=["employees"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
api_router.include_router(assignments.router, prefix="/assignments", tags=["assignments"])
api_router.include_router(task_logs.router, prefix="/task-logs", tags=["task-logs"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
api_router.include_router(exchange.router, tags=["exchange"])
api_router.include_router(audit_logs.router, prefix="/audit-logs", tags=["audit-logs"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
api_router.include_router(announcements.router, prefix="/announcements", tags=["announcements"])
