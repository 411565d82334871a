"""
Database models
"""
from tasklog.models.employee import Employee, Role
from tasklog.models.task import Task, Assignment
from tasklog.models.task_log import (
    TaskLog,
    TaskLogAction,
    DailySubmission,
    TaskType,
    LogStatus,
    ApprovalStatus,
    LogAction,
    LeaveKind,
    LEAVE_LABELS,
    REVIEWABLE_STATUSES,
)
from tasklog.models.audit_log import SystemAuditLog, AuditAction
from tasklog.models.announcement import (
    Announcement,
    AnnouncementReply,
    AnnouncementPriority,
    AnnouncementTarget,
)

__all__ = [
    "Employee",
    "Role",
    "Task",
    "Assignment",
    "TaskLog",
    "TaskLogAction",
    "DailySubmission",
    "TaskType",
    "LogStatus",
    "ApprovalStatus",
    "LogAction",
    "LeaveKind",
    "LEAVE_LABELS",
    "REVIEWABLE_STATUSES",
    "SystemAuditLog",
    "AuditAction",
    "Announcement",
    "AnnouncementReply",
    "AnnouncementPriority",
    "AnnouncementTarget",
]
