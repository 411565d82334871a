"""
Constants shared across the task log backend
"""

SERVICE_NAME = "tasklog-backend"

# Sentinel task ids for logs that are not tied to an assignment
EXTRA_TASK_ID = "EXTRA"
LEAVE_TASK_ID = "LEAVE"

# Python weekday numbers (Monday=0): Thursday and Friday are the weekly rest days
THURSDAY = 3
FRIDAY = 4
DEFAULT_REST_WEEKDAYS = (THURSDAY, FRIDAY)

# How many days back an employee may still submit a missed day
DEFAULT_SUBMISSION_WINDOW_DAYS = 3

# Permission keys
PERM_VIEW_DASHBOARD = "view_dashboard"
PERM_LOG_TASKS = "log_tasks"
PERM_VIEW_REPORTS = "view_reports"
PERM_MANAGE_SYSTEM = "manage_system"

ALL_PERMISSIONS = (
    PERM_VIEW_DASHBOARD,
    PERM_LOG_TASKS,
    PERM_VIEW_REPORTS,
    PERM_MANAGE_SYSTEM,
)

BACKUP_FORMAT_VERSION = "1.0"
