"""
Daily log submission service - validates and writes one employee-day of logs
"""
import logging
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from tasklog.core.config import settings
from tasklog.core.constants import PERM_LOG_TASKS
from tasklog.core.errors import AuthorizationError
from tasklog.models.audit_log import AuditAction
from tasklog.models.employee import Employee
from tasklog.models.task_log import TaskLog, LogStatus, LeaveKind
from tasklog.repositories.base import TaskLogStore, LogFilters
from tasklog.services import registry
from tasklog.services import submission_rules as rules
from tasklog.services.audit_service import build_audit_entry
from tasklog.utils.datetime_utils import now_utc, today_local
from tasklog.utils.roles import has_permission

logger = logging.getLogger(__name__)


def _require_logger(employee: Employee) -> None:
    if not employee.active:
        raise AuthorizationError("Inactive employees cannot submit logs")
    if not has_permission(employee, PERM_LOG_TASKS):
        raise AuthorizationError("You do not have permission to log tasks")


def _window_days(window_days: Optional[int]) -> int:
    return settings.SUBMISSION_WINDOW_DAYS if window_days is None else window_days


def _rest_weekdays(rest_weekdays: Optional[Sequence[int]]) -> Sequence[int]:
    return settings.get_rest_weekdays() if rest_weekdays is None else rest_weekdays


def submit_daily_logs(
    store: TaskLogStore,
    employee: Employee,
    log_date: date,
    decisions: Mapping[str, LogStatus],
    extra_tasks: Iterable[str] = (),
    today: Optional[date] = None,
    rest_weekdays: Optional[Sequence[int]] = None,
    window_days: Optional[int] = None,
) -> List[TaskLog]:
    """
    Submit the employee's task decisions and extra work for one date

    Every check runs before anything is written. On a rest day routine
    decisions are ignored and only extra work is recorded.

    Args:
        store: Task log store
        employee: The submitting (authenticated) employee
        log_date: Calendar date being reported
        decisions: Status per assigned task id
        extra_tasks: Descriptions of unplanned work done that day
        today: Current local date (defaults to today in APP_TIMEZONE)
        rest_weekdays: Weekly rest days (defaults to REST_WEEKDAYS)
        window_days: How far back a date may be (defaults to SUBMISSION_WINDOW_DAYS)

    Returns:
        The written logs, Daily logs first in task order, then Extra logs

    Raises:
        AuthorizationError: If the employee may not log tasks
        ValidationError: If the date, decisions or content are not acceptable
        DuplicateSubmissionError: If the date was already logged
        PersistenceError: If the store failed; nothing was written
    """
    _require_logger(employee)
    today = today or today_local()

    rules.check_date_window(log_date, today, _window_days(window_days))
    rules.check_not_duplicate(store.has_logs_for(employee.id, log_date), log_date)

    extras = rules.clean_extra_descriptions(extra_tasks)
    decisions = rules.decisions_by_task(decisions)

    if rules.is_rest_day(log_date, _rest_weekdays(rest_weekdays)):
        if decisions:
            logger.info(
                "Rest day submission: ignoring %s routine decisions employee_id=%s log_date=%s",
                len(decisions), employee.id, log_date,
            )
        assignments = []
        decisions = {}
    else:
        assignments = registry.assignments_for_employee(store, employee.id)
        rules.check_decisions(assignments, decisions)

    rules.check_not_empty(len(assignments), len(extras))

    descriptions = {
        a.task_id: registry.resolve_task_description(store, a.task_id)
        for a in assignments
    }
    now = now_utc()
    logs = rules.build_daily_logs(employee.id, log_date, assignments, decisions, descriptions, now)
    logs += rules.build_extra_logs(employee.id, log_date, extras, now)

    audit = build_audit_entry(
        employee,
        AuditAction.SUBMIT,
        f"task_logs:{employee.id}:{log_date.isoformat()}",
        details=f"Submitted {len(logs)} logs for {log_date.isoformat()}",
        meta={"log_ids": [log.id for log in logs]},
    )
    saved = store.add_submission(employee.id, log_date, logs, audit)

    logger.info(
        "task logs submitted: employee_id=%s log_date=%s daily=%s extra=%s",
        employee.id, log_date, len(assignments), len(extras),
    )
    return saved


def submit_leave(
    store: TaskLogStore,
    employee: Employee,
    log_date: date,
    kind: LeaveKind,
    today: Optional[date] = None,
    window_days: Optional[int] = None,
) -> TaskLog:
    """
    Mark the employee as absent for a date

    The date window and duplicate checks apply; the rest-day rule does not.
    """
    _require_logger(employee)
    today = today or today_local()

    rules.check_date_window(log_date, today, _window_days(window_days))
    rules.check_not_duplicate(store.has_logs_for(employee.id, log_date), log_date)

    log = rules.build_leave_log(employee.id, log_date, kind, now_utc())
    audit = build_audit_entry(
        employee,
        AuditAction.SUBMIT,
        f"task_log:{log.id}",
        details=f"Leave ({kind.value}) for {log_date.isoformat()}",
    )
    saved = store.add_submission(employee.id, log_date, [log], audit)[0]

    logger.info("leave logged: employee_id=%s log_date=%s kind=%s", employee.id, log_date, kind.value)
    return saved


def get_checklist(
    store: TaskLogStore,
    employee: Employee,
    log_date: date,
    rest_weekdays: Optional[Sequence[int]] = None,
) -> Dict:
    """What the employee is expected to report for a date"""
    rest_day = rules.is_rest_day(log_date, _rest_weekdays(rest_weekdays))
    items = []
    for assignment in registry.assignments_for_employee(store, employee.id):
        task = store.get_task(assignment.task_id)
        items.append({
            "task_id": assignment.task_id,
            "description": task.description if task is not None else "",
            "category": task.category if task is not None else None,
        })
    return {
        "log_date": log_date,
        "is_rest_day": rest_day,
        "already_submitted": store.has_logs_for(employee.id, log_date),
        "tasks": [] if rest_day else items,
    }


def list_my_logs(
    store: TaskLogStore,
    employee: Employee,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> List[TaskLog]:
    return store.list_logs(LogFilters(employee_id=employee.id, date_from=date_from, date_to=date_to))
