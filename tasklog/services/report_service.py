"""
Report service - dashboard and performance analytics over task logs

The calculations are plain functions over lists of logs; the `build_*`
functions at the bottom gather their inputs from a TaskLogStore.
"""
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from tasklog.core.config import settings
from tasklog.core.constants import LEAVE_TASK_ID, EXTRA_TASK_ID
from tasklog.models.employee import Employee
from tasklog.models.task_log import TaskLog, TaskType, LogStatus, ApprovalStatus
from tasklog.repositories.base import TaskLogStore, LogFilters
from tasklog.services.registry import task_sort_key
from tasklog.utils.datetime_utils import today_local

# Logs that count towards analytics: approved or still in the first review
ANALYTICS_STATUSES = (ApprovalStatus.APPROVED, ApprovalStatus.PENDING_APPROVAL)

RECENT_ACTIVITY_LIMIT = 8


def _percent(part: int, whole: int) -> int:
    return round(part / whole * 100) if whole > 0 else 0


def _days(start: date, end: date) -> Iterable[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def _is_routine(log: TaskLog) -> bool:
    return log.task_type == TaskType.DAILY and log.task_id not in (LEAVE_TASK_ID, EXTRA_TASK_ID)


def dashboard_stats(
    logs: Sequence[TaskLog],
    date_from: date,
    date_to: date,
    active_employee_ids: Iterable[str] = (),
    today: Optional[date] = None,
    employee_names: Optional[Dict[str, str]] = None,
) -> Dict:
    """
    Headline numbers over approved logs in [date_from, date_to]

    Leave logs are excluded from the totals. `missing_today` counts active
    employees with no log at all for today.
    """
    today = today or today_local()
    employee_names = employee_names or {}

    approved = [
        log for log in logs
        if log.approval_status == ApprovalStatus.APPROVED and date_from <= log.log_date <= date_to
    ]
    countable = [log for log in approved if log.status != LogStatus.LEAVE]
    completed = sum(1 for log in countable if log.status == LogStatus.COMPLETED)

    per_day = defaultdict(lambda: {"completed": 0, "total": 0})
    for log in countable:
        per_day[log.log_date]["total"] += 1
        if log.status == LogStatus.COMPLETED:
            per_day[log.log_date]["completed"] += 1
    chart = [
        {"date": day, "completed": per_day[day]["completed"], "total": per_day[day]["total"]}
        for day in _days(date_from, date_to)
    ]

    logged_today = {log.employee_id for log in logs if log.log_date == today}
    missing_today = sorted(
        (emp_id for emp_id in set(active_employee_ids) if emp_id not in logged_today),
        key=task_sort_key,
    )

    recent = sorted(approved, key=lambda log: (log.log_date, log.created_at is not None, log.created_at), reverse=True)
    recent_activity = [
        {
            "id": log.id,
            "log_date": log.log_date,
            "employee_id": log.employee_id,
            "employee_name": employee_names.get(log.employee_id, log.employee_id),
            "description": log.description,
            "status": log.status,
        }
        for log in recent[:RECENT_ACTIVITY_LIMIT]
    ]

    return {
        "date_from": date_from,
        "date_to": date_to,
        "total": len(countable),
        "completed": completed,
        "completion_rate": _percent(completed, len(countable)),
        "pending_approval_count": sum(1 for log in logs if log.approval_status == ApprovalStatus.PENDING_APPROVAL),
        "commitment_pending_count": sum(1 for log in logs if log.approval_status == ApprovalStatus.COMMITMENT_PENDING),
        "missing_today_count": len(missing_today),
        "missing_today": missing_today,
        "chart": chart,
        "recent_activity": recent_activity,
    }


def adherence_stats(
    logs: Sequence[TaskLog],
    employee_id: str,
    date_from: date,
    date_to: date,
    rest_weekdays: Iterable[int],
    today: Optional[date] = None,
) -> Dict:
    """
    Attendance for one employee over a date range

    Days after today are not counted. Each counted day is a rest day, a
    leave day, a registered day (anything logged) or an unregistered work day.
    """
    today = today or today_local()
    rest = set(rest_weekdays)
    end = min(date_to, today)

    by_day = defaultdict(list)
    for log in logs:
        if log.employee_id == employee_id and log.approval_status in ANALYTICS_STATUSES:
            by_day[log.log_date].append(log)

    gross = rest_days = leave_days = registered = 0
    for day in _days(date_from, end):
        gross += 1
        day_logs = by_day.get(day, [])
        if day.weekday() in rest:
            rest_days += 1
        elif any(log.status == LogStatus.LEAVE for log in day_logs):
            leave_days += 1
        elif day_logs:
            registered += 1

    net = max(0, gross - rest_days - leave_days)
    return {
        "employee_id": employee_id,
        "gross_days": gross,
        "rest_days": rest_days,
        "leave_days": leave_days,
        "registration_days": registered,
        "net_work_days": net,
        "attendance_rate": _percent(registered, net),
    }


def task_breakdown(
    logs: Sequence[TaskLog],
    employee_id: str,
    assigned_tasks: Sequence[Dict],
    net_work_days: int,
    date_from: date,
    date_to: date,
) -> List[Dict]:
    """
    Per assigned task counts, best rate first

    The rate is completed days over net work days minus the days the task
    did not apply.
    """
    counts = defaultdict(lambda: {"completed": 0, "pending": 0, "not_applicable": 0})
    for log in logs:
        if (
            log.employee_id == employee_id
            and log.approval_status in ANALYTICS_STATUSES
            and date_from <= log.log_date <= date_to
            and _is_routine(log)
        ):
            bucket = counts[log.task_id]
            if log.status == LogStatus.COMPLETED:
                bucket["completed"] += 1
            elif log.status == LogStatus.PENDING:
                bucket["pending"] += 1
            elif log.status == LogStatus.NOT_APPLICABLE:
                bucket["not_applicable"] += 1

    rows = []
    for task in assigned_tasks:
        bucket = counts[task["task_id"]]
        effective = max(0, net_work_days - bucket["not_applicable"])
        rows.append({
            "task_id": task["task_id"],
            "description": task["description"],
            "category": task.get("category"),
            "completed": bucket["completed"],
            "pending": bucket["pending"],
            "not_applicable": bucket["not_applicable"],
            "rate": _percent(bucket["completed"], effective),
        })
    rows.sort(key=lambda row: row["rate"], reverse=True)
    return rows


def comparison(
    logs: Sequence[TaskLog],
    employees: Sequence[Employee],
    assignment_counts: Dict[str, int],
    date_from: date,
    date_to: date,
    rest_weekdays: Iterable[int],
    today: Optional[date] = None,
) -> List[Dict]:
    """
    Efficiency ranking across employees

    Expected work is assigned routine tasks times net work days; tasks marked
    not applicable are taken out of the expectation.
    """
    rest_weekdays = tuple(rest_weekdays)
    rows = []
    for employee in employees:
        stats = adherence_stats(logs, employee.id, date_from, date_to, rest_weekdays, today)
        own = [
            log for log in logs
            if log.employee_id == employee.id
            and log.approval_status in ANALYTICS_STATUSES
            and date_from <= log.log_date <= date_to
            and _is_routine(log)
        ]
        completed = sum(1 for log in own if log.status == LogStatus.COMPLETED)
        pending = sum(1 for log in own if log.status == LogStatus.PENDING)
        not_applicable = sum(1 for log in own if log.status == LogStatus.NOT_APPLICABLE)

        expected = assignment_counts.get(employee.id, 0) * stats["net_work_days"]
        net_expected = max(0, expected - not_applicable)
        rate = round(completed / net_expected * 100, 1) if net_expected > 0 else 0.0

        rows.append({
            "employee_id": employee.id,
            "name": employee.name,
            "net_work_days": stats["net_work_days"],
            "registration_days": stats["registration_days"],
            "completed": completed,
            "pending": pending,
            "not_applicable": not_applicable,
            "rate": rate,
        })

    rows.sort(key=lambda row: row["rate"], reverse=True)
    for rank, row in enumerate(rows, start=1):
        row["rank"] = rank
    return rows


def _rest_weekdays(rest_weekdays: Optional[Sequence[int]]) -> Sequence[int]:
    return settings.get_rest_weekdays() if rest_weekdays is None else rest_weekdays


def build_dashboard(
    store: TaskLogStore,
    date_from: date,
    date_to: date,
    employee_id: Optional[str] = None,
    today: Optional[date] = None,
) -> Dict:
    """Dashboard for everyone (reviewers) or for a single employee"""
    logs = store.list_logs(LogFilters(employee_id=employee_id))
    employees = store.list_employees()
    active_ids = [e.id for e in employees if e.active]
    if employee_id is not None:
        active_ids = [emp_id for emp_id in active_ids if emp_id == employee_id]
    names = {e.id: e.name for e in employees}
    return dashboard_stats(logs, date_from, date_to, active_ids, today, names)


def build_employee_report(
    store: TaskLogStore,
    employee_id: str,
    date_from: date,
    date_to: date,
    today: Optional[date] = None,
    rest_weekdays: Optional[Sequence[int]] = None,
) -> Dict:
    """Adherence plus per-task breakdown for one employee"""
    logs = store.list_logs(LogFilters(employee_id=employee_id, date_from=date_from, date_to=date_to))
    adherence = adherence_stats(logs, employee_id, date_from, date_to, _rest_weekdays(rest_weekdays), today)

    assigned = []
    for assignment in sorted(store.list_assignments(employee_id), key=lambda a: task_sort_key(a.task_id)):
        task = store.get_task(assignment.task_id)
        if task is None:
            continue
        assigned.append({"task_id": task.id, "description": task.description, "category": task.category})

    return {
        "adherence": adherence,
        "tasks": task_breakdown(logs, employee_id, assigned, adherence["net_work_days"], date_from, date_to),
    }


def build_comparison(
    store: TaskLogStore,
    date_from: date,
    date_to: date,
    employee_ids: Optional[Sequence[str]] = None,
    today: Optional[date] = None,
    rest_weekdays: Optional[Sequence[int]] = None,
) -> List[Dict]:
    employees = store.list_employees()
    if employee_ids:
        wanted = set(employee_ids)
        employees = [e for e in employees if e.id in wanted]
    logs = store.list_logs(LogFilters(date_from=date_from, date_to=date_to))
    counts: Dict[str, int] = defaultdict(int)
    for assignment in store.list_assignments():
        counts[assignment.employee_id] += 1
    return comparison(logs, employees, counts, date_from, date_to, _rest_weekdays(rest_weekdays), today)
