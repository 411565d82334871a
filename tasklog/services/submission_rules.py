"""
Daily log submission rules

Pure functions: they validate a submission and build the log rows from
explicit inputs, and never read or write storage.
"""
import uuid
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Mapping, Sequence

from tasklog.core.constants import EXTRA_TASK_ID, LEAVE_TASK_ID
from tasklog.core.errors import ValidationError, DuplicateSubmissionError
from tasklog.models.task import Assignment
from tasklog.models.task_log import (
    TaskLog,
    TaskType,
    LogStatus,
    ApprovalStatus,
    LeaveKind,
    LEAVE_LABELS,
)

# What an employee may report for a routine task
DECISION_STATUSES = frozenset({
    LogStatus.COMPLETED,
    LogStatus.PENDING,
    LogStatus.NOT_APPLICABLE,
})


def daily_log_id(employee_id: str, task_id: str, log_date: date) -> str:
    """Deterministic id of the Daily log for one assignment on one date"""
    return f"LOG-{employee_id}-{task_id}-{log_date.isoformat()}"


def extra_log_id() -> str:
    return f"EXTRA-{uuid.uuid4().hex}"


def leave_log_id() -> str:
    return f"LEAVE-{uuid.uuid4().hex}"


def check_date_window(log_date: date, today: date, window_days: int) -> None:
    """
    The date must lie within [today - window_days, today]

    Raises:
        ValidationError: For future dates or dates older than the window
    """
    if log_date > today:
        raise ValidationError(f"Cannot submit logs for a future date ({log_date.isoformat()})")
    earliest = today - timedelta(days=window_days)
    if log_date < earliest:
        raise ValidationError(
            f"Logs can only be submitted for the last {window_days} days "
            f"(earliest allowed date is {earliest.isoformat()})"
        )


def check_not_duplicate(already_logged: bool, log_date: date) -> None:
    if already_logged:
        raise DuplicateSubmissionError(f"Logs for {log_date.isoformat()} have already been submitted")


def is_rest_day(log_date: date, rest_weekdays: Iterable[int]) -> bool:
    """True when the date falls on a weekly rest day"""
    return log_date.weekday() in set(rest_weekdays)


def clean_extra_descriptions(extra_tasks: Iterable[str]) -> List[str]:
    """Blank extra entries are dropped"""
    return [text.strip() for text in extra_tasks if text and text.strip()]


def check_decisions(
    assignments: Sequence[Assignment],
    decisions: Mapping[str, LogStatus],
) -> None:
    """
    Every assignment needs a decision, and decisions may only name assigned tasks

    Raises:
        ValidationError: On a missing, unknown or unsupported decision
    """
    assigned = [a.task_id for a in assignments]
    assigned_set = set(assigned)

    unknown = sorted(set(decisions) - assigned_set)
    if unknown:
        raise ValidationError(f"Decisions given for tasks that are not assigned: {', '.join(unknown)}")

    missing = [task_id for task_id in assigned if task_id not in decisions]
    if missing:
        raise ValidationError(f"A decision is required for every assigned task. Missing: {', '.join(missing)}")

    for task_id, status in decisions.items():
        if status not in DECISION_STATUSES:
            raise ValidationError(
                f"Invalid status '{getattr(status, 'value', status)}' for task {task_id}. "
                f"Allowed: {', '.join(s.value for s in sorted(DECISION_STATUSES, key=lambda s: s.value))}"
            )


def check_not_empty(routine_count: int, extra_count: int) -> None:
    if routine_count == 0 and extra_count == 0:
        raise ValidationError("Nothing to submit: add at least one task decision or extra task")


def _new_log(**fields) -> TaskLog:
    return TaskLog(approval_status=ApprovalStatus.PENDING_APPROVAL, **fields)


def build_daily_logs(
    employee_id: str,
    log_date: date,
    assignments: Sequence[Assignment],
    decisions: Mapping[str, LogStatus],
    descriptions: Mapping[str, str],
    now: datetime,
) -> List[TaskLog]:
    """One Daily log per assignment, with the task description as it reads now"""
    return [
        _new_log(
            id=daily_log_id(employee_id, a.task_id, log_date),
            log_date=log_date,
            employee_id=employee_id,
            task_id=a.task_id,
            task_type=TaskType.DAILY,
            status=decisions[a.task_id],
            description=descriptions.get(a.task_id, ""),
            created_at=now,
            updated_at=now,
        )
        for a in assignments
    ]


def build_extra_logs(
    employee_id: str,
    log_date: date,
    extra_descriptions: Sequence[str],
    now: datetime,
) -> List[TaskLog]:
    """Extra work is always reported as done"""
    return [
        _new_log(
            id=extra_log_id(),
            log_date=log_date,
            employee_id=employee_id,
            task_id=EXTRA_TASK_ID,
            task_type=TaskType.EXTRA,
            status=LogStatus.COMPLETED,
            description=text,
            created_at=now,
            updated_at=now,
        )
        for text in extra_descriptions
    ]


def build_leave_log(employee_id: str, log_date: date, kind: LeaveKind, now: datetime) -> TaskLog:
    return _new_log(
        id=leave_log_id(),
        log_date=log_date,
        employee_id=employee_id,
        task_id=LEAVE_TASK_ID,
        task_type=TaskType.DAILY,
        status=LogStatus.LEAVE,
        description=LEAVE_LABELS[kind],
        created_at=now,
        updated_at=now,
    )


def decisions_by_task(decisions: Mapping[str, LogStatus]) -> Dict[str, LogStatus]:
    """Strip whitespace around task ids coming from clients"""
    return {str(task_id).strip(): status for task_id, status in decisions.items()}
