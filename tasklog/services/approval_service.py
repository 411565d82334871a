"""
Approval service - reviewer and owner actions on submitted task logs
"""
import logging
from datetime import date
from typing import List, Optional

from tasklog.core.errors import AuthorizationError, NotFoundError
from tasklog.models.audit_log import AuditAction
from tasklog.models.employee import Employee
from tasklog.models.task_log import TaskLog, ApprovalStatus, REVIEWABLE_STATUSES
from tasklog.repositories.base import TaskLogStore, LogFilters, LogChange
from tasklog.services import approval_rules as rules
from tasklog.services.audit_service import build_audit_entry
from tasklog.utils.datetime_utils import now_utc
from tasklog.utils.roles import is_reviewer

logger = logging.getLogger(__name__)


def _get_log(store: TaskLogStore, log_id: str) -> TaskLog:
    log = store.get_log(log_id)
    if log is None:
        raise NotFoundError(f"Task log {log_id} not found")
    return log


def _apply(store: TaskLogStore, change: LogChange, audit_action: AuditAction, actor: Employee) -> TaskLog:
    audit = build_audit_entry(
        actor,
        audit_action,
        f"task_log:{change.log_id}",
        details=change.remarks,
        meta={"before": change.before, "after": change.after},
    )
    log = store.apply_changes([change], audit)[0]
    logger.info(
        "task log transition: log_id=%s before=%s after=%s action=%s",
        change.log_id, change.before.value, change.after.value, change.action.value.lower(),
    )
    return log


def approve_log(store: TaskLogStore, log_id: str, reviewer: Employee) -> TaskLog:
    """
    Approve a PendingApproval or CommitmentPending log

    Approving an already approved log is a no-op and returns it unchanged.

    Raises:
        NotFoundError: If the log does not exist
        AuthorizationError: If the reviewer may not act on the log
        InvalidTransitionError: If the log is rejected
        PersistenceError: If the store failed; the log is unchanged
    """
    log = _get_log(store, log_id)
    change = rules.plan_approve(log, reviewer, now_utc())
    if change is None:
        logger.info("task log already approved: log_id=%s", log_id)
        return log
    return _apply(store, change, AuditAction.APPROVE, reviewer)


def reject_log(store: TaskLogStore, log_id: str, reviewer: Employee, reason: Optional[str]) -> TaskLog:
    """Reject a log awaiting review; the reason is required"""
    log = _get_log(store, log_id)
    change = rules.plan_reject(log, reviewer, reason, now_utc())
    return _apply(store, change, AuditAction.REJECT, reviewer)


def commit_log(store: TaskLogStore, log_id: str, employee: Employee, remarks: Optional[str] = None) -> TaskLog:
    """The owner of a rejected log sends it back for review"""
    log = _get_log(store, log_id)
    change = rules.plan_commit(log, employee, now_utc(), remarks)
    return _apply(store, change, AuditAction.COMMIT, employee)


def bulk_approve(
    store: TaskLogStore,
    reviewer: Employee,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    employee_id: Optional[str] = None,
    search: Optional[str] = None,
) -> List[TaskLog]:
    """
    Approve every PendingApproval log matching the filters in one write

    The reviewer's own logs are never part of the batch. Either every
    matching log is approved or none is.
    """
    if not is_reviewer(reviewer):
        raise AuthorizationError("Only reviewers can approve, reject or delete task logs")

    filters = LogFilters(
        employee_id=employee_id,
        date_from=date_from,
        date_to=date_to,
        approval_statuses=(ApprovalStatus.PENDING_APPROVAL,),
        search=search,
    )
    at = now_utc()
    changes = []
    for log in store.list_logs(filters):
        if log.employee_id == reviewer.id:
            continue
        change = rules.plan_approve(log, reviewer, at)
        if change is not None:
            changes.append(change)

    if not changes:
        return []

    audit = build_audit_entry(
        reviewer,
        AuditAction.APPROVE,
        "task_logs:bulk",
        details=f"Bulk approved {len(changes)} logs",
        meta={
            "log_ids": [change.log_id for change in changes],
            "filters": {
                "date_from": date_from,
                "date_to": date_to,
                "employee_id": employee_id,
                "search": search,
            },
        },
    )
    approved = store.apply_changes(changes, audit)
    logger.info("bulk approve: reviewer_id=%s count=%s", reviewer.id, len(approved))
    return approved


def delete_log(store: TaskLogStore, log_id: str, reviewer: Employee) -> None:
    """Remove a log in any state (reviewers only, never their own)"""
    log = _get_log(store, log_id)
    rules.check_reviewer(log, reviewer)
    before = log.approval_status
    audit = build_audit_entry(
        reviewer,
        AuditAction.DELETE,
        f"task_log:{log_id}",
        meta={"employee_id": log.employee_id, "log_date": log.log_date, "state": before},
    )
    store.delete_log(log_id, audit)
    logger.info("task log deleted: log_id=%s state=%s reviewer_id=%s", log_id, before.value, reviewer.id)


def list_review_queue(store: TaskLogStore, reviewer: Employee, commitments_only: bool = False) -> List[TaskLog]:
    """Logs awaiting review; commitments form their own queue"""
    if not is_reviewer(reviewer):
        raise AuthorizationError("Only reviewers can view the review queue")
    statuses = (ApprovalStatus.COMMITMENT_PENDING,) if commitments_only else tuple(REVIEWABLE_STATUSES)
    return store.list_logs(LogFilters(approval_statuses=statuses))
