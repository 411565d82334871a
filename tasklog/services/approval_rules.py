"""
Approval state machine

    PendingApproval   --approve-->  Approved
    PendingApproval   --reject--->  Rejected
    Rejected          --commit--->  CommitmentPending
    CommitmentPending --approve-->  Approved
    CommitmentPending --reject--->  Rejected

Each function checks the actor and the current state and returns the
LogChange to persist; none of them touch the log itself.
"""
from datetime import datetime
from typing import Optional

from tasklog.core.errors import AuthorizationError, InvalidTransitionError, ValidationError
from tasklog.models.employee import Employee
from tasklog.models.task_log import TaskLog, ApprovalStatus, LogAction, REVIEWABLE_STATUSES
from tasklog.repositories.base import LogChange
from tasklog.utils.roles import is_reviewer


def check_reviewer(log: TaskLog, reviewer: Employee) -> None:
    """
    Only reviewers act on logs, and never on their own

    Raises:
        AuthorizationError: If the actor is not a reviewer or owns the log
    """
    if not is_reviewer(reviewer):
        raise AuthorizationError("Only reviewers can approve, reject or delete task logs")
    if log.employee_id == reviewer.id:
        raise AuthorizationError("You cannot review your own task log")


def plan_approve(log: TaskLog, reviewer: Employee, at: datetime) -> Optional[LogChange]:
    """
    Approve a pending or committed log

    Returns None when the log is already approved: approving again keeps the
    original approver and timestamp.

    Raises:
        AuthorizationError: If the reviewer may not act on the log
        InvalidTransitionError: If the log was rejected
    """
    check_reviewer(log, reviewer)
    if log.approval_status == ApprovalStatus.APPROVED:
        return None
    if log.approval_status not in REVIEWABLE_STATUSES:
        raise InvalidTransitionError(
            f"Cannot approve a log in state {log.approval_status.value}; "
            "a rejected log must be committed by its owner first"
        )
    return LogChange(
        log_id=log.id,
        before=log.approval_status,
        after=ApprovalStatus.APPROVED,
        action=LogAction.APPROVE,
        actor_id=reviewer.id,
        at=at,
        fields={"approved_by": reviewer.id, "approved_at": at},
    )


def plan_reject(log: TaskLog, reviewer: Employee, reason: Optional[str], at: datetime) -> LogChange:
    """
    Reject a pending or committed log with a reason shown to the employee

    Raises:
        ValidationError: If the reason is blank
        AuthorizationError: If the reviewer may not act on the log
        InvalidTransitionError: If the log is not awaiting review
    """
    reason = (reason or "").strip()
    if not reason:
        raise ValidationError("A rejection reason is required")
    check_reviewer(log, reviewer)
    if log.approval_status not in REVIEWABLE_STATUSES:
        raise InvalidTransitionError(f"Cannot reject a log in state {log.approval_status.value}")
    return LogChange(
        log_id=log.id,
        before=log.approval_status,
        after=ApprovalStatus.REJECTED,
        action=LogAction.REJECT,
        actor_id=reviewer.id,
        at=at,
        remarks=reason,
        fields={
            "manager_note": reason,
            "rejected_by": reviewer.id,
            "rejected_at": at,
            "approved_by": None,
            "approved_at": None,
        },
    )


def plan_commit(log: TaskLog, employee: Employee, at: datetime, remarks: Optional[str] = None) -> LogChange:
    """
    The owner asks for a rejected log to be reviewed again

    The rejection note is kept so the reviewer sees what was disputed.

    Raises:
        AuthorizationError: If the employee does not own the log
        InvalidTransitionError: If the log is not rejected
    """
    if log.employee_id != employee.id:
        raise AuthorizationError("Only the owner of a log can commit to it")
    if log.approval_status != ApprovalStatus.REJECTED:
        raise InvalidTransitionError(
            f"Only rejected logs can be committed; this log is {log.approval_status.value}"
        )
    remarks = (remarks or "").strip() or None
    return LogChange(
        log_id=log.id,
        before=log.approval_status,
        after=ApprovalStatus.COMMITMENT_PENDING,
        action=LogAction.COMMIT,
        actor_id=employee.id,
        at=at,
        remarks=remarks,
        fields={"committed_at": at},
    )
