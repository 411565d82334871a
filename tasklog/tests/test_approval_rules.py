"""
Tests for the approval state machine rules
"""
from datetime import date, datetime, timezone

import pytest

from tasklog.core.constants import PERM_LOG_TASKS, PERM_MANAGE_SYSTEM
from tasklog.core.errors import AuthorizationError, InvalidTransitionError, ValidationError
from tasklog.models.employee import Employee, Role
from tasklog.models.task_log import TaskLog, TaskType, LogStatus, ApprovalStatus, LogAction
from tasklog.services import approval_rules as rules

AT = datetime(2024, 5, 2, 10, 0, tzinfo=timezone.utc)

OWNER = Employee(id="E1", name="Sara Ali", role=Role.USER.value, permissions=[PERM_LOG_TASKS], active=True)
REVIEWER = Employee(id="R1", name="Reem Saleh", role=Role.USER.value, permissions=[PERM_MANAGE_SYSTEM], active=True)
ADMIN = Employee(id="A1", name="Admin", role=Role.ADMIN.value, permissions=[], active=True)


def _log(approval_status=ApprovalStatus.PENDING_APPROVAL, employee_id="E1"):
    return TaskLog(
        id=f"LOG-{employee_id}-T1-2024-05-01",
        log_date=date(2024, 5, 1),
        employee_id=employee_id,
        task_id="T1",
        task_type=TaskType.DAILY,
        status=LogStatus.COMPLETED,
        description="Check the shared inbox",
        approval_status=approval_status,
    )


@pytest.mark.parametrize("state", [ApprovalStatus.PENDING_APPROVAL, ApprovalStatus.COMMITMENT_PENDING])
def test_approve_from_reviewable_states(state):
    change = rules.plan_approve(_log(state), REVIEWER, AT)

    assert change.before == state
    assert change.after == ApprovalStatus.APPROVED
    assert change.action == LogAction.APPROVE
    assert change.fields == {"approved_by": "R1", "approved_at": AT}


def test_approve_already_approved_is_a_no_op():
    assert rules.plan_approve(_log(ApprovalStatus.APPROVED), REVIEWER, AT) is None


def test_approve_rejected_log_needs_a_commitment_first():
    with pytest.raises(InvalidTransitionError):
        rules.plan_approve(_log(ApprovalStatus.REJECTED), REVIEWER, AT)


def test_admin_reviews_without_manage_system():
    assert rules.plan_approve(_log(), ADMIN, AT) is not None


def test_non_reviewer_cannot_approve():
    with pytest.raises(AuthorizationError):
        rules.plan_approve(_log(employee_id="E2"), OWNER, AT)


def test_reviewer_cannot_review_own_log():
    with pytest.raises(AuthorizationError, match="own"):
        rules.plan_approve(_log(employee_id="R1"), REVIEWER, AT)
    with pytest.raises(AuthorizationError, match="own"):
        rules.plan_reject(_log(employee_id="R1"), REVIEWER, "Wrong date", AT)


def test_reject_sets_note_and_clears_approval():
    change = rules.plan_reject(_log(ApprovalStatus.COMMITMENT_PENDING), REVIEWER, "  Photo missing ", AT)

    assert change.after == ApprovalStatus.REJECTED
    assert change.remarks == "Photo missing"
    assert change.fields["manager_note"] == "Photo missing"
    assert change.fields["rejected_by"] == "R1"
    assert change.fields["approved_by"] is None
    assert change.fields["approved_at"] is None


@pytest.mark.parametrize("reason", [None, "", "   "])
def test_reject_requires_a_reason(reason):
    with pytest.raises(ValidationError, match="reason"):
        rules.plan_reject(_log(), REVIEWER, reason, AT)


@pytest.mark.parametrize("state", [ApprovalStatus.APPROVED, ApprovalStatus.REJECTED])
def test_reject_only_logs_awaiting_review(state):
    with pytest.raises(InvalidTransitionError):
        rules.plan_reject(_log(state), REVIEWER, "Not done", AT)


def test_owner_commits_rejected_log():
    change = rules.plan_commit(_log(ApprovalStatus.REJECTED), OWNER, AT, remarks=" Will redo it ")

    assert change.before == ApprovalStatus.REJECTED
    assert change.after == ApprovalStatus.COMMITMENT_PENDING
    assert change.action == LogAction.COMMIT
    assert change.remarks == "Will redo it"
    assert change.fields == {"committed_at": AT}


def test_only_owner_commits():
    with pytest.raises(AuthorizationError):
        rules.plan_commit(_log(ApprovalStatus.REJECTED), REVIEWER, AT)


@pytest.mark.parametrize(
    "state",
    [ApprovalStatus.PENDING_APPROVAL, ApprovalStatus.APPROVED, ApprovalStatus.COMMITMENT_PENDING],
)
def test_commit_only_from_rejected(state):
    with pytest.raises(InvalidTransitionError):
        rules.plan_commit(_log(state), OWNER, AT)
