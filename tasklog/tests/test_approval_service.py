"""
Tests for the approval service against both store adapters
"""
import pytest
from sqlalchemy.exc import OperationalError

from tasklog.core.errors import (
    AuthorizationError,
    InvalidTransitionError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from tasklog.models.audit_log import SystemAuditLog
from tasklog.models.task_log import TaskLog, LogStatus, ApprovalStatus, LogAction
from tasklog.repositories import SqlAlchemyStore
from tasklog.services import approval_rules
from tasklog.services.approval_service import (
    approve_log,
    reject_log,
    commit_log,
    bulk_approve,
    delete_log,
    list_review_queue,
)
from tasklog.services.submission_service import submit_daily_logs
from tasklog.tests.conftest import WORK_DAY, TODAY, seed_database
from tasklog.utils.datetime_utils import now_utc

T1_LOG = "LOG-E1-T1-2024-05-01"
T2_LOG = "LOG-E1-T2-2024-05-01"


def _submit_e1(store):
    return submit_daily_logs(
        store,
        store.get_employee("E1"),
        WORK_DAY,
        {"T1": LogStatus.COMPLETED, "T2": LogStatus.NOT_APPLICABLE},
        today=TODAY,
    )


def test_approve(store):
    _submit_e1(store)

    log = approve_log(store, T1_LOG, store.get_employee("R1"))

    assert log.approval_status == ApprovalStatus.APPROVED
    assert log.approved_by == "R1"
    assert log.approved_at is not None
    assert store.get_log(T2_LOG).approval_status == ApprovalStatus.PENDING_APPROVAL


def test_approving_twice_keeps_the_first_approval(store):
    _submit_e1(store)
    first = approve_log(store, T1_LOG, store.get_employee("R1"))
    approved_at = first.approved_at

    again = approve_log(store, T1_LOG, store.get_employee("A1"))

    assert again.approval_status == ApprovalStatus.APPROVED
    assert again.approved_by == "R1"
    assert again.approved_at == approved_at


def test_reject_commit_approve_cycle(store):
    _submit_e1(store)
    reviewer = store.get_employee("R1")
    owner = store.get_employee("E1")

    rejected = reject_log(store, T1_LOG, reviewer, "The inbox still has unread mail")
    assert rejected.approval_status == ApprovalStatus.REJECTED
    assert rejected.manager_note == "The inbox still has unread mail"
    assert rejected.rejected_by == "R1"

    with pytest.raises(InvalidTransitionError):
        approve_log(store, T1_LOG, reviewer)

    committed = commit_log(store, T1_LOG, owner, "Cleared it this morning")
    assert committed.approval_status == ApprovalStatus.COMMITMENT_PENDING
    assert committed.committed_at is not None
    assert committed.manager_note == "The inbox still has unread mail"

    assert [log.id for log in list_review_queue(store, reviewer, commitments_only=True)] == [T1_LOG]

    approved = approve_log(store, T1_LOG, reviewer)
    assert approved.approval_status == ApprovalStatus.APPROVED


def test_reject_without_reason_changes_nothing(store):
    _submit_e1(store)

    with pytest.raises(ValidationError):
        reject_log(store, T1_LOG, store.get_employee("R1"), "  ")
    assert store.get_log(T1_LOG).approval_status == ApprovalStatus.PENDING_APPROVAL


def test_only_the_owner_commits(store):
    _submit_e1(store)
    reject_log(store, T1_LOG, store.get_employee("R1"), "Missing")

    with pytest.raises(AuthorizationError):
        commit_log(store, T1_LOG, store.get_employee("E2"))
    with pytest.raises(InvalidTransitionError):
        commit_log(store, T2_LOG, store.get_employee("E1"))


def test_employees_cannot_review(store):
    _submit_e1(store)

    with pytest.raises(AuthorizationError):
        approve_log(store, T1_LOG, store.get_employee("E2"))
    with pytest.raises(AuthorizationError):
        list_review_queue(store, store.get_employee("E1"))


def test_reviewer_cannot_approve_own_log(store):
    own = submit_daily_logs(store, store.get_employee("R1"), WORK_DAY, {}, ["Planned the rota"], today=TODAY)[0]

    with pytest.raises(AuthorizationError):
        approve_log(store, own.id, store.get_employee("R1"))
    assert approve_log(store, own.id, store.get_employee("A1")).approval_status == ApprovalStatus.APPROVED


def test_unknown_log(store):
    with pytest.raises(NotFoundError):
        approve_log(store, "LOG-NOPE", store.get_employee("R1"))


def test_bulk_approve_skips_the_reviewers_own_logs(store):
    _submit_e1(store)
    own = submit_daily_logs(store, store.get_employee("R1"), WORK_DAY, {}, ["Planned the rota"], today=TODAY)[0]

    approved = bulk_approve(store, store.get_employee("R1"), date_from=WORK_DAY, date_to=WORK_DAY)

    assert sorted(log.id for log in approved) == [T1_LOG, T2_LOG]
    assert store.get_log(own.id).approval_status == ApprovalStatus.PENDING_APPROVAL
    assert bulk_approve(store, store.get_employee("R1")) == []


def test_bulk_approve_filters_by_employee_and_search(store):
    _submit_e1(store)
    submit_daily_logs(store, store.get_employee("E2"), WORK_DAY, {}, ["Inventory count"], today=TODAY)

    approved = bulk_approve(store, store.get_employee("R1"), search="inventory")
    assert [log.employee_id for log in approved] == ["E2"]

    approved = bulk_approve(store, store.get_employee("R1"), employee_id="E1")
    assert len(approved) == 2


def test_stale_transition_is_refused(store):
    """A change computed before another reviewer acted is not applied"""
    _submit_e1(store)
    log = store.get_log(T1_LOG)
    stale = approval_rules.plan_reject(log, store.get_employee("A1"), "Too late", now_utc())

    approve_log(store, T1_LOG, store.get_employee("R1"))

    with pytest.raises(InvalidTransitionError):
        store.apply_changes([stale])
    assert store.get_log(T1_LOG).approval_status == ApprovalStatus.APPROVED


def test_delete_reopens_the_day_when_no_logs_remain(store):
    _submit_e1(store)
    reviewer = store.get_employee("R1")

    delete_log(store, T1_LOG, reviewer)
    assert store.get_log(T1_LOG) is None
    assert store.has_logs_for("E1", WORK_DAY)

    delete_log(store, T2_LOG, reviewer)
    assert not store.has_logs_for("E1", WORK_DAY)


def test_review_history_is_recorded(db):
    seed_database(db)
    store = SqlAlchemyStore(db)
    _submit_e1(store)

    reject_log(store, T1_LOG, store.get_employee("R1"), "Missing")
    commit_log(store, T1_LOG, store.get_employee("E1"))
    approve_log(store, T1_LOG, store.get_employee("R1"))

    actions = store.get_log(T1_LOG).actions
    assert [a.action for a in actions] == [LogAction.REJECT, LogAction.COMMIT, LogAction.APPROVE]
    assert actions[0].remarks == "Missing"
    assert actions[1].action_by == "E1"


def test_failed_write_leaves_the_log_unchanged(db, monkeypatch):
    seed_database(db)
    store = SqlAlchemyStore(db)
    _submit_e1(store)

    def failing_commit():
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db, "commit", failing_commit)
    with pytest.raises(PersistenceError):
        approve_log(store, T1_LOG, store.get_employee("R1"))
    monkeypatch.undo()

    log = db.query(TaskLog).filter(TaskLog.id == T1_LOG).one()
    assert log.approval_status == ApprovalStatus.PENDING_APPROVAL
    assert log.approved_by is None
    assert log.actions == []
    assert db.query(SystemAuditLog).filter(SystemAuditLog.action_type == "APPROVE").count() == 0


def test_transition_and_audit_entry_share_one_commit(db, monkeypatch):
    seed_database(db)
    store = SqlAlchemyStore(db)
    _submit_e1(store)

    commits = []
    real_commit = db.commit

    def counting_commit():
        commits.append(1)
        real_commit()

    monkeypatch.setattr(db, "commit", counting_commit)
    approve_log(store, T1_LOG, store.get_employee("R1"))
    delete_log(store, T2_LOG, store.get_employee("R1"))
    monkeypatch.undo()

    assert len(commits) == 2
    entries = db.query(SystemAuditLog).filter(SystemAuditLog.actor_id == "R1").order_by(SystemAuditLog.id).all()
    assert [(e.action_type, e.target) for e in entries] == [
        ("APPROVE", f"task_log:{T1_LOG}"),
        ("DELETE", f"task_log:{T2_LOG}"),
    ]
    assert entries[0].meta_json == {"before": "PendingApproval", "after": "Approved"}


def test_bulk_approve_is_audited_once(store):
    _submit_e1(store)

    bulk_approve(store, store.get_employee("A1"), employee_id="E1")

    if isinstance(store, SqlAlchemyStore):
        actions = [e.action_type for e in store.db.query(SystemAuditLog).order_by(SystemAuditLog.id)]
    else:
        actions = [e.action_type for e in store.audit_entries]
    assert actions == ["SUBMIT", "APPROVE"]
