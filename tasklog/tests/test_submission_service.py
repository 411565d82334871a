"""
Tests for the daily log submission service against both store adapters
"""
from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from tasklog.core.errors import (
    AuthorizationError,
    DuplicateSubmissionError,
    PersistenceError,
    ValidationError,
)
from tasklog.models.audit_log import SystemAuditLog
from tasklog.models.task_log import TaskLog, TaskType, LogStatus, ApprovalStatus, LeaveKind
from tasklog.repositories import SqlAlchemyStore
from tasklog.services import submission_rules as rules
from tasklog.services.submission_service import (
    submit_daily_logs,
    submit_leave,
    get_checklist,
    list_my_logs,
)
from tasklog.tests.conftest import WORK_DAY, REST_DAY, TODAY, seed_database
from tasklog.utils.datetime_utils import now_utc

DECISIONS = {"T1": LogStatus.COMPLETED, "T2": LogStatus.PENDING}


def _submit(store, employee_id="E1", log_date=WORK_DAY, decisions=None, extra=()):
    return submit_daily_logs(
        store,
        store.get_employee(employee_id),
        log_date,
        DECISIONS if decisions is None else decisions,
        extra,
        today=TODAY,
    )


def test_submit_writes_daily_and_extra_logs(store):
    logs = _submit(store, extra=["Helped with the audit"])

    assert [log.id for log in logs[:2]] == ["LOG-E1-T1-2024-05-01", "LOG-E1-T2-2024-05-01"]
    assert logs[0].status == LogStatus.COMPLETED
    assert logs[1].status == LogStatus.PENDING
    assert logs[0].description == "Check the shared inbox"
    assert logs[2].task_type == TaskType.EXTRA
    assert logs[2].description == "Helped with the audit"
    assert all(log.approval_status == ApprovalStatus.PENDING_APPROVAL for log in logs)
    assert len(store.list_logs()) == 3
    assert store.has_logs_for("E1", WORK_DAY)


def test_second_submission_for_the_same_day_is_rejected(store):
    _submit(store)

    with pytest.raises(DuplicateSubmissionError):
        _submit(store, extra=["Late extra work"])
    assert len(store.list_logs()) == 2


def test_missing_decision_writes_nothing(store):
    with pytest.raises(ValidationError):
        _submit(store, decisions={"T1": LogStatus.COMPLETED})

    assert store.list_logs() == []
    assert not store.has_logs_for("E1", WORK_DAY)


def test_decision_for_unassigned_task_is_rejected(store):
    with pytest.raises(ValidationError, match="not assigned"):
        _submit(store, decisions={**DECISIONS, "T9": LogStatus.COMPLETED})


@pytest.mark.parametrize("log_date", [date(2024, 5, 3), date(2024, 4, 28)])
def test_dates_outside_the_window_are_rejected(store, log_date):
    with pytest.raises(ValidationError):
        _submit(store, log_date=log_date)


def test_rest_day_keeps_only_extra_work(store):
    logs = _submit(store, log_date=REST_DAY, extra=["Covered the front desk"])

    assert len(logs) == 1
    assert logs[0].task_id == "EXTRA"


def test_empty_rest_day_submission_is_rejected(store):
    with pytest.raises(ValidationError, match="Nothing to submit"):
        _submit(store, log_date=REST_DAY)


def test_employee_without_assignments_submits_extra_only(store):
    logs = _submit(store, employee_id="E2", decisions={}, extra=["Inventory count"])
    assert len(logs) == 1

    with pytest.raises(ValidationError):
        _submit(store, employee_id="E2", log_date=date(2024, 4, 30), decisions={})


def test_logging_requires_permission_and_active_account(store):
    admin = store.get_employee("A1")
    admin_logs = submit_daily_logs(store, admin, WORK_DAY, {}, ["Reviewed the week"], today=TODAY)
    assert len(admin_logs) == 1

    employee = store.get_employee("E2")
    employee.permissions = []
    with pytest.raises(AuthorizationError):
        submit_daily_logs(store, employee, WORK_DAY, {}, ["x"], today=TODAY)

    employee.permissions = ["log_tasks"]
    employee.active = False
    with pytest.raises(AuthorizationError):
        submit_daily_logs(store, employee, WORK_DAY, {}, ["x"], today=TODAY)


def test_leave_blocks_the_day(store):
    leave = submit_leave(store, store.get_employee("E1"), WORK_DAY, LeaveKind.WEEKLY, today=TODAY)

    assert leave.task_id == "LEAVE"
    assert leave.status == LogStatus.LEAVE
    assert leave.approval_status == ApprovalStatus.PENDING_APPROVAL
    with pytest.raises(DuplicateSubmissionError):
        _submit(store)


def test_sick_leave_uses_the_official_leave_label(store):
    leave = submit_leave(store, store.get_employee("E2"), WORK_DAY, LeaveKind.SICK, today=TODAY)

    assert leave.description == "إجازة رسمية/مرضية"
    assert leave.task_type == TaskType.DAILY


def test_log_keeps_the_description_it_was_submitted_with(store):
    _submit(store)

    store.get_task("T1").description = "Check and archive the shared inbox"
    if isinstance(store, SqlAlchemyStore):
        store.db.commit()

    assert store.get_log("LOG-E1-T1-2024-05-01").description == "Check the shared inbox"
    checklist = get_checklist(store, store.get_employee("E1"), WORK_DAY)
    assert checklist["tasks"][0]["description"] == "Check and archive the shared inbox"


def test_checklist(store):
    employee = store.get_employee("E1")

    checklist = get_checklist(store, employee, WORK_DAY)
    assert [item["task_id"] for item in checklist["tasks"]] == ["T1", "T2"]
    assert checklist["already_submitted"] is False
    assert checklist["is_rest_day"] is False

    _submit(store)
    assert get_checklist(store, employee, WORK_DAY)["already_submitted"] is True

    rest = get_checklist(store, employee, REST_DAY)
    assert rest["is_rest_day"] is True
    assert rest["tasks"] == []


def test_my_logs_only_returns_own_logs(store):
    _submit(store)
    _submit(store, employee_id="E2", decisions={}, extra=["Inventory count"])

    mine = list_my_logs(store, store.get_employee("E1"))
    assert {log.employee_id for log in mine} == {"E1"}
    assert list_my_logs(store, store.get_employee("E1"), date_from=date(2024, 5, 2)) == []


def test_store_refuses_a_second_batch_for_the_same_day(store):
    """Two submissions that both passed the pre-check: only the first batch is written"""
    now = now_utc()
    first = rules.build_extra_logs("E2", WORK_DAY, ["First"], now)
    second = rules.build_extra_logs("E2", WORK_DAY, ["Second"], now)

    store.add_submission("E2", WORK_DAY, first)
    with pytest.raises(DuplicateSubmissionError):
        store.add_submission("E2", WORK_DAY, second)

    assert [log.description for log in store.list_logs()] == ["First"]


def test_database_failure_is_reported_and_nothing_is_written(db, monkeypatch):
    seed_database(db)
    store = SqlAlchemyStore(db)

    def failing_commit():
        raise OperationalError("COMMIT", {}, Exception("database is locked"))

    monkeypatch.setattr(db, "commit", failing_commit)
    with pytest.raises(PersistenceError):
        _submit(store)
    monkeypatch.undo()

    assert db.query(TaskLog).count() == 0
    assert db.query(SystemAuditLog).count() == 0
    assert not store.has_logs_for("E1", WORK_DAY)
    # the day can still be submitted once the database is back
    assert len(_submit(store)) == 2


def test_audit_entry_is_committed_with_the_batch(db, monkeypatch):
    seed_database(db)
    store = SqlAlchemyStore(db)

    commits = []
    real_commit = db.commit

    def counting_commit():
        commits.append(1)
        real_commit()

    monkeypatch.setattr(db, "commit", counting_commit)
    _submit(store)
    monkeypatch.undo()

    assert len(commits) == 1
    entry = db.query(SystemAuditLog).one()
    assert entry.action_type == "SUBMIT"
    assert entry.actor_id == "E1"
    assert entry.meta_json == {"log_ids": ["LOG-E1-T1-2024-05-01", "LOG-E1-T2-2024-05-01"]}
