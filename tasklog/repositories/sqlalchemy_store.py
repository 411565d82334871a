"""
SQLAlchemy adapter for the task log store
"""
import logging
from datetime import date
from typing import Iterable, List, Optional, Sequence

from sqlalchemy import and_, or_, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from tasklog.core.errors import (
    DuplicateSubmissionError,
    InvalidTransitionError,
    NotFoundError,
    PersistenceError,
)
from tasklog.models.employee import Employee
from tasklog.models.task import Task, Assignment
from tasklog.models.task_log import TaskLog, TaskLogAction, DailySubmission
from tasklog.models.audit_log import SystemAuditLog
from tasklog.repositories.base import TaskLogStore, LogFilters, LogChange
from tasklog.services.registry import task_sort_key
from tasklog.utils.datetime_utils import now_utc

logger = logging.getLogger(__name__)

NOT_CONFIRMED = "The action was not confirmed by the database, please retry"


class SqlAlchemyStore(TaskLogStore):
    """Task log store backed by a SQLAlchemy session"""

    def __init__(self, db: Session):
        self.db = db

    def _fail(self, operation: str, exc: SQLAlchemyError) -> PersistenceError:
        self.db.rollback()
        logger.error("Task log store %s failed: %s", operation, exc, exc_info=True)
        return PersistenceError(NOT_CONFIRMED)

    def get_employee(self, employee_id: str) -> Optional[Employee]:
        return self.db.query(Employee).filter(Employee.id == employee_id).first()

    def list_employees(self, active_only: bool = False) -> List[Employee]:
        query = self.db.query(Employee)
        if active_only:
            query = query.filter(Employee.active == True)  # noqa: E712
        return sorted(query.all(), key=lambda e: task_sort_key(e.id))

    def get_task(self, task_id: str) -> Optional[Task]:
        return self.db.query(Task).filter(Task.id == task_id).first()

    def list_tasks(self) -> List[Task]:
        return sorted(self.db.query(Task).all(), key=lambda t: task_sort_key(t.id))

    def list_assignments(self, employee_id: Optional[str] = None) -> List[Assignment]:
        query = self.db.query(Assignment)
        if employee_id is not None:
            query = query.filter(Assignment.employee_id == employee_id)
        return query.all()

    def get_log(self, log_id: str) -> Optional[TaskLog]:
        return self.db.query(TaskLog).filter(TaskLog.id == log_id).first()

    def list_logs(self, filters: Optional[LogFilters] = None) -> List[TaskLog]:
        query = self.db.query(TaskLog)
        if filters is not None:
            if filters.employee_id:
                query = query.filter(TaskLog.employee_id == filters.employee_id)
            if filters.date_from:
                query = query.filter(TaskLog.log_date >= filters.date_from)
            if filters.date_to:
                query = query.filter(TaskLog.log_date <= filters.date_to)
            if filters.approval_statuses:
                query = query.filter(TaskLog.approval_status.in_(filters.approval_statuses))
            if filters.task_type:
                query = query.filter(TaskLog.task_type == filters.task_type)
            if filters.search and filters.search.strip():
                pattern = f"%{filters.search.strip().lower()}%"
                query = query.outerjoin(Employee, Employee.id == TaskLog.employee_id).filter(
                    or_(
                        func.lower(TaskLog.description).like(pattern),
                        func.lower(TaskLog.employee_id).like(pattern),
                        func.lower(TaskLog.task_id).like(pattern),
                        func.lower(Employee.name).like(pattern),
                    )
                )
        return query.order_by(
            TaskLog.log_date.desc(),
            TaskLog.employee_id,
            TaskLog.created_at,
            TaskLog.id,
        ).all()

    def has_logs_for(self, employee_id: str, log_date: date) -> bool:
        log_exists = self.db.query(TaskLog.id).filter(
            TaskLog.employee_id == employee_id,
            TaskLog.log_date == log_date,
        ).first()
        if log_exists:
            return True
        key_exists = self.db.query(DailySubmission.id).filter(
            DailySubmission.employee_id == employee_id,
            DailySubmission.log_date == log_date,
        ).first()
        return key_exists is not None

    def add_submission(
        self,
        employee_id: str,
        log_date: date,
        logs: Sequence[TaskLog],
        audit: Optional[SystemAuditLog] = None,
    ) -> List[TaskLog]:
        try:
            # The unique (employee_id, log_date) key makes a concurrent second batch fail at commit
            self.db.add(DailySubmission(employee_id=employee_id, log_date=log_date, submitted_at=now_utc()))
            self.db.add_all(list(logs))
            if audit is not None:
                self.db.add(audit)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.info("Duplicate submission blocked by unique key: employee_id=%s log_date=%s", employee_id, log_date)
            raise DuplicateSubmissionError(f"Logs for {log_date.isoformat()} have already been submitted")
        except SQLAlchemyError as e:
            raise self._fail("add_submission", e) from e

        for log in logs:
            self.db.refresh(log)
        return list(logs)

    def apply_changes(
        self,
        changes: Sequence[LogChange],
        audit: Optional[SystemAuditLog] = None,
    ) -> List[TaskLog]:
        updated = []
        try:
            for change in changes:
                log = self.get_log(change.log_id)
                if log is None:
                    self.db.rollback()
                    raise NotFoundError(f"Task log {change.log_id} not found")
                if log.approval_status != change.before:
                    self.db.rollback()
                    raise InvalidTransitionError(
                        f"Task log {change.log_id} is now {log.approval_status.value}, expected {change.before.value}"
                    )
                for name, value in change.fields.items():
                    setattr(log, name, value)
                log.approval_status = change.after
                log.updated_at = change.at
                self.db.add(TaskLogAction(
                    task_log_id=log.id,
                    action=change.action,
                    action_by=change.actor_id,
                    remarks=change.remarks,
                    action_at=change.at,
                ))
                updated.append(log)
            if audit is not None:
                self.db.add(audit)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("apply_changes", e) from e

        for log in updated:
            self.db.refresh(log)
        return updated

    def delete_log(self, log_id: str, audit: Optional[SystemAuditLog] = None) -> None:
        log = self.get_log(log_id)
        if log is None:
            raise NotFoundError(f"Task log {log_id} not found")
        try:
            employee_id, log_date = log.employee_id, log.log_date
            self.db.delete(log)
            self.db.flush()
            remaining = self.db.query(TaskLog.id).filter(
                TaskLog.employee_id == employee_id,
                TaskLog.log_date == log_date,
            ).first()
            if remaining is None:
                # The day is open again once its last log is gone
                self.db.query(DailySubmission).filter(
                    DailySubmission.employee_id == employee_id,
                    DailySubmission.log_date == log_date,
                ).delete(synchronize_session=False)
            if audit is not None:
                self.db.add(audit)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("delete_log", e) from e

    def import_logs(self, logs: Iterable[TaskLog]) -> int:
        count = 0
        days = set()
        try:
            for log in logs:
                self.db.merge(log)
                days.add((log.employee_id, log.log_date))
                count += 1
            self.db.flush()
            for employee_id, log_date in days:
                exists = self.db.query(DailySubmission.id).filter(
                    and_(DailySubmission.employee_id == employee_id, DailySubmission.log_date == log_date)
                ).first()
                if exists is None:
                    self.db.add(DailySubmission(employee_id=employee_id, log_date=log_date, submitted_at=now_utc()))
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("import_logs", e) from e
        return count

    def clear_logs(self) -> int:
        try:
            self.db.query(TaskLogAction).delete(synchronize_session=False)
            count = self.db.query(TaskLog).delete(synchronize_session=False)
            self.db.query(DailySubmission).delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("clear_logs", e) from e
        self.db.expire_all()
        return count
