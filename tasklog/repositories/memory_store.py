"""
In-memory adapter for the task log store

Keeps every collection in process memory behind a single lock. Used for the
local single-user mode and to exercise the services without a database.
"""
import threading
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from tasklog.core.errors import DuplicateSubmissionError, InvalidTransitionError, NotFoundError
from tasklog.models.employee import Employee
from tasklog.models.task import Task, Assignment
from tasklog.models.task_log import TaskLog, TaskLogAction
from tasklog.models.audit_log import SystemAuditLog
from tasklog.repositories.base import TaskLogStore, LogFilters, LogChange
from tasklog.services.registry import task_sort_key


class InMemoryStore(TaskLogStore):
    """Task log store held in dictionaries"""

    def __init__(
        self,
        employees: Iterable[Employee] = (),
        tasks: Iterable[Task] = (),
        assignments: Iterable[Assignment] = (),
    ):
        self._lock = threading.Lock()
        self.employees: Dict[str, Employee] = {e.id: e for e in employees}
        self.tasks: Dict[str, Task] = {t.id: t for t in tasks}
        self.assignments: List[Assignment] = list(assignments)
        self.logs: Dict[str, TaskLog] = {}
        self.submitted_days: Set[Tuple[str, date]] = set()
        self.actions: List[TaskLogAction] = []
        self.audit_entries: List[SystemAuditLog] = []

    def get_employee(self, employee_id: str) -> Optional[Employee]:
        return self.employees.get(employee_id)

    def list_employees(self, active_only: bool = False) -> List[Employee]:
        employees = [e for e in self.employees.values() if e.active or not active_only]
        return sorted(employees, key=lambda e: task_sort_key(e.id))

    def get_task(self, task_id: str) -> Optional[Task]:
        return self.tasks.get(task_id)

    def list_tasks(self) -> List[Task]:
        return sorted(self.tasks.values(), key=lambda t: task_sort_key(t.id))

    def list_assignments(self, employee_id: Optional[str] = None) -> List[Assignment]:
        return [a for a in self.assignments if employee_id is None or a.employee_id == employee_id]

    def get_log(self, log_id: str) -> Optional[TaskLog]:
        return self.logs.get(log_id)

    def list_logs(self, filters: Optional[LogFilters] = None) -> List[TaskLog]:
        with self._lock:
            logs = list(self.logs.values())
        if filters is not None:
            logs = [
                log for log in logs
                if filters.matches(log, getattr(self.employees.get(log.employee_id), "name", None))
            ]
        # Newest date first; within a day keep insertion order
        logs.sort(key=lambda log: log.employee_id)
        logs.sort(key=lambda log: log.log_date, reverse=True)
        return logs

    def has_logs_for(self, employee_id: str, log_date: date) -> bool:
        with self._lock:
            return self._day_taken(employee_id, log_date)

    def _day_taken(self, employee_id: str, log_date: date) -> bool:
        if (employee_id, log_date) in self.submitted_days:
            return True
        return any(
            log.employee_id == employee_id and log.log_date == log_date
            for log in self.logs.values()
        )

    def add_submission(
        self,
        employee_id: str,
        log_date: date,
        logs: Sequence[TaskLog],
        audit: Optional[SystemAuditLog] = None,
    ) -> List[TaskLog]:
        with self._lock:
            if self._day_taken(employee_id, log_date) or any(log.id in self.logs for log in logs):
                raise DuplicateSubmissionError(f"Logs for {log_date.isoformat()} have already been submitted")
            self.submitted_days.add((employee_id, log_date))
            for log in logs:
                self.logs[log.id] = log
            self._append_audit(audit)
        return list(logs)

    def apply_changes(
        self,
        changes: Sequence[LogChange],
        audit: Optional[SystemAuditLog] = None,
    ) -> List[TaskLog]:
        with self._lock:
            # Validate the whole batch first so a failure leaves every log untouched
            for change in changes:
                log = self.logs.get(change.log_id)
                if log is None:
                    raise NotFoundError(f"Task log {change.log_id} not found")
                if log.approval_status != change.before:
                    raise InvalidTransitionError(
                        f"Task log {change.log_id} is now {log.approval_status.value}, expected {change.before.value}"
                    )

            updated = []
            for change in changes:
                log = self.logs[change.log_id]
                for name, value in change.fields.items():
                    setattr(log, name, value)
                log.approval_status = change.after
                log.updated_at = change.at
                self.actions.append(TaskLogAction(
                    task_log_id=log.id,
                    action=change.action,
                    action_by=change.actor_id,
                    remarks=change.remarks,
                    action_at=change.at,
                ))
                updated.append(log)
            self._append_audit(audit)
            return updated

    def delete_log(self, log_id: str, audit: Optional[SystemAuditLog] = None) -> None:
        with self._lock:
            log = self.logs.pop(log_id, None)
            if log is None:
                raise NotFoundError(f"Task log {log_id} not found")
            self.actions = [a for a in self.actions if a.task_log_id != log_id]
            still_logged = any(
                other.employee_id == log.employee_id and other.log_date == log.log_date
                for other in self.logs.values()
            )
            if not still_logged:
                self.submitted_days.discard((log.employee_id, log.log_date))
            self._append_audit(audit)

    def import_logs(self, logs: Iterable[TaskLog]) -> int:
        count = 0
        with self._lock:
            for log in logs:
                self.logs[log.id] = log
                self.submitted_days.add((log.employee_id, log.log_date))
                count += 1
        return count

    def clear_logs(self) -> int:
        with self._lock:
            count = len(self.logs)
            self.logs.clear()
            self.actions.clear()
            self.submitted_days.clear()
        return count

    def _append_audit(self, entry: Optional[SystemAuditLog]) -> None:
        # caller holds the lock
        if entry is not None:
            entry.id = len(self.audit_entries) + 1
            self.audit_entries.append(entry)
