"""
Persistence port for the task log workflow

The submission engine and the approval state machine only talk to a
TaskLogStore. Adapters decide where the data lives (a SQL database through
SQLAlchemy, or process memory); every write method is all-or-nothing and
raises PersistenceError when the backend fails, so callers never report an
action as done unless the store confirmed it. The audit entry describing a
write is passed along with it and saved in the same transaction.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from tasklog.models.employee import Employee
from tasklog.models.task import Task, Assignment
from tasklog.models.task_log import TaskLog, ApprovalStatus, LogAction, TaskType
from tasklog.models.audit_log import SystemAuditLog


@dataclass
class LogFilters:
    """Criteria for listing task logs; unset fields do not filter"""
    employee_id: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    approval_statuses: Tuple[ApprovalStatus, ...] = ()
    task_type: Optional[TaskType] = None
    search: Optional[str] = None

    def matches(self, log: TaskLog, employee_name: Optional[str] = None) -> bool:
        """In-process equivalent of the SQL filter, used by the memory adapter"""
        if self.employee_id and log.employee_id != self.employee_id:
            return False
        if self.date_from and log.log_date < self.date_from:
            return False
        if self.date_to and log.log_date > self.date_to:
            return False
        if self.approval_statuses and log.approval_status not in self.approval_statuses:
            return False
        if self.task_type and log.task_type != self.task_type:
            return False
        if self.search:
            needle = self.search.strip().casefold()
            haystack = (log.description or "", log.employee_id, log.task_id, employee_name or "")
            if needle and not any(needle in value.casefold() for value in haystack):
                return False
        return True


@dataclass(frozen=True)
class LogChange:
    """
    One approval-machine transition, computed before anything is written

    The store applies `fields` only if the log is still in `before`; this is
    the conditional write that keeps two reviewers from acting on the same
    log at once.
    """
    log_id: str
    before: ApprovalStatus
    after: ApprovalStatus
    action: LogAction
    actor_id: str
    at: datetime
    remarks: Optional[str] = None
    fields: Dict[str, Any] = field(default_factory=dict)


class TaskLogStore(ABC):
    """Storage port used by the task log services"""

    # Registry reads

    @abstractmethod
    def get_employee(self, employee_id: str) -> Optional[Employee]:
        ...

    @abstractmethod
    def list_employees(self, active_only: bool = False) -> List[Employee]:
        ...

    @abstractmethod
    def get_task(self, task_id: str) -> Optional[Task]:
        ...

    @abstractmethod
    def list_tasks(self) -> List[Task]:
        ...

    @abstractmethod
    def list_assignments(self, employee_id: Optional[str] = None) -> List[Assignment]:
        ...

    # Log reads

    @abstractmethod
    def get_log(self, log_id: str) -> Optional[TaskLog]:
        ...

    @abstractmethod
    def list_logs(self, filters: Optional[LogFilters] = None) -> List[TaskLog]:
        """Logs matching filters, newest log date first"""

    @abstractmethod
    def has_logs_for(self, employee_id: str, log_date: date) -> bool:
        """True when the employee already logged anything for the date"""

    # Log writes

    @abstractmethod
    def add_submission(
        self,
        employee_id: str,
        log_date: date,
        logs: Sequence[TaskLog],
        audit: Optional[SystemAuditLog] = None,
    ) -> List[TaskLog]:
        """
        Write one day's batch for an employee

        The batch is keyed by (employee_id, log_date): the write succeeds only
        if no batch exists for that key yet.

        Raises:
            DuplicateSubmissionError: If the day was already logged
            PersistenceError: If the backend failed; nothing was written
        """

    @abstractmethod
    def apply_changes(
        self,
        changes: Sequence[LogChange],
        audit: Optional[SystemAuditLog] = None,
    ) -> List[TaskLog]:
        """
        Apply approval transitions atomically

        Raises:
            NotFoundError: If a log no longer exists
            InvalidTransitionError: If a log left its expected state meanwhile
            PersistenceError: If the backend failed; nothing was written
        """

    @abstractmethod
    def delete_log(self, log_id: str, audit: Optional[SystemAuditLog] = None) -> None:
        """Remove a log; the day opens again once its last log is gone"""

    @abstractmethod
    def import_logs(self, logs: Iterable[TaskLog]) -> int:
        """Upsert logs by id and register their days as submitted"""

    @abstractmethod
    def clear_logs(self) -> int:
        ...
