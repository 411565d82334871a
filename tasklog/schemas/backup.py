"""
JSON backup document schemas

Field names are camelCase on the wire ({employees, tasks, assignments, logs,
exportDate, version}) so that backups taken by earlier versions of the
application can be restored.
"""
from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator, field_serializer
from pydantic.alias_generators import to_camel

from tasklog.core.constants import BACKUP_FORMAT_VERSION
from tasklog.models.task_log import TaskType, LogStatus, ApprovalStatus
from tasklog.utils.datetime_utils import iso_8601_utc, log_date_to_instant, parse_log_date
from tasklog.utils import normalization


class BackupModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class BackupEmployee(BackupModel):
    id: str
    name: str
    job_title: Optional[str] = None
    email: Optional[str] = None
    role: str = "User"
    permissions: List[str] = []
    active: bool = True
    password_hash: Optional[str] = None
    # Plaintext password from legacy backups; hashed on restore, never written out
    password: Optional[str] = Field(default=None, exclude=True)
    last_modified: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def id_as_text(cls, v):
        return normalization.as_text(v)

    @field_validator("role", mode="before")
    @classmethod
    def canonical_role(cls, v):
        return normalization.normalize_role(v).value

    @field_validator("permissions", mode="before")
    @classmethod
    def permission_list(cls, v):
        return normalization.parse_permissions(v)

    @field_validator("active", mode="before")
    @classmethod
    def active_flag(cls, v):
        return normalization.parse_bool(v, default=True)

    @field_serializer("last_modified", when_used="json")
    def _ser_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        return iso_8601_utc(dt)


class BackupTask(BackupModel):
    id: str
    description: str
    category: str = "General"
    last_modified: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def id_as_text(cls, v):
        return normalization.as_text(v)

    @field_validator("category", mode="before")
    @classmethod
    def default_category(cls, v):
        return v or "General"

    @field_serializer("last_modified", when_used="json")
    def _ser_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        return iso_8601_utc(dt)


class BackupAssignment(BackupModel):
    id: str
    employee_id: str
    task_id: str

    @field_validator("id", "employee_id", "task_id", mode="before")
    @classmethod
    def id_as_text(cls, v):
        return normalization.as_text(v)


class BackupLog(BackupModel):
    id: str
    log_date: date
    employee_id: str
    task_id: str
    task_type: TaskType = TaskType.DAILY
    status: LogStatus = LogStatus.COMPLETED
    description: str = ""
    approval_status: ApprovalStatus = ApprovalStatus.APPROVED
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    manager_note: Optional[str] = None
    rejected_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    committed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("log_date", mode="before")
    @classmethod
    def date_part(cls, v):
        return parse_log_date(v)

    @field_validator("id", "employee_id", "task_id", mode="before")
    @classmethod
    def id_as_text(cls, v):
        return normalization.as_text(v)

    @field_validator("task_type", mode="before")
    @classmethod
    def canonical_task_type(cls, v):
        return normalization.normalize_task_type(v, default=TaskType.DAILY)

    @field_validator("status", mode="before")
    @classmethod
    def canonical_status(cls, v):
        return normalization.normalize_log_status(v, default=LogStatus.COMPLETED)

    @field_validator("approval_status", mode="before")
    @classmethod
    def canonical_approval_status(cls, v):
        return normalization.normalize_approval_status(v, default=ApprovalStatus.APPROVED)

    @field_serializer("log_date", when_used="json")
    def _ser_log_date(self, d: date) -> str:
        return log_date_to_instant(d)

    @field_serializer(
        "approved_at", "rejected_at", "committed_at", "created_at", "updated_at",
        when_used="json",
    )
    def _ser_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        return iso_8601_utc(dt)


class BackupDocument(BackupModel):
    employees: List[BackupEmployee] = []
    tasks: List[BackupTask] = []
    assignments: List[BackupAssignment] = []
    logs: List[BackupLog] = []
    export_date: Optional[datetime] = None
    version: str = BACKUP_FORMAT_VERSION

    @field_serializer("export_date", when_used="json")
    def _ser_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        return iso_8601_utc(dt)


class RestoreResult(BaseModel):
    employees: int
    tasks: int
    assignments: int
    logs: int


class ImportResult(BaseModel):
    entity: str
    imported: int
    skipped: int
