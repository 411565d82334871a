"""
Task log schemas
"""
from datetime import date, datetime
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, field_serializer, ConfigDict

from tasklog.models.task_log import TaskType, LogStatus, ApprovalStatus, LeaveKind, LogAction
from tasklog.utils.datetime_utils import iso_8601_utc


class SubmitLogsRequest(BaseModel):
    """One day's report: a decision per assigned task plus any extra work"""
    log_date: date = Field(..., description="Calendar date being reported")
    decisions: Dict[str, LogStatus] = Field(
        default_factory=dict,
        description="Status per assigned task id (Completed, Pending or NotApplicable)"
    )
    extra_tasks: List[str] = Field(default_factory=list, description="Descriptions of extra work done")


class LeaveSubmitRequest(BaseModel):
    log_date: date = Field(..., description="Calendar date of the absence")
    kind: LeaveKind = Field(..., description="Weekly rest day or official/sick leave")


class RejectRequest(BaseModel):
    reason: str = Field(..., description="Why the log is rejected; shown to the employee")


class CommitRequest(BaseModel):
    remarks: Optional[str] = Field(None, description="Optional explanation for the reviewer")


class BulkApproveRequest(BaseModel):
    """Filters selecting the PendingApproval logs to approve"""
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    employee_id: Optional[str] = None
    search: Optional[str] = None


class BulkApproveResponse(BaseModel):
    approved_count: int
    log_ids: List[str]


class TaskLogActionOut(BaseModel):
    action: LogAction
    action_by: str
    remarks: Optional[str] = None
    action_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("action_at", when_used="always")
    def _ser_action_at(self, dt: datetime) -> str:
        return iso_8601_utc(dt) or ""


class TaskLogOut(BaseModel):
    id: str
    log_date: date
    employee_id: str
    task_id: str
    task_type: TaskType
    status: LogStatus
    description: str
    approval_status: ApprovalStatus
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    manager_note: Optional[str] = None
    rejected_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    committed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer(
        "approved_at", "rejected_at", "committed_at", "created_at", "updated_at",
        when_used="always",
    )
    def _ser_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        return iso_8601_utc(dt)


class TaskLogDetailOut(TaskLogOut):
    """Log with its review history"""
    actions: List[TaskLogActionOut] = []


class ChecklistItem(BaseModel):
    task_id: str
    description: str
    category: Optional[str] = None


class ChecklistOut(BaseModel):
    log_date: date
    is_rest_day: bool
    already_submitted: bool
    tasks: List[ChecklistItem]
