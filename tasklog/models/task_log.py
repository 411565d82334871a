"""
Task log models
"""
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Date,
    DateTime,
    ForeignKey,
    Enum as SQLEnum,
    Index,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
import enum
from tasklog.db.base import Base


class TaskType(str, enum.Enum):
    DAILY = "Daily"
    EXTRA = "Extra"


class LogStatus(str, enum.Enum):
    COMPLETED = "Completed"
    PENDING = "Pending"
    NOT_APPLICABLE = "NotApplicable"
    LEAVE = "Leave"


class ApprovalStatus(str, enum.Enum):
    PENDING_APPROVAL = "PendingApproval"
    COMMITMENT_PENDING = "CommitmentPending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class LogAction(str, enum.Enum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    COMMIT = "COMMIT"


class LeaveKind(str, enum.Enum):
    WEEKLY = "Weekly"
    OFFICIAL = "Official"
    SICK = "Sick"


LEAVE_LABELS = {
    LeaveKind.WEEKLY: "عطلة أسبوعية",
    LeaveKind.OFFICIAL: "إجازة رسمية/مرضية",
    LeaveKind.SICK: "إجازة رسمية/مرضية",
}

# States a reviewer may still act on
REVIEWABLE_STATUSES = frozenset({
    ApprovalStatus.PENDING_APPROVAL,
    ApprovalStatus.COMMITMENT_PENDING,
})


def _enum_type(enum_cls, name: str) -> SQLEnum:
    # Persist the enum values ("PendingApproval"), not the member names
    return SQLEnum(
        enum_cls,
        name=name,
        native_enum=False,
        length=32,
        values_callable=lambda members: [m.value for m in members],
    )


class TaskLog(Base):
    __tablename__ = "task_logs"

    id = Column(String, primary_key=True, index=True)
    log_date = Column(Date, nullable=False, index=True)
    # Plain columns, not foreign keys: logs outlive the employee and task they describe
    employee_id = Column(String, nullable=False, index=True)
    task_id = Column(String, nullable=False)
    task_type = Column(_enum_type(TaskType, "tasktype"), nullable=False)
    status = Column(_enum_type(LogStatus, "logstatus"), nullable=False)
    description = Column(Text, nullable=False, default="")
    approval_status = Column(
        _enum_type(ApprovalStatus, "approvalstatus"),
        nullable=False,
        default=ApprovalStatus.PENDING_APPROVAL,
    )
    approved_by = Column(String, nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    manager_note = Column(Text, nullable=True)
    rejected_by = Column(String, nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)
    committed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    actions = relationship(
        "TaskLogAction",
        back_populates="task_log",
        cascade="all, delete-orphan",
        order_by="TaskLogAction.id",
    )

    __table_args__ = (
        Index("ix_task_logs_employee_date", "employee_id", "log_date"),
    )


class TaskLogAction(Base):
    """History of review actions taken on a task log"""
    __tablename__ = "task_log_actions"

    id = Column(Integer, primary_key=True, index=True)
    task_log_id = Column(String, ForeignKey("task_logs.id", ondelete="CASCADE"), nullable=False, index=True)
    action = Column(_enum_type(LogAction, "logaction"), nullable=False)
    action_by = Column(String, nullable=False)
    remarks = Column(Text, nullable=True)
    action_at = Column(DateTime(timezone=True), nullable=False)

    task_log = relationship("TaskLog", back_populates="actions")


class DailySubmission(Base):
    """
    One row per employee per logged calendar day.

    The unique constraint is the backend-enforced idempotency key for a day's
    batch: two concurrent submissions for the same day cannot both commit.
    """
    __tablename__ = "daily_submissions"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(String, nullable=False, index=True)
    log_date = Column(Date, nullable=False)
    submitted_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("employee_id", "log_date", name="uq_daily_submissions_employee_date"),
    )
