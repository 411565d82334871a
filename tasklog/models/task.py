"""
Task and assignment models
"""
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship, backref
from sqlalchemy.sql import func
from tasklog.db.base import Base


class Task(Base):
    __tablename__ = "tasks"

    id = Column(String, primary_key=True, index=True)
    description = Column(Text, nullable=False)
    category = Column(String, default="General", nullable=False)
    last_modified = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)

    assignments = relationship("Assignment", back_populates="task", cascade="all, delete-orphan")


class Assignment(Base):
    """An employee is expected to report on this task every work day"""
    __tablename__ = "assignments"

    id = Column(String, primary_key=True, index=True)
    employee_id = Column(String, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    task_id = Column(String, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)

    task = relationship("Task", back_populates="assignments")
    employee = relationship("Employee", backref=backref("assignments", cascade="all, delete-orphan"))

    __table_args__ = (
        UniqueConstraint("employee_id", "task_id", name="uq_assignments_employee_task"),
    )
