"""
Employee model
"""
from sqlalchemy import Column, String, Boolean, DateTime, JSON
from sqlalchemy.sql import func
import enum
from tasklog.db.base import Base


class Role(str, enum.Enum):
    ADMIN = "Admin"
    USER = "User"


class Employee(Base):
    __tablename__ = "employees"

    # The employee id doubles as the login name
    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    job_title = Column(String, nullable=True)
    email = Column(String, nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    role = Column(String, default=Role.USER.value, nullable=False)
    permissions = Column(JSON, default=list, nullable=False)
    password_hash = Column(String, nullable=True)
    last_modified = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
