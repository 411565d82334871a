"""
Employee schemas
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator, field_serializer, ConfigDict

from tasklog.core.constants import ALL_PERMISSIONS, PERM_LOG_TASKS
from tasklog.core.security import validate_password
from tasklog.models.employee import Role


def _check_permissions(v: Optional[List[str]]) -> Optional[List[str]]:
    if v is None:
        return None
    unknown = [p for p in v if p not in ALL_PERMISSIONS]
    if unknown:
        raise ValueError(f"Unknown permissions: {unknown}. Allowed: {list(ALL_PERMISSIONS)}")
    # keep order, drop duplicates
    return list(dict.fromkeys(v))


class EmployeeCreate(BaseModel):
    """Schema for creating an employee"""
    id: str = Field(..., min_length=1, description="Employee id (unique, used to log in)")
    name: str = Field(..., min_length=1, description="Employee name")
    job_title: Optional[str] = Field(None, description="Job title")
    email: Optional[str] = Field(None, description="Email address")
    role: Role = Field(default=Role.USER, description="Employee role")
    permissions: List[str] = Field(default_factory=lambda: [PERM_LOG_TASKS], description="Granted permissions")
    password: str = Field(..., description="Initial password")
    active: bool = Field(default=True, description="Employee active status")

    @field_validator("id", "name", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("permissions")
    @classmethod
    def validate_permissions(cls, v):
        return _check_permissions(v)

    @field_validator("password", mode="before")
    @classmethod
    def validate_password(cls, v):
        """Normalize and validate password"""
        return validate_password(v)


class EmployeeUpdate(BaseModel):
    """Schema for updating an employee"""
    name: Optional[str] = Field(None, min_length=1, description="Employee name")
    job_title: Optional[str] = Field(None, description="Job title")
    email: Optional[str] = Field(None, description="Email address")
    role: Optional[Role] = Field(None, description="Employee role")
    permissions: Optional[List[str]] = Field(None, description="Granted permissions")
    active: Optional[bool] = Field(None, description="Employee active status")
    password: Optional[str] = Field(None, description="New password (admin reset)")

    @field_validator("permissions")
    @classmethod
    def validate_permissions(cls, v):
        return _check_permissions(v)

    @field_validator("password", mode="before")
    @classmethod
    def validate_password(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return validate_password(v)


class EmployeeOut(BaseModel):
    """Schema for employee output (never includes the password hash)"""
    id: str
    name: str
    job_title: Optional[str] = None
    email: Optional[str] = None
    role: str
    permissions: List[str] = []
    active: bool
    last_modified: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("last_modified", when_used="always")
    def _ser_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        from tasklog.utils.datetime_utils import iso_8601_utc
        return iso_8601_utc(dt)
