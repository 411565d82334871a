"""
Task and assignment schemas
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator, field_serializer, ConfigDict

from tasklog.utils.datetime_utils import iso_8601_utc


class TaskCreate(BaseModel):
    id: str = Field(..., min_length=1, description="Task id (unique), e.g. T1")
    description: str = Field(..., min_length=1, description="What has to be done")
    category: str = Field(default="General", description="Task category")

    @field_validator("id", "description", "category", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


class TaskUpdate(BaseModel):
    description: Optional[str] = Field(None, min_length=1, description="What has to be done")
    category: Optional[str] = Field(None, min_length=1, description="Task category")


class TaskOut(BaseModel):
    id: str
    description: str
    category: str
    last_modified: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("last_modified", when_used="always")
    def _ser_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        return iso_8601_utc(dt)


class AssignmentCreate(BaseModel):
    employee_id: str = Field(..., min_length=1, description="Employee id")
    task_id: str = Field(..., min_length=1, description="Task id")


class AssignmentOut(BaseModel):
    id: str
    employee_id: str
    task_id: str

    model_config = ConfigDict(from_attributes=True)
