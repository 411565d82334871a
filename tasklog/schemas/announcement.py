"""
Announcement schemas
"""
from datetime import datetime
from typing import List
from pydantic import BaseModel, Field, field_serializer, model_validator, ConfigDict

from tasklog.models.announcement import AnnouncementPriority, AnnouncementTarget
from tasklog.utils.datetime_utils import iso_8601_utc


class AnnouncementCreate(BaseModel):
    title: str = Field(..., min_length=1, description="Headline")
    content: str = Field(..., min_length=1, description="Body text")
    priority: AnnouncementPriority = Field(default=AnnouncementPriority.NORMAL)
    target_type: AnnouncementTarget = Field(default=AnnouncementTarget.ALL)
    target_employee_ids: List[str] = Field(default_factory=list, description="Recipients when target_type is Specific")

    @model_validator(mode="after")
    def check_targets(self):
        if self.target_type == AnnouncementTarget.SPECIFIC and not self.target_employee_ids:
            raise ValueError("target_employee_ids is required when target_type is Specific")
        if self.target_type == AnnouncementTarget.ALL:
            self.target_employee_ids = []
        return self


class ReplyCreate(BaseModel):
    content: str = Field(..., min_length=1, description="Reply text")


class ReplyOut(BaseModel):
    id: int
    author_id: str
    author_name: str
    content: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", when_used="always")
    def _ser_created_at(self, dt: datetime) -> str:
        return iso_8601_utc(dt) or ""


class AnnouncementOut(BaseModel):
    id: int
    title: str
    content: str
    priority: AnnouncementPriority
    created_by: str
    target_type: AnnouncementTarget
    target_employee_ids: List[str] = []
    likes: List[str] = []
    archived: bool
    created_at: datetime
    replies: List[ReplyOut] = []

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", when_used="always")
    def _ser_created_at(self, dt: datetime) -> str:
        return iso_8601_utc(dt) or ""
