"""
Audit log schemas
"""
from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, field_serializer, ConfigDict

from tasklog.utils.datetime_utils import iso_8601_utc


class AuditLogOut(BaseModel):
    id: int
    actor_id: Optional[str] = None
    actor_name: str
    action_type: str
    target: str
    details: Optional[str] = None
    meta_json: Optional[Any] = None
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("timestamp", when_used="always")
    def _ser_timestamp(self, dt: datetime) -> str:
        return iso_8601_utc(dt) or ""
