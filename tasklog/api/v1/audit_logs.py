"""
System audit log endpoints
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tasklog.core.deps import get_db, require_reviewer
from tasklog.models.audit_log import AuditAction
from tasklog.models.employee import Employee
from tasklog.schemas.audit import AuditLogOut
from tasklog.services.audit_service import list_audit_logs

router = APIRouter()


@router.get("", response_model=List[AuditLogOut])
async def list_audit_logs_endpoint(
    action_type: Optional[AuditAction] = Query(None, description="Filter by action type"),
    actor_id: Optional[str] = Query(None, description="Filter by actor"),
    limit: int = Query(200, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_reviewer)
):
    """Newest entries first"""
    return list_audit_logs(
        db,
        action_type=action_type.value if action_type else None,
        actor_id=actor_id,
        limit=limit,
        offset=offset,
    )
