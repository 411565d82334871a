"""
Audit logging service
"""
from typing import Optional, Dict, Any, List

from sqlalchemy.orm import Session

from tasklog.models.audit_log import SystemAuditLog
from tasklog.models.employee import Employee
from tasklog.utils.datetime_utils import now_utc
from tasklog.utils.json_serializer import sanitize_for_json

SYSTEM_ACTOR_NAME = "System"


def build_audit_entry(
    actor: Optional[Employee],
    action: str,
    target: str,
    details: Optional[str] = None,
    meta: Optional[Dict[str, Any]] = None,
) -> SystemAuditLog:
    """Build an (unsaved) audit entry; a missing actor is recorded as the system"""
    return SystemAuditLog(
        actor_id=actor.id if actor is not None else None,
        actor_name=actor.name if actor is not None else SYSTEM_ACTOR_NAME,
        action_type=getattr(action, "value", action),
        target=target,
        details=details,
        meta_json=sanitize_for_json(meta) if meta is not None else None,
        # Explicitly set timestamp to avoid SQLite issues with server_default
        timestamp=now_utc(),
    )


def log_audit(
    db: Session,
    actor: Optional[Employee],
    action: str,
    target: str,
    details: Optional[str] = None,
    meta: Optional[Dict[str, Any]] = None,
    commit: bool = True,
) -> SystemAuditLog:
    """
    Create an audit log entry

    Args:
        db: Database session
        actor: Employee performing the action (None for system actions)
        action: Action type (e.g., "CREATE", "APPROVE", "IMPORT")
        target: What was acted on (e.g., "employee:E1", "task_log:LOG-E1-T1-2024-05-01")
        details: Human readable description (optional)
        meta: Additional metadata as dictionary (optional)
        commit: Commit immediately; pass False to join the caller's transaction

    Returns:
        Created SystemAuditLog instance
    """
    audit_log = build_audit_entry(actor, action, target, details, meta)
    db.add(audit_log)
    if commit:
        db.commit()
        db.refresh(audit_log)
    return audit_log


def list_audit_logs(
    db: Session,
    action_type: Optional[str] = None,
    actor_id: Optional[str] = None,
    limit: int = 200,
    offset: int = 0,
) -> List[SystemAuditLog]:
    """Newest entries first"""
    query = db.query(SystemAuditLog)
    if action_type:
        query = query.filter(SystemAuditLog.action_type == action_type)
    if actor_id:
        query = query.filter(SystemAuditLog.actor_id == actor_id)
    return (
        query.order_by(SystemAuditLog.timestamp.desc(), SystemAuditLog.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
