"""
System audit log model
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, JSON
import enum
from tasklog.db.base import Base


class AuditAction(str, enum.Enum):
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    IMPORT = "IMPORT"
    EXPORT = "EXPORT"
    CLEAR = "CLEAR"
    SUBMIT = "SUBMIT"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    COMMIT = "COMMIT"
    ANNOUNCE = "ANNOUNCE"


class SystemAuditLog(Base):
    """Append-only record of administrative and authentication actions"""
    __tablename__ = "system_audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    actor_id = Column(String, nullable=True, index=True)
    actor_name = Column(String, nullable=False)
    action_type = Column(String, nullable=False)
    target = Column(String, nullable=False)
    details = Column(Text, nullable=True)
    meta_json = Column(JSON, nullable=True)
    # Set explicitly by the service to avoid SQLite issues with server_default
    timestamp = Column(DateTime(timezone=True), nullable=False, index=True)
