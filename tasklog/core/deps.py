"""
Dependencies and guards for FastAPI endpoints
"""
from typing import Generator
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from tasklog.db.session import SessionLocal
from tasklog.core.security import decode_token
from tasklog.models.employee import Employee
from tasklog.repositories.base import TaskLogStore
from tasklog.repositories.sqlalchemy_store import SqlAlchemyStore
from tasklog.utils.roles import has_permission, is_reviewer


security = HTTPBearer()


def get_db() -> Generator:
    """Dependency for getting database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_store(db: Session = Depends(get_db)) -> TaskLogStore:
    """Task log store bound to the request's database session"""
    return SqlAlchemyStore(db)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> Employee:
    """
    Get current authenticated user from JWT token
    """
    token = credentials.credentials

    try:
        payload = decode_token(token)
        employee_id = payload.get("sub")
        if not employee_id:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid authentication credentials",
                headers={"WWW-Authenticate": "Bearer"},
            )
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    employee = db.query(Employee).filter(Employee.id == str(employee_id)).first()
    if employee is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not employee.active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user"
        )

    return employee


def require_reviewer(current_user: Employee = Depends(get_current_user)) -> Employee:
    """Admins and holders of manage_system"""
    if not is_reviewer(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Reviewer (Admin or manage_system) required."
        )
    return current_user


def require_permission(permission: str):
    """
    Dependency factory for permission-based access control

    Usage:
        @router.get("/reports")
        async def reports(user: Employee = Depends(require_permission("view_reports"))):
            ...
    """
    def permission_checker(current_user: Employee = Depends(get_current_user)) -> Employee:
        if not has_permission(current_user, permission):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required permission: {permission}"
            )
        return current_user
    return permission_checker
