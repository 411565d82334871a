"""
Authentication endpoints
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from tasklog.core.constants import ALL_PERMISSIONS
from tasklog.core.deps import get_db, get_current_user
from tasklog.core.security import verify_password, create_access_token, hash_password, validate_password
from tasklog.models.audit_log import AuditAction
from tasklog.models.employee import Employee
from tasklog.schemas.auth import LoginRequest, TokenResponse, ChangePasswordRequest
from tasklog.services.audit_service import log_audit
from tasklog.utils.datetime_utils import now_utc
from tasklog.utils.roles import is_admin

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    db: Session = Depends(get_db)
):
    """
    Authenticate user and return JWT token

    Validates employee id and password, rejects inactive employees.
    """
    employee = db.query(Employee).filter(Employee.id == login_data.employee_id.strip()).first()

    if not employee:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid employee id or password"
        )

    if not employee.active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive"
        )

    if employee.password_hash is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No password set for this account"
        )

    if not verify_password(login_data.password, employee.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid employee id or password"
        )

    # JWT 'sub' claim must be a string (RFC 7519)
    token_data = {
        "sub": employee.id,
        "role": employee.role,
    }
    access_token = create_access_token(data=token_data)

    log_audit(db, employee, AuditAction.LOGIN, f"employee:{employee.id}", details="Logged in")

    permissions = list(ALL_PERMISSIONS) if is_admin(employee) else list(employee.permissions or [])
    return TokenResponse(
        access_token=access_token,
        token_type="bearer",
        employee_id=employee.id,
        name=employee.name,
        role=employee.role,
        permissions=permissions,
    )


@router.post("/logout")
async def logout(
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user)
):
    """Record the logout; tokens expire on their own"""
    log_audit(db, current_user, AuditAction.LOGOUT, f"employee:{current_user.id}", details="Logged out")
    return {"detail": "Logged out"}


@router.post("/change-password")
async def change_password(
    data: ChangePasswordRequest,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user)
):
    """Change own password after confirming the current one"""
    if not verify_password(data.current_password, current_user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Current password is incorrect"
        )
    try:
        new_password = validate_password(data.new_password)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    current_user.password_hash = hash_password(new_password)
    current_user.last_modified = now_utc()
    db.commit()
    logger.info("password changed: employee_id=%s", current_user.id)
    log_audit(db, current_user, AuditAction.UPDATE, f"employee:{current_user.id}", details="Changed password")
    return {"detail": "Password changed"}
