"""
Admin maintenance endpoints
"""
from enum import Enum
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from tasklog.core.deps import get_db, get_current_user
from tasklog.models.employee import Employee
from tasklog.services.exchange_service import clear_data
from tasklog.utils.roles import is_admin

router = APIRouter()


class ClearScope(str, Enum):
    LOGS = "logs"
    EMPLOYEES = "employees"


def require_admin(current_user: Employee = Depends(get_current_user)) -> Employee:
    if not is_admin(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Admin role required."
        )
    return current_user


@router.post("/clear")
async def clear_endpoint(
    scope: ClearScope = Query(..., description="logs: every task log; employees: everyone but you"),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_admin)
):
    """Bulk delete; cannot be undone"""
    count = clear_data(db, scope.value, current_user)
    return {"scope": scope.value, "deleted": count}
