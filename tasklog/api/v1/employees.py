"""
Employee management endpoints (reviewers only, except /me)
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tasklog.core.deps import get_db, get_current_user, require_reviewer
from tasklog.models.employee import Employee
from tasklog.schemas.employee import EmployeeCreate, EmployeeUpdate, EmployeeOut
from tasklog.services.employee_service import (
    create_employee,
    list_employees,
    get_employee,
    update_employee,
    delete_employee,
)

router = APIRouter()


@router.post("", response_model=EmployeeOut, status_code=201)
async def create_employee_endpoint(
    employee_data: EmployeeCreate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_reviewer)
):
    """Create a new employee"""
    return create_employee(db, employee_data, current_user)


@router.get("/me", response_model=EmployeeOut)
async def get_me_endpoint(current_user: Employee = Depends(get_current_user)):
    """Current authenticated user's profile"""
    return current_user


@router.get("", response_model=List[EmployeeOut])
async def list_employees_endpoint(
    active: Optional[bool] = Query(None, description="Filter by active status"),
    search: Optional[str] = Query(None, description="Search id, name or job title"),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_reviewer)
):
    return list_employees(db, active=active, search=search)


@router.get("/{employee_id}", response_model=EmployeeOut)
async def get_employee_endpoint(
    employee_id: str,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_reviewer)
):
    return get_employee(db, employee_id)


@router.patch("/{employee_id}", response_model=EmployeeOut)
async def update_employee_endpoint(
    employee_id: str,
    employee_data: EmployeeUpdate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_reviewer)
):
    return update_employee(db, employee_id, employee_data, current_user)


@router.delete("/{employee_id}", status_code=204)
async def delete_employee_endpoint(
    employee_id: str,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_reviewer)
):
    """Delete an employee and their assignments; their logs are kept"""
    delete_employee(db, employee_id, current_user)
