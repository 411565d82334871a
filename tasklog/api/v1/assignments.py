"""
Assignment endpoints
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tasklog.core.deps import get_db, require_reviewer
from tasklog.models.employee import Employee
from tasklog.schemas.task import AssignmentCreate, AssignmentOut
from tasklog.services import task_service

router = APIRouter()


@router.get("", response_model=List[AssignmentOut])
async def list_assignments_endpoint(
    employee_id: Optional[str] = Query(None, description="Filter by employee"),
    task_id: Optional[str] = Query(None, description="Filter by task"),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_reviewer)
):
    return task_service.list_assignments(db, employee_id=employee_id, task_id=task_id)


@router.post("", response_model=AssignmentOut, status_code=201)
async def create_assignment_endpoint(
    data: AssignmentCreate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_reviewer)
):
    return task_service.create_assignment(db, data, current_user)


@router.delete("/{assignment_id}", status_code=204)
async def delete_assignment_endpoint(
    assignment_id: str,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_reviewer)
):
    task_service.delete_assignment(db, assignment_id, current_user)
