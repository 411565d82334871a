"""
Task catalogue endpoints
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tasklog.core.deps import get_db, get_current_user, require_reviewer
from tasklog.models.employee import Employee
from tasklog.schemas.task import TaskCreate, TaskUpdate, TaskOut
from tasklog.services import task_service

router = APIRouter()


@router.get("", response_model=List[TaskOut])
async def list_tasks_endpoint(
    category: Optional[str] = Query(None, description="Filter by category"),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user)
):
    return task_service.list_tasks(db, category=category)


@router.post("", response_model=TaskOut, status_code=201)
async def create_task_endpoint(
    task_data: TaskCreate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_reviewer)
):
    return task_service.create_task(db, task_data, current_user)


@router.patch("/{task_id}", response_model=TaskOut)
async def update_task_endpoint(
    task_id: str,
    task_data: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_reviewer)
):
    """Edit a task; submitted logs keep their original description"""
    return task_service.update_task(db, task_id, task_data, current_user)


@router.delete("/{task_id}", status_code=204)
async def delete_task_endpoint(
    task_id: str,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_reviewer)
):
    task_service.delete_task(db, task_id, current_user)
