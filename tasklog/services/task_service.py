"""
Task service - task catalogue and employee assignments
"""
import logging
import uuid
from typing import List, Optional

from sqlalchemy.orm import Session

from tasklog.core.constants import EXTRA_TASK_ID, LEAVE_TASK_ID
from tasklog.core.errors import NotFoundError, ValidationError
from tasklog.models.audit_log import AuditAction
from tasklog.models.employee import Employee
from tasklog.models.task import Task, Assignment
from tasklog.schemas.task import TaskCreate, TaskUpdate, AssignmentCreate
from tasklog.services.audit_service import log_audit
from tasklog.services.registry import task_sort_key
from tasklog.utils.datetime_utils import now_utc

logger = logging.getLogger(__name__)


def new_assignment_id() -> str:
    return f"ASG-{uuid.uuid4().hex[:12]}"


def get_task(db: Session, task_id: str) -> Task:
    task = db.query(Task).filter(Task.id == task_id).first()
    if not task:
        raise NotFoundError(f"Task with id '{task_id}' not found")
    return task


def list_tasks(db: Session, category: Optional[str] = None) -> List[Task]:
    query = db.query(Task)
    if category:
        query = query.filter(Task.category == category)
    return sorted(query.all(), key=lambda t: task_sort_key(t.id))


def create_task(db: Session, task_data: TaskCreate, actor: Employee) -> Task:
    """
    Create a task

    Raises:
        ValidationError: If the task id is taken or is a reserved id
    """
    if task_data.id.upper() in (EXTRA_TASK_ID, LEAVE_TASK_ID):
        raise ValidationError(f"Task id '{task_data.id}' is reserved")
    if db.query(Task).filter(Task.id == task_data.id).first():
        raise ValidationError(f"Task with id '{task_data.id}' already exists")

    task = Task(
        id=task_data.id,
        description=task_data.description,
        category=task_data.category or "General",
        last_modified=now_utc(),
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    log_audit(db, actor, AuditAction.CREATE, f"task:{task.id}", details=task.description)
    return task


def update_task(db: Session, task_id: str, task_data: TaskUpdate, actor: Employee) -> Task:
    """
    Update a task description or category

    Logs already submitted keep the description they were written with.
    """
    task = get_task(db, task_id)
    update_data = task_data.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in update_data.items():
        setattr(task, field, value.strip() if isinstance(value, str) else value)
    task.last_modified = now_utc()
    db.commit()
    db.refresh(task)
    log_audit(
        db,
        actor,
        AuditAction.UPDATE,
        f"task:{task.id}",
        details=f"Updated fields: {', '.join(sorted(update_data)) or 'none'}",
    )
    return task


def delete_task(db: Session, task_id: str, actor: Employee) -> None:
    """Delete a task and every assignment to it"""
    task = get_task(db, task_id)
    db.delete(task)
    db.commit()
    logger.info("task deleted: task_id=%s actor_id=%s", task_id, actor.id)
    log_audit(db, actor, AuditAction.DELETE, f"task:{task_id}")


def list_assignments(
    db: Session,
    employee_id: Optional[str] = None,
    task_id: Optional[str] = None,
) -> List[Assignment]:
    query = db.query(Assignment)
    if employee_id:
        query = query.filter(Assignment.employee_id == employee_id)
    if task_id:
        query = query.filter(Assignment.task_id == task_id)
    return sorted(query.all(), key=lambda a: (task_sort_key(a.employee_id), task_sort_key(a.task_id)))


def create_assignment(db: Session, data: AssignmentCreate, actor: Employee) -> Assignment:
    """
    Assign a task to an employee

    Raises:
        NotFoundError: If the employee or task does not exist
        ValidationError: If the task is already assigned to the employee
    """
    if not db.query(Employee).filter(Employee.id == data.employee_id).first():
        raise NotFoundError(f"Employee with id '{data.employee_id}' not found")
    get_task(db, data.task_id)

    existing = db.query(Assignment).filter(
        Assignment.employee_id == data.employee_id,
        Assignment.task_id == data.task_id,
    ).first()
    if existing:
        raise ValidationError(f"Task '{data.task_id}' is already assigned to employee '{data.employee_id}'")

    assignment = Assignment(id=new_assignment_id(), employee_id=data.employee_id, task_id=data.task_id)
    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    log_audit(
        db,
        actor,
        AuditAction.CREATE,
        f"assignment:{assignment.id}",
        details=f"Assigned {data.task_id} to {data.employee_id}",
    )
    return assignment


def delete_assignment(db: Session, assignment_id: str, actor: Employee) -> None:
    assignment = db.query(Assignment).filter(Assignment.id == assignment_id).first()
    if not assignment:
        raise NotFoundError(f"Assignment with id '{assignment_id}' not found")
    details = f"Unassigned {assignment.task_id} from {assignment.employee_id}"
    db.delete(assignment)
    db.commit()
    log_audit(db, actor, AuditAction.DELETE, f"assignment:{assignment_id}", details=details)
