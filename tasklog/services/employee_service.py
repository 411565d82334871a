"""
Employee service - business logic for employee management
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from tasklog.core.errors import NotFoundError, ValidationError, AuthorizationError
from tasklog.core.security import hash_password
from tasklog.models.audit_log import AuditAction
from tasklog.models.employee import Employee
from tasklog.schemas.employee import EmployeeCreate, EmployeeUpdate
from tasklog.services.audit_service import log_audit
from tasklog.services.registry import task_sort_key
from tasklog.utils.datetime_utils import now_utc

logger = logging.getLogger(__name__)


def get_employee(db: Session, employee_id: str) -> Employee:
    employee = db.query(Employee).filter(Employee.id == employee_id).first()
    if not employee:
        raise NotFoundError(f"Employee with id '{employee_id}' not found")
    return employee


def list_employees(db: Session, active: Optional[bool] = None, search: Optional[str] = None) -> List[Employee]:
    """
    List employees ordered by id (numeric-aware)

    Args:
        db: Database session
        active: Only active (True) or inactive (False) employees
        search: Case-insensitive match on id, name or job title
    """
    query = db.query(Employee)
    if active is not None:
        query = query.filter(Employee.active == active)
    employees = query.all()
    if search and search.strip():
        needle = search.strip().casefold()
        employees = [
            e for e in employees
            if any(needle in (value or "").casefold() for value in (e.id, e.name, e.job_title))
        ]
    return sorted(employees, key=lambda e: task_sort_key(e.id))


def create_employee(db: Session, employee_data: EmployeeCreate, actor: Employee) -> Employee:
    """
    Create a new employee

    Raises:
        ValidationError: If the employee id is already taken
    """
    existing = db.query(Employee).filter(Employee.id == employee_data.id).first()
    if existing:
        raise ValidationError(f"Employee with id '{employee_data.id}' already exists")

    employee = Employee(
        id=employee_data.id,
        name=employee_data.name,
        job_title=employee_data.job_title,
        email=employee_data.email,
        role=employee_data.role.value,
        permissions=list(employee_data.permissions),
        active=employee_data.active,
        password_hash=hash_password(employee_data.password),
        last_modified=now_utc(),
    )
    db.add(employee)
    db.commit()
    db.refresh(employee)

    log_audit(
        db,
        actor,
        AuditAction.CREATE,
        f"employee:{employee.id}",
        details=f"Created employee {employee.name}",
        meta={"role": employee.role, "permissions": employee.permissions},
    )
    return employee


def update_employee(db: Session, employee_id: str, employee_data: EmployeeUpdate, actor: Employee) -> Employee:
    """
    Update an employee; only fields present in the request change

    Raises:
        NotFoundError: If the employee does not exist
        AuthorizationError: If an admin tries to deactivate or demote themselves
    """
    employee = get_employee(db, employee_id)
    update_data = employee_data.model_dump(exclude_unset=True)

    if employee.id == actor.id:
        if update_data.get("active") is False:
            raise AuthorizationError("You cannot deactivate your own account")
        if "role" in update_data and update_data["role"] is not None and update_data["role"].value != employee.role:
            raise AuthorizationError("You cannot change your own role")

    password = update_data.pop("password", None)
    changed = sorted(update_data.keys())
    for field, value in update_data.items():
        if value is None and field in ("name", "role", "permissions", "active"):
            continue
        if field == "role":
            value = value.value
        if field == "permissions":
            value = list(value)
        setattr(employee, field, value)
    if password:
        employee.password_hash = hash_password(password)
        changed.append("password")

    employee.last_modified = now_utc()
    db.commit()
    db.refresh(employee)

    log_audit(
        db,
        actor,
        AuditAction.UPDATE,
        f"employee:{employee.id}",
        details=f"Updated fields: {', '.join(changed) or 'none'}",
    )
    return employee


def delete_employee(db: Session, employee_id: str, actor: Employee) -> None:
    """
    Delete an employee and their assignments

    Their task logs are kept as history.
    """
    employee = get_employee(db, employee_id)
    if employee.id == actor.id:
        raise AuthorizationError("You cannot delete your own account")
    name = employee.name
    db.delete(employee)
    db.commit()
    logger.info("employee deleted: employee_id=%s actor_id=%s", employee_id, actor.id)
    log_audit(db, actor, AuditAction.DELETE, f"employee:{employee_id}", details=f"Deleted employee {name}")
