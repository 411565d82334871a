"""
Exchange service - spreadsheet import/export and JSON backup/restore
"""
import logging
from functools import partial
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tasklog.core.constants import PERM_LOG_TASKS, EXTRA_TASK_ID, LEAVE_TASK_ID
from tasklog.core.errors import ValidationError, PersistenceError
from tasklog.core.security import hash_password, validate_password
from tasklog.models.audit_log import AuditAction
from tasklog.models.employee import Employee, Role
from tasklog.models.task import Task, Assignment
from tasklog.models.task_log import TaskLog, TaskType, LogStatus, ApprovalStatus
from tasklog.repositories.base import LogFilters
from tasklog.repositories.sqlalchemy_store import SqlAlchemyStore
from tasklog.schemas.backup import (
    BackupDocument,
    BackupEmployee,
    BackupTask,
    BackupAssignment,
    BackupLog,
    ImportResult,
    RestoreResult,
)
from tasklog.services.audit_service import log_audit
from tasklog.services.registry import task_sort_key
from tasklog.services.submission_rules import daily_log_id, extra_log_id, leave_log_id
from tasklog.services.task_service import new_assignment_id
from tasklog.utils import normalization
from tasklog.utils.datetime_utils import now_utc, parse_instant, parse_log_date, ensure_utc

logger = logging.getLogger(__name__)

# Error messages listed back to the uploader
MAX_REPORTED_ERRORS = 10

LOG_EXPORT_HEADERS = [
    "التاريخ",
    "الوقت",
    "رقم الموظف",
    "اسم الموظف",
    "رقم المهمة",
    "نوع المهمة",
    "وصف المهمة",
    "الحالة",
    "حالة الاعتماد",
    "ملاحظات",
]
LOG_EXPORT_SHEET = "سجل المهام"
UNKNOWN_EMPLOYEE = "غير معروف"


# Spreadsheet export

def log_export_rows(logs: Sequence[TaskLog], employee_names: Mapping[str, str]) -> List[Dict[str, Any]]:
    """One row per log with Arabic headers and labels"""
    rows = []
    for log in logs:
        created = ensure_utc(log.created_at)
        if log.task_id == LEAVE_TASK_ID:
            type_label = normalization.LEAVE_TYPE_LABEL
        else:
            type_label = normalization.TASK_TYPE_LABELS[log.task_type]
        rows.append({
            "التاريخ": log.log_date.isoformat(),
            "الوقت": created.strftime("%H:%M") if created else "",
            "رقم الموظف": log.employee_id,
            "اسم الموظف": employee_names.get(log.employee_id, UNKNOWN_EMPLOYEE),
            "رقم المهمة": log.task_id,
            "نوع المهمة": type_label,
            "وصف المهمة": log.description,
            "الحالة": normalization.LOG_STATUS_LABELS[log.status],
            "حالة الاعتماد": normalization.APPROVAL_STATUS_LABELS[log.approval_status],
            "ملاحظات": log.manager_note or "",
        })
    return rows


def export_log_rows(db: Session, filters: Optional[LogFilters] = None) -> List[Dict[str, Any]]:
    store = SqlAlchemyStore(db)
    names = {e.id: e.name for e in store.list_employees()}
    return log_export_rows(store.list_logs(filters), names)


# Spreadsheet import

REQUIRED_FIELDS = {
    "employees": ("id", "name"),
    "tasks": ("id", "description"),
    "assignments": ("employee_id", "task_id"),
    "logs": ("employee_id",),
}


def parse_rows(entity: str, rows: Sequence[Mapping[str, Any]]) -> Tuple[List[Dict[str, Any]], int]:
    """
    Normalize raw rows and drop the ones missing required columns

    Returns:
        (normalized rows, number of skipped rows)
    """
    fields_list = []
    skipped = 0
    for row in rows:
        fields = normalization.extract_fields(row, entity)
        if all(fields.get(name) not in (None, "") for name in REQUIRED_FIELDS[entity]):
            fields_list.append(fields)
        else:
            skipped += 1
    return fields_list, skipped


def _employee_values(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Column values for the cells present in the row"""
    values = {
        "id": normalization.as_text(fields["id"]),
        "name": normalization.as_text(fields["name"]),
    }
    if "job_title" in fields:
        values["job_title"] = normalization.as_text(fields["job_title"])
    if "email" in fields:
        values["email"] = normalization.as_text(fields["email"])
    if "role" in fields:
        values["role"] = normalization.normalize_role(fields["role"]).value
    if "active" in fields:
        values["active"] = normalization.parse_bool(fields["active"])
    if "permissions" in fields:
        values["permissions"] = normalization.parse_permissions(fields["permissions"])
    if "password" in fields:
        values["password_hash"] = hash_password(validate_password(normalization.as_text(fields["password"])))
    elif "password_hash" in fields:
        values["password_hash"] = normalization.as_text(fields["password_hash"])
    return values


def _task_values(fields: Dict[str, Any]) -> Dict[str, Any]:
    values = {
        "id": normalization.as_text(fields["id"]),
        "description": normalization.as_text(fields["description"]),
    }
    if "category" in fields:
        values["category"] = normalization.as_text(fields["category"])
    return values


def _assignment_values(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": normalization.as_text(fields.get("id")) or None,
        "employee_id": normalization.as_text(fields["employee_id"]),
        "task_id": normalization.as_text(fields["task_id"]),
    }


def _log_from_row(fields: Dict[str, Any], imported_by: str) -> TaskLog:
    """
    Build a log from an import row

    Approved rows always carry an approver and an approval time: the row's own
    values when present, otherwise the importing reviewer and the import time.
    """
    log_date = parse_log_date(fields.get("log_date"))
    if log_date is None:
        raise ValueError("date is required")
    employee_id = normalization.as_text(fields["employee_id"])
    task_type = normalization.normalize_task_type(fields.get("task_type"), default=TaskType.DAILY)
    status = normalization.normalize_log_status(fields.get("status"), default=LogStatus.COMPLETED)
    task_id = normalization.as_text(fields.get("task_id"))
    if not task_id:
        if status == LogStatus.LEAVE:
            task_id = LEAVE_TASK_ID
        elif task_type == TaskType.EXTRA:
            task_id = EXTRA_TASK_ID
        else:
            raise ValueError("task id is required for routine logs")

    log_id = normalization.as_text(fields.get("id"))
    if not log_id:
        if task_id == LEAVE_TASK_ID:
            log_id = leave_log_id()
        elif task_type == TaskType.EXTRA:
            log_id = extra_log_id()
        else:
            log_id = daily_log_id(employee_id, task_id, log_date)

    approval_status = normalization.normalize_approval_status(
        fields.get("approval_status"), default=ApprovalStatus.APPROVED
    )
    now = now_utc()
    approved_by = approved_at = None
    if approval_status == ApprovalStatus.APPROVED:
        approved_by = normalization.as_text(fields.get("approved_by")) or imported_by
        approved_at = parse_instant(fields.get("approved_at")) or now
    return TaskLog(
        id=log_id,
        log_date=log_date,
        employee_id=employee_id,
        task_id=task_id,
        task_type=task_type,
        status=status,
        description=normalization.as_text(fields.get("description")),
        approval_status=approval_status,
        approved_by=approved_by,
        approved_at=approved_at,
        manager_note=normalization.as_text(fields.get("manager_note")) or None,
        created_at=now,
        updated_at=now,
    )


ROW_BUILDERS = {
    "employees": _employee_values,
    "tasks": _task_values,
    "assignments": _assignment_values,
}


def _row_builder(entity: str, actor: Employee) -> Callable[[Dict[str, Any]], Any]:
    if entity == "logs":
        return partial(_log_from_row, imported_by=actor.id)
    return ROW_BUILDERS[entity]


def _upsert_employees(db: Session, items: Sequence[Dict[str, Any]]) -> int:
    now = now_utc()
    for values in items:
        employee = db.query(Employee).filter(Employee.id == values["id"]).first()
        if employee is None:
            employee = Employee(role=Role.USER.value, active=True, permissions=[PERM_LOG_TASKS])
            db.add(employee)
        for field, value in values.items():
            setattr(employee, field, value)
        employee.last_modified = now
    return len(items)


def _upsert_tasks(db: Session, items: Sequence[Dict[str, Any]]) -> int:
    now = now_utc()
    for values in items:
        task = db.query(Task).filter(Task.id == values["id"]).first()
        if task is None:
            task = Task(category="General")
            db.add(task)
        for field, value in values.items():
            if field == "category" and not value:
                value = "General"
            setattr(task, field, value)
        task.last_modified = now
    return len(items)


def _upsert_assignments(db: Session, items: Sequence[Dict[str, Any]]) -> int:
    """Add missing (employee, task) pairs; pairs already assigned are left alone"""
    employee_ids = {e_id for (e_id,) in db.query(Employee.id).all()}
    task_ids = {t_id for (t_id,) in db.query(Task.id).all()}
    unknown = [
        f"{values['employee_id']}/{values['task_id']}"
        for values in items
        if values["employee_id"] not in employee_ids or values["task_id"] not in task_ids
    ]
    if unknown:
        raise ValidationError(
            f"Import rejected: unknown employee or task in assignments {', '.join(unknown[:MAX_REPORTED_ERRORS])}"
        )

    existing = {(a.employee_id, a.task_id) for a in db.query(Assignment).all()}
    count = 0
    for values in items:
        pair = (values["employee_id"], values["task_id"])
        if pair in existing:
            continue
        db.add(Assignment(id=values["id"] or new_assignment_id(), employee_id=pair[0], task_id=pair[1]))
        existing.add(pair)
        count += 1
    return count


UPSERTS = {
    "employees": _upsert_employees,
    "tasks": _upsert_tasks,
    "assignments": _upsert_assignments,
}


def import_rows(db: Session, entity: str, rows: Sequence[Mapping[str, Any]], actor: Employee) -> ImportResult:
    """
    Upsert rows of one entity type read from a spreadsheet

    Rows missing required columns are skipped. Any row with an unreadable
    value rejects the whole file; nothing is written in that case.

    Raises:
        ValidationError: If the entity type is unknown or a row is invalid
        PersistenceError: If the database write failed
    """
    if entity not in normalization.ENTITY_TYPES:
        raise ValidationError(
            f"Unknown import type '{entity}'. Expected one of {list(normalization.ENTITY_TYPES)}"
        )

    fields_list, skipped = parse_rows(entity, rows)
    if not fields_list:
        raise ValidationError("The file is empty or has none of the expected columns")

    build = _row_builder(entity, actor)
    items = []
    errors = []
    # Row 1 is the header row
    for index, fields in enumerate(fields_list, start=2):
        try:
            items.append(build(fields))
        except ValueError as e:
            errors.append(f"Row {index}: {e}")
    if errors:
        shown = "; ".join(errors[:MAX_REPORTED_ERRORS])
        more = f" (and {len(errors) - MAX_REPORTED_ERRORS} more)" if len(errors) > MAX_REPORTED_ERRORS else ""
        raise ValidationError(f"Import rejected: {shown}{more}")

    if entity == "logs":
        count = SqlAlchemyStore(db).import_logs(items)
    else:
        try:
            count = UPSERTS[entity](db, items)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Import of %s failed: %s", entity, e, exc_info=True)
            raise PersistenceError("The import was not saved, please retry") from e

    logger.info("import finished: entity=%s imported=%s skipped=%s actor_id=%s", entity, count, skipped, actor.id)
    log_audit(
        db,
        actor,
        AuditAction.IMPORT,
        entity,
        details=f"Imported {count} {entity} ({skipped} rows skipped)",
    )
    return ImportResult(entity=entity, imported=count, skipped=skipped)


# JSON backup

def export_backup(db: Session) -> BackupDocument:
    """Snapshot of employees, tasks, assignments and logs"""
    store = SqlAlchemyStore(db)
    assignments = sorted(
        db.query(Assignment).all(),
        key=lambda a: (task_sort_key(a.employee_id), task_sort_key(a.task_id)),
    )
    return BackupDocument(
        employees=[BackupEmployee.model_validate(e) for e in store.list_employees()],
        tasks=[BackupTask.model_validate(t) for t in store.list_tasks()],
        assignments=[BackupAssignment.model_validate(a) for a in assignments],
        logs=[BackupLog.model_validate(log) for log in store.list_logs()],
        export_date=now_utc(),
    )


def _backup_log(item: BackupLog, restored_by: str) -> TaskLog:
    data = item.model_dump()
    now = now_utc()
    data["created_at"] = data["created_at"] or now
    data["updated_at"] = data["updated_at"] or data["created_at"]
    if item.approval_status == ApprovalStatus.APPROVED:
        # older backups carry approved logs without an approver
        data["approved_by"] = data["approved_by"] or restored_by
        data["approved_at"] = data["approved_at"] or data["updated_at"]
    else:
        data["approved_by"] = data["approved_at"] = None
    return TaskLog(**data)


def restore_backup(db: Session, document: BackupDocument, actor: Employee) -> RestoreResult:
    """
    Upsert every record of a backup document in one transaction

    Records are matched by id; records missing from the document are kept.
    Plaintext passwords from legacy backups are hashed here.
    """
    try:
        for item in document.employees:
            data = item.model_dump(exclude={"password"})
            if item.password and not item.password_hash:
                data["password_hash"] = hash_password(item.password)
            if data["password_hash"] is None:
                # keep the stored hash of an existing employee
                data.pop("password_hash")
            db.merge(Employee(**data))
        for item in document.tasks:
            db.merge(Task(**item.model_dump()))
        db.flush()

        existing_pairs = {(a.employee_id, a.task_id): a.id for a in db.query(Assignment).all()}
        assignment_count = 0
        for item in document.assignments:
            current = existing_pairs.get((item.employee_id, item.task_id))
            if current is not None and current != item.id:
                continue
            db.merge(Assignment(**item.model_dump()))
            existing_pairs[(item.employee_id, item.task_id)] = item.id
            assignment_count += 1
        db.flush()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Restore failed: %s", e, exc_info=True)
        raise PersistenceError("The backup was not restored, please retry") from e

    # Commits the registry records above together with the logs
    log_count = SqlAlchemyStore(db).import_logs(_backup_log(item, actor.id) for item in document.logs)

    logger.info(
        "backup restored: employees=%s tasks=%s assignments=%s logs=%s actor_id=%s",
        len(document.employees), len(document.tasks), assignment_count, log_count, actor.id,
    )
    log_audit(
        db,
        actor,
        AuditAction.IMPORT,
        "backup",
        details=f"Restored backup version {document.version}",
        meta={"export_date": document.export_date},
    )
    return RestoreResult(
        employees=len(document.employees),
        tasks=len(document.tasks),
        assignments=assignment_count,
        logs=log_count,
    )


def clear_data(db: Session, scope: str, actor: Employee) -> int:
    """
    Bulk delete: `logs` removes every task log, `employees` every employee
    except the acting admin (with their assignments)
    """
    if scope == "logs":
        count = SqlAlchemyStore(db).clear_logs()
    elif scope == "employees":
        try:
            employees = db.query(Employee).filter(Employee.id != actor.id).all()
            for employee in employees:
                db.delete(employee)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Clearing employees failed: %s", e, exc_info=True)
            raise PersistenceError("The data was not cleared, please retry") from e
        count = len(employees)
    else:
        raise ValidationError("scope must be 'logs' or 'employees'")

    logger.warning("data cleared: scope=%s count=%s actor_id=%s", scope, count, actor.id)
    log_audit(db, actor, AuditAction.CLEAR, scope, details=f"Cleared {count} {scope}")
    return count
