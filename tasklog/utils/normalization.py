"""
Normalization of imported rows.

Spreadsheets and legacy backups name their columns loosely ("Emp ID",
"employeeId", "رقم الموظف") and carry localized status values ("منفذة",
"معتمد"). Everything is mapped onto the canonical field names and enum values
here, at the import boundary; the rest of the application only ever sees
canonical values.
"""
import re
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from tasklog.models.employee import Role
from tasklog.models.task_log import TaskType, LogStatus, ApprovalStatus

_NON_WORD = re.compile(r"[\W_]+", re.UNICODE)


def normalize_key(value: Any) -> str:
    """Case and punctuation insensitive form of a header or enum label"""
    if value is None:
        return ""
    if isinstance(value, Enum):
        value = value.value
    return _NON_WORD.sub("", str(value).casefold())


# Canonical field -> accepted header spellings (already normalized)
FIELD_ALIASES: Dict[str, Dict[str, Tuple[str, ...]]] = {
    "employees": {
        "id": ("id", "empid", "employeeid", "رقمالموظف"),
        "name": ("name", "empname", "fullname", "اسمالموظف"),
        "job_title": ("jobtitle", "title", "المسمىالوظيفي"),
        "email": ("email", "البريدالإلكتروني"),
        "password": ("password", "كلمةالمرور"),
        "password_hash": ("passwordhash",),
        "role": ("role", "الدور"),
        "active": ("active", "نشط"),
        "permissions": ("permissions", "الصلاحيات"),
    },
    "tasks": {
        "id": ("id", "taskid", "رقمالمهمة"),
        "description": ("description", "desc", "وصفالمهمة"),
        "category": ("category", "التصنيف"),
    },
    "assignments": {
        "id": ("id", "assignmentid"),
        "employee_id": ("employeeid", "empid", "رقمالموظف"),
        "task_id": ("taskid", "رقمالمهمة"),
    },
    "logs": {
        "id": ("id", "logid"),
        "log_date": ("logdate", "date", "التاريخ"),
        "employee_id": ("employeeid", "empid", "رقمالموظف"),
        "task_id": ("taskid", "رقمالمهمة"),
        "task_type": ("tasktype", "type", "نوعالمهمة"),
        "status": ("status", "الحالة"),
        "description": ("description", "desc", "وصفالمهمة"),
        "approval_status": ("approvalstatus", "حالةالاعتماد"),
        "approved_by": ("approvedby",),
        "approved_at": ("approvedat",),
        "manager_note": ("managernote", "note", "notes", "ملاحظات"),
    },
}

ENTITY_TYPES = tuple(FIELD_ALIASES.keys())

LOG_STATUS_SYNONYMS = {
    "completed": LogStatus.COMPLETED,
    "done": LogStatus.COMPLETED,
    "منفذة": LogStatus.COMPLETED,
    "pending": LogStatus.PENDING,
    "notdone": LogStatus.PENDING,
    "غيرمنفذة": LogStatus.PENDING,
    "notapplicable": LogStatus.NOT_APPLICABLE,
    "na": LogStatus.NOT_APPLICABLE,
    "لاتنطبق": LogStatus.NOT_APPLICABLE,
    "leave": LogStatus.LEAVE,
    "weekly": LogStatus.LEAVE,
    "إجازة": LogStatus.LEAVE,
    "اجازة": LogStatus.LEAVE,
    "عطلة": LogStatus.LEAVE,
}

TASK_TYPE_SYNONYMS = {
    "daily": TaskType.DAILY,
    "routine": TaskType.DAILY,
    "روتينية": TaskType.DAILY,
    # leave logs are exported with their own type label but stored as Daily
    "إجازة": TaskType.DAILY,
    "اجازة": TaskType.DAILY,
    "extra": TaskType.EXTRA,
    "إضافية": TaskType.EXTRA,
    "اضافية": TaskType.EXTRA,
}

APPROVAL_STATUS_SYNONYMS = {
    "approved": ApprovalStatus.APPROVED,
    "معتمد": ApprovalStatus.APPROVED,
    "rejected": ApprovalStatus.REJECTED,
    "مرفوض": ApprovalStatus.REJECTED,
    "pendingapproval": ApprovalStatus.PENDING_APPROVAL,
    "pending": ApprovalStatus.PENDING_APPROVAL,
    "معلق": ApprovalStatus.PENDING_APPROVAL,
    "commitmentpending": ApprovalStatus.COMMITMENT_PENDING,
    "ملتزم": ApprovalStatus.COMMITMENT_PENDING,
}

ROLE_SYNONYMS = {
    "admin": Role.ADMIN,
    "مدير": Role.ADMIN,
    "user": Role.USER,
    "employee": Role.USER,
    "موظف": Role.USER,
}

_TRUE_WORDS = {"true", "1", "yes", "y", "active", "نعم", "نشط"}
_FALSE_WORDS = {"false", "0", "no", "n", "inactive", "لا", "غيرنشط"}

# Export labels (canonical -> Arabic), the inverse of the synonyms above
LOG_STATUS_LABELS = {
    LogStatus.COMPLETED: "منفذة",
    LogStatus.PENDING: "غير منفذة",
    LogStatus.NOT_APPLICABLE: "لا تنطبق",
    LogStatus.LEAVE: "إجازة",
}

TASK_TYPE_LABELS = {
    TaskType.DAILY: "روتينية",
    TaskType.EXTRA: "إضافية",
}
LEAVE_TYPE_LABEL = "إجازة"

APPROVAL_STATUS_LABELS = {
    ApprovalStatus.APPROVED: "معتمد",
    ApprovalStatus.REJECTED: "مرفوض",
    ApprovalStatus.PENDING_APPROVAL: "معلق",
    ApprovalStatus.COMMITMENT_PENDING: "ملتزم",
}


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def extract_fields(row: Mapping[str, Any], entity: str) -> Dict[str, Any]:
    """
    Map a raw row onto canonical field names for an entity type

    The first alias with a non-blank value wins; fields with no matching
    column are omitted.

    Raises:
        ValueError: If entity is not a known entity type
    """
    if entity not in FIELD_ALIASES:
        raise ValueError(f"Unknown import type '{entity}'. Expected one of {list(ENTITY_TYPES)}")

    normalized = {}
    for key, value in row.items():
        norm = normalize_key(key)
        if norm and norm not in normalized:
            normalized[norm] = value

    fields: Dict[str, Any] = {}
    for field, aliases in FIELD_ALIASES[entity].items():
        for alias in aliases:
            value = normalized.get(alias)
            if not _is_blank(value):
                fields[field] = value.strip() if isinstance(value, str) else value
                break
    return fields


def _lookup(value: Any, synonyms: Dict[str, Any], label: str, default=None):
    if _is_blank(value):
        if default is None:
            raise ValueError(f"{label} is required")
        return default
    found = synonyms.get(normalize_key(value))
    if found is None:
        raise ValueError(f"Unknown {label} '{value}'")
    return found


def normalize_log_status(value: Any, default: Optional[LogStatus] = None) -> LogStatus:
    return _lookup(value, LOG_STATUS_SYNONYMS, "status", default)


def normalize_task_type(value: Any, default: Optional[TaskType] = None) -> TaskType:
    return _lookup(value, TASK_TYPE_SYNONYMS, "task type", default)


def normalize_approval_status(value: Any, default: Optional[ApprovalStatus] = None) -> ApprovalStatus:
    return _lookup(value, APPROVAL_STATUS_SYNONYMS, "approval status", default)


def normalize_role(value: Any, default: Optional[Role] = Role.USER) -> Role:
    return _lookup(value, ROLE_SYNONYMS, "role", default)


def parse_bool(value: Any, default: bool = True) -> bool:
    """Spreadsheet-friendly boolean parsing; blank cells take the default"""
    if isinstance(value, bool):
        return value
    if _is_blank(value):
        return default
    norm = normalize_key(value)
    if norm in _TRUE_WORDS:
        return True
    if norm in _FALSE_WORDS:
        return False
    raise ValueError(f"Cannot interpret '{value}' as true/false")


def parse_permissions(value: Any) -> list:
    """Permissions arrive either as a list (JSON) or a comma separated cell"""
    if _is_blank(value):
        return []
    if isinstance(value, (list, tuple, set)):
        items = value
    else:
        items = str(value).split(",")
    return [str(item).strip() for item in items if str(item).strip()]


def as_text(value: Any) -> str:
    """Cell value as text; spreadsheet readers hand back ints and floats for numeric ids"""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()
