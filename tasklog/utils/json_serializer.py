"""
JSON-safe conversion for audit log metadata
"""
from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel


def sanitize_for_json(obj: Any) -> Any:
    """
    Recursively convert a value for storage in a JSON column
    (system_audit_logs.meta_json)

    Dates become ISO strings, enums their value, sets and tuples lists and
    pydantic models dicts. Anything else that JSON cannot hold is stored as
    its string form.
    """
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (date, datetime)):
        return obj.isoformat()
    if isinstance(obj, dict):
        return {str(k): sanitize_for_json(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set, frozenset)):
        return [sanitize_for_json(item) for item in obj]
    if isinstance(obj, BaseModel):
        return sanitize_for_json(obj.model_dump())
    return str(obj)
