"""
Task and assignment registry lookups
"""
import re
from typing import List, Tuple, TYPE_CHECKING

from tasklog.models.task import Assignment

if TYPE_CHECKING:
    from tasklog.repositories.base import TaskLogStore

_DIGITS = re.compile(r"(\d+)")


def task_sort_key(task_id: str) -> Tuple:
    """Numeric-aware sort key so that T2 sorts before T10"""
    parts = []
    for chunk in _DIGITS.split(task_id or ""):
        if not chunk:
            continue
        if chunk.isdigit():
            parts.append((0, int(chunk), ""))
        else:
            parts.append((1, 0, chunk.casefold()))
    return tuple(parts)


def assignments_for_employee(store: "TaskLogStore", employee_id: str) -> List[Assignment]:
    """The employee's assignments ordered by task id; unknown employees have none"""
    assignments = store.list_assignments(employee_id)
    return sorted(assignments, key=lambda a: task_sort_key(a.task_id))


def resolve_task_description(store: "TaskLogStore", task_id: str) -> str:
    """Current description of a task, or an empty string for unknown ids"""
    task = store.get_task(task_id)
    return task.description if task is not None else ""
