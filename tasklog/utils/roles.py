"""
Role and permission helpers for handling both enum and string role values
"""
from tasklog.core.constants import PERM_MANAGE_SYSTEM
from tasklog.models.employee import Role


def role_name(role):
    """
    Safely extract role name from either enum or string

    Args:
        role: Either a Role enum instance or a string

    Returns:
        str: The role name as string
    """
    return role.value if hasattr(role, "value") else str(role)


def is_admin(employee) -> bool:
    return employee is not None and role_name(employee.role) == Role.ADMIN.value


def has_permission(employee, permission: str) -> bool:
    """Admins hold every permission implicitly"""
    if employee is None:
        return False
    if is_admin(employee):
        return True
    return permission in (employee.permissions or [])


def is_reviewer(employee) -> bool:
    """Reviewers may approve, reject and delete other employees' logs"""
    return has_permission(employee, PERM_MANAGE_SYSTEM)
