"""Role-Based Access Control table and lookup helpers.

Permissions are static data: each role owns a flat list of
(resource, action, own, description) tuples. Authorization is a linear scan
of that list; there is no role hierarchy.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Permission:
    resource: str
    action: str
    own: bool
    description: str


@dataclass(frozen=True)
class Role:
    name: str
    description: str
    permissions: tuple[Permission, ...]


RESOURCES = {
    "students": "Student/trainee profile data",
    "companies": "Company profile data",
    "lookup": "Lookup/reference data (universities, industries, etc.)",
    "users": "User account management",
}

ACTIONS = {
    "create": "Create new resource",
    "read": "Read/view resource",
    "update": "Update/modify resource",
    "delete": "Delete resource",
    "cache_clear": "Clear cache",
    "cache_status": "View cache status",
    "approve": "Approve user account",
}

ROLES: dict[str, Role] = {
    "student": Role(
        name="Student",
        description="Student/trainee users who can view profiles and manage their own profile",
        permissions=(
            Permission("students", "create", True, "Create own student profile"),
            Permission("students", "read", False, "View all student profiles"),
            Permission("students", "update", True, "Update own student profile"),
            Permission("students", "delete", True, "Delete own student profile"),
            Permission("companies", "read", False, "View all company profiles"),
            Permission("lookup", "read", False, "Access reference data (universities, majors, industries, etc.)"),
        ),
    ),
    "company": Role(
        name="Company",
        description="Company users who can view profiles and manage their own company",
        permissions=(
            Permission("students", "read", False, "View all student profiles"),
            Permission("companies", "create", False, "Create company profile"),
            Permission("companies", "read", False, "View all company profiles"),
            Permission("companies", "update", True, "Update own company profile"),
            Permission("companies", "delete", True, "Delete own company profile"),
            Permission("lookup", "read", False, "Access reference data (industries, tech roles, etc.)"),
        ),
    ),
    "admin": Role(
        name="Administrator",
        description="System administrators with full access to all features",
        permissions=(
            Permission("students", "create", False, "Create student profiles"),
            Permission("students", "read", False, "View all student profiles"),
            Permission("students", "update", False, "Update any student profile"),
            Permission("students", "delete", False, "Delete any student profile"),
            Permission("companies", "create", False, "Create company profiles"),
            Permission("companies", "read", False, "View all company profiles"),
            Permission("companies", "update", False, "Update any company profile"),
            Permission("companies", "delete", False, "Delete any company profile"),
            Permission("lookup", "read", False, "Access reference data"),
            Permission("lookup", "cache_clear", False, "Clear lookup cache"),
            Permission("lookup", "cache_status", False, "Get cache status"),
            Permission("users", "approve", False, "Approve user accounts"),
            Permission("users", "read", False, "View all users"),
        ),
    ),
}


def _role(role_name) -> Optional[Role]:
    if not isinstance(role_name, str):
        return None
    return ROLES.get(role_name.strip().lower())


def check_permission(role_name, resource: str, action: str, context: Optional[dict] = None) -> Optional[Permission]:
    """Return the matching permission, or None when access is denied.

    For own-scoped permissions, when the context carries both ``user_id`` and
    ``resource_user_id`` they must be equal.
    """
    role = _role(role_name)
    if role is None:
        return None

    permission = next(
        (p for p in role.permissions if p.resource == resource and p.action == action),
        None,
    )
    if permission is None:
        return None

    context = context or {}
    user_id = context.get("user_id")
    resource_user_id = context.get("resource_user_id")
    if permission.own and user_id and resource_user_id:
        if str(user_id) != str(resource_user_id):
            return None

    return permission


def has_permission(role_name, resource: str, action: str, context: Optional[dict] = None) -> bool:
    """Check if a role may perform ``action`` on ``resource``."""
    return check_permission(role_name, resource, action, context) is not None


def get_permissions_for_role(role_name) -> list[Permission]:
    role = _role(role_name)
    return list(role.permissions) if role else []


def get_user_permissions(user: Optional[dict]) -> list[Permission]:
    if not user or not user.get("role"):
        return []
    return get_permissions_for_role(user["role"])


def user_has_permission(user: Optional[dict], resource: str, action: str, context: Optional[dict] = None) -> bool:
    """Check a permission for a user mapping with a ``role`` key."""
    if not user or not user.get("role"):
        return False
    return has_permission(user["role"], resource, action, context)
