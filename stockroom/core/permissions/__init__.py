"""
Permission management module.

This module provides the permission vocabulary, the wildcard evaluator, role
templates and a unified permission service used by every route guard.
"""

from stockroom.core.permissions.constants import PermissionAction, PermissionModule, WILDCARD
from stockroom.core.permissions.evaluator import has_all_permissions, has_any_permission, has_permission
from stockroom.core.permissions.models import FULL_ACCESS, Permission, Subject
from stockroom.core.permissions.normalization import normalize_permission, normalize_permissions
from stockroom.core.permissions.service import PermissionService, permission_service
from stockroom.core.permissions.templates import (
    ROLE_PERMISSIONS,
    RoleTemplate,
    UserRole,
    match_template,
    permissions_for_role,
)

__all__ = [
    "FULL_ACCESS",
    "WILDCARD",
    "Permission",
    "PermissionAction",
    "PermissionModule",
    "PermissionService",
    "ROLE_PERMISSIONS",
    "RoleTemplate",
    "Subject",
    "UserRole",
    "has_all_permissions",
    "has_any_permission",
    "has_permission",
    "match_template",
    "normalize_permission",
    "normalize_permissions",
    "permission_service",
    "permissions_for_role",
]
