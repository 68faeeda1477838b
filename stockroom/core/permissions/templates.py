"""
Role templates.

Each template is a fixed permission set; a user gets a copy of its role's
template when the user is created or the role changes. The tables are
read-only for the lifetime of the process.
"""

from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Tuple, Union

from stockroom.core.permissions.constants import (
    PermissionAction,
    PermissionModule,
    ReportResource,
    InventoryResource,
    WarehouseResource,
    WILDCARD,
)
from stockroom.core.permissions.models import FULL_ACCESS, Permission
from stockroom.core.permissions.normalization import normalize_permissions


class RoleTemplate(Enum):
    """Named default permission sets."""
    SUPER_ADMIN = "super_admin"
    WAREHOUSE_MANAGER = "warehouse_manager"
    INVENTORY_MANAGER = "inventory_manager"
    SUPPLIER_MANAGER = "supplier_manager"
    VIEWER = "viewer"
    CUSTOM = "custom"


class UserRole(str, Enum):
    """Roles a user record can hold."""
    ADMIN = "admin"
    WAREHOUSE_MANAGER = "warehouse_manager"
    INVENTORY_MANAGER = "inventory_manager"
    SUPPLIER_MANAGER = "supplier_manager"
    VIEWER = "viewer"
    CUSTOM = "custom"


_M = PermissionModule
_A = PermissionAction


def _grant(module, action=WILDCARD, resource=WILDCARD) -> Permission:
    return Permission(module, action, resource)


ROLE_PERMISSIONS: Mapping[RoleTemplate, Tuple[Permission, ...]] = MappingProxyType({
    RoleTemplate.SUPER_ADMIN: (FULL_ACCESS,),

    RoleTemplate.WAREHOUSE_MANAGER: (
        _grant(_M.DASHBOARD, _A.VIEW),
        # Full warehouse access
        _grant(_M.WAREHOUSE),
        # Inventory is read-only apart from transfers
        _grant(_M.INVENTORY, _A.VIEW),
        _grant(_M.INVENTORY, _A.TRANSFER, InventoryResource.TRANSFER),
        _grant(_M.SUPPLIERS),
        _grant(_M.CATEGORIES),
        _grant(_M.REPORTS, _A.VIEW, ReportResource.WAREHOUSE),
        _grant(_M.REPORTS, _A.EXPORT, ReportResource.WAREHOUSE),
    ),

    RoleTemplate.INVENTORY_MANAGER: (
        _grant(_M.DASHBOARD, _A.VIEW),
        _grant(_M.WAREHOUSE, _A.VIEW),
        _grant(_M.INVENTORY),
        _grant(_M.CATEGORIES, _A.VIEW),
        _grant(_M.REPORTS, _A.VIEW, ReportResource.INVENTORY),
        _grant(_M.REPORTS, _A.EXPORT, ReportResource.INVENTORY),
    ),

    RoleTemplate.SUPPLIER_MANAGER: (
        _grant(_M.DASHBOARD, _A.VIEW),
        _grant(_M.SUPPLIERS),
        # Suppliers may record inward deliveries
        _grant(_M.WAREHOUSE, _A.VIEW),
        _grant(_M.WAREHOUSE, _A.CREATE, WarehouseResource.INWARD),
        _grant(_M.REPORTS, _A.VIEW, ReportResource.SUPPLIERS),
        _grant(_M.REPORTS, _A.EXPORT, ReportResource.SUPPLIERS),
    ),

    RoleTemplate.VIEWER: (
        _grant(_M.DASHBOARD, _A.VIEW),
        _grant(_M.WAREHOUSE, _A.VIEW),
        _grant(_M.INVENTORY, _A.VIEW),
        _grant(_M.SUPPLIERS, _A.VIEW),
        _grant(_M.CATEGORIES, _A.VIEW),
        _grant(_M.REPORTS, _A.VIEW),
    ),

    RoleTemplate.CUSTOM: (),
})

ROLE_TEMPLATES: Mapping[UserRole, RoleTemplate] = MappingProxyType({
    UserRole.ADMIN: RoleTemplate.SUPER_ADMIN,
    UserRole.WAREHOUSE_MANAGER: RoleTemplate.WAREHOUSE_MANAGER,
    UserRole.INVENTORY_MANAGER: RoleTemplate.INVENTORY_MANAGER,
    UserRole.SUPPLIER_MANAGER: RoleTemplate.SUPPLIER_MANAGER,
    UserRole.VIEWER: RoleTemplate.VIEWER,
    UserRole.CUSTOM: RoleTemplate.CUSTOM,
})


def _lookup(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, Enum):
        value = value.value
    if not isinstance(value, str):
        return None
    try:
        return enum_cls(value.strip().lower())
    except ValueError:
        return None


def get_template(name: Union[str, RoleTemplate]) -> Optional[RoleTemplate]:
    """Resolve a template by name (case-insensitive), or None."""
    return _lookup(RoleTemplate, name)


def get_role(name: Union[str, UserRole]) -> Optional[UserRole]:
    """Resolve a role by name (case-insensitive), or None."""
    return _lookup(UserRole, name)


def permissions_for_template(template: Union[str, RoleTemplate]) -> Tuple[Permission, ...]:
    resolved = get_template(template)
    if resolved is None:
        return ()
    return ROLE_PERMISSIONS[resolved]


def permissions_for_role(role: Union[str, UserRole]) -> Tuple[Permission, ...]:
    """Default permissions of ``role``; unknown roles get none."""
    resolved = get_role(role)
    if resolved is None:
        return ()
    return ROLE_PERMISSIONS[ROLE_TEMPLATES[resolved]]


def match_template(permissions: Iterable) -> RoleTemplate:
    """
    Find the template whose permission set equals ``permissions``.

    Order does not matter and legacy entries are normalized first. Returns
    ``RoleTemplate.CUSTOM`` when no predefined template matches.
    """
    wanted = set(normalize_permissions(permissions))
    if not wanted:
        return RoleTemplate.CUSTOM
    for template, granted in ROLE_PERMISSIONS.items():
        if template is RoleTemplate.CUSTOM:
            continue
        if set(granted) == wanted:
            return template
    return RoleTemplate.CUSTOM
