"""
Permission vocabulary.

Modules, actions and the resources available inside each module. These are
static configuration: the admin catalog and the role templates are built from
them, and route guards name their required permission with them.
"""

from enum import Enum
from types import MappingProxyType
from typing import Mapping, Tuple

WILDCARD = "*"


class PermissionModule(Enum):
    """Top-level functional areas."""
    DASHBOARD = "dashboard"
    WAREHOUSE = "warehouse"
    INVENTORY = "inventory"
    SUPPLIERS = "suppliers"
    CATEGORIES = "categories"
    AUDIT = "audit"
    ADMIN = "admin"
    REPORTS = "reports"
    USERS = "users"


class PermissionAction(Enum):
    """Operation verbs within a module."""
    VIEW = "view"
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"
    APPROVE = "approve"
    EXPORT = "export"
    IMPORT = "import"
    TRANSFER = "transfer"


class DashboardResource(Enum):
    STATS = "stats"
    CHARTS = "charts"
    ALERTS = "alerts"


class WarehouseResource(Enum):
    ITEMS = "items"
    INWARD = "inward"
    OUTWARD = "outward"
    DAMAGE = "damage"
    CLOSING_STOCK = "closing_stock"
    AUDIT = "audit"


class InventoryResource(Enum):
    ITEMS = "items"
    TRANSFER = "transfer"
    AUDIT = "audit"


class SupplierResource(Enum):
    LIST = "list"
    DETAILS = "details"
    CONTACTS = "contacts"
    DOCUMENTS = "documents"
    PERFORMANCE = "performance"


class CategoryResource(Enum):
    LIST = "list"


class AuditResource(Enum):
    LOGS = "logs"
    REPORTS = "reports"


class AdminResource(Enum):
    SETTINGS = "settings"


class ReportResource(Enum):
    INVENTORY = "inventory"
    WAREHOUSE = "warehouse"
    SUPPLIERS = "suppliers"
    EMPLOYEE = "employee"


class UserResource(Enum):
    LIST = "list"
    DETAILS = "details"
    PERMISSIONS = "permissions"


MODULE_RESOURCES: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    PermissionModule.DASHBOARD.value: tuple(r.value for r in DashboardResource),
    PermissionModule.WAREHOUSE.value: tuple(r.value for r in WarehouseResource),
    PermissionModule.INVENTORY.value: tuple(r.value for r in InventoryResource),
    PermissionModule.SUPPLIERS.value: tuple(r.value for r in SupplierResource),
    PermissionModule.CATEGORIES.value: tuple(r.value for r in CategoryResource),
    PermissionModule.AUDIT.value: tuple(r.value for r in AuditResource),
    PermissionModule.ADMIN.value: tuple(r.value for r in AdminResource),
    PermissionModule.REPORTS.value: tuple(r.value for r in ReportResource),
    PermissionModule.USERS.value: tuple(r.value for r in UserResource),
})
