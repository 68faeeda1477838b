"""
Access rules for the single-page frontend's routes.

Every route sits behind the default role allow-list; some routes narrow it
further. The frontend asks the API which routes the current user may open
instead of re-implementing the checks.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from stockroom.core.permissions.evaluator import Query, unpack_query
from stockroom.core.permissions.models import Subject
from stockroom.core.permissions.service import PermissionService, permission_service
from stockroom.core.permissions.templates import UserRole

_ADMIN = (UserRole.ADMIN.value,)
_WAREHOUSE = (UserRole.ADMIN.value, UserRole.WAREHOUSE_MANAGER.value)
_STOCK = (UserRole.ADMIN.value, UserRole.WAREHOUSE_MANAGER.value, UserRole.INVENTORY_MANAGER.value)


@dataclass(frozen=True)
class RouteRule:
    path: str
    allowed_roles: Optional[Tuple[str, ...]] = None
    permission: Optional[Query] = None

    def matches(self, path: str) -> bool:
        pattern = self.path.strip("/").split("/")
        candidate = path.strip("/").split("/")
        if len(pattern) != len(candidate):
            return False
        return all(p.startswith(":") or p == c for p, c in zip(pattern, candidate))


ROUTE_RULES: Tuple[RouteRule, ...] = (
    RouteRule("/"),
    RouteRule("/warehouse", _WAREHOUSE),
    RouteRule("/warehouse/overview", _WAREHOUSE),
    RouteRule("/warehouse/items", _WAREHOUSE),
    RouteRule("/warehouse/items/new", _WAREHOUSE),
    RouteRule("/warehouse/items/:id", _WAREHOUSE),
    RouteRule("/warehouse/items/:id/edit", _WAREHOUSE),
    RouteRule("/warehouse/inward", _WAREHOUSE, ("warehouse", "create", "inward")),
    RouteRule("/warehouse/outward", _WAREHOUSE, ("warehouse", "create", "outward")),
    RouteRule("/warehouse/damage", _WAREHOUSE, ("warehouse", "create", "damage")),
    RouteRule("/warehouse/closing-stock", _WAREHOUSE, ("warehouse", "view", "closing_stock")),
    RouteRule("/warehouse/audit", _ADMIN),
    RouteRule("/inventory"),
    RouteRule("/inventory/items"),
    RouteRule("/inventory/items/:id"),
    RouteRule("/inventory/items/:id/edit"),
    RouteRule("/inventory/reports"),
    RouteRule("/inventory/transfer", _STOCK, ("inventory", "transfer", "transfer")),
    RouteRule("/inventory/audit", _STOCK),
    RouteRule("/inventory/audit/:id", _STOCK),
    RouteRule("/categories"),
    RouteRule("/categories/new", _WAREHOUSE),
    RouteRule("/categories/:id/edit", _WAREHOUSE),
    RouteRule("/suppliers", _WAREHOUSE),
    RouteRule("/suppliers/new", _WAREHOUSE),
    RouteRule("/suppliers/:id/edit", _WAREHOUSE),
    RouteRule("/audit", _ADMIN),
    RouteRule("/admin/users", _ADMIN),
    RouteRule("/admin/users/new", _ADMIN),
    RouteRule("/admin/users/:id", _ADMIN),
    RouteRule("/admin/users/:id/edit", _ADMIN),
    RouteRule("/admin/permissions", _ADMIN, ("users", "view", "permissions")),
)


def find_rule(path: str, rules: Tuple[RouteRule, ...] = ROUTE_RULES) -> Optional[RouteRule]:
    """First rule matching ``path``, in declaration order."""
    for rule in rules:
        if rule.matches(path):
            return rule
    return None


def can_access_route(
    subject: Subject,
    path: str,
    service: PermissionService = permission_service,
    rules: Tuple[RouteRule, ...] = ROUTE_RULES,
) -> bool:
    """
    Decide whether ``subject`` may open ``path``.

    Unknown paths are denied. A route must pass the default allow-list, its
    own allow-list, and its permission when it declares one.
    """
    rule = find_rule(path, rules)
    if rule is None:
        return False
    if not service.is_role_allowed(subject):
        return False
    if rule.allowed_roles is not None and not service.is_role_allowed(subject, rule.allowed_roles):
        return False
    if rule.permission is not None:
        return service.can_perform(subject, *unpack_query(rule.permission))
    return True


def accessible_routes(
    subject: Subject,
    service: PermissionService = permission_service,
    rules: Tuple[RouteRule, ...] = ROUTE_RULES,
) -> List[dict]:
    return [
        {"path": rule.path, "allowed": can_access_route(subject, rule.path, service, rules)}
        for rule in rules
    ]
