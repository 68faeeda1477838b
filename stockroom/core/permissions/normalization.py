"""
Normalization of stored permission entries.

Users created before the tuple scheme carry flat strings such as
``"warehouse_view"`` or ``"all"``. Every entry is turned into a
:class:`Permission` here, once, when it is read; nothing downstream parses
strings.

Malformed entries normalize to ``None`` and are dropped, so they can never
match a query.
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Optional, Tuple, Union

from stockroom.core.permissions.constants import PermissionAction, WILDCARD
from stockroom.core.permissions.models import FULL_ACCESS, Permission

LEGACY_ALL = "all"
LEGACY_SEPARATOR = "_"
LEGACY_DEFAULT_ACTION = PermissionAction.VIEW.value

PermissionEntry = Union[Permission, str, Mapping, Sequence]


def _is_identifier(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def _build(module: Any, action: Any, resource: Any) -> Optional[Permission]:
    if _is_identifier(module) and _is_identifier(action) and _is_identifier(resource):
        return Permission(module, action, resource)
    return None


def parse_legacy_permission(value: str) -> Optional[Permission]:
    """
    Parse a legacy flat permission string.

    ``"all"`` is the full-access grant, ``"<module>_<action>"`` grants every
    resource, ``"<module>_<action>_<resource>"`` keeps the underscores of the
    resource, and a bare word means view access to that module.
    """
    if value == LEGACY_ALL:
        return FULL_ACCESS

    parts = value.split(LEGACY_SEPARATOR)
    if len(parts) >= 2:
        resource = LEGACY_SEPARATOR.join(parts[2:]) if len(parts) > 2 else WILDCARD
        return _build(parts[0], parts[1], resource)

    return _build(value, LEGACY_DEFAULT_ACTION, WILDCARD)


def normalize_permission(entry: Any) -> Optional[Permission]:
    """Normalize one stored entry, returning ``None`` when it is malformed."""
    if isinstance(entry, Permission):
        return entry
    if isinstance(entry, str):
        return parse_legacy_permission(entry)
    if isinstance(entry, Mapping):
        return _build(entry.get("module"), entry.get("action"), entry.get("resource"))
    if isinstance(entry, Sequence) and len(entry) == 3:
        return _build(*entry)
    return None


def normalize_permissions(entries: Any) -> Tuple[Permission, ...]:
    """
    Normalize a stored permission list.

    Malformed entries are dropped and duplicates collapsed, keeping the first
    occurrence. ``None`` and non-iterable values give an empty set.
    """
    if entries is None or isinstance(entries, (str, Mapping)) or not isinstance(entries, Iterable):
        return ()

    normalized = []
    seen = set()
    for entry in entries:
        permission = normalize_permission(entry)
        if permission is None or permission in seen:
            continue
        seen.add(permission)
        normalized.append(permission)
    return tuple(normalized)
