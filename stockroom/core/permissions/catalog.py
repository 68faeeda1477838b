"""
Catalog of assignable permissions, as listed on the permission management screen.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple, Union

from stockroom.core.permissions.constants import MODULE_RESOURCES, PermissionAction, PermissionModule
from stockroom.core.permissions.models import FULL_ACCESS, Permission, as_identifier

ALL_PERMISSIONS_CATEGORY = "all"


@dataclass(frozen=True)
class CatalogEntry:
    permission: Permission
    description: str
    category: str

    @property
    def id(self) -> str:
        if self.permission.is_full_access:
            return "all_permissions"
        return f"{self.permission.module}_{self.permission.action}_{self.permission.resource}"

    def to_dict(self) -> Dict[str, str]:
        data = self.permission.to_dict()
        data.update(id=self.id, description=self.description, category=self.category)
        return data


def resources_for_module(module: Union[str, Enum]) -> Tuple[str, ...]:
    """Resources that exist inside ``module``; unknown modules have none."""
    return MODULE_RESOURCES.get(as_identifier(module), ())


def get_all_permissions(include_full_access: bool = False) -> List[CatalogEntry]:
    """Every concrete module/action/resource combination with a description."""
    entries = []
    for module in PermissionModule:
        for action in PermissionAction:
            for resource in resources_for_module(module):
                entries.append(CatalogEntry(
                    permission=Permission(module.value, action.value, resource),
                    description=f"Can {action.value} {resource} in {module.value}",
                    category=module.value,
                ))

    if include_full_access:
        entries.append(CatalogEntry(
            permission=FULL_ACCESS,
            description="Full access to every module, action and resource",
            category=ALL_PERMISSIONS_CATEGORY,
        ))
    return entries


def group_by_category(entries: List[CatalogEntry]) -> Dict[str, List[CatalogEntry]]:
    grouped: Dict[str, List[CatalogEntry]] = {}
    for entry in entries:
        grouped.setdefault(entry.category, []).append(entry)
    return grouped
