"""
Permission models for access control.

Defines the core models used in the permission system:
- Permission: a (module, action, resource) grant, any field may be the wildcard
- Subject: the user/actor whose grants are evaluated
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from stockroom.core.permissions.constants import WILDCARD


def as_identifier(value: Union[str, Enum]) -> str:
    """Return the string form of a module/action/resource name."""
    if isinstance(value, Enum):
        return value.value
    return value


@dataclass(frozen=True)
class Permission:
    """
    A single grant.

    Attributes:
        module: functional area, or ``*``
        action: operation verb, or ``*``
        resource: sub-entity inside the module, or ``*``
    """
    module: str
    action: str
    resource: str

    def __post_init__(self):
        for name in ("module", "action", "resource"):
            value = getattr(self, name)
            if isinstance(value, Enum):
                object.__setattr__(self, name, value.value)
                value = value.value
            if not isinstance(value, str) or not value:
                raise ValueError(f"Permission.{name} must be a non-empty string, got {value!r}")

    @property
    def is_full_access(self) -> bool:
        return self.module == WILDCARD and self.action == WILDCARD and self.resource == WILDCARD

    def to_dict(self) -> Dict[str, str]:
        return {"module": self.module, "action": self.action, "resource": self.resource}

    def __str__(self) -> str:
        return f"{self.module}:{self.action}:{self.resource}"


FULL_ACCESS = Permission(WILDCARD, WILDCARD, WILDCARD)


@dataclass
class Subject:
    """
    Represents a user/actor performing an action.

    Attributes:
        id: User ID
        role: Role name as stored on the user
        permissions: Normalized grants attached to the user
    """
    id: Any
    role: str = ""
    permissions: Tuple[Permission, ...] = field(default_factory=tuple)

    @classmethod
    def from_user(cls, user_obj, permissions: Optional[Tuple[Permission, ...]] = None) -> "Subject":
        """Create a Subject from a User model instance, normalizing stored grants."""
        from stockroom.core.permissions.normalization import normalize_permissions

        role = getattr(user_obj, "role", None)
        if permissions is None:
            permissions = normalize_permissions(getattr(user_obj, "permissions", None))
        return cls(
            id=user_obj.id,
            role=str(as_identifier(role)) if role is not None else "",
            permissions=tuple(permissions),
        )
