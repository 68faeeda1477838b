"""
Unified permission service for centralized access control.

Route guards and services ask this service instead of parsing permission
lists themselves. Every decision goes through the evaluator; roles that are
configured as all-access are expanded to the full-access grant rather than
bypassing the evaluator.
"""

from enum import Enum
from typing import Iterable, Optional, Tuple, Union

from stockroom.core.config import settings
from stockroom.core.exceptions import AuthorizationException, PermissionDeniedException
from stockroom.core.logging_config import get_logger
from stockroom.core.permissions.evaluator import Query, has_all_permissions, has_any_permission, has_permission
from stockroom.core.permissions.models import FULL_ACCESS, Permission, Subject, as_identifier

logger = get_logger(__name__)

Name = Union[str, Enum]


def _normalize_role(role: Optional[Name]) -> str:
    if role is None:
        return ""
    return str(as_identifier(role)).strip().upper()


class PermissionService:
    """
    Centralized permission service.

    Args:
        all_access_roles: roles whose effective grants are ``*:*:*``
            (default: ``settings.ALL_ACCESS_ROLES``)
        default_allowed_roles: role allow-list used when a guard names none
            (default: ``settings.DEFAULT_ALLOWED_ROLES``)
    """

    def __init__(
        self,
        all_access_roles: Optional[Iterable[Name]] = None,
        default_allowed_roles: Optional[Iterable[Name]] = None,
    ):
        if all_access_roles is None:
            all_access_roles = settings.ALL_ACCESS_ROLES
        if default_allowed_roles is None:
            default_allowed_roles = settings.DEFAULT_ALLOWED_ROLES
        self.all_access_roles = frozenset(_normalize_role(r) for r in all_access_roles)
        self.default_allowed_roles = tuple(default_allowed_roles)

    def resolve_grants(self, subject: Subject) -> Tuple[Permission, ...]:
        """Effective grants of ``subject``."""
        if _normalize_role(subject.role) in self.all_access_roles:
            return (FULL_ACCESS,)
        return tuple(subject.permissions)

    def can_perform(self, subject: Subject, module: Name, action: Name, resource: Name) -> bool:
        """
        Check if a subject holds a grant covering the query.

        Args:
            subject: The user/actor attempting the action
            module: Module being accessed
            action: Action being attempted
            resource: Resource being acted upon

        Returns:
            True if any effective grant matches, False otherwise
        """
        allowed = has_permission(self.resolve_grants(subject), module, action, resource)
        query = f"{as_identifier(module)}:{as_identifier(action)}:{as_identifier(resource)}"
        if allowed:
            logger.debug(f"permission_granted: subject_id={subject.id}, role={subject.role}, query={query}")
        else:
            logger.info(
                f"permission_denied: subject_id={subject.id}, role={subject.role}, query={query}, "
                f"grants={len(subject.permissions)}"
            )
        return allowed

    def can_perform_any(self, subject: Subject, queries: Iterable[Query]) -> bool:
        return has_any_permission(self.resolve_grants(subject), queries)

    def can_perform_all(self, subject: Subject, queries: Iterable[Query]) -> bool:
        return has_all_permissions(self.resolve_grants(subject), queries)

    def require_permission(
        self,
        subject: Subject,
        module: Name,
        action: Name,
        resource: Name,
        error_message: Optional[str] = None
    ):
        """
        Require permission, raising an exception if not granted.

        Raises:
            PermissionDeniedException: If no effective grant matches
        """
        if not self.can_perform(subject, module, action, resource):
            query = f"{as_identifier(module)}:{as_identifier(action)}:{as_identifier(resource)}"
            message = error_message or f"Missing permission {query}"
            raise PermissionDeniedException(
                message,
                context={"subject_id": str(subject.id), "role": subject.role, "required": query}
            )

    def is_role_allowed(self, subject: Subject, allowed_roles: Optional[Iterable[Name]] = None) -> bool:
        """
        Case-insensitive role allow-list check.

        A subject whose effective grants include ``*:*:*`` passes any list.
        """
        if allowed_roles is None:
            allowed_roles = self.default_allowed_roles
        if FULL_ACCESS in self.resolve_grants(subject):
            return True
        allowed = {_normalize_role(r) for r in allowed_roles}
        return _normalize_role(subject.role) in allowed

    def require_role(
        self,
        subject: Subject,
        allowed_roles: Optional[Iterable[Name]] = None,
        error_message: Optional[str] = None
    ):
        """
        Raises:
            AuthorizationException: If the subject's role is not allowed
        """
        if not self.is_role_allowed(subject, allowed_roles):
            message = error_message or f"Role '{subject.role}' is not allowed"
            logger.warning(f"role_not_allowed: subject_id={subject.id}, role={subject.role}")
            raise AuthorizationException(message, context={"subject_id": str(subject.id), "role": subject.role})


# Global permission service instance
permission_service = PermissionService()
