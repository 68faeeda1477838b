from enum import Enum
from typing import Iterable, Optional, Union
import uuid

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from jose import JWTError

from stockroom.db import get_db
from stockroom.core.security import decode_access_token, get_token_id
from stockroom.core.logging_config import get_auth_logger, get_security_logger
from stockroom.core.error_codes import BizCode
from stockroom.core.exceptions import AuthenticationException, PermissionDeniedException
from stockroom.core.permissions import Subject, permission_service
from stockroom.core.permissions.evaluator import Query, query_label, unpack_query
from stockroom.repositories import user_repository
from stockroom.models.user_model import User

auth_logger = get_auth_logger()
security_logger = get_security_logger()

# Tokens are issued by the identity provider; tokenUrl only documents it in OpenAPI
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")

Name = Union[str, Enum]


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> User:
    """
    Resolve the authenticated user from the bearer token.

    Raises:
        AuthenticationException: invalid or expired token, unknown or inactive user
    """
    try:
        payload = decode_access_token(token)
    except JWTError as e:
        auth_logger.warning(f"Token rejected: {str(e)}, jti={get_token_id(token)}")
        raise AuthenticationException("Could not validate credentials", code=BizCode.TOKEN_INVALID, cause=e)

    try:
        user_id = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        auth_logger.warning("Token subject is not a user id")
        raise AuthenticationException("Could not validate credentials", code=BizCode.TOKEN_INVALID)

    user = user_repository.get_user_by_id(db, user_id=user_id)
    if user is None:
        auth_logger.warning(f"Token subject does not exist: user_id={user_id}")
        raise AuthenticationException("Could not validate credentials")
    if not user.is_active:
        auth_logger.warning(f"Inactive user presented a token: {user.username}")
        raise AuthenticationException("User is inactive", code=BizCode.USER_INACTIVE)

    auth_logger.debug(f"Authenticated: {user.username}")
    return user


async def get_current_subject(current_user: User = Depends(get_current_user)) -> Subject:
    """The current user as evaluated by the permission service."""
    return Subject.from_user(current_user)


def require_permission(module: Name, action: Name, resource: Name):
    """
    Route guard: the current user must hold a grant covering the permission.

    Usage::

        @router.get("/items", dependencies=[Depends(require_permission("warehouse", "view", "items"))])
    """
    async def _guard(subject: Subject = Depends(get_current_subject)) -> Subject:
        permission_service.require_permission(subject, module, action, resource)
        return subject

    return _guard


def require_any_permission(*queries: Query):
    """Route guard: at least one of ``queries`` must be granted."""
    async def _guard(subject: Subject = Depends(get_current_subject)) -> Subject:
        if not permission_service.can_perform_any(subject, queries):
            security_logger.info(f"No matching permission: subject_id={subject.id}, role={subject.role}")
            raise PermissionDeniedException(
                "Missing permission",
                context={"subject_id": str(subject.id), "required_any": [query_label(q) for q in queries]},
            )
        return subject

    return _guard


def require_access(
    allowed_roles: Optional[Iterable[Name]] = None,
    permission: Optional[Query] = None,
):
    """
    Route guard combining a role allow-list with an optional permission.

    ``allowed_roles`` defaults to the configured allow-list; subjects with
    full access always pass the role check.
    """
    roles = tuple(allowed_roles) if allowed_roles is not None else None

    async def _guard(subject: Subject = Depends(get_current_subject)) -> Subject:
        permission_service.require_role(subject, roles)
        if permission is not None:
            module, action, resource = unpack_query(permission)
            permission_service.require_permission(subject, module, action, resource)
        return subject

    return _guard
