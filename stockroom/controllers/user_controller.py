from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
import uuid

from stockroom.db import get_db
from stockroom.dependencies import get_current_user, require_permission
from stockroom.models.user_model import User
from stockroom.schemas import user_schema
from stockroom.schemas.response_schema import ApiResponse
from stockroom.services import access_service, user_service
from stockroom.core.logging_config import get_api_logger
from stockroom.core.permissions import PermissionAction as Action, PermissionModule as Module
from stockroom.core.permissions.constants import UserResource
from stockroom.core.response_utils import success

api_logger = get_api_logger()

router = APIRouter(
    prefix="/users",
    tags=["Users"],
)

def _serialize(user: User) -> dict:
    return user_schema.User.model_validate(user).model_dump(mode="json")


@router.get("/me", response_model=ApiResponse)
def get_current_user_info(
    current_user: User = Depends(get_current_user),
):
    """Current user with the grants that are actually evaluated."""
    api_logger.info(f"Current user request: {current_user.username}")

    access = user_schema.UserAccess(
        user=user_schema.User.model_validate(current_user),
        **access_service.describe_access(current_user),
    )
    return success(data=access.model_dump(mode="json"), msg="User retrieved")


@router.get(
    "",
    response_model=ApiResponse,
    dependencies=[Depends(require_permission(Module.USERS, Action.VIEW, UserResource.LIST))],
)
def list_users(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    role: Optional[str] = None,
    include_inactive: bool = False,
    db: Session = Depends(get_db),
):
    """List users."""
    users = user_service.list_users(
        db,
        skip=skip,
        limit=limit,
        role=role,
        is_active=None if include_inactive else True,
    )
    api_logger.info(f"User list returned: count={len(users)}")
    return success(data=[_serialize(u) for u in users], msg="Users retrieved")


@router.post(
    "",
    response_model=ApiResponse,
    dependencies=[Depends(require_permission(Module.USERS, Action.CREATE, UserResource.LIST))],
)
def create_user(
    user: user_schema.UserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create a user; the role template supplies permissions unless given."""
    api_logger.info(f"User creation request: {user.username}, role={user.role.value}, by {current_user.username}")

    result = user_service.create_user(db=db, user=user, current_user=current_user)
    api_logger.info(f"User created: {result.username} (ID: {result.id})")
    return success(data=_serialize(result), msg="User created")


@router.get(
    "/{user_id}",
    response_model=ApiResponse,
    dependencies=[Depends(require_permission(Module.USERS, Action.VIEW, UserResource.DETAILS))],
)
def get_user_info_by_id(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
):
    result = user_service.get_user(db=db, user_id=user_id)
    return success(data=_serialize(result), msg="User retrieved")


@router.put(
    "/{user_id}",
    response_model=ApiResponse,
    dependencies=[Depends(require_permission(Module.USERS, Action.EDIT, UserResource.DETAILS))],
)
def update_user(
    user_id: uuid.UUID,
    changes: user_schema.UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Update profile, role or status."""
    api_logger.info(f"User update request: user_id={user_id}, by {current_user.username}")

    result = user_service.update_user(db=db, user_id=user_id, changes=changes, current_user=current_user)
    return success(data=_serialize(result), msg="User updated")


@router.put(
    "/{user_id}/permissions",
    response_model=ApiResponse,
    dependencies=[Depends(require_permission(Module.USERS, Action.EDIT, UserResource.PERMISSIONS))],
)
def set_user_permissions(
    user_id: uuid.UUID,
    request: user_schema.UserPermissionsUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Replace a user's permissions."""
    api_logger.info(f"Permission update request: user_id={user_id}, by {current_user.username}")

    result = user_service.set_user_permissions(
        db=db, user_id=user_id, entries=request.permissions, current_user=current_user
    )
    return success(data=_serialize(result), msg="Permissions updated")


@router.delete(
    "/{user_id}",
    response_model=ApiResponse,
    dependencies=[Depends(require_permission(Module.USERS, Action.DELETE, UserResource.LIST))],
)
def delete_user(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Deactivate a user (soft delete)."""
    api_logger.info(f"User deactivation request: user_id={user_id}, by {current_user.username}")

    result = user_service.deactivate_user(db=db, user_id=user_id, current_user=current_user)
    return success(data=_serialize(result), msg="User deactivated")
