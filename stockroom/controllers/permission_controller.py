from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from stockroom.db import get_db
from stockroom.dependencies import (
    get_current_subject,
    get_current_user,
    require_any_permission,
    require_permission,
)
from stockroom.models.user_model import User
from stockroom.schemas.permission_schema import (
    CatalogEntrySchema,
    LegacyMigrationResult,
    PermissionCheckRequest,
    PermissionCheckResult,
    PermissionTemplateSchema,
)
from stockroom.schemas.response_schema import ApiResponse
from stockroom.services import access_service, user_service
from stockroom.core.logging_config import get_api_logger
from stockroom.core.permissions import PermissionAction as Action, PermissionModule as Module, Subject
from stockroom.core.permissions.constants import UserResource
from stockroom.core.permissions.routes import accessible_routes
from stockroom.core.response_utils import success

api_logger = get_api_logger()

router = APIRouter(
    prefix="/permissions",
    tags=["Permissions"],
)

_can_manage_permissions = require_any_permission(
    (Module.USERS, Action.VIEW, UserResource.PERMISSIONS),
    (Module.USERS, Action.EDIT, UserResource.PERMISSIONS),
)


@router.get("/catalog", response_model=ApiResponse, dependencies=[Depends(_can_manage_permissions)])
def get_permission_catalog(
    include_full_access: bool = Query(True, description="Include the *:*:* entry"),
):
    """Every assignable permission, for the permission editor."""
    entries = [
        CatalogEntrySchema.model_validate(e).model_dump()
        for e in access_service.get_catalog(include_full_access=include_full_access)
    ]
    return success(data=entries, msg="Permission catalog retrieved")


@router.get("/templates", response_model=ApiResponse, dependencies=[Depends(_can_manage_permissions)])
def list_permission_templates():
    templates = [PermissionTemplateSchema.model_validate(t).model_dump() for t in access_service.list_templates()]
    return success(data=templates, msg="Permission templates retrieved")


@router.get("/templates/{name}", response_model=ApiResponse, dependencies=[Depends(_can_manage_permissions)])
def get_permission_template(name: str):
    template = PermissionTemplateSchema.model_validate(access_service.get_template_detail(name))
    return success(data=template.model_dump(), msg="Permission template retrieved")


@router.post("/check", response_model=ApiResponse)
def check_permissions(
    request: PermissionCheckRequest,
    subject: Subject = Depends(get_current_subject),
):
    """
    Evaluate permissions for the current user.

    ``mode=any`` allows when one permission is granted, ``mode=all`` only
    when every one is.
    """
    result = PermissionCheckResult.model_validate(
        access_service.check_permissions(subject, request.permissions, request.mode)
    )
    api_logger.info(
        f"Permission check: subject_id={subject.id}, count={len(request.permissions)}, "
        f"mode={result.mode.value}, allowed={result.allowed}"
    )
    return success(data=result.model_dump(mode="json"), msg="Permission check completed")


@router.get("/routes", response_model=ApiResponse)
def list_accessible_routes(subject: Subject = Depends(get_current_subject)):
    """Frontend routes with whether the current user may open each."""
    return success(data=accessible_routes(subject), msg="Route access retrieved")


@router.post(
    "/migrate-legacy",
    response_model=ApiResponse,
    dependencies=[Depends(require_permission(Module.USERS, Action.EDIT, UserResource.PERMISSIONS))],
)
def migrate_legacy_permissions(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Rewrite stored legacy permission strings as tuples."""
    api_logger.info(f"Legacy permission migration requested by {current_user.username}")

    result = LegacyMigrationResult(**user_service.migrate_legacy_permissions(db, current_user=current_user))
    return success(data=result.model_dump(), msg="Legacy permissions migrated")
