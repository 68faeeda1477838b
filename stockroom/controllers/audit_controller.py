from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
import uuid

from stockroom.db import get_db
from stockroom.dependencies import require_permission
from stockroom.schemas.audit_schema import AuditLogEntry
from stockroom.schemas.response_schema import ApiResponse
from stockroom.services import audit_service
from stockroom.core.logging_config import get_api_logger
from stockroom.core.permissions import PermissionAction as Action, PermissionModule as Module
from stockroom.core.permissions.constants import AuditResource
from stockroom.core.response_utils import success

api_logger = get_api_logger()

router = APIRouter(
    prefix="/audit",
    tags=["Audit"],
)


@router.get(
    "/logs",
    response_model=ApiResponse,
    dependencies=[Depends(require_permission(Module.AUDIT, Action.VIEW, AuditResource.LOGS))],
)
def list_audit_logs(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    action: Optional[str] = None,
    entity_id: Optional[str] = None,
    user_id: Optional[uuid.UUID] = Query(None, description="Actor who made the change"),
    db: Session = Depends(get_db),
):
    """Audit trail of user and permission changes, newest first."""
    logs = audit_service.list_logs(
        db, skip=skip, limit=limit, action=action, entity_id=entity_id, user_id=user_id
    )
    api_logger.info(f"Audit logs returned: count={len(logs)}")
    return success(
        data=[AuditLogEntry.model_validate(entry).model_dump(mode="json") for entry in logs],
        msg="Audit logs retrieved",
    )
