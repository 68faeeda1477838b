from typing import List, Optional
import uuid

from sqlalchemy.orm import Session

from stockroom.models.audit_log_model import AuditLog
from stockroom.models.user_model import User
from stockroom.repositories.audit_log_repository import AuditLogRepository
from stockroom.core.logging_config import get_audit_logger

audit_logger = get_audit_logger()

USER_ENTITY = "User"

USER_CREATED = "user_created"
USER_ROLE_CHANGED = "user_role_changed"
USER_PERMISSIONS_CHANGED = "user_permissions_changed"
USER_PERMISSIONS_MIGRATED = "user_permissions_migrated"
USER_DEACTIVATED = "user_deactivated"
USER_REACTIVATED = "user_reactivated"


def record(
    db: Session,
    action: str,
    target: User,
    current_user: Optional[User] = None,
    **details,
) -> AuditLog:
    """
    Stage an audit entry about ``target``.

    Nothing is committed here: the entry is persisted by the commit of the
    change it describes, and rolled back with it.
    """
    return AuditLogRepository(db).add(
        action=action,
        entity=USER_ENTITY,
        entity_id=str(target.id),
        user_id=current_user.id if current_user is not None else None,
        details=details,
    )


def emit(entry: AuditLog, current_user: Optional[User] = None) -> None:
    """Mirror a committed entry to the audit logger."""
    actor = current_user.username if current_user is not None else "system"
    audit_logger.info(f"{entry.action}: user_id={entry.entity_id}, details={entry.details}, by={actor}")


def list_logs(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    action: Optional[str] = None,
    entity_id: Optional[str] = None,
    user_id: Optional[uuid.UUID] = None,
) -> List[AuditLog]:
    """Audit entries, newest first."""
    return AuditLogRepository(db).get_logs(
        skip=skip, limit=limit, action=action, entity_id=entity_id, user_id=user_id
    )
