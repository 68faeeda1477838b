from sqlalchemy.orm import Session
from typing import List, Optional
import uuid

from stockroom.models.audit_log_model import AuditLog
from stockroom.core.logging_config import get_db_logger

db_logger = get_db_logger()


class AuditLogRepository:
    """Data access for audit log entries."""

    def __init__(self, db: Session):
        self.db = db

    def add(
        self,
        action: str,
        entity: str,
        entity_id: Optional[str] = None,
        user_id: Optional[uuid.UUID] = None,
        details: Optional[dict] = None,
    ) -> AuditLog:
        """Stage an entry; the caller's commit persists it with the change it describes."""
        db_logger.debug(f"Staging audit entry: action={action}, entity={entity}, entity_id={entity_id}")

        entry = AuditLog(
            user_id=user_id,
            action=action,
            entity=entity,
            entity_id=entity_id,
            details=details or {},
        )
        self.db.add(entry)
        return entry

    def get_logs(
        self,
        skip: int = 0,
        limit: int = 100,
        action: Optional[str] = None,
        entity_id: Optional[str] = None,
        user_id: Optional[uuid.UUID] = None,
    ) -> List[AuditLog]:
        db_logger.debug(f"Listing audit logs: skip={skip}, limit={limit}, action={action}")

        try:
            query = self.db.query(AuditLog)
            if action is not None:
                query = query.filter(AuditLog.action == action)
            if entity_id is not None:
                query = query.filter(AuditLog.entity_id == entity_id)
            if user_id is not None:
                query = query.filter(AuditLog.user_id == user_id)
            return query.order_by(AuditLog.created_at.desc()).offset(skip).limit(limit).all()
        except Exception as e:
            db_logger.error(f"Failed to list audit logs - {str(e)}")
            raise
