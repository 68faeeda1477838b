import datetime
import uuid
from sqlalchemy import Column, String, DateTime, JSON, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from stockroom.db import Base


class AuditLog(Base):
    """One administrative change, written in the same transaction as the change."""
    __tablename__ = "audit_logs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    # Actor; empty for changes made at startup
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True, index=True)
    action = Column(String(64), nullable=False, index=True)
    entity = Column(String(64), nullable=False)
    entity_id = Column(String(64), nullable=True, index=True)
    details = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, nullable=False, default=datetime.datetime.now, index=True)

    user = relationship("User", foreign_keys=[user_id])
