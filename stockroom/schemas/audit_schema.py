from pydantic import BaseModel, ConfigDict, field_validator
from typing import Any, Dict, Optional
import datetime
import uuid


class AuditLogEntry(BaseModel):
    id: uuid.UUID
    user_id: Optional[uuid.UUID] = None
    action: str
    entity: str
    entity_id: Optional[str] = None
    details: Dict[str, Any] = {}
    created_at: int

    model_config = ConfigDict(from_attributes=True)

    @field_validator("created_at", mode="before")
    @classmethod
    def _datetime_to_ms(cls, v):
        if isinstance(v, datetime.datetime):
            return int(v.timestamp() * 1000)
        return v

    @field_validator("details", mode="before")
    @classmethod
    def _details_default(cls, v):
        return v or {}
