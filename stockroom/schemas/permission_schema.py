from enum import Enum
from typing import List

from pydantic import BaseModel, Field, field_validator

from stockroom.core.permissions.constants import WILDCARD


class PermissionSchema(BaseModel):
    """A grant; any field may be the wildcard."""
    module: str = Field(..., min_length=1, description="Module name or *")
    action: str = Field(..., min_length=1, description="Action name or *")
    resource: str = Field(..., min_length=1, description="Resource name or *")

    @field_validator("module", "action", "resource", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v


class PermissionQuery(PermissionSchema):
    """A concrete permission to check; wildcards are not allowed."""

    @field_validator("module", "action", "resource")
    @classmethod
    def _no_wildcard(cls, v: str) -> str:
        if v == WILDCARD:
            raise ValueError("wildcard is not allowed in a permission query")
        return v


class CheckMode(str, Enum):
    ANY = "any"
    ALL = "all"


class PermissionCheckRequest(BaseModel):
    permissions: List[PermissionQuery] = Field(..., min_length=1, description="Permissions to check")
    mode: CheckMode = Field(CheckMode.ALL, description="any: one must be granted; all: every one must be granted")


class PermissionCheckItem(PermissionSchema):
    allowed: bool


class PermissionCheckResult(BaseModel):
    allowed: bool
    mode: CheckMode
    results: List[PermissionCheckItem]


class CatalogEntrySchema(PermissionSchema):
    id: str
    description: str
    category: str


class PermissionTemplateSchema(BaseModel):
    id: str
    name: str
    description: str
    permissions: List[PermissionSchema]
    is_default: bool


class LegacyMigrationResult(BaseModel):
    scanned: int = Field(..., description="Users inspected")
    migrated: int = Field(..., description="Users whose stored permissions were rewritten")
    dropped_entries: int = Field(..., description="Malformed entries removed")
