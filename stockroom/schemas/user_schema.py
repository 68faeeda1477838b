from pydantic import BaseModel, EmailStr, Field, ConfigDict, computed_field, field_validator
from typing import List, Optional, Union
import datetime
import uuid

from stockroom.core.permissions.normalization import normalize_permissions
from stockroom.core.permissions.templates import UserRole, match_template
from stockroom.schemas.permission_schema import PermissionSchema

# Incoming permission entries: tuple objects or legacy strings such as "warehouse_view"
PermissionInput = Union[PermissionSchema, str]


def _normalize_role(v):
    if isinstance(v, str):
        return v.strip().lower()
    return v


class UserBase(BaseModel):
    username: str = Field(..., min_length=1)
    email: EmailStr
    full_name: Optional[str] = None


class UserCreate(UserBase):
    role: UserRole = Field(UserRole.VIEWER, description="Role; its template supplies default permissions")
    permissions: Optional[List[PermissionInput]] = Field(
        None, description="Explicit permissions, overriding the role template"
    )

    @field_validator("role", mode="before")
    @classmethod
    def _lower_role(cls, v):
        return _normalize_role(v)


class UserUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    full_name: Optional[str] = None
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None
    permissions: Optional[List[PermissionInput]] = Field(
        None, description="Explicit permissions; when omitted a role change applies the new template"
    )

    @field_validator("role", mode="before")
    @classmethod
    def _lower_role(cls, v):
        return _normalize_role(v)


class UserPermissionsUpdate(BaseModel):
    permissions: List[PermissionInput] = Field(..., description="Complete new permission list")


def _to_ms(v):
    if v is None:
        return None
    if isinstance(v, datetime.datetime):
        return int(v.timestamp() * 1000)
    if isinstance(v, (int, float)):
        return int(v)
    return v


class User(UserBase):
    id: uuid.UUID
    role: str
    permissions: List[PermissionSchema] = []
    is_active: bool
    created_at: Optional[int] = None
    updated_at: Optional[int] = None
    last_login_at: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("permissions", mode="before")
    @classmethod
    def _normalize_permissions(cls, v):
        return [p.to_dict() for p in normalize_permissions(v)]

    @field_validator("created_at", "updated_at", "last_login_at", mode="before")
    @classmethod
    def _datetime_to_ms(cls, v):
        return _to_ms(v)

    @computed_field
    @property
    def template(self) -> str:
        """Role template the permissions correspond to, ``custom`` when none."""
        return match_template(p.model_dump() for p in self.permissions).value


class UserAccess(BaseModel):
    """The current user together with the grants that are actually evaluated."""
    user: User
    effective_permissions: List[PermissionSchema]
    full_access: bool
