from typing import Iterable, List, Optional
import uuid

from pydantic import BaseModel
from sqlalchemy.orm import Session

from stockroom.models.user_model import User
from stockroom.repositories import user_repository
from stockroom.repositories.user_repository import UserRepository
from stockroom.schemas.user_schema import UserCreate, UserUpdate
from stockroom.core.config import settings
from stockroom.services import audit_service
from stockroom.core.logging_config import get_business_logger
from stockroom.core.exceptions import (
    BusinessException,
    DuplicateResourceException,
    ResourceNotFoundException,
    ValidationException,
)
from stockroom.core.error_codes import BizCode
from stockroom.core.permissions import PermissionAction, PermissionModule, Subject, permission_service
from stockroom.core.permissions.constants import UserResource
from stockroom.core.permissions.normalization import normalize_permission, normalize_permissions
from stockroom.core.permissions.templates import UserRole, permissions_for_role

business_logger = get_business_logger()


def _role_value(role) -> str:
    return role.value if isinstance(role, UserRole) else str(role).lower()


def stored_permissions(entries: Iterable) -> List[dict]:
    """
    Validate incoming permission entries and return them in storage form.

    Legacy strings are accepted and stored as tuples. Unlike stored data,
    input with malformed entries is rejected.
    """
    raw = [e.model_dump() if isinstance(e, BaseModel) else e for e in entries]
    raw = [e.strip() if isinstance(e, str) else e for e in raw]
    invalid = [repr(e) for e in raw if normalize_permission(e) is None]
    if invalid:
        raise ValidationException(
            f"Invalid permission entries: {', '.join(invalid)}",
            field="permissions",
        )
    return [p.to_dict() for p in normalize_permissions(raw)]


def template_permissions(role) -> List[dict]:
    return [p.to_dict() for p in permissions_for_role(role)]


def get_user(db: Session, user_id: uuid.UUID) -> User:
    user = user_repository.get_user_by_id(db, user_id=user_id)
    if not user:
        business_logger.warning(f"User not found: user_id={user_id}")
        raise ResourceNotFoundException("User", str(user_id), code=BizCode.USER_NOT_FOUND)
    return user


def list_users(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    role: Optional[str] = None,
    is_active: Optional[bool] = None,
) -> List[User]:
    return user_repository.get_users(db, skip=skip, limit=limit, role=role, is_active=is_active)


def _ensure_unique(db: Session, username: Optional[str], email: Optional[str], exclude_id=None):
    if username is not None:
        existing = user_repository.get_user_by_username(db, username=username)
        if existing and existing.id != exclude_id:
            business_logger.warning(f"Username already exists: {username}")
            raise DuplicateResourceException("Username already exists", context={"username": username})
    if email is not None:
        existing = user_repository.get_user_by_email(db, email=email)
        if existing and existing.id != exclude_id:
            business_logger.warning("Email already registered")
            raise DuplicateResourceException("Email already registered", context={"email": email})


def _require(current_user: User, action: PermissionAction, resource: UserResource, message: str):
    permission_service.require_permission(
        Subject.from_user(current_user), PermissionModule.USERS, action, resource, error_message=message
    )


def create_user(db: Session, user: UserCreate, current_user: Optional[User] = None) -> User:
    """Create a user; without explicit permissions the role template applies."""
    role = _role_value(user.role)
    business_logger.info(f"Creating user: {user.username}, role={role}")

    _ensure_unique(db, user.username, user.email)

    if user.permissions is not None:
        permissions = stored_permissions(user.permissions)
    else:
        permissions = template_permissions(role)

    try:
        new_user = user_repository.create_user(
            db,
            username=user.username,
            email=user.email,
            role=role,
            permissions=permissions,
            full_name=user.full_name,
        )
        entry = audit_service.record(
            db, audit_service.USER_CREATED, new_user, current_user,
            username=new_user.username, role=role, permissions=len(permissions),
        )
        db.commit()
        db.refresh(new_user)
    except Exception as e:
        business_logger.error(f"User creation failed: {user.username} - {str(e)}")
        db.rollback()
        raise BusinessException(
            f"User creation failed: {user.username}",
            code=BizCode.DB_ERROR,
            context={"username": user.username},
            cause=e,
        )

    audit_service.emit(entry, current_user)
    return new_user


def update_user(db: Session, user_id: uuid.UUID, changes: UserUpdate, current_user: User) -> User:
    """
    Update a user.

    A role change re-applies the new role's template unless the request also
    carries an explicit permission list. Changing role or permissions needs
    ``users:edit:permissions``; changing the active flag needs
    ``users:delete:list``, the same as the dedicated endpoints.
    """
    db_user = get_user(db, user_id)
    data = changes.model_dump(exclude_unset=True)
    business_logger.info(f"Updating user: {db_user.username}, fields={sorted(data)}")

    # Explicit nulls mean "unchanged" for non-nullable fields
    for field in ("username", "email", "role", "is_active", "permissions"):
        if field in data and data[field] is None:
            data.pop(field)

    old_role = db_user.role
    old_permissions = db_user.permissions
    if "role" in data:
        data["role"] = _role_value(data["role"])
    role_changed = "role" in data and data["role"] != old_role
    status_changed = "is_active" in data and data["is_active"] != db_user.is_active

    if role_changed or "permissions" in data:
        _require(current_user, PermissionAction.EDIT, UserResource.PERMISSIONS,
                 "Changing role or permissions requires users:edit:permissions")
    if status_changed:
        if not data["is_active"] and db_user.id == current_user.id:
            raise BusinessException("You cannot deactivate yourself", code=BizCode.FORBIDDEN)
        _require(current_user, PermissionAction.DELETE, UserResource.LIST,
                 "Changing the active flag requires users:delete:list")

    _ensure_unique(db, data.get("username"), data.get("email"), exclude_id=db_user.id)

    if "permissions" in data:
        data["permissions"] = stored_permissions(changes.permissions)
    elif role_changed:
        data["permissions"] = template_permissions(data["role"])

    try:
        entries = []
        if role_changed:
            entries.append(audit_service.record(
                db, audit_service.USER_ROLE_CHANGED, db_user, current_user,
                from_role=old_role, to_role=data["role"],
            ))
        if "permissions" in data and data["permissions"] != old_permissions:
            entries.append(audit_service.record(
                db, audit_service.USER_PERMISSIONS_CHANGED, db_user, current_user,
                count=len(data["permissions"]),
            ))
        if status_changed:
            action = audit_service.USER_REACTIVATED if data["is_active"] else audit_service.USER_DEACTIVATED
            entries.append(audit_service.record(db, action, db_user, current_user))

        UserRepository(db).update_user(db_user, data)
        db.commit()
        db.refresh(db_user)
    except Exception as e:
        business_logger.error(f"User update failed: user_id={user_id} - {str(e)}")
        db.rollback()
        raise BusinessException(
            "User update failed",
            code=BizCode.DB_ERROR,
            context={"user_id": str(user_id)},
            cause=e,
        )

    for entry in entries:
        audit_service.emit(entry, current_user)
    return db_user


def set_user_permissions(db: Session, user_id: uuid.UUID, entries: Iterable, current_user: User) -> User:
    """Replace a user's permission list."""
    db_user = get_user(db, user_id)
    permissions = stored_permissions(entries)

    try:
        UserRepository(db).update_user(db_user, {"permissions": permissions})
        entry = audit_service.record(
            db, audit_service.USER_PERMISSIONS_CHANGED, db_user, current_user, count=len(permissions),
        )
        db.commit()
        db.refresh(db_user)
    except Exception as e:
        business_logger.error(f"Permission update failed: user_id={user_id} - {str(e)}")
        db.rollback()
        raise BusinessException(
            "Permission update failed",
            code=BizCode.DB_ERROR,
            context={"user_id": str(user_id)},
            cause=e,
        )

    audit_service.emit(entry, current_user)
    return db_user


def deactivate_user(db: Session, user_id: uuid.UUID, current_user: User) -> User:
    """Soft-delete a user."""
    db_user = get_user(db, user_id)
    if db_user.id == current_user.id:
        raise BusinessException("You cannot deactivate yourself", code=BizCode.FORBIDDEN)
    if not db_user.is_active:
        business_logger.info(f"User already inactive: {db_user.username}")
        return db_user

    try:
        UserRepository(db).update_user(db_user, {"is_active": False})
        entry = audit_service.record(db, audit_service.USER_DEACTIVATED, db_user, current_user)
        db.commit()
        db.refresh(db_user)
    except Exception as e:
        business_logger.error(f"User deactivation failed: user_id={user_id} - {str(e)}")
        db.rollback()
        raise BusinessException(
            "User deactivation failed",
            code=BizCode.DB_ERROR,
            context={"user_id": str(user_id)},
            cause=e,
        )

    audit_service.emit(entry, current_user)
    return db_user


def create_initial_admin(db: Session) -> Optional[User]:
    """Create the first administrator when no admin exists."""
    business_logger.info("Checking for an initial administrator")

    if UserRepository(db).has_role(UserRole.ADMIN.value):
        business_logger.info("Administrator already exists, skipping")
        return None

    admin = UserCreate(
        username=settings.FIRST_ADMIN_USERNAME,
        email=settings.FIRST_ADMIN_EMAIL,
        full_name=settings.FIRST_ADMIN_FULL_NAME,
        role=UserRole.ADMIN,
    )
    return create_user(db, admin)


def migrate_legacy_permissions(db: Session, current_user: Optional[User] = None) -> dict:
    """
    Rewrite stored legacy permission strings as tuples.

    Malformed entries are dropped; rows that are already normalized are left
    untouched. A stored value that is not a list counts as one dropped entry
    and is replaced by an empty list.
    """
    repo = UserRepository(db)
    scanned = migrated = dropped = 0
    entries = []

    try:
        for db_user in repo.get_all_users():
            scanned += 1
            stored = db_user.permissions
            raw = stored if isinstance(stored, list) else []
            normalized = [p.to_dict() for p in normalize_permissions(raw)]
            if isinstance(stored, list) and raw == normalized:
                continue

            removed = sum(1 for entry in raw if normalize_permission(entry) is None)
            if not isinstance(stored, list) and stored is not None:
                removed += 1
            dropped += removed

            repo.update_user(db_user, {"permissions": normalized})
            entries.append(audit_service.record(
                db, audit_service.USER_PERMISSIONS_MIGRATED, db_user, current_user,
                before=len(raw), after=len(normalized), dropped=removed,
            ))
            migrated += 1

        db.commit()
    except Exception as e:
        business_logger.error(f"Legacy permission migration failed - {str(e)}")
        db.rollback()
        raise BusinessException(
            "Legacy permission migration failed",
            code=BizCode.DB_ERROR,
            cause=e,
        )

    for entry in entries:
        audit_service.emit(entry, current_user)
    business_logger.info(
        f"Legacy permission migration done: scanned={scanned}, migrated={migrated}, dropped={dropped}"
    )
    return {"scanned": scanned, "migrated": migrated, "dropped_entries": dropped}
