from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import List, Optional
import uuid

from stockroom.models.user_model import User
from stockroom.core.logging_config import get_db_logger

db_logger = get_db_logger()


class UserRepository:
    """Data access for users."""

    def __init__(self, db: Session):
        self.db = db

    def get_user_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        db_logger.debug(f"Querying user by id: user_id={user_id}")

        try:
            return self.db.query(User).filter(User.id == user_id).first()
        except Exception as e:
            db_logger.error(f"Failed to query user by id: user_id={user_id} - {str(e)}")
            raise

    def get_user_by_email(self, email: str) -> Optional[User]:
        db_logger.debug("Querying user by email")

        try:
            return self.db.query(User).filter(func.lower(User.email) == email.lower()).first()
        except Exception as e:
            db_logger.error(f"Failed to query user by email - {str(e)}")
            raise

    def get_user_by_username(self, username: str) -> Optional[User]:
        db_logger.debug(f"Querying user by username: username={username}")

        try:
            return self.db.query(User).filter(User.username == username).first()
        except Exception as e:
            db_logger.error(f"Failed to query user by username: username={username} - {str(e)}")
            raise

    def get_users(
        self,
        skip: int = 0,
        limit: int = 100,
        role: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> List[User]:
        db_logger.debug(f"Listing users: skip={skip}, limit={limit}, role={role}, is_active={is_active}")

        try:
            query = self.db.query(User)
            if role is not None:
                query = query.filter(func.lower(User.role) == role.lower())
            if is_active is not None:
                query = query.filter(User.is_active == is_active)
            return query.order_by(User.created_at, User.username).offset(skip).limit(limit).all()
        except Exception as e:
            db_logger.error(f"Failed to list users - {str(e)}")
            raise

    def get_all_users(self) -> List[User]:
        return self.db.query(User).all()

    def has_role(self, role: str) -> bool:
        return self.db.query(User).filter(func.lower(User.role) == role.lower()).first() is not None

    def create_user(
        self,
        username: str,
        email: str,
        role: str,
        permissions: list,
        full_name: Optional[str] = None,
    ) -> User:
        db_logger.debug(f"Creating user record: username={username}, role={role}")

        try:
            db_user = User(
                username=username,
                email=email,
                full_name=full_name,
                role=role,
                permissions=permissions,
            )
            self.db.add(db_user)
            self.db.flush()
            db_logger.info(f"User record created: {username}")
            return db_user
        except Exception as e:
            db_logger.error(f"Failed to create user record: username={username} - {str(e)}")
            raise

    def update_user(self, db_user: User, changes: dict) -> User:
        db_logger.debug(f"Updating user: user_id={db_user.id}, fields={sorted(changes)}")

        try:
            for field, value in changes.items():
                setattr(db_user, field, value)
            self.db.flush()
            return db_user
        except Exception as e:
            db_logger.error(f"Failed to update user: user_id={db_user.id} - {str(e)}")
            raise


def get_user_by_id(db: Session, user_id: uuid.UUID) -> Optional[User]:
    return UserRepository(db).get_user_by_id(user_id)


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return UserRepository(db).get_user_by_email(email)


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return UserRepository(db).get_user_by_username(username)


def get_users(db: Session, skip: int = 0, limit: int = 100, role: Optional[str] = None,
              is_active: Optional[bool] = None) -> List[User]:
    return UserRepository(db).get_users(skip=skip, limit=limit, role=role, is_active=is_active)


def create_user(db: Session, username: str, email: str, role: str, permissions: list,
                full_name: Optional[str] = None) -> User:
    """Functional wrapper around UserRepository.create_user."""
    return UserRepository(db).create_user(username, email, role, permissions, full_name)
