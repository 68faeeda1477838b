import os
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings:
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Database configuration (SQLite by default, any SQLAlchemy URL works)
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./stockroom.db")
    DB_AUTO_UPGRADE: bool = os.getenv("DB_AUTO_UPGRADE", "false").lower() == "true"
    DB_AUTO_CREATE: bool = os.getenv("DB_AUTO_CREATE", "true").lower() == "true"

    # JWT Token Configuration
    SECRET_KEY: str = os.getenv("SECRET_KEY", "a_default_secret_key_that_is_long_and_random")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

    # Access control
    # Roles whose effective permission set is the full-access grant.
    # Some deployments also list "user" here.
    ALL_ACCESS_ROLES: List[str] = _split_csv(os.getenv("ALL_ACCESS_ROLES", "admin"))
    DEFAULT_ALLOWED_ROLES: List[str] = _split_csv(
        os.getenv("DEFAULT_ALLOWED_ROLES", "admin,warehouse_manager,inventory_manager,viewer")
    )

    # Initial administrator
    FIRST_ADMIN_USERNAME: str = os.getenv("FIRST_ADMIN_USERNAME", "admin")
    FIRST_ADMIN_EMAIL: str = os.getenv("FIRST_ADMIN_EMAIL", "admin@example.com")
    FIRST_ADMIN_FULL_NAME: str = os.getenv("FIRST_ADMIN_FULL_NAME", "Administrator")

    # Frontend URL and CORS
    WEB_URL: str = os.getenv("WEB_URL", "http://localhost:5173")
    CORS_ORIGINS: List[str] = _split_csv(os.getenv("CORS_ORIGINS", ""))

    # Logging settings
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    LOG_FILE_PATH: str = os.getenv("LOG_FILE_PATH", "logs/app.log")
    LOG_MAX_SIZE: int = int(os.getenv("LOG_MAX_SIZE", "10485760"))  # 10MB
    LOG_BACKUP_COUNT: int = int(os.getenv("LOG_BACKUP_COUNT", "5"))
    LOG_TO_CONSOLE: bool = os.getenv("LOG_TO_CONSOLE", "true").lower() == "true"
    LOG_TO_FILE: bool = os.getenv("LOG_TO_FILE", "true").lower() == "true"

    # Sensitive Data Filtering
    ENABLE_SENSITIVE_DATA_FILTER: bool = os.getenv("ENABLE_SENSITIVE_DATA_FILTER", "true").lower() == "true"


settings = Settings()
