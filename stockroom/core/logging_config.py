import logging
import logging.handlers
from pathlib import Path
from typing import Optional

from stockroom.core.config import settings
from stockroom.core.sensitive_filter import SensitiveDataFilter


class SensitiveDataLoggingFilter(logging.Filter):
    """Redacts the message and its %-arguments before a handler formats them."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = SensitiveDataFilter.filter_string(record.msg)

        args = record.args
        if isinstance(args, dict):
            record.args = SensitiveDataFilter.filter_dict(args)
        elif args:
            record.args = tuple(SensitiveDataFilter.filter_string(a) if isinstance(a, str) else a for a in args)
        return True


class LoggingConfig:
    """Process-wide logging setup."""

    _initialized = False

    @staticmethod
    def _file_handler() -> logging.Handler:
        path = Path(settings.LOG_FILE_PATH)
        path.parent.mkdir(parents=True, exist_ok=True)
        return logging.handlers.RotatingFileHandler(
            filename=str(path),
            maxBytes=settings.LOG_MAX_SIZE,
            backupCount=settings.LOG_BACKUP_COUNT,
            encoding="utf-8",
        )

    @classmethod
    def setup_logging(cls) -> None:
        """Install console/file handlers on the root logger; later calls are no-ops."""
        if cls._initialized:
            return

        level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
        root = logging.getLogger()
        root.setLevel(level)
        root.handlers.clear()

        handlers = []
        if settings.LOG_TO_CONSOLE:
            handlers.append(logging.StreamHandler())
        if settings.LOG_TO_FILE:
            handlers.append(cls._file_handler())

        formatter = logging.Formatter(fmt=settings.LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        redactor = SensitiveDataLoggingFilter()
        for handler in handlers:
            handler.setLevel(level)
            handler.setFormatter(formatter)
            handler.addFilter(redactor)
            root.addHandler(handler)

        cls._initialized = True
        logging.getLogger(__name__).info(
            f"Logging initialized: level={logging.getLevelName(level)}, file={settings.LOG_TO_FILE}"
        )


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name)


# Channel loggers, filterable by name in handlers and log shippers
def get_auth_logger() -> logging.Logger:
    return logging.getLogger("auth")


def get_security_logger() -> logging.Logger:
    return logging.getLogger("security")


def get_api_logger() -> logging.Logger:
    return logging.getLogger("api")


def get_db_logger() -> logging.Logger:
    return logging.getLogger("database")


def get_business_logger() -> logging.Logger:
    return logging.getLogger("business")


def get_audit_logger() -> logging.Logger:
    """Role and permission changes."""
    return logging.getLogger("audit")
