from .user_model import User
from .audit_log_model import AuditLog

__all__ = [
    "User",
    "AuditLog",
]
