"""
Redaction of credentials and personal data.

Applied to log records and to exception messages before they reach a client.
User emails, bearer tokens and secret-looking strings must never appear in
either.
"""
import re
from typing import Any, Dict, Optional, Pattern, Tuple


class SensitiveDataFilter:

    REDACTED_TEXT = "***REDACTED***"

    # Field names containing any of these are redacted wholesale
    SENSITIVE_KEYS = (
        "password",
        "passwd",
        "secret",
        "token",
        "authorization",
        "api_key",
        "apikey",
        "private_key",
        "session",
    )

    # Order matters: full JWTs before truncated ones, both before generic keys
    SENSITIVE_PATTERNS: Tuple[Tuple[Pattern, str], ...] = (
        (re.compile(r"\b[\w.%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"), "[EMAIL]"),
        (re.compile(r"\beyJ[\w-]+\.eyJ[\w-]+\.[\w-]+"), "[TOKEN]"),
        (re.compile(r"\beyJ[\w-]+\.[\w-]+(?:\.[\w-]*)?"), "[TOKEN]"),
        (re.compile(r"\b[A-Za-z0-9]{32,}\b"), "[API_KEY]"),
    )

    _enabled: Optional[bool] = None

    @classmethod
    def is_enabled(cls) -> bool:
        if cls._enabled is None:
            from stockroom.core.config import settings
            cls._enabled = settings.ENABLE_SENSITIVE_DATA_FILTER
        return cls._enabled

    @classmethod
    def _is_sensitive_key(cls, key: str) -> bool:
        lowered = key.lower()
        return any(marker in lowered for marker in cls.SENSITIVE_KEYS)

    @classmethod
    def filter_string(cls, text: str) -> str:
        if not cls.is_enabled() or not isinstance(text, str):
            return text
        for pattern, replacement in cls.SENSITIVE_PATTERNS:
            text = pattern.sub(replacement, text)
        return text

    @classmethod
    def _filter_value(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return cls.filter_dict(value)
        if isinstance(value, list):
            return [cls._filter_value(item) for item in value]
        if isinstance(value, str):
            return cls.filter_string(value)
        return value

    @classmethod
    def filter_dict(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        """Copy of ``data`` with sensitive keys masked and string values scrubbed, recursively."""
        if not cls.is_enabled() or not isinstance(data, dict):
            return data
        return {
            key: cls.REDACTED_TEXT if cls._is_sensitive_key(str(key)) else cls._filter_value(value)
            for key, value in data.items()
        }

    @classmethod
    def filter_message(cls, message: str, context: Optional[Dict[str, Any]] = None) -> Tuple[str, Dict[str, Any]]:
        """Filter an exception message together with its context."""
        return cls.filter_string(message), cls.filter_dict(context) if context else {}
