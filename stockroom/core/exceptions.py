"""
Business exceptions.

Services raise these; the handlers in ``stockroom.main`` turn them into the
JSON envelope with the HTTP status of their ``BizCode``.
"""
from typing import Any, Dict, Optional, Union

from stockroom.core.error_codes import BizCode


class BusinessException(Exception):
    """Base class for business logic errors."""

    default_code: BizCode = BizCode.BAD_REQUEST

    def __init__(
        self,
        message: str,
        code: Union[BizCode, int, None] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = self.default_code if code is None else code
        self.context: Dict[str, Any] = dict(context or {})
        self.cause = cause

    def __str__(self) -> str:
        label = self.code.name if isinstance(self.code, BizCode) else str(self.code)
        if not self.context:
            return f"{label}: {self.message}"
        return f"{label}: {self.message}, context={self.context}"


class ValidationException(BusinessException):
    """Invalid input."""

    default_code = BizCode.VALIDATION_FAILED

    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        if field:
            kwargs["context"] = {"field": field, **kwargs.get("context", {})}
        super().__init__(message, **kwargs)


class AuthenticationException(BusinessException):
    default_code = BizCode.UNAUTHORIZED

    def __init__(self, message: str = "Authentication failed", **kwargs):
        super().__init__(message, **kwargs)


class AuthorizationException(BusinessException):
    """The subject's role is not on the allow-list."""

    default_code = BizCode.ROLE_NOT_ALLOWED

    def __init__(self, message: str = "Role not allowed", **kwargs):
        super().__init__(message, **kwargs)


class ResourceNotFoundException(BusinessException):
    default_code = BizCode.NOT_FOUND

    def __init__(self, resource_type: str, resource_id: Optional[str] = None, **kwargs):
        context = {"resource_type": resource_type}
        if resource_id:
            context["resource_id"] = resource_id
        context.update(kwargs.pop("context", {}))
        super().__init__(f"{resource_type} not found", context=context, **kwargs)


class DuplicateResourceException(BusinessException):
    default_code = BizCode.DUPLICATE_NAME

    def __init__(self, message: str = "Resource already exists", **kwargs):
        super().__init__(message, **kwargs)


class PermissionDeniedException(BusinessException):
    """No effective grant covers the required permission."""

    default_code = BizCode.PERMISSION_DENIED

    def __init__(self, message: str = "Permission denied", **kwargs):
        super().__init__(message, **kwargs)
