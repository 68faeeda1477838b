from enum import IntEnum


class BizCode(IntEnum):
    """Business status codes carried in the ``code`` field of every response."""
    OK = 0

    # Request errors
    BAD_REQUEST = 10001
    VALIDATION_FAILED = 10002
    INVALID_PARAMETER = 10003

    # Authentication
    UNAUTHORIZED = 20001
    TOKEN_INVALID = 20002
    USER_INACTIVE = 20003

    # Authorization
    FORBIDDEN = 30001
    PERMISSION_DENIED = 30002
    ROLE_NOT_ALLOWED = 30003

    # Lookups
    NOT_FOUND = 40001
    USER_NOT_FOUND = 40002
    TEMPLATE_NOT_FOUND = 40003

    # Conflicts
    DUPLICATE_NAME = 50001
    STATE_CONFLICT = 50002

    # Server side
    DB_ERROR = 60001
    INTERNAL_ERROR = 90001


HTTP_MAPPING = {
    BizCode.OK: 200,
    BizCode.BAD_REQUEST: 400,
    BizCode.VALIDATION_FAILED: 422,
    BizCode.INVALID_PARAMETER: 400,
    BizCode.UNAUTHORIZED: 401,
    BizCode.TOKEN_INVALID: 401,
    BizCode.USER_INACTIVE: 401,
    BizCode.FORBIDDEN: 403,
    BizCode.PERMISSION_DENIED: 403,
    BizCode.ROLE_NOT_ALLOWED: 403,
    BizCode.NOT_FOUND: 404,
    BizCode.USER_NOT_FOUND: 404,
    BizCode.TEMPLATE_NOT_FOUND: 404,
    BizCode.DUPLICATE_NAME: 409,
    BizCode.STATE_CONFLICT: 409,
    BizCode.DB_ERROR: 500,
    BizCode.INTERNAL_ERROR: 500,
}
