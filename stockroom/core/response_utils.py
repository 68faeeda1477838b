import time
from typing import Any, Optional

from stockroom.core.error_codes import BizCode


def _envelope(code: int, msg: str, error: str, data: Optional[Any]) -> dict:
    return {
        "code": int(code),
        "msg": msg,
        "data": data if data is not None else {},
        "error": error,
        "time": int(time.time() * 1000),
    }


def success(data: Optional[Any] = None, msg: str = "OK") -> dict:
    return _envelope(BizCode.OK, msg, "", data)


def fail(code: int, msg: str, error: str = "", data: Optional[Any] = None) -> dict:
    return _envelope(code, msg, error, data)
