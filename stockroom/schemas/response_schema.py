from pydantic import BaseModel, Field
from typing import Any, Optional
import time


class ApiResponse(BaseModel):
    code: int = Field(0, description="Business status code, 0 on success")
    msg: str = Field("OK", description="Short human readable message")
    data: Optional[Any] = Field(None, description="Payload")
    error: str = Field("", description="Error detail, empty on success")
    time: int = Field(default_factory=lambda: int(time.time() * 1000), description="Unix time in milliseconds")
