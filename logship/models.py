import traceback
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict


class ErrorInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    message: str
    stack: Optional[str] = None

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ErrorInfo":
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return cls(
            name=type(exc).__name__,
            message=str(exc) or "No error message",
            stack=stack.strip() or None,
        )


class ApiLogEvent(BaseModel):
    """One completed request, as handed over by the HTTP instrumentation."""

    model_config = ConfigDict(frozen=True)

    method: str
    endpoint: str
    status_code: int
    response_time_ms: float
    request_body: Any = None
    response_body: Any = None
    client_ip: Optional[str] = None
    user_agent: Optional[str] = None


class ErrorLogEvent(ApiLogEvent):
    """A failed request; error_id is embedded in the shipped line so it can be searched for."""

    error_id: str
    error: ErrorInfo


LogEvent = Union[ApiLogEvent, ErrorLogEvent]
