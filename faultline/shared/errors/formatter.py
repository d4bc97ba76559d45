"""
Canonical error response.

Every failed request is answered with the same JSON shape:

    {
        "errorName": str,
        "errorCode": str,
        "httpStatus": int,
        "message": str,
        "details": any,          # only when there is something to show
        "timestamp": ISO-8601,
        "path": str
    }

Stack traces are added to ``details`` only in debug mode.
"""

import traceback
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from faultline.shared.errors.cascade import Classification
from faultline.shared.errors.codes import ErrorCode


class CanonicalErrorResponse(BaseModel):
    """Body of every error response."""

    model_config = ConfigDict(populate_by_name=True)

    error_name: str = Field(alias="errorName")
    error_code: ErrorCode = Field(alias="errorCode")
    http_status: int = Field(alias="httpStatus", ge=400, le=599)
    message: str
    details: Optional[Any] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    path: str

    def to_response(self, headers: Optional[dict[str, str]] = None) -> JSONResponse:
        """Serialize into a JSONResponse, omitting absent details."""
        return JSONResponse(
            status_code=self.http_status,
            content=self.model_dump(by_alias=True, exclude_none=True, mode="json"),
            headers=headers,
        )


def _stack_of(exc: BaseException) -> str:
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


def _with_stack(details: Any, stack: str) -> dict[str, Any]:
    if details is None:
        return {"stack": stack}
    if isinstance(details, dict):
        return {**details, "stack": stack}
    return {"data": details, "stack": stack}


def format_error(
    classification: Classification,
    exc: BaseException,
    path: str,
    debug: bool = False,
) -> CanonicalErrorResponse:
    """Build the canonical response for a classified exception.

    Args:
        classification: Output of the cascade for ``exc``.
        exc: The exception itself, for the stack trace.
        path: Request path (with query string) the fault occurred on.
        debug: Include the stack trace in ``details``.

    Returns:
        The response model, ready to serialize.
    """
    details = classification.details
    if debug:
        details = _with_stack(details, _stack_of(exc))

    return CanonicalErrorResponse(
        error_name=classification.error_name or "Error",
        error_code=classification.error_code,
        http_status=classification.http_status,
        message=classification.message,
        details=details,
        path=path,
    )
