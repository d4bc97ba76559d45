"""
Operational faults.

An operational fault is an anticipated error raised by application code
at the point a rule is violated. It carries everything the error handler
needs: HTTP status, error code, message and optional details.

There is a single exception type, AppError, tagged with a FaultKind.
The kind decides the default status, code and message; the raiser may
override any of them. No framework imports allowed.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from faultline.shared.errors.codes import ErrorCode


class FaultKind(Enum):
    """Closed set of operational fault kinds.

    Each member is ``(error_name, http_status, error_code, default_message)``.
    """

    # Client errors
    BAD_REQUEST = (
        "BadRequestError", 400, ErrorCode.BAD_REQUEST,
        "The request is invalid or malformed",
    )
    UNAUTHORIZED = (
        "UnauthorizedError", 401, ErrorCode.UNAUTHORIZED,
        "Authentication required. Please provide valid credentials",
    )
    FORBIDDEN = (
        "ForbiddenError", 403, ErrorCode.FORBIDDEN,
        "You do not have permission to access this resource",
    )
    NOT_FOUND = (
        "NotFoundError", 404, ErrorCode.NOT_FOUND,
        "The requested resource was not found",
    )
    METHOD_NOT_ALLOWED = (
        "MethodNotAllowedError", 405, ErrorCode.METHOD_NOT_ALLOWED,
        "The HTTP method is not allowed for this endpoint",
    )
    CONFLICT = (
        "ConflictError", 409, ErrorCode.CONFLICT,
        "The request conflicts with the current state of the resource",
    )
    UNPROCESSABLE_ENTITY = (
        "UnprocessableEntityError", 422, ErrorCode.UNPROCESSABLE,
        "The request is well-formed but contains semantic errors",
    )
    TOO_MANY_REQUESTS = (
        "TooManyRequestsError", 429, ErrorCode.RATE_LIMIT_EXCEEDED,
        "Too many requests. Please try again later",
    )

    # Validation
    VALIDATION = (
        "ValidationError", 400, ErrorCode.VALIDATION_FAILED,
        "Validation failed. Please check your input",
    )

    # Authentication & authorization
    AUTHENTICATION = (
        "AuthenticationError", 401, ErrorCode.UNAUTHORIZED,
        "Authentication failed. Please check your credentials",
    )
    AUTHORIZATION = (
        "AuthorizationError", 403, ErrorCode.FORBIDDEN,
        "You do not have permission to perform this action",
    )

    # Storage
    DATABASE = (
        "DatabaseError", 500, ErrorCode.STORAGE_ERROR,
        "A database error occurred. Please try again later",
    )
    DATABASE_CONNECTION = (
        "DatabaseConnectionError", 503, ErrorCode.STORAGE_CONNECTION_ERROR,
        "Unable to connect to the database. Please try again later",
    )

    # External services
    EXTERNAL_SERVICE = (
        "ExternalServiceError", 502, ErrorCode.EXTERNAL_API_ERROR,
        "An external service error occurred. Please try again later",
    )
    SERVICE_UNAVAILABLE = (
        "ServiceUnavailableError", 503, ErrorCode.EXTERNAL_UNAVAILABLE,
        "The service is temporarily unavailable. Please try again later",
    )
    GATEWAY_TIMEOUT = (
        "GatewayTimeoutError", 504, ErrorCode.EXTERNAL_TIMEOUT,
        "The request timed out. Please try again later",
    )

    # Server
    INTERNAL_SERVER = (
        "InternalServerError", 500, ErrorCode.INTERNAL_ERROR,
        "An internal server error occurred. Please try again later",
    )
    NOT_IMPLEMENTED = (
        "NotImplementedError", 501, ErrorCode.NOT_IMPLEMENTED,
        "This feature is not yet implemented",
    )

    def __init__(
        self,
        error_name: str,
        http_status: int,
        error_code: ErrorCode,
        default_message: str,
    ) -> None:
        self.error_name = error_name
        self.http_status = http_status
        self.error_code = error_code
        self.default_message = default_message


class AppError(Exception):
    """An anticipated fault with a known HTTP status and error code.

    Args:
        kind: The fault kind; supplies the defaults.
        message: Human readable message. Defaults to the kind's message.
        error_code: Overrides the kind's default code.
        details: Optional structured value returned to the client.
        http_status: Overrides the kind's default status (400-599).

    Raises:
        ValueError: If an overriding status is outside 400-599, or an
            overriding code is not an ErrorCode value.
    """

    is_operational = True

    def __init__(
        self,
        kind: FaultKind,
        message: Optional[str] = None,
        error_code: Optional[ErrorCode] = None,
        details: Any = None,
        http_status: Optional[int] = None,
    ) -> None:
        if http_status is not None and not 400 <= http_status <= 599:
            raise ValueError(
                f"http_status must be between 400 and 599, got {http_status}"
            )
        self.kind = kind
        self.message = message or kind.default_message
        self.error_code = ErrorCode(error_code) if error_code else kind.error_code
        self.http_status = http_status or kind.http_status
        self.details = details
        self.timestamp = datetime.now(timezone.utc)
        super().__init__(self.message)

    @property
    def error_name(self) -> str:
        return self.kind.error_name

    def to_dict(self) -> dict[str, Any]:
        """Return the fields the error handler reads."""
        return {
            "http_status": self.http_status,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return (
            f"AppError({self.kind.name}, {self.message!r}, "
            f"code={self.error_code.value}, status={self.http_status})"
        )


def is_operational(exc: BaseException) -> bool:
    """Return True if ``exc`` declares itself an operational fault."""
    return getattr(exc, "is_operational", False) is True
