"""
Error code taxonomy.

Closed set of stable string codes carried by every error response.
Codes are grouped by prefix:

    client-      malformed, missing or conflicting input (4xx)
    auth-        authentication and authorization
    validation-  structural or semantic input errors
    rate-limit-  throttling
    storage-     database connection, query, duplicate key, schema
    external-    third-party services and the network
    server-      unclassified internal failures (5xx)
    upload-      file upload policy

The prefix is for humans only; nothing parses it at runtime.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Every error code the API can return."""

    # Client errors
    BAD_REQUEST = "client-bad-request"
    NOT_FOUND = "client-not-found"
    METHOD_NOT_ALLOWED = "client-method-not-allowed"
    CONFLICT = "client-conflict"
    UNPROCESSABLE = "client-unprocessable"

    # Authentication & authorization
    UNAUTHORIZED = "auth-unauthorized"
    FORBIDDEN = "auth-forbidden"
    USER_NOT_FOUND = "auth-user-not-found"
    EMAIL_ALREADY_EXISTS = "auth-email-already-exists"
    INVALID_TOKEN = "auth-invalid-token"
    TOKEN_NOT_FOUND = "auth-token-not-found"
    TOKEN_EXPIRED = "auth-token-expired"
    INVALID_CREDENTIALS = "auth-invalid-credentials"
    ACCOUNT_LOCKED = "auth-account-locked"
    ACCOUNT_DISABLED = "auth-account-disabled"
    INSUFFICIENT_PERMISSIONS = "auth-insufficient-permissions"

    # Validation
    VALIDATION_FAILED = "validation-failed"
    REQUIRED_FIELD = "validation-required-field"
    INVALID_FORMAT = "validation-invalid-format"
    INVALID_TYPE = "validation-invalid-type"
    OUT_OF_RANGE = "validation-out-of-range"
    DUPLICATE_VALUE = "validation-duplicate-value"
    DB_VALIDATION_ERROR = "validation-db-error"

    # Rate limiting
    RATE_LIMIT_EXCEEDED = "rate-limit-exceeded"

    # Storage
    STORAGE_ERROR = "storage-error"
    STORAGE_CONNECTION_ERROR = "storage-connection-error"
    STORAGE_QUERY_ERROR = "storage-query-error"
    STORAGE_TRANSACTION_ERROR = "storage-transaction-error"
    DUPLICATE_KEY = "storage-duplicate-key"
    STORAGE_NOT_FOUND = "storage-not-found"

    # External services
    EXTERNAL_API_ERROR = "external-api-error"
    EXTERNAL_UNAVAILABLE = "external-unavailable"
    EXTERNAL_TIMEOUT = "external-timeout"

    # Server
    INTERNAL_ERROR = "server-internal-error"
    NOT_IMPLEMENTED = "server-not-implemented"
    UNHANDLED_ERROR = "server-unhandled-error"

    # Uploads
    UPLOAD_ERROR = "upload-error"
    UPLOAD_TOO_LARGE = "upload-too-large"
    UPLOAD_INVALID_TYPE = "upload-invalid-type"
    UPLOAD_FAILED = "upload-failed"


# Code used when a framework HTTP signal carries a bare status.
STATUS_CODE_DEFAULTS: dict[int, ErrorCode] = {
    400: ErrorCode.BAD_REQUEST,
    401: ErrorCode.UNAUTHORIZED,
    403: ErrorCode.FORBIDDEN,
    404: ErrorCode.NOT_FOUND,
    405: ErrorCode.METHOD_NOT_ALLOWED,
    409: ErrorCode.CONFLICT,
    413: ErrorCode.UPLOAD_TOO_LARGE,
    415: ErrorCode.UPLOAD_INVALID_TYPE,
    422: ErrorCode.UNPROCESSABLE,
    429: ErrorCode.RATE_LIMIT_EXCEEDED,
    500: ErrorCode.INTERNAL_ERROR,
    501: ErrorCode.NOT_IMPLEMENTED,
    502: ErrorCode.EXTERNAL_API_ERROR,
    503: ErrorCode.EXTERNAL_UNAVAILABLE,
    504: ErrorCode.EXTERNAL_TIMEOUT,
}


def code_for_status(status: int) -> ErrorCode:
    """Return the default error code for an HTTP status."""
    if status in STATUS_CODE_DEFAULTS:
        return STATUS_CODE_DEFAULTS[status]
    if status < 500:
        return ErrorCode.BAD_REQUEST
    return ErrorCode.INTERNAL_ERROR
