"""
Fault classification cascade.

Maps any exception onto the (status, code, message, details) tuple of an
error response. Rules are tried top to bottom and the first match wins.
Later rules assume earlier ones already excluded their cases, so the
order of RULES is part of the contract.

Collaborators that cannot raise an AppError (storage, token, upload and
network layers) raise their own exceptions; each has a rule here.
"""

import json
import re
import socket
from dataclasses import dataclass
from typing import Any, Callable, Optional

import httpx
import jwt
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.exc import DataError, IntegrityError
from starlette.exceptions import HTTPException

from faultline.shared.errors.codes import ErrorCode, code_for_status
from faultline.shared.errors.faults import is_operational
from faultline.shared.uploads import LIMIT_FILE_SIZE, UploadLimitError

# PostgreSQL SQLSTATE values
PG_INVALID_TEXT_REPRESENTATION = "22P02"
PG_UNIQUE_VIOLATION = "23505"

GENERIC_MESSAGE = "An unexpected error occurred"

_CAST_PATTERN = re.compile(r'invalid input syntax for type (?P<path>[\w ]+): "(?P<value>.*)"')
_KEY_PATTERN = re.compile(r"Key \((?P<columns>.+?)\)=\(")


@dataclass(frozen=True)
class Classification:
    """Result of running an exception through the cascade."""

    rule: str
    http_status: int
    error_code: ErrorCode
    message: str
    error_name: str
    details: Any = None


@dataclass(frozen=True)
class Rule:
    """A predicate/handler pair of the cascade."""

    name: str
    matches: Callable[[BaseException], bool]
    classify: Callable[[BaseException, bool], Classification]


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _name(exc: BaseException) -> str:
    return type(exc).__name__ or "Error"


def _sqlstate(exc: BaseException) -> Optional[str]:
    """Return the SQLSTATE of the DBAPI error wrapped by SQLAlchemy.

    psycopg 3 exposes it as ``sqlstate``, psycopg2 as ``pgcode``.
    """
    orig = getattr(exc, "orig", None)
    if orig is None:
        return None
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def _driver_text(exc: BaseException, attr: str) -> str:
    orig = getattr(exc, "orig", None)
    diag = getattr(orig, "diag", None)
    text = getattr(diag, attr, None) if diag is not None else None
    return text or str(orig or "")


def _field_errors(errors: list[dict[str, Any]]) -> list[dict[str, str]]:
    return [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg", ""),
        }
        for error in errors
    ]


def _is_body_parse_failure(exc: BaseException) -> bool:
    return isinstance(exc, RequestValidationError) and any(
        error.get("type") == "json_invalid" for error in exc.errors()
    )


# ------------------------------------------------------------------
# Rules, in cascade order
# ------------------------------------------------------------------


def _classify_operational(exc: Any, _debug: bool) -> Classification:
    return Classification(
        rule="operational",
        http_status=exc.http_status,
        error_code=exc.error_code,
        message=exc.message,
        error_name=getattr(exc, "error_name", None) or _name(exc),
        details=exc.details,
    )


def _matches_data_validation(exc: BaseException) -> bool:
    if isinstance(exc, ValidationError):
        return True
    return isinstance(exc, RequestValidationError) and not _is_body_parse_failure(exc)


def _classify_data_validation(exc: Any, _debug: bool) -> Classification:
    return Classification(
        rule="data-validation",
        http_status=400,
        error_code=ErrorCode.DB_VALIDATION_ERROR,
        message="Validation failed",
        error_name=_name(exc),
        details=_field_errors(list(exc.errors())),
    )


def _matches_cast(exc: BaseException) -> bool:
    return isinstance(exc, DataError) and _sqlstate(exc) == PG_INVALID_TEXT_REPRESENTATION


def _classify_cast(exc: BaseException, _debug: bool) -> Classification:
    match = _CAST_PATTERN.search(_driver_text(exc, "message_primary"))
    if match:
        message = f"Invalid {match.group('path')}: {match.group('value')}"
    else:
        message = "Invalid input format"
    return Classification(
        rule="data-cast",
        http_status=400,
        error_code=ErrorCode.INVALID_FORMAT,
        message=message,
        error_name=_name(exc),
    )


def _matches_duplicate_key(exc: BaseException) -> bool:
    return isinstance(exc, IntegrityError) and _sqlstate(exc) == PG_UNIQUE_VIOLATION


def _classify_duplicate_key(exc: BaseException, _debug: bool) -> Classification:
    details = None
    match = _KEY_PATTERN.search(_driver_text(exc, "message_detail"))
    if match:
        fields = [col.strip().strip('"') for col in match.group("columns").split(",")]
        details = {"duplicateFields": fields}
    return Classification(
        rule="duplicate-key",
        http_status=409,
        error_code=ErrorCode.DUPLICATE_KEY,
        message="A resource with this value already exists",
        error_name=_name(exc),
        details=details,
    )


def _matches_body_parse(exc: BaseException) -> bool:
    return isinstance(exc, json.JSONDecodeError) or _is_body_parse_failure(exc)


def _classify_body_parse(exc: BaseException, _debug: bool) -> Classification:
    return Classification(
        rule="body-parse",
        http_status=400,
        error_code=ErrorCode.VALIDATION_FAILED,
        message="Invalid JSON in request body",
        error_name=_name(exc),
    )


def _classify_token(exc: BaseException, _debug: bool) -> Classification:
    if isinstance(exc, jwt.ExpiredSignatureError):
        message = "Your session has expired. Please log in again"
    else:
        message = "Invalid authentication token"
    return Classification(
        rule="token",
        http_status=401,
        error_code=ErrorCode.INVALID_TOKEN,
        message=message,
        error_name=_name(exc),
    )


def _matches_rate_limit(exc: BaseException) -> bool:
    return getattr(exc, "status_code", None) == 429


def _classify_rate_limit(exc: BaseException, _debug: bool) -> Classification:
    return Classification(
        rule="rate-limit",
        http_status=429,
        error_code=ErrorCode.RATE_LIMIT_EXCEEDED,
        message="Too many requests. Please try again later",
        error_name=_name(exc),
    )


def _classify_upload(exc: BaseException, _debug: bool) -> Classification:
    if getattr(exc, "code", None) == LIMIT_FILE_SIZE:
        message = "File size exceeds the maximum allowed limit"
    else:
        message = "File upload error"
    return Classification(
        rule="upload",
        http_status=400,
        error_code=ErrorCode.UPLOAD_ERROR,
        message=message,
        error_name=_name(exc),
    )


NETWORK_ERRORS = (
    ConnectionRefusedError,
    TimeoutError,
    socket.gaierror,
    httpx.ConnectError,
    httpx.TimeoutException,
)


def _classify_network(exc: BaseException, _debug: bool) -> Classification:
    return Classification(
        rule="network",
        http_status=503,
        error_code=ErrorCode.EXTERNAL_UNAVAILABLE,
        message="External service is unavailable. Please try again later",
        error_name=_name(exc),
    )


def _classify_http_signal(exc: Any, _debug: bool) -> Classification:
    status = exc.status_code if 400 <= exc.status_code <= 599 else 500
    return Classification(
        rule="http-signal",
        http_status=status,
        error_code=code_for_status(status),
        message=str(exc.detail) if exc.detail else GENERIC_MESSAGE,
        error_name=_name(exc),
    )


def _classify_unknown(exc: BaseException, debug: bool) -> Classification:
    # Raw messages of unclassified faults stay out of production responses
    message = (str(exc) if debug else "") or GENERIC_MESSAGE
    return Classification(
        rule="unclassified",
        http_status=500,
        error_code=ErrorCode.INTERNAL_ERROR,
        message=message,
        error_name=_name(exc),
    )


RULES: tuple[Rule, ...] = (
    Rule("operational", is_operational, _classify_operational),
    Rule("data-validation", _matches_data_validation, _classify_data_validation),
    Rule("data-cast", _matches_cast, _classify_cast),
    Rule("duplicate-key", _matches_duplicate_key, _classify_duplicate_key),
    Rule("body-parse", _matches_body_parse, _classify_body_parse),
    Rule("token", lambda exc: isinstance(exc, jwt.InvalidTokenError), _classify_token),
    Rule("rate-limit", _matches_rate_limit, _classify_rate_limit),
    Rule(
        "upload",
        lambda exc: isinstance(exc, UploadLimitError),
        _classify_upload,
    ),
    Rule("network", lambda exc: isinstance(exc, NETWORK_ERRORS), _classify_network),
    Rule("http-signal", lambda exc: isinstance(exc, HTTPException), _classify_http_signal),
    Rule("unclassified", lambda exc: True, _classify_unknown),
)


def classify(exc: BaseException, debug: bool = False) -> Classification:
    """Run ``exc`` through the cascade and return the first match.

    Args:
        exc: Any exception raised while serving a request.
        debug: Whether debug mode is on; only the last rule reads it.

    Returns:
        The classification produced by the first matching rule.
    """
    for rule in RULES:
        if rule.matches(exc):
            return rule.classify(exc, debug)
    # The last rule matches everything
    raise AssertionError("cascade has no catch-all rule")
