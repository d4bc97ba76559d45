"""
Example routes showing how faults surface to clients.

Each route raises one family of fault: operational AppErrors, request
validation, signed-token failures, rate limiting, upload policy,
network and unclassified failures. None of them builds an error
response; the central error handler does.

Mounted only when ``settings.expose_examples`` is on.
"""

import asyncio
from typing import Any, Optional

import jwt
from fastapi import APIRouter, Query, Request

from faultline.core.config import Settings, settings
from faultline.interfaces.schemas import (
    ErrorResponse,
    SignupRequest,
    SignupResponse,
    TokenClaimsResponse,
    UploadResponse,
)
from faultline.shared.errors import AppError, ErrorCode, FaultKind
from faultline.shared.security.rate_limiting import limiter
from faultline.shared.uploads import UploadPolicy

router = APIRouter(
    prefix="/examples",
    tags=["examples"],
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)

REGISTERED_EMAILS = frozenset({"taken@example.com"})


async def _find_user(user_id: str) -> Optional[dict[str, Any]]:
    await asyncio.sleep(0)
    return None


async def _call_upstream() -> None:
    await asyncio.sleep(0)
    raise ConnectionRefusedError(111, "Connection refused")


def _upload_policy(config: Settings) -> UploadPolicy:
    return UploadPolicy(
        max_file_size=config.max_upload_size_bytes,
        max_files=config.max_upload_files,
        field_name=config.upload_field_name,
    )


@router.get("/validation", summary="Operational validation fault")
def validation_error() -> None:
    raise AppError(FaultKind.VALIDATION, "Email is required")


@router.get("/validation/details", summary="Validation fault with details")
def validation_error_with_details() -> None:
    raise AppError(
        FaultKind.VALIDATION,
        "Validation failed",
        ErrorCode.VALIDATION_FAILED,
        details={
            "fields": ["email", "password"],
            "errors": ["Email is required", "Password must be at least 8 characters"],
        },
    )


@router.get("/users/{user_id}", summary="Not-found fault from an async lookup")
async def get_user(user_id: str) -> dict[str, Any]:
    user = await _find_user(user_id)
    if user is None:
        raise AppError(FaultKind.NOT_FOUND, f"User with ID {user_id} not found")
    return user


@router.post(
    "/signup",
    response_model=SignupResponse,
    status_code=201,
    summary="Request body validation and conflicts",
)
def signup(payload: SignupRequest) -> SignupResponse:
    """Register an account; rejects malformed and already used emails."""
    if "@" not in payload.email:
        raise AppError(
            FaultKind.VALIDATION, "Invalid email format", ErrorCode.INVALID_FORMAT
        )
    if payload.email.lower() in REGISTERED_EMAILS:
        raise AppError(
            FaultKind.CONFLICT,
            "An account with this email already exists",
            ErrorCode.EMAIL_ALREADY_EXISTS,
        )
    return SignupResponse(email=payload.email)


@router.get(
    "/token",
    response_model=TokenClaimsResponse,
    summary="Signed token verification",
)
def verify_token(token: str = Query(..., min_length=1)) -> TokenClaimsResponse:
    """Verify ``token``; expired or invalid tokens raise PyJWT errors."""
    claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    return TokenClaimsResponse(subject=str(claims.get("sub", "")))


@router.get("/limited", summary="Rate limited endpoint")
@limiter.limit("3/minute")
def limited(request: Request) -> dict[str, str]:
    return {"status": "ok"}


@router.get("/login-attempts", summary="Operational rate limit fault")
def too_many_login_attempts() -> None:
    raise AppError(
        FaultKind.TOO_MANY_REQUESTS,
        "Too many login attempts. Please try again in 15 minutes",
    )


@router.post("/uploads", response_model=UploadResponse, summary="Upload policy")
async def upload_files(request: Request) -> UploadResponse:
    """Accept files under the configured field, within size and count limits."""
    form = await request.form()
    files = _upload_policy(request.app.state.settings).collect(form)
    return UploadResponse(filenames=[upload.filename or "" for upload in files])


@router.get("/failures/database", summary="Operational storage fault")
def database_failure() -> None:
    raise AppError(FaultKind.DATABASE, "Failed to save user to database")


@router.get("/failures/not-implemented", summary="Operational 501 fault")
def not_implemented() -> None:
    raise AppError(FaultKind.NOT_IMPLEMENTED)


@router.get("/failures/network", summary="Network fault from an awaited call")
async def network_failure() -> None:
    await _call_upstream()


@router.get("/failures/unexpected", summary="Unclassified fault")
def unexpected_failure() -> None:
    raise RuntimeError("Cache index corrupted at slot 7")

