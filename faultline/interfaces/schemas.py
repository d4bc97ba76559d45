"""
Pydantic schemas for API request/response validation.

These schemas define the API contract. No business logic belongs here.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from faultline.shared.errors.formatter import CanonicalErrorResponse

# Documented on routes; every error response has this shape
ErrorResponse = CanonicalErrorResponse


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    timestamp: datetime


class SignupRequest(BaseModel):
    """Request schema for the example signup endpoint.

    Attributes:
        email: Account email address.
        password: Plain password, at least 8 characters.
    """

    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=8, max_length=128)


class SignupResponse(BaseModel):
    """Response schema for the example signup endpoint."""

    email: str


class TokenClaimsResponse(BaseModel):
    """Claims of a verified token."""

    subject: str


class UploadResponse(BaseModel):
    """Names of the accepted uploaded files."""

    filenames: list[str]
