"""Standardized error response schema."""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error body for domain exceptions (4xx, 503)."""

    detail: str = Field(..., description="Human-readable error message")
    code: str = Field(..., description="Machine-readable error code")


class ConflictResponse(ErrorResponse):
    """Error body for lost compare-and-swap races. Reload before retrying."""

    business_key: str | None = None
    expected_version: int | None = None
