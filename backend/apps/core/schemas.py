"""
Core schemas - shared Pydantic models for API responses.
"""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response format."""

    detail: str = Field(..., description="Human-readable error message")

    model_config = {"json_schema_extra": {"example": {"detail": "Organization not found."}}}


class StatusResponse(BaseModel):
    """Acknowledgement for state-changing actions without a body."""

    success: bool = True
