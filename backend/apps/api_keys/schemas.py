"""
Pydantic schemas for API key management endpoints.
"""

from datetime import datetime

from ninja import Schema
from pydantic import Field


class CreateApiKeyRequest(Schema):
    """Request to create an API key."""

    name: str = Field(min_length=1, max_length=255, description="Display name")
    expires_at: datetime | None = Field(default=None, description="Optional expiry timestamp")


class ApiKeyResponse(Schema):
    """API key details. Never includes the secret or its hash."""

    id: int
    name: str
    is_active: bool
    is_expired: bool
    expires_at: datetime | None
    last_used_at: datetime | None
    created_at: datetime
    usage_count: int | None = Field(default=None, description="Lookups made with this key")


class CreateApiKeyResponse(Schema):
    """Response after creating an API key."""

    api_key: ApiKeyResponse
    secret: str = Field(description="Plaintext secret. Shown once; store it now.")


class ApiKeyListResponse(Schema):
    """List of API keys."""

    api_keys: list[ApiKeyResponse]


class ApiKeyUsageResponse(Schema):
    """Lookup statistics for one key."""

    total_calls: int
    successful_calls: int
    failed_calls: int
    last_called_at: datetime | None
