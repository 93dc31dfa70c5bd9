"""
Pydantic schemas for member endpoints.
"""

from ninja import Schema
from pydantic import Field


class LookupResponse(Schema):
    """Result of a member lookup. Not found is a normal 200 response."""

    found: bool
    mm_cepi: bool = Field(description="Classification flag of the matched member")
    organisation_id: int | None = Field(description="Organization of the matched member")
    organisation_name: str | None


class LookupErrorResponse(LookupResponse):
    """Lookup rejected or failed. ``found`` is always false."""

    error: str = Field(description="Machine-readable error code")
    message: str


class RateLimitedResponse(LookupErrorResponse):
    """Lookup rejected by the rate limiter."""

    retry_after: int = Field(description="Seconds until the client may retry")


class MemberResponse(Schema):
    """A member with its decrypted email (staff only)."""

    id: int
    email: str
    mm_cepi: bool
    is_active: bool


class MemberListResponse(Schema):
    """Members of one organization."""

    organization_id: int
    count: int
    members: list[MemberResponse]
