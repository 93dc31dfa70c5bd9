"""
Pydantic schemas for the audit log API.
"""

from datetime import datetime
from typing import Any

from ninja import Schema
from pydantic import Field


class AuditLogParams(Schema):
    """Query parameters for listing audit entries."""

    actor_type: str | None = None
    action: str | None = None
    actor_id: str | None = None
    api_key_id: int | None = None
    organization_id: str | None = None
    since: datetime | None = None
    until: datetime | None = None
    limit: int = Field(default=50, ge=1, le=500)
    offset: int = Field(default=0, ge=0)


class AuditLogEntryResponse(Schema):
    """A single audit entry."""

    id: int
    action: str
    actor_type: str
    actor_id: str
    actor_name: str
    api_key_id: int | None
    organization_id: str
    ip_address: str | None
    user_agent: str
    details: dict[str, Any]
    created_at: datetime


class AuditLogListResponse(Schema):
    """Page of audit entries."""

    total: int = Field(description="Entries matching the filters")
    entries: list[AuditLogEntryResponse]
