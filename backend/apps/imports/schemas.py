"""
Pydantic schemas for member import endpoints.
"""

from datetime import datetime

from ninja import Schema
from pydantic import Field


class ImportResultResponse(Schema):
    """Outcome of a member list upload."""

    rows_imported: int = Field(description="Valid rows in the file")
    rows_added: int = Field(description="Members created")
    rows_updated: int = Field(description="Members whose mm_cepi flag changed")
    rows_deleted: int = Field(description="Members removed because they were not in the file")
    errors: list[str] = Field(description="Rejected rows (truncated list)")
    error_count: int = Field(description="Total rejected rows")
    import_log_id: int | None = None


class ImportLogResponse(Schema):
    """One past import."""

    id: int
    filename: str
    status: str
    rows_imported: int
    rows_added: int
    rows_updated: int
    rows_deleted: int
    error_message: str
    created_at: datetime


class ImportLogListResponse(Schema):
    """Import history for an organization."""

    imports: list[ImportLogResponse]
