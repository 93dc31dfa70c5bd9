"""
Audit log API endpoints (staff only).
"""

from django.http import HttpRequest
from ninja import Query, Router

from apps.audit.models import AuditLog
from apps.audit.schemas import AuditLogEntryResponse, AuditLogListResponse, AuditLogParams
from apps.audit.services import ActivityFilters, count_activity, list_activity
from apps.core.security import staff_auth

router = Router(tags=["audit"])


def _entry_to_response(entry: AuditLog) -> AuditLogEntryResponse:
    return AuditLogEntryResponse(
        id=entry.id,
        action=entry.action,
        actor_type=entry.actor_type,
        actor_id=entry.actor_id,
        actor_name=entry.actor_name,
        api_key_id=entry.api_key_id,
        organization_id=entry.organization_id,
        ip_address=entry.ip_address,
        user_agent=entry.user_agent,
        details=entry.details,
        created_at=entry.created_at,
    )


@router.get(
    "/",
    response=AuditLogListResponse,
    auth=staff_auth,
    operation_id="listAuditLog",
    summary="List audit log entries",
)
def list_audit_log(request: HttpRequest, params: Query[AuditLogParams]) -> AuditLogListResponse:
    """Most recent entries first, filtered by actor, action, API key or date range."""
    filters = ActivityFilters(
        actor_type=params.actor_type,
        action=params.action,
        actor_id=params.actor_id,
        api_key_id=params.api_key_id,
        organization_id=params.organization_id,
        since=params.since,
        until=params.until,
    )
    entries = list_activity(filters, limit=params.limit, offset=params.offset)
    return AuditLogListResponse(
        total=count_activity(filters),
        entries=[_entry_to_response(entry) for entry in entries],
    )
