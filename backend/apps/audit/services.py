"""
Audit services - recording and querying the activity log.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_ipv46_address
from django.db import transaction
from django.db.models import QuerySet
from django.http import HttpRequest

from apps.audit.models import AuditLog
from apps.core.logging import get_logger
from apps.core.utils import get_client_ip, get_user_agent

logger = get_logger(__name__)

LOOKUP_ACTIONS = (
    AuditLog.Action.LOOKUP,
    AuditLog.Action.LOOKUP_AUTH_FAILED,
    AuditLog.Action.LOOKUP_RATE_LIMITED,
    AuditLog.Action.LOOKUP_INVALID_INPUT,
    AuditLog.Action.LOOKUP_ERROR,
)


@dataclass
class ActivityFilters:
    """Optional filters for listing audit entries."""

    actor_type: str | None = None
    action: str | None = None
    actor_id: str | None = None
    api_key_id: int | None = None
    organization_id: str | None = None
    since: datetime | None = None
    until: datetime | None = None


def _valid_ip(value: str | None) -> str | None:
    if not value:
        return None
    try:
        validate_ipv46_address(value)
    except DjangoValidationError:
        return None
    return value


def record_activity(
    action: str,
    *,
    actor_type: str,
    actor_id: str | int | None = None,
    actor_name: str = "",
    details: dict[str, Any] | None = None,
    request: HttpRequest | None = None,
    api_key_id: int | None = None,
    organization_id: str | int | None = None,
) -> AuditLog | None:
    """
    Append an entry to the audit log.

    Never raises: a failed write is logged and swallowed so auditing cannot
    break the operation being audited. The write runs in its own savepoint,
    so a failure inside an outer transaction leaves that transaction usable.

    Args:
        action: One of AuditLog.Action
        actor_type: One of AuditLog.ActorType
        actor_id: User or API key ID
        actor_name: Display name for the actor
        details: Action-specific payload (no plaintext emails or secrets)
        request: Request to take IP, user agent and correlation ID from
        api_key_id: API key used, if any
        organization_id: Organization concerned, if any

    Returns:
        The created entry, or None if the write failed
    """
    ip_address = None
    user_agent = ""
    correlation_id = None
    if request is not None:
        ip_address = _valid_ip(get_client_ip(request))
        user_agent = get_user_agent(request)
        correlation_id = getattr(request, "correlation_id", None)

    try:
        with transaction.atomic():
            return AuditLog.objects.create(
                action=action,
                actor_type=actor_type,
                actor_id="" if actor_id is None else str(actor_id),
                actor_name=actor_name[:255],
                details=details or {},
                ip_address=ip_address,
                user_agent=user_agent,
                correlation_id=correlation_id,
                api_key_id=api_key_id,
                organization_id="" if organization_id is None else str(organization_id),
            )
    except Exception:
        logger.exception("audit_log_write_failed", action=action, actor_type=actor_type)
        return None


def _filtered(filters: ActivityFilters | None) -> QuerySet[AuditLog]:
    queryset = AuditLog.objects.all()
    if filters is None:
        return queryset

    if filters.actor_type:
        queryset = queryset.filter(actor_type=filters.actor_type)
    if filters.action:
        queryset = queryset.filter(action=filters.action)
    if filters.actor_id:
        queryset = queryset.filter(actor_id=filters.actor_id)
    if filters.api_key_id is not None:
        queryset = queryset.filter(api_key_id=filters.api_key_id)
    if filters.organization_id:
        queryset = queryset.filter(organization_id=filters.organization_id)
    if filters.since:
        queryset = queryset.filter(created_at__gte=filters.since)
    if filters.until:
        queryset = queryset.filter(created_at__lt=filters.until)
    return queryset


def list_activity(
    filters: ActivityFilters | None = None, limit: int = 50, offset: int = 0
) -> list[AuditLog]:
    """Most recent entries first."""
    return list(_filtered(filters)[offset : offset + limit])


def count_activity(filters: ActivityFilters | None = None) -> int:
    return _filtered(filters).count()


def staff_actor(user: Any | None) -> dict[str, Any]:
    """Actor fields for an action taken by a staff user, or by the system when None."""
    if user is None:
        return {"actor_type": AuditLog.ActorType.SYSTEM, "actor_name": "system"}
    return {
        "actor_type": AuditLog.ActorType.ADMIN,
        "actor_id": user.pk,
        "actor_name": user.get_username(),
    }
