"""
API key services.

Handles key generation, validation, request extraction and administration.
"""

import secrets
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from django.contrib.auth.hashers import check_password, make_password
from django.db import DatabaseError, transaction
from django.db.models import Count, IntegerField, Max, OuterRef, Q, Subquery, Value
from django.db.models.functions import Coalesce
from django.http import HttpRequest
from django.utils import timezone

from apps.api_keys.models import ApiKey
from apps.audit.models import AuditLog
from apps.audit.services import LOOKUP_ACTIONS, record_activity, staff_actor
from apps.core.exceptions import NotFoundError, ValidationError
from apps.core.logging import get_logger
from apps.core.utils import read_json_body

logger = get_logger(__name__)

# 32 random bytes, hex encoded
SECRET_BYTES = 32

# Longer values are rejected before hashing
MAX_PRESENTED_SECRET_LENGTH = 256

API_KEY_FIELD = "api_key"
API_KEY_HEADER = "X-API-Key"


@dataclass
class GeneratedApiKey:
    """A new key together with its plaintext secret. The secret is not stored."""

    api_key: ApiKey
    secret: str


@dataclass
class ApiKeyUsage:
    """Lookup statistics for one key, derived from the audit log."""

    total_calls: int
    successful_calls: int
    failed_calls: int
    last_called_at: datetime | None


def generate_api_key(
    name: str,
    expires_at: datetime | None = None,
    created_by: Any | None = None,
    request: HttpRequest | None = None,
) -> GeneratedApiKey:
    """
    Create an API key.

    Args:
        name: Display name
        expires_at: Optional expiry; must be in the future
        created_by: Staff user creating the key (None for the CLI)
        request: Originating request, for the audit entry

    Returns:
        GeneratedApiKey holding the plaintext secret, shown to the caller once

    Raises:
        ValidationError: If the name is blank or the expiry is in the past
    """
    name = name.strip()
    if not name:
        raise ValidationError("API key name is required")
    if expires_at is not None and expires_at <= timezone.now():
        raise ValidationError("Expiry must be in the future")

    secret = secrets.token_hex(SECRET_BYTES)
    api_key = ApiKey.objects.create(
        name=name,
        key_hash=make_password(secret),
        expires_at=expires_at,
        created_by=created_by,
    )

    logger.info("api_key_created", api_key_id=api_key.id, expires_at=expires_at)
    record_activity(
        AuditLog.Action.API_KEY_CREATED,
        **staff_actor(created_by),
        details={"api_key_id": api_key.id, "name": api_key.name},
        request=request,
        api_key_id=api_key.id,
    )
    return GeneratedApiKey(api_key=api_key, secret=secret)


def validate_api_key(presented: str | None) -> ApiKey | None:
    """
    Find the usable key whose hash matches the presented secret.

    Hashes are salted, so there is nothing to index on: every active,
    unexpired key is checked in turn with the hasher's constant-time verify.

    Returns:
        The matching ApiKey, or None
    """
    if not presented or len(presented) > MAX_PRESENTED_SECRET_LENGTH:
        return None

    now = timezone.now()
    candidates = ApiKey.objects.filter(is_active=True).filter(
        Q(expires_at__isnull=True) | Q(expires_at__gt=now)
    )
    for api_key in candidates.iterator():
        if check_password(presented, api_key.key_hash) and api_key.is_usable:
            return api_key
    return None


def extract_api_key(request: HttpRequest) -> str | None:
    """
    Pull a presented secret out of the request.

    Checked in order, first match wins:
    ``Authorization: Bearer``, ``X-API-Key`` header, ``api_key`` query
    parameter, ``api_key`` form field, ``api_key`` JSON body field.
    """
    authorization = request.headers.get("Authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()

    header_value = request.headers.get(API_KEY_HEADER, "").strip()
    if header_value:
        return header_value

    query_value = request.GET.get(API_KEY_FIELD, "").strip()
    if query_value:
        return query_value

    if request.method == "POST":
        form_value = request.POST.get(API_KEY_FIELD, "").strip()
        if form_value:
            return form_value

    json_value = read_json_body(request).get(API_KEY_FIELD)
    if isinstance(json_value, str) and json_value.strip():
        return json_value.strip()

    return None


def mark_api_key_used(api_key: ApiKey) -> None:
    """Record last use. Failures are logged, never raised."""
    now = timezone.now()
    try:
        with transaction.atomic():
            ApiKey.objects.filter(pk=api_key.pk).update(last_used_at=now)
    except DatabaseError:
        logger.warning("api_key_mark_used_failed", api_key_id=api_key.pk, exc_info=True)
        return
    api_key.last_used_at = now


def _get_api_key(key_id: int) -> ApiKey:
    try:
        return ApiKey.objects.get(pk=key_id)
    except ApiKey.DoesNotExist:
        raise NotFoundError("API key not found") from None


def _set_active(
    key_id: int, active: bool, actor: Any | None, request: HttpRequest | None
) -> ApiKey:
    api_key = _get_api_key(key_id)
    if api_key.is_active != active:
        api_key.is_active = active
        api_key.save(update_fields=["is_active", "updated_at"])

    action = AuditLog.Action.API_KEY_ACTIVATED if active else AuditLog.Action.API_KEY_DEACTIVATED
    logger.info("api_key_status_changed", api_key_id=api_key.pk, is_active=active)
    record_activity(
        action,
        **staff_actor(actor),
        details={"api_key_id": api_key.pk, "name": api_key.name},
        request=request,
        api_key_id=api_key.pk,
    )
    return api_key


def activate_api_key(
    key_id: int, actor: Any | None = None, request: HttpRequest | None = None
) -> ApiKey:
    """
    Raises:
        NotFoundError: If the key does not exist
    """
    return _set_active(key_id, True, actor, request)


def deactivate_api_key(
    key_id: int, actor: Any | None = None, request: HttpRequest | None = None
) -> ApiKey:
    """
    Raises:
        NotFoundError: If the key does not exist
    """
    return _set_active(key_id, False, actor, request)


def delete_api_key(
    key_id: int, actor: Any | None = None, request: HttpRequest | None = None
) -> None:
    """
    Permanently delete a key. Its audit entries keep the key id.

    Raises:
        NotFoundError: If the key does not exist
    """
    api_key = _get_api_key(key_id)
    name = api_key.name
    api_key.delete()

    logger.info("api_key_deleted", api_key_id=key_id)
    record_activity(
        AuditLog.Action.API_KEY_DELETED,
        **staff_actor(actor),
        details={"api_key_id": key_id, "name": name},
        request=request,
        api_key_id=key_id,
    )


def list_api_keys() -> list[ApiKey]:
    """All keys, newest first, each annotated with ``usage_count`` (lookups made)."""
    usage = (
        AuditLog.objects.filter(api_key_id=OuterRef("pk"), action__in=LOOKUP_ACTIONS)
        .order_by()
        .values("api_key_id")
        .annotate(total=Count("id"))
        .values("total")
    )
    return list(
        ApiKey.objects.annotate(
            usage_count=Coalesce(Subquery(usage, output_field=IntegerField()), Value(0))
        ).order_by("-created_at")
    )


def get_usage_stats(key_id: int) -> ApiKeyUsage:
    """
    Raises:
        NotFoundError: If the key does not exist
    """
    _get_api_key(key_id)

    stats = AuditLog.objects.filter(api_key_id=key_id, action__in=LOOKUP_ACTIONS).aggregate(
        total=Count("id"),
        successful=Count("id", filter=Q(action=AuditLog.Action.LOOKUP)),
        last_called_at=Max("created_at"),
    )
    return ApiKeyUsage(
        total_calls=stats["total"],
        successful_calls=stats["successful"],
        failed_calls=stats["total"] - stats["successful"],
        last_called_at=stats["last_called_at"],
    )
