"""
Public member lookup.

One request runs through: authenticate the API key, check the client's rate
limit, validate the email, look up its hash. Each step can end the request
with an error response. Whatever the outcome, exactly one audit entry is
written for the request.
"""

from dataclasses import dataclass, field
from typing import Any

from django.db import DatabaseError
from django.http import HttpRequest

from apps.api_keys.models import ApiKey
from apps.api_keys.services import extract_api_key, mark_api_key_used, validate_api_key
from apps.audit.models import AuditLog
from apps.audit.services import record_activity
from apps.core.exceptions import PersistenceError, RateLimitExceeded, ValidationError
from apps.core.logging import get_logger
from apps.core.throttling import SlidingWindowRateLimiter
from apps.core.utils import get_client_ip, read_json_body
from apps.members.crypto import lookup_hash
from apps.members.store import MemberMatch, MemberStore
from apps.members.validators import clean_email

logger = get_logger(__name__)

EMAIL_FIELD = "email"

GENERIC_ERROR_MESSAGE = "An internal error occurred. Please try again later."


@dataclass
class LookupOutcome:
    """Status, JSON body and extra headers of a lookup response."""

    status: int
    body: dict[str, Any]
    headers: dict[str, str] = field(default_factory=dict)


@dataclass
class _LookupState:
    api_key: ApiKey | None = None
    headers: dict[str, str] = field(default_factory=dict)


def extract_email(request: HttpRequest) -> str | None:
    """Email from the query string, then the form body, then a JSON body."""
    value = request.GET.get(EMAIL_FIELD)
    if value:
        return value

    if request.method == "POST":
        value = request.POST.get(EMAIL_FIELD)
        if value:
            return value

    json_value = read_json_body(request).get(EMAIL_FIELD)
    if isinstance(json_value, str):
        return json_value
    return None


def _body(match: MemberMatch | None = None, **extra: Any) -> dict[str, Any]:
    return {
        "found": match is not None,
        "mm_cepi": match.mm_cepi if match else False,
        "organisation_id": match.organization_id if match else None,
        "organisation_name": match.organization_name if match else None,
        **extra,
    }


def _finish(
    request: HttpRequest,
    state: _LookupState,
    outcome: LookupOutcome,
    action: str,
    details: dict[str, Any],
    organization_id: int | None = None,
) -> LookupOutcome:
    api_key = state.api_key
    if api_key is not None:
        actor = {
            "actor_type": AuditLog.ActorType.API_KEY,
            "actor_id": api_key.pk,
            "actor_name": api_key.name,
        }
    else:
        actor = {"actor_type": AuditLog.ActorType.ANONYMOUS}

    record_activity(
        action,
        **actor,
        details={"status": outcome.status, **details},
        request=request,
        api_key_id=api_key.pk if api_key else None,
        organization_id=organization_id,
    )
    outcome.headers = {**state.headers, **outcome.headers}
    return outcome


def check_membership(
    request: HttpRequest,
    limiter: SlidingWindowRateLimiter | None = None,
    store: MemberStore | None = None,
) -> LookupOutcome:
    """
    Run a member lookup request to completion.

    Never raises. Internal failures become a 500 outcome with a generic
    message; their detail goes to the log.
    """
    state = _LookupState()
    try:
        return _check_membership(
            request,
            state,
            limiter or SlidingWindowRateLimiter(),
            store or MemberStore(),
        )
    except (PersistenceError, DatabaseError):
        logger.exception("member_lookup_failed", reason="database_error")
        reason = "database_error"
    except Exception:
        logger.exception("member_lookup_failed", reason="server_error")
        reason = "server_error"

    return _finish(
        request,
        state,
        LookupOutcome(500, _body(error="server_error", message=GENERIC_ERROR_MESSAGE)),
        AuditLog.Action.LOOKUP_ERROR,
        {"reason": reason},
    )


def _check_membership(
    request: HttpRequest,
    state: _LookupState,
    limiter: SlidingWindowRateLimiter,
    store: MemberStore,
) -> LookupOutcome:
    # Authentication
    presented = extract_api_key(request)
    api_key = validate_api_key(presented) if presented else None
    if api_key is None:
        reason = "invalid_api_key" if presented else "missing_api_key"
        logger.info("member_lookup_unauthorized", reason=reason)
        return _finish(
            request,
            state,
            LookupOutcome(
                401,
                _body(error="unauthorized", message="A valid API key is required."),
                {"WWW-Authenticate": "Bearer"},
            ),
            AuditLog.Action.LOOKUP_AUTH_FAILED,
            {"reason": reason},
        )
    state.api_key = api_key
    mark_api_key_used(api_key)

    # Rate limit, per client IP
    client_id = get_client_ip(request, default="unknown")
    try:
        rate = limiter.enforce(client_id)
    except RateLimitExceeded as e:
        state.headers = e.result.headers() if e.result is not None else {}
        return _finish(
            request,
            state,
            LookupOutcome(
                429,
                _body(
                    error="rate_limited",
                    message="Too many requests. Please try again later.",
                    retry_after=e.retry_after,
                ),
            ),
            AuditLog.Action.LOOKUP_RATE_LIMITED,
            {"limit_type": e.result.limit_type if e.result is not None else None},
        )
    state.headers = rate.headers()

    # Input validation
    try:
        email = clean_email(extract_email(request))
    except ValidationError as e:
        return _finish(
            request,
            state,
            LookupOutcome(400, _body(error="invalid_email", message=str(e))),
            AuditLog.Action.LOOKUP_INVALID_INPUT,
            {"reason": str(e)},
        )

    # Lookup
    hashed = lookup_hash(email)
    match = store.find_active_by_lookup_hash(hashed)

    logger.info(
        "member_lookup_completed",
        api_key_id=api_key.pk,
        found=match is not None,
        organization_id=match.organization_id if match else None,
    )
    return _finish(
        request,
        state,
        LookupOutcome(200, _body(match)),
        AuditLog.Action.LOOKUP,
        {
            "found": match is not None,
            "lookup_hash": hashed,
            "mm_cepi": match.mm_cepi if match else False,
        },
        organization_id=match.organization_id if match else None,
    )
