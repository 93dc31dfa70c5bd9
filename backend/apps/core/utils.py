"""
Core utility functions.
"""

import json
from typing import Any, cast, overload

from django.http import HttpRequest

# Audit rows store at most this much of the User-Agent header
MAX_USER_AGENT_LENGTH = 512


@overload
def get_client_ip(request: HttpRequest) -> str | None: ...


@overload
def get_client_ip(request: HttpRequest, default: str) -> str: ...


def get_client_ip(request: HttpRequest, default: str | None = None) -> str | None:
    """
    Extract client IP from X-Forwarded-For or REMOTE_ADDR.

    Handles the case where X-Forwarded-For contains multiple IPs
    (from proxy chain) by taking the first (original client).

    Args:
        request: The Django HTTP request.
        default: Fallback value when no IP can be determined.
            Defaults to None.

    Returns:
        The client IP address, or default if not available.
    """
    x_forwarded_for: str | None = request.META.get("HTTP_X_FORWARDED_FOR")
    if x_forwarded_for:
        return x_forwarded_for.split(",")[0].strip()
    remote_addr = cast(str | None, request.META.get("REMOTE_ADDR"))
    if remote_addr:
        return remote_addr
    return default


def get_user_agent(request: HttpRequest) -> str:
    """Return the request's User-Agent, truncated for storage."""
    return str(request.META.get("HTTP_USER_AGENT", ""))[:MAX_USER_AGENT_LENGTH]


def read_json_body(request: HttpRequest) -> dict[str, Any]:
    """
    Parse a JSON object request body.

    Returns an empty dict when the body is not JSON, not an object, or not
    decodable. The result is cached on the request so several extractors can
    share one parse.
    """
    cached = getattr(request, "_json_body_cache", None)
    if cached is not None:
        return cached

    data: dict[str, Any] = {}
    if request.content_type == "application/json" and request.body:
        try:
            parsed = json.loads(request.body)
        except (ValueError, UnicodeDecodeError):
            parsed = None
        if isinstance(parsed, dict):
            data = parsed

    request._json_body_cache = data  # type: ignore[attr-defined]
    return data
