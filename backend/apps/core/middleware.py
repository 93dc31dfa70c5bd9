"""
Core middleware.
"""

import time
import uuid
from collections.abc import Callable

from django.http import HttpRequest, HttpResponse

from apps.core.logging import bind_contextvars, clear_contextvars, get_logger
from apps.core.utils import get_client_ip

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware:
    """
    Binds request-scoped logging context.

    Every log line emitted while handling the request carries the same
    correlation id, client IP, method and path. An incoming X-Request-ID is
    reused when it parses as a UUID so traces can span a proxy; otherwise a
    fresh one is generated. The id is echoed on the response.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        correlation_id = _incoming_request_id(request) or uuid.uuid4()
        request.correlation_id = correlation_id  # type: ignore[attr-defined]

        clear_contextvars()
        bind_contextvars(
            correlation_id=str(correlation_id),
            **{
                "client.ip": get_client_ip(request),
                "http.method": request.method,
                "http.url_details.path": request.path,
            },
        )

        started = time.perf_counter()
        try:
            response = self.get_response(request)
            logger.info(
                "request_finished",
                **{"http.status_code": response.status_code},
                duration_ms=(time.perf_counter() - started) * 1000,
            )
            response[REQUEST_ID_HEADER] = str(correlation_id)
            return response
        finally:
            clear_contextvars()


def _incoming_request_id(request: HttpRequest) -> uuid.UUID | None:
    raw = request.headers.get(REQUEST_ID_HEADER, "")
    if not raw:
        return None
    try:
        return uuid.UUID(raw)
    except ValueError:
        return None
