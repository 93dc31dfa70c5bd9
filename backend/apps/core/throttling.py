"""
Sliding-window rate limiting for public API endpoints.

Each client keeps two request histories: one for the last minute and one
for the last hour. A request is admitted only when both windows are below
their caps; only admitted requests are recorded, so a denied client can
retry without burning a slot.

State lives in the ``RateLimitWindow`` table. ``check()`` reads and writes
a client's row inside one transaction under ``SELECT ... FOR UPDATE``, so
two concurrent requests from the same client cannot both be admitted past
the cap.

Usage::

    from apps.core.throttling import SlidingWindowRateLimiter
    from apps.core.exceptions import RateLimitExceeded

    limiter = SlidingWindowRateLimiter()
    try:
        result = limiter.enforce(client_ip)
    except RateLimitExceeded as e:
        raise HttpError(429, str(e))
"""

import math
import random
import time
from dataclasses import dataclass
from datetime import timedelta

from django.conf import settings
from django.db import DEFAULT_DB_ALIAS, DatabaseError, transaction
from django.utils import timezone

from apps.core.exceptions import RateLimitExceeded
from apps.core.logging import get_logger
from apps.core.models import RateLimitWindow

logger = get_logger(__name__)

MINUTE_WINDOW_SECONDS = 60
HOUR_WINDOW_SECONDS = 3600

LIMIT_TYPE_MINUTE = "minute"
LIMIT_TYPE_HOUR = "hour"


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a rate limit check."""

    allowed: bool
    remaining: int
    reset_at: int  # Unix timestamp when a slot frees up
    limit: int
    limit_type: str
    checked_at: float

    @property
    def retry_after(self) -> int:
        """Seconds until the client may retry (0 when allowed)."""
        if self.allowed:
            return 0
        return max(0, math.ceil(self.reset_at - self.checked_at))

    def headers(self) -> dict[str, str]:
        """Response headers describing the limit state."""
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(self.reset_at),
        }
        if not self.allowed:
            headers["Retry-After"] = str(self.retry_after)
        return headers


def _prune(hits: list[float], now: float, window_seconds: int) -> list[float]:
    return [hit for hit in hits if now - hit < window_seconds]


class SlidingWindowRateLimiter:
    """
    Dual-window (per minute, per hour) sliding rate limiter.

    Limits default to the RATE_LIMIT_PER_MINUTE / RATE_LIMIT_PER_HOUR
    settings. ``using`` selects the database alias holding the window table.
    """

    def __init__(
        self,
        per_minute: int | None = None,
        per_hour: int | None = None,
        *,
        purge_probability: float | None = None,
        using: str = DEFAULT_DB_ALIAS,
    ) -> None:
        self.per_minute = settings.RATE_LIMIT_PER_MINUTE if per_minute is None else per_minute
        self.per_hour = settings.RATE_LIMIT_PER_HOUR if per_hour is None else per_hour
        self.purge_probability = (
            settings.RATE_LIMIT_PURGE_PROBABILITY
            if purge_probability is None
            else purge_probability
        )
        self.using = using

    def check(self, client_id: str, now: float | None = None) -> RateLimitResult:
        """
        Check the client's windows and record the request if admitted.

        Args:
            client_id: Client identifier (normally the client IP).
            now: Current Unix time; defaults to ``time.time()``.

        Returns:
            RateLimitResult describing the decision.
        """
        now = time.time() if now is None else now

        with transaction.atomic(using=self.using):
            window, _ = (
                RateLimitWindow.objects.using(self.using)
                .select_for_update()
                .get_or_create(client_id=client_id)
            )
            minute_hits = _prune(window.minute_hits, now, MINUTE_WINDOW_SECONDS)
            hour_hits = _prune(window.hour_hits, now, HOUR_WINDOW_SECONDS)

            if len(minute_hits) >= self.per_minute:
                oldest = min(minute_hits, default=now)
                result = RateLimitResult(
                    allowed=False,
                    remaining=0,
                    reset_at=math.ceil(oldest + MINUTE_WINDOW_SECONDS),
                    limit=self.per_minute,
                    limit_type=LIMIT_TYPE_MINUTE,
                    checked_at=now,
                )
            elif len(hour_hits) >= self.per_hour:
                oldest = min(hour_hits, default=now)
                result = RateLimitResult(
                    allowed=False,
                    remaining=0,
                    reset_at=math.ceil(oldest + HOUR_WINDOW_SECONDS),
                    limit=self.per_hour,
                    limit_type=LIMIT_TYPE_HOUR,
                    checked_at=now,
                )
            else:
                result = self._admitted(minute_hits, hour_hits, now)
                minute_hits.append(now)
                hour_hits.append(now)
                window.minute_hits = minute_hits
                window.hour_hits = hour_hits
                window.save(update_fields=["minute_hits", "hour_hits", "updated_at"])

        if not result.allowed:
            logger.warning(
                "rate_limit_exceeded",
                client_id=client_id,
                limit_type=result.limit_type,
                limit=result.limit,
            )

        if self.purge_probability > 0 and random.random() < self.purge_probability:
            self.purge_stale()

        return result

    def enforce(self, client_id: str, now: float | None = None) -> RateLimitResult:
        """
        Like ``check()`` but raise when the request is denied.

        Raises:
            RateLimitExceeded: If either window is full.
        """
        result = self.check(client_id, now=now)
        if not result.allowed:
            raise RateLimitExceeded(
                "Too many requests. Please try again later.",
                retry_after=result.retry_after,
                result=result,
            )
        return result

    def purge_stale(self, max_idle_seconds: int = HOUR_WINDOW_SECONDS) -> int:
        """
        Delete windows idle for longer than ``max_idle_seconds``.

        Housekeeping only: a failure is logged and reported as zero deletions.

        Returns:
            Number of windows deleted.
        """
        cutoff = timezone.now() - timedelta(seconds=max_idle_seconds)
        try:
            deleted, _ = (
                RateLimitWindow.objects.using(self.using).filter(updated_at__lt=cutoff).delete()
            )
        except DatabaseError:
            logger.warning("rate_limit_purge_failed", exc_info=True)
            return 0

        if deleted:
            logger.info("rate_limit_windows_purged", deleted=deleted)
        return deleted

    def _admitted(
        self, minute_hits: list[float], hour_hits: list[float], now: float
    ) -> RateLimitResult:
        # Counts exclude the request being admitted
        remaining_minute = max(0, self.per_minute - len(minute_hits))
        remaining_hour = max(0, self.per_hour - len(hour_hits))

        if remaining_hour < remaining_minute:
            return RateLimitResult(
                allowed=True,
                remaining=remaining_hour,
                reset_at=math.ceil(min(hour_hits, default=now) + HOUR_WINDOW_SECONDS),
                limit=self.per_hour,
                limit_type=LIMIT_TYPE_HOUR,
                checked_at=now,
            )
        return RateLimitResult(
            allowed=True,
            remaining=remaining_minute,
            reset_at=math.ceil(min(minute_hits, default=now) + MINUTE_WINDOW_SECONDS),
            limit=self.per_minute,
            limit_type=LIMIT_TYPE_MINUTE,
            checked_at=now,
        )
