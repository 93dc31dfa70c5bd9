"""
Core models - shared base classes and rate limiter state.
"""

from django.db import models


class TimestampedModel(models.Model):
    """
    Abstract base model with created_at/updated_at timestamps.
    """

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class RateLimitWindow(models.Model):
    """
    Sliding-window request history for one client.

    Holds the Unix timestamps of admitted requests in two lists: the last
    minute and the last hour. Entries older than their window are pruned on
    every access. Rows are mutated only under SELECT ... FOR UPDATE so
    concurrent requests from the same client serialize on the row.
    """

    client_id = models.CharField(
        max_length=255,
        unique=True,
        help_text="Client identifier, normally the client IP address",
    )
    minute_hits = models.JSONField(
        default=list,
        blank=True,
        help_text="Timestamps of admitted requests within the last 60 seconds",
    )
    hour_hits = models.JSONField(
        default=list,
        blank=True,
        help_text="Timestamps of admitted requests within the last 3600 seconds",
    )
    updated_at = models.DateTimeField(auto_now=True, db_index=True)

    class Meta:
        ordering = ["client_id"]

    def __str__(self) -> str:
        return f"{self.client_id} ({len(self.minute_hits)}/min, {len(self.hour_hits)}/h)"
