"""
API key models - credentials for the public lookup endpoint.
"""

from django.conf import settings
from django.db import models
from django.utils import timezone

from apps.core.models import TimestampedModel


class ApiKey(TimestampedModel):
    """
    A credential for the member lookup API.

    Only a salted hash of the secret is stored (Django password hasher), so
    the secret cannot be shown again after creation and validation has to
    check the presented secret against every usable key.
    """

    name = models.CharField(max_length=255, help_text="Display name, e.g. the integrating partner")
    key_hash = models.CharField(max_length=256, help_text="Salted hash of the secret")
    is_active = models.BooleanField(default=True)
    expires_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Key is rejected after this time even while active",
    )
    last_used_at = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="api_keys",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "API key"

    def __str__(self) -> str:
        return self.name

    @property
    def is_expired(self) -> bool:
        return self.expires_at is not None and self.expires_at <= timezone.now()

    @property
    def is_usable(self) -> bool:
        """Active and not expired."""
        return self.is_active and not self.is_expired
