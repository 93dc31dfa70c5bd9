"""
Imports models - history of member list uploads.
"""

from django.conf import settings
from django.db import models


class ImportLog(models.Model):
    """One member list upload and its reconciliation counts."""

    class Status(models.TextChoices):
        SUCCESS = "success", "Success"
        PARTIAL = "partial", "Partial (some rows rejected)"
        FAILED = "failed", "Failed"

    organization = models.ForeignKey(
        "organizations.Organization",
        on_delete=models.CASCADE,
        related_name="import_logs",
    )
    filename = models.CharField(max_length=255)
    rows_imported = models.PositiveIntegerField(default=0)
    rows_added = models.PositiveIntegerField(default=0)
    rows_updated = models.PositiveIntegerField(default=0)
    rows_deleted = models.PositiveIntegerField(default=0)
    status = models.CharField(max_length=20, choices=Status.choices)
    error_message = models.TextField(
        blank=True,
        help_text="First rejected rows or the failure reason, truncated",
    )
    imported_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="member_imports",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["organization", "created_at"], name="import_org_created_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.filename} ({self.status})"
