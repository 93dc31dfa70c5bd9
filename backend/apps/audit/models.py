"""
Audit models - append-only activity log.
"""

from django.db import models


class AuditLog(models.Model):
    """
    Permanent record of API lookups and administrative actions.

    Rows are written once and never changed. Lookup entries carry the
    lookup hash of the queried email in ``details``, never the plaintext.
    """

    class ActorType(models.TextChoices):
        ADMIN = "admin", "Admin"
        API_KEY = "api_key", "API key"
        ANONYMOUS = "anonymous", "Anonymous"
        SYSTEM = "system", "System"

    class Action(models.TextChoices):
        LOOKUP = "member.lookup", "Member lookup"
        LOOKUP_AUTH_FAILED = "member.lookup_auth_failed", "Lookup rejected: authentication"
        LOOKUP_RATE_LIMITED = "member.lookup_rate_limited", "Lookup rejected: rate limit"
        LOOKUP_INVALID_INPUT = "member.lookup_invalid_input", "Lookup rejected: invalid input"
        LOOKUP_ERROR = "member.lookup_error", "Lookup failed: internal error"
        MEMBERS_IMPORTED = "members.imported", "Member list imported"
        MEMBERS_IMPORT_FAILED = "members.import_failed", "Member list import failed"
        MEMBERS_EXPORTED = "members.exported", "Member list exported"
        API_KEY_CREATED = "api_key.created", "API key created"
        API_KEY_ACTIVATED = "api_key.activated", "API key activated"
        API_KEY_DEACTIVATED = "api_key.deactivated", "API key deactivated"
        API_KEY_DELETED = "api_key.deleted", "API key deleted"

    # What happened
    action = models.CharField(
        max_length=100,
        choices=Action.choices,
        db_index=True,
    )
    organization_id = models.CharField(
        max_length=100,
        blank=True,
        db_index=True,
        help_text="Organization the action concerned, if any",
    )

    # Who did it
    actor_type = models.CharField(max_length=20, choices=ActorType.choices)
    actor_id = models.CharField(
        max_length=100,
        blank=True,
        db_index=True,
        help_text="User ID, API key ID, or empty for anonymous callers",
    )
    actor_name = models.CharField(
        max_length=255,
        blank=True,
        help_text="Actor display name (denormalized for display)",
    )
    api_key_id = models.PositiveBigIntegerField(
        null=True,
        blank=True,
        db_index=True,
        help_text="API key used for the request; kept after the key is deleted",
    )

    # Context
    correlation_id = models.UUIDField(
        null=True,
        blank=True,
        help_text="Request trace ID for correlation",
    )
    ip_address = models.GenericIPAddressField(
        null=True,
        blank=True,
        help_text="Client IP address",
    )
    user_agent = models.TextField(
        blank=True,
        help_text="Client user agent string",
    )
    details = models.JSONField(
        default=dict,
        blank=True,
        help_text="Structured, action-specific payload",
    )

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["api_key_id", "action"], name="audit_api_key_action_idx"),
            models.Index(fields=["actor_type", "created_at"], name="audit_actor_type_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.action} by {self.actor_name or self.actor_type}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Audit log entries are append-only")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Audit log entries are append-only")