"""
Members models - encrypted member rows keyed by a deterministic lookup hash.
"""

from django.db import models

from apps.core.models import TimestampedModel


class Member(TimestampedModel):
    """
    One email address on an organization's member list.

    The email is stored twice, neither time in plaintext:
    - ``email_ciphertext``: AES-GCM ciphertext (random nonce) for display/export
    - ``lookup_hash``: keyed HMAC of the normalized email, used for equality lookups

    Rows are created, updated and deleted only by sync imports.
    """

    organization = models.ForeignKey(
        "organizations.Organization",
        on_delete=models.CASCADE,
        related_name="members",
    )
    email_ciphertext = models.TextField(
        help_text="base64(nonce || tag || ciphertext) of the normalized email",
    )
    lookup_hash = models.CharField(
        max_length=64,
        help_text="Hex HMAC-SHA256 of the normalized email",
    )
    mm_cepi = models.BooleanField(
        default=False,
        help_text="Membership classification flag supplied by the organization",
    )
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["lookup_hash"]
        constraints = [
            models.UniqueConstraint(
                fields=["organization", "lookup_hash"],
                name="unique_member_lookup_hash_per_organization",
            ),
        ]
        indexes = [
            # Public lookup: hash across all organizations
            models.Index(fields=["lookup_hash", "is_active"], name="member_lookup_active_idx"),
        ]

    def __str__(self) -> str:
        return f"Member {self.lookup_hash[:12]}… of organization {self.organization_id}"
