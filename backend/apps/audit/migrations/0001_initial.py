from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                (
                    "action",
                    models.CharField(
                        choices=[
                            ("member.lookup", "Member lookup"),
                            ("member.lookup_auth_failed", "Lookup rejected: authentication"),
                            ("member.lookup_rate_limited", "Lookup rejected: rate limit"),
                            ("member.lookup_invalid_input", "Lookup rejected: invalid input"),
                            ("member.lookup_error", "Lookup failed: internal error"),
                            ("members.imported", "Member list imported"),
                            ("members.import_failed", "Member list import failed"),
                            ("members.exported", "Member list exported"),
                            ("api_key.created", "API key created"),
                            ("api_key.activated", "API key activated"),
                            ("api_key.deactivated", "API key deactivated"),
                            ("api_key.deleted", "API key deleted"),
                        ],
                        db_index=True,
                        max_length=100,
                    ),
                ),
                (
                    "organization_id",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        help_text="Organization the action concerned, if any",
                        max_length=100,
                    ),
                ),
                (
                    "actor_type",
                    models.CharField(
                        choices=[
                            ("admin", "Admin"),
                            ("api_key", "API key"),
                            ("anonymous", "Anonymous"),
                            ("system", "System"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "actor_id",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        help_text="User ID, API key ID, or empty for anonymous callers",
                        max_length=100,
                    ),
                ),
                (
                    "actor_name",
                    models.CharField(
                        blank=True,
                        help_text="Actor display name (denormalized for display)",
                        max_length=255,
                    ),
                ),
                (
                    "api_key_id",
                    models.PositiveBigIntegerField(
                        blank=True,
                        db_index=True,
                        help_text="API key used for the request; kept after the key is deleted",
                        null=True,
                    ),
                ),
                (
                    "correlation_id",
                    models.UUIDField(
                        blank=True, help_text="Request trace ID for correlation", null=True
                    ),
                ),
                (
                    "ip_address",
                    models.GenericIPAddressField(
                        blank=True, help_text="Client IP address", null=True
                    ),
                ),
                (
                    "user_agent",
                    models.TextField(blank=True, help_text="Client user agent string"),
                ),
                (
                    "details",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text="Structured, action-specific payload",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(
                        fields=["api_key_id", "action"], name="audit_api_key_action_idx"
                    ),
                    models.Index(
                        fields=["actor_type", "created_at"], name="audit_actor_type_idx"
                    ),
                ],
            },
        ),
    ]
