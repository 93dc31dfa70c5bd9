import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("organizations", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Member",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "email_ciphertext",
                    models.TextField(
                        help_text="base64(nonce || tag || ciphertext) of the normalized email"
                    ),
                ),
                (
                    "lookup_hash",
                    models.CharField(
                        help_text="Hex HMAC-SHA256 of the normalized email", max_length=64
                    ),
                ),
                (
                    "mm_cepi",
                    models.BooleanField(
                        default=False,
                        help_text="Membership classification flag supplied by the organization",
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="members",
                        to="organizations.organization",
                    ),
                ),
            ],
            options={
                "ordering": ["lookup_hash"],
                "indexes": [
                    models.Index(
                        fields=["lookup_hash", "is_active"],
                        name="member_lookup_active_idx",
                    )
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("organization", "lookup_hash"),
                        name="unique_member_lookup_hash_per_organization",
                    )
                ],
            },
        ),
    ]
