from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="RateLimitWindow",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                (
                    "client_id",
                    models.CharField(
                        help_text="Client identifier, normally the client IP address",
                        max_length=255,
                        unique=True,
                    ),
                ),
                (
                    "minute_hits",
                    models.JSONField(
                        blank=True,
                        default=list,
                        help_text="Timestamps of admitted requests within the last 60 seconds",
                    ),
                ),
                (
                    "hour_hits",
                    models.JSONField(
                        blank=True,
                        default=list,
                        help_text="Timestamps of admitted requests within the last 3600 seconds",
                    ),
                ),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
            ],
            options={
                "ordering": ["client_id"],
            },
        ),
    ]
