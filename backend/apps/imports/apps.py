"""Imports app configuration."""

from django.apps import AppConfig


class ImportsConfig(AppConfig):
    """Configuration for imports app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.imports"
    verbose_name = "Member imports"
