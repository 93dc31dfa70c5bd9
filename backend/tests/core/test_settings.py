"""
Tests for environment-specific settings modules.
"""

import importlib
import sys

import pytest
from django.core.exceptions import ImproperlyConfigured


@pytest.fixture
def fresh_settings_modules(monkeypatch):
    """Force settings modules to be re-evaluated against the patched environment."""
    for name in ("config.settings.production", "config.settings.base"):
        monkeypatch.delitem(sys.modules, name, raising=False)
    monkeypatch.delenv("DEBUG", raising=False)


class TestProductionSettings:
    """Production refuses to start without its secrets."""

    def test_missing_encryption_key_fails_startup(self, monkeypatch, fresh_settings_modules):
        monkeypatch.setenv("EMAIL_ENCRYPTION_KEY", "")
        monkeypatch.setenv("SECRET_KEY", "a-real-production-secret")

        with pytest.raises(ImproperlyConfigured, match="EMAIL_ENCRYPTION_KEY"):
            importlib.import_module("config.settings.production")

    def test_insecure_secret_key_fails_startup(self, monkeypatch, fresh_settings_modules):
        monkeypatch.setenv("EMAIL_ENCRYPTION_KEY", "production-email-key")
        monkeypatch.setenv("SECRET_KEY", "django-insecure-change-me-in-production")

        with pytest.raises(ImproperlyConfigured, match="SECRET_KEY"):
            importlib.import_module("config.settings.production")

    def test_configured_environment_loads(self, monkeypatch, fresh_settings_modules):
        monkeypatch.setenv("EMAIL_ENCRYPTION_KEY", "production-email-key")
        monkeypatch.setenv("SECRET_KEY", "a-real-production-secret")

        production = importlib.import_module("config.settings.production")

        assert production.DEBUG is False
        assert production.EMAIL_ENCRYPTION_KEY == "production-email-key"
        assert production.SESSION_COOKIE_SECURE is True
