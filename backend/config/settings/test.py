"""
Test settings.

In-memory SQLite, a fixed encryption key and a fast password hasher so
API key validation does not dominate test time.
"""

from .base import *  # noqa: F403

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

EMAIL_ENCRYPTION_KEY = "test-email-encryption-key"

RATE_LIMIT_PER_MINUTE = 60
RATE_LIMIT_PER_HOUR = 1000
RATE_LIMIT_PURGE_PROBABILITY = 0.0
