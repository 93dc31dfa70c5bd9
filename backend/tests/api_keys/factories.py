"""
Factories for api_keys app models.

Used in tests to create test data.
"""

from typing import Any

import factory
from django.contrib.auth.hashers import make_password
from factory.django import DjangoModelFactory

from apps.api_keys.models import ApiKey


class ApiKeyFactory(DjangoModelFactory[ApiKey]):
    """
    Factory for ApiKey model.

    Pass ``secret`` to choose the plaintext that will validate.
    """

    class Meta:
        model = ApiKey
        exclude = ("secret",)

    name: Any = factory.Sequence(lambda n: f"Partner {n}")
    secret: Any = factory.Sequence(lambda n: f"test-secret-{n:04d}")
    key_hash: Any = factory.LazyAttribute(lambda o: make_password(o.secret))
    is_active = True
    expires_at = None
