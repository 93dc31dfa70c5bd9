"""
Factories for organizations and staff users.

Used in tests to create test data.
"""

from typing import Any

import factory
from django.contrib.auth import get_user_model
from factory.django import DjangoModelFactory

from apps.organizations.models import Organization


class OrganizationFactory(DjangoModelFactory[Organization]):
    """Factory for Organization model."""

    class Meta:
        model = Organization
        django_get_or_create = ("name",)

    name: Any = factory.Sequence(lambda n: f"Organization {n}")


class StaffUserFactory(DjangoModelFactory):
    """Factory for staff users of the management API."""

    class Meta:
        model = get_user_model()
        django_get_or_create = ("username",)

    username: Any = factory.Sequence(lambda n: f"staff{n}")
    email: Any = factory.LazyAttribute(lambda o: f"{o.username}@example.com")
    is_staff = True
    password: Any = factory.django.Password("password")
