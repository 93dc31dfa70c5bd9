"""
Shared pytest fixtures for all tests.

This module provides common fixtures used across multiple test modules.
Individual test modules can override these fixtures if needed.

Factories
---------
Import factories directly from their modules:

    from tests.organizations.factories import OrganizationFactory, StaffUserFactory
    from tests.members.factories import MemberFactory
    from tests.api_keys.factories import ApiKeyFactory

Example usage:

    @pytest.mark.django_db
    def test_something():
        org = OrganizationFactory.create()
        member = MemberFactory.create(organization=org, email="jan@example.com")
"""

from typing import Any

import pytest
from django.test import Client, RequestFactory


@pytest.fixture
def request_factory() -> RequestFactory:
    """
    Django request factory for unit testing views and services.

    Example:
        def test_lookup(request_factory):
            request = request_factory.get("/api/v1/check-member", {"email": "a@b.nl"})
            outcome = check_membership(request)
    """
    return RequestFactory()


@pytest.fixture
def api_client() -> Client:
    """
    Django test client for full HTTP request/response cycle tests.

    Example:
        def test_api_returns_200(api_client):
            response = api_client.get("/api/v1/health")
            assert response.status_code == 200
    """
    return Client()


@pytest.fixture
def staff_user(db) -> Any:
    """A staff user allowed to use the management endpoints."""
    from tests.organizations.factories import StaffUserFactory

    return StaffUserFactory.create()


@pytest.fixture
def staff_client(staff_user: Any) -> Client:
    """
    Test client logged in as a staff user.

    Example:
        def test_list_keys(staff_client):
            response = staff_client.get("/api/v1/api-keys/")
            assert response.status_code == 200
    """
    client = Client()
    client.force_login(staff_user)
    return client


@pytest.fixture
def api_key_secret(db) -> str:
    """Plaintext secret of a freshly generated, active API key."""
    from apps.api_keys.services import generate_api_key

    return generate_api_key(name="Test partner").secret
