"""
Tests for the API key management endpoints.
"""

from datetime import timedelta

import pytest
from django.utils import timezone

from apps.api_keys.models import ApiKey
from apps.api_keys.services import validate_api_key
from apps.audit.models import AuditLog
from tests.api_keys.factories import ApiKeyFactory
from tests.audit.factories import AuditLogFactory


@pytest.mark.django_db
class TestApiKeyEndpoints:
    """Tests for /api-keys."""

    def test_requires_staff(self, api_client) -> None:
        assert api_client.get("/api/v1/api-keys/").status_code == 401
        assert (
            api_client.post(
                "/api/v1/api-keys/", {"name": "x"}, content_type="application/json"
            ).status_code
            == 401
        )

    def test_create_returns_secret_once(self, staff_client, staff_user) -> None:
        response = staff_client.post(
            "/api/v1/api-keys/", {"name": "Partner"}, content_type="application/json"
        )

        assert response.status_code == 201
        data = response.json()
        secret = data["secret"]
        assert validate_api_key(secret).pk == data["api_key"]["id"]
        assert ApiKey.objects.get(pk=data["api_key"]["id"]).created_by == staff_user

        listing = staff_client.get("/api/v1/api-keys/")
        assert secret not in listing.content.decode()
        assert "key_hash" not in listing.content.decode()

    def test_create_with_past_expiry(self, staff_client) -> None:
        response = staff_client.post(
            "/api/v1/api-keys/",
            {"name": "Partner", "expires_at": (timezone.now() - timedelta(days=1)).isoformat()},
            content_type="application/json",
        )
        assert response.status_code == 400

    def test_list_includes_usage(self, staff_client) -> None:
        key = ApiKeyFactory.create(name="Partner")
        AuditLogFactory.create_batch(2, api_key_id=key.pk, action=AuditLog.Action.LOOKUP)

        response = staff_client.get("/api/v1/api-keys/")

        assert response.status_code == 200
        keys = response.json()["api_keys"]
        assert keys[0]["name"] == "Partner"
        assert keys[0]["usage_count"] == 2
        assert keys[0]["is_expired"] is False

    def test_deactivate_and_activate(self, staff_client) -> None:
        key = ApiKeyFactory.create()

        response = staff_client.post(f"/api/v1/api-keys/{key.pk}/deactivate")
        assert response.status_code == 200
        assert response.json()["is_active"] is False

        response = staff_client.post(f"/api/v1/api-keys/{key.pk}/activate")
        assert response.status_code == 200
        assert response.json()["is_active"] is True

    def test_delete(self, staff_client) -> None:
        key = ApiKeyFactory.create()

        response = staff_client.delete(f"/api/v1/api-keys/{key.pk}")

        assert response.status_code == 200
        assert not ApiKey.objects.filter(pk=key.pk).exists()

    def test_usage(self, staff_client) -> None:
        key = ApiKeyFactory.create()
        AuditLogFactory.create(api_key_id=key.pk, action=AuditLog.Action.LOOKUP)
        AuditLogFactory.create(api_key_id=key.pk, action=AuditLog.Action.LOOKUP_AUTH_FAILED)

        response = staff_client.get(f"/api/v1/api-keys/{key.pk}/usage")

        assert response.status_code == 200
        assert response.json()["total_calls"] == 2
        assert response.json()["successful_calls"] == 1
        assert response.json()["failed_calls"] == 1

    @pytest.mark.parametrize(
        ("method", "path"),
        [
            ("post", "/activate"),
            ("post", "/deactivate"),
            ("delete", ""),
            ("get", "/usage"),
        ],
    )
    def test_unknown_key(self, staff_client, method, path) -> None:
        response = getattr(staff_client, method)(f"/api/v1/api-keys/999999{path}")
        assert response.status_code == 404
