"""
Tests for the staff member endpoints.
"""

from unittest.mock import patch

import pytest

from apps.core.exceptions import PersistenceError
from tests.members.factories import MemberFactory
from tests.organizations.factories import OrganizationFactory


@pytest.mark.django_db
class TestListMembersEndpoint:
    """Tests for GET /organizations/{id}/members."""

    def test_requires_staff(self, api_client) -> None:
        org = OrganizationFactory.create()
        response = api_client.get(f"/api/v1/organizations/{org.pk}/members")
        assert response.status_code == 401

    def test_lists_decrypted_members(self, staff_client) -> None:
        org = OrganizationFactory.create()
        MemberFactory.create(organization=org, email="jan@example.nl", mm_cepi=True)
        MemberFactory.create(organization=org, email="oud@example.nl", is_active=False)

        response = staff_client.get(f"/api/v1/organizations/{org.pk}/members")

        assert response.status_code == 200
        data = response.json()
        assert data["organization_id"] == org.pk
        assert data["count"] == 1
        assert data["members"][0]["email"] == "jan@example.nl"
        assert data["members"][0]["mm_cepi"] is True

    def test_include_inactive(self, staff_client) -> None:
        org = OrganizationFactory.create()
        MemberFactory.create(organization=org, email="jan@example.nl")
        MemberFactory.create(organization=org, email="oud@example.nl", is_active=False)

        response = staff_client.get(
            f"/api/v1/organizations/{org.pk}/members", {"include_inactive": "true"}
        )

        assert response.json()["count"] == 2

    def test_unknown_organization(self, staff_client) -> None:
        response = staff_client.get("/api/v1/organizations/999999/members")
        assert response.status_code == 404

    def test_store_failure(self, staff_client) -> None:
        org = OrganizationFactory.create()
        with patch(
            "apps.members.api.MemberStore.list_by_organization",
            side_effect=PersistenceError("boom"),
        ):
            response = staff_client.get(f"/api/v1/organizations/{org.pk}/members")

        assert response.status_code == 500


@pytest.mark.django_db
class TestExportMembersEndpoint:
    """Tests for GET /organizations/{id}/members/export."""

    def test_requires_staff(self, api_client) -> None:
        org = OrganizationFactory.create()
        response = api_client.get(f"/api/v1/organizations/{org.pk}/members/export")
        assert response.status_code == 401

    def test_downloads_csv(self, staff_client) -> None:
        org = OrganizationFactory.create(name="Acme")
        MemberFactory.create(organization=org, email="jan@example.nl")

        response = staff_client.get(f"/api/v1/organizations/{org.pk}/members/export")

        assert response.status_code == 200
        assert response["Content-Type"].startswith("text/csv")
        assert response["Content-Disposition"].startswith('attachment; filename="members_acme_')
        assert response["Cache-Control"] == "no-store"
        assert b"jan@example.nl,FALSE" in response.content

    def test_downloads_xlsx(self, staff_client) -> None:
        org = OrganizationFactory.create()

        response = staff_client.get(
            f"/api/v1/organizations/{org.pk}/members/export", {"file_format": "xlsx"}
        )

        assert response.status_code == 200
        assert response["Content-Type"].startswith("application/vnd.openxmlformats")

    def test_bad_format(self, staff_client) -> None:
        org = OrganizationFactory.create()

        response = staff_client.get(
            f"/api/v1/organizations/{org.pk}/members/export", {"file_format": "pdf"}
        )

        assert response.status_code == 400
