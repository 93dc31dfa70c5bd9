"""
Tests for the import_members management command.
"""

from io import StringIO

import pytest
from django.core.management import CommandError, call_command

from apps.members.models import Member
from tests.members.factories import MemberFactory
from tests.organizations.factories import OrganizationFactory


@pytest.fixture
def member_file(tmp_path):
    path = tmp_path / "members.csv"
    path.write_text("email_address,mm_cepi\njan@example.nl,ja\npiet@example.nl,nee\n")
    return path


@pytest.mark.django_db
class TestImportMembersCommand:
    """Tests for import_members."""

    def test_imports_file(self, member_file) -> None:
        org = OrganizationFactory.create()
        out = StringIO()

        call_command("import_members", str(org.pk), str(member_file), stdout=out)

        assert Member.objects.filter(organization=org).count() == 2
        assert "2 added" in out.getvalue()

    def test_dry_run_writes_nothing(self, member_file) -> None:
        org = OrganizationFactory.create()
        MemberFactory.create(organization=org, email="gone@example.nl")
        out = StringIO()

        call_command("import_members", str(org.pk), str(member_file), "--dry-run", stdout=out)

        assert Member.objects.filter(organization=org).count() == 1
        assert "would add 2" in out.getvalue()
        assert "delete 1" in out.getvalue()

    def test_unknown_organization(self, member_file) -> None:
        with pytest.raises(CommandError, match="not found"):
            call_command("import_members", "999999", str(member_file))

    def test_missing_file(self, tmp_path) -> None:
        org = OrganizationFactory.create()
        with pytest.raises(CommandError, match="File not found"):
            call_command("import_members", str(org.pk), str(tmp_path / "nope.csv"))
