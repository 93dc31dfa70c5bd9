"""
Tests for MemberStore.
"""

from unittest.mock import patch

import pytest
from django.db import DatabaseError, IntegrityError

from apps.core.exceptions import PersistenceError
from apps.members.crypto import decrypt_email, lookup_hash
from apps.members.models import Member
from apps.members.store import (
    DuplicateMemberError,
    MemberStore,
    MemberUpdate,
    MemberWrite,
)
from tests.members.factories import MemberFactory
from tests.organizations.factories import OrganizationFactory


def _write(email: str, mm_cepi: bool = False) -> MemberWrite:
    return MemberWrite(email=email, lookup_hash=lookup_hash(email), mm_cepi=mm_cepi)


@pytest.mark.django_db
class TestFindActiveByLookupHash:
    """Tests for the cross-organization lookup."""

    def test_finds_active_member(self) -> None:
        org = OrganizationFactory.create(name="Acme")
        member = MemberFactory.create(organization=org, email="jan@example.nl", mm_cepi=True)

        match = MemberStore().find_active_by_lookup_hash(lookup_hash("jan@example.nl"))

        assert match is not None
        assert match.member_id == member.pk
        assert match.organization_id == org.pk
        assert match.organization_name == "Acme"
        assert match.mm_cepi is True

    def test_returns_none_for_unknown_hash(self) -> None:
        MemberFactory.create(email="jan@example.nl")
        assert MemberStore().find_active_by_lookup_hash(lookup_hash("piet@example.nl")) is None

    def test_ignores_inactive_members(self) -> None:
        MemberFactory.create(email="jan@example.nl", is_active=False)
        assert MemberStore().find_active_by_lookup_hash(lookup_hash("jan@example.nl")) is None

    def test_empty_hash_returns_none(self) -> None:
        assert MemberStore().find_active_by_lookup_hash("") is None

    def test_same_email_in_two_organizations_fails_loudly(self) -> None:
        """An ambiguous match is an error, never an arbitrary pick."""
        MemberFactory.create(email="jan@example.nl")
        MemberFactory.create(email="jan@example.nl")

        with pytest.raises(DuplicateMemberError):
            MemberStore().find_active_by_lookup_hash(lookup_hash("jan@example.nl"))

    def test_database_error_becomes_persistence_error(self) -> None:
        with patch.object(Member.objects, "using", side_effect=DatabaseError("down")):
            with pytest.raises(PersistenceError):
                MemberStore().find_active_by_lookup_hash(lookup_hash("jan@example.nl"))


@pytest.mark.django_db
class TestUniqueness:
    """The (organization, lookup_hash) pair is unique in the database."""

    def test_duplicate_hash_in_one_organization_rejected(self) -> None:
        org = OrganizationFactory.create()
        MemberFactory.create(organization=org, email="jan@example.nl")

        with pytest.raises(IntegrityError):
            MemberFactory.create(organization=org, email="JAN@example.nl")


@pytest.mark.django_db
class TestListByOrganization:
    """Tests for list_by_organization and count_by_organization."""

    def test_lists_decrypted_active_members_sorted(self) -> None:
        org = OrganizationFactory.create()
        MemberFactory.create(organization=org, email="zoe@example.nl")
        MemberFactory.create(organization=org, email="anna@example.nl", mm_cepi=True)
        MemberFactory.create(organization=org, email="old@example.nl", is_active=False)
        MemberFactory.create(email="other-org@example.nl")

        records = MemberStore().list_by_organization(org.pk)

        assert [r.email for r in records] == ["anna@example.nl", "zoe@example.nl"]
        assert records[0].mm_cepi is True

    def test_can_include_inactive(self) -> None:
        org = OrganizationFactory.create()
        MemberFactory.create(organization=org, email="jan@example.nl")
        MemberFactory.create(organization=org, email="old@example.nl", is_active=False)

        records = MemberStore().list_by_organization(org.pk, active_only=False)

        assert {r.email for r in records} == {"jan@example.nl", "old@example.nl"}

    def test_undecryptable_row_yields_empty_email(self) -> None:
        org = OrganizationFactory.create()
        MemberFactory.create(organization=org, email="jan@example.nl")
        MemberFactory.create(
            organization=org, email="broken@example.nl", email_ciphertext="garbage"
        )

        records = MemberStore().list_by_organization(org.pk)

        assert sorted(r.email for r in records) == ["", "jan@example.nl"]

    def test_count(self) -> None:
        org = OrganizationFactory.create()
        MemberFactory.create_batch(3, organization=org)
        MemberFactory.create(organization=org, is_active=False)

        store = MemberStore()
        assert store.count_by_organization(org.pk) == 3
        assert store.count_by_organization(org.pk, active_only=False) == 4


@pytest.mark.django_db
class TestSyncWrites:
    """Tests for the write methods used by the importer."""

    def test_load_for_sync_keys_by_hash(self) -> None:
        org = OrganizationFactory.create()
        member = MemberFactory.create(organization=org, email="jan@example.nl", mm_cepi=True)

        current = MemberStore().load_for_sync(org.pk)

        snapshot = current[lookup_hash("jan@example.nl")]
        assert snapshot.id == member.pk
        assert snapshot.mm_cepi is True
        assert snapshot.is_active is True

    def test_add_members_encrypts(self) -> None:
        org = OrganizationFactory.create()

        added = MemberStore().add_members(org.pk, [_write("jan@example.nl", True)])

        assert added == 1
        member = Member.objects.get(organization=org)
        assert member.email_ciphertext != "jan@example.nl"
        assert decrypt_email(member.email_ciphertext) == "jan@example.nl"
        assert member.lookup_hash == lookup_hash("jan@example.nl")
        assert member.mm_cepi is True

    def test_add_members_with_nothing(self) -> None:
        org = OrganizationFactory.create()
        assert MemberStore().add_members(org.pk, []) == 0

    def test_update_members_sets_flag_and_reactivates(self) -> None:
        org = OrganizationFactory.create()
        member = MemberFactory.create(organization=org, mm_cepi=False, is_active=False)
        before = member.updated_at

        touched = MemberStore().update_members(
            org.pk, [MemberUpdate(member_id=member.pk, mm_cepi=True)]
        )

        member.refresh_from_db()
        assert touched == 1
        assert member.mm_cepi is True
        assert member.is_active is True
        assert member.updated_at >= before

    def test_update_members_is_scoped_to_organization(self) -> None:
        org = OrganizationFactory.create()
        other = MemberFactory.create(mm_cepi=False)

        touched = MemberStore().update_members(
            org.pk, [MemberUpdate(member_id=other.pk, mm_cepi=True)]
        )

        other.refresh_from_db()
        assert touched == 0
        assert other.mm_cepi is False

    def test_delete_members_by_hash(self) -> None:
        org = OrganizationFactory.create()
        MemberFactory.create(organization=org, email="jan@example.nl")
        MemberFactory.create(organization=org, email="piet@example.nl")
        elsewhere = MemberFactory.create(email="jan@example.nl")

        deleted = MemberStore().delete_members(org.pk, [lookup_hash("jan@example.nl")])

        assert deleted == 1
        assert Member.objects.filter(organization=org).count() == 1
        assert Member.objects.filter(pk=elsewhere.pk).exists()

    def test_delete_members_in_batches(self) -> None:
        org = OrganizationFactory.create()
        members = MemberFactory.create_batch(5, organization=org)

        with patch("apps.members.store.DELETE_BATCH_SIZE", 2):
            deleted = MemberStore().delete_members(org.pk, [m.lookup_hash for m in members])

        assert deleted == 5
        assert not Member.objects.filter(organization=org).exists()
