"""
Member persistence.

MemberStore is the only code that reads or writes ``Member.email_ciphertext``.
Callers hand it plaintext emails and lookup hashes and get typed records back.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from django.db import DEFAULT_DB_ALIAS, DatabaseError
from django.utils import timezone

from apps.core.exceptions import PersistenceError
from apps.core.logging import get_logger
from apps.members.crypto import EmailDecryptionError, decrypt_email, encrypt_email
from apps.members.models import Member

logger = get_logger(__name__)

# Keep IN (...) lists well below SQLite's bound-parameter limit
DELETE_BATCH_SIZE = 500


class DuplicateMemberError(PersistenceError):
    """More than one active member matches a lookup hash."""

    pass


@dataclass(frozen=True)
class MemberRecord:
    """A member with its email decrypted, for display and export."""

    id: int
    organization_id: int
    email: str
    mm_cepi: bool
    is_active: bool


@dataclass(frozen=True)
class MemberMatch:
    """Result of a successful public lookup."""

    member_id: int
    organization_id: int
    organization_name: str
    mm_cepi: bool


@dataclass(frozen=True)
class MemberSnapshot:
    """Current state of a member as seen by the importer."""

    id: int
    mm_cepi: bool
    is_active: bool


@dataclass(frozen=True)
class MemberWrite:
    """A member to insert."""

    email: str
    lookup_hash: str
    mm_cepi: bool


@dataclass(frozen=True)
class MemberUpdate:
    """New flag value for an existing member. Updated rows are (re)activated."""

    member_id: int
    mm_cepi: bool


class MemberStore:
    """
    Member repository bound to one database alias.

    Read failures are raised as PersistenceError. Write methods are meant to
    run inside the caller's transaction and let database errors propagate
    so the transaction rolls back.
    """

    def __init__(self, using: str = DEFAULT_DB_ALIAS) -> None:
        self.using = using

    def _members(self):
        return Member.objects.using(self.using)

    def find_active_by_lookup_hash(self, lookup_hash: str) -> MemberMatch | None:
        """
        Find the active member with this lookup hash in any organization.

        Raises:
            DuplicateMemberError: If several organizations hold the same hash
            PersistenceError: If the database is unavailable
        """
        if not lookup_hash:
            return None

        try:
            rows = list(
                self._members()
                .filter(lookup_hash=lookup_hash, is_active=True)
                .select_related("organization")
                .order_by("pk")[:2]
            )
        except DatabaseError as e:
            raise PersistenceError("Member lookup failed") from e

        if not rows:
            return None
        if len(rows) > 1:
            logger.error(
                "member_lookup_ambiguous",
                lookup_hash=lookup_hash,
                organization_ids=[row.organization_id for row in rows],
            )
            raise DuplicateMemberError("Lookup hash matches more than one active member")

        member = rows[0]
        return MemberMatch(
            member_id=member.pk,
            organization_id=member.organization_id,
            organization_name=member.organization.name,
            mm_cepi=member.mm_cepi,
        )

    def list_by_organization(
        self, organization_id: int, active_only: bool = True
    ) -> list[MemberRecord]:
        """
        List an organization's members with decrypted emails.

        A row that cannot be decrypted is returned with an empty email and
        logged; one bad row does not hide the rest of the list.
        """
        queryset = self._members().filter(organization_id=organization_id)
        if active_only:
            queryset = queryset.filter(is_active=True)

        records = []
        try:
            for member in queryset.iterator():
                records.append(
                    MemberRecord(
                        id=member.pk,
                        organization_id=member.organization_id,
                        email=self._decrypt(member),
                        mm_cepi=member.mm_cepi,
                        is_active=member.is_active,
                    )
                )
        except DatabaseError as e:
            raise PersistenceError("Member listing failed") from e

        records.sort(key=lambda record: record.email)
        return records

    def count_by_organization(self, organization_id: int, active_only: bool = True) -> int:
        queryset = self._members().filter(organization_id=organization_id)
        if active_only:
            queryset = queryset.filter(is_active=True)
        return queryset.count()

    def load_for_sync(self, organization_id: int) -> dict[str, MemberSnapshot]:
        """Current members of an organization keyed by lookup hash."""
        rows = self._members().filter(organization_id=organization_id).values_list(
            "pk", "lookup_hash", "mm_cepi", "is_active"
        )
        return {
            lookup_hash: MemberSnapshot(id=pk, mm_cepi=mm_cepi, is_active=is_active)
            for pk, lookup_hash, mm_cepi, is_active in rows
        }

    def add_members(self, organization_id: int, members: Iterable[MemberWrite]) -> int:
        """Insert new members, encrypting each email. Returns the number inserted."""
        objs = [
            Member(
                organization_id=organization_id,
                email_ciphertext=encrypt_email(member.email),
                lookup_hash=member.lookup_hash,
                mm_cepi=member.mm_cepi,
                is_active=True,
            )
            for member in members
        ]
        if not objs:
            return 0
        self._members().bulk_create(objs)
        return len(objs)

    def update_members(self, organization_id: int, updates: Iterable[MemberUpdate]) -> int:
        """Set flags on existing members and mark them active. Returns rows touched."""
        now = timezone.now()
        by_id = {update.member_id: update for update in updates}
        if not by_id:
            return 0

        # bulk_update skips auto_now, so updated_at is set here
        objs = list(self._members().filter(organization_id=organization_id, pk__in=by_id))
        for member in objs:
            member.mm_cepi = by_id[member.pk].mm_cepi
            member.is_active = True
            member.updated_at = now
        self._members().bulk_update(objs, ["mm_cepi", "is_active", "updated_at"])
        return len(objs)

    def delete_members(self, organization_id: int, lookup_hashes: Iterable[str]) -> int:
        """Permanently delete members by lookup hash. Returns the number deleted."""
        hashes = list(lookup_hashes)
        deleted = 0
        for start in range(0, len(hashes), DELETE_BATCH_SIZE):
            chunk = hashes[start : start + DELETE_BATCH_SIZE]
            count, _ = (
                self._members()
                .filter(organization_id=organization_id, lookup_hash__in=chunk)
                .delete()
            )
            deleted += count
        return deleted

    def _decrypt(self, member: Member) -> str:
        try:
            return decrypt_email(member.email_ciphertext)
        except EmailDecryptionError:
            logger.warning(
                "member_email_decrypt_failed",
                member_id=member.pk,
                organization_id=member.organization_id,
            )
            return ""
