"""
Member list sync imports.

An upload replaces the organization's member list: rows in the file are
added or updated, members missing from the file are deleted. Row-level
problems are collected as errors and the row is skipped; only whole-file
problems (unreadable file, database failure) abort the import.
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from django.conf import settings
from django.db import DatabaseError, transaction
from django.http import HttpRequest

from apps.audit.models import AuditLog
from apps.audit.services import record_activity, staff_actor
from apps.core.exceptions import NotFoundError, PersistenceError, ValidationError
from apps.core.logging import get_logger
from apps.imports.models import ImportLog
from apps.imports.parsing import RawMemberRow, read_member_file
from apps.members.crypto import lookup_hash
from apps.members.store import MemberSnapshot, MemberStore, MemberUpdate, MemberWrite
from apps.members.validators import clean_email
from apps.organizations.models import Organization

logger = get_logger(__name__)

TRUE_TOKENS = frozenset({"true", "1", "yes", "ja", "y", "waar"})

# ImportLog keeps a short summary of rejected rows
LOGGED_ERROR_COUNT = 10
LOGGED_ERROR_MAX_LENGTH = 1000

# Rejected cell values are echoed back at most this long
ERROR_VALUE_MAX_LENGTH = 100


@dataclass
class PreparedRows:
    """Valid rows keyed by lookup hash, plus one message per rejected row."""

    members: dict[str, MemberWrite] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)


@dataclass
class SyncPlan:
    """What a sync will change."""

    to_add: list[MemberWrite]
    to_update: list[MemberUpdate]
    to_delete: list[str]
    flag_changes: int


@dataclass
class SyncCounts:
    """Counts reported for an applied sync."""

    rows_imported: int
    rows_added: int
    rows_updated: int
    rows_deleted: int


@dataclass
class ImportResult:
    """Outcome of an import, as returned to the uploader."""

    rows_imported: int
    rows_added: int
    rows_updated: int
    rows_deleted: int
    errors: list[str]
    error_count: int
    import_log_id: int | None = None


def parse_boolean(value: Any) -> bool:
    """
    Interpret a spreadsheet cell as a flag.

    True for: booleans True, non-zero numbers (or numeric strings), and the
    case-insensitive tokens true/1/yes/ja/y/waar. Everything else is False,
    including empty cells and unrecognized text.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float, Decimal)):
        return value != 0 and not (isinstance(value, float) and math.isnan(value))
    if isinstance(value, str):
        token = value.strip().lower()
        if token in TRUE_TOKENS:
            return True
        try:
            number = float(token)
        except ValueError:
            return False
        return math.isfinite(number) and number != 0
    return False


def _shorten(value: object) -> str:
    text = "" if value is None else str(value)
    if len(text) > ERROR_VALUE_MAX_LENGTH:
        return text[:ERROR_VALUE_MAX_LENGTH] + "..."
    return text


def prepare_rows(rows: Iterable[RawMemberRow]) -> PreparedRows:
    """
    Validate rows one by one.

    Invalid emails become error messages. When an email appears more than
    once the last occurrence wins.
    """
    prepared = PreparedRows()
    for row in rows:
        try:
            email = clean_email(row.email)
        except ValidationError as e:
            prepared.errors.append(f"Row {row.row_number}: {e} '{_shorten(row.email)}'")
            continue

        hashed = lookup_hash(email)
        prepared.members[hashed] = MemberWrite(
            email=email,
            lookup_hash=hashed,
            mm_cepi=parse_boolean(row.mm_cepi),
        )
    return prepared


def plan_sync(current: dict[str, MemberSnapshot], incoming: dict[str, MemberWrite]) -> SyncPlan:
    """
    Diff the current members against the incoming file.

    Members present in both are rewritten when their flag changed or they
    are inactive; only flag changes count as updates.
    """
    to_add = []
    to_update = []
    flag_changes = 0

    for hashed, member in incoming.items():
        existing = current.get(hashed)
        if existing is None:
            to_add.append(member)
            continue
        flag_changed = existing.mm_cepi != member.mm_cepi
        if flag_changed:
            flag_changes += 1
        if flag_changed or not existing.is_active:
            to_update.append(MemberUpdate(member_id=existing.id, mm_cepi=member.mm_cepi))

    to_delete = [hashed for hashed in current if hashed not in incoming]
    return SyncPlan(
        to_add=to_add,
        to_update=to_update,
        to_delete=to_delete,
        flag_changes=flag_changes,
    )


def sync_members(
    organization_id: int,
    incoming: dict[str, MemberWrite],
    store: MemberStore | None = None,
) -> SyncCounts:
    """
    Make the organization's members exactly ``incoming``.

    Runs in one transaction holding a lock on the organization row, so
    concurrent imports for the same organization apply one after the other
    and a failure leaves the member list untouched.

    Raises:
        NotFoundError: If the organization does not exist
        PersistenceError: If the database write fails
    """
    store = store or MemberStore()
    try:
        with transaction.atomic(using=store.using):
            try:
                Organization.objects.using(store.using).select_for_update().get(
                    pk=organization_id
                )
            except Organization.DoesNotExist:
                raise NotFoundError("Organization not found") from None

            plan = plan_sync(store.load_for_sync(organization_id), incoming)
            deleted = store.delete_members(organization_id, plan.to_delete)
            added = store.add_members(organization_id, plan.to_add)
            store.update_members(organization_id, plan.to_update)
    except DatabaseError as e:
        raise PersistenceError("Member sync failed") from e

    return SyncCounts(
        rows_imported=len(incoming),
        rows_added=added,
        rows_updated=plan.flag_changes,
        rows_deleted=deleted,
    )


def _summarize_errors(errors: list[str]) -> str:
    message = "; ".join(errors[:LOGGED_ERROR_COUNT])
    if len(message) > LOGGED_ERROR_MAX_LENGTH:
        message = message[:LOGGED_ERROR_MAX_LENGTH] + "..."
    return message


def import_member_file(
    organization: Organization,
    filename: str,
    content: bytes,
    user: Any | None = None,
    request: HttpRequest | None = None,
    store: MemberStore | None = None,
) -> ImportResult:
    """
    Parse an uploaded file and sync the organization's members to it.

    Writes an ImportLog row and an audit entry for both successful and
    failed imports.

    Args:
        organization: Organization whose member list is replaced
        filename: Uploaded filename (selects the parser)
        content: Raw file bytes
        user: Staff user performing the import, None for the CLI
        request: Originating request, for the audit entry
        store: Member store to write through

    Returns:
        ImportResult with counts and the (truncated) row error list

    Raises:
        ImportFileError: If the file cannot be used at all
        NotFoundError: If the organization disappeared
        PersistenceError: If the database write fails
    """
    logger.info("member_import_started", organization_id=organization.pk, filename=filename)

    try:
        prepared = prepare_rows(read_member_file(filename, content))
        counts = sync_members(organization.pk, prepared.members, store)
    except (ValidationError, NotFoundError, PersistenceError) as e:
        if isinstance(e, PersistenceError):
            logger.exception("member_import_failed", organization_id=organization.pk)
            reason = "Database error during import"
        else:
            logger.warning("member_import_rejected", organization_id=organization.pk, reason=str(e))
            reason = str(e)

        ImportLog.objects.create(
            organization=organization,
            filename=filename[:255],
            status=ImportLog.Status.FAILED,
            error_message=reason[:LOGGED_ERROR_MAX_LENGTH],
            imported_by=user,
        )
        record_activity(
            AuditLog.Action.MEMBERS_IMPORT_FAILED,
            **staff_actor(user),
            details={"filename": filename, "success": False, "error": reason},
            request=request,
            organization_id=organization.pk,
        )
        raise

    import_log = ImportLog.objects.create(
        organization=organization,
        filename=filename[:255],
        rows_imported=counts.rows_imported,
        rows_added=counts.rows_added,
        rows_updated=counts.rows_updated,
        rows_deleted=counts.rows_deleted,
        status=ImportLog.Status.PARTIAL if prepared.errors else ImportLog.Status.SUCCESS,
        error_message=_summarize_errors(prepared.errors),
        imported_by=user,
    )

    logger.info(
        "member_import_completed",
        organization_id=organization.pk,
        rows_imported=counts.rows_imported,
        rows_added=counts.rows_added,
        rows_updated=counts.rows_updated,
        rows_deleted=counts.rows_deleted,
        error_count=len(prepared.errors),
    )
    record_activity(
        AuditLog.Action.MEMBERS_IMPORTED,
        **staff_actor(user),
        details={
            "filename": filename,
            "success": not prepared.errors,
            "rows_imported": counts.rows_imported,
            "rows_added": counts.rows_added,
            "rows_updated": counts.rows_updated,
            "rows_deleted": counts.rows_deleted,
            "error_count": len(prepared.errors),
            "import_log_id": import_log.pk,
        },
        request=request,
        organization_id=organization.pk,
    )

    max_errors: int = settings.IMPORT_MAX_REPORTED_ERRORS
    return ImportResult(
        rows_imported=counts.rows_imported,
        rows_added=counts.rows_added,
        rows_updated=counts.rows_updated,
        rows_deleted=counts.rows_deleted,
        errors=prepared.errors[:max_errors],
        error_count=len(prepared.errors),
        import_log_id=import_log.pk,
    )
