"""
Member list export.

Writes an organization's members back out in the import format
(``email_address``, ``mm_cepi``), so an export can be edited and re-uploaded.
"""

from dataclasses import dataclass
from typing import Any

from django.http import HttpRequest
from django.utils import timezone
from django.utils.text import slugify
from tablib import Dataset

from apps.audit.models import AuditLog
from apps.audit.services import record_activity, staff_actor
from apps.core.exceptions import ValidationError
from apps.core.logging import get_logger
from apps.members.store import MemberStore
from apps.organizations.models import Organization

logger = get_logger(__name__)

EXPORT_HEADERS = ["email_address", "mm_cepi"]

CONTENT_TYPES = {
    "csv": "text/csv; charset=utf-8",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}

# Excel needs the BOM to detect UTF-8 in a CSV
UTF8_BOM = "\ufeff"

FORMULA_PREFIXES = ("=", "+", "-", "@", "\t", "\r")


@dataclass(frozen=True)
class ExportFile:
    """A rendered export, ready to be sent as an attachment."""

    filename: str
    content: bytes
    content_type: str
    row_count: int


def sanitize_cell(value: str) -> str:
    """Prefix formula-starting characters to prevent spreadsheet formula injection."""
    if value and value[0] in FORMULA_PREFIXES:
        return f"'{value}"
    return value


def export_members(
    organization: Organization,
    file_format: str = "csv",
    include_inactive: bool = False,
    user: Any | None = None,
    request: HttpRequest | None = None,
    store: MemberStore | None = None,
) -> ExportFile:
    """
    Render an organization's members with decrypted emails.

    Raises:
        ValidationError: If the format is not csv or xlsx
    """
    if file_format not in CONTENT_TYPES:
        raise ValidationError(f"Unsupported export format: {file_format}")

    store = store or MemberStore()
    members = store.list_by_organization(organization.pk, active_only=not include_inactive)

    dataset = Dataset(headers=EXPORT_HEADERS, title="Members")
    for member in members:
        dataset.append([sanitize_cell(member.email), "TRUE" if member.mm_cepi else "FALSE"])

    if file_format == "csv":
        content = (UTF8_BOM + dataset.export("csv")).encode("utf-8")
    else:
        content = dataset.export("xlsx")

    timestamp = timezone.now().strftime("%Y-%m-%d_%H%M%S")
    filename = f"members_{slugify(organization.name) or organization.pk}_{timestamp}.{file_format}"

    logger.info(
        "members_exported",
        organization_id=organization.pk,
        file_format=file_format,
        row_count=len(members),
    )
    record_activity(
        AuditLog.Action.MEMBERS_EXPORTED,
        **staff_actor(user),
        details={
            "file_format": file_format,
            "include_inactive": include_inactive,
            "row_count": len(members),
        },
        request=request,
        organization_id=organization.pk,
    )
    return ExportFile(
        filename=filename,
        content=content,
        content_type=CONTENT_TYPES[file_format],
        row_count=len(members),
    )
