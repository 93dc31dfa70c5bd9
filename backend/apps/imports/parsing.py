"""
Reading uploaded member files.

Turns a CSV or spreadsheet upload into raw (email, mm_cepi) cells with their
spreadsheet row numbers. Cell values are not validated here; that happens
per row in the import service.
"""

import csv
import io
from dataclasses import dataclass
from pathlib import PurePath

from django.conf import settings
from tablib import Dataset

from apps.core.exceptions import ValidationError
from apps.core.logging import get_logger
from apps.members.export import FORMULA_PREFIXES

logger = get_logger(__name__)

ALLOWED_EXTENSIONS = ("csv", "xlsx", "xls")

# Normalized header names accepted for each logical column
EMAIL_HEADERS = ("emailaddress", "email")
MM_CEPI_HEADERS = ("mmcepi",)

SNIFF_SAMPLE_BYTES = 64 * 1024
CSV_DELIMITERS = ",;\t|"


class ImportFileError(ValidationError):
    """The uploaded file cannot be read as a member list."""

    pass


@dataclass(frozen=True)
class RawMemberRow:
    """Unvalidated cells of one data row. ``row_number`` is 1-based, header is row 1."""

    row_number: int
    email: object
    mm_cepi: object


def norm_header(value: object) -> str:
    """Lowercase and keep only letters and digits: "E-mail Address" -> "emailaddress"."""
    if value is None:
        return ""
    return "".join(ch for ch in str(value).strip().lower() if ch.isalnum())


def file_extension(filename: str) -> str:
    return PurePath(filename).suffix.lower().lstrip(".")


def unguard_cell(value: object) -> object:
    """Undo the leading quote the export adds in front of formula characters."""
    if not isinstance(value, str) or len(value) < 2:
        return value
    if value[0] == "'" and value[1] in FORMULA_PREFIXES:
        return value[1:]
    return value


def _find_column(headers: list[str], candidates: tuple[str, ...]) -> int | None:
    normalized = [norm_header(header) for header in headers]
    for candidate in candidates:
        if candidate in normalized:
            return normalized.index(candidate)
    return None


def _is_blank(cells: list[object]) -> bool:
    return all(cell is None or str(cell).strip() == "" for cell in cells)


def _decode(content: bytes) -> str:
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        # Excel on Windows saves "CSV" as a legacy code page
        return content.decode("latin-1")


def _read_csv(content: bytes) -> tuple[list[str], list[list[object]]]:
    text = _decode(content)
    sample = text[:SNIFF_SAMPLE_BYTES]
    try:
        dialect = csv.Sniffer().sniff(sample, delimiters=CSV_DELIMITERS)
    except csv.Error:
        dialect = csv.excel

    reader = csv.reader(io.StringIO(text), dialect)
    try:
        records = list(reader)
    except csv.Error as e:
        raise ImportFileError(f"Could not read CSV file: {e}") from None

    if not records:
        return [], []
    return [str(cell) for cell in records[0]], [list(record) for record in records[1:]]


def _read_spreadsheet(content: bytes, extension: str) -> tuple[list[str], list[list[object]]]:
    try:
        dataset = Dataset().load(content, format=extension)
    except Exception as e:
        logger.info("member_file_unreadable", extension=extension, error=type(e).__name__)
        raise ImportFileError("Could not read spreadsheet file") from None

    headers = ["" if header is None else str(header) for header in (dataset.headers or [])]
    return headers, [list(row) for row in dataset]


def read_member_file(filename: str, content: bytes) -> list[RawMemberRow]:
    """
    Parse an uploaded member list.

    Args:
        filename: Original filename; its extension selects the parser
        content: Raw file bytes

    Returns:
        Non-blank data rows in file order

    Raises:
        ImportFileError: Unsupported extension, file too large, unreadable,
            missing email column, or no data rows
    """
    extension = file_extension(filename)
    if extension not in ALLOWED_EXTENSIONS:
        raise ImportFileError(
            f"Unsupported file type. Allowed: {', '.join(ALLOWED_EXTENSIONS)}"
        )

    max_bytes: int = settings.IMPORT_MAX_UPLOAD_BYTES
    if len(content) > max_bytes:
        raise ImportFileError(f"File is too large. Maximum size: {max_bytes // (1024 * 1024)} MB")
    if not content:
        raise ImportFileError("File is empty")

    if extension == "csv":
        headers, records = _read_csv(content)
    else:
        headers, records = _read_spreadsheet(content, extension)

    email_column = _find_column(headers, EMAIL_HEADERS)
    if email_column is None:
        raise ImportFileError("File must have an 'email_address' or 'email' column")
    mm_cepi_column = _find_column(headers, MM_CEPI_HEADERS)

    rows = []
    for index, record in enumerate(records):
        if _is_blank(record):
            continue
        rows.append(
            RawMemberRow(
                row_number=index + 2,
                email=(
                    unguard_cell(record[email_column]) if email_column < len(record) else None
                ),
                mm_cepi=(
                    record[mm_cepi_column]
                    if mm_cepi_column is not None and mm_cepi_column < len(record)
                    else None
                ),
            )
        )

    if not rows:
        raise ImportFileError("File contains no data rows")
    return rows
