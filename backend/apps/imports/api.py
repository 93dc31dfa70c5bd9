"""
Member import API endpoints (staff only).
"""

from django.conf import settings
from django.http import HttpRequest
from ninja import File, Router
from ninja.errors import HttpError
from ninja.files import UploadedFile

from apps.core.exceptions import NotFoundError, PersistenceError, ValidationError
from apps.core.schemas import ErrorResponse
from apps.core.security import staff_auth
from apps.imports.models import ImportLog
from apps.imports.schemas import ImportLogListResponse, ImportLogResponse, ImportResultResponse
from apps.imports.services import import_member_file
from apps.organizations.models import Organization

router = Router(tags=["imports"])


def _get_organization(organization_id: int) -> Organization:
    try:
        return Organization.objects.get(pk=organization_id)
    except Organization.DoesNotExist:
        raise HttpError(404, "Organization not found") from None


@router.post(
    "/{organization_id}/members/import",
    response={
        200: ImportResultResponse,
        400: ErrorResponse,
        404: ErrorResponse,
        500: ErrorResponse,
    },
    auth=staff_auth,
    operation_id="importMembers",
    summary="Replace an organization's members from a file",
)
def import_members(
    request: HttpRequest,
    organization_id: int,
    file: UploadedFile = File(...),  # noqa: B008
) -> ImportResultResponse:
    """
    Upload a CSV/XLSX/XLS member list.

    The file is authoritative: members not in the file are deleted.
    """
    organization = _get_organization(organization_id)

    max_bytes: int = settings.IMPORT_MAX_UPLOAD_BYTES
    if file.size is not None and file.size > max_bytes:
        raise HttpError(400, f"File is too large. Maximum size: {max_bytes // (1024 * 1024)} MB")

    try:
        result = import_member_file(
            organization=organization,
            filename=file.name or "",
            content=file.read(),
            user=request.auth,
            request=request,
        )
    except ValidationError as e:
        raise HttpError(400, str(e)) from None
    except NotFoundError as e:
        raise HttpError(404, str(e)) from None
    except PersistenceError:
        raise HttpError(500, "Import failed. No changes were made.") from None

    return ImportResultResponse(
        rows_imported=result.rows_imported,
        rows_added=result.rows_added,
        rows_updated=result.rows_updated,
        rows_deleted=result.rows_deleted,
        errors=result.errors,
        error_count=result.error_count,
        import_log_id=result.import_log_id,
    )


@router.get(
    "/{organization_id}/imports",
    response={200: ImportLogListResponse, 404: ErrorResponse},
    auth=staff_auth,
    operation_id="listImports",
    summary="List member imports",
)
def list_imports(request: HttpRequest, organization_id: int, limit: int = 50):
    """Most recent imports first."""
    organization = _get_organization(organization_id)
    logs = ImportLog.objects.filter(organization=organization)[: min(limit, 200)]
    return ImportLogListResponse(
        imports=[
            ImportLogResponse(
                id=log.id,
                filename=log.filename,
                status=log.status,
                rows_imported=log.rows_imported,
                rows_added=log.rows_added,
                rows_updated=log.rows_updated,
                rows_deleted=log.rows_deleted,
                error_message=log.error_message,
                created_at=log.created_at,
            )
            for log in logs
        ]
    )
