"""
Member API endpoints.

Public: the member lookup, authenticated by API key.
Staff: listing and exporting an organization's decrypted member list.
"""

from django.http import HttpRequest, HttpResponse, JsonResponse
from ninja import Router
from ninja.errors import HttpError

from apps.core.exceptions import PersistenceError, ValidationError
from apps.core.schemas import ErrorResponse
from apps.core.security import staff_auth
from apps.members.export import export_members
from apps.members.lookup import check_membership
from apps.members.schemas import (
    LookupErrorResponse,
    LookupResponse,
    MemberListResponse,
    MemberResponse,
    RateLimitedResponse,
)
from apps.members.store import MemberStore
from apps.organizations.models import Organization

router = Router(tags=["members"])


@router.api_operation(
    ["GET", "POST"],
    "/check-member",
    response={
        200: LookupResponse,
        400: LookupErrorResponse,
        401: LookupErrorResponse,
        429: RateLimitedResponse,
        500: LookupErrorResponse,
    },
    auth=None,
    operation_id="checkMember",
    summary="Check whether an email belongs to an active member",
    description=(
        "Pass `email` as a query parameter, form field or JSON field. Authenticate with "
        "`Authorization: Bearer <key>`, the `X-API-Key` header, or an `api_key` "
        "query/form/JSON field. Rate limited per client IP."
    ),
)
def check_member(request: HttpRequest) -> HttpResponse:
    """Look up an email across all organizations."""
    outcome = check_membership(request)
    response = JsonResponse(outcome.body, status=outcome.status)
    for name, value in outcome.headers.items():
        response[name] = value
    return response


def _get_organization(organization_id: int) -> Organization:
    try:
        return Organization.objects.get(pk=organization_id)
    except Organization.DoesNotExist:
        raise HttpError(404, "Organization not found") from None


@router.get(
    "/organizations/{organization_id}/members",
    response={200: MemberListResponse, 404: ErrorResponse, 500: ErrorResponse},
    auth=staff_auth,
    operation_id="listMembers",
    summary="List an organization's members",
)
def list_members(
    request: HttpRequest, organization_id: int, include_inactive: bool = False
) -> MemberListResponse:
    organization = _get_organization(organization_id)
    try:
        records = MemberStore().list_by_organization(
            organization.pk, active_only=not include_inactive
        )
    except PersistenceError:
        raise HttpError(500, "Could not load members") from None

    return MemberListResponse(
        organization_id=organization.pk,
        count=len(records),
        members=[
            MemberResponse(
                id=record.id,
                email=record.email,
                mm_cepi=record.mm_cepi,
                is_active=record.is_active,
            )
            for record in records
        ],
    )


@router.get(
    "/organizations/{organization_id}/members/export",
    response={400: ErrorResponse, 404: ErrorResponse, 500: ErrorResponse},
    auth=staff_auth,
    operation_id="exportMembers",
    summary="Download an organization's members as CSV or XLSX",
)
def export_members_file(
    request: HttpRequest,
    organization_id: int,
    file_format: str = "csv",
    include_inactive: bool = False,
) -> HttpResponse:
    """Export in the import file format (email_address, mm_cepi)."""
    organization = _get_organization(organization_id)
    try:
        export = export_members(
            organization,
            file_format=file_format,
            include_inactive=include_inactive,
            user=request.auth,
            request=request,
        )
    except ValidationError as e:
        raise HttpError(400, str(e)) from None
    except PersistenceError:
        raise HttpError(500, "Could not load members") from None

    response = HttpResponse(export.content, content_type=export.content_type)
    response["Content-Disposition"] = f'attachment; filename="{export.filename}"'
    response["Cache-Control"] = "no-store"
    return response
