"""
API key management endpoints (staff only).

The plaintext secret appears only in the create response.
"""

from django.http import HttpRequest
from ninja import Router
from ninja.errors import HttpError

from apps.api_keys.models import ApiKey
from apps.api_keys.schemas import (
    ApiKeyListResponse,
    ApiKeyResponse,
    ApiKeyUsageResponse,
    CreateApiKeyRequest,
    CreateApiKeyResponse,
)
from apps.api_keys.services import (
    activate_api_key,
    deactivate_api_key,
    delete_api_key,
    generate_api_key,
    get_usage_stats,
    list_api_keys,
)
from apps.core.exceptions import NotFoundError, ValidationError
from apps.core.schemas import ErrorResponse, StatusResponse
from apps.core.security import staff_auth

router = Router(tags=["api-keys"])


def _key_to_response(api_key: ApiKey) -> ApiKeyResponse:
    return ApiKeyResponse(
        id=api_key.id,
        name=api_key.name,
        is_active=api_key.is_active,
        is_expired=api_key.is_expired,
        expires_at=api_key.expires_at,
        last_used_at=api_key.last_used_at,
        created_at=api_key.created_at,
        usage_count=getattr(api_key, "usage_count", None),
    )


@router.get(
    "/",
    response=ApiKeyListResponse,
    auth=staff_auth,
    operation_id="listApiKeys",
    summary="List API keys",
)
def list_keys(request: HttpRequest) -> ApiKeyListResponse:
    """List all keys with their lookup counts."""
    return ApiKeyListResponse(api_keys=[_key_to_response(k) for k in list_api_keys()])


@router.post(
    "/",
    response={201: CreateApiKeyResponse, 400: ErrorResponse},
    auth=staff_auth,
    operation_id="createApiKey",
    summary="Create API key",
)
def create_key(request: HttpRequest, payload: CreateApiKeyRequest):
    """Create a key and return its secret once."""
    try:
        generated = generate_api_key(
            name=payload.name,
            expires_at=payload.expires_at,
            created_by=request.auth,
            request=request,
        )
    except ValidationError as e:
        raise HttpError(400, str(e)) from None

    return 201, CreateApiKeyResponse(
        api_key=_key_to_response(generated.api_key),
        secret=generated.secret,
    )


@router.post(
    "/{key_id}/activate",
    response={200: ApiKeyResponse, 404: ErrorResponse},
    auth=staff_auth,
    operation_id="activateApiKey",
    summary="Activate API key",
)
def activate_key(request: HttpRequest, key_id: int) -> ApiKeyResponse:
    try:
        api_key = activate_api_key(key_id, actor=request.auth, request=request)
    except NotFoundError as e:
        raise HttpError(404, str(e)) from None
    return _key_to_response(api_key)


@router.post(
    "/{key_id}/deactivate",
    response={200: ApiKeyResponse, 404: ErrorResponse},
    auth=staff_auth,
    operation_id="deactivateApiKey",
    summary="Deactivate API key",
)
def deactivate_key(request: HttpRequest, key_id: int) -> ApiKeyResponse:
    try:
        api_key = deactivate_api_key(key_id, actor=request.auth, request=request)
    except NotFoundError as e:
        raise HttpError(404, str(e)) from None
    return _key_to_response(api_key)


@router.delete(
    "/{key_id}",
    response={200: StatusResponse, 404: ErrorResponse},
    auth=staff_auth,
    operation_id="deleteApiKey",
    summary="Delete API key",
)
def delete_key(request: HttpRequest, key_id: int) -> StatusResponse:
    try:
        delete_api_key(key_id, actor=request.auth, request=request)
    except NotFoundError as e:
        raise HttpError(404, str(e)) from None
    return StatusResponse()


@router.get(
    "/{key_id}/usage",
    response={200: ApiKeyUsageResponse, 404: ErrorResponse},
    auth=staff_auth,
    operation_id="getApiKeyUsage",
    summary="API key usage statistics",
)
def key_usage(request: HttpRequest, key_id: int) -> ApiKeyUsageResponse:
    try:
        usage = get_usage_stats(key_id)
    except NotFoundError as e:
        raise HttpError(404, str(e)) from None
    return ApiKeyUsageResponse(
        total_calls=usage.total_calls,
        successful_calls=usage.successful_calls,
        failed_calls=usage.failed_calls,
        last_called_at=usage.last_called_at,
    )
