"""
Django Ninja API configuration.
"""

from django.http import HttpRequest
from ninja import NinjaAPI

from apps.api_keys.api import router as api_keys_router
from apps.audit.api import router as audit_router
from apps.imports.api import router as imports_router
from apps.members.api import router as members_router

api = NinjaAPI(
    title="Member Check API",
    version="1.0.0",
    description="Membership verification against encrypted organization member lists.",
    openapi_extra={
        "info": {
            "contact": {"name": "API Support"},
        },
        "tags": [
            {
                "name": "members",
                "description": "Public member lookup and staff member list access",
            },
            {
                "name": "imports",
                "description": "Member list uploads (staff only)",
            },
            {
                "name": "api-keys",
                "description": "API key management (staff only)",
            },
            {
                "name": "audit",
                "description": "Activity log (staff only)",
            },
            {
                "name": "health",
                "description": "Service health and readiness checks",
            },
        ],
        "components": {
            "securitySchemes": {
                "bearerAuth": {
                    "type": "http",
                    "scheme": "bearer",
                    "description": (
                        "API key for /check-member. "
                        "Include as: Authorization: Bearer <api_key>"
                    ),
                }
            }
        },
    },
)

# Register routers
api.add_router("/", members_router)
api.add_router("/organizations", imports_router)
api.add_router("/api-keys", api_keys_router)
api.add_router("/audit", audit_router)


@api.get("/health", tags=["health"], operation_id="healthCheck", summary="Health check")
def health_check(request: HttpRequest) -> dict:
    """Health check endpoint for load balancer."""
    return {"status": "ok"}
