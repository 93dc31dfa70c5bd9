"""
Admin configuration for organizations app.
"""

from django.contrib import admin
from django.db.models import Count, Q, QuerySet
from django.http import HttpRequest

from apps.organizations.models import Organization


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    """Admin for organizations."""

    list_display = ["name", "active_member_count", "created_at"]
    search_fields = ["name"]
    readonly_fields = ["created_at", "updated_at"]

    def get_queryset(self, request: HttpRequest) -> QuerySet[Organization]:
        return (
            super()
            .get_queryset(request)
            .annotate(_active_members=Count("members", filter=Q(members__is_active=True)))
        )

    def active_member_count(self, obj: Organization) -> int:
        """Number of active members."""
        return obj._active_members  # type: ignore[attr-defined]

    active_member_count.short_description = "Active members"  # type: ignore[attr-defined]
