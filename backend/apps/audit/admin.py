"""Admin configuration for audit app."""

from django.contrib import admin

from apps.audit.models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    """Read-only admin for AuditLog."""

    list_display = ["created_at", "action", "actor_type", "actor_name", "api_key_id", "ip_address"]
    list_filter = ["action", "actor_type"]
    search_fields = ["actor_name", "actor_id", "organization_id"]
    ordering = ["-created_at"]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
