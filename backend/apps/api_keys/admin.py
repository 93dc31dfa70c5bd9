"""Admin configuration for API keys app."""

from django.contrib import admin

from apps.api_keys.models import ApiKey


@admin.register(ApiKey)
class ApiKeyAdmin(admin.ModelAdmin):
    """
    Admin for ApiKey model.

    Keys are created through the staff API or the create_api_key command,
    which are the only places the secret is shown.
    """

    list_display = ["name", "is_active", "is_expired", "expires_at", "last_used_at", "created_at"]
    list_filter = ["is_active"]
    search_fields = ["name"]
    readonly_fields = ["key_hash", "last_used_at", "created_by", "created_at", "updated_at"]
    ordering = ["-created_at"]
    actions = ["activate_keys", "deactivate_keys"]

    def has_add_permission(self, request):
        return False

    @admin.display(boolean=True, description="Expired")
    def is_expired(self, obj: ApiKey) -> bool:
        return obj.is_expired

    @admin.action(description="Activate selected keys")
    def activate_keys(self, request, queryset):
        queryset.update(is_active=True)

    @admin.action(description="Deactivate selected keys")
    def deactivate_keys(self, request, queryset):
        queryset.update(is_active=False)
