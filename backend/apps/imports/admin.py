"""Admin configuration for imports app."""

from django.contrib import admin

from apps.imports.models import ImportLog


@admin.register(ImportLog)
class ImportLogAdmin(admin.ModelAdmin):
    """Read-only admin for ImportLog."""

    list_display = [
        "filename",
        "organization",
        "status",
        "rows_imported",
        "rows_added",
        "rows_updated",
        "rows_deleted",
        "created_at",
    ]
    list_filter = ["status"]
    search_fields = ["filename", "organization__name"]
    ordering = ["-created_at"]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
