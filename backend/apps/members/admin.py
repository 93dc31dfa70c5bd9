"""Admin configuration for members app."""

from django.contrib import admin

from apps.members.models import Member


@admin.register(Member)
class MemberAdmin(admin.ModelAdmin):
    """
    Read-only admin for Member.

    Emails are encrypted at rest; members change only through imports.
    """

    list_display = ["short_hash", "organization", "mm_cepi", "is_active", "updated_at"]
    list_filter = ["is_active", "mm_cepi", "organization"]
    search_fields = ["lookup_hash", "organization__name"]
    exclude = ["email_ciphertext"]
    ordering = ["organization", "lookup_hash"]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    @admin.display(description="Lookup hash")
    def short_hash(self, obj: Member) -> str:
        return f"{obj.lookup_hash[:12]}…"
