"""
Core security - authentication classes for the staff API.
"""

from django.http import HttpRequest
from ninja.security import SessionAuth


class StaffSessionAuth(SessionAuth):
    """
    Django session authentication restricted to staff users.

    Staff sign in through the Django admin; the resulting session cookie
    authorizes the management endpoints (imports, exports, API keys, audit
    log). Non-staff sessions are treated as unauthenticated (401).
    """

    def authenticate(self, request: HttpRequest, key: str | None):  # type: ignore[override]
        user = super().authenticate(request, key)
        if user is not None and user.is_staff:
            return user
        return None


staff_auth = StaffSessionAuth()
