# service_requests/permissions.py
import hmac

from django.conf import settings
from rest_framework.permissions import BasePermission

INTERNAL_TOKEN_HEADER = "X-Internal-Token"


class HasInternalToken(BasePermission):
    """
    Allows access to schedulers and internal callers presenting
    INTERNAL_API_TOKEN in the X-Internal-Token header, or to staff users.
    """
    message = "A valid internal token is required."

    def has_permission(self, request, view):
        user = getattr(request, "user", None)
        if user is not None and user.is_authenticated and user.is_staff:
            return True

        expected = settings.INTERNAL_API_TOKEN
        if not expected:
            return False
        presented = request.headers.get(INTERNAL_TOKEN_HEADER, "")
        return hmac.compare_digest(presented.encode(), expected.encode())
