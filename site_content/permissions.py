# site_content/permissions.py
from django.conf import settings
from rest_framework.permissions import SAFE_METHODS, BasePermission


class AdminPasscodePermission(BasePermission):
    """
    Reads are public. Writes need the shared admin passcode in the
    X-Admin-Passcode header; an empty ADMIN_PASSCODE locks writes entirely.
    """
    message = "Admin passcode required"

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        passcode = getattr(settings, "ADMIN_PASSCODE", "")
        return bool(passcode) and request.headers.get("X-Admin-Passcode") == passcode
