from rest_framework import permissions

from .services.scope import requester_for


class IsSalesAdmin(permissions.BasePermission):
    """Allow access to superusers and users whose sales profile is ``admin``."""

    message = "Admin access required."

    def has_permission(self, request, view):
        return requester_for(request.user).is_admin
