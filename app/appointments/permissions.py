# appointments/permissions.py
from rest_framework import permissions
from django.utils.translation import gettext_lazy as _


class IsPlatformAdmin(permissions.BasePermission):
    """
    Admin users (user_type Admin or staff accounts)
    """
    message = _("Only administrators can perform this action.")

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_platform_admin)


class IsClient(permissions.BasePermission):
    """
    Client users with a client profile
    """
    message = _("Only clients can perform this action.")

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        return user.is_client and hasattr(user, 'client_profile')


class IsClientOrPlatformAdmin(permissions.BasePermission):
    message = _("You must be a client or an administrator.")

    def has_permission(self, request, view):
        return (
            IsPlatformAdmin().has_permission(request, view)
            or IsClient().has_permission(request, view)
        )
