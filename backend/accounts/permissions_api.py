from rest_framework import permissions

from .utils import is_admin, can_record_payments


class IsRegistrarAdmin(permissions.BasePermission):
    """Registrar administrators (ADMIN role) and superusers."""

    message = 'Administrator role required'

    def has_permission(self, request, view):
        user = getattr(request, 'user', None)
        if not user or not user.is_authenticated:
            return False
        return is_admin(user)


class IsAdminOrReadOnly(permissions.BasePermission):
    """Allow safe methods to any authenticated user; writes need the ADMIN role."""

    message = 'Administrator role required'

    def has_permission(self, request, view):
        user = getattr(request, 'user', None)
        if not user or not user.is_authenticated:
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return is_admin(user)


class CanRecordPayments(permissions.BasePermission):
    message = 'Only cashiers or administrators may record payments'

    def has_permission(self, request, view):
        user = getattr(request, 'user', None)
        if not user or not user.is_authenticated:
            return False
        return can_record_payments(user)
