from rest_framework import permissions


class IsAdminRole(permissions.BasePermission):
    """
    Allow only back-office administrators.
    """
    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and getattr(request.user, 'is_admin', False))


class IsAdminOrReadOnly(permissions.BasePermission):
    """Allow public reads; writes are reserved for administrators."""

    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return True
        return bool(request.user and request.user.is_authenticated and getattr(request.user, 'is_admin', False))


def actor_role(user) -> str:
    """Role key used by the order transition table."""
    return 'admin' if getattr(user, 'is_admin', False) else 'customer'
