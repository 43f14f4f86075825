"""
Role based permissions.

Every check requires an authenticated user; the role column decides the rest.
"""

from rest_framework import permissions


class IsAdminUser(permissions.BasePermission):
    """
    Permission check for admin role.
    """
    message = "Admin access required."

    def has_permission(self, request, view):
        return (
            request.user and
            request.user.is_authenticated and
            request.user.is_admin_user()
        )


class IsTenantUser(permissions.BasePermission):
    """
    Permission check for tenant role.
    """
    message = "Tenant access required."

    def has_permission(self, request, view):
        return (
            request.user and
            request.user.is_authenticated and
            request.user.is_tenant_user()
        )
