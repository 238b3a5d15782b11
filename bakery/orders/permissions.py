"""
Custom permissions for the bakery backend.
"""

from rest_framework.permissions import BasePermission


class IsBackofficeUser(BasePermission):
    """
    Permission that allows access to any authenticated backoffice user.

    Used for order intake, lookups and read-only production views.
    """

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated)


class IsProductionStaff(BasePermission):
    """
    Permission that allows access only to production staff users.

    Checks if user is staff or belongs to the 'production' group.
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        # Check if user is staff
        if user.is_staff:
            return True

        return user.groups.filter(name='production').exists()
