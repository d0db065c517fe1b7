"""
Permissions for availability management.
"""

from rest_framework import permissions

from .availability import can_manage
from .exceptions import PermissionDenied


class IsResourceOwnerOrAdmin(permissions.BasePermission):
    """
    Anyone may read a resource's availability; only its owner or an admin
    may change it.
    """

    def has_object_permission(self, request, view, obj):
        if request.method in permissions.SAFE_METHODS:
            return True
        if can_manage(request.user, obj):
            return True
        raise PermissionDenied(
            f"You may not change the availability of {obj.name}",
            details={'resource_id': obj.pk},
        )
