"""
Permissions for archiving functionality.
"""

from rest_framework.permissions import BasePermission
from users.permissions import IsManagerOrHigher


class CanUnarchiveRecords(BasePermission):
    """
    Permission to unarchive records.
    Only managers and above can restore archived records.
    """

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False

        return IsManagerOrHigher().has_permission(request, view)

    def has_object_permission(self, request, view, obj):
        return self.has_permission(request, view)
