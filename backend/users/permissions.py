from rest_framework import permissions
from .models import User


class IsManagerOrHigher(permissions.BasePermission):
    """
    Managers and above. Required for approving cash discrepancies,
    force-closing another operator's drawer and reading sales reports.
    """
    message = "Only managers can perform this action."

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return request.user.role in [
            User.Role.OWNER,
            User.Role.ADMIN,
            User.Role.MANAGER,
        ]
