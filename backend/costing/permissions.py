"""
Permissions for the costing system.

Costs and margins are sensitive business information. Cashiers may look
up recipes and prices but only managers and above change them.
"""
from rest_framework import permissions

from users.models import User


class CanManageCosting(permissions.BasePermission):
    """
    Allows access to owners, admins and managers.
    """
    message = "You do not have permission to change costing data."

    ALLOWED_ROLES = [
        User.Role.OWNER,
        User.Role.ADMIN,
        User.Role.MANAGER,
    ]

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False

        return request.user.role in self.ALLOWED_ROLES


class CanViewCosting(CanManageCosting):
    """
    Read access for every operator, writes for managers and above.
    """
    message = "You do not have permission to view costing data."

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False

        if request.method in permissions.SAFE_METHODS:
            return True

        return request.user.role in self.ALLOWED_ROLES
