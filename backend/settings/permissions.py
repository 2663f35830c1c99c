from rest_framework import permissions
from users.models import User


class SettingsReadOnlyOrManager(permissions.BasePermission):
    """
    Custom permission to allow:
    - Read access for every authenticated operator (the POS needs the fee
      rates and the pricing simulator needs the tax rate)
    - Write access only for owners, admins and managers
    """

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False

        if request.method in permissions.SAFE_METHODS:
            return True

        return request.user.role in [
            User.Role.OWNER,
            User.Role.ADMIN,
            User.Role.MANAGER,
        ] or request.user.is_superuser
