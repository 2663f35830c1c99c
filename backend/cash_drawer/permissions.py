from rest_framework import permissions


class IsSessionOperatorOrManager(permissions.BasePermission):
    """
    Operators act on their own sessions; managers and above on any session
    of the tenant.
    """

    def has_object_permission(self, request, view, obj):
        user = request.user
        return obj.operator_id == user.pk or getattr(user, 'is_manager_or_higher', False)
