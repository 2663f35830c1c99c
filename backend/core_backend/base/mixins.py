from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import SAFE_METHODS
from rest_framework.response import Response

from tenant.managers import set_current_tenant
from .permissions import CanUnarchiveRecords


class TenantContextMixin:
    """
    Binds the operator's tenant once DRF has authenticated the request.

    TenantMiddleware runs before DRF authentication, so for basic or token
    auth it cannot see the user yet. ``initial()`` runs after
    authentication and before the handler, which makes it the first point
    where ``request.user.tenant`` is reliable. The middleware clears the
    thread-local when the response is on its way out.
    """

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)

        tenant = getattr(request.user, 'tenant', None) if request.user.is_authenticated else None
        if tenant is None:
            tenant = getattr(request, 'tenant', None)
        if tenant is None:
            raise PermissionDenied("Your account is not linked to a business.")

        request.tenant = tenant
        set_current_tenant(tenant)


class ArchivingViewSetMixin:
    """
    A ViewSet mixin for models using SoftDeleteMixin.

    ``get_queryset`` of the viewset must return archived rows as well (query
    through ``all_objects``). The narrowing happens in ``filter_queryset`` so
    it applies to list and detail routes even when a subclass overrides
    ``get_queryset``:

    - default: active records only
    - ?include_archived=true: active and archived
    - ?include_archived=only: archived only

    Writes ignore ``include_archived``; an archived record must be
    unarchived before it can be changed.

    Archiving itself goes through ``destroy`` so the app's delete guards
    run; ``unarchive`` restores a record.
    """

    def filter_queryset(self, queryset):
        queryset = super().filter_queryset(queryset)

        if getattr(self, 'action', None) == 'unarchive':
            return queryset

        # Writes only ever reach active records
        if self.request.method not in SAFE_METHODS:
            return queryset.filter(is_active=True)

        include_archived = self.request.query_params.get('include_archived', '').lower()
        if include_archived in ['true', '1', 'yes']:
            return queryset
        if include_archived == 'only':
            return queryset.filter(is_active=False)
        return queryset.filter(is_active=True)

    @action(detail=True, methods=['post'], permission_classes=[CanUnarchiveRecords])
    def unarchive(self, request, pk=None):
        obj = self.get_object()

        if obj.is_active:
            return Response(
                {'error': 'Record is not archived.', 'code': 'NOT_ARCHIVED'},
                status=status.HTTP_400_BAD_REQUEST
            )

        obj.unarchive()

        return Response(
            {'message': f'{obj._meta.verbose_name} unarchived successfully.'},
            status=status.HTTP_200_OK
        )
