from rest_framework import viewsets, filters
from rest_framework.views import APIView
from django_filters.rest_framework import DjangoFilterBackend

from .mixins import TenantContextMixin, ArchivingViewSetMixin
from ..pagination import StandardPagination


class BaseViewSet(TenantContextMixin, ArchivingViewSetMixin, viewsets.ModelViewSet):
    """
    Base ViewSet for tenant-owned, archivable models.

    Features:
    - Tenant bound from the authenticated operator
    - Archiving support via ArchivingViewSetMixin
    - Standard pagination, filtering, search and ordering

    Usage:
        class IngredientViewSet(BaseViewSet):
            serializer_class = IngredientSerializer

            def get_queryset(self):
                return Ingredient.all_objects.filter(tenant=self.request.tenant)
    """

    pagination_class = StandardPagination

    filter_backends = [
        DjangoFilterBackend,
        filters.SearchFilter,
        filters.OrderingFilter,
    ]

    ordering = ['-id']


class ReadOnlyBaseViewSet(TenantContextMixin, viewsets.ReadOnlyModelViewSet):
    """
    Base ViewSet for read-only, non-archivable endpoints.
    """

    pagination_class = StandardPagination
    filter_backends = [
        DjangoFilterBackend,
        filters.OrderingFilter,
    ]
    ordering = ['-id']


class BaseAPIView(TenantContextMixin, APIView):
    """
    Base class for custom API views (calculators, reports, singletons).
    """
