"""
Finance ledger views.
"""
from rest_framework import filters, status
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from core_backend.base import BaseAPIView, ReadOnlyBaseViewSet
from users.permissions import IsManagerOrHigher
from .filters import LedgerEntryFilter
from .models import LedgerEntry
from .serializers import (
    LedgerEntrySerializer,
    LedgerSummaryParameterSerializer,
    LedgerSummarySerializer,
)
from .services import LedgerService


class LedgerEntryViewSet(ReadOnlyBaseViewSet):
    """
    Manager-only cash book of the tenant.

    list / retrieve: Entries, newest date first (?kind=, ?category=,
        ?date__gte=, ?date__lte=, ?has_order=, ?search=).
    create: Manual expense or revenue; ``kind`` defaults to EXPENSE.
    destroy: Manual entries only; sale entries answer 409.
    """
    serializer_class = LedgerEntrySerializer
    permission_classes = [IsManagerOrHigher]
    filterset_class = LedgerEntryFilter
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['description', 'category']
    ordering_fields = ['date', 'amount', 'created_at']
    ordering = ['-date', '-created_at']

    def get_queryset(self):
        return LedgerEntry.all_objects.filter(tenant=self.request.tenant).select_related('created_by')

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        entry = LedgerService.add_entry(request.tenant, dict(serializer.validated_data), user=request.user)
        return Response(LedgerEntrySerializer(entry).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, *args, **kwargs):
        LedgerService.delete_entry(self.get_object())
        return Response(status=status.HTTP_204_NO_CONTENT)


class LedgerSummaryView(BaseAPIView):
    """
    GET /api/finance/summary/?start_date=2025-11-01&end_date=2025-11-30
    """
    permission_classes = [IsManagerOrHigher]

    def get(self, request):
        params = LedgerSummaryParameterSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)

        summary = LedgerService.summary(
            request.tenant,
            params.validated_data["start_date"],
            params.validated_data["end_date"],
        )
        return Response(LedgerSummarySerializer(summary).data)
