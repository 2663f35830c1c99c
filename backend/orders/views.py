"""
Sales views.
"""
from rest_framework import status
from rest_framework.response import Response

from cash_drawer.exceptions import SettlementError
from cash_drawer.models import CashSession
from cash_drawer.services import CashSessionService
from core_backend.base import ReadOnlyBaseViewSet
from .filters import OrderFilter
from .models import Order
from .serializers import OrderSerializer, SaleSerializer
from .services import SaleService


class SaleViewSet(ReadOnlyBaseViewSet):
    """
    list / retrieve: Completed sales of the tenant, newest first.
    create: Record a sale in the caller's open session (or ``session``).
    """
    serializer_class = OrderSerializer
    filterset_class = OrderFilter
    ordering_fields = ['created_at', 'total_amount']
    ordering = ['-created_at']

    def get_queryset(self):
        return (
            Order.all_objects
            .filter(tenant=self.request.tenant)
            .select_related('cashier', 'customer')
            .prefetch_related('items')
        )

    def create(self, request, *args, **kwargs):
        serializer = SaleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = dict(serializer.validated_data)
        items = [dict(row) for row in data.pop('items')]
        session_id = data.pop('session', None)

        if session_id is None:
            session = CashSessionService.current_session(request.user)
            if session is None:
                raise SettlementError("Open a cash session before recording sales.")
        else:
            session = CashSession.all_objects.filter(tenant=request.tenant, pk=session_id).first()
            if session is None:
                return Response(
                    {'error': 'Cash session not found.', 'code': 'NOT_FOUND'},
                    status=status.HTTP_404_NOT_FOUND
                )

        order = SaleService.process_sale(session, data, items, request.user)
        order = self.get_queryset().get(pk=order.pk)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)
