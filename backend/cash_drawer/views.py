"""
Cash drawer views.
"""
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core_backend.base import ReadOnlyBaseViewSet
from .models import CashSession
from .permissions import IsSessionOperatorOrManager
from .serializers import (
    CashSessionSerializer,
    CloseSessionSerializer,
    ForceCloseSerializer,
    OpenSessionSerializer,
    SessionSummarySerializer,
)
from .services import CashSessionService


class CashSessionViewSet(ReadOnlyBaseViewSet):
    """
    Cash sessions of the tenant.

    list: Session history; cashiers see their own sessions only.
    open: Open a session for the caller, or return the one already open.
    current: The caller's open session (404 when there is none).
    summary: Sales of the session bucketed by payment method.
    close: Close with a cash count; a mismatch is stored, never rejected.
    verify / force_close: Manager-only; a cashier gets 403.
    """
    serializer_class = CashSessionSerializer
    permission_classes = [IsAuthenticated, IsSessionOperatorOrManager]
    filterset_fields = ['status', 'operator']
    ordering_fields = ['opened_at', 'closed_at']
    ordering = ['-opened_at']

    def get_queryset(self):
        user = self.request.user
        operator = None if user.is_manager_or_higher else user
        return CashSessionService.session_history(self.request.tenant, operator=operator)

    @action(detail=False, methods=['post'])
    def open(self, request):
        serializer = OpenSessionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        session, created = CashSessionService.open_session(
            request.tenant,
            request.user,
            serializer.validated_data['initial_balance'],
        )
        return Response(
            CashSessionSerializer(session).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
        )

    @action(detail=False, methods=['get'])
    def current(self, request):
        session = CashSessionService.current_session(request.user)
        if session is None:
            return Response(
                {'error': 'No open cash session.', 'code': 'NO_OPEN_SESSION'},
                status=status.HTTP_404_NOT_FOUND
            )
        return Response(CashSessionSerializer(session).data)

    @action(detail=True, methods=['get'])
    def summary(self, request, pk=None):
        session = self.get_object()
        summary = CashSessionService.session_summary(session)
        return Response(SessionSummarySerializer(summary.as_dict()).data)

    @action(detail=True, methods=['post'])
    def close(self, request, pk=None):
        session = self.get_object()
        serializer = CloseSessionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        session = CashSessionService.close_session(
            session,
            serializer.validated_data['counted_cash'],
            notes=serializer.validated_data['notes'],
            user=request.user,
        )
        return Response(CashSessionSerializer(session).data)

    @action(detail=True, methods=['post'])
    def verify(self, request, pk=None):
        session = CashSessionService.verify_session(self.get_object(), request.user)
        return Response(CashSessionSerializer(session).data)

    @action(detail=True, methods=['post'], url_path='force-close')
    def force_close(self, request, pk=None):
        session = self.get_object()
        serializer = ForceCloseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        session = CashSessionService.force_close(session, request.user, notes=serializer.validated_data['notes'])
        return Response(CashSessionSerializer(session).data)
