from rest_framework.response import Response

from core_backend.base import BaseAPIView
from users.permissions import IsManagerOrHigher
from .serializers import ReportParameterSerializer, SalesReportSerializer
from .services import SalesReportService


class SalesReportView(BaseAPIView):
    """
    GET /api/reports/sales/?start_date=2025-11-01&end_date=2025-11-30
    """
    permission_classes = [IsManagerOrHigher]

    def get(self, request):
        params = ReportParameterSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)

        report = SalesReportService.generate(
            request.tenant,
            params.validated_data["start_date"],
            params.validated_data["end_date"],
        )
        return Response(SalesReportSerializer(report).data)
