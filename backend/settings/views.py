from rest_framework.response import Response

from core_backend.base import BaseAPIView
from .permissions import SettingsReadOnlyOrManager
from .serializers import GlobalSettingsSerializer, OverheadSuggestionSerializer
from .services import SettingsService


class GlobalSettingsView(BaseAPIView):
    """
    GET/PUT/PATCH /api/settings/

    The tenant's single settings object with its roster and fixed costs.
    Saving rates does not recost existing recipes; they pick up the new
    rates on their next save or recalculation.
    """
    permission_classes = [SettingsReadOnlyOrManager]

    def get(self, request):
        instance = SettingsService.get_settings(request.tenant)
        return Response(GlobalSettingsSerializer(instance).data)

    def put(self, request):
        return self._save(request, partial=False)

    def patch(self, request):
        return self._save(request, partial=True)

    def _save(self, request, partial):
        instance = SettingsService.get_settings(request.tenant)
        serializer = GlobalSettingsSerializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        data = dict(serializer.validated_data)
        employees = data.pop('employees', None)
        fixed_costs = data.pop('fixed_costs', None)

        instance = SettingsService.save_settings(
            request.tenant,
            data,
            employees=[dict(row) for row in employees] if employees is not None else None,
            fixed_costs=[dict(row) for row in fixed_costs] if fixed_costs is not None else None,
        )
        return Response(GlobalSettingsSerializer(instance).data)


class OverheadSuggestionView(BaseAPIView):
    """
    GET /api/settings/overhead-suggestion/

    Fixed costs total / estimated monthly revenue, as a percentage.
    """
    permission_classes = [SettingsReadOnlyOrManager]

    def get(self, request):
        suggestion = SettingsService.overhead_suggestion(request.tenant)
        return Response(OverheadSuggestionSerializer(suggestion).data)
