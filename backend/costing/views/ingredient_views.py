"""
Ingredient views.
"""
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core_backend.base import BaseViewSet
from costing.models import Ingredient
from costing.permissions import CanViewCosting
from costing.serializers import IngredientSerializer, LowStockIngredientSerializer
from costing.services import IngredientService


class IngredientViewSet(BaseViewSet):
    """
    ViewSet for ingredients, packaging and resale products.

    list: Active ingredients of the tenant (?include_archived=true|only).
    create / update: Validated by IngredientService; a price change recosts
        every recipe using the ingredient and the cascade report is returned.
    destroy: Archives the ingredient unless an active recipe uses it (409).
    low_stock: Ingredients below their minimum stock.
    """
    serializer_class = IngredientSerializer
    permission_classes = [IsAuthenticated, CanViewCosting]
    filterset_fields = ['category']
    search_fields = ['name']
    ordering_fields = ['name', 'cost_per_base_unit', 'current_stock', 'updated_at']
    ordering = ['name']

    def get_queryset(self):
        return Ingredient.all_objects.filter(tenant=self.request.tenant).prefetch_related('conversions')

    def _save(self, request, instance=None, partial=False):
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        data = dict(serializer.validated_data)
        expected_revision = data.pop('revision', None)
        if 'conversions' in data:
            data['conversions'] = [dict(row) for row in data['conversions']]

        result = IngredientService.save_ingredient(
            request.tenant,
            data,
            instance=instance,
            expected_revision=expected_revision,
            user=request.user,
        )

        ingredient = self.get_queryset().get(pk=result.ingredient.pk)
        payload = dict(self.get_serializer(ingredient).data)
        payload['cascade'] = result.cascade.as_dict() if result.cascade else None
        return Response(payload, status=status.HTTP_201_CREATED if result.created else status.HTTP_200_OK)

    def create(self, request, *args, **kwargs):
        return self._save(request)

    def update(self, request, *args, **kwargs):
        return self._save(request, self.get_object(), partial=kwargs.pop('partial', False))

    def destroy(self, request, *args, **kwargs):
        IngredientService.delete_ingredient(self.get_object(), user=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=['get'], url_path='low-stock')
    def low_stock(self, request):
        queryset = IngredientService.low_stock(request.tenant)
        serializer = LowStockIngredientSerializer(queryset, many=True)
        return Response(serializer.data)
