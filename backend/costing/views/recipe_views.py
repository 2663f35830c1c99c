"""
Recipe views - CRUD through RecipeService plus recost, pricing and history.
"""
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core_backend.base import BaseViewSet
from costing.models import Recipe
from costing.permissions import CanViewCosting, CanManageCosting
from costing.serializers import (
    RecipeSerializer,
    RecipeListSerializer,
    SellingPriceSerializer,
    PriceHistorySerializer,
    CostBreakdownSerializer,
    service_items,
)
from costing.services import RecipeService


def orphaned_payload(rollup):
    return [
        {
            'item_type': line.item_type,
            'ref_id': line.ref_id,
            'name': line.label,
            'quantity_base': line.quantity_base,
        }
        for line in rollup.orphaned_items
    ]


class RecipeViewSet(BaseViewSet):
    """
    ViewSet for recipes and base recipes.

    create / update: Lines are replaced as a whole; quantities are resolved
        to base units and costs rolled up at save time. The response carries
        conversion ``warnings``, ``orphaned_items`` and, for base recipes
        whose unit cost moved, the ``cascade`` report.
    destroy: Archives the recipe unless another active recipe uses it (409).
    recalculate: Recost from current prices and rates.
    price: Manual selling price edit, recorded in price history.
    history: Price history, newest first.
    breakdown: Per-line cost detail with orphaned lines flagged.
    """
    serializer_class = RecipeSerializer
    permission_classes = [IsAuthenticated, CanViewCosting]
    filterset_fields = ['is_base']
    search_fields = ['name']
    ordering_fields = ['name', 'unit_cost', 'selling_price', 'updated_at']
    ordering = ['name']

    def get_queryset(self):
        return Recipe.all_objects.filter(tenant=self.request.tenant).prefetch_related(
            'items__ingredient', 'items__sub_recipe'
        )

    def get_serializer_class(self):
        if self.action == 'list':
            return RecipeListSerializer
        return RecipeSerializer

    def get_permissions(self):
        if self.action in ['recalculate', 'price']:
            return [IsAuthenticated(), CanManageCosting()]
        return super().get_permissions()

    def _save(self, request, instance=None, partial=False):
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        data = dict(serializer.validated_data)
        expected_revision = data.pop('revision', None)
        if 'items' in data:
            data['items'] = service_items(data['items'])

        result = RecipeService.save_recipe(
            request.tenant,
            data,
            instance=instance,
            expected_revision=expected_revision,
            user=request.user,
        )

        recipe = self.get_queryset().get(pk=result.recipe.pk)
        payload = dict(RecipeSerializer(recipe, context=self.get_serializer_context()).data)
        payload['warnings'] = result.warnings
        payload['orphaned_items'] = orphaned_payload(result.rollup)
        payload['cascade'] = result.cascade.as_dict() if result.cascade else None
        return Response(payload, status=status.HTTP_201_CREATED if result.created else status.HTTP_200_OK)

    def create(self, request, *args, **kwargs):
        return self._save(request)

    def update(self, request, *args, **kwargs):
        return self._save(request, self.get_object(), partial=kwargs.pop('partial', False))

    def destroy(self, request, *args, **kwargs):
        RecipeService.delete_recipe(self.get_object(), user=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post'])
    def recalculate(self, request, pk=None):
        recipe = self.get_object()
        rollup = RecipeService.recalculate(recipe, user=request.user)

        recipe = self.get_queryset().get(pk=recipe.pk)
        payload = dict(RecipeSerializer(recipe, context=self.get_serializer_context()).data)
        payload['orphaned_items'] = orphaned_payload(rollup)
        return Response(payload)

    @action(detail=True, methods=['post'])
    def price(self, request, pk=None):
        recipe = self.get_object()
        serializer = SellingPriceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        recipe, history = RecipeService.update_selling_price(
            recipe,
            serializer.validated_data['selling_price'],
            reason=serializer.validated_data.get('reason', ''),
            user=request.user,
        )
        return Response({
            'id': recipe.pk,
            'selling_price': str(recipe.selling_price),
            'revision': recipe.revision,
            'history': PriceHistorySerializer(history).data,
        })

    @action(detail=True, methods=['get'])
    def history(self, request, pk=None):
        queryset = RecipeService.history(self.get_object())
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(PriceHistorySerializer(page, many=True).data)
        return Response(PriceHistorySerializer(queryset, many=True).data)

    @action(detail=True, methods=['get'])
    def breakdown(self, request, pk=None):
        data = RecipeService.cost_breakdown(self.get_object())
        return Response(CostBreakdownSerializer(data).data)
