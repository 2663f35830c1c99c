"""
Stateless calculators: pricing simulator and package base cost.
"""
from django.shortcuts import get_object_or_404
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core_backend.base import BaseAPIView
from costing.models import Recipe
from costing.serializers import (
    PricingRequestSerializer,
    PriceSimulationSerializer,
    UnitCostSplitSerializer,
    BaseCostRequestSerializer,
    BaseCostSerializer,
)
from costing.services import ConversionService, PricingSimulator


class PricingSimulateView(BaseAPIView):
    """
    POST /api/costing/pricing/simulate/

    Margin-driven ({"margin": 30}) or price-driven ({"price": "12.90"})
    simulation for a recipe's unit cost or an explicit cost. Nothing is
    stored; use recipes/:id/price/ to apply a price.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = PricingRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        recipe = None
        if 'recipe' in data:
            recipe = get_object_or_404(
                Recipe.all_objects, pk=data['recipe'], tenant=request.tenant, is_active=True
            )
            cost = recipe.unit_cost
        else:
            cost = data['cost']

        simulator = PricingSimulator.for_tenant(
            request.tenant,
            tax_rate=data.get('tax_rate'),
            card_fee_rate=data.get('card_fee_rate'),
        )

        if 'margin' in data:
            simulation = simulator.price_for_margin(cost, data['margin'])
        else:
            simulation = simulator.evaluate_price(cost, data['price'])

        payload = dict(PriceSimulationSerializer(simulation).data)
        payload['tax_rate'] = str(simulator.tax_rate)
        payload['card_fee_rate'] = str(simulator.card_fee_rate)
        if recipe is not None:
            payload['recipe'] = recipe.pk
            payload['unit_split'] = UnitCostSplitSerializer(PricingSimulator.unit_cost_split(recipe)).data
        return Response(payload)


class BaseCostView(BaseAPIView):
    """
    POST /api/costing/units/base-cost/

    Cost per base unit of a purchase package, e.g. R$20.00 for 1 kg ->
    0.02 per g. Unknown units answer 400 with code UNKNOWN_UNIT.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = BaseCostRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        base_cost = ConversionService.base_cost(
            data['package_price'], data['package_quantity'], data['package_unit']
        )
        return Response(BaseCostSerializer(base_cost).data)
