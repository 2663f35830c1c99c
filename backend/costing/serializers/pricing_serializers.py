"""
Pricing simulator serializers.
"""
from rest_framework import serializers


class PricingRequestSerializer(serializers.Serializer):
    """
    Input of POST /api/costing/pricing/simulate/

    Exactly one of ``margin`` (margin-driven) or ``price`` (price-driven).
    Cost comes from ``recipe`` or is given directly as ``cost``. Tax and fee
    default to the business settings.
    """
    recipe = serializers.IntegerField(required=False)
    cost = serializers.DecimalField(max_digits=12, decimal_places=4, required=False, min_value=0)
    margin = serializers.DecimalField(max_digits=7, decimal_places=2, required=False)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    tax_rate = serializers.DecimalField(max_digits=5, decimal_places=2, required=False, min_value=0)
    card_fee_rate = serializers.DecimalField(max_digits=5, decimal_places=2, required=False, min_value=0)

    def validate(self, data):
        if ('margin' in data) == ('price' in data):
            raise serializers.ValidationError("Provide either a margin or a price.")
        if ('recipe' in data) == ('cost' in data):
            raise serializers.ValidationError("Provide either a recipe or a cost.")
        return data


class PriceBreakdownSerializer(serializers.Serializer):
    price = serializers.DecimalField(max_digits=12, decimal_places=2)
    cost = serializers.DecimalField(max_digits=12, decimal_places=4)
    tax_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    fee_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    profit = serializers.DecimalField(max_digits=12, decimal_places=4)


class UnitCostSplitSerializer(serializers.Serializer):
    material = serializers.DecimalField(max_digits=12, decimal_places=4)
    labor = serializers.DecimalField(max_digits=12, decimal_places=4)
    overhead = serializers.DecimalField(max_digits=12, decimal_places=4)
    total = serializers.DecimalField(max_digits=12, decimal_places=4)


class PriceSimulationSerializer(serializers.Serializer):
    cost = serializers.DecimalField(max_digits=12, decimal_places=4)
    price = serializers.DecimalField(max_digits=12, decimal_places=2)
    margin = serializers.DecimalField(max_digits=None, decimal_places=2)
    requested_margin = serializers.DecimalField(max_digits=None, decimal_places=2, allow_null=True)
    margin_clamped = serializers.BooleanField()
    safe_margin_limit = serializers.DecimalField(max_digits=7, decimal_places=2)
    breakdown = PriceBreakdownSerializer()
