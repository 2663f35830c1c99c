"""
Unit calculator serializers.
"""
from rest_framework import serializers

from costing.models import PackageUnit


class BaseCostRequestSerializer(serializers.Serializer):
    """Input of POST /api/costing/units/base-cost/"""
    package_price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    package_quantity = serializers.DecimalField(max_digits=12, decimal_places=4, min_value=0)
    package_unit = serializers.CharField(max_length=20, default=PackageUnit.KG)


class BaseCostSerializer(serializers.Serializer):
    cost_per_base_unit = serializers.DecimalField(max_digits=16, decimal_places=6)
    base_unit = serializers.CharField()
    total_base_units = serializers.DecimalField(max_digits=16, decimal_places=4)
