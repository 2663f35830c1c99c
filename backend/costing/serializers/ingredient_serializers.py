"""
Ingredient serializers.
"""
from rest_framework import serializers

from core_backend.base import TimestampedSerializer
from costing.models import Ingredient, IngredientConversion


class IngredientConversionSerializer(serializers.ModelSerializer):

    class Meta:
        model = IngredientConversion
        fields = ['id', 'name', 'value']
        read_only_fields = ['id']

    def validate_value(self, value):
        if value <= 0:
            raise serializers.ValidationError("Must be greater than zero.")
        return value


class IngredientSerializer(TimestampedSerializer):
    """
    Ingredient with its household measures.

    ``base_unit`` and ``cost_per_base_unit`` are derived from the package
    fields on save. Updates must send back the ``revision`` they were read
    at; a stale revision is rejected with 409.
    """
    conversions = IngredientConversionSerializer(many=True, required=False)
    category_display = serializers.CharField(source='get_category_display', read_only=True)
    is_low_stock = serializers.BooleanField(read_only=True)
    revision = serializers.IntegerField(required=False, min_value=1)

    class Meta:
        model = Ingredient
        fields = [
            'id',
            'name',
            'category', 'category_display',
            'package_price', 'package_quantity', 'package_unit',
            'base_unit', 'cost_per_base_unit',
            'current_stock', 'min_stock', 'is_low_stock',
            'selling_price',
            'conversions',
            'revision',
            'is_active',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'base_unit', 'cost_per_base_unit', 'is_active']

    def validate_package_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("Package quantity must be greater than zero.")
        return value

    def validate_package_price(self, value):
        if value < 0:
            raise serializers.ValidationError("Package price cannot be negative.")
        return value

    def validate_selling_price(self, value):
        if value is not None and value < 0:
            raise serializers.ValidationError("Selling price cannot be negative.")
        return value


class LowStockIngredientSerializer(serializers.ModelSerializer):

    class Meta:
        model = Ingredient
        fields = ['id', 'name', 'category', 'base_unit', 'current_stock', 'min_stock']
