"""
Recipe serializers.
"""
from rest_framework import serializers

from core_backend.base import TimestampedSerializer, user_display_name
from costing.models import Recipe, RecipeItem, PriceHistory, ItemType


class RecipeItemSerializer(serializers.ModelSerializer):
    """
    One recipe line. On input ``ingredient``/``sub_recipe`` are plain ids;
    existence and tenant ownership are checked by RecipeService.
    """
    ingredient = serializers.IntegerField(source='ingredient_id', required=False, allow_null=True)
    sub_recipe = serializers.IntegerField(source='sub_recipe_id', required=False, allow_null=True)
    name = serializers.CharField(source='referenced_name', read_only=True)

    class Meta:
        model = RecipeItem
        fields = [
            'id',
            'item_type',
            'ingredient',
            'sub_recipe',
            'name',
            'quantity_input',
            'unit_input',
            'quantity_base',
            'position',
        ]
        read_only_fields = ['id', 'quantity_base', 'position']

    def validate(self, data):
        item_type = data.get('item_type', ItemType.INGREDIENT)
        if item_type == ItemType.INGREDIENT and not data.get('ingredient_id'):
            raise serializers.ValidationError({'ingredient': "Ingredient lines need an ingredient."})
        if item_type == ItemType.RECIPE and not data.get('sub_recipe_id'):
            raise serializers.ValidationError({'sub_recipe': "Base recipe lines need a base recipe."})
        return data


class RecipeSerializer(TimestampedSerializer):
    """
    Recipe header, lines and cached costs. The five cost columns are
    read-only: they are written by RecipeService and the cascade.
    """
    items = RecipeItemSerializer(many=True, required=False)
    revision = serializers.IntegerField(required=False, min_value=1)

    class Meta:
        model = Recipe
        fields = [
            'id',
            'name',
            'is_base',
            'yield_quantity', 'yield_unit',
            'preparation_time_minutes', 'preparation_method',
            'items',
            'total_cost_material', 'total_cost_labor', 'total_cost_overhead',
            'total_cost_final', 'unit_cost',
            'selling_price',
            'revision',
            'is_active',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'is_active'] + list(Recipe.COST_FIELDS)


class RecipeListSerializer(serializers.ModelSerializer):

    class Meta:
        model = Recipe
        fields = ['id', 'name', 'is_base', 'yield_quantity', 'yield_unit', 'unit_cost', 'selling_price', 'revision']


def service_items(validated_items):
    """Validated RecipeItemSerializer rows -> RecipeService item rows."""
    return [
        {
            'item_type': row.get('item_type', ItemType.INGREDIENT),
            'ingredient': row.get('ingredient_id'),
            'sub_recipe': row.get('sub_recipe_id'),
            'quantity_input': row['quantity_input'],
            'unit_input': row.get('unit_input', ''),
        }
        for row in validated_items
    ]


class SellingPriceSerializer(serializers.Serializer):
    selling_price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True)


class PriceHistorySerializer(serializers.ModelSerializer):
    changed_by_name = serializers.SerializerMethodField()

    class Meta:
        model = PriceHistory
        fields = [
            'id',
            'old_unit_cost', 'new_unit_cost',
            'old_selling_price', 'new_selling_price',
            'reason',
            'changed_by', 'changed_by_name',
            'changed_at',
        ]
        read_only_fields = fields

    def get_changed_by_name(self, obj):
        return user_display_name(obj.changed_by)


class CostLineSerializer(serializers.Serializer):
    item_type = serializers.CharField()
    ref_id = serializers.IntegerField(allow_null=True)
    name = serializers.CharField()
    quantity_base = serializers.DecimalField(max_digits=14, decimal_places=4)
    unit_cost = serializers.DecimalField(max_digits=16, decimal_places=6)
    extended_cost = serializers.DecimalField(max_digits=12, decimal_places=4)
    is_packaging = serializers.BooleanField()
    orphaned = serializers.BooleanField()


class CostBreakdownSerializer(serializers.Serializer):
    """
    Used in GET /api/costing/recipes/:id/breakdown/
    """
    recipe_id = serializers.IntegerField()
    recipe_name = serializers.CharField()
    lines = CostLineSerializer(many=True)
    orphaned_count = serializers.IntegerField()
    packaging_cost = serializers.DecimalField(max_digits=12, decimal_places=4)
    prime_cost = serializers.DecimalField(max_digits=12, decimal_places=4)
    total_cost_material = serializers.DecimalField(max_digits=12, decimal_places=4)
    total_cost_labor = serializers.DecimalField(max_digits=12, decimal_places=4)
    total_cost_overhead = serializers.DecimalField(max_digits=12, decimal_places=4)
    total_cost_final = serializers.DecimalField(max_digits=12, decimal_places=4)
    unit_cost = serializers.DecimalField(max_digits=12, decimal_places=4)
