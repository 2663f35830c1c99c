"""
Costing serializers package.
"""

from .ingredient_serializers import (
    IngredientConversionSerializer,
    IngredientSerializer,
    LowStockIngredientSerializer,
)

from .recipe_serializers import (
    RecipeItemSerializer,
    RecipeSerializer,
    RecipeListSerializer,
    SellingPriceSerializer,
    PriceHistorySerializer,
    CostBreakdownSerializer,
    service_items,
)

from .pricing_serializers import (
    PricingRequestSerializer,
    PriceSimulationSerializer,
    UnitCostSplitSerializer,
)

from .unit_serializers import (
    BaseCostRequestSerializer,
    BaseCostSerializer,
)

__all__ = [
    # Ingredients
    'IngredientConversionSerializer',
    'IngredientSerializer',
    'LowStockIngredientSerializer',
    # Recipes
    'RecipeItemSerializer',
    'RecipeSerializer',
    'RecipeListSerializer',
    'SellingPriceSerializer',
    'PriceHistorySerializer',
    'CostBreakdownSerializer',
    'service_items',
    # Pricing
    'PricingRequestSerializer',
    'PriceSimulationSerializer',
    'UnitCostSplitSerializer',
    # Units
    'BaseCostRequestSerializer',
    'BaseCostSerializer',
]
