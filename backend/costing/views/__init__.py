"""
Costing views package.
"""
from .ingredient_views import IngredientViewSet
from .recipe_views import RecipeViewSet
from .pricing_views import PricingSimulateView, BaseCostView

__all__ = [
    'IngredientViewSet',
    'RecipeViewSet',
    'PricingSimulateView',
    'BaseCostView',
]
