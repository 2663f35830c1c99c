"""
Costing services.

- ConversionService: package and recipe unit normalization
- rollup: pure material/labor/overhead cost engine
- DependencyGraph: base recipe cycle detection
- RecipeCostResolver: loads cost lookups and runs the rollup
- CascadePropagator: recosts dependents after a price change
- PricingSimulator: margin <-> selling price
- IngredientService / RecipeService: validated writes
"""
from costing.services.conversion_service import ConversionService, ConvertedQuantity, BaseCost
from costing.services.rollup_service import CostingRates, CostLine, RollupResult, rollup, cost_per_minute
from costing.services.dependency_graph import DependencyGraph
from costing.services.resolution_service import RecipeCostResolver
from costing.services.cascade_service import CascadePropagator, CascadeResult, CascadeFailure, RecostOutcome
from costing.services.pricing_service import PricingSimulator, PriceSimulation, PriceBreakdown
from costing.services.ingredient_service import IngredientService, IngredientSaveResult
from costing.services.recipe_service import RecipeService, RecipeSaveResult

__all__ = [
    'ConversionService',
    'ConvertedQuantity',
    'BaseCost',
    'CostingRates',
    'CostLine',
    'RollupResult',
    'rollup',
    'cost_per_minute',
    'DependencyGraph',
    'RecipeCostResolver',
    'CascadePropagator',
    'CascadeResult',
    'CascadeFailure',
    'RecostOutcome',
    'PricingSimulator',
    'PriceSimulation',
    'PriceBreakdown',
    'IngredientService',
    'IngredientSaveResult',
    'RecipeService',
    'RecipeSaveResult',
]
