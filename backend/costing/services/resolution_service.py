"""
Resolves stored recipe lines into the plain inputs of the rollup engine.

This is the only place that reads ingredients and base recipes for costing.
Lookups contain active rows only, so a line pointing at an archived
ingredient (or at a recipe that is no longer a base) comes back from the
rollup as orphaned instead of being priced with stale data.
"""
from typing import Dict, Iterable, List, Optional, Tuple

from costing.models import Ingredient, Recipe, ItemType, IngredientCategory
from costing.services.rollup_service import CostLine, CostingRates, RollupResult, rollup


class RecipeCostResolver:
    """
    Loads the cost lookups a recipe needs and runs the rollup.

    Args:
        tenant: Owning tenant; every lookup is filtered by it explicitly
        rates: CostingRates to apply (see SettingsService.costing_rates)
    """

    def __init__(self, tenant, rates: CostingRates):
        self.tenant = tenant
        self.rates = rates

    @staticmethod
    def lines_for(items: Iterable) -> List[CostLine]:
        """Turn RecipeItem rows (saved or not) into CostLines."""
        lines = []
        for item in items:
            ingredient = item.ingredient if item.item_type == ItemType.INGREDIENT and item.ingredient_id else None
            lines.append(CostLine(
                item_type=item.item_type,
                ref_id=item.ref_id,
                quantity_base=item.quantity_base,
                label=item.referenced_name,
                is_packaging=bool(ingredient and ingredient.category == IngredientCategory.PACKAGING),
            ))
        return lines

    def lookups_for(self, lines: Iterable[CostLine]) -> Tuple[Dict[int, object], Dict[int, object]]:
        ingredient_ids = {line.ref_id for line in lines if line.item_type == ItemType.INGREDIENT and line.ref_id}
        recipe_ids = {line.ref_id for line in lines if line.item_type == ItemType.RECIPE and line.ref_id}

        ingredient_costs = dict(
            Ingredient.all_objects.filter(
                tenant=self.tenant, is_active=True, id__in=ingredient_ids
            ).values_list('id', 'cost_per_base_unit')
        ) if ingredient_ids else {}

        base_recipe_costs = dict(
            Recipe.all_objects.filter(
                tenant=self.tenant, is_active=True, is_base=True, id__in=recipe_ids
            ).values_list('id', 'unit_cost')
        ) if recipe_ids else {}

        return ingredient_costs, base_recipe_costs

    def cost(self, recipe, items: Optional[Iterable] = None) -> RollupResult:
        """
        Cost ``recipe`` from ``items`` (defaults to its stored lines).

        Header values (preparation time, yield) are read from ``recipe`` as
        it is in memory, so unsaved edits are honoured.
        """
        if items is None:
            items = recipe.items.select_related('ingredient', 'sub_recipe')
        lines = self.lines_for(items)
        ingredient_costs, base_recipe_costs = self.lookups_for(lines)

        return rollup(
            lines,
            ingredient_costs,
            base_recipe_costs,
            prep_minutes=recipe.preparation_time_minutes,
            yield_units=recipe.yield_quantity,
            rates=self.rates,
        )
