"""
Recipe write operations.

A save validates the bill of materials, rejects base-recipe cycles, resolves
every typed quantity to base units, rolls the costs up and stores header and
lines in one transaction. Base recipes whose unit cost moved trigger the
cascade for everything built on top of them.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from django.db import transaction
from django.utils import timezone

from payments.money import to_decimal, quantize, quantize_places
from costing.exceptions import (
    CyclicRecipeError,
    RecipeInUseError,
    RecipeValidationError,
    RevisionConflictError,
)
from costing.models import Ingredient, Recipe, RecipeItem, PriceHistory, ItemType, PackageUnit
from costing.services.conversion_service import ConversionService
from costing.services.cascade_service import CascadePropagator, CascadeResult
from costing.services.dependency_graph import DependencyGraph
from costing.services.resolution_service import RecipeCostResolver
from costing.services.rollup_service import RollupResult

logger = logging.getLogger(__name__)

HEADER_FIELDS = (
    "name",
    "is_base",
    "yield_quantity",
    "yield_unit",
    "preparation_time_minutes",
    "preparation_method",
    "selling_price",
)


@dataclass
class RecipeSaveResult:
    recipe: Recipe
    created: bool
    rollup: RollupResult
    warnings: List[Dict[str, Any]] = field(default_factory=list)
    cascade: Optional[CascadeResult] = None


def _rates(tenant):
    from settings.services import SettingsService
    return SettingsService.costing_rates(tenant)


def _currency(tenant):
    from settings.services import SettingsService
    return SettingsService.get_settings(tenant).currency


class RecipeService:
    """
    Service layer for recipes and their lines.

    Item rows passed to ``save_recipe`` look like::

        {"item_type": "ingredient", "ingredient": 12, "quantity_input": "200", "unit_input": "g"}
        {"item_type": "recipe", "sub_recipe": 4, "quantity_input": "0.5", "unit_input": "kg"}
    """

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def validate(tenant, data: Dict[str, Any], instance: Optional[Recipe] = None):
        """
        Check header and lines.

        Returns:
            (errors, ingredients, sub_recipes): the field -> message dict and
            the referenced rows keyed by id, loaded once for resolution
        """
        def value(name, default=None):
            if name in data:
                return data[name]
            return getattr(instance, name) if instance is not None else default

        errors = {}
        if not str(value("name") or "").strip():
            errors["name"] = "Name is required."

        try:
            if to_decimal(value("yield_quantity", 1)) <= 0:
                errors["yield_quantity"] = "Yield must be greater than zero."
        except ValueError:
            errors["yield_quantity"] = "Must be a number."

        if value("yield_unit", PackageUnit.UN) not in PackageUnit.values:
            errors["yield_unit"] = "Unknown yield unit."

        try:
            if int(value("preparation_time_minutes", 0) or 0) < 0:
                errors["preparation_time_minutes"] = "Must be at least 0."
        except (TypeError, ValueError):
            errors["preparation_time_minutes"] = "Must be a whole number of minutes."

        selling_price = value("selling_price")
        if selling_price not in (None, ""):
            try:
                if to_decimal(selling_price) < 0:
                    errors["selling_price"] = "Must be at least 0."
            except ValueError:
                errors["selling_price"] = "Must be a number."

        if instance is not None and not value("is_base", False):
            dependents = RecipeService.recipes_using(instance)
            if dependents.exists():
                errors["is_base"] = "Recipe is used by other recipes and must stay a base recipe."

        items = data.get("items")
        if (items is None and instance is None) or (items is not None and not items):
            errors["items"] = "A recipe needs at least one item."

        ingredients, sub_recipes = {}, {}
        if items:
            ingredient_ids = {row.get("ingredient") for row in items if row.get("item_type") == ItemType.INGREDIENT}
            recipe_ids = {row.get("sub_recipe") for row in items if row.get("item_type") == ItemType.RECIPE}
            ingredients = {
                obj.pk: obj for obj in Ingredient.all_objects.filter(
                    tenant=tenant, is_active=True, pk__in=[i for i in ingredient_ids if i]
                ).prefetch_related('conversions')
            }
            sub_recipes = {
                obj.pk: obj for obj in Recipe.all_objects.filter(
                    tenant=tenant, is_active=True, is_base=True, pk__in=[i for i in recipe_ids if i]
                )
            }

            for index, row in enumerate(items):
                prefix = f"items[{index}]"
                item_type = row.get("item_type")
                if item_type == ItemType.INGREDIENT:
                    if row.get("ingredient") not in ingredients:
                        errors[f"{prefix}.ingredient"] = "Ingredient does not exist."
                elif item_type == ItemType.RECIPE:
                    sub_id = row.get("sub_recipe")
                    if instance is not None and sub_id == instance.pk:
                        errors[f"{prefix}.sub_recipe"] = "A recipe cannot contain itself."
                    elif sub_id not in sub_recipes:
                        errors[f"{prefix}.sub_recipe"] = "Base recipe does not exist."
                else:
                    errors[f"{prefix}.item_type"] = "Item type must be 'ingredient' or 'recipe'."

                try:
                    if to_decimal(row.get("quantity_input")) < 0:
                        errors[f"{prefix}.quantity_input"] = "Quantity cannot be negative."
                except ValueError:
                    errors[f"{prefix}.quantity_input"] = "Must be a number."

        return errors, ingredients, sub_recipes

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    @staticmethod
    def build_items(recipe, rows, ingredients, sub_recipes):
        """
        Unsaved RecipeItems with quantities resolved to base units.

        Returns:
            (items, warnings): warnings list every line whose unit could not
            be converted and was costed with its raw quantity
        """
        items = []
        warnings = []
        for position, row in enumerate(rows):
            quantity = to_decimal(row.get("quantity_input"))
            unit = row.get("unit_input") or ""

            if row["item_type"] == ItemType.INGREDIENT:
                ingredient = ingredients[row["ingredient"]]
                converted = ConversionService.to_base_quantity(
                    quantity, unit, ingredient.base_unit, ingredient.conversions.all()
                )
                item = RecipeItem(recipe=recipe, item_type=ItemType.INGREDIENT, ingredient=ingredient)
            else:
                sub_recipe = sub_recipes[row["sub_recipe"]]
                converted = ConversionService.to_yield_quantity(quantity, unit, sub_recipe.yield_unit)
                item = RecipeItem(recipe=recipe, item_type=ItemType.RECIPE, sub_recipe=sub_recipe)

            item.quantity_input = quantity
            item.unit_input = unit or "un"
            item.quantity_base = quantize_places(converted.quantity)
            item.position = position
            items.append(item)

            if converted.warning:
                warnings.append({
                    "position": position,
                    "item": item.referenced_name,
                    "unit": unit,
                    "warning": converted.warning,
                })

        return items, warnings

    @staticmethod
    def save_recipe(
        tenant,
        data: Dict[str, Any],
        instance: Optional[Recipe] = None,
        expected_revision: Optional[int] = None,
        user=None,
        clock=timezone.now,
    ) -> RecipeSaveResult:
        """
        Create or update a recipe with its lines.

        ``data["items"]`` replaces every line; when omitted on an update the
        stored lines are kept and only the header is rewritten.

        Raises:
            RecipeValidationError: If header or lines are invalid
            CyclicRecipeError: If a line would make the recipe contain itself
            RevisionConflictError: If the row changed since it was read
        """
        errors, ingredients, sub_recipes = RecipeService.validate(tenant, data, instance)
        if errors:
            raise RecipeValidationError(errors)

        rows = data.get("items")
        if rows is not None and instance is not None:
            sub_ids = [row["sub_recipe"] for row in rows if row["item_type"] == ItemType.RECIPE]
            cycle = DependencyGraph.for_tenant(tenant).would_create_cycle(instance.pk, sub_ids)
            if cycle:
                raise CyclicRecipeError(cycle)

        with transaction.atomic():
            created = instance is None
            if created:
                recipe = Recipe(tenant=tenant)
                old_unit_cost = None
                old_selling_price = None
            else:
                recipe = Recipe.all_objects.select_for_update().get(pk=instance.pk, tenant=tenant)
                if expected_revision is not None and int(expected_revision) != recipe.revision:
                    raise RevisionConflictError(recipe, expected_revision)
                old_unit_cost = recipe.unit_cost
                old_selling_price = recipe.selling_price
                recipe.revision += 1

            for name in HEADER_FIELDS:
                if name in data:
                    setattr(recipe, name, data[name])
            if recipe.selling_price in (None, ""):
                recipe.selling_price = None
            else:
                recipe.selling_price = quantize(_currency(tenant), recipe.selling_price)

            if rows is not None:
                items, warnings = RecipeService.build_items(recipe, rows, ingredients, sub_recipes)
            else:
                items = list(recipe.items.select_related('ingredient', 'sub_recipe'))
                warnings = []

            result = RecipeCostResolver(tenant, _rates(tenant)).cost(recipe, items)
            for name, cost in result.as_cost_fields().items():
                setattr(recipe, name, cost)
            recipe.save()

            if rows is not None:
                recipe.items.all().delete()
                for item in items:
                    item.recipe = recipe
                RecipeItem.objects.bulk_create(items)

            if not created and recipe.selling_price != old_selling_price:
                RecipeService._append_history(
                    recipe, old_unit_cost, old_selling_price, "Selling price updated", user, clock
                )

            save_result = RecipeSaveResult(recipe=recipe, created=created, rollup=result, warnings=warnings)

            if recipe.is_base and old_unit_cost is not None and old_unit_cost != recipe.unit_cost:
                save_result.cascade = CascadePropagator(tenant, user=user, clock=clock).on_ingredient_or_base_changed(
                    recipe,
                    reason=f"Base recipe cost update: {recipe.name}",
                )

        logger.info(
            f"{'Created' if created else 'Updated'} recipe '{recipe.name}' "
            f"(unit cost {recipe.unit_cost}, {len(warnings)} conversion warning(s))"
        )
        return save_result

    # ------------------------------------------------------------------
    # Other operations
    # ------------------------------------------------------------------

    @staticmethod
    def recalculate(recipe: Recipe, user=None, clock=timezone.now) -> RollupResult:
        """
        Recost one recipe from current ingredient prices and rates.

        The five cost columns are rewritten unconditionally. A base recipe
        whose unit cost moved also cascades to its dependents.
        """
        with transaction.atomic():
            recipe = Recipe.all_objects.select_for_update().get(pk=recipe.pk)
            old_unit_cost = recipe.unit_cost
            result = RecipeCostResolver(recipe.tenant, _rates(recipe.tenant)).cost(recipe)

            costs = result.as_cost_fields()
            for name, cost in costs.items():
                setattr(recipe, name, cost)
            recipe.save(update_fields=list(costs) + ['updated_at'])

            if recipe.is_base and old_unit_cost != recipe.unit_cost:
                CascadePropagator(recipe.tenant, user=user, clock=clock).on_ingredient_or_base_changed(recipe)

        return result

    @staticmethod
    def _append_history(recipe, old_unit_cost, old_selling_price, reason, user, clock):
        return PriceHistory.all_objects.create(
            tenant_id=recipe.tenant_id,
            recipe=recipe,
            old_unit_cost=old_unit_cost if old_unit_cost is not None else recipe.unit_cost,
            new_unit_cost=recipe.unit_cost,
            old_selling_price=old_selling_price,
            new_selling_price=recipe.selling_price,
            reason=reason[:255],
            changed_by=user,
            changed_at=clock(),
        )

    @staticmethod
    def update_selling_price(recipe: Recipe, new_price, reason: str = "", user=None, clock=timezone.now):
        """
        Manual price edit. Stores the price and appends a history row.

        Raises:
            RecipeValidationError: If the price is negative
        """
        try:
            price = to_decimal(new_price)
        except ValueError:
            raise RecipeValidationError({"selling_price": "Must be a number."})
        if price < 0:
            raise RecipeValidationError({"selling_price": "Must be at least 0."})

        with transaction.atomic():
            recipe = Recipe.all_objects.select_for_update().get(pk=recipe.pk)
            old_price = recipe.selling_price
            recipe.selling_price = quantize(_currency(recipe.tenant), price)
            recipe.revision += 1
            recipe.save(update_fields=['selling_price', 'revision', 'updated_at'])
            history = RecipeService._append_history(
                recipe, recipe.unit_cost, old_price, reason or "Manual price update", user, clock
            )

        logger.info(f"Selling price of '{recipe.name}' {old_price} -> {recipe.selling_price}")
        return recipe, history

    @staticmethod
    def recipes_using(recipe: Recipe):
        return (
            Recipe.all_objects
            .filter(tenant=recipe.tenant_id, is_active=True, items__sub_recipe=recipe)
            .exclude(pk=recipe.pk)
            .distinct()
            .order_by('name')
        )

    @staticmethod
    def delete_recipe(recipe: Recipe, user=None):
        """
        Archive a recipe no active recipe uses as a base.

        Raises:
            RecipeInUseError: If it is still a line of another active recipe
        """
        names = list(RecipeService.recipes_using(recipe).values_list('name', flat=True))
        if names:
            raise RecipeInUseError(recipe, names)

        recipe.archive(archived_by=user)
        logger.info(f"Archived recipe '{recipe.name}' (id={recipe.pk})")

    @staticmethod
    def cost_breakdown(recipe: Recipe) -> Dict[str, Any]:
        """Per-line cost detail of the stored recipe, with orphaned lines flagged."""
        result = RecipeCostResolver(recipe.tenant, _rates(recipe.tenant)).cost(recipe)

        lines = []
        for line_cost in result.lines:
            line = line_cost.line
            lines.append({
                "item_type": line.item_type,
                "ref_id": line.ref_id,
                "name": line.label,
                "quantity_base": line.quantity_base,
                "unit_cost": line_cost.unit_cost,
                "extended_cost": quantize_places(line_cost.extended_cost),
                "is_packaging": line.is_packaging,
                "orphaned": line_cost.orphaned,
            })

        return {
            "recipe_id": recipe.pk,
            "recipe_name": recipe.name,
            "lines": lines,
            "orphaned_count": len(result.orphaned_items),
            "packaging_cost": quantize_places(result.packaging_cost),
            "prime_cost": quantize_places(result.prime_cost),
            **result.as_cost_fields(),
        }

    @staticmethod
    def history(recipe: Recipe):
        return PriceHistory.all_objects.filter(recipe=recipe).select_related('changed_by')

