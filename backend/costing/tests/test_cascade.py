"""
Tests for CascadePropagator.

Run with: pytest backend/costing/tests/test_cascade.py -v
"""
import pytest
from decimal import Decimal
from unittest import mock

from costing.models import Ingredient, PriceHistory, Recipe
from costing.services import CascadePropagator, IngredientService


def reprice(tenant, ingredient, price):
    return IngredientService.save_ingredient(tenant, {"package_price": Decimal(price)}, instance=ingredient)


@pytest.mark.django_db
class TestIngredientPriceChange:

    def test_price_increase_recosts_and_records_history(self, tenant_a, rate_settings, flour, make_recipe):
        """Flour 0.02/g -> 0.03/g raises the unit cost and writes one history row."""
        bread = make_recipe(
            "Bread", [(flour, 500, "g")],
            yield_quantity=4, preparation_time_minutes=60, selling_price=Decimal("10.00"),
        )
        assert bread.unit_cost == Decimal("4.4000")

        result = reprice(tenant_a, flour, "30.00")

        bread.refresh_from_db()
        assert bread.unit_cost == Decimal("5.7750")
        assert bread.total_cost_final == Decimal("23.1000")
        assert bread.selling_price == Decimal("10.00")
        assert bread.revision == 1

        history = PriceHistory.all_objects.get(recipe=bread)
        assert history.old_unit_cost == Decimal("4.4000")
        assert history.new_unit_cost == Decimal("5.7750")
        assert history.old_selling_price == history.new_selling_price == Decimal("10.00")
        assert history.reason == "Ingredient price update: Flour"

        assert [o.recipe_id for o in result.cascade.recosted] == [bread.pk]
        assert result.cascade.ok

    def test_second_run_is_a_no_op(self, tenant_a, rate_settings, flour, make_recipe):
        make_recipe("Bread", [(flour, 500, "g")], yield_quantity=4, preparation_time_minutes=60)
        reprice(tenant_a, flour, "30.00")
        flour.refresh_from_db()

        again = CascadePropagator(tenant_a).on_ingredient_or_base_changed(flour)

        assert again.recosted == []
        assert len(again.unchanged) == 1
        assert PriceHistory.all_objects.count() == 1

    def test_change_within_tolerance_is_ignored(self, tenant_a, flour, make_recipe):
        bread = make_recipe("Bread", [(flour, 500, "g")], yield_quantity=4)

        result = reprice(tenant_a, flour, "20.01")

        bread.refresh_from_db()
        assert bread.unit_cost == Decimal("2.5000")
        assert result.cascade.unchanged[0].recipe_id == bread.pk
        assert not PriceHistory.all_objects.exists()

    def test_archived_recipes_are_skipped(self, tenant_a, flour, make_recipe):
        bread = make_recipe("Bread", [(flour, 500, "g")])
        bread.archive()

        result = reprice(tenant_a, flour, "30.00")

        assert result.cascade.outcomes == []
        bread.refresh_from_db()
        assert bread.unit_cost == Decimal("10.0000")

    def test_failure_is_isolated(self, tenant_a, flour, make_recipe):
        make_recipe("Bread", [(flour, 500, "g")])
        broken = make_recipe("Broken", [(flour, 100, "g")])
        original = CascadePropagator.recost_recipe

        def flaky(self, recipe, reason):
            if recipe.pk == broken.pk:
                raise RuntimeError("lookup failed")
            return original(self, recipe, reason)

        with mock.patch.object(CascadePropagator, "recost_recipe", flaky):
            result = reprice(tenant_a, flour, "30.00")

        cascade = result.cascade
        assert [o.recipe_name for o in cascade.recosted] == ["Bread"]
        assert len(cascade.failures) == 1
        assert cascade.failures[0].recipe_name == "Broken"
        assert cascade.failures[0].error == "lookup failed"

        assert Recipe.all_objects.get(name="Bread").unit_cost == Decimal("15.0000")
        assert Recipe.all_objects.get(name="Broken").unit_cost == Decimal("2.0000")
        assert Ingredient.all_objects.get(pk=flour.pk).cost_per_base_unit == Decimal("0.03")


@pytest.mark.django_db
class TestBaseRecipeChains:

    @pytest.fixture
    def chain(self, flour, make_recipe):
        dough = make_recipe("Dough", [(flour, 1000, "g")], is_base=True)
        filling = make_recipe("Filling", [(dough, 1, "un")], is_base=True)
        pie = make_recipe("Pie", [(filling, 2, "un")])
        return dough, filling, pie

    def test_change_reaches_every_level(self, tenant_a, flour, chain):
        dough, filling, pie = chain
        assert pie.unit_cost == Decimal("40.0000")

        result = reprice(tenant_a, flour, "30.00")

        pie.refresh_from_db()
        assert pie.unit_cost == Decimal("60.0000")
        assert [(o.recipe_name, o.depth) for o in result.cascade.recosted] == [
            ("Dough", 1), ("Filling", 2), ("Pie", 3),
        ]
        assert PriceHistory.all_objects.count() == 3

    def test_depth_limit(self, tenant_a, flour, chain):
        dough, filling, pie = chain
        Ingredient.all_objects.filter(pk=flour.pk).update(cost_per_base_unit=Decimal("0.03"))

        result = CascadePropagator(tenant_a, max_depth=1).on_ingredient_or_base_changed(flour)

        assert result.depth_limited is True
        assert [o.recipe_name for o in result.recosted] == ["Dough"]
        filling.refresh_from_db()
        assert filling.unit_cost == Decimal("20.0000")

    def test_editing_a_base_recipe_cascades(self, tenant_a, flour, chain):
        from costing.services import RecipeService

        dough, filling, pie = chain
        result = RecipeService.save_recipe(
            tenant_a,
            {"items": [{"item_type": "ingredient", "ingredient": flour.pk, "quantity_input": 1500, "unit_input": "g"}]},
            instance=dough,
        )

        assert result.recipe.unit_cost == Decimal("30.0000")
        assert [o.recipe_name for o in result.cascade.recosted] == ["Filling", "Pie"]
        pie.refresh_from_db()
        assert pie.unit_cost == Decimal("60.0000")
