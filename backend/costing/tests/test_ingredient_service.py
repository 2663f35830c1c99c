"""
Tests for IngredientService.
"""
import pytest
from decimal import Decimal

from costing.exceptions import IngredientInUseError, IngredientValidationError, RevisionConflictError
from costing.models import Ingredient, IngredientCategory
from costing.services import IngredientService


@pytest.mark.django_db
class TestSaveIngredient:

    def test_create_derives_base_cost(self, tenant_a, flour):
        assert flour.base_unit == "g"
        assert flour.cost_per_base_unit == Decimal("0.02")
        assert flour.revision == 1
        assert flour.tenant == tenant_a

    def test_cost_keeps_six_places(self, make_ingredient):
        butter = make_ingredient("Butter", "7.49", "0.2", "kg")
        # 7.49 / 200 g
        assert butter.cost_per_base_unit == Decimal("0.037450")

        chocolate = make_ingredient("Chocolate", "10.00", "3", "un")
        assert chocolate.cost_per_base_unit == Decimal("3.333333")

    def test_update_bumps_revision(self, tenant_a, flour):
        result = IngredientService.save_ingredient(tenant_a, {"name": "Wheat flour"}, instance=flour, expected_revision=1)

        assert result.created is False
        assert result.ingredient.revision == 2
        assert result.cost_changed is False
        assert result.cascade is None

    def test_stale_revision_rejected(self, tenant_a, flour):
        IngredientService.save_ingredient(tenant_a, {"package_price": Decimal("22.00")}, instance=flour)

        with pytest.raises(RevisionConflictError) as exc_info:
            IngredientService.save_ingredient(
                tenant_a, {"package_price": Decimal("25.00")}, instance=flour, expected_revision=1
            )

        assert exc_info.value.current_revision == 2
        flour.refresh_from_db()
        assert flour.package_price == Decimal("22.00")

    def test_price_change_reports_cost_change(self, tenant_a, flour):
        result = IngredientService.save_ingredient(tenant_a, {"package_price": Decimal("30.00")}, instance=flour)

        assert result.cost_changed is True
        assert result.ingredient.cost_per_base_unit == Decimal("0.03")
        assert result.cascade is not None
        assert result.cascade.outcomes == []

    def test_validation_errors(self, tenant_a):
        with pytest.raises(IngredientValidationError) as exc_info:
            IngredientService.save_ingredient(tenant_a, {
                "name": " ",
                "package_price": Decimal("-1"),
                "package_quantity": Decimal("0"),
                "package_unit": "bushel",
            })

        errors = exc_info.value.errors
        assert set(errors) == {"name", "package_price", "package_quantity", "package_unit"}
        assert not Ingredient.all_objects.exists()

    def test_missing_price(self, tenant_a):
        errors = IngredientService.validate({"name": "Salt", "package_quantity": 1, "package_unit": "kg"})
        assert errors == {"package_price": "Package price is required."}

    def test_product_selling_price(self, tenant_a, soda):
        assert soda.selling_price == Decimal("5.00")

        result = IngredientService.save_ingredient(tenant_a, {"selling_price": ""}, instance=soda)
        assert result.ingredient.selling_price is None

        errors = IngredientService.validate({"selling_price": "-1"}, instance=soda)
        assert errors == {"selling_price": "Must be at least 0."}

    def test_conversions_are_replaced(self, tenant_a, make_ingredient):
        sugar = make_ingredient("Sugar", "4.00", "1", "kg", conversions=[{"name": "xícara", "value": Decimal("180")}])
        assert list(sugar.conversions.values_list("name", flat=True)) == ["xícara"]

        IngredientService.save_ingredient(
            tenant_a, {"conversions": [{"name": "colher", "value": Decimal("12")}]}, instance=sugar
        )

        assert list(sugar.conversions.values_list("name", "value")) == [("colher", Decimal("12"))]

    def test_duplicate_conversion_names(self):
        errors = IngredientService.validate({
            "name": "Sugar",
            "package_price": 4,
            "package_quantity": 1,
            "conversions": [{"name": "Xícara", "value": 180}, {"name": "xícara ", "value": 120}],
        })
        assert errors == {"conversions[1].name": "Duplicate measure name."}


@pytest.mark.django_db
class TestDeleteIngredient:

    def test_unused_ingredient_is_archived(self, flour, owner_user):
        IngredientService.delete_ingredient(flour, user=owner_user)

        flour.refresh_from_db()
        assert flour.is_active is False
        assert flour.archived_by == owner_user

    def test_in_use_ingredient_is_kept(self, flour, make_recipe):
        make_recipe("Bread", [(flour, 500, "g")])

        with pytest.raises(IngredientInUseError) as exc_info:
            IngredientService.delete_ingredient(flour)

        assert exc_info.value.recipe_names == ["Bread"]
        flour.refresh_from_db()
        assert flour.is_active is True


@pytest.mark.django_db
class TestStock:

    def test_low_stock(self, tenant_a, make_ingredient):
        make_ingredient("Boxes", "30.00", "50", "un", category=IngredientCategory.PACKAGING,
                        current_stock=Decimal("10"), min_stock=Decimal("20"))
        make_ingredient("Flour", "20.00", "1", "kg", current_stock=Decimal("5000"), min_stock=Decimal("1000"))

        assert [i.name for i in IngredientService.low_stock(tenant_a)] == ["Boxes"]

    def test_deduct_stock_may_go_negative(self, make_ingredient):
        soda = make_ingredient("Soda", "30.00", "12", "un", category=IngredientCategory.PRODUCT,
                               current_stock=Decimal("2"))

        IngredientService.deduct_stock(soda.pk, Decimal("3"))

        soda.refresh_from_db()
        assert soda.current_stock == Decimal("-1")
