"""
Tests for SettingsService and the settings endpoints.

Run with: pytest backend/settings/tests/test_settings.py -v
"""
import pytest
from decimal import Decimal

from django.core.exceptions import ValidationError

from costing.models import Recipe
from settings.models import GlobalSettings
from settings.services import SettingsService

SETTINGS_URL = "/api/settings/"


@pytest.mark.django_db
class TestSettingsService:

    def test_created_with_tenant(self, tenant_a):
        settings = GlobalSettings.all_objects.get(tenant=tenant_a)

        assert settings.fixed_overhead_rate == Decimal("0.00")
        assert settings.currency == "BRL"

    def test_get_settings_is_a_singleton(self, tenant_a):
        assert SettingsService.get_settings(tenant_a).pk == SettingsService.get_settings(tenant_a).pk
        assert GlobalSettings.all_objects.filter(tenant=tenant_a).count() == 1

    def test_cost_per_minute(self, tenant_a, rate_settings):
        assert SettingsService.cost_per_minute(tenant_a) == Decimal("0.1")

    def test_cost_per_minute_sums_roster(self, tenant_a):
        SettingsService.save_settings(tenant_a, {}, employees=[
            {"name": "Ana", "salary": Decimal("600"), "hours_monthly": Decimal("100")},
            {"name": "Beto", "salary": Decimal("1200"), "hours_monthly": Decimal("100")},
            {"name": "Intern", "salary": Decimal("300"), "hours_monthly": Decimal("0")},
        ])

        assert SettingsService.cost_per_minute(tenant_a) == Decimal("0.3")

    def test_costing_rates(self, tenant_a, rate_settings):
        rates = SettingsService.costing_rates(tenant_a)

        assert rates.cost_per_minute == Decimal("0.1")
        assert rates.fixed_overhead_rate == Decimal("10")

    def test_roster_is_replaced(self, tenant_a, rate_settings):
        SettingsService.save_settings(tenant_a, {}, employees=[
            {"name": "Caio", "salary": Decimal("900"), "hours_monthly": Decimal("150")},
        ])

        names = list(SettingsService.get_settings(tenant_a).employees.values_list("name", flat=True))
        assert names == ["Caio"]

    def test_roster_kept_when_omitted(self, tenant_a, rate_settings):
        SettingsService.save_settings(tenant_a, {"default_tax_rate": Decimal("4.5")})

        assert SettingsService.get_settings(tenant_a).employees.count() == 1

    def test_rate_out_of_range(self, tenant_a):
        with pytest.raises(ValidationError):
            SettingsService.save_settings(tenant_a, {"credit_fee_rate": Decimal("100")})

        assert SettingsService.get_settings(tenant_a).credit_fee_rate == Decimal("0.00")

    def test_overhead_suggestion(self, tenant_a):
        SettingsService.save_settings(
            tenant_a,
            {"estimated_monthly_revenue": Decimal("20000"), "fixed_overhead_rate": Decimal("12")},
            fixed_costs=[
                {"name": "Rent", "monthly_value": Decimal("1500")},
                {"name": "Power", "monthly_value": Decimal("500")},
            ],
        )

        suggestion = SettingsService.overhead_suggestion(tenant_a)

        assert suggestion["fixed_costs_total"] == Decimal("2000")
        assert suggestion["suggested_overhead_rate"] == Decimal("10.00")
        assert suggestion["current_overhead_rate"] == Decimal("12")

    def test_overhead_suggestion_without_revenue(self, tenant_a):
        SettingsService.save_settings(tenant_a, {}, fixed_costs=[{"name": "Rent", "monthly_value": Decimal("1500")}])

        assert SettingsService.overhead_suggestion(tenant_a)["suggested_overhead_rate"] == Decimal("0.00")

    def test_saving_rates_does_not_recost(self, tenant_a, flour, make_recipe):
        recipe = make_recipe("Bread", [(flour, 500, "g")], preparation_time_minutes=60)
        before = recipe.unit_cost

        SettingsService.save_settings(tenant_a, {"fixed_overhead_rate": Decimal("50")}, employees=[
            {"name": "Ana", "salary": Decimal("600"), "hours_monthly": Decimal("100")},
        ])

        assert Recipe.all_objects.get(pk=recipe.pk).unit_cost == before

    def test_tenants_are_independent(self, tenant_a, tenant_b, rate_settings):
        assert SettingsService.get_settings(tenant_b).fixed_overhead_rate == Decimal("0.00")
        assert SettingsService.cost_per_minute(tenant_b) == Decimal("0")


@pytest.mark.django_db
class TestSettingsAPI:

    def test_cashier_can_read(self, cashier_client, rate_settings):
        response = cashier_client.get(SETTINGS_URL)

        assert response.status_code == 200
        assert response.data["credit_fee_rate"] == "4.00"
        assert response.data["cost_per_minute"] == "0.1000"
        assert response.data["employees"][0]["cost_per_minute"] == "0.1000"

    def test_cashier_cannot_write(self, cashier_client):
        response = cashier_client.patch(SETTINGS_URL, {"default_tax_rate": "4.5"}, format="json")
        assert response.status_code == 403

    def test_manager_patch(self, manager_client, tenant_a, rate_settings):
        response = manager_client.patch(SETTINGS_URL, {"default_tax_rate": "4.50", "currency": "usd"}, format="json")

        assert response.status_code == 200
        assert response.data["default_tax_rate"] == "4.50"
        assert response.data["currency"] == "USD"
        assert len(response.data["employees"]) == 1

    def test_manager_replaces_roster(self, manager_client, tenant_a):
        response = manager_client.patch(SETTINGS_URL, {
            "employees": [{"name": "Ana", "salary": "3000", "hours_monthly": "200"}],
        }, format="json")

        assert response.status_code == 200
        assert response.data["cost_per_minute"] == "0.2500"

    def test_invalid_rate(self, manager_client):
        response = manager_client.patch(SETTINGS_URL, {"debit_fee_rate": "120"}, format="json")

        assert response.status_code == 400
        assert "debit_fee_rate" in response.data

    def test_unsupported_currency(self, manager_client):
        response = manager_client.patch(SETTINGS_URL, {"currency": "XYZ"}, format="json")
        assert response.status_code == 400

    def test_overhead_suggestion(self, manager_client, tenant_a):
        SettingsService.save_settings(
            tenant_a,
            {"estimated_monthly_revenue": Decimal("10000")},
            fixed_costs=[{"name": "Rent", "monthly_value": Decimal("1500")}],
        )

        response = manager_client.get(f"{SETTINGS_URL}overhead-suggestion/")

        assert response.status_code == 200
        assert response.data["suggested_overhead_rate"] == "15.00"
