"""
Shared test fixtures for all backend tests.

This module provides reusable pytest fixtures for common test objects
like tenants, operators, rate settings, ingredients and recipes.
"""
import pytest
from decimal import Decimal

from tenant.models import Tenant
from tenant.managers import set_current_tenant
from users.models import User


# ============================================================================
# TENANT FIXTURES
# ============================================================================

@pytest.fixture
def tenant_a(db):
    """Create test tenant A (bakery) and make it the current tenant"""
    tenant = Tenant.objects.create(
        name='Doces da Ana',
        slug='doces-da-ana',
        is_active=True
    )
    set_current_tenant(tenant)
    return tenant


@pytest.fixture
def tenant_b(db):
    """Create test tenant B (kitchen); does not change the current tenant"""
    return Tenant.objects.create(
        name='Cozinha do Beto',
        slug='cozinha-do-beto',
        is_active=True
    )


# ============================================================================
# USER FIXTURES
# ============================================================================

@pytest.fixture
def owner_user(tenant_a):
    return User.objects.create_user(
        email='owner@docesdaana.com',
        password='password123',
        tenant=tenant_a,
        role=User.Role.OWNER,
        first_name='Ana',
    )


@pytest.fixture
def manager_user(tenant_a):
    return User.objects.create_user(
        email='manager@docesdaana.com',
        password='password123',
        tenant=tenant_a,
        role=User.Role.MANAGER,
        first_name='Marta',
    )


@pytest.fixture
def cashier_user(tenant_a):
    return User.objects.create_user(
        email='cashier@docesdaana.com',
        password='password123',
        tenant=tenant_a,
        role=User.Role.CASHIER,
        first_name='Caio',
    )


@pytest.fixture
def other_cashier(tenant_a):
    return User.objects.create_user(
        email='cashier2@docesdaana.com',
        password='password123',
        tenant=tenant_a,
        role=User.Role.CASHIER,
    )


@pytest.fixture
def user_tenant_b(tenant_b):
    return User.all_objects.create(
        email='manager@cozinhadobeto.com',
        tenant=tenant_b,
        role=User.Role.MANAGER,
    )


# ============================================================================
# SETTINGS FIXTURES
# ============================================================================

@pytest.fixture
def rate_settings(tenant_a):
    """
    Rates used across the costing tests: one employee at 600/month for
    100 hours (0.10 per minute), 10% overhead, 4% credit and 2% debit fees.
    """
    from settings.services import SettingsService

    return SettingsService.save_settings(
        tenant_a,
        {
            "fixed_overhead_rate": Decimal("10"),
            "default_tax_rate": Decimal("0"),
            "debit_fee_rate": Decimal("2"),
            "credit_fee_rate": Decimal("4"),
            "currency": "BRL",
        },
        employees=[{"name": "Ana", "salary": Decimal("600"), "hours_monthly": Decimal("100")}],
    )


@pytest.fixture
def zero_rate_settings(tenant_a):
    """No labor and no overhead: recipe cost equals material cost."""
    from settings.services import SettingsService

    return SettingsService.save_settings(
        tenant_a,
        {"fixed_overhead_rate": Decimal("0"), "currency": "BRL"},
        employees=[],
    )


# ============================================================================
# COSTING FIXTURES
# ============================================================================

@pytest.fixture
def make_ingredient(tenant_a):
    """
    Factory creating ingredients through IngredientService so the derived
    cost fields are filled in.
    """
    from costing.services import IngredientService

    def _make(name, package_price, package_quantity, package_unit="kg", **extra):
        data = {
            "name": name,
            "package_price": Decimal(str(package_price)),
            "package_quantity": Decimal(str(package_quantity)),
            "package_unit": package_unit,
        }
        data.update(extra)
        return IngredientService.save_ingredient(tenant_a, data).ingredient

    return _make


@pytest.fixture
def flour(make_ingredient):
    """20.00 per kg: 0.02 per gram"""
    return make_ingredient("Flour", "20.00", "1", "kg")


@pytest.fixture
def sugar(make_ingredient):
    """4.00 per kg: 0.004 per gram"""
    return make_ingredient("Sugar", "4.00", "1", "kg")


@pytest.fixture
def eggs(make_ingredient):
    """12.00 per dozen: 1.00 per unit"""
    return make_ingredient("Eggs", "12.00", "12", "un")


@pytest.fixture
def make_recipe(tenant_a):
    """
    Factory creating recipes through RecipeService.

    ``items`` is a list of (target, quantity, unit) tuples where target is an
    Ingredient or a base Recipe.
    """
    from costing.models import Recipe
    from costing.services import RecipeService

    def _make(name, items, yield_quantity=1, preparation_time_minutes=0, is_base=False, **extra):
        rows = []
        for target, quantity, unit in items:
            if isinstance(target, Recipe):
                rows.append({"item_type": "recipe", "sub_recipe": target.pk,
                             "quantity_input": Decimal(str(quantity)), "unit_input": unit})
            else:
                rows.append({"item_type": "ingredient", "ingredient": target.pk,
                             "quantity_input": Decimal(str(quantity)), "unit_input": unit})
        data = {
            "name": name,
            "yield_quantity": Decimal(str(yield_quantity)),
            "preparation_time_minutes": preparation_time_minutes,
            "is_base": is_base,
            "items": rows,
        }
        data.update(extra)
        return RecipeService.save_recipe(tenant_a, data).recipe

    return _make


# ============================================================================
# SALES FIXTURES
# ============================================================================

@pytest.fixture
def cake(flour, make_recipe):
    """Sellable recipe priced at 25.00"""
    return make_recipe("Cake", [(flour, 500, "g")], yield_quantity=1, selling_price=Decimal("25.00"))


@pytest.fixture
def soda(make_ingredient):
    """Resale product bought in a 12-pack, 10 units in stock, sold at 5.00"""
    return make_ingredient(
        "Soda", "36.00", "12", "un",
        category="product", current_stock=Decimal("10"), selling_price=Decimal("5.00"),
    )


@pytest.fixture
def cashier_session(tenant_a, cashier_user):
    """Open cash session of the cashier with a 100.00 float"""
    from cash_drawer.services import CashSessionService

    session, _ = CashSessionService.open_session(tenant_a, cashier_user, Decimal("100.00"))
    return session


@pytest.fixture
def sell(cake):
    """
    Factory recording a one-line sale of ``cake`` for ``amount``.

    Usage:
        sell(session, "50.00", "CASH")
        sell(session, "12.00", payment_method_label="Vale refeição")
    """
    from orders.services import SaleService

    def _sell(session, amount, payment_method=None, payment_method_label=None, cashier=None):
        order_data = {"payment_method": payment_method, "payment_method_label": payment_method_label}
        items = [{"item_type": "recipe", "recipe": cake.pk, "quantity": Decimal("1"), "unit_price": Decimal(amount)}]
        return SaleService.process_sale(session, order_data, items, cashier or session.operator)

    return _sell


@pytest.fixture
def customer(tenant_a):
    """Registered customer of tenant A"""
    from customers.services import CustomerService

    return CustomerService.save_customer(tenant_a, {"name": "Maria Souza", "phone_number": "11 99999-0000"})
