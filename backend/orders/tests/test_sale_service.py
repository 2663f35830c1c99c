"""
Tests for SaleService.process_sale.

Run with: pytest backend/orders/tests/test_sale_service.py -v
"""
import pytest
from decimal import Decimal
from unittest import mock

from cash_drawer.exceptions import SaleProcessingError, SessionNotOpenError
from cash_drawer.services import CashSessionService
from costing.models import Ingredient
from costing.services.ingredient_service import IngredientService
from finance.models import LedgerEntry
from finance.services import LedgerService
from orders.models import Order, OrderItem
from orders.services import SaleService, resolve_payment_method
from payments.models import PaymentMethod


def recipe_line(recipe, quantity="1", **extra):
    row = {"item_type": "recipe", "recipe": recipe.pk, "quantity": Decimal(quantity)}
    row.update(extra)
    return row


def product_line(product, quantity="1", unit_price="3.50"):
    return {"item_type": "product", "product": product.pk, "quantity": Decimal(quantity), "unit_price": Decimal(unit_price)}


@pytest.mark.django_db
class TestProcessSale:

    def test_recipe_sale_uses_selling_price(self, cashier_user, cashier_session, cake):
        order = SaleService.process_sale(
            cashier_session, {"payment_method": "PIX"}, [recipe_line(cake, "2")], cashier_user
        )

        assert order.total_amount == Decimal("50.00")
        assert order.payment_method == PaymentMethod.PIX
        assert order.fee_amount == Decimal("0.00")
        assert order.net_amount == Decimal("50.00")
        assert order.session == cashier_session
        assert order.status == Order.OrderStatus.COMPLETED

        item = order.items.get()
        assert item.product_name == "Cake"
        assert item.unit_price == Decimal("25.00")
        assert item.total_price == Decimal("50.00")

    def test_credit_fee(self, rate_settings, cashier_user, cashier_session, cake):
        order = SaleService.process_sale(
            cashier_session, {"payment_method": "CREDIT"}, [recipe_line(cake, unit_price=Decimal("30.00"))], cashier_user
        )

        assert order.fee_amount == Decimal("1.20")
        assert order.net_amount == Decimal("28.80")

    def test_label_is_mapped_once(self, rate_settings, cashier_user, cashier_session, cake):
        order = SaleService.process_sale(
            cashier_session,
            {"payment_method_label": "Cartão de Débito"},
            [recipe_line(cake, unit_price=Decimal("50.00"))],
            cashier_user,
        )

        assert order.payment_method == PaymentMethod.DEBIT
        assert order.payment_method_label == "Cartão de Débito"
        assert order.fee_amount == Decimal("1.00")

    def test_discount_reduces_total(self, cashier_user, cashier_session, cake):
        order = SaleService.process_sale(
            cashier_session, {"payment_method": "CASH", "discount": "5.00"}, [recipe_line(cake)], cashier_user
        )

        assert order.discount == Decimal("5.00")
        assert order.total_amount == Decimal("20.00")

    def test_explicit_total_wins(self, cashier_user, cashier_session, cake):
        order = SaleService.process_sale(
            cashier_session,
            {"payment_method": "CASH", "total_amount": "24.00", "change_amount": "1.00"},
            [recipe_line(cake)],
            cashier_user,
        )

        assert order.total_amount == Decimal("24.00")
        assert order.change_amount == Decimal("1.00")

    def test_product_sale_deducts_stock(self, cashier_user, cashier_session, soda):
        SaleService.process_sale(cashier_session, {"payment_method": "CASH"}, [product_line(soda, "3")], cashier_user)

        assert Ingredient.all_objects.get(pk=soda.pk).current_stock == Decimal("7")

    def test_stock_may_go_negative(self, cashier_user, cashier_session, soda):
        SaleService.process_sale(cashier_session, {"payment_method": "CASH"}, [product_line(soda, "12")], cashier_user)

        assert Ingredient.all_objects.get(pk=soda.pk).current_stock == Decimal("-2")

    def test_closed_session_rejected(self, cashier_user, cashier_session, cake):
        CashSessionService.close_session(cashier_session, "100.00")

        with pytest.raises(SessionNotOpenError):
            SaleService.process_sale(cashier_session, {"payment_method": "CASH"}, [recipe_line(cake)], cashier_user)

        assert not Order.all_objects.exists()

    def test_failure_rolls_everything_back(self, cashier_user, cashier_session, cake, soda):
        items = [recipe_line(cake), product_line(soda, "2")]

        with mock.patch.object(IngredientService, "deduct_stock", side_effect=RuntimeError("disk full")):
            with pytest.raises(SaleProcessingError):
                SaleService.process_sale(cashier_session, {"payment_method": "CASH"}, items, cashier_user)

        assert not Order.all_objects.exists()
        assert not OrderItem.objects.exists()
        assert Ingredient.all_objects.get(pk=soda.pk).current_stock == Decimal("10")
        assert not LedgerEntry.all_objects.exists()

    def test_sale_writes_ledger_entry(self, cashier_user, cashier_session, cake):
        order = SaleService.process_sale(
            cashier_session, {"payment_method": "CASH", "discount": "5.00"}, [recipe_line(cake)], cashier_user
        )

        entry = LedgerEntry.all_objects.get()
        assert entry.order == order
        assert entry.kind == LedgerEntry.Kind.REVENUE
        assert entry.amount == Decimal("20.00")
        assert entry.description == f"PDV #{order.display_number}"
        assert entry.category == "POS sale"
        assert entry.tenant == cashier_session.tenant
        assert entry.created_by == cashier_user

    def test_ledger_failure_rolls_the_sale_back(self, cashier_user, cashier_session, cake, soda):
        items = [recipe_line(cake), product_line(soda, "2")]

        with mock.patch.object(LedgerService, "record_sale", side_effect=RuntimeError("ledger down")):
            with pytest.raises(SaleProcessingError):
                SaleService.process_sale(cashier_session, {"payment_method": "CASH"}, items, cashier_user)

        assert not Order.all_objects.exists()
        assert not OrderItem.objects.exists()
        assert not LedgerEntry.all_objects.exists()
        assert Ingredient.all_objects.get(pk=soda.pk).current_stock == Decimal("10")

    def test_customer_is_linked(self, cashier_user, cashier_session, cake, customer):
        order = SaleService.process_sale(
            cashier_session, {"payment_method": "CASH", "customer": customer.pk}, [recipe_line(cake)], cashier_user
        )

        assert order.customer == customer
        assert list(Order.all_objects.filter(customer=customer)) == [order]

    def test_other_tenant_customer_rejected(self, tenant_b, cashier_user, cashier_session, cake):
        from customers.services import CustomerService

        stranger = CustomerService.save_customer(tenant_b, {"name": "Stranger"})

        with pytest.raises(SaleProcessingError) as exc_info:
            SaleService.process_sale(
                cashier_session, {"payment_method": "CASH", "customer": stranger.pk}, [recipe_line(cake)], cashier_user
            )

        assert "customer" in exc_info.value.details
        assert not Order.all_objects.exists()

    def test_unknown_item(self, cashier_user, cashier_session, cake):
        items = [recipe_line(cake), {"item_type": "recipe", "recipe": 99999, "quantity": Decimal("1")}]

        with pytest.raises(SaleProcessingError) as exc_info:
            SaleService.process_sale(cashier_session, {"payment_method": "CASH"}, items, cashier_user)

        assert "items[1]" in exc_info.value.details
        assert not Order.all_objects.exists()

    def test_base_recipe_is_not_sellable(self, cashier_user, cashier_session, make_recipe, sugar):
        cream = make_recipe("Cream", [(sugar, 100, "g")], is_base=True)

        with pytest.raises(SaleProcessingError) as exc_info:
            SaleService.process_sale(
                cashier_session, {"payment_method": "CASH"}, [recipe_line(cream, unit_price=Decimal("10.00"))], cashier_user
            )

        assert "items[0]" in exc_info.value.details
        assert not Order.all_objects.exists()

    def test_archived_recipe_is_not_sellable(self, cashier_user, cashier_session, cake):
        cake.archive()

        with pytest.raises(SaleProcessingError) as exc_info:
            SaleService.process_sale(cashier_session, {"payment_method": "CASH"}, [recipe_line(cake)], cashier_user)

        assert "items[0]" in exc_info.value.details
        assert not Order.all_objects.exists()

    def test_raw_ingredient_is_not_sellable(self, cashier_user, cashier_session, flour):
        with pytest.raises(SaleProcessingError) as exc_info:
            SaleService.process_sale(cashier_session, {"payment_method": "CASH"}, [product_line(flour)], cashier_user)

        assert "items[0]" in exc_info.value.details
        assert Ingredient.all_objects.get(pk=flour.pk).current_stock == Decimal("0")

    def test_archived_product_is_not_sellable(self, cashier_user, cashier_session, soda):
        soda.archive()

        with pytest.raises(SaleProcessingError):
            SaleService.process_sale(cashier_session, {"payment_method": "CASH"}, [product_line(soda)], cashier_user)

        assert Ingredient.all_objects.get(pk=soda.pk).current_stock == Decimal("10")

    def test_product_defaults_to_its_selling_price(self, cashier_user, cashier_session, soda):
        line = {"item_type": "product", "product": soda.pk, "quantity": Decimal("2")}

        order = SaleService.process_sale(cashier_session, {"payment_method": "CASH"}, [line], cashier_user)

        item = order.items.get()
        assert item.unit_price == Decimal("5.00")
        assert item.total_price == Decimal("10.00")
        assert order.total_amount == Decimal("10.00")

    def test_explicit_unit_price_overrides_product_price(self, cashier_user, cashier_session, soda):
        order = SaleService.process_sale(
            cashier_session, {"payment_method": "CASH"}, [product_line(soda, "2", "4.00")], cashier_user
        )

        assert order.total_amount == Decimal("8.00")

    def test_other_tenant_recipe_is_unknown(self, tenant_b, user_tenant_b, cake):
        session, _ = CashSessionService.open_session(tenant_b, user_tenant_b)

        with pytest.raises(SaleProcessingError):
            SaleService.process_sale(session, {"payment_method": "CASH"}, [recipe_line(cake)], user_tenant_b)

    def test_empty_sale(self, cashier_user, cashier_session):
        with pytest.raises(SaleProcessingError):
            SaleService.process_sale(cashier_session, {"payment_method": "CASH"}, [], cashier_user)

    def test_negative_total(self, cashier_user, cashier_session, cake):
        with pytest.raises(SaleProcessingError):
            SaleService.process_sale(
                cashier_session, {"payment_method": "CASH", "discount": "30.00"}, [recipe_line(cake)], cashier_user
            )


class TestResolvePaymentMethod:

    @pytest.mark.parametrize("order_data, expected", [
        ({"payment_method": "CASH"}, PaymentMethod.CASH),
        ({"payment_method": "credit"}, PaymentMethod.CREDIT),
        ({"payment_method_label": "Dinheiro"}, PaymentMethod.CASH),
        ({"payment_method_label": "pix"}, PaymentMethod.PIX),
        ({"payment_method_label": "Vale"}, PaymentMethod.OTHER),
        ({}, PaymentMethod.OTHER),
    ])
    def test_resolve(self, order_data, expected):
        assert resolve_payment_method(order_data) == expected
