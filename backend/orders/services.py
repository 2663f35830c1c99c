"""
Sale processing.

A sale is recorded in one transaction: the order header with its fee split,
its item lines, the stock deduction for resale products and the revenue
entry in the finance ledger. Either all of it is persisted or none of it is.
"""
import logging
from typing import Any, Dict, Iterable, List

from django.db import transaction

from cash_drawer.exceptions import SaleProcessingError, SessionNotOpenError
from cash_drawer.models import CashSession
from core_backend.exceptions import DomainError
from costing.models import Ingredient, IngredientCategory, Recipe
from costing.services.ingredient_service import IngredientService
from customers.services import CustomerService
from finance.services import LedgerService
from payments.models import PaymentMethod
from payments.money import quantize, to_decimal, ZERO
from payments.services import PaymentFeeService
from .models import Order, OrderItem

logger = logging.getLogger(__name__)


def resolve_payment_method(order_data: Dict[str, Any]) -> PaymentMethod:
    """
    The enum value for a sale: taken as-is when it is a known method,
    otherwise mapped from the free-text label.
    """
    method = order_data.get("payment_method")
    if method in PaymentMethod.values:
        return PaymentMethod(method)
    return PaymentMethod.from_label(method or order_data.get("payment_method_label"))


class SaleService:

    @staticmethod
    def process_sale(session: CashSession, order_data: Dict[str, Any], items: Iterable[Dict[str, Any]], cashier) -> Order:
        """
        Record a completed sale in ``session``.

        Args:
            session: Open cash session the sale belongs to
            order_data: ``total_amount`` (defaults to the item subtotal minus
                the discount), ``discount``, ``change_amount`` and either a
                ``payment_method`` or a free-text ``payment_method_label``,
                and an optional ``customer`` id
            items: Rows with ``item_type`` ("recipe" or "product"), the
                ``recipe`` or ``product`` id, ``quantity``, ``unit_price`` and
                an optional ``product_name`` override
            cashier: Operator ringing up the sale

        Raises:
            SessionNotOpenError: If the session is closed
            SaleProcessingError: If anything else fails; nothing is persisted
        """
        items = list(items)
        try:
            with transaction.atomic():
                session = CashSession.all_objects.select_for_update().get(pk=session.pk)
                if not session.is_open:
                    raise SessionNotOpenError(session, f"Cannot record a sale in closed session {session.pk}.")
                order = SaleService._create_order(session, order_data, items, cashier)
        except DomainError:
            raise
        except Exception as exc:
            logger.exception(f"Sale in session {session.pk} failed and was rolled back")
            raise SaleProcessingError(f"Sale could not be recorded: {exc}") from exc

        logger.info(
            f"Sale {order.display_number} recorded in session {session.pk}: "
            f"{order.total_amount} via {order.payment_method} (fee {order.fee_amount})"
        )
        return order

    @staticmethod
    def _create_order(session: CashSession, order_data, items, cashier) -> Order:
        from settings.services import SettingsService

        if not items:
            raise SaleProcessingError("A sale needs at least one item.")

        tenant = session.tenant
        settings = SettingsService.get_settings(tenant)
        currency = settings.currency

        lines = SaleService._build_lines(tenant, items, currency)
        subtotal = sum((line.total_price for line in lines), ZERO)

        discount = quantize(currency, order_data.get("discount") or ZERO)
        if order_data.get("total_amount") in (None, ""):
            total = quantize(currency, subtotal - discount)
        else:
            total = quantize(currency, order_data["total_amount"])
        if total < 0 or discount < 0:
            raise SaleProcessingError(
                "Sale total and discount cannot be negative.",
                details={"total_amount": str(total), "discount": str(discount)},
            )

        customer = None
        if order_data.get("customer") not in (None, ""):
            customer = CustomerService.get_for_tenant(tenant, order_data["customer"])
            if customer is None:
                raise SaleProcessingError("Customer not found.", details={"customer": order_data["customer"]})

        method = resolve_payment_method(order_data)
        fee = PaymentFeeService.calculate_transaction_fee(total, method, settings, currency)

        order = Order.all_objects.create(
            tenant=tenant,
            session=session,
            cashier=cashier,
            customer=customer,
            total_amount=total,
            discount=discount,
            change_amount=quantize(currency, order_data.get("change_amount") or ZERO),
            payment_method=method,
            payment_method_label=str(order_data.get("payment_method_label") or order_data.get("payment_method") or "")[:50],
            fee_amount=fee.fee,
            net_amount=fee.net,
        )

        for line in lines:
            line.order = order
        OrderItem.objects.bulk_create(lines)

        for line in lines:
            if line.item_type == OrderItem.ItemType.PRODUCT:
                IngredientService.deduct_stock(line.product_id, line.quantity)

        LedgerService.record_sale(order)
        return order

    @staticmethod
    def _build_lines(tenant, items: List[Dict[str, Any]], currency: str) -> List[OrderItem]:
        recipe_ids = {row.get("recipe") for row in items if row.get("item_type") == OrderItem.ItemType.RECIPE}
        product_ids = {row.get("product") for row in items if row.get("item_type") == OrderItem.ItemType.PRODUCT}
        # Only finished, active recipes and active resale products are sellable
        recipes = Recipe.all_objects.filter(
            tenant=tenant, pk__in=recipe_ids, is_base=False, is_active=True,
        ).in_bulk()
        products = Ingredient.all_objects.filter(
            tenant=tenant, pk__in=product_ids, category=IngredientCategory.PRODUCT, is_active=True,
        ).in_bulk()

        lines = []
        errors = {}
        for index, row in enumerate(items):
            item_type = row.get("item_type")
            if item_type == OrderItem.ItemType.RECIPE:
                target = recipes.get(row.get("recipe"))
            elif item_type == OrderItem.ItemType.PRODUCT:
                target = products.get(row.get("product"))
            else:
                errors[f"items[{index}].item_type"] = "Must be 'recipe' or 'product'."
                continue
            if target is None:
                errors[f"items[{index}]"] = f"Unknown or unsellable {item_type}."
                continue

            quantity = to_decimal(row.get("quantity", 1))
            unit_price = row.get("unit_price")
            if unit_price in (None, ""):
                unit_price = target.selling_price
            unit_price = quantize(currency, unit_price or ZERO)
            if quantity <= 0:
                errors[f"items[{index}].quantity"] = "Must be greater than 0."
                continue
            if unit_price < 0:
                errors[f"items[{index}].unit_price"] = "Cannot be negative."
                continue

            lines.append(OrderItem(
                item_type=item_type,
                recipe=target if item_type == OrderItem.ItemType.RECIPE else None,
                product=target if item_type == OrderItem.ItemType.PRODUCT else None,
                product_name=(row.get("product_name") or target.name)[:150],
                quantity=quantity,
                unit_price=unit_price,
                total_price=quantize(currency, unit_price * quantity),
            ))

        if errors:
            raise SaleProcessingError("Sale items are invalid.", details=errors)
        return lines

