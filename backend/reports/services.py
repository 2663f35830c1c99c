"""
Sales report over completed orders in a date range.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict

from django.db.models import Count, Sum, Value
from django.db.models.functions import Coalesce

from orders.models import Order, OrderItem
from payments.models import PaymentMethod
from payments.money import quantize, safe_divide, ZERO

logger = logging.getLogger(__name__)

TOP_PRODUCTS_LIMIT = 10


class SalesReportService:

    @staticmethod
    def generate(tenant, start_date: datetime, end_date: datetime, limit: int = TOP_PRODUCTS_LIMIT) -> Dict[str, Any]:
        """
        Totals for completed orders created between ``start_date`` and
        ``end_date`` (both inclusive).

        Every payment method appears in ``by_payment_method``, with zero when
        it had no sales. Top products are ranked by quantity sold.
        """
        from settings.services import SettingsService

        currency = SettingsService.get_settings(tenant).currency
        orders = Order.all_objects.filter(
            tenant=tenant,
            status=Order.OrderStatus.COMPLETED,
            created_at__gte=start_date,
            created_at__lte=end_date,
        )

        totals = orders.aggregate(
            total_sales=Coalesce(Sum("total_amount"), Value(Decimal("0.00"))),
            order_count=Count("id"),
            fee_total=Coalesce(Sum("fee_amount"), Value(Decimal("0.00"))),
            net_total=Coalesce(Sum("net_amount"), Value(Decimal("0.00"))),
        )

        by_method = {method: quantize(currency, ZERO) for method in PaymentMethod.values}
        for row in orders.values("payment_method").annotate(total=Sum("total_amount")):
            by_method[row["payment_method"]] = quantize(currency, row["total"] or ZERO)

        top_products = (
            OrderItem.objects.filter(order__in=orders)
            .values("item_type", "product_name")
            .annotate(quantity=Sum("quantity"), total=Sum("total_price"))
            .order_by("-quantity", "product_name")[:limit]
        )

        report = {
            "start_date": start_date,
            "end_date": end_date,
            "currency": currency,
            "total_sales": quantize(currency, totals["total_sales"]),
            "order_count": totals["order_count"],
            "average_ticket": quantize(currency, safe_divide(totals["total_sales"], totals["order_count"])),
            "fee_total": quantize(currency, totals["fee_total"]),
            "net_total": quantize(currency, totals["net_total"]),
            "by_payment_method": by_method,
            "top_products": [
                {
                    "name": row["product_name"],
                    "item_type": row["item_type"],
                    "quantity": row["quantity"],
                    "total": quantize(currency, row["total"] or ZERO),
                }
                for row in top_products
            ],
        }

        logger.info(
            f"Sales report for tenant {tenant.slug} {start_date:%Y-%m-%d}..{end_date:%Y-%m-%d}: "
            f"{report['order_count']} orders, {report['total_sales']}"
        )
        return report
