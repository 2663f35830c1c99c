"""
Finance ledger.

Sales land in the ledger automatically: SaleService calls
``LedgerService.record_sale`` inside the transaction that creates the order,
so an order never exists without its revenue entry and a rolled-back sale
leaves no entry behind. Expenses and other revenue are entered by hand.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional

from django.db.models import Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone
from django.utils.dateparse import parse_date

from payments.money import quantize, to_decimal
from .exceptions import LedgerEntryLockedError, LedgerValidationError
from .models import DEFAULT_EXPENSE_CATEGORY, SALE_CATEGORY, LedgerEntry

logger = logging.getLogger(__name__)


def _currency(tenant):
    from settings.services import SettingsService
    return SettingsService.get_settings(tenant).currency


def _as_date(value) -> Optional[date]:
    if isinstance(value, date):
        return value
    try:
        return parse_date(str(value))
    except ValueError:
        return None


class LedgerService:

    @staticmethod
    def record_sale(order) -> LedgerEntry:
        """
        Revenue entry for a completed sale. Must run inside the transaction
        that creates ``order``.
        """
        return LedgerEntry.all_objects.create(
            tenant=order.tenant,
            kind=LedgerEntry.Kind.REVENUE,
            description=str(order),
            amount=order.total_amount,
            category=SALE_CATEGORY,
            date=timezone.localdate(order.created_at),
            order=order,
            created_by=order.cashier,
        )

    @staticmethod
    def add_entry(tenant, data: Dict[str, Any], user=None) -> LedgerEntry:
        """
        Record a manual expense or revenue.

        Args:
            tenant: Owning tenant
            data: ``kind``, ``description``, ``amount`` (positive) and
                optionally ``category`` and ``date`` (defaults to today)
            user: Operator recording the entry

        Raises:
            LedgerValidationError: If any field is invalid
        """
        currency = _currency(tenant)
        errors = {}
        kind = data.get("kind") or LedgerEntry.Kind.EXPENSE
        if kind not in LedgerEntry.Kind.values:
            errors["kind"] = "Must be REVENUE or EXPENSE."

        description = str(data.get("description") or "").strip()
        if not description:
            errors["description"] = "Description is required."

        amount = None
        try:
            amount = quantize(currency, to_decimal(data.get("amount")))
            if amount <= 0:
                errors["amount"] = "Must be greater than 0."
        except ValueError:
            errors["amount"] = "Must be a number."

        entry_date = timezone.localdate()
        if data.get("date") not in (None, ""):
            entry_date = _as_date(data["date"])
            if entry_date is None:
                errors["date"] = "Enter a valid date."

        if errors:
            raise LedgerValidationError(errors)

        category = str(data.get("category") or "").strip()
        if not category and kind == LedgerEntry.Kind.EXPENSE:
            category = DEFAULT_EXPENSE_CATEGORY

        entry = LedgerEntry.all_objects.create(
            tenant=tenant,
            kind=kind,
            description=description[:200],
            amount=amount,
            category=category[:50],
            date=entry_date,
            created_by=user,
        )
        logger.info(f"Ledger {entry.kind.lower()} {entry.pk} of {entry.amount} recorded for tenant {tenant.slug}")
        return entry

    @staticmethod
    def delete_entry(entry: LedgerEntry) -> None:
        """
        Raises:
            LedgerEntryLockedError: If the entry mirrors a sale
        """
        if entry.is_sale:
            raise LedgerEntryLockedError(entry)
        logger.info(f"Ledger entry {entry.pk} deleted")
        entry.delete()

    @staticmethod
    def summary(tenant, start_date: date, end_date: date) -> Dict[str, Any]:
        """Revenue, expenses and their balance for entries dated in the range, inclusive."""
        currency = _currency(tenant)
        entries = LedgerEntry.all_objects.filter(tenant=tenant, date__gte=start_date, date__lte=end_date)

        totals = {kind: Decimal("0.00") for kind in LedgerEntry.Kind.values}
        for row in entries.values("kind").annotate(total=Coalesce(Sum("amount"), Value(Decimal("0.00")))).order_by("kind"):
            totals[row["kind"]] = row["total"]

        by_category = (
            entries.values("kind", "category")
            .annotate(total=Sum("amount"))
            .order_by("kind", "-total", "category")
        )

        revenue = quantize(currency, totals[LedgerEntry.Kind.REVENUE])
        expenses = quantize(currency, totals[LedgerEntry.Kind.EXPENSE])
        return {
            "start_date": start_date,
            "end_date": end_date,
            "currency": currency,
            "revenue": revenue,
            "expenses": expenses,
            "balance": quantize(currency, revenue - expenses),
            "by_category": [
                {"kind": row["kind"], "category": row["category"], "total": quantize(currency, row["total"])}
                for row in by_category
            ],
        }
