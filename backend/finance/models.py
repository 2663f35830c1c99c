from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from tenant.managers import TenantManager

SALE_CATEGORY = "POS sale"
DEFAULT_EXPENSE_CATEGORY = "Supplies"


class LedgerEntry(models.Model):
    """
    One line of the business cash book: money in (revenue) or money out
    (expense).

    Every completed sale writes a revenue entry linked to its order in the
    same transaction as the order itself. Those entries mirror the order and
    cannot be deleted from the ledger; manual entries can.
    """

    class Kind(models.TextChoices):
        REVENUE = "REVENUE", _("Revenue")
        EXPENSE = "EXPENSE", _("Expense")

    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='ledger_entries'
    )
    kind = models.CharField(max_length=10, choices=Kind.choices, db_index=True)
    description = models.CharField(max_length=200)
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text=_("Always positive; the kind gives the direction")
    )
    category = models.CharField(max_length=50, blank=True)
    date = models.DateField(default=timezone.localdate, db_index=True)
    order = models.OneToOneField(
        'orders.Order',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='ledger_entry'
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        verbose_name = _("Ledger entry")
        verbose_name_plural = _("Ledger entries")
        ordering = ['-date', '-created_at']
        indexes = [
            models.Index(fields=['tenant', 'kind', 'date']),
        ]

    def __str__(self):
        return f"{self.get_kind_display()} {self.amount} ({self.description})"

    @property
    def is_sale(self):
        return self.order_id is not None
