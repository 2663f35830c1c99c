import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from payments.models import PaymentMethod
from tenant.managers import TenantManager


class Order(models.Model):
    """
    A completed sale rung up in a cash session.

    ``payment_method`` is assigned once, when the sale is recorded; the raw
    label the terminal or an import sent is kept in ``payment_method_label``
    for audit. ``fee_amount`` and ``net_amount`` are the acquirer fee split
    computed at sale time with the rates in force then.
    """

    class OrderStatus(models.TextChoices):
        COMPLETED = "COMPLETED", _("Completed")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='orders'
    )
    session = models.ForeignKey(
        'cash_drawer.CashSession',
        on_delete=models.PROTECT,
        related_name='orders'
    )
    cashier = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='sales'
    )
    customer = models.ForeignKey(
        'customers.Customer',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='orders'
    )
    status = models.CharField(
        max_length=10, choices=OrderStatus.choices, default=OrderStatus.COMPLETED
    )

    total_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text=_("Amount charged, after discount")
    )
    discount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    change_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))

    payment_method = models.CharField(
        max_length=10,
        choices=PaymentMethod.choices,
        db_index=True
    )
    payment_method_label = models.CharField(
        max_length=50,
        blank=True,
        help_text=_("Payment method as originally entered")
    )
    fee_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    net_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))

    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        verbose_name = _("Order")
        verbose_name_plural = _("Orders")
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['tenant', 'created_at']),
            models.Index(fields=['session', 'status']),
        ]

    def __str__(self):
        return f"PDV #{self.display_number}"

    @property
    def display_number(self):
        return str(self.id)[:6]


class OrderItem(models.Model):
    """
    A sold line: a recipe made in-house or a resale product taken from stock.
    Name and unit price are snapshots taken at sale time.
    """

    class ItemType(models.TextChoices):
        RECIPE = "recipe", _("Recipe")
        PRODUCT = "product", _("Resale product")

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    item_type = models.CharField(max_length=10, choices=ItemType.choices, default=ItemType.RECIPE)
    recipe = models.ForeignKey(
        'costing.Recipe',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='order_items'
    )
    product = models.ForeignKey(
        'costing.Ingredient',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='order_items',
        help_text=_("Resale product; its stock is decreased by the sale")
    )
    product_name = models.CharField(max_length=150)
    quantity = models.DecimalField(max_digits=10, decimal_places=3, default=Decimal("1"))
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    total_price = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.quantity} x {self.product_name}"
