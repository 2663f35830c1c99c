from django.db import models
from django.core.exceptions import ValidationError
from decimal import Decimal
from tenant.managers import TenantManager


class GlobalSettings(models.Model):
    """
    Tenant-wide rates consumed by the costing engine and by settlement.

    This model contains ONLY:
    - Overhead calibration (fixed overhead rate, estimated monthly revenue)
    - Default tax rate used by the pricing simulator
    - Card acquirer fee rates (debit / credit)
    - Currency

    Labor cost per minute is not stored: it is derived from the Employee
    roster every time rates are loaded. Mutated only through
    settings.services.SettingsService.save_settings().
    """

    tenant = models.OneToOneField(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='global_settings'
    )

    # === OVERHEAD ===
    fixed_overhead_rate = models.DecimalField(
        max_digits=6,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Percentage applied to prime cost (material + labor) to cover fixed expenses."
    )
    estimated_monthly_revenue = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Expected monthly revenue, used only to suggest an overhead rate."
    )

    # === TAXES & FEES ===
    default_tax_rate = models.DecimalField(
        max_digits=6,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Tax percentage over the selling price (e.g., 4.5 for 4.5%)."
    )
    debit_fee_rate = models.DecimalField(
        max_digits=6,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Acquirer fee percentage on debit card sales."
    )
    credit_fee_rate = models.DecimalField(
        max_digits=6,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Acquirer fee percentage on credit card sales."
    )

    currency = models.CharField(
        max_length=3,
        default="BRL",
        help_text="Three-letter currency code (ISO 4217)."
    )

    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        verbose_name = "Global Settings"
        verbose_name_plural = "Global Settings"

    def clean(self):
        for field in ("fixed_overhead_rate", "default_tax_rate", "debit_fee_rate", "credit_fee_rate"):
            value = getattr(self, field)
            if value is not None and (value < 0 or value >= 100):
                raise ValidationError({field: "Rate must be between 0 and 100."})
        if self.estimated_monthly_revenue is not None and self.estimated_monthly_revenue < 0:
            raise ValidationError({"estimated_monthly_revenue": "Revenue cannot be negative."})

    def __str__(self):
        tenant_name = self.tenant.name if self.tenant_id else "System"
        return f"Global Settings ({tenant_name})"


class Employee(models.Model):
    """
    One line of the labor roster. The tenant's labor cost per minute is the
    sum of salary / (hours_monthly * 60) over all employees with hours.
    """

    settings = models.ForeignKey(
        GlobalSettings,
        on_delete=models.CASCADE,
        related_name='employees'
    )
    name = models.CharField(max_length=100)
    salary = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text="Monthly salary including charges."
    )
    hours_monthly = models.DecimalField(
        max_digits=6,
        decimal_places=2,
        help_text="Hours worked per month."
    )

    class Meta:
        ordering = ['id']

    def __str__(self):
        return self.name


class FixedCost(models.Model):
    """Monthly fixed expense (rent, utilities) used to suggest the overhead rate."""

    settings = models.ForeignKey(
        GlobalSettings,
        on_delete=models.CASCADE,
        related_name='fixed_costs'
    )
    name = models.CharField(max_length=100)
    monthly_value = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.name}: {self.monthly_value}"
