"""
Settings Service Layer

Business logic for the tenant's rate settings: loading (creating on first
access), explicit saves with the employee roster and fixed costs, and the
derived values the costing engine consumes.
"""
import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional

from django.db import transaction

from costing.services.rollup_service import CostingRates, cost_per_minute
from payments.money import safe_divide, quantize_places, HUNDRED, ZERO
from .models import GlobalSettings, Employee, FixedCost

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "fixed_overhead_rate",
    "estimated_monthly_revenue",
    "default_tax_rate",
    "debit_fee_rate",
    "credit_fee_rate",
    "currency",
)


class SettingsService:
    """
    Service layer for the per-tenant GlobalSettings singleton.

    Every method takes the tenant explicitly and queries through
    ``all_objects``, so it works the same inside a request, in a cascade or
    in a management shell.
    """

    @staticmethod
    def get_settings(tenant) -> GlobalSettings:
        """
        Get the tenant's GlobalSettings, creating a zeroed one on first access.
        """
        obj, created = GlobalSettings.all_objects.get_or_create(tenant=tenant)
        if created:
            logger.info(f"Created default settings for tenant {tenant.slug}")
        return obj

    @staticmethod
    @transaction.atomic
    def save_settings(
        tenant,
        data: Dict[str, Any],
        employees: Optional[Iterable[Dict[str, Any]]] = None,
        fixed_costs: Optional[Iterable[Dict[str, Any]]] = None,
    ) -> GlobalSettings:
        """
        Explicitly save rate settings.

        Args:
            tenant: Owning tenant
            data: Subset of the editable rate fields to update
            employees: When given, replaces the whole roster
            fixed_costs: When given, replaces the whole fixed cost list

        Raises:
            ValidationError: If any rate is out of range
        """
        instance = SettingsService.get_settings(tenant)

        for field in EDITABLE_FIELDS:
            if field in data:
                setattr(instance, field, data[field])

        instance.full_clean()
        instance.save()

        if employees is not None:
            instance.employees.all().delete()
            Employee.objects.bulk_create([
                Employee(
                    settings=instance,
                    name=row["name"],
                    salary=row["salary"],
                    hours_monthly=row["hours_monthly"],
                )
                for row in employees
            ])

        if fixed_costs is not None:
            instance.fixed_costs.all().delete()
            FixedCost.objects.bulk_create([
                FixedCost(settings=instance, name=row["name"], monthly_value=row["monthly_value"])
                for row in fixed_costs
            ])

        logger.info(f"Settings saved for tenant {tenant.slug}")
        return instance

    @staticmethod
    def cost_per_minute(tenant) -> Decimal:
        instance = SettingsService.get_settings(tenant)
        return cost_per_minute(instance.employees.all())

    @staticmethod
    def costing_rates(tenant) -> CostingRates:
        """The explicit rate bundle handed to every cost rollup."""
        instance = SettingsService.get_settings(tenant)
        return CostingRates(
            cost_per_minute=cost_per_minute(instance.employees.all()),
            fixed_overhead_rate=instance.fixed_overhead_rate,
        )

    @staticmethod
    def overhead_suggestion(tenant) -> Dict[str, Decimal]:
        """
        Suggest an overhead rate from the fixed cost list:
        total monthly fixed costs / estimated monthly revenue * 100.

        Zero revenue yields a zero suggestion rather than an error.
        """
        instance = SettingsService.get_settings(tenant)
        fixed_total = sum((cost.monthly_value for cost in instance.fixed_costs.all()), ZERO)
        suggested = safe_divide(fixed_total, instance.estimated_monthly_revenue) * HUNDRED

        return {
            "fixed_costs_total": fixed_total,
            "estimated_monthly_revenue": instance.estimated_monthly_revenue,
            "suggested_overhead_rate": quantize_places(suggested, 2),
            "current_overhead_rate": instance.fixed_overhead_rate,
        }
