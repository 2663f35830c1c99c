from django.contrib import admin

from .models import GlobalSettings, Employee, FixedCost
from core_backend.admin.mixins import TenantAdminMixin


class EmployeeInline(admin.TabularInline):
    model = Employee
    extra = 0


class FixedCostInline(admin.TabularInline):
    model = FixedCost
    extra = 0


@admin.register(GlobalSettings)
class GlobalSettingsAdmin(TenantAdminMixin, admin.ModelAdmin):
    """
    Admin view for the per-tenant GlobalSettings singleton, with the labor
    roster and fixed costs inline.
    """

    fieldsets = (
        (
            "Overhead",
            {
                "fields": ("fixed_overhead_rate", "estimated_monthly_revenue"),
                "description": "Overhead rate applied to prime cost in every recipe rollup."
            },
        ),
        (
            "Taxes & Card Fees",
            {
                "fields": ("currency", "default_tax_rate", "debit_fee_rate", "credit_fee_rate"),
                "description": "Used by the pricing simulator and by sale fee recording."
            },
        ),
    )
    inlines = [EmployeeInline, FixedCostInline]

    list_display = ("id", "tenant", "currency", "fixed_overhead_rate", "default_tax_rate", "updated_at")
    list_filter = ("currency",)
    search_fields = ("tenant__name",)

    def get_queryset(self, request):
        return GlobalSettings.all_objects.select_related('tenant')

    def has_add_permission(self, request):
        # Created automatically with each tenant
        return False

    def has_delete_permission(self, request, obj=None):
        return False
