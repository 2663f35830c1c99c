from django.contrib import admin

from core_backend.admin.mixins import TenantAdminMixin
from .models import CashSession


@admin.register(CashSession)
class CashSessionAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = (
        "id",
        "operator",
        "status",
        "opened_at",
        "closed_at",
        "initial_balance",
        "calculated_balance",
        "final_balance",
        "get_discrepancy",
        "verified_at",
    )
    list_filter = ("status", "opened_at")
    search_fields = ("operator__email", "notes")
    readonly_fields = (
        "tenant",
        "operator",
        "status",
        "opened_at",
        "closed_at",
        "initial_balance",
        "calculated_balance",
        "final_balance",
        "closed_by",
        "verified_by",
        "verified_at",
    )

    def get_queryset(self, request):
        return CashSession.all_objects.select_related('tenant', 'operator')

    def get_discrepancy(self, obj):
        return obj.discrepancy

    get_discrepancy.short_description = "Discrepancy"

    def has_add_permission(self, request):
        # Sessions are opened from the register
        return False
