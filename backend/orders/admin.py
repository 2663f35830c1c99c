from django.contrib import admin

from core_backend.admin.mixins import TenantAdminMixin
from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    fields = ("item_type", "product_name", "quantity", "unit_price", "total_price")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = (
        "display_number",
        "session",
        "cashier",
        "payment_method",
        "total_amount",
        "fee_amount",
        "net_amount",
        "created_at",
    )
    list_filter = ("payment_method", "status", "created_at")
    search_fields = ("id", "payment_method_label", "cashier__email")
    readonly_fields = (
        "tenant",
        "session",
        "cashier",
        "status",
        "total_amount",
        "discount",
        "change_amount",
        "payment_method",
        "payment_method_label",
        "fee_amount",
        "net_amount",
        "created_at",
    )
    inlines = [OrderItemInline]

    def has_add_permission(self, request):
        # Sales are recorded at the register
        return False
