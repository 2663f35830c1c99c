from django.contrib import admin

from core_backend.admin.mixins import TenantAdminMixin
from .models import LedgerEntry


@admin.register(LedgerEntry)
class LedgerEntryAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = ("date", "kind", "description", "category", "amount", "order")
    list_filter = ("kind", "category", "date")
    search_fields = ("description", "category")
    readonly_fields = ("order", "created_by", "created_at")
