"""
Django admin configuration for costing models.
"""
from django.contrib import admin

from core_backend.admin.mixins import TenantAdminMixin, ArchivingAdminMixin
from costing.models import Ingredient, IngredientConversion, Recipe, RecipeItem, PriceHistory


class IngredientConversionInline(admin.TabularInline):
    model = IngredientConversion
    extra = 0


class RecipeItemInline(admin.TabularInline):
    model = RecipeItem
    fk_name = 'recipe'
    extra = 0
    fields = ['position', 'item_type', 'ingredient', 'sub_recipe', 'quantity_input', 'unit_input', 'quantity_base']
    readonly_fields = ['quantity_base']
    raw_id_fields = ['ingredient', 'sub_recipe']


@admin.register(Ingredient)
class IngredientAdmin(TenantAdminMixin, ArchivingAdminMixin, admin.ModelAdmin):
    list_display = ['name', 'category', 'package_price', 'package_quantity', 'package_unit',
                    'cost_per_base_unit', 'base_unit', 'current_stock', 'is_active']
    list_filter = ['category', 'is_active']
    search_fields = ['name']
    readonly_fields = ['base_unit', 'cost_per_base_unit', 'revision', 'created_at', 'updated_at']
    inlines = [IngredientConversionInline]
    ordering = ['name']


@admin.register(Recipe)
class RecipeAdmin(TenantAdminMixin, ArchivingAdminMixin, admin.ModelAdmin):
    """
    Cost columns are read-only here: they are only written by the costing
    services, which also keep price history and dependents in sync.
    """
    list_display = ['name', 'is_base', 'yield_quantity', 'yield_unit', 'unit_cost', 'selling_price', 'is_active']
    list_filter = ['is_base', 'is_active']
    search_fields = ['name']
    readonly_fields = list(Recipe.COST_FIELDS) + ['revision', 'created_at', 'updated_at']
    inlines = [RecipeItemInline]
    ordering = ['name']


@admin.register(PriceHistory)
class PriceHistoryAdmin(TenantAdminMixin, admin.ModelAdmin):
    """Append-only: no add, change or delete from the admin."""
    list_display = ['recipe', 'old_unit_cost', 'new_unit_cost', 'old_selling_price',
                    'new_selling_price', 'reason', 'changed_by', 'changed_at']
    search_fields = ['recipe__name', 'reason']
    ordering = ['-changed_at']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
