from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from core_backend.utils.archiving import SoftDeleteMixin, SoftDeleteQuerySet
from tenant.managers import TenantManager, TenantSoftDeleteManager
from costing.exceptions import ImmutableRecordError


class PackageUnit(models.TextChoices):
    """Units an ingredient can be bought in."""
    KG = "kg", _("Kilogram")
    G = "g", _("Gram")
    L = "l", _("Liter")
    ML = "ml", _("Milliliter")
    UN = "un", _("Unit")


class BaseUnit(models.TextChoices):
    """Canonical units every cost and recipe quantity is normalized to."""
    G = "g", _("Gram")
    ML = "ml", _("Milliliter")
    UN = "un", _("Unit")


class IngredientCategory(models.TextChoices):
    INGREDIENT = "ingredient", _("Ingredient")
    PACKAGING = "packaging", _("Packaging")
    PRODUCT = "product", _("Resale product")


class ItemType(models.TextChoices):
    INGREDIENT = "ingredient", _("Ingredient")
    RECIPE = "recipe", _("Base recipe")


class Ingredient(SoftDeleteMixin):
    """
    Something the business buys: a raw ingredient, packaging or a product
    resold as-is.

    ``cost_per_base_unit`` and ``base_unit`` are derived from the package
    fields by IngredientService and must never be edited directly. Recipes
    reference ingredients through RecipeItem; an ingredient that is still
    referenced cannot be deleted.
    """
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='ingredients'
    )
    name = models.CharField(max_length=150)
    category = models.CharField(
        max_length=20,
        choices=IngredientCategory.choices,
        default=IngredientCategory.INGREDIENT
    )

    # === PURCHASE PACKAGE ===
    package_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text=_("Price paid for one package")
    )
    package_quantity = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        help_text=_("Amount in one package, expressed in package_unit")
    )
    package_unit = models.CharField(
        max_length=5,
        choices=PackageUnit.choices,
        default=PackageUnit.KG
    )

    # === DERIVED ===
    base_unit = models.CharField(
        max_length=5,
        choices=BaseUnit.choices,
        default=BaseUnit.G,
        editable=False
    )
    cost_per_base_unit = models.DecimalField(
        max_digits=16,
        decimal_places=6,
        default=Decimal("0"),
        editable=False,
        help_text=_("Package price divided by package size in base units")
    )

    # === STOCK (base units) ===
    current_stock = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal("0")
    )
    min_stock = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal("0")
    )

    # === RESALE ===
    selling_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        help_text=_("Shelf price when sold as a product; default unit price at the register")
    )

    revision = models.PositiveIntegerField(
        default=1,
        help_text=_("Incremented on every edit; updates must quote the revision they started from")
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantSoftDeleteManager()
    all_objects = SoftDeleteQuerySet.as_manager()

    class Meta:
        verbose_name = _("Ingredient")
        verbose_name_plural = _("Ingredients")
        ordering = ['name']
        indexes = [
            models.Index(fields=['tenant', 'is_active']),
            models.Index(fields=['tenant', 'category']),
        ]

    def __str__(self):
        return self.name

    @property
    def is_low_stock(self):
        return self.current_stock < self.min_stock


class IngredientConversion(models.Model):
    """
    Household measure for one ingredient, e.g. "cup" = 120 (g of flour) or
    "un" = 395 (g for a can of condensed milk).
    """
    ingredient = models.ForeignKey(
        Ingredient,
        on_delete=models.CASCADE,
        related_name='conversions'
    )
    name = models.CharField(max_length=50)
    value = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        help_text=_("How many base units one of this measure holds")
    )

    class Meta:
        ordering = ['id']
        constraints = [
            models.UniqueConstraint(
                fields=['ingredient', 'name'],
                name='unique_conversion_name_per_ingredient'
            ),
        ]

    def __str__(self):
        return f"1 {self.name} = {self.value} {self.ingredient.base_unit}"


class Recipe(SoftDeleteMixin):
    """
    Bill of materials plus labor time for something the business produces.

    Cost columns are derived at write time (RecipeService / CascadePropagator)
    and cached here for display; they are never computed lazily on read:

        total_cost_final = material + labor + overhead
        unit_cost = total_cost_final / yield_quantity   (0 when yield <= 0)

    Base recipes (``is_base``) are intermediate goods such as a pastry cream;
    only base recipes may be used as items of other recipes.
    """
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='recipes'
    )
    name = models.CharField(max_length=150)
    is_base = models.BooleanField(
        default=False,
        help_text=_("Intermediate recipe usable as an ingredient of other recipes")
    )
    yield_quantity = models.DecimalField(
        max_digits=10,
        decimal_places=3,
        default=Decimal("1"),
        help_text=_("Number of units produced by one batch")
    )
    yield_unit = models.CharField(
        max_length=5,
        choices=PackageUnit.choices,
        default=PackageUnit.UN
    )
    preparation_time_minutes = models.PositiveIntegerField(default=0)
    preparation_method = models.TextField(blank=True)

    # === DERIVED COSTS ===
    total_cost_material = models.DecimalField(max_digits=12, decimal_places=4, default=Decimal("0"))
    total_cost_labor = models.DecimalField(max_digits=12, decimal_places=4, default=Decimal("0"))
    total_cost_overhead = models.DecimalField(max_digits=12, decimal_places=4, default=Decimal("0"))
    total_cost_final = models.DecimalField(max_digits=12, decimal_places=4, default=Decimal("0"))
    unit_cost = models.DecimalField(max_digits=12, decimal_places=4, default=Decimal("0"))

    selling_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True
    )

    revision = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantSoftDeleteManager()
    all_objects = SoftDeleteQuerySet.as_manager()

    COST_FIELDS = (
        'total_cost_material',
        'total_cost_labor',
        'total_cost_overhead',
        'total_cost_final',
        'unit_cost',
    )

    class Meta:
        verbose_name = _("Recipe")
        verbose_name_plural = _("Recipes")
        ordering = ['name']
        indexes = [
            models.Index(fields=['tenant', 'is_active']),
            models.Index(fields=['tenant', 'is_base']),
        ]

    def __str__(self):
        return self.name


class RecipeItem(models.Model):
    """
    One line of a recipe: either an ingredient or a base recipe, the quantity
    as typed by the operator and the same quantity resolved to base units.

    For base-recipe lines ``quantity_base`` is expressed in the sub-recipe's
    yield unit, so it multiplies directly with the sub-recipe's unit_cost.
    """
    recipe = models.ForeignKey(
        Recipe,
        on_delete=models.CASCADE,
        related_name='items'
    )
    item_type = models.CharField(
        max_length=20,
        choices=ItemType.choices,
        default=ItemType.INGREDIENT
    )
    ingredient = models.ForeignKey(
        Ingredient,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='recipe_items'
    )
    sub_recipe = models.ForeignKey(
        Recipe,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='used_in_items'
    )
    quantity_input = models.DecimalField(max_digits=12, decimal_places=4)
    unit_input = models.CharField(max_length=30, default="g")
    quantity_base = models.DecimalField(
        max_digits=14,
        decimal_places=4,
        help_text=_("Quantity in the referenced item's base unit, used for costing")
    )
    position = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['position', 'id']
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(item_type=ItemType.INGREDIENT, ingredient__isnull=False, sub_recipe__isnull=True)
                    | Q(item_type=ItemType.RECIPE, ingredient__isnull=True, sub_recipe__isnull=False)
                ),
                name='recipe_item_references_exactly_one',
            ),
        ]

    def __str__(self):
        return f"{self.quantity_input} {self.unit_input} {self.referenced_name}"

    @property
    def ref_id(self):
        return self.ingredient_id if self.item_type == ItemType.INGREDIENT else self.sub_recipe_id

    @property
    def referenced_name(self):
        if self.item_type == ItemType.INGREDIENT:
            return self.ingredient.name if self.ingredient_id else ""
        return self.sub_recipe.name if self.sub_recipe_id else ""


class PriceHistory(models.Model):
    """
    Append-only audit trail of unit cost and selling price changes.

    Rows are written by the cascade and by manual price edits, never edited
    or deleted afterwards.
    """
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='price_history'
    )
    recipe = models.ForeignKey(
        Recipe,
        on_delete=models.PROTECT,
        related_name='price_history'
    )
    old_unit_cost = models.DecimalField(max_digits=12, decimal_places=4)
    new_unit_cost = models.DecimalField(max_digits=12, decimal_places=4)
    old_selling_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    new_selling_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    reason = models.CharField(max_length=255)
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='price_changes'
    )
    changed_at = models.DateTimeField(default=timezone.now)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        verbose_name = _("Price History")
        verbose_name_plural = _("Price History")
        ordering = ['-changed_at', '-id']
        indexes = [
            models.Index(fields=['tenant', 'recipe', 'changed_at']),
        ]

    def __str__(self):
        return f"{self.recipe_id}: {self.old_unit_cost} -> {self.new_unit_cost} ({self.reason})"

    def save(self, *args, **kwargs):
        if self.pk is not None and not self._state.adding:
            raise ImmutableRecordError("Price history entries cannot be modified.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableRecordError("Price history entries cannot be deleted.")
