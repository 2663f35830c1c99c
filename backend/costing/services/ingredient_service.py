"""
Ingredient write operations.

Saving an ingredient re-derives its base unit and cost per base unit from the
purchase package. When the cost per base unit moves, every recipe using the
ingredient is recosted through the cascade.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from payments.money import to_decimal, quantize_places
from costing.exceptions import (
    IngredientValidationError,
    IngredientInUseError,
    RevisionConflictError,
    UnitMappingError,
)
from costing.models import Ingredient, IngredientConversion, IngredientCategory, Recipe
from costing.services.conversion_service import ConversionService
from costing.services.cascade_service import CascadePropagator, CascadeResult

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "name",
    "category",
    "package_price",
    "package_quantity",
    "package_unit",
    "current_stock",
    "min_stock",
    "selling_price",
)

COST_PER_BASE_UNIT_PLACES = 6


@dataclass
class IngredientSaveResult:
    ingredient: Ingredient
    created: bool
    cost_changed: bool = False
    cascade: Optional[CascadeResult] = None


def _number(errors, field, value, minimum=Decimal("0"), strict=False):
    try:
        number = to_decimal(value)
    except ValueError:
        errors[field] = "Must be a number."
        return None
    if strict and number <= minimum:
        errors[field] = f"Must be greater than {minimum}."
    elif number < minimum:
        errors[field] = f"Must be at least {minimum}."
    return number


class IngredientService:

    @staticmethod
    def validate(data: Dict[str, Any], instance: Optional[Ingredient] = None) -> Dict[str, str]:
        """
        Field -> message dict of everything wrong with ``data``.

        On updates, fields missing from ``data`` fall back to the instance.
        """
        def value(field, default=None):
            if field in data:
                return data[field]
            return getattr(instance, field) if instance is not None else default

        errors = {}
        if not str(value("name") or "").strip():
            errors["name"] = "Name is required."

        if value("category", IngredientCategory.INGREDIENT) not in IngredientCategory.values:
            errors["category"] = "Unknown category."

        if value("package_price") is None:
            errors["package_price"] = "Package price is required."
        else:
            _number(errors, "package_price", value("package_price"))

        if value("package_quantity") is None:
            errors["package_quantity"] = "Package quantity is required."
        else:
            _number(errors, "package_quantity", value("package_quantity"), strict=True)

        try:
            ConversionService.base_unit_for(value("package_unit", "kg"))
        except UnitMappingError as exc:
            errors["package_unit"] = str(exc)

        _number(errors, "current_stock", value("current_stock", 0))
        _number(errors, "min_stock", value("min_stock", 0))
        if value("selling_price") not in (None, ""):
            _number(errors, "selling_price", value("selling_price"))

        conversions = data.get("conversions")
        if conversions is not None:
            seen = set()
            for index, row in enumerate(conversions):
                name = str(row.get("name") or "").strip().lower()
                if not name:
                    errors[f"conversions[{index}].name"] = "Measure name is required."
                elif name in seen:
                    errors[f"conversions[{index}].name"] = "Duplicate measure name."
                seen.add(name)
                _number(errors, f"conversions[{index}].value", row.get("value"), strict=True)

        return errors

    @staticmethod
    def save_ingredient(
        tenant,
        data: Dict[str, Any],
        instance: Optional[Ingredient] = None,
        expected_revision: Optional[int] = None,
        user=None,
        clock=timezone.now,
    ) -> IngredientSaveResult:
        """
        Create or update an ingredient and propagate cost changes.

        Args:
            tenant: Owning tenant
            data: Editable fields, optionally ``conversions`` as a list of
                {"name", "value"} rows replacing the household measures
            instance: Ingredient to update; None creates a new one
            expected_revision: Revision the caller's copy was read at
            user: Operator stamped on any price history written
            clock: Injectable "now" for the cascade

        Raises:
            IngredientValidationError: If any field is invalid
            RevisionConflictError: If the row changed since it was read
        """
        errors = IngredientService.validate(data, instance)
        if errors:
            raise IngredientValidationError(errors)

        with transaction.atomic():
            created = instance is None
            if created:
                ingredient = Ingredient(tenant=tenant)
                old_cost = None
            else:
                ingredient = Ingredient.all_objects.select_for_update().get(pk=instance.pk, tenant=tenant)
                if expected_revision is not None and int(expected_revision) != ingredient.revision:
                    raise RevisionConflictError(ingredient, expected_revision)
                old_cost = ingredient.cost_per_base_unit
                ingredient.revision += 1

            for field in EDITABLE_FIELDS:
                if field in data:
                    setattr(ingredient, field, data[field])

            base_cost = ConversionService.base_cost(
                ingredient.package_price,
                ingredient.package_quantity,
                ingredient.package_unit,
            )
            ingredient.base_unit = base_cost.base_unit
            ingredient.cost_per_base_unit = quantize_places(base_cost.cost_per_base_unit, COST_PER_BASE_UNIT_PLACES)
            if ingredient.selling_price in (None, ""):
                ingredient.selling_price = None
            else:
                ingredient.selling_price = quantize_places(ingredient.selling_price, 2)
            ingredient.save()

            if data.get("conversions") is not None:
                IngredientService.replace_conversions(ingredient, data["conversions"])

            result = IngredientSaveResult(ingredient=ingredient, created=created)
            if old_cost is not None and old_cost != ingredient.cost_per_base_unit:
                result.cost_changed = True
                logger.info(
                    f"Ingredient '{ingredient.name}' cost per {ingredient.base_unit} "
                    f"{old_cost} -> {ingredient.cost_per_base_unit}"
                )
                result.cascade = CascadePropagator(tenant, user=user, clock=clock).on_ingredient_or_base_changed(
                    ingredient,
                    reason=f"Ingredient price update: {ingredient.name}",
                )

        return result

    @staticmethod
    def replace_conversions(ingredient: Ingredient, rows: Iterable[Dict[str, Any]]):
        ingredient.conversions.all().delete()
        IngredientConversion.objects.bulk_create([
            IngredientConversion(ingredient=ingredient, name=row["name"].strip(), value=row["value"])
            for row in rows
        ])

    @staticmethod
    def recipes_using(ingredient: Ingredient):
        return (
            Recipe.all_objects
            .filter(tenant=ingredient.tenant_id, is_active=True, items__ingredient=ingredient)
            .distinct()
            .order_by('name')
        )

    @staticmethod
    def delete_ingredient(ingredient: Ingredient, user=None):
        """
        Archive an ingredient that no active recipe uses.

        Raises:
            IngredientInUseError: If any active recipe still references it
        """
        names = list(IngredientService.recipes_using(ingredient).values_list('name', flat=True))
        if names:
            raise IngredientInUseError(ingredient, names)

        ingredient.archive(archived_by=user)
        logger.info(f"Archived ingredient '{ingredient.name}' (id={ingredient.pk})")

    @staticmethod
    def low_stock(tenant):
        return Ingredient.all_objects.filter(
            tenant=tenant,
            is_active=True,
            current_stock__lt=F('min_stock'),
        ).order_by('name')

    @staticmethod
    def deduct_stock(ingredient_id, quantity):
        """Decrease stock atomically at the database level. Stock may go negative."""
        Ingredient.all_objects.filter(pk=ingredient_id).update(
            current_stock=F('current_stock') - to_decimal(quantity),
            updated_at=timezone.now(),
        )
