"""
Custom exceptions for the costing system.
"""
from rest_framework import status

from core_backend.exceptions import DomainError


class CostingError(DomainError):
    """Costing operation failed."""
    code = "COSTING_ERROR"


class UnitMappingError(CostingError):
    """Raised when a unit string cannot be mapped to a known unit."""
    code = "UNKNOWN_UNIT"

    def __init__(self, unit_string, message=None):
        self.unit_string = unit_string
        if message is None:
            message = f"Cannot map unit string '{unit_string}' to a known unit"
        super().__init__(message, details={"unit": unit_string})


class RecipeValidationError(CostingError):
    """Recipe data is invalid."""
    code = "RECIPE_INVALID"

    def __init__(self, errors, message=None):
        self.errors = errors
        super().__init__(message or "Recipe data is invalid.", details=errors)


class IngredientValidationError(CostingError):
    """Ingredient data is invalid."""
    code = "INGREDIENT_INVALID"

    def __init__(self, errors, message=None):
        self.errors = errors
        super().__init__(message or "Ingredient data is invalid.", details=errors)


class RevisionConflictError(CostingError):
    """Raised when an update was based on a stale copy of the record."""
    code = "REVISION_CONFLICT"
    http_status = status.HTTP_409_CONFLICT

    def __init__(self, instance, expected_revision):
        self.instance = instance
        self.expected_revision = expected_revision
        self.current_revision = instance.revision
        message = (
            f"'{instance}' was modified by someone else "
            f"(expected revision {expected_revision}, current {instance.revision}). Reload and try again."
        )
        super().__init__(message, details={
            "expected_revision": expected_revision,
            "current_revision": instance.revision,
        })


class CyclicRecipeError(CostingError):
    """Raised when a recipe would (directly or transitively) contain itself."""
    code = "CYCLIC_RECIPE"

    def __init__(self, cycle, message=None):
        self.cycle = list(cycle)
        if message is None:
            path = " -> ".join(str(recipe_id) for recipe_id in self.cycle)
            message = f"Cyclic recipe dependency detected: {path}"
        super().__init__(message, details={"cycle": self.cycle})


class IngredientInUseError(CostingError):
    """Raised when deleting an ingredient still referenced by recipes."""
    code = "INGREDIENT_IN_USE"
    http_status = status.HTTP_409_CONFLICT

    def __init__(self, ingredient, recipe_names):
        self.ingredient = ingredient
        self.recipe_names = list(recipe_names)
        message = f"'{ingredient.name}' is used by {len(self.recipe_names)} recipe(s) and cannot be deleted"
        super().__init__(message, details={"recipes": self.recipe_names})


class RecipeInUseError(CostingError):
    """Raised when deleting a base recipe still used by other recipes."""
    code = "RECIPE_IN_USE"
    http_status = status.HTTP_409_CONFLICT

    def __init__(self, recipe, recipe_names):
        self.recipe = recipe
        self.recipe_names = list(recipe_names)
        message = f"'{recipe.name}' is used by {len(self.recipe_names)} recipe(s) and cannot be deleted"
        super().__init__(message, details={"recipes": self.recipe_names})


class PricingError(CostingError):
    """Raised when taxes and fees leave no room for a selling price."""
    code = "PRICING_IMPOSSIBLE"


class ImmutableRecordError(CostingError):
    """Raised on attempts to edit or delete an append-only audit record."""
    code = "IMMUTABLE_RECORD"
