"""
Unit conversion service for costing.

Normalizes purchase packages and recipe quantities into base units:
mass -> grams, volume -> milliliters, count -> units. The standard
multipliers are exact integers (1 or 1000), so no precision is lost.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Mapping, Optional, Union

from payments.money import to_decimal, safe_divide
from costing.exceptions import UnitMappingError

# canonical code -> (multiplier to base, base unit)
STANDARD_UNITS = {
    "kg": (Decimal("1000"), "g"),
    "g": (Decimal("1"), "g"),
    "l": (Decimal("1000"), "ml"),
    "ml": (Decimal("1"), "ml"),
    "un": (Decimal("1"), "un"),
}

UNIT_STRING_MAPPINGS = {
    # mass
    "kilo": "kg",
    "kilos": "kg",
    "kilogram": "kg",
    "kilograms": "kg",
    "kilograma": "kg",
    "kilogramas": "kg",
    "gram": "g",
    "grams": "g",
    "grama": "g",
    "gramas": "g",
    "gr": "g",
    # volume
    "lt": "l",
    "liter": "l",
    "liters": "l",
    "litre": "l",
    "litro": "l",
    "litros": "l",
    "milliliter": "ml",
    "milliliters": "ml",
    "mililitro": "ml",
    "mililitros": "ml",
    # count
    "u": "un",
    "und": "un",
    "unit": "un",
    "units": "un",
    "unidade": "un",
    "unidades": "un",
    "each": "un",
}

MISSING_CONVERSION = "missing_conversion"


@dataclass(frozen=True)
class BaseCost:
    """Cost of one base unit of a purchased package."""
    cost_per_base_unit: Decimal
    base_unit: str
    total_base_units: Decimal


@dataclass(frozen=True)
class ConvertedQuantity:
    """
    A recipe quantity resolved to base units.

    ``converted`` is False when no conversion applied and the raw quantity was
    kept as-is; ``warning`` then says why so the line can be flagged.
    """
    quantity: Decimal
    converted: bool = True
    warning: Optional[str] = None


ConversionTable = Union[Mapping[str, Decimal], Iterable]


def normalize_unit(unit_string: str) -> Optional[str]:
    """
    Map a unit string to its canonical code ('kg', 'g', 'l', 'ml', 'un').

    Returns None for strings that are not standard units (they may still be
    an ingredient's household measure, e.g. 'xícara').
    """
    if not unit_string:
        return None
    normalized = unit_string.strip().lower()
    if normalized in STANDARD_UNITS:
        return normalized
    return UNIT_STRING_MAPPINGS.get(normalized)


def _conversion_value(conversions: ConversionTable, unit_string: str) -> Optional[Decimal]:
    """Case-insensitive lookup of a household measure by name."""
    if not conversions:
        return None
    wanted = unit_string.strip().lower()

    if isinstance(conversions, dict):
        entries = conversions.items()
    else:
        entries = ((c.name, c.value) for c in conversions)

    for name, value in entries:
        if name.strip().lower() == wanted:
            return to_decimal(value)
    return None


class ConversionService:
    """
    Service for converting purchase packages and recipe quantities.

    Stateless: every method is a static function of its arguments.
    """

    @staticmethod
    def base_unit_for(package_unit: str) -> str:
        code = normalize_unit(package_unit)
        if code is None:
            raise UnitMappingError(package_unit)
        return STANDARD_UNITS[code][1]

    @staticmethod
    def base_cost(price, package_quantity, package_unit: str) -> BaseCost:
        """
        Cost per base unit of a purchased package.

        A package of zero (or negative) size costs exactly 0 per base unit.

        Examples:
            R$20.00 for 1 kg  -> 0.02 per g
            R$6.00 for 1 l    -> 0.006 per ml

        Raises:
            UnitMappingError: If ``package_unit`` is not a known unit.
        """
        code = normalize_unit(package_unit)
        if code is None:
            raise UnitMappingError(package_unit)

        multiplier, base_unit = STANDARD_UNITS[code]
        total_base_units = to_decimal(package_quantity) * multiplier
        cost = safe_divide(to_decimal(price), total_base_units)

        return BaseCost(
            cost_per_base_unit=cost,
            base_unit=base_unit,
            total_base_units=total_base_units,
        )

    @staticmethod
    def to_base_quantity(
        quantity,
        unit: str,
        base_unit: Optional[str] = None,
        conversions: ConversionTable = (),
    ) -> ConvertedQuantity:
        """
        Resolve a quantity typed in ``unit`` to the ingredient's base unit.

        Resolution order:
        1. Standard unit of the same family as ``base_unit`` (kg -> g x1000)
        2. Household measure from ``conversions`` (name match, case-insensitive)
        3. Raw quantity, unconverted, flagged with a missing_conversion warning

        When ``base_unit`` is None any standard unit is accepted.
        """
        quantity = to_decimal(quantity)
        code = normalize_unit(unit)

        if code is not None:
            multiplier, family = STANDARD_UNITS[code]
            if base_unit is None or family == base_unit:
                return ConvertedQuantity(quantity=quantity * multiplier)

        value = _conversion_value(conversions, unit or "")
        if value is not None:
            return ConvertedQuantity(quantity=quantity * value)

        return ConvertedQuantity(quantity=quantity, converted=False, warning=MISSING_CONVERSION)

    @staticmethod
    def to_yield_quantity(quantity, unit: str, yield_unit: str) -> ConvertedQuantity:
        """
        Express a quantity of a base recipe in that recipe's yield unit.

        A cream yielding 2 kg has a unit_cost per kg, so 500 g of it is
        0.5 yield units. Units of a different family cannot be related and
        are kept raw with a warning.
        """
        quantity = to_decimal(quantity)
        code = normalize_unit(unit)
        yield_code = normalize_unit(yield_unit) or "un"

        if code is None:
            return ConvertedQuantity(quantity=quantity, converted=False, warning=MISSING_CONVERSION)

        multiplier, family = STANDARD_UNITS[code]
        yield_multiplier, yield_family = STANDARD_UNITS[yield_code]
        if family != yield_family:
            return ConvertedQuantity(quantity=quantity, converted=False, warning=MISSING_CONVERSION)

        return ConvertedQuantity(quantity=quantity * multiplier / yield_multiplier)
