"""
Cost rollup for a bill of materials.

Pure functions only: no database access, no settings lookups, no clock. The
caller resolves items, cost lookups and rates and passes them in, which keeps
the engine deterministic and trivially testable.

    material = sum(quantity_base * cost of referenced ingredient or base recipe)
    labor    = prep_minutes * cost_per_minute
    prime    = material + labor
    overhead = prime * fixed_overhead_rate / 100
    final    = prime + overhead
    unit     = final / yield   (0 when yield <= 0)

Decimal is used at every step; nothing is rounded until the result is
stored (see RollupResult.as_cost_fields).
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, List, Mapping, Optional

from payments.money import to_decimal, percentage_of, safe_divide, quantize_places, ZERO

INGREDIENT = "ingredient"
RECIPE = "recipe"


@dataclass(frozen=True)
class CostingRates:
    """Tenant-wide rates consumed by every rollup."""
    cost_per_minute: Decimal = ZERO
    fixed_overhead_rate: Decimal = ZERO


@dataclass(frozen=True)
class CostLine:
    """One resolved recipe line: what it references and how much, in base units."""
    item_type: str
    ref_id: Optional[int]
    quantity_base: Decimal
    label: str = ""
    is_packaging: bool = False


@dataclass
class LineCost:
    """Cost contribution of a single line."""
    line: CostLine
    unit_cost: Decimal
    extended_cost: Decimal
    orphaned: bool = False


@dataclass
class RollupResult:
    """Complete cost breakdown of a recipe."""
    material: Decimal
    labor: Decimal
    overhead: Decimal
    final: Decimal
    unit_cost: Decimal
    prime_cost: Decimal
    packaging_cost: Decimal = ZERO
    lines: List[LineCost] = field(default_factory=list)
    orphaned_items: List[CostLine] = field(default_factory=list)

    @property
    def has_orphans(self) -> bool:
        return bool(self.orphaned_items)

    def as_cost_fields(self) -> dict:
        """The five cached Recipe cost columns, rounded to storage precision."""
        return {
            "total_cost_material": quantize_places(self.material),
            "total_cost_labor": quantize_places(self.labor),
            "total_cost_overhead": quantize_places(self.overhead),
            "total_cost_final": quantize_places(self.final),
            "unit_cost": quantize_places(self.unit_cost),
        }


def cost_per_minute(employees: Iterable) -> Decimal:
    """
    Labor cost per minute of the whole roster.

    Sum over employees of salary / (hours_monthly * 60); employees without
    hours contribute nothing.

    Args:
        employees: objects (or mappings) with ``salary`` and ``hours_monthly``
    """
    total = ZERO
    for employee in employees:
        if isinstance(employee, Mapping):
            salary, hours = employee.get("salary"), employee.get("hours_monthly")
        else:
            salary, hours = employee.salary, employee.hours_monthly
        total += safe_divide(to_decimal(salary), to_decimal(hours) * 60)
    return total


def line_unit_cost(
    line: CostLine,
    ingredient_costs: Mapping[int, Decimal],
    base_recipe_costs: Mapping[int, Decimal],
) -> Optional[Decimal]:
    """Unit cost of whatever the line references, or None when it is gone."""
    lookup = base_recipe_costs if line.item_type == RECIPE else ingredient_costs
    if line.ref_id is None or line.ref_id not in lookup:
        return None
    return to_decimal(lookup[line.ref_id])


def rollup(
    items: Iterable[CostLine],
    ingredient_costs: Mapping[int, Decimal],
    base_recipe_costs: Mapping[int, Decimal],
    prep_minutes,
    yield_units,
    rates: CostingRates,
) -> RollupResult:
    """
    Roll a bill of materials up into material/labor/overhead/final/unit cost.

    Lines whose reference is missing from the lookups (deleted or archived
    ingredient, non-base or archived sub-recipe) contribute zero and are
    returned in ``orphaned_items`` with their quantities intact.
    """
    material = ZERO
    packaging = ZERO
    lines = []
    orphaned = []

    for line in items:
        unit_cost = line_unit_cost(line, ingredient_costs, base_recipe_costs)
        if unit_cost is None:
            orphaned.append(line)
            lines.append(LineCost(line=line, unit_cost=ZERO, extended_cost=ZERO, orphaned=True))
            continue

        extended = to_decimal(line.quantity_base) * unit_cost
        material += extended
        if line.is_packaging:
            packaging += extended
        lines.append(LineCost(line=line, unit_cost=unit_cost, extended_cost=extended))

    labor = to_decimal(prep_minutes) * to_decimal(rates.cost_per_minute)
    prime = material + labor
    overhead = percentage_of(prime, rates.fixed_overhead_rate)
    final = prime + overhead
    unit = safe_divide(final, yield_units)

    return RollupResult(
        material=material,
        labor=labor,
        overhead=overhead,
        final=final,
        unit_cost=unit,
        prime_cost=prime,
        packaging_cost=packaging,
        lines=lines,
        orphaned_items=orphaned,
    )
