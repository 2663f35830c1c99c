"""
Cascade propagation of cost changes.

When an ingredient price or a base recipe's unit cost changes, every recipe
that uses it directly is recosted. Recosting a base recipe raises its own
change event, so deeper chains are reached transitively, one hop at a time.

Per affected recipe: unaffected -> evaluating -> (unchanged | recosted).

Each recipe is recosted inside its own savepoint. A recipe that fails is
rolled back alone and reported in ``CascadeResult.failures``; its siblings
are still processed.
"""
import logging
from collections import deque
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, List, Optional

from django.conf import settings as django_settings
from django.db import transaction
from django.utils import timezone

from payments.money import within_tolerance
from costing.models import Ingredient, Recipe, PriceHistory, ItemType
from costing.services.resolution_service import RecipeCostResolver
from costing.services.rollup_service import CostingRates

logger = logging.getLogger(__name__)

UNCHANGED = "unchanged"
RECOSTED = "recosted"


@dataclass
class RecostOutcome:
    recipe_id: int
    recipe_name: str
    old_unit_cost: Decimal
    new_unit_cost: Decimal
    status: str
    depth: int = 1
    history_id: Optional[int] = None

    @property
    def changed(self) -> bool:
        return self.status == RECOSTED


@dataclass
class CascadeFailure:
    """A recipe that could not be recosted. Recorded, never raised."""
    recipe_id: int
    recipe_name: str
    error: str


@dataclass
class CascadeResult:
    trigger: str
    outcomes: List[RecostOutcome] = field(default_factory=list)
    failures: List[CascadeFailure] = field(default_factory=list)
    depth_limited: bool = False

    @property
    def recosted(self) -> List[RecostOutcome]:
        return [o for o in self.outcomes if o.changed]

    @property
    def unchanged(self) -> List[RecostOutcome]:
        return [o for o in self.outcomes if not o.changed]

    @property
    def ok(self) -> bool:
        return not self.failures

    def as_dict(self) -> dict:
        return {
            "trigger": self.trigger,
            "recosted": [
                {
                    "recipe_id": o.recipe_id,
                    "recipe_name": o.recipe_name,
                    "old_unit_cost": o.old_unit_cost,
                    "new_unit_cost": o.new_unit_cost,
                    "status": o.status,
                }
                for o in self.outcomes
            ],
            "failures": [
                {"recipe_id": f.recipe_id, "recipe_name": f.recipe_name, "error": f.error}
                for f in self.failures
            ],
            "depth_limited": self.depth_limited,
        }


def _entity_key(entity):
    kind = "ingredient" if isinstance(entity, Ingredient) else "recipe"
    return kind, entity.pk


class CascadePropagator:
    """
    Re-derives costs of every recipe depending on a changed ingredient or
    base recipe and appends PriceHistory rows for material changes.

    Args:
        tenant: Owning tenant
        user: Operator stamped on history rows (optional)
        clock: Callable returning "now"; injectable for tests
        rates: CostingRates; loaded from the tenant's settings when omitted
        tolerance: Unit cost moves at or below this are ignored
        max_depth: Maximum number of base-recipe hops followed
    """

    def __init__(
        self,
        tenant,
        user=None,
        clock: Callable = timezone.now,
        rates: Optional[CostingRates] = None,
        tolerance: Optional[Decimal] = None,
        max_depth: Optional[int] = None,
    ):
        if rates is None:
            from settings.services import SettingsService
            rates = SettingsService.costing_rates(tenant)

        self.tenant = tenant
        self.user = user
        self.clock = clock
        self.resolver = RecipeCostResolver(tenant, rates)
        self.tolerance = tolerance if tolerance is not None else django_settings.COSTING_CASCADE_TOLERANCE
        self.max_depth = max_depth if max_depth is not None else django_settings.COSTING_MAX_CASCADE_DEPTH

    def affected_recipes(self, entity):
        """Active recipes whose lines reference ``entity`` directly (one hop)."""
        if isinstance(entity, Ingredient):
            line_filter = {"items__item_type": ItemType.INGREDIENT, "items__ingredient": entity}
        else:
            line_filter = {"items__item_type": ItemType.RECIPE, "items__sub_recipe": entity}

        return (
            Recipe.all_objects
            .filter(tenant=self.tenant, is_active=True, **line_filter)
            .distinct()
            .order_by('id')
        )

    def on_ingredient_or_base_changed(self, entity, reason: Optional[str] = None) -> CascadeResult:
        """
        Propagate a change of ``entity`` (Ingredient or base Recipe).

        Args:
            entity: The changed ingredient or base recipe
            reason: History reason; defaults to "Cost update: <name> changed"

        Returns:
            CascadeResult with one outcome per evaluated recipe, the
            collected failures and whether the depth bound was hit
        """
        root_key = _entity_key(entity)
        result = CascadeResult(trigger=f"{root_key[0]}:{entity.name}")

        queue = deque([(entity, 0)])
        pending = {root_key}

        while queue:
            changed, depth = queue.popleft()
            pending.discard(_entity_key(changed))

            if depth >= self.max_depth:
                result.depth_limited = True
                logger.warning(
                    f"Cascade from {result.trigger} stopped at depth {depth} "
                    f"(possible cyclic base recipes around '{changed.name}')"
                )
                continue

            history_reason = reason or f"Cost update: {changed.name} changed"

            for recipe in self.affected_recipes(changed):
                outcome = self._recost_isolated(recipe, history_reason, depth + 1, result)
                if outcome is None or not outcome.changed:
                    continue

                if recipe.is_base:
                    key = _entity_key(recipe)
                    if key not in pending:
                        pending.add(key)
                        queue.append((Recipe.all_objects.get(pk=recipe.pk), depth + 1))

        logger.info(
            f"Cascade from {result.trigger}: {len(result.recosted)} recosted, "
            f"{len(result.unchanged)} unchanged, {len(result.failures)} failed"
        )
        return result

    def _recost_isolated(self, recipe, reason, depth, result) -> Optional[RecostOutcome]:
        try:
            with transaction.atomic():
                outcome = self.recost_recipe(recipe, reason)
        except Exception as exc:
            logger.exception(f"Failed to recost recipe {recipe.pk} ('{recipe.name}') during cascade")
            result.failures.append(CascadeFailure(recipe_id=recipe.pk, recipe_name=recipe.name, error=str(exc)))
            return None

        outcome.depth = depth
        result.outcomes.append(outcome)
        return outcome

    def recost_recipe(self, recipe, reason: str) -> RecostOutcome:
        """
        Recompute one recipe and persist it when the unit cost moved by more
        than the tolerance. Selling price is never touched.

        Must run inside a transaction: the recipe row is locked while it is
        rewritten.
        """
        recipe = Recipe.all_objects.select_for_update().get(pk=recipe.pk)
        costs = self.resolver.cost(recipe).as_cost_fields()

        old_unit_cost = recipe.unit_cost
        new_unit_cost = costs["unit_cost"]

        if within_tolerance(old_unit_cost, new_unit_cost, self.tolerance):
            return RecostOutcome(
                recipe_id=recipe.pk,
                recipe_name=recipe.name,
                old_unit_cost=old_unit_cost,
                new_unit_cost=old_unit_cost,
                status=UNCHANGED,
            )

        for name, value in costs.items():
            setattr(recipe, name, value)
        recipe.save(update_fields=list(costs) + ['updated_at'])

        history = PriceHistory.all_objects.create(
            tenant=self.tenant,
            recipe=recipe,
            old_unit_cost=old_unit_cost,
            new_unit_cost=new_unit_cost,
            old_selling_price=recipe.selling_price,
            new_selling_price=recipe.selling_price,
            reason=reason[:255],
            changed_by=self.user,
            changed_at=self.clock(),
        )

        logger.info(f"Recosted '{recipe.name}': unit cost {old_unit_cost} -> {new_unit_cost}")
        return RecostOutcome(
            recipe_id=recipe.pk,
            recipe_name=recipe.name,
            old_unit_cost=old_unit_cost,
            new_unit_cost=new_unit_cost,
            status=RECOSTED,
            history_id=history.pk,
        )
