"""
Pricing simulator.

Both modes use the same identity:

    price = cost / (1 - (tax% + card_fee% + margin%) / 100)

Margin-driven mode solves the price; price-driven mode solves the margin.
Requested margins are clamped to ``safe_margin_limit`` so the denominator
stays strictly positive.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from payments.money import (
    to_decimal,
    quantize,
    quantize_places,
    percentage_of,
    HUNDRED,
    ONE,
    ZERO,
)
from costing.exceptions import PricingError

# Headroom kept below the 100% boundary
SAFETY_BUFFER = Decimal("1")
NO_MARGIN = Decimal("-100")


@dataclass(frozen=True)
class PriceBreakdown:
    """Where a selling price goes. tax + fee + profit + cost == price."""
    price: Decimal
    cost: Decimal
    tax_amount: Decimal
    fee_amount: Decimal
    profit: Decimal


@dataclass(frozen=True)
class PriceSimulation:
    cost: Decimal
    price: Decimal
    exact_price: Decimal
    margin: Decimal
    requested_margin: Optional[Decimal]
    margin_clamped: bool
    safe_margin_limit: Decimal
    breakdown: PriceBreakdown


@dataclass(frozen=True)
class UnitCostSplit:
    """Per-unit share of each cost component of a recipe."""
    material: Decimal
    labor: Decimal
    overhead: Decimal
    total: Decimal


class PricingSimulator:
    """
    Args:
        tax_rate: Tax percentage over the selling price
        card_fee_rate: Card acquirer fee percentage over the selling price
        currency: Currency used to round suggested prices
    """

    def __init__(self, tax_rate=ZERO, card_fee_rate=ZERO, currency: str = "BRL"):
        self.tax_rate = to_decimal(tax_rate)
        self.card_fee_rate = to_decimal(card_fee_rate)
        self.currency = currency

    @classmethod
    def for_tenant(cls, tenant, tax_rate=None, card_fee_rate=None) -> "PricingSimulator":
        """Simulator using the tenant's default tax and credit fee unless overridden."""
        from settings.services import SettingsService

        settings = SettingsService.get_settings(tenant)
        return cls(
            tax_rate=settings.default_tax_rate if tax_rate is None else tax_rate,
            card_fee_rate=settings.credit_fee_rate if card_fee_rate is None else card_fee_rate,
            currency=settings.currency,
        )

    @property
    def deductions_rate(self) -> Decimal:
        return self.tax_rate + self.card_fee_rate

    @property
    def safe_margin_limit(self) -> Decimal:
        """Highest margin that keeps tax + fee + margin at most 99%."""
        return max(ZERO, HUNDRED - SAFETY_BUFFER - self.deductions_rate)

    def breakdown(self, cost, price) -> PriceBreakdown:
        price = to_decimal(price)
        cost = to_decimal(cost)
        tax_amount = quantize(self.currency, percentage_of(price, self.tax_rate))
        fee_amount = quantize(self.currency, percentage_of(price, self.card_fee_rate))
        return PriceBreakdown(
            price=price,
            cost=cost,
            tax_amount=tax_amount,
            fee_amount=fee_amount,
            profit=price - cost - tax_amount - fee_amount,
        )

    def price_for_margin(self, cost, margin) -> PriceSimulation:
        """
        Suggested selling price for a desired margin.

        Raises:
            PricingError: When taxes and fees alone reach 100% of the price.
        """
        cost = to_decimal(cost)
        requested = to_decimal(margin)
        limit = self.safe_margin_limit

        applied = min(requested, limit)
        denominator = ONE - (self.deductions_rate + applied) / HUNDRED
        if denominator <= 0:
            raise PricingError(
                f"Tax ({self.tax_rate}%) and card fee ({self.card_fee_rate}%) leave no room for a price."
            )

        exact_price = cost / denominator
        price = quantize(self.currency, exact_price)

        return PriceSimulation(
            cost=cost,
            price=price,
            exact_price=exact_price,
            margin=applied,
            requested_margin=requested,
            margin_clamped=requested > limit,
            safe_margin_limit=limit,
            breakdown=self.breakdown(cost, price),
        )

    def margin_for_price(self, cost, price) -> Decimal:
        """
        Realized margin (%) of selling at ``price``:
        (1 - cost/price - (tax + fee)/100) * 100.

        A price at or below zero yields exactly -100.
        """
        price = to_decimal(price)
        if price <= 0:
            return NO_MARGIN
        cost = to_decimal(cost)
        return (ONE - cost / price - self.deductions_rate / HUNDRED) * HUNDRED

    def evaluate_price(self, cost, price) -> PriceSimulation:
        """Price-driven mode: margin and breakdown of a proposed price."""
        cost = to_decimal(cost)
        price = to_decimal(price)
        return PriceSimulation(
            cost=cost,
            price=price,
            exact_price=price,
            margin=quantize_places(self.margin_for_price(cost, price), 2),
            requested_margin=None,
            margin_clamped=False,
            safe_margin_limit=self.safe_margin_limit,
            breakdown=self.breakdown(cost, price),
        )

    @staticmethod
    def unit_cost_split(recipe) -> UnitCostSplit:
        """Material, labor and overhead per produced unit of ``recipe``."""
        yield_quantity = to_decimal(recipe.yield_quantity)
        if yield_quantity <= 0:
            return UnitCostSplit(material=ZERO, labor=ZERO, overhead=ZERO, total=ZERO)
        return UnitCostSplit(
            material=quantize_places(recipe.total_cost_material / yield_quantity),
            labor=quantize_places(recipe.total_cost_labor / yield_quantity),
            overhead=quantize_places(recipe.total_cost_overhead / yield_quantity),
            total=quantize_places(recipe.unit_cost),
        )
