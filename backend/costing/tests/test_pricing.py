"""
Tests for PricingSimulator.
"""
import pytest
from decimal import Decimal

from costing.exceptions import PricingError
from costing.services import PricingSimulator
from payments.money import within_tolerance


@pytest.fixture
def simulator():
    return PricingSimulator(tax_rate=Decimal("4.5"), card_fee_rate=Decimal("3.99"))


class TestPriceForMargin:

    def test_suggested_price(self, simulator):
        """4.40 at 4.5% tax, 3.99% fee and 20% margin sells for 6.15."""
        result = simulator.price_for_margin(Decimal("4.40"), Decimal("20"))

        assert result.price == Decimal("6.15")
        assert result.margin == Decimal("20")
        assert result.margin_clamped is False

    def test_breakdown_adds_up(self, simulator):
        result = simulator.price_for_margin("4.40", "20")
        breakdown = result.breakdown

        assert breakdown.cost + breakdown.tax_amount + breakdown.fee_amount + breakdown.profit == result.price

    def test_margin_is_clamped(self):
        simulator = PricingSimulator(tax_rate="50", card_fee_rate="30")
        result = simulator.price_for_margin("1.00", "50")

        assert result.margin_clamped is True
        assert result.margin == Decimal("19")
        assert result.safe_margin_limit == Decimal("19")
        assert result.price == Decimal("100.00")

    def test_no_room_for_a_price(self):
        simulator = PricingSimulator(tax_rate="60", card_fee_rate="40")
        with pytest.raises(PricingError):
            simulator.price_for_margin("1.00", "10")

    @pytest.mark.parametrize("cost,margin", [
        ("4.40", "20"),
        ("0.37", "65"),
        ("120.00", "0"),
        ("9.99", "-10"),
        ("15.00", "91.51"),
    ])
    def test_round_trip(self, simulator, cost, margin):
        result = simulator.price_for_margin(cost, margin)

        assert result.exact_price >= Decimal(cost) or Decimal(margin) < 0
        assert within_tolerance(simulator.margin_for_price(cost, result.exact_price), result.margin, "0.0001")

    def test_price_covers_cost(self, simulator):
        for margin in ("0", "10", "50", "91.51"):
            assert simulator.price_for_margin("4.40", margin).price >= Decimal("4.40")


class TestMarginForPrice:

    def test_realized_margin(self, simulator):
        margin = simulator.margin_for_price("4.40", "6.15")
        assert within_tolerance(margin, "19.97", "0.01")

    def test_zero_price(self, simulator):
        assert simulator.margin_for_price("4.40", "0") == Decimal("-100")

    def test_evaluate_price(self, simulator):
        result = simulator.evaluate_price("4.40", "8.00")

        assert result.requested_margin is None
        assert result.price == Decimal("8.00")
        assert result.margin == Decimal("36.51")


@pytest.mark.django_db
def test_for_tenant_uses_settings(tenant_a):
    from settings.services import SettingsService

    SettingsService.save_settings(tenant_a, {"default_tax_rate": Decimal("4.5"), "credit_fee_rate": Decimal("3.99")})
    simulator = PricingSimulator.for_tenant(tenant_a)

    assert simulator.tax_rate == Decimal("4.50")
    assert simulator.card_fee_rate == Decimal("3.99")

    overridden = PricingSimulator.for_tenant(tenant_a, tax_rate=Decimal("0"))
    assert overridden.tax_rate == Decimal("0")
