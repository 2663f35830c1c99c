"""
Unit tests for payments.money module.

These tests guard against float drift and rounding surprises in every cost,
price and settlement figure.
"""

import pytest
from decimal import Decimal

from payments.money import (
    currency_exponent,
    quantize_decimal,
    quantize,
    quantize_places,
    to_decimal,
    percentage_of,
    safe_divide,
    within_tolerance,
    format_money,
)


class TestToDecimal:

    def test_float_goes_through_str(self):
        assert to_decimal(0.1) == Decimal("0.1")

    def test_none_and_blank_are_zero(self):
        assert to_decimal(None) == Decimal("0")
        assert to_decimal("") == Decimal("0")

    def test_decimal_passes_through(self):
        value = Decimal("1.2345")
        assert to_decimal(value) is value

    def test_garbage_raises(self):
        with pytest.raises(ValueError):
            to_decimal("abc")


class TestCurrencyExponent:
    """Test currency exponent lookup."""

    def test_brl_exponent(self):
        assert currency_exponent("BRL") == 2

    def test_jpy_exponent(self):
        assert currency_exponent("JPY") == 0

    def test_kwd_exponent(self):
        assert currency_exponent("KWD") == 3

    def test_case_insensitive(self):
        assert currency_exponent("brl") == 2

    def test_unknown_currency_defaults_to_2(self):
        assert currency_exponent("XXX") == 2

    def test_quantize_decimal(self):
        assert quantize_decimal("BRL") == Decimal("0.01")
        assert quantize_decimal("JPY") == Decimal("1")


class TestQuantize:
    """Test Decimal quantization with banker's rounding."""

    def test_quantize_normal(self):
        assert quantize("BRL", "10.127") == Decimal("10.13")

    def test_bankers_rounding_down(self):
        # 10.125 → 10.12 (round to even)
        assert quantize("BRL", "10.125") == Decimal("10.12")

    def test_bankers_rounding_up(self):
        # 10.135 → 10.14 (round to even)
        assert quantize("BRL", "10.135") == Decimal("10.14")

    def test_jpy_no_decimals(self):
        assert quantize("JPY", "1234.56") == Decimal("1235")

    def test_from_float(self):
        assert quantize("BRL", 10.127) == Decimal("10.13")

    def test_from_int(self):
        assert quantize("BRL", 10) == Decimal("10.00")


class TestQuantizePlaces:

    def test_four_places_half_up(self):
        assert quantize_places("4.39995") == Decimal("4.4000")
        assert quantize_places("0.00005") == Decimal("0.0001")

    def test_custom_places(self):
        assert quantize_places("1.005", 2) == Decimal("1.01")


class TestPercentageAndDivision:

    def test_percentage_of(self):
        assert percentage_of("30.00", "4") == Decimal("1.2")

    def test_percentage_of_zero_rate(self):
        assert percentage_of("30.00", "0") == Decimal("0")

    def test_safe_divide(self):
        assert safe_divide("17.60", "4") == Decimal("4.40")

    def test_safe_divide_by_zero_is_zero(self):
        assert safe_divide("17.60", "0") == Decimal("0")

    def test_safe_divide_by_negative_is_zero(self):
        assert safe_divide("17.60", "-2") == Decimal("0")


class TestWithinTolerance:

    def test_equal_amounts(self):
        assert within_tolerance("4.40", "4.40")

    def test_boundary_is_inclusive(self):
        assert within_tolerance("4.40", "4.41")

    def test_outside_tolerance(self):
        assert not within_tolerance("4.40", "4.42")

    def test_custom_tolerance(self):
        assert within_tolerance("10", "10.5", tolerance="1")


class TestFormatMoney:

    def test_brl(self):
        assert format_money("BRL", "10.5") == "R$10.50"

    def test_thousands_separator(self):
        assert format_money("BRL", "1234.5") == "R$1,234.50"

    def test_jpy(self):
        assert format_money("JPY", "1235") == "¥1,235"

    def test_unknown_currency_uses_code(self):
        assert format_money("XXX", "1") == "XXX 1.00"
