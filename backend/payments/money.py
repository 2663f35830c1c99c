"""
Monetary precision helpers.

Every cost, price, fee and cash balance in the system flows through these
helpers so that no float ever touches money.

Key Principles:
1. NEVER use float for money (floats are converted through str first)
2. Keep full Decimal precision while accumulating; round only when storing
   or presenting
3. Use ROUND_HALF_EVEN (banker's rounding) for currency amounts
4. Division by a non-positive quantity yields zero instead of raising
"""

from decimal import Decimal, ROUND_HALF_EVEN, ROUND_HALF_UP, InvalidOperation, getcontext
from typing import Union

# High precision for intermediate calculations
getcontext().prec = 28

Number = Union[Decimal, str, int, float]

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")

# Places used for the cached recipe cost columns
COST_PLACES = 4

# Currency minor unit exponents (how many decimal places)
CURRENCY_EXPONENT = {
    "BRL": 2,  # Brazilian Real (centavos)
    "USD": 2,
    "EUR": 2,
    "GBP": 2,
    "ARS": 2,
    "MXN": 2,
    "JPY": 0,
    "CLP": 0,
    "KWD": 3,
}

CURRENCY_SYMBOLS = {
    "BRL": "R$",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
}


def to_decimal(amount: Number) -> Decimal:
    """
    Coerce any numeric input into a Decimal.

    None and empty strings become zero; floats go through ``str`` so that
    0.1 becomes Decimal('0.1') rather than its binary approximation.

    Raises:
        ValueError: If the value cannot be parsed as a number.

    Examples:
        >>> to_decimal(0.1)
        Decimal('0.1')
        >>> to_decimal(None)
        Decimal('0')
    """
    if amount is None or amount == "":
        return ZERO
    if isinstance(amount, Decimal):
        return amount
    if isinstance(amount, float):
        amount = str(amount)
    try:
        return Decimal(amount)
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"Invalid numeric value: {amount!r}") from exc


def currency_exponent(currency: str) -> int:
    """
    Number of decimal places for a currency (2 when unknown).

    Examples:
        >>> currency_exponent("BRL")
        2
        >>> currency_exponent("JPY")
        0
    """
    return CURRENCY_EXPONENT.get(currency.upper(), 2)


def quantize_decimal(currency: str) -> Decimal:
    """
    Smallest unit for a currency, e.g. Decimal('0.01') for BRL.
    """
    return Decimal(10) ** -currency_exponent(currency)


def quantize(currency: str, amount: Number) -> Decimal:
    """
    Round to currency decimals using banker's rounding (ROUND_HALF_EVEN).

    Examples:
        >>> quantize("BRL", "10.127")
        Decimal('10.13')
        >>> quantize("BRL", "10.125")
        Decimal('10.12')
    """
    return to_decimal(amount).quantize(quantize_decimal(currency), rounding=ROUND_HALF_EVEN)


def quantize_places(amount: Number, places: int = COST_PLACES) -> Decimal:
    """
    Round to a fixed number of places (half up) for storage columns.

    Recipe cost columns keep four places so that many small per-gram
    ingredient costs don't drift when summed for display.

    Examples:
        >>> quantize_places("4.399995")
        Decimal('4.4000')
    """
    exponent = Decimal(1).scaleb(-places)
    return to_decimal(amount).quantize(exponent, rounding=ROUND_HALF_UP)


def percentage_of(amount: Number, rate: Number) -> Decimal:
    """
    ``amount * rate / 100`` at full precision.

    Examples:
        >>> percentage_of("30.00", "4")
        Decimal('1.2000')
    """
    return to_decimal(amount) * (to_decimal(rate) / HUNDRED)


def safe_divide(numerator: Number, denominator: Number) -> Decimal:
    """
    Divide, returning zero when the denominator is zero or negative.

    Examples:
        >>> safe_divide("17.60", "4")
        Decimal('4.40')
        >>> safe_divide("17.60", "0")
        Decimal('0')
    """
    denominator = to_decimal(denominator)
    if denominator <= 0:
        return ZERO
    return to_decimal(numerator) / denominator


def within_tolerance(first: Number, second: Number, tolerance: Number = "0.01") -> bool:
    """
    True when two amounts differ by no more than ``tolerance``.

    Examples:
        >>> within_tolerance("4.40", "4.405")
        True
        >>> within_tolerance("4.40", "4.42")
        False
    """
    return abs(to_decimal(first) - to_decimal(second)) <= to_decimal(tolerance)


def format_money(currency: str, amount: Number) -> str:
    """
    Format an amount as a human-readable currency string.

    Examples:
        >>> format_money("BRL", "10.5")
        'R$10.50'
        >>> format_money("JPY", "1235")
        '¥1,235'
    """
    exponent = currency_exponent(currency)
    value = quantize(currency, amount)
    symbol = CURRENCY_SYMBOLS.get(currency.upper(), currency.upper() + " ")
    return f"{symbol}{value:,.{exponent}f}"
