"""
Money Helpers Module

Exact Decimal handling for monetary amounts. NEVER uses float for monetary
values: floats are rejected outright rather than converted, since the binary
value of a float literal is already not the amount the caller meant.
"""

from decimal import Context, Decimal, InvalidOperation as DecimalException, MAX_EMAX, MAX_PREC, MIN_EMIN
from enum import Enum
from typing import Union

from .exceptions import InvalidAmount

# Additions and subtractions under this context are exact at any magnitude
# and exponent, so no amount overflows
_EXACT = Context(prec=MAX_PREC, Emax=MAX_EMAX, Emin=MIN_EMIN)

ZERO = Decimal('0')

AmountLike = Union[Decimal, int, str]


class Currency(Enum):
    """ISO 4217 currency codes with display precision"""
    USD = ("USD", 2)
    EUR = ("EUR", 2)
    GBP = ("GBP", 2)
    JPY = ("JPY", 0)
    CAD = ("CAD", 2)
    CHF = ("CHF", 2)

    def __init__(self, code: str, precision: int):
        self.code = code
        self.precision = precision


def to_amount(value: AmountLike) -> Decimal:
    """
    Convert a value to an exact Decimal amount

    Args:
        value: Decimal, int, or numeric string (e.g. "100.00")

    Returns:
        Decimal value, unrounded

    Raises:
        InvalidAmount: If the value is a float, bool, malformed string,
            NaN or infinite
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise InvalidAmount(f"Amount must be an exact decimal, got {type(value).__name__}")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip())
        except DecimalException:
            raise InvalidAmount(f"Cannot convert '{value}' to Decimal")
    else:
        raise InvalidAmount(f"Unsupported amount type: {type(value).__name__}")

    if not amount.is_finite():
        raise InvalidAmount(f"Amount must be finite, got {amount}")

    return amount


def to_non_negative_amount(value: AmountLike) -> Decimal:
    """Convert to an exact Decimal and require it to be >= 0"""
    amount = to_amount(value)
    if amount < ZERO:
        raise InvalidAmount(f"Amount must not be negative, got {amount}")
    return amount


def to_positive_amount(value: AmountLike) -> Decimal:
    """Convert to an exact Decimal and require it to be > 0"""
    amount = to_amount(value)
    if amount <= ZERO:
        raise InvalidAmount(f"Amount must be positive, got {amount}")
    return amount


def format_amount(amount: Decimal, currency: Currency = Currency.USD) -> str:
    """Format for display, e.g. 'USD 1,234.50'"""
    if currency.precision == 0:
        return f"{currency.code} {amount:,.0f}"
    return f"{currency.code} {amount:,.{currency.precision}f}"


def exact_add(a: Decimal, b: Decimal) -> Decimal:
    """Add two amounts with no rounding"""
    return _EXACT.add(a, b)


def exact_subtract(a: Decimal, b: Decimal) -> Decimal:
    """Subtract b from a with no rounding"""
    return _EXACT.subtract(a, b)
