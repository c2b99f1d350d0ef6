"""
Currency and Money Module

Handles ISO 4217 currency codes and exact fixed-point amounts scaled to the
currency minor unit. NEVER uses float for monetary values, and never rounds:
an amount with more fractional digits than the minor unit allows is rejected.
"""

from decimal import Context, Decimal, InvalidOperation
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union
import re

from .errors import (
    AmountNil, AmountTooLarge, InvalidCurrency, InvalidFormat, InvalidPrecision,
    Negative, NotFinite, NotPositive,
)


class Currency(Enum):
    """Supported ISO 4217 currency codes with minor-unit precision"""
    USD = ("USD", 2)  # US Dollar
    EUR = ("EUR", 2)  # Euro
    SGD = ("SGD", 2)  # Singapore Dollar
    GBP = ("GBP", 2)  # British Pound

    def __init__(self, code: str, precision: int):
        self.code = code
        self.precision = precision

    @classmethod
    def from_code(cls, code: str) -> 'Currency':
        """Look up a currency by its ISO code"""
        if isinstance(code, Currency):
            return code
        try:
            return cls[code]
        except (KeyError, TypeError):
            raise InvalidCurrency(code) from None


# All supported currencies share the same minor unit
MINOR_UNIT_PRECISION = 2
MIN_EXPONENT = -MINOR_UNIT_PRECISION
_QUANTUM = Decimal(1).scaleb(MIN_EXPONENT)

# Same range as the NUMERIC(20, 2) columns: 18 integer digits, 2 fractional
MAX_DIGITS = 20
MAX_MINOR_UNITS = 10 ** MAX_DIGITS - 1
MAX_AMOUNT = Decimal(MAX_MINOR_UNITS).scaleb(MIN_EXPONENT)

# Wide enough that scaling and quantizing any in-range amount is exact
_EXACT = Context(prec=MAX_DIGITS * 2)

# Plain decimal notation only: optional minus, digits, optional fraction
_DECIMAL_TEXT = re.compile(r'^-?\d+(\.\d+)?$')


@dataclass(frozen=True)
class Money:
    """
    Immutable fixed-point amount with at most two fractional digits.

    The value is held as an exact Decimal whose exponent is never below -2
    and whose magnitude never exceeds MAX_AMOUNT, so it always converts
    losslessly to an integer count of minor units.
    Money carries no sign restriction of its own: callers decide whether a
    negative value is meaningful (balances and transfer amounts never are).
    """
    amount: Decimal

    def __post_init__(self):
        amount = self.amount
        if isinstance(amount, float) or not isinstance(amount, (Decimal, int)):
            raise InvalidFormat(amount)
        if isinstance(amount, int):
            amount = Decimal(amount)
        if not amount.is_finite():
            raise NotFinite()
        if amount.as_tuple().exponent < MIN_EXPONENT:
            raise InvalidPrecision()
        if amount.copy_abs() > MAX_AMOUNT:
            raise AmountTooLarge(MAX_AMOUNT)
        if amount.is_zero():
            # Negative zero formats as "-0.00"
            amount = amount.copy_abs()
        object.__setattr__(self, 'amount', amount)

    @classmethod
    def zero(cls) -> 'Money':
        return cls(Decimal('0.00'))

    @classmethod
    def from_minor_units(cls, units: int) -> 'Money':
        """Build an amount from an integer number of cents"""
        if abs(units) > MAX_MINOR_UNITS:
            raise AmountTooLarge(MAX_AMOUNT)
        return cls(Decimal(units).scaleb(MIN_EXPONENT, context=_EXACT))

    @property
    def minor_units(self) -> int:
        """Exact integer number of minor units (cents)"""
        return int(self.amount.scaleb(MINOR_UNIT_PRECISION, context=_EXACT))

    def add(self, other: 'Money') -> 'Money':
        return Money.from_minor_units(self.minor_units + other.minor_units)

    def subtract(self, other: 'Money') -> 'Money':
        return Money.from_minor_units(self.minor_units - other.minor_units)

    def cmp(self, other: 'Money') -> int:
        """Three-way comparison: -1, 0 or 1"""
        a, b = self.minor_units, other.minor_units
        return (a > b) - (a < b)

    def __add__(self, other: 'Money') -> 'Money':
        if not isinstance(other, Money):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: 'Money') -> 'Money':
        if not isinstance(other, Money):
            return NotImplemented
        return self.subtract(other)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Money):
            return False
        return self.minor_units == other.minor_units

    def __hash__(self) -> int:
        return hash(self.minor_units)

    def __lt__(self, other: 'Money') -> bool:
        return self.cmp(other) < 0

    def __le__(self, other: 'Money') -> bool:
        return self.cmp(other) <= 0

    def __gt__(self, other: 'Money') -> bool:
        return self.cmp(other) > 0

    def __ge__(self, other: 'Money') -> bool:
        return self.cmp(other) >= 0

    def is_zero(self) -> bool:
        """Check if amount is exactly zero"""
        return self.minor_units == 0

    def is_positive(self) -> bool:
        """Check if amount is strictly positive"""
        return self.minor_units > 0

    def is_negative(self) -> bool:
        """Check if amount is negative"""
        return self.minor_units < 0

    def __str__(self) -> str:
        return format_amount(self)

    def __repr__(self) -> str:
        return f"Money('{format_amount(self)}')"


def parse_amount(text: str) -> Money:
    """
    Parse a non-negative decimal string into Money.

    Checks run in a fixed order: syntax, finiteness, sign, precision, size.
    Only plain notation is accepted ("12.34", "-0"): no exponent, no "+". Values
    with fewer than two fractional digits ("1", "1.1") are accepted; values
    with more ("1.100", "1.1234") are rejected rather than rounded.

    Raises:
        InvalidFormat, NotFinite, Negative, InvalidPrecision, AmountTooLarge
    """
    if not isinstance(text, str) or not text:
        raise InvalidFormat(text)

    try:
        value = Decimal(text)
    except InvalidOperation:
        raise InvalidFormat(text) from None

    if not value.is_finite():
        raise NotFinite()

    # Decimal() tolerates surrounding whitespace and digit underscores
    if not _DECIMAL_TEXT.match(text):
        raise InvalidFormat(text)

    if value < 0:
        raise Negative()

    if value.as_tuple().exponent < MIN_EXPONENT:
        raise InvalidPrecision()

    if value > MAX_AMOUNT:
        raise AmountTooLarge(MAX_AMOUNT)

    return Money(value)


def validate_transfer_amount(value: Optional[Union[Money, Decimal]]) -> None:
    """
    Validate an amount about to be transferred.

    Stricter than parsing: zero is rejected along with negatives.

    Raises:
        AmountNil, NotFinite, NotPositive, InvalidPrecision, AmountTooLarge
    """
    if value is None:
        raise AmountNil()

    if isinstance(value, Money):
        value = value.amount
    elif not isinstance(value, Decimal):
        raise InvalidFormat(value)

    if not value.is_finite():
        raise NotFinite()

    if value <= 0:
        raise NotPositive()

    if value.as_tuple().exponent < MIN_EXPONENT:
        raise InvalidPrecision()

    if value > MAX_AMOUNT:
        raise AmountTooLarge(MAX_AMOUNT)


def format_amount(value: Union[Money, Decimal]) -> str:
    """Canonical text form with exactly two fractional digits"""
    if isinstance(value, Money):
        value = value.amount
    elif value.is_finite() and value.copy_abs() > MAX_AMOUNT:
        raise AmountTooLarge(MAX_AMOUNT)
    return f"{value.quantize(_QUANTUM, context=_EXACT):f}"
