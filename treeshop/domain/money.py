"""
Currency helpers shared by entities and services.

Calculations keep full Decimal precision; rounding to cents is applied only
when values leave the core (API responses, CLI output).
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional

ZERO = Decimal("0")
CENT = Decimal("0.01")


def to_decimal(value: Any, default: Optional[Decimal] = ZERO) -> Decimal:
    """
    Convert a number or numeric string to Decimal.

    Floats are converted through str() so 1.15 stays 1.15 rather than
    1.149999999999999911182158029987...
    """
    if value is None:
        return default
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_currency(amount: Decimal) -> Decimal:
    """Round an amount to cents (half-up)."""
    return to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def decimal_or_none(value: Any) -> Optional[Decimal]:
    return None if value is None else to_decimal(value)
