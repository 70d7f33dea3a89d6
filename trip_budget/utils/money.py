"""Decimal helpers for monetary values.

All amounts are held as ``Decimal``. Rounding to cents uses ROUND_HALF_UP
everywhere so converted figures and totals agree with what a user would
compute by hand.
"""
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from trip_budget.utils.errors import ValidationError

Number = Union[Decimal, int, float, str]

CENT = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value: Number) -> Decimal:
    """Coerce ``value`` to ``Decimal``; floats go through ``str`` to avoid binary noise."""
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise ValidationError(f"Not a number: {value!r}")
    elif isinstance(value, float):
        result = Decimal(repr(value))
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise ValidationError(f"Not a number: {value!r}")
    if not result.is_finite():
        raise ValidationError(f"Not a finite number: {value!r}")
    return result


def round_money(value: Number) -> Decimal:
    """Round to two decimal places, half up."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
