# core/money.py
from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """
    Convert provider/user numbers to Decimal without float drift.
    Raises ValueError for anything that is not a finite number.
    """
    if isinstance(value, Decimal):
        d = value
    else:
        try:
            d = Decimal(str(value).strip())
        except (InvalidOperation, AttributeError) as e:
            raise ValueError(f"Not a number: {value!r}") from e
    if not d.is_finite():
        raise ValueError(f"Not a number: {value!r}")
    return d


def q(amount: Decimal | int | float | str) -> Decimal:
    """
    Quantize to 2dp taka. Half-up, same as the figures shown to the customer.
    """
    return to_decimal(amount).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
