"""Decimal money helpers. Prices are integer cents in [1, 99]; cash is Decimal dollars."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Annotated

from pydantic import PlainSerializer

CENTS_PER_DOLLAR = Decimal(100)
CENT = Decimal("0.01")

# Decimal in Python, plain JSON number on the wire.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


def to_decimal(value: object) -> Decimal | None:
    """Coerce int/float/str/Decimal to Decimal. None if not a finite number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, str)):
        try:
            result = Decimal(value)
        except InvalidOperation:
            return None
    elif isinstance(value, float):
        result = Decimal(str(value))
    else:
        return None
    return result if result.is_finite() else None


def to_cents(value: object) -> Decimal | None:
    """Coerce a cash amount to Decimal. None unless it is finite and whole cents."""
    result = to_decimal(value)
    if result is None:
        return None
    try:
        quantized = result.quantize(CENT)
    except InvalidOperation:
        return None
    return quantized if quantized == result else None


def shares_for(amount: Decimal, price: int) -> int:
    """Whole shares `amount` buys at `price` cents: floor(amount / (price / 100)). Never rounds up."""
    return int((amount * CENTS_PER_DOLLAR) // price)


def position_value(shares: int, price: int) -> Decimal:
    """Cash value of `shares` at `price` cents."""
    return Decimal(shares) * price / CENTS_PER_DOLLAR


def weighted_avg_cost(old_avg: Decimal, old_shares: int, price: int, shares: int) -> Decimal:
    """Share-weighted average cost after adding `shares` at `price` to an existing holding."""
    total = old_shares + shares
    return (old_avg * old_shares + Decimal(price) * shares) / total


def money_display(value: Decimal) -> str:
    """Decimal -> '$1,234.56' / '-$12.00'."""
    q = value.quantize(CENT)
    if q < 0:
        return f"-${-q:,.2f}"
    return f"${q:,.2f}"
