"""Exact decimal conversion for recorded quantities."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation


def stock_to_decimal(value: Decimal | int | float | str | None) -> Decimal:
    """Convert a recorded quantity to Decimal, reading missing values as zero.

    Floats go through their shortest string form so `0.1` stays `Decimal("0.1")`.

    Args:
        value: Recorded quantity.

    Returns:
        Decimal: Exact quantity.

    Raises:
        ValueError: Raised when the value is not numeric or not finite.
    """

    if value is None:
        return Decimal("0")
    if isinstance(value, bool):
        raise ValueError("quantity must not be a boolean")
    if isinstance(value, Decimal):
        quantity = value
    else:
        try:
            quantity = Decimal(str(value).strip())
        except InvalidOperation as error:
            raise ValueError(f"invalid quantity={value}") from error
    if not quantity.is_finite():
        raise ValueError(f"quantity must be finite, got {value}")
    return quantity


__all__ = ["stock_to_decimal"]
