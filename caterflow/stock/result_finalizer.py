"""Clamping and projection of folded balances."""

from __future__ import annotations

import logging
from decimal import Decimal

from caterflow.domain import StockBalanceKey

from .interfaces import StockInconsistency

logger = logging.getLogger(__name__)


def stock_finalize_balances(
    balances: dict[StockBalanceKey, Decimal],
    requested_keys: set[StockBalanceKey] | frozenset[StockBalanceKey],
) -> tuple[dict[StockBalanceKey, Decimal], tuple[StockInconsistency, ...]]:
    """Clamp negative balances to zero and keep only requested pairs.

    A negative result means the transaction feed is incomplete or a movement
    exceeded recorded stock. It is reported as zero and surfaced as an
    inconsistency for investigation.

    Args:
        balances: Unclamped folded balances.
        requested_keys: Item/bin pairs the caller asked for.

    Returns:
        tuple: Clamped balances per requested key and the clamped inconsistencies.

    Raises:
        RuntimeError: This function does not raise runtime errors.
    """

    finalized: dict[StockBalanceKey, Decimal] = {}
    inconsistencies: list[StockInconsistency] = []
    for key in sorted(requested_keys):
        quantity = balances.get(key, Decimal("0"))
        if quantity < Decimal("0"):
            logger.warning(
                "clamping negative stock balance item=%s bin=%s computed=%s",
                key.item_id,
                key.bin_id,
                quantity,
            )
            inconsistencies.append(StockInconsistency(key=key, computed_quantity=quantity))
            quantity = Decimal("0")
        finalized[key] = quantity
    return finalized, tuple(inconsistencies)


__all__ = ["stock_finalize_balances"]
