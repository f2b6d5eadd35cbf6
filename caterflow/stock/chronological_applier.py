"""Chronological fold of stock effects onto count baselines."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from caterflow.domain import StockBalanceKey

from .interfaces import StockBaseline, StockEffect


@dataclass(frozen=True)
class StockFoldResult:
    """Running balances after every effect has been applied.

    Attributes:
        balances: Balance per item/bin key, including keys outside the request.
        excluded_pre_count_effect_count: Effects skipped for predating their bin's count.
    """

    balances: dict[StockBalanceKey, Decimal]
    excluded_pre_count_effect_count: int


def stock_apply_effects(
    item_ids: frozenset[str],
    bin_ids: frozenset[str],
    baselines: dict[str, StockBaseline],
    effects: tuple[StockEffect, ...] | list[StockEffect],
    exclude_pre_count_transactions: bool = False,
) -> StockFoldResult:
    """Fold signed effects in effective-date order onto baseline quantities.

    Every requested pair starts at its counted quantity, or zero when the bin
    has no count or the item was not counted. Effects are ordered by
    `(timestamp, transaction_id, leg_index)` across all transaction kinds, so
    input order never changes the outcome. Keys outside the request, such as
    the far leg of a transfer, are created at zero and tracked like any other.

    Args:
        item_ids: Requested stock item identifiers.
        bin_ids: Requested bin identifiers.
        baselines: Latest-count baseline per bin.
        effects: Normalized effects in any order.
        exclude_pre_count_transactions: Skip effects dated strictly before the
            baseline count of their bin.

    Returns:
        StockFoldResult: Unclamped balances.

    Raises:
        RuntimeError: This function does not raise runtime errors.
    """

    balances: dict[StockBalanceKey, Decimal] = {}
    for bin_id in sorted(bin_ids):
        baseline = baselines.get(bin_id)
        for item_id in sorted(item_ids):
            starting_quantity = Decimal("0")
            if baseline is not None:
                starting_quantity = baseline.quantities.get(item_id, Decimal("0"))
            balances[StockBalanceKey(item_id=item_id, bin_id=bin_id)] = starting_quantity

    sorted_effects = sorted(
        effects,
        key=lambda effect: (effect.timestamp, effect.transaction_id, effect.leg_index),
    )

    excluded_pre_count_effect_count = 0
    for effect in sorted_effects:
        if exclude_pre_count_transactions:
            baseline = baselines.get(effect.bin_id)
            if baseline is not None and effect.timestamp < baseline.count_date:
                excluded_pre_count_effect_count += 1
                continue
        key = effect.key
        balances[key] = balances.get(key, Decimal("0")) + effect.delta

    return StockFoldResult(
        balances=balances,
        excluded_pre_count_effect_count=excluded_pre_count_effect_count,
    )


__all__ = ["StockFoldResult", "stock_apply_effects"]
