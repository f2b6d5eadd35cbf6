"""Bulk stock reconstruction from latest counts and completed transactions."""

from __future__ import annotations

from caterflow.domain import StockBalanceKey

from .chronological_applier import stock_apply_effects
from .interfaces import StockComputationRequest, StockComputationResult
from .result_finalizer import stock_finalize_balances
from .snapshot_selector import stock_select_latest_counts
from .transaction_normalizer import stock_normalize_transactions


def stock_compute_balances(request: StockComputationRequest) -> StockComputationResult:
    """Compute non-negative balances for every requested item/bin pair.

    Args:
        request: Requested ids plus the fetched counts and transactions.

    Returns:
        StockComputationResult: Deterministic balances and data-quality diagnostics.

    Raises:
        ValueError: Raised when request data is invalid.
    """

    if request is None:
        raise ValueError("request must not be None")
    if not request.item_ids or not request.bin_ids:
        return StockComputationResult(balances={})

    baselines = stock_select_latest_counts(request.counts, bin_ids=request.bin_ids)
    normalization = stock_normalize_transactions(request.transactions)
    fold = stock_apply_effects(
        item_ids=request.item_ids,
        bin_ids=request.bin_ids,
        baselines=baselines,
        effects=normalization.effects,
        exclude_pre_count_transactions=request.exclude_pre_count_transactions,
    )
    requested_keys = {
        StockBalanceKey(item_id=item_id, bin_id=bin_id)
        for item_id in request.item_ids
        for bin_id in request.bin_ids
    }
    balances, inconsistencies = stock_finalize_balances(fold.balances, requested_keys)

    return StockComputationResult(
        balances=balances,
        inconsistencies=inconsistencies,
        skipped_reference_count=normalization.skipped_reference_count,
        excluded_pre_count_effect_count=fold.excluded_pre_count_effect_count,
        ignored_transaction_count=normalization.ignored_transaction_count,
    )


__all__ = ["stock_compute_balances"]
