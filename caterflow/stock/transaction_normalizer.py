"""Mapping of typed ledger transactions to signed per-bin stock effects."""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal

from caterflow.domain import (
    DispatchRecord,
    GoodsReceiptRecord,
    InternalTransferRecord,
    StockAdjustmentRecord,
    TransactionRecord,
    stock_adjustment_sign,
    stock_to_decimal,
    stock_transaction_is_completed,
)

from .interfaces import StockEffect, StockNormalizationResult
from .timestamps import stock_normalize_timestamp

logger = logging.getLogger(__name__)


def stock_normalize_transactions(transactions: list[TransactionRecord]) -> StockNormalizationResult:
    """Expand transactions into signed effects.

    Receipts add to the receiving bin, dispatches subtract from the source bin,
    transfers subtract from `from_bin` and add the same quantity to `to_bin`,
    and adjustments apply `sign(adjustment_type) * abs(quantity)` to their bin.

    Args:
        transactions: Typed transaction records of any kind.

    Returns:
        StockNormalizationResult: Effects in input order plus skip counters.

    Raises:
        ValueError: Raised when a quantity or date value is malformed.
    """

    effects: list[StockEffect] = []
    skipped_reference_count = 0
    ignored_transaction_count = 0

    for record in transactions:
        if not isinstance(record, (GoodsReceiptRecord, DispatchRecord, InternalTransferRecord, StockAdjustmentRecord)):
            logger.warning("ignoring unsupported transaction type=%s", type(record).__name__)
            ignored_transaction_count += 1
            continue
        if not stock_transaction_is_completed(record):
            logger.debug("ignoring transaction %s with status=%s", record.transaction_id, record.status)
            ignored_transaction_count += 1
            continue

        timestamp = _stock_effective_timestamp(record)
        if timestamp is None:
            logger.warning("skipping transaction %s without effective date", record.transaction_id)
            skipped_reference_count += max(len(record.lines), 1)
            continue

        legs = _stock_transaction_legs(record)
        leg_index = 0
        for line in record.lines:
            if not line.stock_item_id:
                logger.warning("skipping line without stock item in transaction %s", record.transaction_id)
                skipped_reference_count += len(legs)
                continue
            magnitude = stock_to_decimal(line.quantity)
            for bin_id, sign in legs:
                if not bin_id:
                    logger.warning(
                        "skipping leg without bin for item %s in transaction %s",
                        line.stock_item_id,
                        record.transaction_id,
                    )
                    skipped_reference_count += 1
                    continue
                effects.append(
                    StockEffect(
                        item_id=line.stock_item_id,
                        bin_id=bin_id,
                        delta=_stock_signed_delta(record, magnitude, sign),
                        timestamp=timestamp,
                        transaction_id=record.transaction_id,
                        leg_index=leg_index,
                    )
                )
                leg_index += 1

    return StockNormalizationResult(
        effects=tuple(effects),
        skipped_reference_count=skipped_reference_count,
        ignored_transaction_count=ignored_transaction_count,
    )


def _stock_effective_timestamp(record: TransactionRecord) -> datetime | None:
    """Return the kind-specific effective date of a transaction as UTC."""

    if isinstance(record, GoodsReceiptRecord):
        effective_date = record.receipt_date
    elif isinstance(record, DispatchRecord):
        effective_date = record.dispatch_date
    elif isinstance(record, InternalTransferRecord):
        effective_date = record.transfer_date
    else:
        effective_date = record.adjustment_date

    if effective_date is None:
        return None
    return stock_normalize_timestamp(effective_date)


def _stock_transaction_legs(record: TransactionRecord) -> tuple[tuple[str | None, int], ...]:
    """Return `(bin_id, sign)` legs each line of a transaction moves through.

    Args:
        record: Completed transaction record.

    Returns:
        tuple[tuple[str | None, int], ...]: One leg per affected bin; transfers have two.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if isinstance(record, GoodsReceiptRecord):
        return ((record.receiving_bin_id, 1),)
    if isinstance(record, DispatchRecord):
        return ((record.source_bin_id, -1),)
    if isinstance(record, InternalTransferRecord):
        return ((record.from_bin_id, -1), (record.to_bin_id, 1))
    return ((record.bin_id, stock_adjustment_sign(record.adjustment_type)),)


def _stock_signed_delta(record: TransactionRecord, magnitude: Decimal, sign: int) -> Decimal:
    """Apply the leg sign to a line quantity.

    Adjustment lines carry their direction in the adjustment type, so their
    recorded sign is discarded. Other kinds keep the recorded quantity as-is.
    """

    if isinstance(record, StockAdjustmentRecord):
        return abs(magnitude) * sign
    return magnitude * sign


__all__ = ["stock_normalize_transactions"]
