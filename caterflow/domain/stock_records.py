"""Typed stock ledger records shared by the db and stock layers.

Counts and the four transaction kinds are immutable value objects. Each
transaction kind is its own dataclass so consumers can match on type instead of
branching on a loosely-typed discriminator string.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import NamedTuple, Union


class StockBalanceKey(NamedTuple):
    """Composite lookup key for one stock item held in one bin.

    Attributes:
        item_id: Stock item identifier.
        bin_id: Bin identifier.
    """

    item_id: str
    bin_id: str


class TransactionKind(str, Enum):
    """Ledger discriminator values for stock-moving transactions."""

    GOODS_RECEIPT = "GoodsReceipt"
    DISPATCH = "DispatchLog"
    INTERNAL_TRANSFER = "InternalTransfer"
    STOCK_ADJUSTMENT = "StockAdjustment"


TRANSACTION_STATUS_COMPLETED = "completed"

NEGATIVE_ADJUSTMENT_TYPES = frozenset({"loss", "wastage", "expiry", "damage", "theft"})


@dataclass(frozen=True)
class CountedItem:
    """One counted line of an inventory count.

    Attributes:
        stock_item_id: Counted stock item identifier, None when unresolved.
        counted_quantity: Physically counted quantity.
    """

    stock_item_id: str | None
    counted_quantity: Decimal


@dataclass(frozen=True)
class InventoryCountRecord:
    """Audited physical count of one bin at a point in time.

    Attributes:
        count_id: Count document identifier.
        bin_id: Counted bin identifier, None when unresolved.
        count_date: Count timestamp.
        counted_items: Counted item lines.
    """

    count_id: str
    bin_id: str | None
    count_date: datetime
    counted_items: tuple[CountedItem, ...]


@dataclass(frozen=True)
class TransactionLine:
    """One item line of a stock-moving transaction.

    Attributes:
        stock_item_id: Moved stock item identifier, None when unresolved.
        quantity: Moved quantity as recorded on the line.
    """

    stock_item_id: str | None
    quantity: Decimal | None


@dataclass(frozen=True)
class GoodsReceiptRecord:
    """Goods received into one bin."""

    transaction_id: str
    status: str | None
    receipt_date: datetime | None
    receiving_bin_id: str | None
    lines: tuple[TransactionLine, ...]


@dataclass(frozen=True)
class DispatchRecord:
    """Goods dispatched out of one bin."""

    transaction_id: str
    status: str | None
    dispatch_date: datetime | None
    source_bin_id: str | None
    lines: tuple[TransactionLine, ...]


@dataclass(frozen=True)
class InternalTransferRecord:
    """Goods moved from one bin into another bin.

    Legacy transfers may carry no status at all; those are treated as completed.
    """

    transaction_id: str
    status: str | None
    transfer_date: datetime | None
    from_bin_id: str | None
    to_bin_id: str | None
    lines: tuple[TransactionLine, ...]


@dataclass(frozen=True)
class StockAdjustmentRecord:
    """Ad-hoc quantity correction in one bin.

    Attributes:
        transaction_id: Adjustment document identifier.
        status: Workflow status.
        adjustment_date: Effective adjustment timestamp.
        bin_id: Adjusted bin identifier.
        adjustment_type: Adjustment reason (`loss`, `wastage`, `positive-adjustment`, ...).
        lines: Adjusted item lines.
    """

    transaction_id: str
    status: str | None
    adjustment_date: datetime | None
    bin_id: str | None
    adjustment_type: str | None
    lines: tuple[TransactionLine, ...]


TransactionRecord = Union[GoodsReceiptRecord, DispatchRecord, InternalTransferRecord, StockAdjustmentRecord]


def stock_transaction_is_completed(record: TransactionRecord) -> bool:
    """Return whether a transaction qualifies for stock reconstruction.

    Args:
        record: Typed transaction record.

    Returns:
        bool: True for completed records and for legacy transfers without status.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if record.status == TRANSACTION_STATUS_COMPLETED:
        return True
    return isinstance(record, InternalTransferRecord) and record.status is None


def stock_adjustment_sign(adjustment_type: str | None) -> int:
    """Return the quantity sign implied by an adjustment type."""

    normalized_type = (adjustment_type or "").strip().lower()
    return -1 if normalized_type in NEGATIVE_ADJUSTMENT_TYPES else 1


__all__ = [
    "CountedItem",
    "DispatchRecord",
    "GoodsReceiptRecord",
    "InternalTransferRecord",
    "InventoryCountRecord",
    "NEGATIVE_ADJUSTMENT_TYPES",
    "StockAdjustmentRecord",
    "StockBalanceKey",
    "TRANSACTION_STATUS_COMPLETED",
    "TransactionKind",
    "TransactionLine",
    "TransactionRecord",
    "stock_adjustment_sign",
    "stock_transaction_is_completed",
]
