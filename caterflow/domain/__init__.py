"""Domain models used across application layer boundaries."""

from .models import HealthStatus
from .quantities import stock_to_decimal
from .stock_records import (
    CountedItem,
    DispatchRecord,
    GoodsReceiptRecord,
    InternalTransferRecord,
    InventoryCountRecord,
    StockAdjustmentRecord,
    StockBalanceKey,
    TransactionKind,
    TransactionLine,
    TransactionRecord,
    stock_adjustment_sign,
    stock_transaction_is_completed,
)

__all__ = [
    "HealthStatus",
    "CountedItem",
    "DispatchRecord",
    "GoodsReceiptRecord",
    "InternalTransferRecord",
    "InventoryCountRecord",
    "StockAdjustmentRecord",
    "StockBalanceKey",
    "TransactionKind",
    "TransactionLine",
    "TransactionRecord",
    "stock_adjustment_sign",
    "stock_to_decimal",
    "stock_transaction_is_completed",
]
