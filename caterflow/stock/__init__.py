"""Stock reconstruction engine and caller-facing stock queries."""

from caterflow.domain import stock_to_decimal

from .chronological_applier import StockFoldResult, stock_apply_effects
from .engine import stock_compute_balances
from .interfaces import (
	CountVariance,
	LowStockItem,
	StockBaseline,
	StockComputationRequest,
	StockComputationResult,
	StockEffect,
	StockInconsistency,
	StockNormalizationResult,
	StockQueryPort,
)
from .result_finalizer import stock_finalize_balances
from .service import StockCalculationService
from .snapshot_selector import stock_select_latest_counts
from .timestamps import stock_normalize_timestamp
from .transaction_normalizer import stock_normalize_transactions

__all__ = [
	"CountVariance",
	"LowStockItem",
	"StockBaseline",
	"StockCalculationService",
	"StockComputationRequest",
	"StockComputationResult",
	"StockEffect",
	"StockFoldResult",
	"StockInconsistency",
	"StockNormalizationResult",
	"StockQueryPort",
	"stock_apply_effects",
	"stock_compute_balances",
	"stock_finalize_balances",
	"stock_normalize_timestamp",
	"stock_normalize_transactions",
	"stock_select_latest_counts",
	"stock_to_decimal",
]
