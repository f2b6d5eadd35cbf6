"""Typed contracts for stock reconstruction computations."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Protocol

from caterflow.domain import InventoryCountRecord, StockBalanceKey, TransactionRecord


@dataclass(frozen=True)
class StockBaseline:
    """Starting balances taken from the latest count of one bin.

    Attributes:
        count_id: Identifier of the authoritative count.
        count_date: UTC timestamp of the authoritative count.
        quantities: Counted quantity per stock item identifier.
    """

    count_id: str
    count_date: datetime
    quantities: dict[str, Decimal]


@dataclass(frozen=True)
class StockEffect:
    """One signed quantity movement for one item in one bin.

    Attributes:
        item_id: Stock item identifier.
        bin_id: Affected bin identifier.
        delta: Signed quantity change.
        timestamp: Effective UTC timestamp of the originating transaction.
        transaction_id: Originating transaction identifier.
        leg_index: Position of the effect within its transaction, for stable ordering.
    """

    item_id: str
    bin_id: str
    delta: Decimal
    timestamp: datetime
    transaction_id: str
    leg_index: int = 0

    @property
    def key(self) -> StockBalanceKey:
        """Return the balance key this effect folds into."""

        return StockBalanceKey(item_id=self.item_id, bin_id=self.bin_id)


@dataclass(frozen=True)
class StockNormalizationResult:
    """Effects produced from a transaction list.

    Attributes:
        effects: Normalized effects in input order.
        skipped_reference_count: Lines or legs dropped for missing item, bin or date references.
        ignored_transaction_count: Records ignored for unsupported kind or status.
    """

    effects: tuple[StockEffect, ...]
    skipped_reference_count: int
    ignored_transaction_count: int


@dataclass(frozen=True)
class StockInconsistency:
    """A requested balance that computed below zero and was clamped.

    Attributes:
        key: Affected item/bin pair.
        computed_quantity: Negative quantity before clamping.
    """

    key: StockBalanceKey
    computed_quantity: Decimal


@dataclass(frozen=True)
class StockComputationRequest:
    """Input contract for one bulk stock reconstruction.

    Attributes:
        item_ids: Requested stock item identifiers.
        bin_ids: Requested bin identifiers.
        counts: Counts fetched for the requested bins.
        transactions: Transactions fetched for the requested bins.
        exclude_pre_count_transactions: Skip effects dated before their bin's baseline count.
    """

    item_ids: frozenset[str]
    bin_ids: frozenset[str]
    counts: list[InventoryCountRecord]
    transactions: list[TransactionRecord]
    exclude_pre_count_transactions: bool = False



@dataclass(frozen=True)
class StockComputationResult:
    """Output payload for one bulk stock reconstruction.

    Attributes:
        balances: Non-negative balance per requested item/bin pair.
        inconsistencies: Requested pairs that were clamped from a negative value.
        skipped_reference_count: Effects dropped for missing references.
        excluded_pre_count_effect_count: Effects skipped because they predate the bin's count.
        ignored_transaction_count: Records ignored for unsupported kind or non-completed status.
    """

    balances: dict[StockBalanceKey, Decimal]
    inconsistencies: tuple[StockInconsistency, ...] = field(default_factory=tuple)
    skipped_reference_count: int = 0
    excluded_pre_count_effect_count: int = 0
    ignored_transaction_count: int = 0


@dataclass(frozen=True)
class LowStockItem:
    """Stock item whose total across the inspected bins is at or below its minimum.

    Attributes:
        item_id: Stock item identifier.
        minimum_stock_level: Configured minimum level.
        current_stock: Total balance across the inspected bins.
        primary_bin_id: First inspected bin holding stock, else the first inspected bin.
    """

    item_id: str
    minimum_stock_level: Decimal
    current_stock: Decimal
    primary_bin_id: str


@dataclass(frozen=True)
class CountVariance:
    """Difference between a physical count and the computed system quantity.

    Attributes:
        item_id: Stock item identifier.
        bin_id: Counted bin identifier.
        system_quantity: Computed balance at count time.
        counted_quantity: Physically counted quantity.
        variance: `counted_quantity - system_quantity`.
    """

    item_id: str
    bin_id: str
    system_quantity: Decimal
    counted_quantity: Decimal
    variance: Decimal


class StockQueryPort(Protocol):
    """Port definition for the read-only stock queries served over HTTP."""

    def stock_compute(self, item_ids: list[str], bin_ids: list[str]) -> StockComputationResult:
        """Compute balances with data-quality diagnostics for item/bin pairs.

        Args:
            item_ids: Stock item identifiers.
            bin_ids: Bin identifiers.

        Returns:
            StockComputationResult: Balances for every requested pair.

        Raises:
            ValueError: Raised when an identifier is blank.
            StockLedgerFetchError: Raised when the ledger read fails.
        """

    def stock_current(self, item_id: str, bin_id: str) -> Decimal:
        """Compute the balance of one item in one bin."""

    def stock_bin(self, item_ids: list[str], bin_id: str) -> dict[str, Decimal]:
        """Compute balances of several items in one bin."""

    def stock_has_sufficient(self, item_id: str, bin_id: str, required: Decimal) -> bool:
        """Return whether a bin holds at least the required quantity of an item."""

    def stock_low_stock_items(
        self,
        minimum_levels: dict[str, Decimal],
        bin_ids: list[str],
    ) -> list[LowStockItem]:
        """List items at or below the given minimum levels across the bins."""

    def stock_low_stock_items_for_site(self, site_id: str) -> list[LowStockItem]:
        """List items at or below their stored minimum across the bins of a site."""

    def stock_count_variances(self, bin_id: str, counted_quantities: dict[str, Decimal]) -> list[CountVariance]:
        """Compare counted quantities with the current system balances of one bin."""
