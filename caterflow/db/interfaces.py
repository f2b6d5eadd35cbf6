"""Typed interfaces for database-layer services.

All SQL access must remain in the db package and its submodules.
"""

from decimal import Decimal
from typing import Protocol

from caterflow.domain import HealthStatus, InventoryCountRecord, TransactionRecord


class DatabaseHealthPort(Protocol):
    """Port definition for database connectivity verification."""

    def db_connection_label(self) -> str:
        """Return a stable label for the active database connection target.

        Returns:
            str: Database target label for diagnostics.

        Raises:
            RuntimeError: Raised when connection metadata is unavailable.
        """

    def db_check_health(self) -> HealthStatus:
        """Check database connectivity and return deterministic health payload.

        Returns:
            HealthStatus: Database health status payload.

        Raises:
            ConnectionError: Raised when database cannot be reached.
        """


class StockLedgerFetchError(RuntimeError):
    """Raised when counts or transactions cannot be read from the ledger store."""


class StockLedgerRepositoryPort(Protocol):
    """Read-only port over inventory counts and stock-moving transactions."""

    def db_inventory_count_list_for_bins(self, bin_ids: frozenset[str]) -> list[InventoryCountRecord]:
        """List inventory counts recorded for any of the given bins.

        Args:
            bin_ids: Bin identifiers to filter by.

        Returns:
            list[InventoryCountRecord]: Counts with their counted item lines.

        Raises:
            StockLedgerFetchError: Raised when the read fails or times out.
        """

    def db_stock_transaction_list_for_bins(self, bin_ids: frozenset[str]) -> list[TransactionRecord]:
        """List completed stock-moving transactions touching any of the given bins.

        Transfers with no status are included as legacy completed rows.

        Args:
            bin_ids: Bin identifiers to filter by.

        Returns:
            list[TransactionRecord]: Typed receipts, dispatches, transfers and adjustments.

        Raises:
            StockLedgerFetchError: Raised when the read fails or times out.
        """

    def db_stock_item_minimum_levels(self) -> dict[str, Decimal]:
        """Read the configured minimum stock level of every stock item.

        Returns:
            dict[str, Decimal]: Minimum level keyed by stock item identifier.

        Raises:
            StockLedgerFetchError: Raised when the read fails or times out.
        """

    def db_bin_ids_for_site(self, site_id: str) -> list[str]:
        """List bins belonging to one site.

        Args:
            site_id: Site identifier.

        Returns:
            list[str]: Bin identifiers in stable order.

        Raises:
            StockLedgerFetchError: Raised when the read fails or times out.
        """
