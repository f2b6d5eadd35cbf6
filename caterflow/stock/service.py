"""Caller-facing stock queries backed by the read-only ledger repository."""
# pylint: disable=too-few-public-methods

from __future__ import annotations

import logging
from decimal import Decimal

from caterflow.db import StockLedgerRepositoryPort
from caterflow.domain import StockBalanceKey, stock_to_decimal

from .engine import stock_compute_balances
from .interfaces import (
    CountVariance,
    LowStockItem,
    StockComputationRequest,
    StockComputationResult,
    StockQueryPort,
)

logger = logging.getLogger(__name__)


class StockCalculationService(StockQueryPort):
    """Reconstruct current stock per item and bin on every call.

    Nothing is cached; each call reads counts and transactions for the
    requested bins and folds them from scratch.
    """

    def __init__(self, repository: StockLedgerRepositoryPort, exclude_pre_count_transactions: bool = False):
        """Initialize stock service dependencies.

        Args:
            repository: Read-only ledger repository.
            exclude_pre_count_transactions: Skip movements dated before a bin's latest count.

        Returns:
            None: Initializer does not return values.

        Raises:
            ValueError: Raised when repository is invalid.
        """

        if repository is None:
            raise ValueError("repository must not be None")
        self._repository = repository
        self._exclude_pre_count_transactions = exclude_pre_count_transactions

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

        normalized_item_ids = self._stock_normalize_ids(item_ids, "item_ids")
        normalized_bin_ids = self._stock_normalize_ids(bin_ids, "bin_ids")
        if not normalized_item_ids or not normalized_bin_ids:
            return StockComputationResult(balances={})

        counts = self._repository.db_inventory_count_list_for_bins(normalized_bin_ids)
        transactions = self._repository.db_stock_transaction_list_for_bins(normalized_bin_ids)

        result = stock_compute_balances(
            StockComputationRequest(
                item_ids=normalized_item_ids,
                bin_ids=normalized_bin_ids,
                counts=counts,
                transactions=transactions,
                exclude_pre_count_transactions=self._exclude_pre_count_transactions,
            )
        )
        if result.skipped_reference_count:
            logger.warning(
                "stock computation skipped %s effects with missing references for %s bins",
                result.skipped_reference_count,
                len(normalized_bin_ids),
            )
        return result

    def stock_bulk(self, item_ids: list[str], bin_ids: list[str]) -> dict[StockBalanceKey, Decimal]:
        """Compute balances for every requested item/bin pair.

        Args:
            item_ids: Stock item identifiers.
            bin_ids: Bin identifiers.

        Returns:
            dict[StockBalanceKey, Decimal]: Non-negative balance per pair, or an
            empty map when either input is empty.

        Raises:
            ValueError: Raised when an identifier is blank.
            StockLedgerFetchError: Raised when the ledger read fails.
        """

        return self.stock_compute(item_ids, bin_ids).balances

    def stock_current(self, item_id: str, bin_id: str) -> Decimal:
        """Compute the balance of one item in one bin.

        Args:
            item_id: Stock item identifier.
            bin_id: Bin identifier.

        Returns:
            Decimal: Non-negative balance.

        Raises:
            ValueError: Raised when an identifier is blank.
            StockLedgerFetchError: Raised when the ledger read fails.
        """

        balances = self.stock_bulk([item_id], [bin_id])
        return balances.get(StockBalanceKey(item_id=item_id.strip(), bin_id=bin_id.strip()), Decimal("0"))

    def stock_bin(self, item_ids: list[str], bin_id: str) -> dict[str, Decimal]:
        """Compute balances of several items in one bin.

        Args:
            item_ids: Stock item identifiers.
            bin_id: Bin identifier.

        Returns:
            dict[str, Decimal]: Balance keyed by item identifier.

        Raises:
            ValueError: Raised when an identifier is blank.
            StockLedgerFetchError: Raised when the ledger read fails.
        """

        balances = self.stock_bulk(item_ids, [bin_id])
        return {key.item_id: quantity for key, quantity in balances.items()}

    def stock_has_sufficient(self, item_id: str, bin_id: str, required: Decimal | int | str) -> bool:
        """Return whether a bin holds at least the required quantity of an item.

        Args:
            item_id: Stock item identifier.
            bin_id: Bin identifier.
            required: Required quantity.

        Returns:
            bool: True when current balance is greater than or equal to required.

        Raises:
            ValueError: Raised when required is negative or an identifier is blank.
            StockLedgerFetchError: Raised when the ledger read fails.
        """

        required_quantity = stock_to_decimal(required)
        if required_quantity < Decimal("0"):
            raise ValueError("required must not be negative")
        return self.stock_current(item_id, bin_id) >= required_quantity

    def stock_low_stock_items(
        self,
        minimum_levels: dict[str, Decimal | int | str],
        bin_ids: list[str],
    ) -> list[LowStockItem]:
        """List items whose stock across the given bins is at or below their minimum.

        Item keys are stripped before use, so `"rice"` and `" rice"` name the
        same item. A later duplicate overrides an earlier one.

        Args:
            minimum_levels: Minimum stock level keyed by item identifier.
            bin_ids: Bins to total, in caller order.

        Returns:
            list[LowStockItem]: Low-stock items sorted by item identifier.

        Raises:
            ValueError: Raised when an identifier or level is invalid.
            StockLedgerFetchError: Raised when the ledger read fails.
        """

        normalized_levels = self._stock_normalize_quantity_map(minimum_levels, "minimum_levels")
        ordered_bin_ids = list(dict.fromkeys(str(bin_id).strip() for bin_id in bin_ids))
        if not normalized_levels or not ordered_bin_ids:
            return []

        balances = self.stock_bulk(list(normalized_levels), ordered_bin_ids)
        low_stock_items: list[LowStockItem] = []
        for item_id in sorted(normalized_levels):
            per_bin = [
                (bin_id, balances.get(StockBalanceKey(item_id=item_id, bin_id=bin_id), Decimal("0")))
                for bin_id in ordered_bin_ids
            ]
            total_quantity = sum((quantity for _, quantity in per_bin), Decimal("0"))
            if total_quantity > normalized_levels[item_id]:
                continue
            primary_bin_id = next((bin_id for bin_id, quantity in per_bin if quantity > 0), ordered_bin_ids[0])
            low_stock_items.append(
                LowStockItem(
                    item_id=item_id,
                    minimum_stock_level=normalized_levels[item_id],
                    current_stock=total_quantity,
                    primary_bin_id=primary_bin_id,
                )
            )
        return low_stock_items

    def stock_low_stock_items_for_site(self, site_id: str) -> list[LowStockItem]:
        """List items at or below their stored minimum level across a site's bins.

        Args:
            site_id: Site identifier.

        Returns:
            list[LowStockItem]: Low-stock items sorted by item identifier, or an
            empty list when the site has no bins.

        Raises:
            ValueError: Raised when site_id is blank.
            StockLedgerFetchError: Raised when the ledger read fails.
        """

        if site_id is None or not str(site_id).strip():
            raise ValueError("site_id must not be blank")
        bin_ids = self._repository.db_bin_ids_for_site(str(site_id).strip())
        if not bin_ids:
            logger.info("site %s has no bins; low-stock report is empty", site_id)
            return []
        return self.stock_low_stock_items(self._repository.db_stock_item_minimum_levels(), bin_ids)

    def stock_count_variances(
        self,
        bin_id: str,
        counted_quantities: dict[str, Decimal | int | str],
    ) -> list[CountVariance]:
        """Compare physically counted quantities with the current system balances.

        Args:
            bin_id: Counted bin identifier.
            counted_quantities: Counted quantity keyed by item identifier.

        Returns:
            list[CountVariance]: One entry per counted item, sorted by item identifier.

        Raises:
            ValueError: Raised when an identifier or quantity is invalid.
            StockLedgerFetchError: Raised when the ledger read fails.
        """

        normalized_counts = self._stock_normalize_quantity_map(counted_quantities, "counted_quantities")
        if not normalized_counts:
            return []

        system_quantities = self.stock_bin(list(normalized_counts), bin_id)
        normalized_bin_id = bin_id.strip()
        return [
            CountVariance(
                item_id=item_id,
                bin_id=normalized_bin_id,
                system_quantity=system_quantities.get(item_id, Decimal("0")),
                counted_quantity=normalized_counts[item_id],
                variance=normalized_counts[item_id] - system_quantities.get(item_id, Decimal("0")),
            )
            for item_id in sorted(normalized_counts)
        ]

    def _stock_normalize_quantity_map(
        self,
        quantities: dict[str, Decimal | int | str],
        field_name: str,
    ) -> dict[str, Decimal]:
        """Strip item keys and convert values to Decimal.

        Raises:
            ValueError: Raised when quantities is None, a key is blank or a value is not numeric.
        """

        if quantities is None:
            raise ValueError(f"{field_name} must not be None")
        normalized_quantities: dict[str, Decimal] = {}
        for item_id, quantity in quantities.items():
            normalized_item_id = str(item_id).strip()
            if not normalized_item_id:
                raise ValueError(f"{field_name} must not contain blank item identifiers")
            normalized_quantities[normalized_item_id] = stock_to_decimal(quantity)
        return normalized_quantities

    def _stock_normalize_ids(self, identifiers: list[str], field_name: str) -> frozenset[str]:
        """Strip and de-duplicate identifiers.

        Args:
            identifiers: Raw identifiers.
            field_name: Field label used in validation errors.

        Returns:
            frozenset[str]: Normalized identifiers.

        Raises:
            ValueError: Raised when identifiers is None or contains blank values.
        """

        if identifiers is None:
            raise ValueError(f"{field_name} must not be None")
        normalized_ids = frozenset(str(identifier).strip() for identifier in identifiers)
        if "" in normalized_ids:
            raise ValueError(f"{field_name} must not contain blank values")
        return normalized_ids


__all__ = ["StockCalculationService"]
