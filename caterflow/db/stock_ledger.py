"""Database service reading inventory counts and stock transactions."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from caterflow.db.interfaces import StockLedgerFetchError, StockLedgerRepositoryPort
from caterflow.domain import (
    CountedItem,
    DispatchRecord,
    GoodsReceiptRecord,
    InternalTransferRecord,
    InventoryCountRecord,
    StockAdjustmentRecord,
    TransactionKind,
    TransactionLine,
    TransactionRecord,
    stock_to_decimal,
)

logger = logging.getLogger(__name__)


class SQLAlchemyStockLedgerService(StockLedgerRepositoryPort):
    """SQLAlchemy implementation of the read-only stock ledger port."""

    _COUNT_LIST_QUERY = (
        "SELECT "
        "ic.inventory_count_id, ic.bin_id, ic.count_date, "
        "ici.stock_item_id, ici.counted_quantity "
        "FROM inventory_count ic "
        "LEFT JOIN inventory_count_item ici ON ici.inventory_count_id = ic.inventory_count_id "
        "WHERE ic.bin_id = ANY(:bin_ids) "
        "ORDER BY ic.count_date desc, ic.inventory_count_id desc, ici.line_number asc"
    )

    _TRANSACTION_LIST_QUERY = (
        "SELECT "
        "st.stock_transaction_id, st.kind, st.status, st.effective_date, st.bin_id, "
        "st.from_bin_id, st.to_bin_id, st.adjustment_type, "
        "sti.stock_item_id, sti.quantity "
        "FROM stock_transaction st "
        "LEFT JOIN stock_transaction_item sti ON sti.stock_transaction_id = st.stock_transaction_id "
        "WHERE ("
        "(st.kind IN ('GoodsReceipt', 'DispatchLog', 'StockAdjustment') "
        "AND st.status = 'completed' AND st.bin_id = ANY(:bin_ids)) "
        "OR (st.kind = 'InternalTransfer' "
        "AND (st.status = 'completed' OR st.status IS NULL) "
        "AND (st.from_bin_id = ANY(:bin_ids) OR st.to_bin_id = ANY(:bin_ids)))"
        ") "
        "ORDER BY st.effective_date asc, st.stock_transaction_id asc, sti.line_number asc"
    )

    _MINIMUM_LEVEL_LIST_QUERY = (
        "SELECT stock_item_id, minimum_stock_level FROM stock_item ORDER BY stock_item_id asc"
    )

    _SITE_BIN_LIST_QUERY = "SELECT bin_id FROM bin WHERE site_id = :site_id ORDER BY bin_id asc"

    def __init__(self, engine: Engine, statement_timeout_seconds: float | None = None):
        """Initialize stock ledger database service.

        Args:
            engine: SQLAlchemy engine used for ledger reads.
            statement_timeout_seconds: Optional per-statement timeout applied to each read.

        Returns:
            None: Initializer does not return values.

        Raises:
            ValueError: Raised when engine or timeout is invalid.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        if statement_timeout_seconds is not None and statement_timeout_seconds <= 0:
            raise ValueError("statement_timeout_seconds must be positive")
        self._engine = engine
        self._statement_timeout_seconds = statement_timeout_seconds

    def db_inventory_count_list_for_bins(self, bin_ids: frozenset[str]) -> list[InventoryCountRecord]:
        """List inventory counts and their counted lines for the given bins.

        Args:
            bin_ids: Bin identifiers to filter by.

        Returns:
            list[InventoryCountRecord]: Counts ordered newest first.

        Raises:
            ValueError: Raised when bin identifiers are invalid.
            StockLedgerFetchError: Raised when database read fails.
        """

        normalized_bin_ids = self._db_stock_validate_bin_ids(bin_ids)
        if not normalized_bin_ids:
            return []

        rows = self._db_stock_fetch_rows(
            self._COUNT_LIST_QUERY,
            {"bin_ids": normalized_bin_ids},
            "inventory count read failed",
        )

        counts_by_id: dict[str, dict[str, Any]] = {}
        for row in rows:
            count_id = str(row["inventory_count_id"])
            count_payload = counts_by_id.setdefault(
                count_id,
                {
                    "bin_id": None if row["bin_id"] is None else str(row["bin_id"]),
                    "count_date": row["count_date"],
                    "counted_items": [],
                },
            )
            if row["stock_item_id"] is None and row["counted_quantity"] is None:
                continue
            count_payload["counted_items"].append(
                CountedItem(
                    stock_item_id=None if row["stock_item_id"] is None else str(row["stock_item_id"]),
                    counted_quantity=stock_to_decimal(row["counted_quantity"]),
                )
            )

        return [
            InventoryCountRecord(
                count_id=count_id,
                bin_id=payload["bin_id"],
                count_date=payload["count_date"],
                counted_items=tuple(payload["counted_items"]),
            )
            for count_id, payload in counts_by_id.items()
        ]

    def db_stock_transaction_list_for_bins(self, bin_ids: frozenset[str]) -> list[TransactionRecord]:
        """List completed stock-moving transactions touching the given bins.

        Args:
            bin_ids: Bin identifiers to filter by.

        Returns:
            list[TransactionRecord]: Typed transactions ordered by effective date.

        Raises:
            ValueError: Raised when bin identifiers are invalid.
            StockLedgerFetchError: Raised when database read fails.
        """

        normalized_bin_ids = self._db_stock_validate_bin_ids(bin_ids)
        if not normalized_bin_ids:
            return []

        rows = self._db_stock_fetch_rows(
            self._TRANSACTION_LIST_QUERY,
            {"bin_ids": normalized_bin_ids},
            "stock transaction read failed",
        )

        headers: dict[str, dict[str, Any]] = {}
        lines_by_transaction: dict[str, list[TransactionLine]] = {}
        for row in rows:
            transaction_id = str(row["stock_transaction_id"])
            if transaction_id not in headers:
                headers[transaction_id] = dict(row)
                lines_by_transaction[transaction_id] = []
            if row["stock_item_id"] is None and row["quantity"] is None:
                continue
            lines_by_transaction[transaction_id].append(
                TransactionLine(
                    stock_item_id=None if row["stock_item_id"] is None else str(row["stock_item_id"]),
                    quantity=None if row["quantity"] is None else stock_to_decimal(row["quantity"]),
                )
            )

        records: list[TransactionRecord] = []
        for transaction_id, header in headers.items():
            record = self._db_stock_build_transaction(
                transaction_id=transaction_id,
                header=header,
                lines=tuple(lines_by_transaction[transaction_id]),
            )
            if record is not None:
                records.append(record)
        return records

    def db_stock_item_minimum_levels(self) -> dict[str, Decimal]:
        """Read the configured minimum stock level of every stock item.

        Returns:
            dict[str, Decimal]: Minimum level keyed by stock item identifier.

        Raises:
            StockLedgerFetchError: Raised when database read fails.
        """

        rows = self._db_stock_fetch_rows(self._MINIMUM_LEVEL_LIST_QUERY, {}, "stock item read failed")
        return {str(row["stock_item_id"]): stock_to_decimal(row["minimum_stock_level"]) for row in rows}

    def db_bin_ids_for_site(self, site_id: str) -> list[str]:
        """List bins belonging to one site.

        Args:
            site_id: Site identifier.

        Returns:
            list[str]: Bin identifiers ordered ascending.

        Raises:
            ValueError: Raised when site_id is blank.
            StockLedgerFetchError: Raised when database read fails.
        """

        if site_id is None or not str(site_id).strip():
            raise ValueError("site_id must not be blank")
        rows = self._db_stock_fetch_rows(
            self._SITE_BIN_LIST_QUERY,
            {"site_id": str(site_id).strip()},
            "bin read failed",
        )
        return [str(row["bin_id"]) for row in rows]

    def _db_stock_fetch_rows(self, query: str, parameters: dict[str, Any], failure_message: str) -> list[Any]:
        """Execute one ledger read with the configured statement timeout.

        Args:
            query: Fixed SQL template.
            parameters: Bound query parameters.
            failure_message: Error message used when the read fails.

        Returns:
            list[Any]: Row mappings.

        Raises:
            StockLedgerFetchError: Raised when database read fails.
        """

        try:
            with self._engine.connect() as connection:
                if self._statement_timeout_seconds is not None:
                    connection.execute(
                        text("SELECT set_config('statement_timeout', :statement_timeout, true)"),
                        {"statement_timeout": f"{int(self._statement_timeout_seconds * 1000)}ms"},
                    )
                return list(connection.execute(text(query), parameters).mappings().all())
        except SQLAlchemyError as error:
            raise StockLedgerFetchError(failure_message) from error

    def _db_stock_build_transaction(
        self,
        transaction_id: str,
        header: dict[str, Any],
        lines: tuple[TransactionLine, ...],
    ) -> TransactionRecord | None:
        """Build one typed transaction record from a joined header row.

        Args:
            transaction_id: Transaction identifier.
            header: First joined row of the transaction.
            lines: Item lines of the transaction.

        Returns:
            TransactionRecord | None: Typed record, or None for unsupported kinds.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        kind = header["kind"]
        status = header["status"]
        effective_date = header["effective_date"]
        bin_id = None if header["bin_id"] is None else str(header["bin_id"])

        if kind == TransactionKind.GOODS_RECEIPT.value:
            return GoodsReceiptRecord(
                transaction_id=transaction_id,
                status=status,
                receipt_date=effective_date,
                receiving_bin_id=bin_id,
                lines=lines,
            )
        if kind == TransactionKind.DISPATCH.value:
            return DispatchRecord(
                transaction_id=transaction_id,
                status=status,
                dispatch_date=effective_date,
                source_bin_id=bin_id,
                lines=lines,
            )
        if kind == TransactionKind.INTERNAL_TRANSFER.value:
            return InternalTransferRecord(
                transaction_id=transaction_id,
                status=status,
                transfer_date=effective_date,
                from_bin_id=None if header["from_bin_id"] is None else str(header["from_bin_id"]),
                to_bin_id=None if header["to_bin_id"] is None else str(header["to_bin_id"]),
                lines=lines,
            )
        if kind == TransactionKind.STOCK_ADJUSTMENT.value:
            return StockAdjustmentRecord(
                transaction_id=transaction_id,
                status=status,
                adjustment_date=effective_date,
                bin_id=bin_id,
                adjustment_type=header["adjustment_type"],
                lines=lines,
            )

        logger.warning("ignoring stock transaction %s with unsupported kind=%s", transaction_id, kind)
        return None

    def _db_stock_validate_bin_ids(self, bin_ids: frozenset[str]) -> list[str]:
        """Validate bin identifiers and return them in deterministic order.

        Args:
            bin_ids: Bin identifiers.

        Returns:
            list[str]: Sorted stripped bin identifiers.

        Raises:
            ValueError: Raised when bin_ids is None or contains blank values.
        """

        if bin_ids is None:
            raise ValueError("bin_ids must not be None")
        normalized_bin_ids = {str(bin_id).strip() for bin_id in bin_ids}
        if "" in normalized_bin_ids:
            raise ValueError("bin_ids must not contain blank values")
        return sorted(normalized_bin_ids)


__all__ = ["SQLAlchemyStockLedgerService"]
