"""Regression tests for the SQL stock ledger adapter query templates and row mapping."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from caterflow.db import SQLAlchemyStockLedgerService, StockLedgerFetchError
from caterflow.domain import (
    DispatchRecord,
    GoodsReceiptRecord,
    InternalTransferRecord,
    StockAdjustmentRecord,
    TransactionLine,
)

T0 = datetime(2026, 6, 1, 6, 0, tzinfo=timezone.utc)


class _MappingResultStub:
    """Stub mapping result wrapper for SQLAlchemy-like query responses."""

    def __init__(self, rows: list[dict]):
        self._rows = rows

    def mappings(self) -> _MappingResultStub:
        """Return self to emulate SQLAlchemy mappings chain."""
        return self

    def all(self) -> list[dict]:
        """Return all row mappings."""
        return self._rows


class _ConnectionStub:
    """Connection stub capturing executed SQL and parameters."""

    def __init__(self, rows: list[dict], error: Exception | None = None):
        self._rows = rows
        self._error = error
        self.executed_queries: list[str] = []
        self.executed_parameters: list[dict] = []

    def __enter__(self) -> _ConnectionStub:
        return self

    def __exit__(self, exc_type, exc, traceback) -> bool:
        _ = (exc_type, exc, traceback)
        return False

    def execute(self, statement, parameters: dict):
        """Capture execute input and return deterministic row result."""

        statement_text = getattr(statement, "text", str(statement))
        self.executed_queries.append(statement_text)
        self.executed_parameters.append(parameters)
        if self._error is not None:
            raise self._error
        if "set_config" in statement_text:
            return _MappingResultStub(rows=[])
        return _MappingResultStub(rows=self._rows)


class _EngineStub:
    """Engine stub that returns a predefined connection object."""

    def __init__(self, connection: _ConnectionStub):
        self._connection = connection

    def connect(self) -> _ConnectionStub:
        """Return connection stub."""
        return self._connection


def _transaction_row(transaction_id: str, kind: str, **overrides) -> dict:
    """Build one joined transaction/line row mapping."""

    row = {
        "stock_transaction_id": transaction_id,
        "kind": kind,
        "status": "completed",
        "effective_date": T0,
        "bin_id": "bin-a",
        "from_bin_id": None,
        "to_bin_id": None,
        "adjustment_type": None,
        "stock_item_id": "item-i",
        "quantity": Decimal("2"),
    }
    row.update(overrides)
    return row


def test_count_list_groups_lines_per_count_and_binds_sorted_bins() -> None:
    """Joined count rows fold into one record per count with ordered bin parameters."""

    connection = _ConnectionStub(
        rows=[
            {
                "inventory_count_id": "count-2",
                "bin_id": "bin-b",
                "count_date": T0,
                "stock_item_id": "item-i",
                "counted_quantity": Decimal("4.5"),
            },
            {
                "inventory_count_id": "count-2",
                "bin_id": "bin-b",
                "count_date": T0,
                "stock_item_id": None,
                "counted_quantity": 3,
            },
            {
                "inventory_count_id": "count-1",
                "bin_id": "bin-a",
                "count_date": T0,
                "stock_item_id": None,
                "counted_quantity": None,
            },
        ]
    )
    service = SQLAlchemyStockLedgerService(engine=_EngineStub(connection))

    counts = service.db_inventory_count_list_for_bins(frozenset({"bin-b", " bin-a "}))

    assert connection.executed_parameters == [{"bin_ids": ["bin-a", "bin-b"]}]
    assert "FROM inventory_count ic" in connection.executed_queries[0]
    assert [count.count_id for count in counts] == ["count-2", "count-1"]
    assert [(line.stock_item_id, line.counted_quantity) for line in counts[0].counted_items] == [
        ("item-i", Decimal("4.5")),
        (None, Decimal("3")),
    ]
    assert counts[1].counted_items == ()


def test_transaction_list_builds_typed_records_per_kind() -> None:
    """Each kind discriminator maps to its own record type."""

    connection = _ConnectionStub(
        rows=[
            _transaction_row("receipt-1", "GoodsReceipt"),
            _transaction_row("receipt-1", "GoodsReceipt", stock_item_id="item-j", quantity=1.25),
            _transaction_row("dispatch-1", "DispatchLog"),
            _transaction_row(
                "transfer-1",
                "InternalTransfer",
                status=None,
                bin_id=None,
                from_bin_id="bin-a",
                to_bin_id="bin-z",
            ),
            _transaction_row("adjust-1", "StockAdjustment", adjustment_type="damage", quantity=None),
            _transaction_row("unknown-1", "PurchaseOrder"),
        ]
    )
    service = SQLAlchemyStockLedgerService(engine=_EngineStub(connection))

    records = service.db_stock_transaction_list_for_bins(frozenset({"bin-a"}))

    assert records == [
        GoodsReceiptRecord(
            "receipt-1",
            "completed",
            T0,
            "bin-a",
            (TransactionLine("item-i", Decimal("2")), TransactionLine("item-j", Decimal("1.25"))),
        ),
        DispatchRecord("dispatch-1", "completed", T0, "bin-a", (TransactionLine("item-i", Decimal("2")),)),
        InternalTransferRecord("transfer-1", None, T0, "bin-a", "bin-z", (TransactionLine("item-i", Decimal("2")),)),
        StockAdjustmentRecord("adjust-1", "completed", T0, "bin-a", "damage", (TransactionLine("item-i", None),)),
    ]
    query = connection.executed_queries[0]
    assert "st.status = 'completed'" in query
    assert "st.status IS NULL" in query
    assert "ORDER BY st.effective_date asc" in query


def test_statement_timeout_is_applied_before_the_read() -> None:
    """A configured timeout is set on the connection ahead of the ledger query."""

    connection = _ConnectionStub(rows=[])
    service = SQLAlchemyStockLedgerService(engine=_EngineStub(connection), statement_timeout_seconds=2.5)

    service.db_stock_transaction_list_for_bins(frozenset({"bin-a"}))

    assert "set_config('statement_timeout'" in connection.executed_queries[0]
    assert connection.executed_parameters[0] == {"statement_timeout": "2500ms"}
    assert "FROM stock_transaction st" in connection.executed_queries[1]


def test_empty_bin_set_skips_database_access() -> None:
    """No bins means no query."""

    connection = _ConnectionStub(rows=[])
    service = SQLAlchemyStockLedgerService(engine=_EngineStub(connection))

    assert service.db_inventory_count_list_for_bins(frozenset()) == []
    assert service.db_stock_transaction_list_for_bins(frozenset()) == []
    assert connection.executed_queries == []


def test_database_errors_surface_as_fetch_failures() -> None:
    """SQLAlchemy errors are wrapped in StockLedgerFetchError."""

    connection = _ConnectionStub(rows=[], error=OperationalError("SELECT", {}, Exception("timeout")))
    service = SQLAlchemyStockLedgerService(engine=_EngineStub(connection))

    with pytest.raises(StockLedgerFetchError):
        service.db_stock_transaction_list_for_bins(frozenset({"bin-a"}))


def test_invalid_constructor_and_bin_inputs_are_rejected() -> None:
    """Missing engine, non-positive timeout and blank bins raise ValueError."""

    with pytest.raises(ValueError):
        SQLAlchemyStockLedgerService(engine=None)  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        SQLAlchemyStockLedgerService(engine=_EngineStub(_ConnectionStub(rows=[])), statement_timeout_seconds=0)
    with pytest.raises(ValueError):
        SQLAlchemyStockLedgerService(engine=_EngineStub(_ConnectionStub(rows=[]))).db_inventory_count_list_for_bins(
            frozenset({""})
        )


def test_minimum_level_and_site_bin_reads_map_rows() -> None:
    """Stock item minimums map to Decimal and site bins keep query order."""

    minimum_connection = _ConnectionStub(
        rows=[
            {"stock_item_id": "item-i", "minimum_stock_level": Decimal("5.0000")},
            {"stock_item_id": "item-j", "minimum_stock_level": 2},
        ]
    )
    minimum_levels = SQLAlchemyStockLedgerService(
        engine=_EngineStub(minimum_connection)
    ).db_stock_item_minimum_levels()

    site_connection = _ConnectionStub(rows=[{"bin_id": "bin-a"}, {"bin_id": "bin-b"}])
    site_service = SQLAlchemyStockLedgerService(engine=_EngineStub(site_connection))
    bin_ids = site_service.db_bin_ids_for_site(" site-1 ")

    assert minimum_levels == {"item-i": Decimal("5"), "item-j": Decimal("2")}
    assert "FROM stock_item" in minimum_connection.executed_queries[0]
    assert bin_ids == ["bin-a", "bin-b"]
    assert site_connection.executed_parameters == [{"site_id": "site-1"}]
    with pytest.raises(ValueError):
        site_service.db_bin_ids_for_site(" ")
