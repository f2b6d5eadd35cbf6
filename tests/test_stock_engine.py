"""Regression tests for bulk stock reconstruction from counts and transactions."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from caterflow.domain import (
    CountedItem,
    DispatchRecord,
    GoodsReceiptRecord,
    InternalTransferRecord,
    InventoryCountRecord,
    StockAdjustmentRecord,
    StockBalanceKey,
    TransactionLine,
)
from caterflow.stock import StockComputationRequest, stock_compute_balances

T0 = datetime(2026, 3, 1, 8, 0, tzinfo=timezone.utc)
T1 = datetime(2026, 3, 2, 8, 0, tzinfo=timezone.utc)
T2 = datetime(2026, 3, 3, 8, 0, tzinfo=timezone.utc)


def _count(count_id: str, bin_id: str, count_date: datetime, **quantities: str) -> InventoryCountRecord:
    """Build one count with item quantities passed as keyword arguments."""

    return InventoryCountRecord(
        count_id=count_id,
        bin_id=bin_id,
        count_date=count_date,
        counted_items=tuple(
            CountedItem(stock_item_id=item_id, counted_quantity=Decimal(quantity))
            for item_id, quantity in quantities.items()
        ),
    )


def _line(item_id: str, quantity: str) -> TransactionLine:
    return TransactionLine(stock_item_id=item_id, quantity=Decimal(quantity))


def _compute(item_ids, bin_ids, counts=None, transactions=None, exclude_pre_count_transactions=False):
    return stock_compute_balances(
        StockComputationRequest(
            item_ids=frozenset(item_ids),
            bin_ids=frozenset(bin_ids),
            counts=counts or [],
            transactions=transactions or [],
            exclude_pre_count_transactions=exclude_pre_count_transactions,
        )
    )


def test_stock_receipt_then_dispatch_after_count_yields_expected_balance() -> None:
    """Count 10, receive 5, dispatch 3 in one bin ends at 12."""

    result = _compute(
        ["item-i"],
        ["bin-b"],
        counts=[_count("count-1", "bin-b", T0, **{"item-i": "10"})],
        transactions=[
            DispatchRecord("dispatch-1", "completed", T2, "bin-b", (_line("item-i", "3"),)),
            GoodsReceiptRecord("receipt-1", "completed", T1, "bin-b", (_line("item-i", "5"),)),
        ],
    )

    assert result.balances == {StockBalanceKey("item-i", "bin-b"): Decimal("12")}
    assert result.inconsistencies == ()


def test_stock_transfer_moves_quantity_and_conserves_total() -> None:
    """Transfer of 4 from A(10) to B(0) ends at A=6, B=4 with the same total."""

    result = _compute(
        ["item-i"],
        ["bin-a", "bin-b"],
        counts=[
            _count("count-a", "bin-a", T0, **{"item-i": "10"}),
            _count("count-b", "bin-b", T0, **{"item-i": "0"}),
        ],
        transactions=[
            InternalTransferRecord("transfer-1", "completed", T1, "bin-a", "bin-b", (_line("item-i", "4"),)),
        ],
    )

    balance_a = result.balances[StockBalanceKey("item-i", "bin-a")]
    balance_b = result.balances[StockBalanceKey("item-i", "bin-b")]
    assert balance_a == Decimal("6")
    assert balance_b == Decimal("4")
    assert balance_a + balance_b == Decimal("10")


def test_stock_loss_adjustment_reduces_balance() -> None:
    """A `loss` adjustment of 2 against a count of 10 ends at 8."""

    result = _compute(
        ["item-i"],
        ["bin-a"],
        counts=[_count("count-a", "bin-a", T0, **{"item-i": "10"})],
        transactions=[
            StockAdjustmentRecord("adjust-1", "completed", T1, "bin-a", "loss", (_line("item-i", "2"),)),
        ],
    )

    assert result.balances[StockBalanceKey("item-i", "bin-a")] == Decimal("8")


def test_stock_adjustment_sign_follows_adjustment_type_not_recorded_sign() -> None:
    """Negative kinds subtract and other kinds add, whatever sign the line carries."""

    result = _compute(
        ["item-i"],
        ["bin-a"],
        counts=[_count("count-a", "bin-a", T0, **{"item-i": "10"})],
        transactions=[
            StockAdjustmentRecord("adjust-1", "completed", T1, "bin-a", "wastage", (_line("item-i", "-1"),)),
            StockAdjustmentRecord("adjust-2", "completed", T1, "bin-a", "Theft", (_line("item-i", "2"),)),
            StockAdjustmentRecord(
                "adjust-3", "completed", T2, "bin-a", "positive-adjustment", (_line("item-i", "-4"),)
            ),
            StockAdjustmentRecord(
                "adjust-4", "completed", T2, "bin-a", "inventory-correction", (_line("item-i", "0.5"),)
            ),
        ],
    )

    assert result.balances[StockBalanceKey("item-i", "bin-a")] == Decimal("11.5")


def test_stock_bin_without_count_starts_from_zero() -> None:
    """A receipt of 7 into a never-counted bin yields 7."""

    result = _compute(
        ["item-i"],
        ["bin-c"],
        transactions=[GoodsReceiptRecord("receipt-1", "completed", T1, "bin-c", (_line("item-i", "7"),))],
    )

    assert result.balances == {StockBalanceKey("item-i", "bin-c"): Decimal("7")}


def test_stock_snapshot_is_returned_without_transactions() -> None:
    """Without qualifying transactions the counted quantity is returned, and zero for uncounted items."""

    result = _compute(
        ["item-i", "item-j"],
        ["bin-a", "bin-z"],
        counts=[_count("count-a", "bin-a", T0, **{"item-i": "3.25"})],
    )

    assert result.balances == {
        StockBalanceKey("item-i", "bin-a"): Decimal("3.25"),
        StockBalanceKey("item-i", "bin-z"): Decimal("0"),
        StockBalanceKey("item-j", "bin-a"): Decimal("0"),
        StockBalanceKey("item-j", "bin-z"): Decimal("0"),
    }


def test_stock_dispatch_exceeding_balance_is_clamped_and_reported() -> None:
    """Count 2 then dispatch 5 reports 0 and records the -3 inconsistency."""

    result = _compute(
        ["item-i"],
        ["bin-a"],
        counts=[_count("count-a", "bin-a", T0, **{"item-i": "2"})],
        transactions=[DispatchRecord("dispatch-1", "completed", T1, "bin-a", (_line("item-i", "5"),))],
    )

    key = StockBalanceKey("item-i", "bin-a")
    assert result.balances[key] == Decimal("0")
    assert len(result.inconsistencies) == 1
    assert result.inconsistencies[0].key == key
    assert result.inconsistencies[0].computed_quantity == Decimal("-3")


def test_stock_receipt_and_matching_dispatch_restore_baseline() -> None:
    """Receiving N and later dispatching N returns to the counted quantity."""

    result = _compute(
        ["item-i"],
        ["bin-a"],
        counts=[_count("count-a", "bin-a", T0, **{"item-i": "4"})],
        transactions=[
            GoodsReceiptRecord("receipt-1", "completed", T1, "bin-a", (_line("item-i", "9.75"),)),
            DispatchRecord("dispatch-1", "completed", T2, "bin-a", (_line("item-i", "9.75"),)),
        ],
    )

    assert result.balances[StockBalanceKey("item-i", "bin-a")] == Decimal("4")


def test_stock_latest_count_wins_and_ties_resolve_to_highest_count_id() -> None:
    """Only the newest count is used; equal dates pick the highest count identifier."""

    counts = [
        _count("count-old", "bin-a", T0, **{"item-i": "100"}),
        _count("count-b", "bin-a", T1, **{"item-i": "20"}),
        _count("count-a", "bin-a", T1, **{"item-i": "10"}),
    ]

    forward = _compute(["item-i"], ["bin-a"], counts=counts)
    reverse = _compute(["item-i"], ["bin-a"], counts=list(reversed(counts)))

    assert forward.balances[StockBalanceKey("item-i", "bin-a")] == Decimal("20")
    assert reverse.balances == forward.balances


def test_stock_incomplete_transactions_are_ignored_except_legacy_transfers() -> None:
    """Pending receipts are skipped; transfers without status still apply."""

    result = _compute(
        ["item-i"],
        ["bin-a", "bin-b"],
        counts=[_count("count-a", "bin-a", T0, **{"item-i": "10"})],
        transactions=[
            GoodsReceiptRecord("receipt-1", "pending", T1, "bin-a", (_line("item-i", "50"),)),
            DispatchRecord("dispatch-1", None, T1, "bin-a", (_line("item-i", "50"),)),
            InternalTransferRecord("transfer-1", "cancelled", T1, "bin-a", "bin-b", (_line("item-i", "5"),)),
            InternalTransferRecord("transfer-2", None, T2, "bin-a", "bin-b", (_line("item-i", "3"),)),
        ],
    )

    assert result.balances[StockBalanceKey("item-i", "bin-a")] == Decimal("7")
    assert result.balances[StockBalanceKey("item-i", "bin-b")] == Decimal("3")


def test_stock_transfer_to_unrequested_bin_only_reports_requested_side() -> None:
    """The far leg of a transfer is tracked but not returned."""

    result = _compute(
        ["item-i"],
        ["bin-a"],
        counts=[_count("count-a", "bin-a", T0, **{"item-i": "10"})],
        transactions=[
            InternalTransferRecord("transfer-1", "completed", T1, "bin-a", "bin-far", (_line("item-i", "4"),)),
            InternalTransferRecord("transfer-2", "completed", T2, "bin-far", "bin-a", (_line("item-i", "1"),)),
        ],
    )

    assert result.balances == {StockBalanceKey("item-i", "bin-a"): Decimal("7")}


def test_stock_missing_references_are_skipped_without_aborting() -> None:
    """Lines or bins without references are counted and dropped; the rest still applies."""

    result = _compute(
        ["item-i"],
        ["bin-a"],
        counts=[_count("count-a", "bin-a", T0, **{"item-i": "1"})],
        transactions=[
            GoodsReceiptRecord(
                "receipt-1",
                "completed",
                T1,
                "bin-a",
                (TransactionLine(stock_item_id=None, quantity=Decimal("8")), _line("item-i", "2")),
            ),
            GoodsReceiptRecord("receipt-2", "completed", T1, None, (_line("item-i", "30"),)),
            DispatchRecord("dispatch-1", "completed", None, "bin-a", (_line("item-i", "1"),)),
            InternalTransferRecord("transfer-1", "completed", T2, None, "bin-a", (_line("item-i", "4"),)),
        ],
    )

    assert result.balances[StockBalanceKey("item-i", "bin-a")] == Decimal("7")
    assert result.skipped_reference_count == 4


def test_stock_missing_line_quantity_counts_as_zero() -> None:
    """A line without quantity moves nothing."""

    result = _compute(
        ["item-i"],
        ["bin-a"],
        transactions=[
            GoodsReceiptRecord(
                "receipt-1",
                "completed",
                T1,
                "bin-a",
                (TransactionLine(stock_item_id="item-i", quantity=None),),
            )
        ],
    )

    assert result.balances[StockBalanceKey("item-i", "bin-a")] == Decimal("0")


def test_stock_decimal_arithmetic_is_exact_over_long_histories() -> None:
    """A thousand receipts of 0.1 sum to exactly 100."""

    transactions = [
        GoodsReceiptRecord(f"receipt-{index:04d}", "completed", T1, "bin-a", (_line("item-i", "0.1"),))
        for index in range(1000)
    ]

    result = _compute(["item-i"], ["bin-a"], transactions=transactions)

    assert result.balances[StockBalanceKey("item-i", "bin-a")] == Decimal("100.0")


def test_stock_results_are_deterministic_for_shuffled_inputs() -> None:
    """Input ordering does not change balances or inconsistencies."""

    counts = [
        _count("count-a", "bin-a", T0, **{"item-i": "5", "item-j": "1"}),
        _count("count-b", "bin-b", T0, **{"item-i": "2"}),
    ]
    transactions = [
        DispatchRecord("dispatch-1", "completed", T2, "bin-b", (_line("item-i", "9"),)),
        InternalTransferRecord("transfer-1", "completed", T1, "bin-a", "bin-b", (_line("item-i", "3"),)),
        GoodsReceiptRecord("receipt-1", "completed", T1, "bin-a", (_line("item-j", "4"),)),
    ]

    first = _compute(["item-i", "item-j"], ["bin-a", "bin-b"], counts=counts, transactions=transactions)
    second = _compute(
        ["item-j", "item-i"],
        ["bin-b", "bin-a"],
        counts=list(reversed(counts)),
        transactions=list(reversed(transactions)),
    )

    assert first == second
    assert all(quantity >= Decimal("0") for quantity in first.balances.values())


def test_stock_pre_count_transactions_apply_by_default_and_can_be_excluded() -> None:
    """Movements dated before the latest count apply unless exclusion is enabled."""

    counts = [_count("count-a", "bin-a", T1, **{"item-i": "10"})]
    transactions = [
        GoodsReceiptRecord("receipt-early", "completed", T0, "bin-a", (_line("item-i", "5"),)),
        GoodsReceiptRecord("receipt-late", "completed", T2, "bin-a", (_line("item-i", "1"),)),
    ]

    default_result = _compute(["item-i"], ["bin-a"], counts=counts, transactions=transactions)
    excluding_result = _compute(
        ["item-i"],
        ["bin-a"],
        counts=counts,
        transactions=transactions,
        exclude_pre_count_transactions=True,
    )

    assert default_result.balances[StockBalanceKey("item-i", "bin-a")] == Decimal("16")
    assert excluding_result.balances[StockBalanceKey("item-i", "bin-a")] == Decimal("11")
    assert excluding_result.excluded_pre_count_effect_count == 1


def test_stock_empty_item_or_bin_request_returns_empty_map() -> None:
    """Either empty input short-circuits to an empty result."""

    assert _compute([], ["bin-a"]).balances == {}
    assert _compute(["item-i"], []).balances == {}
