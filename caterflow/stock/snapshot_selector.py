"""Latest-count baseline selection per bin."""

from __future__ import annotations

import logging
from decimal import Decimal

from caterflow.domain import InventoryCountRecord, stock_to_decimal

from .interfaces import StockBaseline
from .timestamps import stock_normalize_timestamp

logger = logging.getLogger(__name__)


def stock_select_latest_counts(
    counts: list[InventoryCountRecord],
    bin_ids: frozenset[str] | None = None,
) -> dict[str, StockBaseline]:
    """Pick the authoritative count of every bin and build its baseline.

    The latest `count_date` wins. Counts sharing the same timestamp resolve to
    the highest `count_id`, independent of input order.

    Args:
        counts: Counts for any number of bins.
        bin_ids: Optional bin filter; counts for other bins are ignored.

    Returns:
        dict[str, StockBaseline]: Baseline keyed by bin identifier. Bins without
        any count have no entry.

    Raises:
        ValueError: Raised when a count date cannot be parsed.
    """

    latest_counts: dict[str, tuple[InventoryCountRecord, object]] = {}
    for count in counts:
        if not count.bin_id:
            logger.warning("skipping inventory count %s without bin reference", count.count_id)
            continue
        if bin_ids is not None and count.bin_id not in bin_ids:
            continue

        sort_key = (stock_normalize_timestamp(count.count_date), count.count_id)
        current = latest_counts.get(count.bin_id)
        if current is None or sort_key > current[1]:
            latest_counts[count.bin_id] = (count, sort_key)

    baselines: dict[str, StockBaseline] = {}
    for bin_id, (count, sort_key) in latest_counts.items():
        quantities: dict[str, Decimal] = {}
        for counted_item in count.counted_items:
            if not counted_item.stock_item_id:
                logger.warning("skipping counted line without stock item in count %s", count.count_id)
                continue
            quantities[counted_item.stock_item_id] = stock_to_decimal(counted_item.counted_quantity)
        baselines[bin_id] = StockBaseline(
            count_id=count.count_id,
            count_date=sort_key[0],
            quantities=quantities,
        )
    return baselines


__all__ = ["stock_select_latest_counts"]
