"""Stock API router composition for read-only balance queries."""
# pylint: disable=duplicate-code

from __future__ import annotations

from decimal import Decimal
from typing import Callable

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from caterflow.config import AppSettings
from caterflow.db import StockLedgerFetchError
from caterflow.domain import StockBalanceKey
from caterflow.stock import CountVariance, LowStockItem, StockQueryPort


class LowStockQuery(BaseModel):
    """Request body for the low-stock report."""

    minimum_levels: dict[str, Decimal] = Field(default_factory=dict)
    bin_ids: list[str] = Field(default_factory=list)


class CountVarianceQuery(BaseModel):
    """Request body for count-variance computation."""

    counted_quantities: dict[str, Decimal] = Field(default_factory=dict)


def api_create_stock_router(
    settings: AppSettings,
    stock_service: StockQueryPort,
) -> APIRouter:
    """Create stock router exposing read-only balance endpoints.

    Args:
        settings: Runtime settings used for request bounds.
        stock_service: Stock query service.

    Returns:
        APIRouter: Router exposing stock endpoints.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if settings is None:
        raise ValueError("settings must not be None")
    if stock_service is None:
        raise ValueError("stock_service must not be None")

    router = APIRouter(prefix="/stock", tags=["stock"])

    @router.get("/items/{item_id}/bins/{bin_id}")
    def api_stock_current(item_id: str, bin_id: str) -> JSONResponse:
        """Return the current balance of one item in one bin.

        Args:
            item_id: Stock item identifier.
            bin_id: Bin identifier.

        Returns:
            JSONResponse: `in_stock` quantity payload.

        Raises:
            RuntimeError: Raised when the handler fails unexpectedly.
        """

        return _api_stock_execute(
            lambda: {
                "item_id": item_id,
                "bin_id": bin_id,
                "in_stock": str(stock_service.stock_current(item_id, bin_id)),
            }
        )

    @router.get("/items/{item_id}/bins/{bin_id}/sufficiency")
    def api_stock_sufficiency(
        item_id: str,
        bin_id: str,
        required: Decimal = Query(..., ge=0),
    ) -> JSONResponse:
        """Return whether a bin holds enough of an item for an outgoing movement.

        Args:
            item_id: Stock item identifier.
            bin_id: Bin identifier.
            required: Required quantity.

        Returns:
            JSONResponse: Sufficiency payload.

        Raises:
            RuntimeError: Raised when the handler fails unexpectedly.
        """

        return _api_stock_execute(
            lambda: {
                "item_id": item_id,
                "bin_id": bin_id,
                "required": str(required),
                "sufficient": stock_service.stock_has_sufficient(item_id, bin_id, required),
            }
        )

    @router.get("/balances")
    def api_stock_bulk(
        item_id: list[str] = Query(default=[]),
        bin_id: list[str] = Query(default=[]),
    ) -> JSONResponse:
        """Return balances for every combination of the given items and bins.

        Args:
            item_id: Repeated stock item identifiers.
            bin_id: Repeated bin identifiers.

        Returns:
            JSONResponse: Balance list envelope payload.

        Raises:
            RuntimeError: Raised when the handler fails unexpectedly.
        """

        pair_count = len({value.strip() for value in item_id}) * len({value.strip() for value in bin_id})
        if pair_count > settings.api_max_bulk_pairs:
            payload = {
                "status": "error",
                "code": "TOO_MANY_PAIRS",
                "message": f"requested pairs={pair_count} exceeds api_max_bulk_pairs={settings.api_max_bulk_pairs}",
            }
            return JSONResponse(content=payload, status_code=status.HTTP_400_BAD_REQUEST)

        def _api_stock_bulk_payload() -> dict[str, object]:
            result = stock_service.stock_compute(item_id, bin_id)
            return {
                "items": [
                    api_serialize_stock_balance(key, quantity) for key, quantity in result.balances.items()
                ],
                "inconsistencies": [
                    {
                        "item_id": inconsistency.key.item_id,
                        "bin_id": inconsistency.key.bin_id,
                        "computed_quantity": str(inconsistency.computed_quantity),
                    }
                    for inconsistency in result.inconsistencies
                ],
                "skipped_reference_count": result.skipped_reference_count,
                "excluded_pre_count_effect_count": result.excluded_pre_count_effect_count,
                "ignored_transaction_count": result.ignored_transaction_count,
            }

        return _api_stock_execute(_api_stock_bulk_payload)

    @router.get("/bins/{bin_id}")
    def api_stock_bin(bin_id: str, item_id: list[str] = Query(default=[])) -> JSONResponse:
        """Return balances of several items in one bin.

        Args:
            bin_id: Bin identifier.
            item_id: Repeated stock item identifiers.

        Returns:
            JSONResponse: Item-keyed balance payload.

        Raises:
            RuntimeError: Raised when the handler fails unexpectedly.
        """

        return _api_stock_execute(
            lambda: {
                "bin_id": bin_id,
                "balances": {
                    bin_item_id: str(quantity)
                    for bin_item_id, quantity in stock_service.stock_bin(item_id, bin_id).items()
                },
            }
        )

    @router.post("/low-stock")
    def api_stock_low_stock(query: LowStockQuery) -> JSONResponse:
        """Return items at or below their minimum level across the given bins.

        Args:
            query: Minimum levels and bins to inspect.

        Returns:
            JSONResponse: Low-stock list payload.

        Raises:
            RuntimeError: Raised when the handler fails unexpectedly.
        """

        return _api_stock_execute(
            lambda: {
                "items": [
                    api_serialize_low_stock_item(low_stock_item)
                    for low_stock_item in stock_service.stock_low_stock_items(query.minimum_levels, query.bin_ids)
                ]
            }
        )

    @router.get("/sites/{site_id}/low-stock")
    def api_stock_site_low_stock(site_id: str) -> JSONResponse:
        """Return items at or below their stored minimum across the bins of one site.

        Args:
            site_id: Site identifier.

        Returns:
            JSONResponse: Low-stock list payload.

        Raises:
            RuntimeError: Raised when the handler fails unexpectedly.
        """

        return _api_stock_execute(
            lambda: {
                "site_id": site_id,
                "items": [
                    api_serialize_low_stock_item(low_stock_item)
                    for low_stock_item in stock_service.stock_low_stock_items_for_site(site_id)
                ],
            }
        )

    @router.post("/bins/{bin_id}/count-variance")
    def api_stock_count_variance(bin_id: str, query: CountVarianceQuery) -> JSONResponse:
        """Return counted-versus-system variance for one bin count.

        Args:
            bin_id: Counted bin identifier.
            query: Counted quantity per item.

        Returns:
            JSONResponse: Variance list payload.

        Raises:
            RuntimeError: Raised when the handler fails unexpectedly.
        """

        return _api_stock_execute(
            lambda: {
                "items": [
                    api_serialize_count_variance(variance)
                    for variance in stock_service.stock_count_variances(bin_id, query.counted_quantities)
                ]
            }
        )

    return router


def _api_stock_execute(build_payload: Callable[[], dict[str, object]]) -> JSONResponse:
    """Run one stock query and map engine failures to HTTP responses.

    Args:
        build_payload: Callable producing the success payload.

    Returns:
        JSONResponse: 200 with payload, 400 on invalid input, 503 when the ledger is unreachable.

    Raises:
        RuntimeError: Unexpected errors propagate to the framework.
    """

    try:
        return JSONResponse(content=build_payload(), status_code=status.HTTP_200_OK)
    except ValueError as error:
        payload = {"status": "error", "code": "INVALID_STOCK_QUERY", "message": str(error)}
        return JSONResponse(content=payload, status_code=status.HTTP_400_BAD_REQUEST)
    except StockLedgerFetchError as error:
        payload = {"status": "error", "code": "STOCK_LEDGER_UNAVAILABLE", "message": str(error)}
        return JSONResponse(content=payload, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)


def api_serialize_stock_balance(key: StockBalanceKey, quantity: Decimal) -> dict[str, object]:
    """Serialize one item/bin balance to JSON payload."""

    return {"item_id": key.item_id, "bin_id": key.bin_id, "quantity": str(quantity)}


def api_serialize_low_stock_item(low_stock_item: LowStockItem) -> dict[str, object]:
    """Serialize one low-stock item to JSON payload."""

    return {
        "item_id": low_stock_item.item_id,
        "minimum_stock_level": str(low_stock_item.minimum_stock_level),
        "current_stock": str(low_stock_item.current_stock),
        "primary_bin_id": low_stock_item.primary_bin_id,
    }


def api_serialize_count_variance(variance: CountVariance) -> dict[str, object]:
    """Serialize one count variance to JSON payload."""

    return {
        "item_id": variance.item_id,
        "bin_id": variance.bin_id,
        "system_quantity": str(variance.system_quantity),
        "counted_quantity": str(variance.counted_quantity),
        "variance": str(variance.variance),
    }


__all__ = [
    "api_create_stock_router",
    "api_serialize_count_variance",
    "api_serialize_low_stock_item",
    "api_serialize_stock_balance",
]
