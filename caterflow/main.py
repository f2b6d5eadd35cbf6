"""Main module entrypoint for local runtime execution.

This module validates startup configuration and either launches the FastAPI
service or prints a one-off stock report.
"""

import argparse
import json

import uvicorn

from caterflow.bootstrap import bootstrap_create_application, bootstrap_create_stock_service
from caterflow.config import config_configure_logging, config_load_settings


def main() -> None:
    """Run selected runtime command with validated startup configuration.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
    """

    argument_parser = argparse.ArgumentParser(description="Caterflow stock runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api", "stock-report"),
        help="Runtime command: `api` starts server, `stock-report` prints current balances as JSON",
        type=str,
    )
    argument_parser.add_argument(
        "--item",
        dest="item_ids",
        action="append",
        default=[],
        help="Stock item identifier for `stock-report` (repeatable)",
    )
    argument_parser.add_argument(
        "--bin",
        dest="bin_ids",
        action="append",
        default=[],
        help="Bin identifier for `stock-report` (repeatable)",
    )
    parsed_arguments = argument_parser.parse_args()

    if parsed_arguments.command == "stock-report":
        if not parsed_arguments.item_ids or not parsed_arguments.bin_ids:
            argument_parser.error("stock-report requires at least one --item and one --bin")
        raise SystemExit(main_print_stock_report(parsed_arguments.item_ids, parsed_arguments.bin_ids))

    settings = config_load_settings()
    application = bootstrap_create_application()
    uvicorn.run(
        application,
        host=settings.application_host,
        port=settings.application_port,
    )


def main_print_stock_report(item_ids: list[str], bin_ids: list[str]) -> int:
    """Print current balances for the given items and bins as JSON.

    Args:
        item_ids: Stock item identifiers.
        bin_ids: Bin identifiers.

    Returns:
        int: Process exit code, 1 when any balance had to be clamped.

    Raises:
        StockLedgerFetchError: Raised when the ledger read fails.
    """

    settings = config_load_settings()
    config_configure_logging(settings.log_level)
    stock_service = bootstrap_create_stock_service(settings)
    result = stock_service.stock_compute(item_ids, bin_ids)
    report = {
        "balances": [
            {"item_id": key.item_id, "bin_id": key.bin_id, "quantity": str(quantity)}
            for key, quantity in result.balances.items()
        ],
        "clamped": [
            {"item_id": item.key.item_id, "bin_id": item.key.bin_id, "computed_quantity": str(item.computed_quantity)}
            for item in result.inconsistencies
        ],
    }
    print(json.dumps(report, indent=2))
    return 1 if result.inconsistencies else 0


if __name__ == "__main__":
    main()
