"""Application bootstrap wiring for startup validation and dependency assembly."""

from fastapi import FastAPI
from sqlalchemy import Engine

from caterflow.api import create_api_application
from caterflow.config import AppSettings, config_configure_logging, config_load_settings
from caterflow.db import SQLAlchemyDatabaseHealthService, SQLAlchemyStockLedgerService, db_create_engine
from caterflow.stock import StockCalculationService


def bootstrap_create_stock_service(settings: AppSettings, engine: Engine | None = None) -> StockCalculationService:
    """Build the stock calculation service over the SQL ledger adapter.

    Args:
        settings: Validated runtime settings.
        engine: Optional shared engine; a new one is created from settings when omitted.

    Returns:
        StockCalculationService: Fully wired stock service.

    Raises:
        ValueError: Raised when database settings are invalid.
    """

    if engine is None:
        engine = db_create_engine(
            database_url=settings.database_url,
            connect_timeout_seconds=settings.database_connect_timeout_seconds,
        )
    ledger_repository = SQLAlchemyStockLedgerService(
        engine=engine,
        statement_timeout_seconds=settings.stock_query_timeout_seconds,
    )
    return StockCalculationService(
        repository=ledger_repository,
        exclude_pre_count_transactions=settings.stock_exclude_pre_count_transactions,
    )


def bootstrap_create_application() -> FastAPI:
    """Assemble the runtime application after validating startup configuration.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    settings = config_load_settings()
    config_configure_logging(settings.log_level)
    engine = db_create_engine(
        database_url=settings.database_url,
        connect_timeout_seconds=settings.database_connect_timeout_seconds,
    )
    db_health_service = SQLAlchemyDatabaseHealthService(engine=engine)
    stock_service = bootstrap_create_stock_service(settings=settings, engine=engine)
    return create_api_application(
        settings=settings,
        db_health_service=db_health_service,
        stock_service=stock_service,
    )
