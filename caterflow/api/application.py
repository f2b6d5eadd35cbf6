"""FastAPI application factory for the read-only stock service."""

from fastapi import FastAPI

from caterflow.config import AppSettings
from caterflow.db import DatabaseHealthPort
from caterflow.stock import StockQueryPort

from .routers import api_create_health_router, api_create_stock_router


def create_api_application(
    settings: AppSettings,
    db_health_service: DatabaseHealthPort,
    stock_service: StockQueryPort,
) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        settings: Validated application settings used for runtime metadata.
        db_health_service: Database health service used by health endpoints.
        stock_service: Stock calculation service used by stock endpoints.

    Returns:
        FastAPI: Framework application instance.

    Raises:
        ValueError: Raised when router dependencies are invalid.
    """
    application = FastAPI(title="Caterflow Stock")

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, str]:
        """Return service identification for bootstrap verification.

        Returns:
            dict[str, str]: Service name, status and environment.
        """

        return {
            "service": "caterflow-stock",
            "status": "ready",
            "environment": settings.environment_name,
        }

    application.include_router(api_create_health_router(db_health_service=db_health_service))
    application.include_router(api_create_stock_router(settings=settings, stock_service=stock_service))

    return application
