"""Database health service implementations for connectivity checks."""

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from caterflow.domain import HealthStatus

from .interfaces import DatabaseHealthPort

_LEDGER_TABLES = (
    "inventory_count",
    "inventory_count_item",
    "stock_transaction",
    "stock_transaction_item",
)


class SQLAlchemyDatabaseHealthService(DatabaseHealthPort):
    """Database health service verifying connectivity and ledger table presence."""

    def __init__(self, engine: Engine):
        """Initialize database health service.

        Args:
            engine: SQLAlchemy engine used for connectivity checks.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_connection_label(self) -> str:
        """Return the target database URL with the password masked.

        Returns:
            str: Rendered engine URL string.

        Raises:
            RuntimeError: Raised if URL rendering fails.
        """

        return self._engine.url.render_as_string(hide_password=True)

    def db_check_health(self) -> HealthStatus:
        """Verify connectivity and that every ledger read table exists.

        Returns:
            HealthStatus: `ok` when all ledger tables resolve, `degraded` otherwise.

        Raises:
            ConnectionError: Raised when connectivity check fails.
        """

        try:
            with self._engine.connect() as connection:
                missing_tables = [
                    table_name
                    for table_name in _LEDGER_TABLES
                    if connection.execute(
                        text("SELECT to_regclass(:table_name)"),
                        {"table_name": table_name},
                    ).scalar()
                    is None
                ]
        except SQLAlchemyError as error:
            raise ConnectionError("database connectivity check failed") from error

        if missing_tables:
            return HealthStatus(status="degraded", detail=f"missing ledger tables: {', '.join(missing_tables)}")
        return HealthStatus(status="ok", detail="database connectivity and ledger tables verified")
