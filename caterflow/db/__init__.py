"""Database layer package for all SQL and persistence boundaries."""

from .health import SQLAlchemyDatabaseHealthService
from .interfaces import DatabaseHealthPort, StockLedgerFetchError, StockLedgerRepositoryPort
from .session import db_create_engine
from .stock_ledger import SQLAlchemyStockLedgerService

__all__ = [
	"DatabaseHealthPort",
	"StockLedgerFetchError",
	"StockLedgerRepositoryPort",
	"SQLAlchemyDatabaseHealthService",
	"SQLAlchemyStockLedgerService",
	"db_create_engine",
]
