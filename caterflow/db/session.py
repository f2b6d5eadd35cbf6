"""Database engine utilities.

This module centralizes database connectivity primitives to enforce the db-layer
boundary for all SQLAlchemy usage.
"""

from sqlalchemy import Engine, create_engine


def db_create_engine(database_url: str, connect_timeout_seconds: int | None = None) -> Engine:
    """Create the SQLAlchemy engine for ledger read access.

    Args:
        database_url: SQLAlchemy database URL.
        connect_timeout_seconds: Optional driver-level connection timeout.

    Returns:
        Engine: Configured SQLAlchemy engine.

    Raises:
        ValueError: Raised when the database URL is blank or the timeout is not positive.
    """

    if not database_url.strip():
        raise ValueError("database_url must not be blank")
    if connect_timeout_seconds is not None and connect_timeout_seconds <= 0:
        raise ValueError("connect_timeout_seconds must be positive")

    connect_args = {} if connect_timeout_seconds is None else {"connect_timeout": connect_timeout_seconds}
    return create_engine(database_url, pool_pre_ping=True, connect_args=connect_args)
