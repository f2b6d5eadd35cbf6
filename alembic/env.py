"""Alembic environment for the stock ledger read schema.

The database URL always comes from `DATABASE_URL` (or `.env`) so migrations
target the same database the stock service reads.
"""
# pylint: disable=no-member,invalid-name,wrong-import-order

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from caterflow.config import config_load_database_url

if context.config.config_file_name is not None:
    fileConfig(context.config.config_file_name)

DATABASE_URL = config_load_database_url()


def run_migrations_offline() -> None:
    """Emit migration SQL without a live connection."""

    context.configure(
        url=DATABASE_URL,
        target_metadata=None,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        transaction_per_migration=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply migrations over a single unpooled connection."""

    engine = create_engine(DATABASE_URL, poolclass=pool.NullPool)
    try:
        with engine.connect() as connection:
            context.configure(connection=connection, target_metadata=None, transaction_per_migration=True)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
