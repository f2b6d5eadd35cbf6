"""Stock ledger read schema baseline

Revision ID: 20261019_01
Revises: None
Create Date: 2026-10-19
"""
# pylint: disable=no-member,invalid-name,wrong-import-order

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261019_01"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    op.create_table(
        "bin",
        sa.Column("bin_id", sa.Text(), primary_key=True),
        sa.Column("site_id", sa.Text(), nullable=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("created_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("ix_bin_site_id", "bin", ["site_id"])

    op.create_table(
        "stock_item",
        sa.Column("stock_item_id", sa.Text(), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("sku", sa.Text(), nullable=True),
        sa.Column("unit_of_measure", sa.Text(), nullable=True),
        sa.Column("minimum_stock_level", sa.Numeric(18, 4), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )

    op.create_table(
        "inventory_count",
        sa.Column("inventory_count_id", sa.Text(), primary_key=True),
        sa.Column("bin_id", sa.Text(), sa.ForeignKey("bin.bin_id"), nullable=True),
        sa.Column("count_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("ix_inventory_count_bin_count_date", "inventory_count", ["bin_id", "count_date"])

    op.create_table(
        "inventory_count_item",
        sa.Column(
            "inventory_count_id",
            sa.Text(),
            sa.ForeignKey("inventory_count.inventory_count_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("line_number", sa.Integer(), nullable=False),
        sa.Column("stock_item_id", sa.Text(), sa.ForeignKey("stock_item.stock_item_id"), nullable=True),
        sa.Column("counted_quantity", sa.Numeric(18, 4), nullable=False),
        sa.PrimaryKeyConstraint("inventory_count_id", "line_number", name="pk_inventory_count_item"),
    )

    op.create_table(
        "stock_transaction",
        sa.Column("stock_transaction_id", sa.Text(), primary_key=True),
        sa.Column("kind", sa.Text(), nullable=False),
        sa.Column("status", sa.Text(), nullable=True),
        sa.Column("effective_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("bin_id", sa.Text(), sa.ForeignKey("bin.bin_id"), nullable=True),
        sa.Column("from_bin_id", sa.Text(), sa.ForeignKey("bin.bin_id"), nullable=True),
        sa.Column("to_bin_id", sa.Text(), sa.ForeignKey("bin.bin_id"), nullable=True),
        sa.Column("adjustment_type", sa.Text(), nullable=True),
        sa.Column("created_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint(
            "kind in ('GoodsReceipt', 'DispatchLog', 'InternalTransfer', 'StockAdjustment')",
            name="ck_stock_transaction_kind",
        ),
    )
    op.create_index("ix_stock_transaction_bin_id", "stock_transaction", ["bin_id"])
    op.create_index("ix_stock_transaction_from_bin_id", "stock_transaction", ["from_bin_id"])
    op.create_index("ix_stock_transaction_to_bin_id", "stock_transaction", ["to_bin_id"])
    op.create_index("ix_stock_transaction_effective_date", "stock_transaction", ["effective_date"])

    op.create_table(
        "stock_transaction_item",
        sa.Column(
            "stock_transaction_id",
            sa.Text(),
            sa.ForeignKey("stock_transaction.stock_transaction_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("line_number", sa.Integer(), nullable=False),
        sa.Column("stock_item_id", sa.Text(), sa.ForeignKey("stock_item.stock_item_id"), nullable=True),
        sa.Column("quantity", sa.Numeric(18, 4), nullable=True),
        sa.PrimaryKeyConstraint("stock_transaction_id", "line_number", name="pk_stock_transaction_item"),
    )


def downgrade() -> None:
    """Downgrade schema."""

    op.drop_table("stock_transaction_item")
    op.drop_index("ix_stock_transaction_effective_date", table_name="stock_transaction")
    op.drop_index("ix_stock_transaction_to_bin_id", table_name="stock_transaction")
    op.drop_index("ix_stock_transaction_from_bin_id", table_name="stock_transaction")
    op.drop_index("ix_stock_transaction_bin_id", table_name="stock_transaction")
    op.drop_table("stock_transaction")
    op.drop_table("inventory_count_item")
    op.drop_index("ix_inventory_count_bin_count_date", table_name="inventory_count")
    op.drop_table("inventory_count")
    op.drop_table("stock_item")
    op.drop_index("ix_bin_site_id", table_name="bin")
    op.drop_table("bin")
