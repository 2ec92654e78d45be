# ruff: noqa: I001
"""Ledger core table.

Revision ID: 0001_ledger_core
Revises: None
Create Date: 2026-10-19
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_ledger_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _amount(name: str, *, default: bool = True) -> sa.Column:
    return sa.Column(
        name,
        sa.Numeric(28, 8),
        nullable=False,
        server_default=sa.text("0") if default else None,
    )


def upgrade() -> None:
    op.create_table(
        "ledger_transactions",
        sa.Column(
            "id",
            sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
            primary_key=True,
            autoincrement=True,
        ),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(16), nullable=False),
        _amount("btc_amount", default=False),
        _amount("original_price_per_btc"),
        sa.Column("original_currency", sa.String(16), nullable=False),
        _amount("original_total_amount"),
        _amount("fees"),
        sa.Column(
            "fees_currency", sa.String(16), nullable=False, server_default=sa.text("'USD'")
        ),
        sa.Column("transaction_date", sa.Date(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("transfer_type", sa.String(32), nullable=True),
        sa.Column("destination_address", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.CheckConstraint("type in ('BUY','SELL','TRANSFER')", name="ck_ledger_tx_type"),
        sa.CheckConstraint("btc_amount > 0", name="ck_ledger_tx_btc_amount_positive"),
        sa.CheckConstraint(
            "type = 'TRANSFER' OR (transfer_type IS NULL AND destination_address IS NULL)",
            name="ck_ledger_tx_transfer_fields",
        ),
    )
    op.create_index("ix_ledger_tx_owner", "ledger_transactions", ["owner_id"])
    op.create_index(
        "ix_ledger_tx_owner_date", "ledger_transactions", ["owner_id", "transaction_date"]
    )
    op.create_index("ix_ledger_tx_type", "ledger_transactions", ["type"])
    op.create_index("ix_ledger_tx_transfer_type", "ledger_transactions", ["transfer_type"])


def downgrade() -> None:
    op.drop_index("ix_ledger_tx_transfer_type", table_name="ledger_transactions")
    op.drop_index("ix_ledger_tx_type", table_name="ledger_transactions")
    op.drop_index("ix_ledger_tx_owner_date", table_name="ledger_transactions")
    op.drop_index("ix_ledger_tx_owner", table_name="ledger_transactions")
    op.drop_table("ledger_transactions")
