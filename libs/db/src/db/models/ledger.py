from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Date,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# Whole-BTC amounts carry satoshi precision (8 places); fiat columns share the
# same scale so computed prices (total / amount) survive a round trip.
AMOUNT = Numeric(28, 8)


class Base(DeclarativeBase):
    pass


# ---------------------------
# Core: ledger_transactions
# ---------------------------


class LedgerTransaction(Base):
    __tablename__ = "ledger_transactions"

    # BigInteger on Postgres, INTEGER rowid on SQLite (required for autoincrement).
    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True
    )
    owner_id: Mapped[int] = mapped_column(Integer, nullable=False)
    type: Mapped[str] = mapped_column(String(16), nullable=False)
    btc_amount: Mapped[Decimal] = mapped_column(AMOUNT, nullable=False)
    original_price_per_btc: Mapped[Decimal] = mapped_column(
        AMOUNT, nullable=False, server_default=text("0")
    )
    original_currency: Mapped[str] = mapped_column(String(16), nullable=False)
    original_total_amount: Mapped[Decimal] = mapped_column(
        AMOUNT, nullable=False, server_default=text("0")
    )
    fees: Mapped[Decimal] = mapped_column(AMOUNT, nullable=False, server_default=text("0"))
    fees_currency: Mapped[str] = mapped_column(
        String(16), nullable=False, server_default=text("'USD'")
    )
    transaction_date: Mapped[date] = mapped_column(Date, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Only populated for TRANSFER rows; see ck_ledger_tx_transfer_fields.
    transfer_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    destination_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )

    __table_args__ = (
        CheckConstraint("type in ('BUY','SELL','TRANSFER')", name="ck_ledger_tx_type"),
        CheckConstraint("btc_amount > 0", name="ck_ledger_tx_btc_amount_positive"),
        CheckConstraint(
            "type = 'TRANSFER' OR (transfer_type IS NULL AND destination_address IS NULL)",
            name="ck_ledger_tx_transfer_fields",
        ),
        Index("ix_ledger_tx_owner", "owner_id"),
        # Duplicate checks always scope by owner and calendar day.
        Index("ix_ledger_tx_owner_date", "owner_id", "transaction_date"),
        Index("ix_ledger_tx_type", "type"),
        Index("ix_ledger_tx_transfer_type", "transfer_type"),
    )


__all__ = [
    "AMOUNT",
    "Base",
    "LedgerTransaction",
]
