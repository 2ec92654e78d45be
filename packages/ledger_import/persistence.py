# ruff: noqa: I001
"""Persistence integration for ledger_import.

The importer only needs two operations from the ledger store: list the
records an owner already has on a given day, and create one record. They are
expressed as the :class:`LedgerStore` protocol so callers can inject any
backend; :class:`SqlLedgerStore` is the default, writing to the
``ledger_transactions`` table owned by ``libs/db``.

Each call runs in its own short ``session_scope`` (commit per write, rollback
on error). There is no cross-row transaction: a failed write affects only its
own row.
"""

from __future__ import annotations

from datetime import date
from typing import Protocol, runtime_checkable

from sqlalchemy import select

from db.client import session_scope
from db.models.ledger import LedgerTransaction
from .logging_setup import get_logger
from .models import CanonicalTransaction, TransactionKind, TransferType

logger = get_logger("ledger_import.persistence")


@runtime_checkable
class LedgerStore(Protocol):
    """Minimal store surface consumed by the importer."""

    def find_same_day(self, owner_id: int, transaction_date: str) -> list[CanonicalTransaction]:
        """Return the owner's stored transactions dated ``transaction_date``."""
        ...

    def create(self, owner_id: int, tx: CanonicalTransaction) -> int:
        """Persist ``tx`` and return its new identifier."""
        ...


def _to_date(raw: str) -> date:
    # Validated as YYYY-MM-DD already; fromisoformat also rejects e.g. 2024-13-01.
    return date.fromisoformat(raw)


def to_row(owner_id: int, tx: CanonicalTransaction) -> LedgerTransaction:
    """Build the ORM row for ``tx``; transfer fields only for transfers."""

    is_transfer = tx.kind is TransactionKind.TRANSFER
    return LedgerTransaction(
        owner_id=owner_id,
        type=str(tx.kind),
        btc_amount=tx.btc_amount,
        original_price_per_btc=tx.price_per_btc,
        original_currency=tx.currency,
        original_total_amount=tx.total_amount,
        fees=tx.fees,
        fees_currency=tx.fees_currency,
        transaction_date=_to_date(tx.transaction_date),
        notes=tx.notes or None,
        transfer_type=str(tx.transfer_type) if is_transfer and tx.transfer_type else None,
        destination_address=tx.destination_address if is_transfer else None,
    )


def from_row(row: LedgerTransaction) -> CanonicalTransaction:
    """Rebuild a canonical transaction from a stored row."""

    return CanonicalTransaction(
        kind=TransactionKind(row.type),
        btc_amount=row.btc_amount,
        price_per_btc=row.original_price_per_btc,
        currency=row.original_currency,
        total_amount=row.original_total_amount,
        fees=row.fees,
        fees_currency=row.fees_currency,
        transaction_date=row.transaction_date.isoformat(),
        notes=row.notes or "",
        transfer_type=TransferType(row.transfer_type) if row.transfer_type else None,
        destination_address=row.destination_address,
    )


class SqlLedgerStore:
    """``LedgerStore`` backed by SQLAlchemy and the ``ledger_transactions`` table.

    Parameters
    ----------
    database_url:
        Optional SQLAlchemy URL; when ``None`` the ``DATABASE_URL`` environment
        variable is used (resolved lazily on first access).
    """

    def __init__(self, database_url: str | None = None) -> None:
        self.database_url = database_url

    def find_same_day(self, owner_id: int, transaction_date: str) -> list[CanonicalTransaction]:
        stmt = (
            select(LedgerTransaction)
            .where(LedgerTransaction.owner_id == owner_id)
            .where(LedgerTransaction.transaction_date == _to_date(transaction_date))
            .order_by(LedgerTransaction.id)
        )
        with session_scope(database_url=self.database_url) as session:
            return [from_row(r) for r in session.execute(stmt).scalars()]

    def create(self, owner_id: int, tx: CanonicalTransaction) -> int:
        row = to_row(owner_id, tx)
        with session_scope(database_url=self.database_url) as session:
            session.add(row)
            session.flush()
            new_id = int(row.id)
        logger.debug(
            "persist:created id=%d owner=%d date=%s", new_id, owner_id, tx.transaction_date
        )
        return new_id


__all__ = ["LedgerStore", "SqlLedgerStore", "from_row", "to_row"]
