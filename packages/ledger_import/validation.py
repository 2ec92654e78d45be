"""Invariant checks every canonical transaction must satisfy.

Runs identically after every adapter and after JSON conversion. A failure
raises :class:`~ledger_import.errors.TransactionValidationError` whose message
names the rule that failed; the importer records it per row and moves on.
"""

from __future__ import annotations

import re
from decimal import Decimal

from .errors import TransactionValidationError
from .models import CanonicalTransaction, TransactionKind

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_KINDS = frozenset(k.value for k in TransactionKind)


def _is_number(v: object) -> bool:
    # Decimal("NaN") and infinities are rejected along with non-decimals.
    return isinstance(v, Decimal) and v.is_finite()


def validate_transaction(tx: CanonicalTransaction) -> CanonicalTransaction:
    """Return ``tx`` unchanged when valid; raise on the first failing rule."""

    if str(tx.kind) not in _KINDS:
        raise TransactionValidationError(f"Invalid transaction type: {tx.kind!r}")
    if not _is_number(tx.btc_amount) or tx.btc_amount <= 0:
        raise TransactionValidationError("BTC amount must be greater than 0")
    if not _is_number(tx.price_per_btc) or tx.price_per_btc < 0:
        raise TransactionValidationError("Price per BTC must be 0 or greater")
    if not tx.currency or len(tx.currency) < 2:
        raise TransactionValidationError("Currency must be at least 2 characters")
    if not _is_number(tx.total_amount) or tx.total_amount < 0:
        raise TransactionValidationError("Total amount must be 0 or greater")
    if not _is_number(tx.fees) or tx.fees < 0:
        raise TransactionValidationError("Fees must be 0 or greater")
    if not isinstance(tx.transaction_date, str) or not _DATE_RE.match(tx.transaction_date):
        raise TransactionValidationError(
            f"Transaction date must be YYYY-MM-DD (got {tx.transaction_date!r})"
        )
    if tx.kind != TransactionKind.TRANSFER and (
        tx.transfer_type is not None or tx.destination_address is not None
    ):
        raise TransactionValidationError(
            "Transfer type and destination address are only allowed on transfers"
        )
    return tx


__all__ = ["validate_transaction"]
