"""Data models for the ``ledger_import`` package.

- :class:`CanonicalTransaction`: the single normalized record every adapter
  produces. Immutable; monetary fields are :class:`~decimal.Decimal`.
- :class:`RowOutcome`: the three-valued result of transforming one input row
  (``record``, ``skip`` or ``error``), so the importer's accounting never needs
  adapter-specific knowledge.
- :class:`ImportOutcome`: the aggregate result of one import request.
- :class:`JsonTransactionIn`: pydantic model for JSON import items, which are
  already canonical-shaped and bypass the adapter registry.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, field_validator


class TransactionKind(StrEnum):
    BUY = "BUY"
    SELL = "SELL"
    TRANSFER = "TRANSFER"


class TransferType(StrEnum):
    TO_COLD_WALLET = "TO_COLD_WALLET"
    FROM_COLD_WALLET = "FROM_COLD_WALLET"
    BETWEEN_WALLETS = "BETWEEN_WALLETS"
    TRANSFER_IN = "TRANSFER_IN"
    TRANSFER_OUT = "TRANSFER_OUT"


def _fmt_decimal(d: Decimal) -> str:
    # Plain notation (no exponent) so values stay readable in reports.
    return format(d, "f")


@dataclass(frozen=True, slots=True)
class CanonicalTransaction:
    """A single canonical ledger transaction.

    ``btc_amount`` is in whole BTC (not satoshis). ``price_per_btc``,
    ``total_amount`` are in ``currency``; ``fees`` in ``fees_currency``.
    ``transaction_date`` is the ``YYYY-MM-DD`` calendar date with no time part.
    ``transfer_type`` and ``destination_address`` are only set for transfers.
    """

    kind: TransactionKind
    btc_amount: Decimal
    price_per_btc: Decimal
    currency: str
    total_amount: Decimal
    fees: Decimal
    fees_currency: str
    transaction_date: str
    notes: str = ""
    transfer_type: TransferType | None = None
    destination_address: str | None = None

    def as_record(self) -> dict[str, Any]:
        """Return the external snake_case mapping (JSON-friendly strings)."""

        return {
            "type": str(self.kind),
            "btc_amount": _fmt_decimal(self.btc_amount),
            "original_price_per_btc": _fmt_decimal(self.price_per_btc),
            "original_currency": self.currency,
            "original_total_amount": _fmt_decimal(self.total_amount),
            "fees": _fmt_decimal(self.fees),
            "fees_currency": self.fees_currency,
            "transaction_date": self.transaction_date,
            "notes": self.notes,
            "transfer_type": str(self.transfer_type) if self.transfer_type else None,
            "destination_address": self.destination_address,
        }


# ---------------------------------------------------------------------------
# Row outcomes
# ---------------------------------------------------------------------------


type OutcomeStatus = Literal["record", "skip", "error"]


@dataclass(frozen=True, slots=True)
class RowOutcome:
    """Result of transforming one row: a validated record, a skip, or an error."""

    status: OutcomeStatus
    transaction: CanonicalTransaction | None = None
    reason: str | None = None

    @classmethod
    def record(cls, tx: CanonicalTransaction) -> RowOutcome:
        """Validate ``tx`` and wrap it; raises ``TransactionValidationError``."""

        from .validation import validate_transaction  # local import: avoids a cycle

        return cls(status="record", transaction=validate_transaction(tx))

    @classmethod
    def skip(cls, reason: str) -> RowOutcome:
        return cls(status="skip", reason=reason)

    @classmethod
    def error(cls, reason: str) -> RowOutcome:
        return cls(status="error", reason=reason)


@dataclass(frozen=True, slots=True)
class ParsedRow:
    """One input row after transformation.

    ``row_number`` is the 1-based line in the source CSV (the header is line 1)
    or the 1-based item position in a JSON document.
    """

    row_number: int
    raw: Mapping[str, Any]
    outcome: RowOutcome


# ---------------------------------------------------------------------------
# Import outcome
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class ImportOutcome:
    """Aggregate result of one import; accounts for every input row once.

    ``skipped`` counts duplicates plus rows an adapter intentionally excluded
    (``ignored_transactions``); ``invalid_transactions`` counts parse,
    validation and persistence failures.
    """

    detected_format: str | None = None
    imported: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)
    total_transactions: int = 0
    duplicate_transactions: int = 0
    invalid_transactions: int = 0
    ignored_transactions: int = 0
    skipped_transactions: list[dict[str, Any]] = field(default_factory=list)

    def add_imported(self) -> None:
        self.imported += 1

    def add_duplicate(self, data: Mapping[str, Any], reason: str) -> None:
        self.skipped += 1
        self.duplicate_transactions += 1
        self.skipped_transactions.append({"data": dict(data), "reason": reason})

    def add_ignored(self, data: Mapping[str, Any], reason: str) -> None:
        self.skipped += 1
        self.ignored_transactions += 1
        self.skipped_transactions.append({"data": dict(data), "reason": reason})

    def add_invalid(self, data: Mapping[str, Any], reason: str, *, row_number: int) -> None:
        self.invalid_transactions += 1
        self.errors.append(f"Row {row_number}: {reason}")
        self.skipped_transactions.append({"data": dict(data), "reason": reason})

    @property
    def success(self) -> bool:
        # Partial progress is the normal case; only file-level errors fail.
        return True

    def message(self) -> str:
        msg = f"Successfully imported {self.imported} transactions"
        if self.duplicate_transactions:
            msg += f", skipped {self.duplicate_transactions} duplicates"
        if self.ignored_transactions:
            msg += f", ignored {self.ignored_transactions} non-trade rows"
        if self.invalid_transactions:
            msg += f", {self.invalid_transactions} invalid"
        return msg

    def as_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "imported": self.imported,
            "skipped": self.skipped,
            "errors": list(self.errors),
            "details": {
                "total_transactions": self.total_transactions,
                "duplicate_transactions": self.duplicate_transactions,
                "invalid_transactions": self.invalid_transactions,
                "ignored_transactions": self.ignored_transactions,
                "skipped_transactions": list(self.skipped_transactions),
            },
            "detected_format": self.detected_format,
            "message": self.message(),
        }


# ---------------------------------------------------------------------------
# JSON input DTO
# ---------------------------------------------------------------------------


class JsonTransactionIn(BaseModel):
    """A canonical-shaped JSON import item.

    Numeric fields accept JSON numbers or numeric strings. Unknown keys (e.g.
    ``id`` or ``created_at`` from a previous export) are ignored.
    """

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    type: str
    btc_amount: Decimal
    original_price_per_btc: Decimal = Decimal(0)
    original_currency: str
    original_total_amount: Decimal = Decimal(0)
    fees: Decimal = Decimal(0)
    fees_currency: str | None = None
    transaction_date: str
    notes: str | None = None
    transfer_type: str | None = None
    destination_address: str | None = None

    @field_validator("type", "original_currency", "fees_currency", "transfer_type")
    @classmethod
    def _upper(cls, v: str | None) -> str | None:
        return v.upper() if isinstance(v, str) else v


__all__ = [
    "CanonicalTransaction",
    "ImportOutcome",
    "JsonTransactionIn",
    "OutcomeStatus",
    "ParsedRow",
    "RowOutcome",
    "TransactionKind",
    "TransferType",
]
