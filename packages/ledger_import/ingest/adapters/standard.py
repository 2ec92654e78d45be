"""Fallback adapter for the ledger's canonical CSV layout and close variants.

Preferred header: ``type, btc_amount, original_price_per_btc,
original_currency, original_total_amount, fees, fees_currency,
transaction_date, notes``. Headers are matched loosely (case, spaces and
underscores ignored) so that hand-edited spreadsheets still import.

The gate always passes and the score is capped at 50, so any purpose-built
adapter that recognizes a file wins over this one.
"""

from __future__ import annotations

import re

from ...models import CanonicalTransaction, RowOutcome, TransactionKind, TransferType
from ..utils import first_value, fraction_score, parse_date, parse_kind, parse_number
from .base import Headers, RawRow

_PREFERRED = (
    "type",
    "btc_amount",
    "original_price_per_btc",
    "original_currency",
    "original_total_amount",
    "fees",
    "transaction_date",
)
_SCORE_CEILING = 50.0
_SQUASH_RE = re.compile(r"[_\s]")

_BTC_KEYS = ("btc_amount", "btc amount", "bitcoin_amount", "amount", "amount (btc)")
_PRICE_KEYS = (
    "original_price_per_btc",
    "price_per_btc",
    "price per btc",
    "price",
    "original price",
)
_TOTAL_KEYS = (
    "original_total_amount",
    "total_amount",
    "total amount",
    "total",
    "original cost",
)
_FEE_KEYS = ("fees", "fee", "original fee")
_CURRENCY_KEYS = ("original_currency", "currency", "original currency")
_DATE_KEYS = ("transaction_date", "date", "transaction date")
_TYPE_KEYS = ("type", "transaction_type", "transaction type")
_NOTES_KEYS = ("notes", "note", "description")


def _squash(value: str) -> str:
    return _SQUASH_RE.sub("", value.lower())


def _parse_transfer_type(value: str) -> TransferType | None:
    try:
        return TransferType(value.strip().upper()) if value else None
    except ValueError:
        return None


class StandardAdapter:
    name = "standard"

    def can_attempt(self, headers: Headers) -> bool:
        return True

    def confidence(self, headers: Headers) -> float:
        squashed = [_squash(h) for h in headers if h]
        matched = 0
        for preferred in _PREFERRED:
            p = _squash(preferred)
            if any(p in h or h in p for h in squashed if h):
                matched += 1
        return fraction_score(matched, len(_PREFERRED), ceiling=_SCORE_CEILING)

    def parse_row(self, row: RawRow, headers: Headers) -> RowOutcome:
        btc = parse_number(first_value(row, *_BTC_KEYS))
        price = parse_number(first_value(row, *_PRICE_KEYS))
        total = parse_number(first_value(row, *_TOTAL_KEYS))
        if btc == 0 or price == 0 or total == 0:
            return RowOutcome.skip("Missing BTC amount, price or total")

        # No better signal is available here, so unknown types default to BUY.
        kind = parse_kind(first_value(row, *_TYPE_KEYS)) or TransactionKind.BUY
        currency = (first_value(row, *_CURRENCY_KEYS) or "USD").upper()
        fees_currency = (first_value(row, "fees_currency") or currency).upper()

        transfer_type = None
        destination = None
        if kind is TransactionKind.TRANSFER:
            transfer_type = _parse_transfer_type(first_value(row, "transfer_type"))
            destination = first_value(row, "destination_address") or None

        tx = CanonicalTransaction(
            kind=kind,
            btc_amount=btc,
            price_per_btc=price,
            currency=currency,
            total_amount=total,
            fees=parse_number(first_value(row, *_FEE_KEYS)),
            fees_currency=fees_currency,
            transaction_date=parse_date(first_value(row, *_DATE_KEYS)),
            notes=first_value(row, *_NOTES_KEYS),
            transfer_type=transfer_type,
            destination_address=destination,
        )
        return RowOutcome.record(tx)


__all__ = ["StandardAdapter"]
