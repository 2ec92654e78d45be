"""Adapter for the ledger's own legacy export format.

Older versions of the ledger wrote headers such as ``Amount (BTC)``,
``Original Price``, ``Original Cost``, ``Original Fee``, ``Exchange``,
``EUR Rate`` and ``USD Rate``; some revisions suffixed the fiat code
(``Original Cost (EUR)`` or a ``Fiat (EUR)`` column). Headers are matched by
substring and values are looked up across synonymous spellings.
"""

from __future__ import annotations

import re

from ...models import CanonicalTransaction, RowOutcome, TransactionKind
from ..utils import (
    count_contained,
    first_value,
    fraction_score,
    parse_date,
    parse_kind,
    parse_number,
)
from .base import Headers, RawRow

_SIGNATURE = (
    "amount (btc)",
    "original price",
    "original cost",
    "original fee",
    "exchange",
    "eur rate",
    "usd rate",
)
_MIN_MATCHES = 3

# "fiat (eur)", "original cost (eur)" and similar
_FIAT_SUFFIX_RE = re.compile(r"\(([a-z]{3})\)\s*$")


def infer_currency(headers: Headers) -> str | None:
    """Learn the fiat code from a ``(<code>)`` header suffix, ignoring BTC."""

    for h in headers:
        m = _FIAT_SUFFIX_RE.search(h)
        if m and m.group(1) != "btc":
            return m.group(1).upper()
    return None


def _lookup(row: RawRow, headers: Headers, *needles: str) -> str:
    # Exact spellings first, then any header that contains a needle.
    exact = first_value(row, *needles)
    if exact:
        return exact
    for needle in needles:
        for h in headers:
            if needle in h:
                v = (row.get(h) or "").strip()
                if v:
                    return v
    return ""


class LegacyAdapter:
    name = "legacy"

    def can_attempt(self, headers: Headers) -> bool:
        return count_contained(frozenset(headers), _SIGNATURE) >= _MIN_MATCHES

    def confidence(self, headers: Headers) -> float:
        return fraction_score(count_contained(frozenset(headers), _SIGNATURE), len(_SIGNATURE))

    def parse_row(self, row: RawRow, headers: Headers) -> RowOutcome:
        raw_type = first_value(row, "type", "transaction_type")
        if raw_type:
            kind = parse_kind(raw_type)
            if kind is None:
                return RowOutcome.skip(f"Legacy row type {raw_type!r} is not a trade")
        else:
            kind = TransactionKind.BUY

        btc = parse_number(
            _lookup(row, headers, "amount (btc)") or first_value(row, "btc_amount", "amount")
        )
        price = parse_number(
            _lookup(row, headers, "original price")
            or first_value(row, "original_price_per_btc", "price")
        )
        total = parse_number(
            _lookup(row, headers, "original cost")
            or first_value(row, "original_total_amount", "total")
        )
        fees = parse_number(
            _lookup(row, headers, "original fee") or first_value(row, "fees", "fee")
        )
        currency = (
            first_value(row, "original currency", "original_currency", "currency")
            or infer_currency(headers)
            or "USD"
        ).upper()

        exchange = first_value(row, "exchange")
        notes = f"Exchange: {exchange}" if exchange else first_value(row, "notes")

        tx = CanonicalTransaction(
            kind=kind,
            btc_amount=btc,
            price_per_btc=price,
            currency=currency,
            total_amount=total,
            fees=fees,
            fees_currency=currency,
            transaction_date=parse_date(
                first_value(row, "transaction date", "transaction_date", "date")
            ),
            notes=notes,
        )
        return RowOutcome.record(tx)


__all__ = ["LegacyAdapter", "infer_currency"]
