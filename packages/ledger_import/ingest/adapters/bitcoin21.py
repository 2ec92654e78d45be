"""Adapter for 21bitcoin account-statement CSV exports.

Header::

    id, exchange_name, depot_name, transaction_date, buy_asset, buy_amount,
    sell_asset, sell_amount, fee_asset, fee_amount, transaction_type, note,
    linked_transaction

Dates are European (``09.12.2025 09:46:34``). Only ``trade`` rows are
converted; deposits and withdrawals of fiat are skipped.
"""

from __future__ import annotations

import re

from ...models import CanonicalTransaction, RowOutcome, TransactionKind
from ..utils import count_present, first_value, parse_date, parse_number, safe_div
from .base import Headers, RawRow

_REQUIRED = (
    "exchange_name",
    "transaction_date",
    "buy_asset",
    "buy_amount",
    "sell_asset",
    "sell_amount",
    "transaction_type",
)
_SIGNATURE = ("depot_name", "linked_transaction")
_MIN_REQUIRED = 5
_DEFAULT_CURRENCY = "EUR"

_EU_DATE_RE = re.compile(r"^(\d{2})\.(\d{2})\.(\d{4})")


def parse_european_date(value: str | None) -> str:
    """``DD.MM.YYYY[ HH:MM:SS]`` -> ``YYYY-MM-DD``; other shapes via ``parse_date``."""

    s = (value or "").strip()
    m = _EU_DATE_RE.match(s)
    if m:
        day, month, year = m.groups()
        return f"{year}-{month}-{day}"
    return parse_date(s)


class Bitcoin21Adapter:
    name = "21bitcoin"

    def can_attempt(self, headers: Headers) -> bool:
        hs = frozenset(headers)
        has_signature = any(h in hs for h in _SIGNATURE)
        return count_present(hs, _REQUIRED) >= _MIN_REQUIRED and (
            has_signature or "exchange_name" in hs
        )

    def confidence(self, headers: Headers) -> float:
        hs = frozenset(headers)
        score = (count_present(hs, _REQUIRED) / len(_REQUIRED)) * 70.0
        score += (count_present(hs, _SIGNATURE) / len(_SIGNATURE)) * 30.0
        return min(score, 100.0)

    def parse_row(self, row: RawRow, headers: Headers) -> RowOutcome:
        tx_type = (row.get("transaction_type") or "").strip().lower()
        if tx_type != "trade":
            return RowOutcome.skip(f"21bitcoin {tx_type or 'unknown'} row is not a trade")

        buy_asset = (row.get("buy_asset") or "").strip().upper()
        sell_asset = (row.get("sell_asset") or "").strip().upper()
        buy_amount = parse_number(row.get("buy_amount"))
        sell_amount = parse_number(row.get("sell_amount"))

        if buy_asset == "BTC":
            kind = TransactionKind.BUY
            btc, fiat, currency = buy_amount, sell_amount, sell_asset or _DEFAULT_CURRENCY
        elif sell_asset == "BTC":
            kind = TransactionKind.SELL
            btc, fiat, currency = sell_amount, buy_amount, buy_asset or _DEFAULT_CURRENCY
        else:
            return RowOutcome.skip("21bitcoin trade does not involve BTC")

        if btc <= 0:
            return RowOutcome.skip("21bitcoin trade has no BTC amount")

        fee_asset = (row.get("fee_asset") or "").strip().upper()
        fee_amount = parse_number(row.get("fee_amount"))
        if fee_amount > 0 and fee_asset:
            fees, fees_currency = fee_amount, fee_asset
        else:
            fees, fees_currency = parse_number(0), currency

        note = first_value(row, "note")
        tx_id = first_value(row, "id")
        suffix = f" (ID: {tx_id})" if tx_id else ""
        notes = f"21bitcoin: {note}{suffix}" if note else f"21bitcoin Transaction{suffix}"

        tx = CanonicalTransaction(
            kind=kind,
            btc_amount=btc,
            price_per_btc=safe_div(fiat, btc),
            currency=currency,
            total_amount=fiat,
            fees=fees,
            fees_currency=fees_currency,
            transaction_date=parse_european_date(row.get("transaction_date")),
            notes=notes,
        )
        return RowOutcome.record(tx)


__all__ = ["Bitcoin21Adapter", "parse_european_date"]
