"""Adapter for Coinbase (Advanced Trade / Pro) fills CSV exports.

Expected header: ``portfolio, trade id, product, side, created at, size,
size unit, price, fee, total, price/fee/total unit``. Sells may carry a
negative ``total``; its absolute value is used.
"""

from __future__ import annotations

from ...models import CanonicalTransaction, RowOutcome
from ..utils import (
    base_asset_from_pair,
    count_present,
    first_value,
    fraction_score,
    parse_date,
    parse_kind,
    parse_number,
    quote_currency_from_pair,
    safe_div,
)
from .base import Headers, RawRow

_SIGNATURE = ("portfolio", "trade id", "product", "side", "created at")
_MIN_MATCHES = 4


class CoinbaseAdapter:
    name = "coinbase"

    def can_attempt(self, headers: Headers) -> bool:
        return count_present(frozenset(headers), _SIGNATURE) >= _MIN_MATCHES

    def confidence(self, headers: Headers) -> float:
        return fraction_score(count_present(frozenset(headers), _SIGNATURE), len(_SIGNATURE))

    def parse_row(self, row: RawRow, headers: Headers) -> RowOutcome:
        product = (row.get("product") or "").strip().upper()
        base = base_asset_from_pair(product)
        if base and base != "BTC":
            return RowOutcome.skip(f"Coinbase product {product} is not BTC")

        kind = parse_kind(row.get("side"))
        if kind is None:
            return RowOutcome.skip(f"Coinbase side {row.get('side')!r} is not a trade")

        currency = quote_currency_from_pair(product) if "-" in product else "USD"
        size = parse_number(first_value(row, "size", "btc_amount"))
        total = abs(parse_number(first_value(row, "total", "executed value")))
        fee = parse_number(first_value(row, "fee", "fees"))
        price = parse_number(row.get("price"))
        if price == 0 and size > 0 and total > 0:
            price = safe_div(total, size)

        tx = CanonicalTransaction(
            kind=kind,
            btc_amount=size,
            price_per_btc=price,
            currency=currency,
            total_amount=total,
            fees=fee,
            fees_currency=currency,
            transaction_date=parse_date(first_value(row, "created at", "created_at")),
            notes=f"Coinbase Trade: {first_value(row, 'trade id', 'trade_id')}",
        )
        return RowOutcome.record(tx)


__all__ = ["CoinbaseAdapter"]
