"""Adapter for Kraken trade-history CSV exports.

Expected header (subset): ``txid, ordertxid, pair, time, type, ordertype,
price, cost, fee, vol, margin, misc, ledgers``. Pairs use Kraken's asset
codes, where legacy ISO-style codes carry an ``X`` (crypto) or ``Z`` (fiat)
prefix, e.g. ``XXBTZUSD`` is BTC quoted in USD.
"""

from __future__ import annotations

from ...models import CanonicalTransaction, RowOutcome
from ..utils import (
    count_present,
    first_value,
    fraction_score,
    parse_date,
    parse_kind,
    parse_number,
    safe_div,
)
from .base import Headers, RawRow

_SIGNATURE = ("txid", "ordertxid", "pair", "vol", "cost", "margin", "ledgers")
_MIN_MATCHES = 5
_BTC_CODES = ("XXBT", "XBT", "BTC")


def quote_currency(pair: str, *, default: str = "USD") -> str:
    """Return the quote currency of a Kraken pair.

    ``XXBTZUSD`` -> ``USD``, ``XBTEUR`` -> ``EUR``, ``BTC/EUR`` -> ``EUR``,
    ``XBT/ZGBP`` -> ``GBP``.
    """

    s = (pair or "").strip().upper()
    if not s:
        return default
    if "/" in s:
        quote = s.split("/", 1)[1].strip()
    else:
        quote = ""
        for code in _BTC_CODES:
            if s.startswith(code):
                quote = s[len(code) :]
                break
        if not quote:
            return default
    if len(quote) == 4 and quote[0] in "XZ":
        quote = quote[1:]
    return quote or default


def btc_is_base(pair: str) -> bool:
    """True when BTC is the base asset of ``pair``.

    ``XETHXXBT`` and ``ETH/XBT`` quote ETH in BTC; their volume is not BTC.
    """

    s = (pair or "").strip().upper()
    if "/" in s:
        return s.split("/", 1)[0].strip() in _BTC_CODES
    return s.startswith(_BTC_CODES)


class KrakenAdapter:
    name = "kraken"

    def can_attempt(self, headers: Headers) -> bool:
        return count_present(frozenset(headers), _SIGNATURE) >= _MIN_MATCHES

    def confidence(self, headers: Headers) -> float:
        return fraction_score(count_present(frozenset(headers), _SIGNATURE), len(_SIGNATURE))

    def parse_row(self, row: RawRow, headers: Headers) -> RowOutcome:
        status = (row.get("status") or "").strip().lower()
        postatus = (row.get("postatuscode") or "").strip().lower()
        if status == "canceled" or postatus == "canceled":
            return RowOutcome.skip("Kraken order canceled")

        pair = row.get("pair") or ""
        if pair and not btc_is_base(pair):
            return RowOutcome.skip(f"Kraken pair {pair} does not trade BTC")

        kind = parse_kind(row.get("type"))
        if kind is None:
            return RowOutcome.skip(f"Kraken row type {row.get('type')!r} is not a trade")

        currency = quote_currency(pair)
        btc = parse_number(row.get("vol"))
        total = parse_number(row.get("cost"))
        fees = parse_number(first_value(row, "fee", "fees"))
        price = parse_number(first_value(row, "price", "original_price_per_btc"))
        if price == 0 and btc > 0 and total > 0:
            price = safe_div(total, btc)

        order_ref = first_value(row, "ordertxid", "txid")
        tx = CanonicalTransaction(
            kind=kind,
            btc_amount=btc,
            price_per_btc=price,
            currency=currency,
            total_amount=total,
            fees=fees,
            fees_currency=currency,
            transaction_date=parse_date(row.get("time")),
            notes=f"Kraken Order: {order_ref}",
        )
        return RowOutcome.record(tx)


__all__ = ["KrakenAdapter", "btc_is_base", "quote_currency"]
