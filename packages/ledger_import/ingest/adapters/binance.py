"""Adapter for Binance spot-trade CSV exports (two historical layouts).

Layout A (order history, legacy)::

    Date(UTC), OrderNo, Pair, Type, Side, Order Price, Order Amount,
    Time, Executed, Average Price, Trading total, Status

Amounts carry their asset as a suffix (``"0.00297BTC"``, ``"1116.22401PLN"``)
and the pair is concatenated (``BTCPLN``). Only ``FILLED`` orders are trades.

Layout B (trade history, current)::

    Date(UTC), Pair, Base Asset, Quote Asset, Type, Price, Amount, Total,
    Fee, Fee Coin

Layout B is selected whenever ``base asset`` or ``quote asset`` is present.
"""

from __future__ import annotations

from decimal import Decimal

from ...models import CanonicalTransaction, RowOutcome
from ..utils import (
    base_asset_from_pair,
    count_contained,
    count_present,
    first_value,
    parse_date,
    parse_kind,
    parse_number,
    safe_div,
    strip_currency_suffix,
)
from .base import Headers, RawRow

_LAYOUT_A = ("date(utc)", "orderno", "pair", "side", "trading total")
_LAYOUT_B = (
    "date(utc)",
    "pair",
    "base asset",
    "quote asset",
    "type",
    "price",
    "amount",
    "total",
    "fee",
)
_SHARED = ("date(utc)", "pair")
_A_ONLY = tuple(h for h in _LAYOUT_A if h not in _SHARED)
_B_ONLY = tuple(h for h in _LAYOUT_B if h not in _SHARED)

# Stablecoins folded into their fiat counterpart for reporting.
_QUOTE_ALIASES = {"USDT": "USD"}


def _layout_a_matches(headers: frozenset[str]) -> int:
    # Legacy exports vary in spelling (e.g. "trading total(pln)"), so match by substring.
    return count_contained(headers, _LAYOUT_A)


def _layout_b_matches(headers: frozenset[str]) -> int:
    return count_present(headers, _LAYOUT_B)


def uses_layout_b(headers: Headers) -> bool:
    hs = frozenset(headers)
    return "base asset" in hs or "quote asset" in hs


def concatenated_pair_quote(pair: str) -> str | None:
    """``BTCPLN`` -> ``PLN``; ``BTCUSDT`` -> ``USD``; non-BTC pairs -> ``None``."""

    s = (pair or "").strip().upper()
    if len(s) < 4:
        return "USD"
    if not s.startswith("BTC"):
        return None
    quote = s[3:]
    return _QUOTE_ALIASES.get(quote, quote)


class BinanceAdapter:
    name = "binance"

    def can_attempt(self, headers: Headers) -> bool:
        hs = frozenset(headers)
        return _layout_a_matches(hs) >= 3 or _layout_b_matches(hs) >= 5

    def confidence(self, headers: Headers) -> float:
        # 60% from headers common to both layouts, 40% from the best variant.
        hs = frozenset(headers)
        shared = count_present(hs, _SHARED) / len(_SHARED)
        a_frac = count_contained(hs, _A_ONLY) / len(_A_ONLY)
        b_frac = count_present(hs, _B_ONLY) / len(_B_ONLY)
        return 60.0 * shared + 40.0 * max(a_frac, b_frac)

    def parse_row(self, row: RawRow, headers: Headers) -> RowOutcome:
        if uses_layout_b(headers):
            return self._parse_trade_history(row)
        return self._parse_order_history(row)

    # ---- Layout A ---------------------------------------------------------

    def _parse_order_history(self, row: RawRow) -> RowOutcome:
        status = (row.get("status") or "").strip()
        if status and status.upper() != "FILLED":
            return RowOutcome.skip(f"Binance order status {status}")

        pair = (row.get("pair") or "").strip()
        currency = concatenated_pair_quote(pair)
        if currency is None:
            return RowOutcome.skip(f"Binance pair {pair} does not involve BTC")

        kind = parse_kind(row.get("side"))
        if kind is None:
            return RowOutcome.skip(f"Binance side {row.get('side')!r} is not a trade")

        quote_raw = pair.upper()[3:] if len(pair) >= 4 else currency
        btc = parse_number(strip_currency_suffix(row.get("executed") or "0", "BTC"))
        total = parse_number(
            strip_currency_suffix(row.get("trading total") or "0", quote_raw, currency)
        )
        fee = parse_number(strip_currency_suffix(row.get("fee") or "0", quote_raw, currency))
        price = safe_div(total, btc) if btc > 0 else Decimal(0)

        tx = CanonicalTransaction(
            kind=kind,
            btc_amount=btc,
            price_per_btc=price,
            currency=currency,
            total_amount=total,
            fees=fee,
            fees_currency=currency,
            transaction_date=parse_date(row.get("date(utc)")),
            notes=f"Binance Order: {(row.get('orderno') or '').strip()}",
        )
        return RowOutcome.record(tx)

    # ---- Layout B ---------------------------------------------------------

    def _parse_trade_history(self, row: RawRow) -> RowOutcome:
        pair = (row.get("pair") or "").strip().upper()
        base = first_value(row, "base asset").upper() or base_asset_from_pair(pair)
        if base and base != "BTC":
            return RowOutcome.skip(f"Binance base asset {base} is not BTC")

        if "/" in pair:
            currency = pair.split("/", 1)[1].strip()
        else:
            currency = first_value(row, "quote asset").upper() or "USD"

        kind = parse_kind(row.get("type"))
        if kind is None:
            return RowOutcome.skip(f"Binance trade type {row.get('type')!r} is not a trade")

        btc = parse_number(row.get("amount"))
        price = parse_number(row.get("price"))
        total = parse_number(row.get("total"))
        fee = parse_number(row.get("fee"))
        fee_coin = first_value(row, "fee coin").upper() or currency
        if fee_coin == "BTC":
            # Express a BTC-denominated fee in the quote currency at the trade price.
            fee = fee * price
            fee_coin = currency

        tx = CanonicalTransaction(
            kind=kind,
            btc_amount=btc,
            price_per_btc=price,
            currency=currency,
            total_amount=total,
            fees=fee,
            fees_currency=fee_coin,
            transaction_date=parse_date(row.get("date(utc)")),
            notes="Binance Trade",
        )
        return RowOutcome.record(tx)


__all__ = ["BinanceAdapter", "concatenated_pair_quote", "uses_layout_b"]
