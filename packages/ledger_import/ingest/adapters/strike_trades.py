"""Adapter for the older Strike trade export (bought/sold currency columns).

Expected header: ``transaction id, status, created time (utc),
completed time (utc), amount sold, currency sold, amount bought,
currency bought, exchange rate``. The side is inferred from which leg is
BTC. This header shape does not overlap the account-activity layouts handled
by :mod:`.strike`, so both adapters can be registered side by side.
"""

from __future__ import annotations

from ...models import CanonicalTransaction, RowOutcome, TransactionKind
from ..utils import (
    count_present,
    first_value,
    fraction_score,
    parse_date,
    parse_number,
    safe_div,
)
from .base import Headers, RawRow

_SIGNATURE = (
    "transaction id",
    "amount sold",
    "currency sold",
    "amount bought",
    "currency bought",
    "exchange rate",
)
_MIN_MATCHES = 4


class StrikeTradesAdapter:
    name = "strike-trades"

    def can_attempt(self, headers: Headers) -> bool:
        return count_present(frozenset(headers), _SIGNATURE) >= _MIN_MATCHES

    def confidence(self, headers: Headers) -> float:
        return fraction_score(count_present(frozenset(headers), _SIGNATURE), len(_SIGNATURE))

    def parse_row(self, row: RawRow, headers: Headers) -> RowOutcome:
        status = (row.get("status") or "").strip().lower()
        if status and status != "completed":
            return RowOutcome.skip(f"Strike trade status {status}")

        bought = (row.get("currency bought") or "").strip().upper()
        sold = (row.get("currency sold") or "").strip().upper()
        amount_bought = parse_number(row.get("amount bought"))
        amount_sold = parse_number(row.get("amount sold"))

        if bought == "BTC":
            kind = TransactionKind.BUY
            btc, fiat, currency = amount_bought, amount_sold, sold
        elif sold == "BTC":
            kind = TransactionKind.SELL
            btc, fiat, currency = amount_sold, amount_bought, bought
        else:
            return RowOutcome.skip("Strike trade does not involve BTC")

        rate = parse_number(row.get("exchange rate"))
        price = rate if rate > 0 else safe_div(fiat, btc)
        currency = currency or "USD"

        tx = CanonicalTransaction(
            kind=kind,
            btc_amount=btc,
            price_per_btc=price,
            currency=currency,
            total_amount=fiat,
            fees=parse_number(row.get("fee")),
            fees_currency=currency,
            transaction_date=parse_date(
                first_value(row, "completed time (utc)", "created time (utc)")
            ),
            notes=f"Strike Transaction: {first_value(row, 'transaction id')}",
        )
        return RowOutcome.record(tx)


__all__ = ["StrikeTradesAdapter"]
