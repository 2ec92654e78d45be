"""Adapter for Strike account-activity CSV exports.

Two historical layouts exist and share most of their columns:

- older: ``Transaction ID, Status, Completed Date (UTC), Completed Time (UTC),
  Transaction Type, Amount USD, Fee USD, Amount BTC, Fee BTC, BTC Price,
  Destination, Description``
- newer: ``Reference, Date & Time (UTC), Transaction Type, Amount EUR,
  Fee EUR, Amount BTC, Fee BTC, BTC Price, Cost Basis (EUR), Destination,
  Description, Note``

The fiat currency is not fixed; it is learned from the ``amount <code>``
header. Each row is one leg of an account movement, so the transform is a
classification over the type and description text, confirmed by the signs of
the BTC and fiat deltas:

1. deposits are skipped;
2. an outbound send (negative BTC) becomes a ``TRANSFER`` with its
   destination preserved;
3. an initiated target order (negative fiat, no BTC) is a pending leg and is
   skipped;
4. a cancelled or expired target order refund (positive fiat, no BTC) is
   skipped;
5. an executed target order (positive BTC, no fiat movement) is a ``BUY`` at
   the previously quoted price;
6. a regular purchase (negative fiat, positive BTC) is a ``BUY``.

Cases 3 to 5 require ``target order`` in the type or description. Anything
else, such as an inbound receive or a fiat withdrawal, is skipped as
unrecognized. Rows with ``status = reversed``
(older layout) are skipped before classification.
"""

from __future__ import annotations

import re
from decimal import Decimal

from ...errors import RowParseError
from ...models import CanonicalTransaction, RowOutcome, TransactionKind, TransferType
from ..utils import (
    count_present,
    first_value,
    parse_date_formats,
    parse_number,
    safe_div,
)
from .base import Headers, RawRow

_AMOUNT_FIAT_RE = re.compile(r"^amount ([a-z]{3,4})$")

_SHARED = ("transaction type", "amount btc", "fee btc", "description")
_OLDER = ("transaction id", "status", "completed date (utc)")
_NEWER = ("reference", "btc price", "date & time (utc)")
_MIN_SHARED = 4

_DATE_COLUMNS = (
    "date & time (utc)",
    "completed date (utc)",
    "time (utc)",
    "initiated date (utc)",
)
_TIME_COLUMNS = ("completed time (utc)", "initiated time (utc)")
_DATE_FORMATS = (
    "%b %d %Y %H:%M:%S",
    "%b %d %Y %H:%M",
    "%b %d %Y",
    "%d %b %Y %H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S.%fZ",
    "%Y-%m-%d",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y",
)


def detect_fiat(headers: Headers, *, default: str = "USD") -> str:
    """Return the fiat code advertised by an ``amount <code>`` header."""

    for h in headers:
        m = _AMOUNT_FIAT_RE.match(h)
        if m and m.group(1) != "btc":
            return m.group(1).upper()
    return default


def _has_fiat_amount(headers: Headers) -> bool:
    return any(
        (m := _AMOUNT_FIAT_RE.match(h)) is not None and m.group(1) != "btc" for h in headers
    )


def _shared_matches(headers: Headers) -> int:
    return count_present(frozenset(headers), _SHARED) + (1 if _has_fiat_amount(headers) else 0)


def _row_date(row: RawRow) -> str:
    date_part = first_value(row, *_DATE_COLUMNS)
    time_part = first_value(row, *_TIME_COLUMNS)
    candidates = [f"{date_part} {time_part}", date_part] if time_part else [date_part]
    for candidate in candidates:
        parsed = parse_date_formats(candidate, _DATE_FORMATS)
        if parsed:
            return parsed
    raise RowParseError(f"Unrecognized Strike date: {date_part!r}")


class StrikeAdapter:
    name = "strike"

    def can_attempt(self, headers: Headers) -> bool:
        return _shared_matches(headers) >= _MIN_SHARED

    def confidence(self, headers: Headers) -> float:
        # 60% from columns both layouts share, 40% from the better-matching variant.
        hs = frozenset(headers)
        shared = _shared_matches(headers) / (len(_SHARED) + 1)
        variant = max(
            count_present(hs, _OLDER) / len(_OLDER),
            count_present(hs, _NEWER) / len(_NEWER),
        )
        return 60.0 * shared + 40.0 * variant

    def parse_row(self, row: RawRow, headers: Headers) -> RowOutcome:
        status = (row.get("status") or "").strip().lower()
        if status == "reversed":
            return RowOutcome.skip("Strike transaction reversed")

        tx_type = (row.get("transaction type") or "").strip().lower()
        description = (row.get("description") or "").strip().lower()
        if "deposit" in tx_type:
            return RowOutcome.skip("Strike deposit")

        fiat = detect_fiat(headers)
        code = fiat.lower()
        btc = parse_number(row.get("amount btc"))
        fee_btc = abs(parse_number(row.get("fee btc")))
        amount_fiat = parse_number(row.get(f"amount {code}"))
        fee_fiat = abs(parse_number(row.get(f"fee {code}")))
        quoted = parse_number(first_value(row, "btc price", "exchange rate"))
        reference = first_value(row, "reference", "transaction id")
        notes = f"Strike Transaction: {reference}"

        if ("send" in tx_type or "withdraw" in tx_type) and btc < 0:
            return RowOutcome.record(
                CanonicalTransaction(
                    kind=TransactionKind.TRANSFER,
                    btc_amount=abs(btc),
                    price_per_btc=Decimal(0),
                    currency=fiat,
                    total_amount=Decimal(0),
                    fees=fee_btc,
                    fees_currency="BTC",
                    transaction_date=_row_date(row),
                    notes=notes,
                    transfer_type=TransferType.TRANSFER_OUT,
                    destination_address=first_value(row, "destination") or None,
                )
            )

        text = f"{tx_type} {description}"
        target_order = "target order" in text
        if target_order and "initiated" in text and btc == 0 and amount_fiat < 0:
            return RowOutcome.skip("Strike target order initiated (pending leg)")
        if (
            target_order
            and ("cancel" in text or "expired" in text)
            and btc == 0
            and amount_fiat > 0
        ):
            return RowOutcome.skip("Strike target order refund")

        if target_order and "executed" in text and btc > 0 and amount_fiat == 0:
            # Executed target order: fiat left the account when it was initiated.
            return RowOutcome.record(
                CanonicalTransaction(
                    kind=TransactionKind.BUY,
                    btc_amount=btc,
                    price_per_btc=quoted,
                    currency=fiat,
                    total_amount=btc * quoted,
                    fees=fee_fiat,
                    fees_currency=fiat,
                    transaction_date=_row_date(row),
                    notes=notes,
                )
            )

        if btc > 0 and amount_fiat < 0:
            total = abs(amount_fiat)
            price = quoted if quoted > 0 else safe_div(total, btc)
            return RowOutcome.record(
                CanonicalTransaction(
                    kind=TransactionKind.BUY,
                    btc_amount=btc,
                    price_per_btc=price,
                    currency=fiat,
                    total_amount=total,
                    fees=fee_fiat,
                    fees_currency=fiat,
                    transaction_date=_row_date(row),
                    notes=notes,
                )
            )

        label = tx_type or description or "unknown"
        return RowOutcome.skip(f"Unrecognized Strike transaction ({label})")


__all__ = ["StrikeAdapter", "detect_fiat"]
