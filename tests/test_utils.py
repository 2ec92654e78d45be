from __future__ import annotations

from decimal import Decimal

import pytest

from ledger_import.ingest.utils import (
    first_value,
    parse_date,
    parse_date_formats,
    parse_kind,
    parse_number,
    quote_currency_from_pair,
    strip_currency_suffix,
)
from ledger_import.models import TransactionKind


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("45000.0", Decimal("45000.0")),
        ("$1,234.50", Decimal("1234.50")),
        ("1116.22401PLN", Decimal("1116.22401")),
        ("-0.50", Decimal("-0.50")),
        ("1.2.3", Decimal("1.2")),
        ("", Decimal(0)),
        ("n/a", Decimal(0)),
        ("-", Decimal(0)),
        (None, Decimal(0)),
        (22.5, Decimal("22.5")),
        (3, Decimal(3)),
    ],
)
def test_parse_number(raw: object, expected: Decimal) -> None:
    assert parse_number(raw) == expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("2024-01-15 14:30:00", "2024-01-15"),
        ("2024-01-15T14:30:00Z", "2024-01-15"),
        (" 2024-01-15 ", "2024-01-15"),
        ("05/09/2024", "05/09/2024"),
        (None, ""),
    ],
)
def test_parse_date(raw: str | None, expected: str) -> None:
    assert parse_date(raw) == expected


def test_parse_date_formats_uses_first_match() -> None:
    fmts = ("%b %d %Y %H:%M:%S", "%b %d %Y")
    assert parse_date_formats("Jan 01 2026 10:33:55", fmts) == "2026-01-01"
    assert parse_date_formats("Jan  01 2026", fmts) == "2026-01-01"
    assert parse_date_formats("yesterday", fmts) is None


def test_first_value_skips_blank_synonyms() -> None:
    row = {"btc_amount": "  ", "amount": "0.5", "btc amount": "0.7"}
    assert first_value(row, "btc_amount", "amount", "btc amount") == "0.5"
    assert first_value(row, "missing") == ""


def test_parse_kind_is_case_insensitive() -> None:
    assert parse_kind("buy") is TransactionKind.BUY
    assert parse_kind(" Sell ") is TransactionKind.SELL
    assert parse_kind("TRANSFER") is TransactionKind.TRANSFER
    assert parse_kind("stake") is None
    assert parse_kind(None) is None


def test_pair_and_suffix_helpers() -> None:
    assert quote_currency_from_pair("BTC/EUR") == "EUR"
    assert quote_currency_from_pair("btc-usd") == "USD"
    assert quote_currency_from_pair("BTCUSD") == "USD"
    assert strip_currency_suffix("1116.22401PLN", "PLN") == "1116.22401"
    assert strip_currency_suffix("100.5USDT", "USD", "USDT") == "100.5"
    assert strip_currency_suffix("42", "EUR") == "42"
