"""Pure parsing helpers shared by every exchange adapter.

Adapters compose these rather than inheriting from a base class. All helpers
are total: malformed input degrades to a neutral value (``Decimal(0)``, an
empty string, ``None``) and the validator decides whether the resulting
transaction is acceptable.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from ..models import TransactionKind

_NON_NUMERIC_RE = re.compile(r"[^0-9+\-.]")
_LEADING_NUMBER_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)")

ZERO = Decimal(0)


def parse_number(value: Any) -> Decimal:
    """Parse an exchange amount string into a ``Decimal``.

    Everything except digits, sign and decimal point is stripped first (so
    ``"$1,234.50"`` and ``"1116.22401PLN"`` both parse). The longest leading
    numeric prefix is used; empty or unparseable input yields ``0``.
    """

    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    if isinstance(value, bool):
        return ZERO
    if isinstance(value, int | float):
        try:
            d = Decimal(str(value))
        except InvalidOperation:
            return ZERO
        return d if d.is_finite() else ZERO
    cleaned = _NON_NUMERIC_RE.sub("", str(value))
    m = _LEADING_NUMBER_RE.match(cleaned)
    if not m:
        return ZERO
    try:
        return Decimal(m.group(0))
    except InvalidOperation:
        return ZERO


def parse_date(value: Any) -> str:
    """Reduce a date/time string to its date part.

    ``"2024-01-15 14:30:00"`` and ``"2024-01-15T14:30:00Z"`` both become
    ``"2024-01-15"``. Anything else is returned trimmed and left to the
    validator.
    """

    if value is None:
        return ""
    s = str(value).strip()
    if " " in s:
        return s.split(" ", 1)[0]
    if "T" in s:
        return s.split("T", 1)[0]
    return s


def parse_date_formats(value: Any, formats: tuple[str, ...]) -> str | None:
    """Parse ``value`` with the first matching ``strptime`` format.

    Returns ``YYYY-MM-DD`` or ``None`` when no format matches.
    """

    if value is None:
        return None
    s = " ".join(str(value).split())
    if not s:
        return None
    for fmt in formats:
        try:
            return datetime.strptime(s, fmt).date().isoformat()
        except ValueError:
            continue
    return None


def first_value(row: Mapping[str, Any], *keys: str) -> str:
    """Return the first present, non-empty value across synonym ``keys``."""

    for key in keys:
        v = row.get(key)
        if v is None:
            continue
        s = str(v).strip()
        if s:
            return s
    return ""


def parse_kind(value: Any) -> TransactionKind | None:
    """Map ``buy``/``sell``/``transfer`` (any case) to a kind; else ``None``."""

    if value is None:
        return None
    s = str(value).strip().upper()
    try:
        return TransactionKind(s)
    except ValueError:
        return None


def quote_currency_from_pair(pair: Any, *, default: str = "USD") -> str:
    """Return the quote asset of ``BASE/QUOTE`` or ``BASE-QUOTE``."""

    if pair is None:
        return default
    s = str(pair).strip().upper()
    for sep in ("/", "-"):
        if sep in s:
            quote = s.split(sep, 1)[1].strip()
            return quote or default
    return default


def base_asset_from_pair(pair: Any) -> str:
    """Return the base asset of ``BASE/QUOTE`` or ``BASE-QUOTE`` (or ``""``)."""

    if pair is None:
        return ""
    s = str(pair).strip().upper()
    for sep in ("/", "-"):
        if sep in s:
            return s.split(sep, 1)[0].strip()
    return ""


def strip_currency_suffix(value: Any, *codes: str) -> str:
    """Remove a trailing currency code (``"1116.22401PLN"`` -> ``"1116.22401"``)."""

    if value is None:
        return ""
    s = str(value).strip()
    upper = s.upper()
    for code in sorted((c.upper() for c in codes if c), key=len, reverse=True):
        if upper.endswith(code):
            return s[: len(s) - len(code)].strip()
    return s


def count_present(headers: set[str] | frozenset[str], expected: tuple[str, ...]) -> int:
    """Count how many ``expected`` headers appear exactly in ``headers``."""

    return sum(1 for h in expected if h in headers)


def count_contained(headers: set[str] | frozenset[str], expected: tuple[str, ...]) -> int:
    """Count ``expected`` headers that appear as a substring of any header."""

    return sum(1 for e in expected if any(e in h for h in headers))


def fraction_score(matched: int, total: int, *, ceiling: float = 100.0) -> float:
    if total <= 0:
        return 0.0
    return (matched / total) * ceiling


def safe_div(numerator: Decimal, denominator: Decimal) -> Decimal:
    """Divide, returning ``0`` when the denominator is zero."""

    if denominator == 0:
        return ZERO
    return numerator / denominator


__all__ = [
    "ZERO",
    "base_asset_from_pair",
    "count_contained",
    "count_present",
    "first_value",
    "fraction_score",
    "parse_date",
    "parse_date_formats",
    "parse_kind",
    "parse_number",
    "quote_currency_from_pair",
    "safe_div",
    "strip_currency_suffix",
]
