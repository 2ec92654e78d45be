"""Duplicate detection policy used while importing.

Public surface:
- ``DuplicateMode``: the strictness levels (``strict``, ``standard``,
  ``loose``, ``off``).
- ``resolve_mode``: turn a caller value (or ``LEDGER_IMPORT_DUPLICATE_MODE``)
  into a ``DuplicateMode``; unknown names are a file-level error.
- ``compute_fingerprint``: stable SHA-256 over the fields a mode compares.
- ``find_duplicate``: first stored record matching a candidate under a mode.

Every mode only compares records of the same owner and calendar date; the
store is asked for that slice and the comparison happens here.
"""

from __future__ import annotations

import hashlib
import json
import os
from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal
from enum import StrEnum
from typing import Any

from .errors import ImportFileError
from .models import CanonicalTransaction

MODE_ENV = "LEDGER_IMPORT_DUPLICATE_MODE"
_SATOSHI = Decimal("0.00000001")


class DuplicateMode(StrEnum):
    STRICT = "strict"
    STANDARD = "standard"
    LOOSE = "loose"
    OFF = "off"


DEFAULT_MODE = DuplicateMode.STANDARD


def resolve_mode(value: str | DuplicateMode | None = None) -> DuplicateMode:
    """Resolve the active mode: explicit value, then environment, then ``standard``."""

    raw = value if value is not None else os.getenv(MODE_ENV)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return DEFAULT_MODE
    try:
        return DuplicateMode(str(raw).strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in DuplicateMode)
        raise ImportFileError(
            f"Unknown duplicate check mode {raw!r} (expected one of: {allowed})"
        ) from None


def _amount(d: Decimal) -> str:
    # Satoshi precision so values round-tripped through Numeric(28, 8) compare equal.
    return f"{d.quantize(_SATOSHI, rounding=ROUND_HALF_UP):f}"


def fingerprint_fields(tx: CanonicalTransaction, mode: DuplicateMode) -> dict[str, Any]:
    """Return the fields compared under ``mode`` (empty for ``off``)."""

    if mode is DuplicateMode.OFF:
        return {}
    fields: dict[str, Any] = {
        "date": tx.transaction_date,
        "btc_amount": _amount(tx.btc_amount),
    }
    if mode is DuplicateMode.LOOSE:
        return fields
    fields["type"] = str(tx.kind)
    fields["price_per_btc"] = _amount(tx.price_per_btc)
    if mode is DuplicateMode.STANDARD:
        return fields
    fields.update(
        {
            "currency": tx.currency.strip().upper(),
            "total_amount": _amount(tx.total_amount),
            "fees": _amount(tx.fees),
            "fees_currency": tx.fees_currency.strip().upper(),
            "notes": tx.notes or "",
        }
    )
    return fields


def compute_fingerprint(tx: CanonicalTransaction, mode: DuplicateMode) -> str:
    """Compute a stable SHA-256 fingerprint over the fields ``mode`` compares."""

    payload = {"mode": mode.value, **fingerprint_fields(tx, mode)}
    data = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def find_duplicate(
    candidate: CanonicalTransaction,
    existing: Iterable[CanonicalTransaction],
    mode: DuplicateMode,
) -> CanonicalTransaction | None:
    """Return the first of ``existing`` that duplicates ``candidate``, if any."""

    if mode is DuplicateMode.OFF:
        return None
    target = compute_fingerprint(candidate, mode)
    for stored in existing:
        if compute_fingerprint(stored, mode) == target:
            return stored
    return None


def duplicate_reason(mode: DuplicateMode) -> str:
    return f"Duplicate transaction ({mode.value} mode)"


__all__ = [
    "DEFAULT_MODE",
    "MODE_ENV",
    "DuplicateMode",
    "compute_fingerprint",
    "duplicate_reason",
    "find_duplicate",
    "fingerprint_fields",
    "resolve_mode",
]
