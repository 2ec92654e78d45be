"""Turn an uploaded payload into parsed rows.

- :func:`parse_csv_text`: tokenize, detect the adapter from the header row,
  then transform every data row into a :class:`~ledger_import.models.ParsedRow`.
- :func:`parse_json_text`: canonical-shaped JSON bypasses detection; each item
  is validated with pydantic and then by the shared validator.

Only file-level problems raise (:class:`~ledger_import.errors.ImportFileError`);
row problems become ``error`` outcomes so the importer can account for them.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from ..errors import ImportFileError, TransactionValidationError
from ..logging_setup import get_logger
from ..models import (
    CanonicalTransaction,
    JsonTransactionIn,
    ParsedRow,
    RowOutcome,
    TransactionKind,
    TransferType,
)
from .adapters import Adapter
from .registry import REGISTRY, STANDARD, Detection, detect
from .tokenizer import iter_lines, normalize_header, split_line
from .utils import parse_date

logger = get_logger("ledger_import.ingest.pipeline")

# Adapter failures that describe bad row data rather than a bug.
ROW_ERRORS: tuple[type[BaseException], ...] = (ValueError, ArithmeticError, LookupError)


@dataclass(slots=True)
class ParsedFile:
    """Rows of one payload plus the detection that produced them."""

    detected_format: str | None
    rows: list[ParsedRow] = field(default_factory=list)
    headers: tuple[str, ...] = ()
    detection: Detection | None = None


# ---------------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------------


def _read_header(content: str) -> tuple[list[tuple[int, str]], tuple[str, ...]]:
    lines = list(iter_lines(content))
    if len(lines) < 2:
        raise ImportFileError("CSV file must have at least a header row and one data row")
    headers = tuple(normalize_header(h) for h in split_line(lines[0][1]))
    return lines[1:], headers


def detect_csv_format(
    content: str,
    adapters: Sequence[Adapter] = REGISTRY,
    *,
    fallback: Adapter = STANDARD,
) -> Detection:
    """Run only the detector over the header row of ``content``."""

    _, headers = _read_header(content)
    return detect(headers, adapters, fallback=fallback)


def transform_row(
    adapter: Adapter, row: Mapping[str, str], headers: tuple[str, ...]
) -> RowOutcome:
    """Apply ``adapter`` to one row, converting row-data failures to errors."""

    try:
        return adapter.parse_row(row, headers)
    except ROW_ERRORS as e:
        return RowOutcome.error(str(e) or type(e).__name__)


def parse_csv_text(
    content: str,
    adapters: Sequence[Adapter] = REGISTRY,
    *,
    fallback: Adapter = STANDARD,
) -> ParsedFile:
    """Parse CSV ``content`` with the detected adapter.

    Row numbers follow the file: the header is line 1. Rows whose fields are
    all empty are dropped without being counted.
    """

    data_lines, headers = _read_header(content)
    detection = detect(headers, adapters, fallback=fallback)
    adapter = detection.adapter

    parsed = ParsedFile(
        detected_format=detection.name, headers=headers, detection=detection
    )
    for line_no, line in data_lines:
        values = split_line(line)
        if not any(values):
            continue
        row = {h: v for h, v in zip(headers, values, strict=False)}
        outcome = transform_row(adapter, row, headers)
        if outcome.status == "error":
            logger.debug("parse:row_error row=%d reason=%s", line_no, outcome.reason)
        parsed.rows.append(ParsedRow(row_number=line_no, raw=row, outcome=outcome))

    logger.info(
        "parse:csv_done adapter=%s rows=%d", detection.name, len(parsed.rows)
    )
    return parsed


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------


def _format_validation_error(e: ValidationError) -> str:
    parts = []
    for err in e.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts)


def json_item_to_transaction(item: JsonTransactionIn) -> CanonicalTransaction:
    """Convert a validated JSON item into a canonical transaction.

    Transfer fields are kept only on ``TRANSFER`` items.
    """

    try:
        kind = TransactionKind(item.type)
    except ValueError:
        raise TransactionValidationError(
            f"Invalid transaction type: {item.type}. Must be BUY, SELL, or TRANSFER."
        ) from None

    transfer_type: TransferType | None = None
    destination: str | None = None
    if kind is TransactionKind.TRANSFER:
        if item.transfer_type:
            try:
                transfer_type = TransferType(item.transfer_type)
            except ValueError:
                raise TransactionValidationError(
                    f"Invalid transfer type: {item.transfer_type}"
                ) from None
        destination = item.destination_address or None

    return CanonicalTransaction(
        kind=kind,
        btc_amount=item.btc_amount,
        price_per_btc=item.original_price_per_btc,
        currency=item.original_currency,
        total_amount=item.original_total_amount,
        fees=item.fees,
        fees_currency=item.fees_currency or item.original_currency,
        transaction_date=parse_date(item.transaction_date),
        notes=item.notes or "",
        transfer_type=transfer_type,
        destination_address=destination,
    )


def _load_items(content: str) -> list[Any]:
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ImportFileError(f"Invalid JSON: {e.msg} (line {e.lineno})") from e
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get("transactions"), list):
        return data["transactions"]
    raise ImportFileError(
        "Invalid JSON format. Expected array of transactions or object with "
        "transactions property."
    )


def parse_json_text(content: str) -> ParsedFile:
    """Parse a JSON document of canonical-shaped transactions (items numbered from 1)."""

    parsed = ParsedFile(detected_format="json")
    for idx, item in enumerate(_load_items(content), start=1):
        raw: Mapping[str, Any] = item if isinstance(item, dict) else {"value": item}
        if not isinstance(item, dict):
            outcome = RowOutcome.error("JSON transaction must be an object")
        else:
            try:
                tx = json_item_to_transaction(JsonTransactionIn.model_validate(item))
                outcome = RowOutcome.record(tx)
            except ValidationError as e:
                outcome = RowOutcome.error(_format_validation_error(e))
            except TransactionValidationError as e:
                outcome = RowOutcome.error(str(e))
        parsed.rows.append(ParsedRow(row_number=idx, raw=raw, outcome=outcome))

    logger.info("parse:json_done rows=%d", len(parsed.rows))
    return parsed


__all__ = [
    "ROW_ERRORS",
    "ParsedFile",
    "detect_csv_format",
    "json_item_to_transaction",
    "parse_csv_text",
    "parse_json_text",
    "transform_row",
]
