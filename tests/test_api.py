from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path

import pytest

from ledger_import import (
    ImportFileError,
    ImportOutcome,
    TransactionKind,
    TransferType,
    detect_format,
    import_file,
    import_path,
)
from ledger_import.api import parse_content
from ledger_import.duplicates import MODE_ENV
from tests.helpers.store import MemoryLedgerStore

OWNER = 1
Q = Decimal("0.00000001")


def _q(d: Decimal) -> Decimal:
    return d.quantize(Q)


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------


def test_detect_only_returns_adapter_name_without_writing(
    data_dir: Path, memory_store: MemoryLedgerStore
) -> None:
    content = (data_dir / "kraken_trades.csv").read_bytes()
    result = import_file(content, "csv", owner_id=OWNER, store=memory_store, detect_only=True)
    assert result == "kraken"
    assert memory_store.records == []
    assert memory_store.lookups == 0


def test_detect_format_json_bypasses_registry() -> None:
    assert detect_format("[]", ".json") == "json"


def test_detect_format_accepts_bom_prefixed_bytes(data_dir: Path) -> None:
    content = b"\xef\xbb\xbf" + (data_dir / "coinbase_fills.csv").read_bytes()
    assert detect_format(content, "CSV") == "coinbase"


# ---------------------------------------------------------------------------
# File-level errors
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("extension", ["xlsx", "", "txt"])
def test_unsupported_extension(extension: str, memory_store: MemoryLedgerStore) -> None:
    with pytest.raises(ImportFileError, match="Unsupported file extension"):
        import_file("a,b\n1,2", extension, owner_id=OWNER, store=memory_store)


@pytest.mark.parametrize("content", ["", "type,btc_amount", "  \n\n  type,btc_amount\n"])
def test_csv_needs_header_and_one_row(content: str, memory_store: MemoryLedgerStore) -> None:
    with pytest.raises(ImportFileError, match="at least a header row and one data row"):
        import_file(content, "csv", owner_id=OWNER, store=memory_store)


def test_invalid_utf8_is_a_file_error(memory_store: MemoryLedgerStore) -> None:
    with pytest.raises(ImportFileError, match="UTF-8"):
        import_file(b"type\n\xff\xfe", "csv", owner_id=OWNER, store=memory_store)


def test_unknown_mode_fails_before_any_row(
    data_dir: Path, memory_store: MemoryLedgerStore
) -> None:
    content = (data_dir / "standard.csv").read_text(encoding="utf-8")
    with pytest.raises(ImportFileError, match="Unknown duplicate check mode"):
        import_file(
            content,
            "csv",
            owner_id=OWNER,
            store=memory_store,
            duplicate_check_mode="fuzzy",
        )
    assert memory_store.records == []
    assert memory_store.lookups == 0


@pytest.mark.parametrize(
    "content",
    ["{not json", '{"items": []}', '"just a string"', "42"],
)
def test_malformed_json_shapes(content: str, memory_store: MemoryLedgerStore) -> None:
    with pytest.raises(ImportFileError):
        import_file(content, "json", owner_id=OWNER, store=memory_store)


# ---------------------------------------------------------------------------
# CSV imports
# ---------------------------------------------------------------------------


def test_import_csv_bytes_with_bom(data_dir: Path, memory_store: MemoryLedgerStore) -> None:
    content = b"\xef\xbb\xbf" + (data_dir / "binance_orders.csv").read_bytes()
    outcome = import_file(content, "csv", owner_id=OWNER, store=memory_store)
    assert isinstance(outcome, ImportOutcome)
    assert outcome.detected_format == "binance"
    assert outcome.imported == 2
    assert outcome.ignored_transactions == 1


def test_import_excel_wrapped_rows(data_dir: Path, memory_store: MemoryLedgerStore) -> None:
    outcome = import_path(
        data_dir / "standard_excel_wrapped.csv", owner_id=OWNER, store=memory_store
    )
    assert isinstance(outcome, ImportOutcome)
    assert outcome.imported == 2
    assert [tx.kind for tx in memory_store.transactions()] == [
        TransactionKind.BUY,
        TransactionKind.SELL,
    ]


def test_mode_from_environment_is_used(
    data_dir: Path, memory_store: MemoryLedgerStore, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv(MODE_ENV, "off")
    content = (data_dir / "strike_trades.csv").read_text(encoding="utf-8")
    import_file(content, "csv", owner_id=OWNER, store=memory_store)
    second = import_file(content, "csv", owner_id=OWNER, store=memory_store)
    assert isinstance(second, ImportOutcome)
    assert second.imported == 2
    assert second.duplicate_transactions == 0


def test_crlf_line_endings(memory_store: MemoryLedgerStore) -> None:
    content = (
        "type,btc_amount,original_price_per_btc,original_currency,original_total_amount,"
        "fees,fees_currency,transaction_date,notes\r\n"
        "BUY,0.01,50000,USD,500,0,USD,2024-05-08,crlf\r\n"
    )
    outcome = import_file(content, "csv", owner_id=OWNER, store=memory_store)
    assert isinstance(outcome, ImportOutcome)
    assert outcome.imported == 1
    (tx,) = memory_store.transactions()
    assert tx.notes == "crlf"


# ---------------------------------------------------------------------------
# JSON imports
# ---------------------------------------------------------------------------


def test_json_object_with_transactions(data_dir: Path, memory_store: MemoryLedgerStore) -> None:
    content = (data_dir / "transactions.json").read_text(encoding="utf-8")
    outcome = import_file(content, "json", owner_id=OWNER, store=memory_store)

    assert isinstance(outcome, ImportOutcome)
    assert outcome.detected_format == "json"
    assert outcome.total_transactions == 4
    assert outcome.imported == 2
    assert outcome.invalid_transactions == 2
    assert outcome.errors[0] == (
        "Row 3: Invalid transaction type: SWAP. Must be BUY, SELL, or TRANSFER."
    )
    assert outcome.errors[1].startswith("Row 4: btc_amount")

    buy, transfer = memory_store.transactions()
    assert buy.currency == "USD"
    assert buy.fees_currency == "USD"
    assert buy.transaction_date == "2024-06-01"
    assert _q(buy.btc_amount) == Decimal("0.01500000")
    assert _q(buy.fees) == Decimal("1.20000000")

    assert transfer.kind is TransactionKind.TRANSFER
    assert transfer.transfer_type is TransferType.TO_COLD_WALLET
    assert transfer.destination_address == "bc1qcoldstorage"
    assert transfer.fees_currency == "BTC"


def test_json_array_drops_transfer_fields_on_trades(memory_store: MemoryLedgerStore) -> None:
    items = [
        {
            "type": "buy",
            "btc_amount": "0.5",
            "original_price_per_btc": "20000",
            "original_currency": "EUR",
            "original_total_amount": "10000",
            "transaction_date": "2023-01-02",
            "transfer_type": "TRANSFER_IN",
            "destination_address": "bc1qignored",
            "id": 99,
        }
    ]
    outcome = import_file(json.dumps(items), "json", owner_id=OWNER, store=memory_store)
    assert isinstance(outcome, ImportOutcome)
    assert outcome.imported == 1
    (tx,) = memory_store.transactions()
    assert tx.kind is TransactionKind.BUY
    assert tx.transfer_type is None
    assert tx.destination_address is None
    assert tx.fees == Decimal(0)


def test_json_non_object_item_is_invalid(memory_store: MemoryLedgerStore) -> None:
    outcome = import_file('[1, "x"]', "json", owner_id=OWNER, store=memory_store)
    assert isinstance(outcome, ImportOutcome)
    assert outcome.invalid_transactions == 2
    assert outcome.errors[0] == "Row 1: JSON transaction must be an object"


def test_parse_content_does_not_need_a_store(data_dir: Path) -> None:
    parsed = parse_content((data_dir / "legacy.csv").read_bytes(), "csv")
    assert parsed.detected_format == "legacy"
    assert len(parsed.rows) == 3
