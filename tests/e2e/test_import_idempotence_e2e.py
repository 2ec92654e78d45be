from __future__ import annotations

from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import inspect

from db.client import dispose_engines, get_engine
from db.models.ledger import LedgerTransaction

from ledger_import import DuplicateMode, ImportOutcome, SqlLedgerStore, import_path
from tests.helpers.db import count_rows

_ALEMBIC_DIR = Path(__file__).resolve().parents[2] / "libs" / "db" / "alembic"

FIXTURES = [
    "kraken_trades.csv",
    "binance_orders.csv",
    "binance_trades.csv",
    "coinbase_fills.csv",
    "strike_activity_v1.csv",
    "strike_activity_v2.csv",
    "strike_trades.csv",
    "bitcoin21.csv",
    "legacy.csv",
    "standard.csv",
    "transactions.json",
]


def _import(path: Path, url: str, mode: DuplicateMode, owner_id: int = 1) -> ImportOutcome:
    outcome = import_path(
        path,
        owner_id=owner_id,
        store=SqlLedgerStore(database_url=url),
        duplicate_check_mode=mode,
    )
    assert isinstance(outcome, ImportOutcome)
    return outcome


@pytest.mark.parametrize("fixture", FIXTURES)
def test_strict_reimport_adds_nothing(data_dir: Path, sqlite_url: str, fixture: str) -> None:
    first = _import(data_dir / fixture, sqlite_url, DuplicateMode.STRICT)
    assert first.imported > 0
    assert count_rows(sqlite_url) == first.imported

    second = _import(data_dir / fixture, sqlite_url, DuplicateMode.STRICT)
    assert second.imported == 0
    assert second.duplicate_transactions == first.imported
    assert second.invalid_transactions == first.invalid_transactions
    assert count_rows(sqlite_url) == first.imported


def test_off_mode_imports_again(data_dir: Path, sqlite_url: str) -> None:
    path = data_dir / "strike_activity_v1.csv"
    first = _import(path, sqlite_url, DuplicateMode.OFF)
    second = _import(path, sqlite_url, DuplicateMode.OFF)
    assert first.imported == second.imported == 3
    assert count_rows(sqlite_url) == 6


def test_stored_transfer_round_trips(data_dir: Path, sqlite_url: str) -> None:
    _import(data_dir / "strike_activity_v1.csv", sqlite_url, DuplicateMode.STANDARD)
    store = SqlLedgerStore(database_url=sqlite_url)
    (transfer,) = store.find_same_day(1, "2024-01-03")
    assert transfer.transfer_type is not None
    assert transfer.destination_address == "bc1qexampleaddress0000000000000000000"
    assert transfer.fees_currency == "BTC"
    assert store.find_same_day(2, "2024-01-03") == []


def test_migrations_match_orm_schema(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    url = f"sqlite+pysqlite:///{tmp_path / 'migrated.sqlite3'}"
    monkeypatch.setenv("DATABASE_URL", url)

    # No ini file: keeps alembic from reconfiguring the test process's logging.
    cfg = Config()
    cfg.set_main_option("script_location", str(_ALEMBIC_DIR))
    command.upgrade(cfg, "head")

    try:
        inspector = inspect(get_engine(database_url=url))
        columns = {c["name"] for c in inspector.get_columns("ledger_transactions")}
        assert columns == {c.name for c in LedgerTransaction.__table__.columns}
        indexes = {ix["name"] for ix in inspector.get_indexes("ledger_transactions")}
        assert "ix_ledger_tx_owner_date" in indexes

        # The migrated schema accepts what the importer writes.
        outcome = _import(
            Path(__file__).resolve().parents[1] / "data" / "bitcoin21.csv",
            url,
            DuplicateMode.STANDARD,
        )
        assert outcome.imported == 2
        assert count_rows(url) == 2
    finally:
        dispose_engines()
