"""Pytest configuration for test isolation.

Import behavior depends on a handful of environment variables (the default
duplicate mode, the default owner, the log level and ``DATABASE_URL``). A
developer's shell or a local ``.env`` must not leak into tests, so an autouse
fixture clears them for every test.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from tests.helpers.store import MemoryLedgerStore

DATA_DIR = Path(__file__).parent / "data"

_ISOLATED_ENV = (
    "DATABASE_URL",
    "LEDGER_IMPORT_DUPLICATE_MODE",
    "LEDGER_IMPORT_OWNER_ID",
    "LEDGER_IMPORT_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove configuration variables so each test starts from defaults."""

    for name in _ISOLATED_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def data_dir() -> Path:
    return DATA_DIR


@pytest.fixture
def memory_store() -> MemoryLedgerStore:
    return MemoryLedgerStore()


@pytest.fixture
def sqlite_url(tmp_path: Path) -> Iterator[str]:
    """A fresh file-backed SQLite ledger per test."""

    from db.client import dispose_engines

    from tests.helpers.db import bootstrap_sqlite_db

    url = bootstrap_sqlite_db(tmp_path / "ledger.sqlite3")
    try:
        yield url
    finally:
        dispose_engines()
