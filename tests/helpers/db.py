"""DB helpers for tests: bootstrap a temporary SQLite ledger database."""

from __future__ import annotations

import os
from pathlib import Path

from db import Base
from db.client import get_engine, session_scope
from db.models.ledger import LedgerTransaction
from sqlalchemy import text as sql_text


def bootstrap_sqlite_db(db_file: Path, *, set_default_env: bool = False) -> str:
    """Create a SQLite database file, initialize schema, and return the URL.

    Using a file-backed SQLite DB ensures multiple SQLAlchemy connections share
    the same state (in-memory DBs are per-connection by default).
    """

    url = f"sqlite+pysqlite:///{db_file}"
    # Ensure parent exists before engine creation attempts any writes
    db_file.parent.mkdir(parents=True, exist_ok=True)
    engine = get_engine(database_url=url)
    Base.metadata.create_all(bind=engine)
    _assert_transactions_schema_in_sync(url)

    # Make it the default for any code paths that read from the environment
    if set_default_env:
        os.environ.setdefault("DATABASE_URL", url)
    return url


def count_rows(database_url: str, *, owner_id: int | None = None) -> int:
    """Return the number of stored ledger rows (optionally for one owner)."""

    sql = "SELECT COUNT(*) FROM ledger_transactions"
    params: dict[str, int] = {}
    if owner_id is not None:
        sql += " WHERE owner_id = :owner"
        params["owner"] = owner_id
    with session_scope(database_url=database_url) as session:
        return int(session.execute(sql_text(sql), params).scalar_one())


def _assert_transactions_schema_in_sync(database_url: str) -> None:
    """Quick sanity check: ORM column set matches SQLite table column set."""

    expected = {c.name for c in LedgerTransaction.__table__.columns}
    with session_scope(database_url=database_url) as session:
        rows = session.execute(sql_text("PRAGMA table_info('ledger_transactions')")).fetchall()
        got = {row[1] for row in rows}  # (cid, name, type, notnull, dflt_value, pk)
    missing = expected - got
    extra = got - expected
    assert not missing and not extra, (
        f"ledger_transactions schema drift: missing={missing or '∅'}, extra={extra or '∅'}"
    )
