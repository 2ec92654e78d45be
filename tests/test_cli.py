from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from ledger_import import cli
from tests.helpers.db import count_rows

runner = CliRunner()


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    # Keep the package logger propagating so the runner's streams stay clean.
    monkeypatch.setattr(cli, "configure_logging", lambda *a, **k: None)


def test_detect_prints_adapter_name(data_dir: Path) -> None:
    result = runner.invoke(cli.app, ["detect", "--file", str(data_dir / "bitcoin21.csv")])
    assert result.exit_code == 0
    assert result.stdout.strip() == "21bitcoin"


def test_detect_missing_file(tmp_path: Path) -> None:
    result = runner.invoke(cli.app, ["detect", "--file", str(tmp_path / "nope.csv")])
    assert result.exit_code == 1
    assert "File not found" in result.output


def test_detect_rejects_unsupported_extension(tmp_path: Path) -> None:
    p = tmp_path / "export.xlsx"
    p.write_bytes(b"PK")
    result = runner.invoke(cli.app, ["detect", "--file", str(p)])
    assert result.exit_code == 1
    assert "Unsupported file extension" in result.output


def test_import_requires_owner(data_dir: Path, sqlite_url: str) -> None:
    result = runner.invoke(
        cli.app,
        ["import", "--file", str(data_dir / "kraken_trades.csv"), "--database-url", sqlite_url],
    )
    assert result.exit_code == 1
    assert "--owner-id is required" in result.output


def test_import_requires_database_url(data_dir: Path) -> None:
    result = runner.invoke(
        cli.app, ["import", "--file", str(data_dir / "kraken_trades.csv"), "--owner-id", "3"]
    )
    assert result.exit_code == 1
    assert "DATABASE_URL is not set" in result.output


def test_import_prints_outcome_json(data_dir: Path, sqlite_url: str) -> None:
    args = [
        "import",
        "--file",
        str(data_dir / "kraken_trades.csv"),
        "--owner-id",
        "3",
        "--database-url",
        sqlite_url,
    ]
    result = runner.invoke(cli.app, args)
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["success"] is True
    assert payload["detected_format"] == "kraken"
    assert payload["imported"] == 2
    assert payload["skipped"] == 1
    assert count_rows(sqlite_url, owner_id=3) == 2


def test_import_owner_from_environment(
    data_dir: Path, sqlite_url: str, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv(cli.OWNER_ENV, "11")
    monkeypatch.setenv("DATABASE_URL", sqlite_url)
    result = runner.invoke(cli.app, ["import", "--file", str(data_dir / "coinbase_fills.csv")])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["imported"] == 2
    assert count_rows(sqlite_url, owner_id=11) == 2


def test_import_unknown_mode(data_dir: Path, sqlite_url: str) -> None:
    result = runner.invoke(
        cli.app,
        [
            "import",
            "--file",
            str(data_dir / "standard.csv"),
            "--owner-id",
            "3",
            "--database-url",
            sqlite_url,
            "--mode",
            "sometimes",
        ],
    )
    assert result.exit_code == 1
    assert "Unknown duplicate check mode" in result.output
    assert count_rows(sqlite_url) == 0


def test_cmd_import_can_be_called_directly(data_dir: Path, sqlite_url: str, capsys) -> None:
    code = cli.cmd_import(
        str(data_dir / "legacy.csv"), owner_id=5, mode="strict", database_url=sqlite_url
    )
    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["imported"] == 2
    assert payload["details"]["ignored_transactions"] == 1
