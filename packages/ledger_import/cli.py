# ruff: noqa: I001
"""CLI for the ``ledger_import`` package.

This module exposes callable command handlers (``cmd_detect``,
``cmd_import``) and a Typer-based console interface. Environment variables
(notably ``DATABASE_URL``) are loaded from a local ``.env`` using
``python-dotenv`` before delegating to command logic. Business logic lives in
``ledger_import.api``.
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from .logging_setup import configure_logging

OWNER_ENV = "LEDGER_IMPORT_OWNER_ID"


def _resolve_owner_id(owner_id: int | None) -> int | None:
    if owner_id is not None:
        return owner_id
    env_val = os.getenv(OWNER_ENV)
    if not env_val:
        return None
    try:
        return int(env_val.strip())
    except ValueError:
        return None


def cmd_detect(file_path: str) -> int:
    """Print the adapter name that would handle ``file_path``."""

    from .api import detect_format
    from .errors import LedgerImportError

    p = Path(file_path)
    try:
        name = detect_format(p.read_bytes(), p.suffix)
    except FileNotFoundError:
        print(f"Error: File not found: {file_path}", file=sys.stderr)
        return 1
    except LedgerImportError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(name)
    return 0


def cmd_import(
    file_path: str,
    *,
    owner_id: int | None,
    mode: str | None = None,
    database_url: str | None = None,
) -> int:
    """Import ``file_path`` into the ledger and print the JSON outcome.

    Returns
    -------
    int
        ``0`` when the import ran (even with invalid or duplicate rows),
        ``1`` on file-level or configuration errors.
    """

    # Load .env here as well so env-dependent checks work when called directly.
    load_dotenv(override=False)

    from sqlalchemy.exc import SQLAlchemyError

    from .api import import_path
    from .errors import LedgerImportError
    from .persistence import SqlLedgerStore

    resolved_owner = _resolve_owner_id(owner_id)
    if resolved_owner is None:
        print(
            f"Error: --owner-id is required (or set {OWNER_ENV} in the environment).",
            file=sys.stderr,
        )
        return 1
    if not (database_url or os.getenv("DATABASE_URL")):
        print("Error: DATABASE_URL is not set; pass --database-url.", file=sys.stderr)
        return 1

    store = SqlLedgerStore(database_url=database_url)
    try:
        outcome = import_path(
            file_path,
            owner_id=resolved_owner,
            store=store,
            duplicate_check_mode=mode,
        )
    except FileNotFoundError:
        print(f"Error: File not found: {file_path}", file=sys.stderr)
        return 1
    except LedgerImportError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except SQLAlchemyError as e:
        print(f"Error: database unavailable: {e}", file=sys.stderr)
        return 1

    print(json.dumps(outcome.as_dict(), indent=2, ensure_ascii=False))
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Import exchange transaction exports (CSV/JSON) into the BTC ledger. "
        "Loads DATABASE_URL from a local .env before running."
    ),
)

# Module-level option object to satisfy ruff B008 (no calls in parameter
# defaults). Typer will inspect this when used as a default value below.
FILE_OPTION: OptionInfo = typer.Option(
    ...,  # required
    "--file",
    help="Path to a .csv or .json export",
    dir_okay=False,
    file_okay=True,
    exists=False,  # allow non-existent here; the handler will report nice errors
)


@app.command("detect")
def detect_cmd(file_path: Annotated[Path, FILE_OPTION]) -> None:
    """Print the detected export format without importing anything."""

    code = cmd_detect(str(file_path))
    if code:
        raise typer.Exit(code)


@app.command("import")
def import_cmd(
    file_path: Annotated[Path, FILE_OPTION],
    *,
    owner_id: int | None = typer.Option(
        None, help=f"Ledger owner id (falls back to {OWNER_ENV})."
    ),
    mode: str | None = typer.Option(
        None,
        "--mode",
        help="Duplicate check mode: strict, standard, loose or off (default standard).",
    ),
    database_url: str | None = typer.Option(
        None, help="Override DATABASE_URL (falls back to env var)."
    ),
) -> None:
    """Import a file and print the JSON import outcome."""

    code = cmd_import(
        str(file_path), owner_id=owner_id, mode=mode, database_url=database_url
    )
    if code:
        raise typer.Exit(code)


@app.callback(invoke_without_command=True)
def _root(ctx: typer.Context) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures package logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    # Central logging setup so child loggers inherit configuration
    configure_logging()

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


if __name__ == "__main__":  # pragma: no cover
    # Running as a module: `python -m ledger_import.cli`
    app()
