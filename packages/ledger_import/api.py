"""Public API for the ``ledger_import`` package.

Entry points take the uploaded payload (text or bytes plus the declared
extension) and return either the detected adapter name or an
:class:`~ledger_import.models.ImportOutcome`.

File-level problems raise :class:`~ledger_import.errors.ImportFileError`
before any row is processed; everything else is accounted for per row in the
returned outcome.
"""

from __future__ import annotations

from os import PathLike
from pathlib import Path

from .duplicates import DuplicateMode, resolve_mode
from .errors import ImportFileError
from .importer import RecomputeHook, import_rows
from .ingest.pipeline import ParsedFile, detect_csv_format, parse_csv_text, parse_json_text
from .logging_setup import get_logger
from .models import ImportOutcome
from .persistence import LedgerStore

logger = get_logger("ledger_import.api")

SUPPORTED_EXTENSIONS = ("csv", "json")


def _normalize_extension(extension: str) -> str:
    ext = (extension or "").strip().lower().lstrip(".")
    if ext not in SUPPORTED_EXTENSIONS:
        raise ImportFileError(
            f"Unsupported file extension {extension!r}; expected one of: "
            + ", ".join(SUPPORTED_EXTENSIONS)
        )
    return ext


def _decode(content: str | bytes) -> str:
    if isinstance(content, str):
        return content
    try:
        # utf-8-sig drops a leading BOM written by spreadsheet exports.
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ImportFileError(f"File is not valid UTF-8 text: {e}") from e


def parse_content(content: str | bytes, extension: str = "csv") -> ParsedFile:
    """Parse a payload into rows without touching the store."""

    ext = _normalize_extension(extension)
    text = _decode(content)
    if ext == "json":
        return parse_json_text(text)
    return parse_csv_text(text)


def detect_format(content: str | bytes, extension: str = "csv") -> str:
    """Return the name of the adapter that would handle ``content``.

    JSON payloads bypass detection and report ``"json"``.
    """

    ext = _normalize_extension(extension)
    if ext == "json":
        return "json"
    return detect_csv_format(_decode(content)).name


def import_file(
    content: str | bytes,
    extension: str,
    *,
    owner_id: int,
    store: LedgerStore,
    duplicate_check_mode: str | DuplicateMode | None = None,
    detect_only: bool = False,
    on_imported: RecomputeHook | None = None,
) -> ImportOutcome | str:
    """Import one uploaded file for ``owner_id``.

    Parameters
    ----------
    content:
        File payload (``str`` or UTF-8 ``bytes``).
    extension:
        Declared extension, ``csv`` or ``json`` (a leading dot is accepted).
    owner_id:
        Ledger owner the records belong to; duplicate checks are scoped to it.
    store:
        Ledger store used for duplicate lookups and writes.
    duplicate_check_mode:
        ``strict``, ``standard``, ``loose`` or ``off``. ``None`` falls back to
        ``LEDGER_IMPORT_DUPLICATE_MODE`` and then ``standard``.
    detect_only:
        When true, only run format detection and return the adapter name.
    on_imported:
        Called with the imported count after at least one new record.

    Returns
    -------
    ImportOutcome | str
        The aggregate outcome, or the detected adapter name in detect-only mode.
    """

    # Resolve the mode up front so a bad value fails before any row is touched.
    mode = resolve_mode(duplicate_check_mode)
    if detect_only:
        return detect_format(content, extension)

    parsed = parse_content(content, extension)
    logger.info(
        "import:start format=%s rows=%d mode=%s owner=%d",
        parsed.detected_format,
        len(parsed.rows),
        mode.value,
        owner_id,
    )
    return import_rows(
        parsed.rows,
        owner_id=owner_id,
        store=store,
        mode=mode,
        detected_format=parsed.detected_format,
        on_imported=on_imported,
    )


def import_path(
    path: str | PathLike[str],
    *,
    owner_id: int,
    store: LedgerStore,
    duplicate_check_mode: str | DuplicateMode | None = None,
    detect_only: bool = False,
    on_imported: RecomputeHook | None = None,
) -> ImportOutcome | str:
    """Read ``path`` from disk and import it; the extension comes from its suffix."""

    p = Path(path)
    return import_file(
        p.read_bytes(),
        p.suffix,
        owner_id=owner_id,
        store=store,
        duplicate_check_mode=duplicate_check_mode,
        detect_only=detect_only,
        on_imported=on_imported,
    )


__all__ = [
    "SUPPORTED_EXTENSIONS",
    "detect_format",
    "import_file",
    "import_path",
    "parse_content",
]
