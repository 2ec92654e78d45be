"""Line-oriented CSV tokenizer tolerant of spreadsheet export artifacts.

Exchange exports are comma-delimited, one record per line. Lines go through
the stdlib ``csv`` reader in its non-strict dialect, so ``""`` escapes and
quoted commas follow the usual rules. On top of that:

- Some spreadsheet round-trips wrap an *entire* row in one pair of quotes
  (``"381,BUY,0.01794592"``), which ``csv`` reads as a single field. When
  that happens and the interior splits into several fields, the interior
  parse is used instead.
- Fields are trimmed.

``split_line`` never fails: at worst it returns one field holding the trimmed
line.
"""

from __future__ import annotations

import csv
from collections.abc import Iterator


def _read_fields(text: str) -> list[str]:
    try:
        fields = next(csv.reader([text], skipinitialspace=True), [])
    except csv.Error:
        return [text]
    # ``csv`` yields no fields for an empty line; callers expect one empty field.
    return [f.strip() for f in fields] or [""]


def split_line(line: str) -> list[str]:
    """Split one CSV line into trimmed fields.

    When the whole line starts and ends with a double quote and the regular
    parse yields a single field, the interior is parsed again; if that yields
    more than one field the line was double-wrapped and the interior parse
    wins. A properly quoted row such as ``"a","1,5"`` already splits into
    several fields and is left alone.
    """

    text = line.rstrip("\r\n").strip()
    fields = _read_fields(text)
    if len(fields) == 1 and len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        interior = _read_fields(text[1:-1])
        if len(interior) > 1:
            return interior
    return fields


def iter_lines(content: str) -> Iterator[tuple[int, str]]:
    """Yield ``(line_number, line)`` pairs of the trimmed document.

    Numbering is 1-based and counts blank lines, so the header is line 1 and
    row numbers match what a spreadsheet shows.
    """

    for idx, raw in enumerate(content.strip().split("\n"), start=1):
        yield idx, raw.rstrip("\r")


def normalize_header(value: str) -> str:
    """Lower-case, trim and drop quotes/BOM from one header cell."""

    return value.replace("\ufeff", "").replace('"', "").strip().lower()


__all__ = ["iter_lines", "normalize_header", "split_line"]
