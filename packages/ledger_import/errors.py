"""Exception types raised by the import pipeline.

Only :class:`ImportFileError` aborts a whole import. Row-level problems
(:class:`RowParseError`, :class:`TransactionValidationError`) are caught by the
row loop and recorded on the :class:`~ledger_import.models.ImportOutcome`.
"""

from __future__ import annotations


class LedgerImportError(Exception):
    """Base class for all ``ledger_import`` errors."""


class ImportFileError(LedgerImportError):
    """The payload as a whole cannot be imported (bad extension, JSON, encoding)."""


class RowParseError(LedgerImportError, ValueError):
    """An adapter could not transform a row (e.g., an unparseable date)."""


class TransactionValidationError(LedgerImportError, ValueError):
    """A canonical transaction violates an invariant; the message names the rule."""


__all__ = [
    "ImportFileError",
    "LedgerImportError",
    "RowParseError",
    "TransactionValidationError",
]
