"""ledger_import: import exchange transaction exports into a BTC ledger.

Public API re-exported here for convenience:

- :func:`detect_format`, :func:`import_file`, :func:`import_path`
- :class:`CanonicalTransaction`, :class:`ImportOutcome` and related enums
- :class:`SqlLedgerStore` (default store) and the :class:`LedgerStore` protocol
"""

from __future__ import annotations

from .api import detect_format, import_file, import_path
from .duplicates import DuplicateMode
from .errors import (
    ImportFileError,
    LedgerImportError,
    RowParseError,
    TransactionValidationError,
)
from .models import (
    CanonicalTransaction,
    ImportOutcome,
    ParsedRow,
    RowOutcome,
    TransactionKind,
    TransferType,
)
from .persistence import LedgerStore, SqlLedgerStore

__all__ = [
    "CanonicalTransaction",
    "DuplicateMode",
    "ImportFileError",
    "ImportOutcome",
    "LedgerImportError",
    "LedgerStore",
    "ParsedRow",
    "RowOutcome",
    "RowParseError",
    "SqlLedgerStore",
    "TransactionKind",
    "TransactionValidationError",
    "TransferType",
    "detect_format",
    "import_file",
    "import_path",
]
