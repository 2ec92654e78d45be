"""Import orchestration: duplicate policy, persistence and accounting.

Rows are handled strictly in file order. For each row:

- an ``error`` outcome is recorded as invalid (``Row N: reason``);
- a ``skip`` outcome is recorded as ignored (counted in ``skipped``);
- a ``record`` outcome is checked against the owner's same-day records under
  the active :class:`~ledger_import.duplicates.DuplicateMode`, then written.

A failed write is recorded as invalid and processing continues. After at
least one new record, the ``on_imported`` hook (e.g. a portfolio
recomputation) runs once; its failure is logged and never fails the import.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from sqlalchemy.exc import SQLAlchemyError

from .duplicates import DuplicateMode, duplicate_reason, find_duplicate
from .logging_setup import get_logger
from .models import ImportOutcome, ParsedRow
from .persistence import LedgerStore

logger = get_logger("ledger_import.importer")

type RecomputeHook = Callable[[int], object]

# Store failures recorded per row rather than aborting the request.
PERSISTENCE_ERRORS: tuple[type[BaseException], ...] = (SQLAlchemyError, ValueError)


def import_rows(
    rows: Iterable[ParsedRow],
    *,
    owner_id: int,
    store: LedgerStore,
    mode: DuplicateMode,
    detected_format: str | None = None,
    on_imported: RecomputeHook | None = None,
) -> ImportOutcome:
    """Apply the duplicate policy to parsed rows and persist the new ones."""

    outcome = ImportOutcome(detected_format=detected_format)

    for parsed in rows:
        outcome.total_transactions += 1
        row_outcome = parsed.outcome

        if row_outcome.status == "error":
            reason = row_outcome.reason or "Unknown error"
            logger.info("import:row_invalid row=%d reason=%s", parsed.row_number, reason)
            outcome.add_invalid(parsed.raw, reason, row_number=parsed.row_number)
            continue

        if row_outcome.status == "skip" or row_outcome.transaction is None:
            reason = row_outcome.reason or "Skipped"
            logger.debug("import:row_ignored row=%d reason=%s", parsed.row_number, reason)
            outcome.add_ignored(parsed.raw, reason)
            continue

        tx = row_outcome.transaction
        data = tx.as_record()
        try:
            if mode is not DuplicateMode.OFF:
                existing = store.find_same_day(owner_id, tx.transaction_date)
                if find_duplicate(tx, existing, mode) is not None:
                    logger.debug(
                        "import:row_duplicate row=%d mode=%s", parsed.row_number, mode.value
                    )
                    outcome.add_duplicate(data, duplicate_reason(mode))
                    continue
            store.create(owner_id, tx)
        except PERSISTENCE_ERRORS as e:
            reason = f"Transaction import error: {e}"
            logger.warning("import:row_persist_failed row=%d error=%s", parsed.row_number, e)
            outcome.add_invalid(data, reason, row_number=parsed.row_number)
            continue
        outcome.add_imported()

    logger.info(
        "import:done imported=%d skipped=%d invalid=%d total=%d",
        outcome.imported,
        outcome.skipped,
        outcome.invalid_transactions,
        outcome.total_transactions,
    )

    if outcome.imported > 0 and on_imported is not None:
        try:
            on_imported(outcome.imported)
        except Exception as e:  # noqa: BLE001 - recomputation must not fail the import
            logger.warning("import:recompute_failed error=%s", e, exc_info=True)

    return outcome


__all__ = ["PERSISTENCE_ERRORS", "RecomputeHook", "import_rows"]
