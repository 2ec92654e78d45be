"""In-memory ``LedgerStore`` used by unit tests."""

from __future__ import annotations

from ledger_import.models import CanonicalTransaction


class MemoryLedgerStore:
    """Keeps ``(owner_id, tx)`` pairs in insertion order."""

    def __init__(self) -> None:
        self.records: list[tuple[int, CanonicalTransaction]] = []
        self.lookups = 0

    def find_same_day(self, owner_id: int, transaction_date: str) -> list[CanonicalTransaction]:
        self.lookups += 1
        return [
            tx
            for owner, tx in self.records
            if owner == owner_id and tx.transaction_date == transaction_date
        ]

    def create(self, owner_id: int, tx: CanonicalTransaction) -> int:
        self.records.append((owner_id, tx))
        return len(self.records)

    def transactions(self, owner_id: int | None = None) -> list[CanonicalTransaction]:
        return [tx for owner, tx in self.records if owner_id is None or owner == owner_id]
