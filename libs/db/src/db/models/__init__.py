"""Shared SQLAlchemy models registry for the workspace database.

Currently includes the ledger models written by ``ledger_import``.
"""

from .ledger import Base, LedgerTransaction

__all__ = [
    "Base",
    "LedgerTransaction",
]
