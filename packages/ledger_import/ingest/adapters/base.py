"""Capability interface implemented by every exchange adapter.

An adapter is a plain object with a ``name`` and three methods; there is no
shared base class. Headers arrive already normalized (trimmed, lower-cased,
quotes stripped) as a tuple in file order, and each row is a mapping from
those normalized headers to trimmed string values.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Protocol, runtime_checkable

from ...models import RowOutcome

type Headers = Sequence[str]
type RawRow = Mapping[str, str]


@runtime_checkable
class Adapter(Protocol):
    """Recognize one export shape and transform its rows."""

    name: str

    def can_attempt(self, headers: Headers) -> bool:
        """Hard gate: whether this adapter should be scored at all."""
        ...

    def confidence(self, headers: Headers) -> float:
        """Soft score in ``[0, 100]``; monotone in matched expected headers."""
        ...

    def parse_row(self, row: RawRow, headers: Headers) -> RowOutcome:
        """Transform one row; may raise ``ValueError`` for malformed data."""
        ...


__all__ = ["Adapter", "Headers", "RawRow"]
