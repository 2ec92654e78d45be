"""Adapter registry and format detection.

``REGISTRY`` is an immutable tuple built once at import time, ordered from
most to least specific; order matters because equal scores resolve to the
earlier adapter. :func:`detect` is pure: it takes the adapter list
explicitly and performs no I/O besides logging.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from ..logging_setup import get_logger
from .adapters import (
    Adapter,
    BinanceAdapter,
    Bitcoin21Adapter,
    CoinbaseAdapter,
    Headers,
    KrakenAdapter,
    LegacyAdapter,
    StandardAdapter,
    StrikeAdapter,
    StrikeTradesAdapter,
)
from .tokenizer import normalize_header

logger = get_logger("ledger_import.ingest.registry")

CONFIDENCE_FLOOR = 30.0

STANDARD = StandardAdapter()

REGISTRY: tuple[Adapter, ...] = (
    KrakenAdapter(),
    BinanceAdapter(),
    CoinbaseAdapter(),
    StrikeAdapter(),
    StrikeTradesAdapter(),
    Bitcoin21Adapter(),
    LegacyAdapter(),
    STANDARD,
)


@dataclass(frozen=True, slots=True)
class Detection:
    """The selected adapter, its score, and whether the fallback was used."""

    adapter: Adapter
    score: float
    fallback: bool = False

    @property
    def name(self) -> str:
        return self.adapter.name


def normalize_headers(headers: Sequence[str]) -> tuple[str, ...]:
    return tuple(normalize_header(h) for h in headers)


def detect(
    headers: Headers,
    adapters: Sequence[Adapter] = REGISTRY,
    *,
    fallback: Adapter = STANDARD,
    floor: float = CONFIDENCE_FLOOR,
) -> Detection:
    """Select the adapter for a header row.

    Only adapters whose gate passes are scored; the strictly highest score
    wins, so ties go to the earlier-registered adapter. When nothing passes or
    the best score is under ``floor``, ``fallback`` is returned.
    """

    normalized = normalize_headers(headers)
    best: Adapter | None = None
    best_score = 0.0
    for adapter in adapters:
        if not adapter.can_attempt(normalized):
            continue
        score = float(adapter.confidence(normalized))
        if score > best_score:
            best, best_score = adapter, score

    if best is None or best_score < floor:
        logger.info("detect:fallback adapter=%s best_score=%.2f", fallback.name, best_score)
        return Detection(
            adapter=fallback,
            score=float(fallback.confidence(normalized)),
            fallback=True,
        )

    logger.info("detect:selected adapter=%s score=%.2f", best.name, best_score)
    return Detection(adapter=best, score=best_score)


def adapter_names(adapters: Sequence[Adapter] = REGISTRY) -> list[str]:
    return [a.name for a in adapters]


__all__ = [
    "CONFIDENCE_FLOOR",
    "REGISTRY",
    "STANDARD",
    "Detection",
    "adapter_names",
    "detect",
    "normalize_headers",
]
