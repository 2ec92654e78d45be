"""Ingest layer: tokenizer, exchange adapters, detection and row parsing."""

from __future__ import annotations

from .pipeline import ParsedFile, detect_csv_format, parse_csv_text, parse_json_text
from .registry import CONFIDENCE_FLOOR, REGISTRY, STANDARD, Detection, detect
from .tokenizer import split_line

__all__ = [
    "CONFIDENCE_FLOOR",
    "REGISTRY",
    "STANDARD",
    "Detection",
    "ParsedFile",
    "detect",
    "detect_csv_format",
    "parse_csv_text",
    "parse_json_text",
    "split_line",
]
