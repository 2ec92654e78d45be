"""Exchange adapters, one module per export family."""

from __future__ import annotations

from .base import Adapter, Headers, RawRow
from .binance import BinanceAdapter
from .bitcoin21 import Bitcoin21Adapter
from .coinbase import CoinbaseAdapter
from .kraken import KrakenAdapter
from .legacy import LegacyAdapter
from .standard import StandardAdapter
from .strike import StrikeAdapter
from .strike_trades import StrikeTradesAdapter

__all__ = [
    "Adapter",
    "BinanceAdapter",
    "Bitcoin21Adapter",
    "CoinbaseAdapter",
    "Headers",
    "KrakenAdapter",
    "LegacyAdapter",
    "RawRow",
    "StandardAdapter",
    "StrikeAdapter",
    "StrikeTradesAdapter",
]
