"""Exchange registry."""
from __future__ import annotations

from typing import List

from . import base
from . import binance, bybit, coinbase, kraken, okx, upbit

__all__ = ["build_exchanges", "base"]


def build_exchanges() -> List[base.Exchange]:
    """Exchanges in the order they are polled."""

    raw_exchanges: List[tuple[str, str, base.Fetcher]] = [
        ("binance", "Binance", binance.spot),
        ("coinbase", "Coinbase", coinbase.spot),
        ("bybit", "Bybit", bybit.spot),
        ("upbit", "Upbit", upbit.spot),
        ("okx", "OKX", okx.spot),
        ("kraken", "Kraken", kraken.spot),
    ]
    return [base.Exchange(key, name, fetch) for key, name, fetch in raw_exchanges]
