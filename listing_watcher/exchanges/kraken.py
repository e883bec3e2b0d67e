"""Kraken asset pairs fetcher."""
from __future__ import annotations

import httpx

from .base import Symbols, get_json, shape_error

URL = "https://api.kraken.com/0/public/AssetPairs"


async def spot(client: httpx.AsyncClient) -> Symbols:
    payload = await get_json(client, URL)
    result = payload.get("result") if isinstance(payload, dict) else None
    if not isinstance(result, dict):
        raise shape_error("Kraken")
    # Kraken keys pairs by its own pair code, e.g. XXBTZUSD.
    return list(result.keys())
