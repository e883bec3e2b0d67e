"""Bybit spot fetcher."""
from __future__ import annotations

import httpx

from .base import Symbols, get_json, shape_error

URL = "https://api.bybit.com/v5/market/instruments-info"


async def spot(client: httpx.AsyncClient) -> Symbols:
    payload = await get_json(client, URL, params={"category": "spot"})
    result = payload.get("result") if isinstance(payload, dict) else None
    data = result.get("list") if isinstance(result, dict) else None
    if not isinstance(data, list):
        raise shape_error("Bybit")
    return [
        item["symbol"]
        for item in data
        if isinstance(item, dict) and item.get("status") == "Trading" and item.get("symbol")
    ]
