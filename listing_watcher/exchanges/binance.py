"""Binance spot fetcher."""
from __future__ import annotations

import httpx

from .base import Symbols, get_json, shape_error

URL = "https://api.binance.com/api/v3/exchangeInfo"


async def spot(client: httpx.AsyncClient) -> Symbols:
    payload = await get_json(client, URL)
    if not isinstance(payload, dict) or not isinstance(payload.get("symbols"), list):
        raise shape_error("Binance")
    return [
        item["symbol"]
        for item in payload["symbols"]
        if isinstance(item, dict) and item.get("status") == "TRADING" and item.get("symbol")
    ]
