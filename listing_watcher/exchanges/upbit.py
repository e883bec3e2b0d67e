"""Upbit market list fetcher. Only KRW markets are tracked."""
from __future__ import annotations

import httpx

from .base import Symbols, get_json, shape_error

URL = "https://api.upbit.com/v1/market/all"


async def spot(client: httpx.AsyncClient) -> Symbols:
    payload = await get_json(client, URL)
    if not isinstance(payload, list):
        raise shape_error("Upbit")
    out: Symbols = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        market = item.get("market")
        if isinstance(market, str) and market.startswith("KRW-"):
            out.append(market)
    return out
