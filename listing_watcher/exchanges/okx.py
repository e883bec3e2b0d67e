"""OKX spot instruments fetcher."""
from __future__ import annotations

import httpx

from .base import Symbols, get_json, shape_error

URL = "https://www.okx.com/api/v5/public/instruments"


async def spot(client: httpx.AsyncClient) -> Symbols:
    payload = await get_json(client, URL, params={"instType": "SPOT"})
    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, list):
        raise shape_error("OKX")
    return [
        item["instId"]
        for item in data
        if isinstance(item, dict) and item.get("state") == "live" and item.get("instId")
    ]
