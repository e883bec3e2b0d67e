"""Coinbase Exchange products fetcher."""
from __future__ import annotations

import httpx

from .base import Symbols, get_json, shape_error

URL = "https://api.exchange.coinbase.com/products"


async def spot(client: httpx.AsyncClient) -> Symbols:
    payload = await get_json(client, URL)
    if not isinstance(payload, list):
        raise shape_error("Coinbase")
    return [
        product["id"]
        for product in payload
        if isinstance(product, dict) and product.get("status") == "online" and product.get("id")
    ]
