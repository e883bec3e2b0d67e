"""Common helpers for exchange polling."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Mapping

import httpx

from ..errors import ExchangeRequestError, ExchangeResponseError

log = logging.getLogger(__name__)

Symbols = List[str]
Fetcher = Callable[[httpx.AsyncClient], Awaitable[Symbols]]


@dataclass(slots=True)
class Exchange:
    key: str
    name: str
    fetch: Fetcher


async def get_json(client: httpx.AsyncClient, url: str, *, params: Mapping[str, str] | None = None, headers: Mapping[str, str] | None = None) -> object:
    try:
        response = await client.get(url, params=params, headers=headers)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        raise ExchangeRequestError(f"Failed to fetch {url}: {exc}") from exc
    try:
        return response.json()
    except json.JSONDecodeError as exc:
        raise ExchangeResponseError(f"Non-JSON response from {url}") from exc


def shape_error(exchange: str) -> ExchangeResponseError:
    return ExchangeResponseError(f"Invalid {exchange} API response")
