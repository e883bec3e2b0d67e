"""Listing detection and retention."""
from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Sequence

from .state import ListingEvent, now_utc, to_millis

_SEPARATORS = re.compile(r"[-_/]")


def normalize_symbol(symbol: str) -> str:
    """Canonical form used to compare symbols across runs: no separators, upper case."""

    return _SEPARATORS.sub("", symbol).upper()


def detect_new_listings(
    old_symbols: Iterable[str],
    new_symbols: Sequence[str],
    exchange: str,
    *,
    detected_at: Optional[datetime] = None,
) -> List[ListingEvent]:
    """Return an event for every symbol of ``new_symbols`` unknown to ``old_symbols``.

    Symbols are matched on their normalized form, so ``BTC-USD`` and ``BTCUSD``
    are the same listing. Events carry the raw symbol as reported now and
    follow the order of ``new_symbols``. Symbols that disappeared are ignored.
    """

    known = {normalize_symbol(symbol) for symbol in old_symbols}
    moment = to_millis(detected_at) if detected_at else now_utc()
    return [
        ListingEvent(exchange=exchange, symbol=symbol, detected_at=moment)
        for symbol in new_symbols
        if normalize_symbol(symbol) not in known
    ]


def prune_listings(events: Iterable[ListingEvent], retention_days: int, now: datetime) -> List[ListingEvent]:
    cutoff = now - timedelta(days=retention_days)
    return [event for event in events if event.detected_at >= cutoff]
