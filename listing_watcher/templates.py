"""Message formatting utilities."""
from __future__ import annotations

from typing import Sequence

from .state import ListingEvent, format_timestamp

BANNER = "═" * 60


def format_banner(title: str) -> list[str]:
    return [BANNER, title, BANNER]


def format_detected(exchange: str, events: Sequence[ListingEvent]) -> str:
    return f"🆕 {exchange}: {len(events)} new listing(s)"


def format_listing(event: ListingEvent) -> str:
    """One log line per detected listing."""

    return f"   {event.exchange} {event.symbol} (detected {format_timestamp(event.detected_at)})"


def format_summary(new_listings: int, errors: Sequence[str]) -> list[str]:
    lines = [BANNER, f"Update Complete: {new_listings} new listing(s) detected"]
    if errors:
        lines.append(f"⚠ {len(errors)} error(s) occurred - check logs for details")
    lines.append(BANNER)
    return lines
