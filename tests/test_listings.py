from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
import sys

# Ensure the project root is importable when running tests locally.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from listing_watcher.listings import detect_new_listings, normalize_symbol, prune_listings
from listing_watcher.state import ListingEvent

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_event(symbol: str, age: timedelta) -> ListingEvent:
    return ListingEvent(exchange="Binance", symbol=symbol, detected_at=NOW - age)


def test_normalize_strips_separators_and_uppercases() -> None:
    assert normalize_symbol("BTC-USD") == normalize_symbol("BTCUSD") == "BTCUSD"
    assert normalize_symbol("krw-btc") == "KRWBTC"
    assert normalize_symbol("eth_usdt") == "ETHUSDT"
    assert normalize_symbol("XBT/USD") == "XBTUSD"
    assert normalize_symbol("") == ""


def test_detect_same_list_is_empty() -> None:
    symbols = ["BTCUSDT", "ETH-USDT", "sol_usdt"]
    assert detect_new_listings(symbols, symbols, "Binance") == []


def test_detect_reports_new_symbol() -> None:
    events = detect_new_listings(["BTCUSDT"], ["BTCUSDT", "ETHUSDT"], "Binance", detected_at=NOW)
    assert events == [ListingEvent(exchange="Binance", symbol="ETHUSDT", detected_at=NOW)]


def test_detect_ignores_separator_differences() -> None:
    assert detect_new_listings(["BTC-USD"], ["BTCUSD"], "Coinbase") == []


def test_detect_keeps_raw_symbol_and_new_side_order() -> None:
    events = detect_new_listings(["KRW-BTC"], ["KRW-XRP", "KRW-BTC", "KRW-ADA"], "Upbit", detected_at=NOW)
    assert [event.symbol for event in events] == ["KRW-XRP", "KRW-ADA"]


def test_detect_ignores_delistings() -> None:
    assert detect_new_listings(["BTCUSDT", "LUNAUSDT"], ["BTCUSDT"], "Binance") == []


def test_detect_is_quiet_once_snapshot_is_updated() -> None:
    first = detect_new_listings(["BTCUSDT"], ["BTCUSDT", "ETHUSDT"], "Binance")
    assert len(first) == 1
    assert detect_new_listings(["BTCUSDT", "ETHUSDT"], ["BTCUSDT", "ETHUSDT"], "Binance") == []


def test_detect_defaults_to_current_time() -> None:
    before = datetime.now(timezone.utc) - timedelta(seconds=1)
    (event,) = detect_new_listings([], ["ETHUSDT"], "Binance")
    assert event.detected_at >= before
    assert event.detected_at.tzinfo is not None


def test_prune_window_boundaries() -> None:
    recent = make_event("AAA", timedelta(days=29))
    boundary = make_event("BBB", timedelta(days=30))
    stale = make_event("CCC", timedelta(days=31))
    events = [stale, recent, boundary]

    kept = prune_listings(events, 30, NOW)

    assert kept == [recent, boundary]
    assert events == [stale, recent, boundary]


def test_prune_empty() -> None:
    assert prune_listings([], 30, NOW) == []


def test_detect_drops_sub_millisecond_precision() -> None:
    precise = datetime(2024, 6, 1, 12, 0, 0, 123456, tzinfo=timezone.utc)
    (event,) = detect_new_listings([], ["ETHUSDT"], "Binance", detected_at=precise)

    assert event.detected_at == datetime(2024, 6, 1, 12, 0, 0, 123000, tzinfo=timezone.utc)
    assert ListingEvent.from_dict(event.to_dict()) == event
