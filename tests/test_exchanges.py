"""Tests for the exchange fetchers."""

import asyncio
from pathlib import Path
import sys

import httpx
import pytest

# Ensure the project root is importable when running tests locally.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from listing_watcher.errors import ExchangeRequestError, ExchangeResponseError
from listing_watcher.exchanges import base, binance, build_exchanges, bybit, coinbase, kraken, okx, upbit


def _fetch(module, payload, monkeypatch):
    calls = []

    async def fake_get_json(client, url, *, params=None, headers=None):
        calls.append((url, params))
        return payload

    monkeypatch.setattr(module, "get_json", fake_get_json)

    async def _run():
        async with httpx.AsyncClient() as client:
            return await module.spot(client)

    return asyncio.run(_run()), calls


def test_binance_keeps_trading_symbols(monkeypatch):
    payload = {
        "symbols": [
            {"symbol": "BTCUSDT", "status": "TRADING"},
            {"symbol": "LUNAUSDT", "status": "BREAK"},
            {"symbol": "ETHUSDT", "status": "TRADING"},
        ]
    }
    symbols, calls = _fetch(binance, payload, monkeypatch)
    assert symbols == ["BTCUSDT", "ETHUSDT"]
    assert calls == [("https://api.binance.com/api/v3/exchangeInfo", None)]


def test_coinbase_keeps_online_products(monkeypatch):
    payload = [{"id": "BTC-USD", "status": "online"}, {"id": "OLD-USD", "status": "delisted"}]
    symbols, _ = _fetch(coinbase, payload, monkeypatch)
    assert symbols == ["BTC-USD"]


def test_bybit_keeps_trading_instruments(monkeypatch):
    payload = {"result": {"list": [{"symbol": "BTCUSDT", "status": "Trading"}, {"symbol": "NEWUSDT", "status": "PreLaunch"}]}}
    symbols, calls = _fetch(bybit, payload, monkeypatch)
    assert symbols == ["BTCUSDT"]
    assert calls[0][1] == {"category": "spot"}


def test_upbit_keeps_krw_markets(monkeypatch):
    payload = [{"market": "KRW-BTC"}, {"market": "BTC-ETH"}, {"market": "KRW-XRP"}, {"korean_name": "no market"}]
    symbols, _ = _fetch(upbit, payload, monkeypatch)
    assert symbols == ["KRW-BTC", "KRW-XRP"]


def test_okx_keeps_live_instruments(monkeypatch):
    payload = {"data": [{"instId": "BTC-USDT", "state": "live"}, {"instId": "NEW-USDT", "state": "preopen"}]}
    symbols, calls = _fetch(okx, payload, monkeypatch)
    assert symbols == ["BTC-USDT"]
    assert calls[0][1] == {"instType": "SPOT"}


def test_kraken_uses_pair_codes(monkeypatch):
    payload = {"error": [], "result": {"XXBTZUSD": {"wsname": "XBT/USD"}, "XETHZEUR": {"wsname": "ETH/EUR"}}}
    symbols, _ = _fetch(kraken, payload, monkeypatch)
    assert symbols == ["XXBTZUSD", "XETHZEUR"]


@pytest.mark.parametrize(
    "module, payload",
    [
        (binance, {"code": -1003}),
        (coinbase, {"message": "rate limited"}),
        (bybit, {"retCode": 10006, "result": {}}),
        (upbit, {"error": "too many requests"}),
        (okx, {"code": "50011"}),
        (kraken, {"error": ["EGeneral:Too many requests"]}),
    ],
)
def test_bad_shape_raises(module, payload, monkeypatch):
    with pytest.raises(ExchangeResponseError):
        _fetch(module, payload, monkeypatch)


def _mock_get_json(handler):
    async def _run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await base.get_json(client, "https://api.example.com/pairs")

    return asyncio.run(_run())


def test_get_json_decodes_payload():
    payload = _mock_get_json(lambda request: httpx.Response(200, json={"result": {}}))
    assert payload == {"result": {}}


def test_get_json_raises_on_http_status():
    with pytest.raises(ExchangeRequestError):
        _mock_get_json(lambda request: httpx.Response(503, text="maintenance"))


def test_get_json_raises_on_transport_error():
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(ExchangeRequestError):
        _mock_get_json(handler)


def test_get_json_rejects_non_json():
    with pytest.raises(ExchangeResponseError):
        _mock_get_json(lambda request: httpx.Response(200, text="<html>blocked</html>"))


def test_registry_lists_six_exchanges_in_poll_order():
    exchanges = build_exchanges()
    assert [exchange.key for exchange in exchanges] == ["binance", "coinbase", "bybit", "upbit", "okx", "kraken"]
    assert [exchange.name for exchange in exchanges] == ["Binance", "Coinbase", "Bybit", "Upbit", "OKX", "Kraken"]
