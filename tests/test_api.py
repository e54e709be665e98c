from __future__ import annotations

from typing import Any

import pytest
from conftest import FakeRateSource, failure, success
from fastapi.testclient import TestClient

from exchange_proxy.core.config import Settings
from exchange_proxy.db.dal import KeyValueStore
from exchange_proxy.main import create_app
from exchange_proxy.services.http_client import HttpError
from exchange_proxy.services.rates import ErrorKind
from exchange_proxy.services import ticker as ticker_module

TABLE = {"USD": 1.0, "EUR": 0.9, "CNY": 7.0}


def _client(settings: Settings, source: FakeRateSource) -> TestClient:
    return TestClient(create_app(settings_override=settings, rate_source=source))


@pytest.fixture()
def source() -> FakeRateSource:
    return FakeRateSource(success(TABLE))


@pytest.fixture()
def client(settings: Settings, source: FakeRateSource) -> TestClient:
    return _client(settings, source)


def test_root_and_health(client: TestClient) -> None:
    assert client.get("/").json()["message"] == "Exchange Rate Proxy"
    body = client.get("/health").json()
    assert body["status"] == "ok"
    assert body["rates_cached"] is False


def test_pair_rate(client: TestClient, source: FakeRateSource) -> None:
    r = client.get("/USD/EUR")
    assert r.status_code == 200
    assert r.json() == {"message": "Success", "data": 0.9, "base_code": "USD", "target_code": "EUR"}
    assert source.calls == 1


def test_lowercase_codes_are_accepted(client: TestClient) -> None:
    body = client.get("/usd/cny").json()
    assert body["data"] == 7.0
    assert body["base_code"] == "USD"
    assert body["target_code"] == "CNY"


def test_conversion(client: TestClient) -> None:
    r = client.get("/USD/EUR/100")
    assert r.status_code == 200
    body = r.json()
    assert body["data"] == pytest.approx(90.0)
    assert body["rate"] == 0.9
    assert body["base_code"] == "USD"
    assert body["target_code"] == "EUR"


def test_reverse_rate(client: TestClient) -> None:
    assert client.get("/EUR/USD").json()["data"] == 1 / 0.9


def test_last_rebases_table(client: TestClient) -> None:
    r = client.get("/last/EUR")
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["EUR"] == 1.0
    assert data["USD"] == pytest.approx(1.1111111)
    assert data["CNY"] == pytest.approx(7.7777777)


def test_table_is_cached_across_requests(client: TestClient, source: FakeRateSource) -> None:
    client.get("/USD/EUR")
    client.get("/EUR/CNY/5")
    client.get("/last/CNY")
    assert source.calls == 1
    assert client.get("/health").json()["rates_cached"] is True


@pytest.mark.parametrize(
    "path,message",
    [
        ("/GBP/USD", "Base currency GBP not found"),
        ("/USD/GBP", "Target currency GBP not found"),
        ("/GBP/USD/10", "Base currency GBP not found"),
        ("/last/GBP", "Currency not found"),
    ],
)
def test_currency_missing_from_table_is_404(client: TestClient, path: str, message: str) -> None:
    r = client.get(path)
    assert r.status_code == 404
    assert r.json()["error"] == message


@pytest.mark.parametrize(
    "path",
    ["/XYZ/USD", "/USD/EURO", "/US/EUR", "/last/ABC", "/USD/EUR/0", "/USD/EUR/-5", "/USD/EUR/abc", "/USD/EUR/inf"],
)
def test_invalid_input_is_422(client: TestClient, source: FakeRateSource, path: str) -> None:
    r = client.get(path)
    assert r.status_code == 422
    assert r.json()["error"] == "validation_error"
    assert source.calls == 0


def test_conversion_overflow_is_422(client: TestClient) -> None:
    r = client.get("/USD/CNY/1e308")
    assert r.status_code == 422
    assert r.json()["error"] == "invalid_input"


def test_upstream_rejection_is_400_and_store_stays_empty(settings: Settings) -> None:
    client = _client(settings, FakeRateSource(failure(ErrorKind.QUOTA_REACHED)))
    r = client.get("/USD/EUR")
    assert r.status_code == 400
    assert r.json()["error"] == "quota-reached"
    assert client.get("/health").json()["rates_cached"] is False


def test_upstream_unreachable_is_502(settings: Settings) -> None:
    client = _client(settings, FakeRateSource(failure(ErrorKind.UPSTREAM_UNREACHABLE)))
    r = client.get("/last/USD")
    assert r.status_code == 502
    assert r.json()["error"] == "upstream-unreachable"


def test_update_requires_password(client: TestClient, source: FakeRateSource) -> None:
    r = client.get("/update/wrong")
    assert r.status_code == 401
    assert r.json()["error"] == "Invalid password"
    assert source.calls == 0


def test_update_disabled_without_configured_password(settings: Settings, source: FakeRateSource) -> None:
    settings.update_password = ""
    client = _client(settings, source)
    assert client.get("/update/anything").status_code == 401


def test_update_forces_refresh(settings: Settings) -> None:
    source = FakeRateSource(success(TABLE), success({"USD": 1.0, "EUR": 0.95}))
    client = _client(settings, source)
    assert client.get("/USD/EUR").json()["data"] == 0.9

    r = client.get("/update/s3cret")
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Update success"
    assert body["data"]["result"] == "success"
    assert body["data"]["conversion_rates"] == {"USD": 1.0, "EUR": 0.95}
    assert body["data"]["base_code"] == "USD"
    assert body["data"]["time_last_updated_unix"] == 1_700_000_000

    assert client.get("/USD/EUR").json()["data"] == 0.95
    assert source.calls == 2


def test_update_failure_keeps_existing_table(settings: Settings) -> None:
    source = FakeRateSource(success(TABLE), failure(ErrorKind.INVALID_KEY))
    client = _client(settings, source)
    client.get("/USD/EUR")

    r = client.get("/update/s3cret")
    assert r.status_code == 400
    assert r.json()["error"] == "invalid-key"
    assert client.get("/USD/EUR").json()["data"] == 0.9


def test_request_id_header(client: TestClient) -> None:
    r = client.get("/health")
    assert r.headers.get("X-Request-ID")
    r = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert r.headers["X-Request-ID"] == "abc-123"


def test_unknown_route_is_404(client: TestClient) -> None:
    r = client.get("/a/b/c/d")
    assert r.status_code == 404
    assert r.json()["error"] == "Not Found"


def test_static_source_app_serves_rates(settings: Settings) -> None:
    client = TestClient(create_app(settings_override=settings))
    body = client.get("/USD/EUR").json()
    assert body["message"] == "Success"
    assert body["data"] > 0


class _TickerUpstream:
    def __init__(self, response: Any = None, error: Exception | None = None):
        self.response = response
        self.error = error
        self.urls: list = []

    def __call__(self, url: str, **kwargs: Any) -> Any:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.response


def test_ticker_fetches_then_caches(monkeypatch, client: TestClient) -> None:
    upstream = _TickerUpstream(response={"symbol": "BTCUSDT", "price": "67000.01"})
    monkeypatch.setattr(ticker_module, "get_json", upstream)

    first = client.get("/encrypt/btcusdt")
    second = client.get("/encrypt/BTCUSDT")

    assert first.status_code == 200
    assert first.json() == {"message": "Success", "data": {"symbol": "BTCUSDT", "price": "67000.01"}}
    assert second.json() == first.json()
    assert len(upstream.urls) == 1
    assert upstream.urls[0].endswith("?symbol=BTCUSDT")


def test_ticker_provider_rejection(monkeypatch, client: TestClient) -> None:
    err = HttpError("HTTP 400", status=400, payload={"code": -1121, "msg": "Invalid symbol."})
    monkeypatch.setattr(ticker_module, "get_json", _TickerUpstream(error=err))

    r = client.get("/encrypt/NOPE")
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid symbol."


def test_ticker_unreachable(monkeypatch, client: TestClient) -> None:
    monkeypatch.setattr(ticker_module, "get_json", _TickerUpstream(error=HttpError("down")))
    assert client.get("/encrypt/ETHUSDT").status_code == 502


def test_ticker_symbol_validation(client: TestClient) -> None:
    assert client.get("/encrypt/B").status_code == 422
    assert client.get("/encrypt/BTC-USD").status_code == 422


def test_ticker_unreadable_cache_entry_is_refetched(
    monkeypatch, settings: Settings, client: TestClient
) -> None:
    KeyValueStore(settings.db_path).put("ticker:BTCUSDT", "{not json", ttl_seconds=300)
    upstream = _TickerUpstream(response={"symbol": "BTCUSDT", "price": "67000.01"})
    monkeypatch.setattr(ticker_module, "get_json", upstream)

    r = client.get("/encrypt/BTCUSDT")

    assert r.status_code == 200
    assert r.json()["data"]["price"] == "67000.01"
    assert len(upstream.urls) == 1
    assert client.get("/encrypt/BTCUSDT").json() == r.json()
    assert len(upstream.urls) == 1
