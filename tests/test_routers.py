"""HTTP surface tests against the app with fake providers."""
from collections.abc import Generator
from decimal import Decimal

import pytest
from dependency_injector import providers as di
from fakes import FakeRateProvider, FakeStockProvider, RecordingNotifier
from fastapi.testclient import TestClient

from market_alerts.config import Settings
from market_alerts.container import Container, init_container
from market_alerts.main import create_app
from market_alerts.providers.core import ProviderChain
from market_alerts.utils import utcnow

OWNER = {"X-User-Id": "user-1"}
OTHER = {"X-User-Id": "user-2"}


@pytest.fixture
def container(
    tmp_path, rate_provider: FakeRateProvider, stock_provider: FakeStockProvider
) -> Container:
    container = init_container(
        Settings(database_url=f"sqlite:///{tmp_path / 'api.db'}", scheduler_enabled=False)
    )
    container.currency_chain.override(
        di.Object(ProviderChain("currency", [rate_provider]))
    )
    container.stock_chain.override(di.Object(ProviderChain("stock", [stock_provider])))
    container.notifier.override(di.Object(RecordingNotifier()))
    return container


@pytest.fixture
def client(container: Container) -> Generator[TestClient, None, None]:
    with TestClient(create_app(container)) as test_client:
        yield test_client


def _alert_body(**overrides) -> dict:
    body = {
        "kind": "STOCK",
        "target": "aapl",
        "condition": "ABOVE",
        "threshold": 150,
        "notify_address": "owner@example.com",
    }
    body.update(overrides)
    return body


def test_root_health(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_latest_rates_envelope(client):
    response = client.get("/currency/rates")

    body = response.json()
    assert response.status_code == 200
    assert body["success"] is True
    assert body["data"]["base"] == "USD"
    assert body["data"]["rates"]["EUR"] == 0.92
    assert "timestamp" in body


def test_invalid_currency_code_is_400(client):
    response = client.get("/currency/rates", params={"base": "EURO"})

    body = response.json()
    assert response.status_code == 400
    assert body["success"] is False
    assert body["error"]["code"] == "invalid_currency_code"


def test_specific_rate(client):
    response = client.get("/currency/rates/usd/gbp/latest")

    assert response.json()["data"]["rate"] == 0.79
    assert response.json()["data"]["target"] == "GBP"


def test_convert(client):
    response = client.post("/currency/convert", json={"from": "USD", "to": "EUR", "amount": 100})

    data = response.json()["data"]
    assert data["converted_amount"] == 92.0
    assert data["rate"] == 0.92


def test_convert_same_currency_is_identity(client):
    response = client.post("/currency/convert", json={"from": "eur", "to": "EUR", "amount": 12.5})

    data = response.json()["data"]
    assert data["converted_amount"] == 12.5
    assert data["rate"] == 1.0


def test_convert_rejects_non_positive_amount(client):
    response = client.post("/currency/convert", json={"from": "USD", "to": "EUR", "amount": 0})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "invalid_amount"


def test_history_out_of_range_is_400(client):
    response = client.get("/currency/rates/USD/EUR/history", params={"days": 366})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "invalid_date_range"


def test_stock_quote(client):
    response = client.get("/stocks/quote/aapl")

    data = response.json()["data"]
    assert data["symbol"] == "AAPL"
    assert data["price"] == 153.0


def test_unknown_stock_is_503(client):
    response = client.get("/stocks/quote/NOPE")

    assert response.status_code == 503
    assert response.json()["error"]["code"] == "data_unavailable"


def test_search_with_no_capable_provider_is_502(client):
    response = client.get("/stocks/search/apple")

    assert response.status_code == 502
    assert response.json()["error"] == {
        "code": "all_providers_failed",
        "message": "Market data API error",
    }


def test_market_indices_use_camel_case_key(client):
    response = client.get("/stocks/market-indices")

    data = response.json()["data"]
    assert data["dowJones"]["price"] == 38900.0
    assert data["sp500"]["symbol"] == "^GSPC"


def test_trending(client):
    response = client.get("/stocks/trending")

    assert [q["symbol"] for q in response.json()["data"]] == [
        "AAPL", "GOOGL", "MSFT", "AMZN", "TSLA",
    ]


def test_alerts_require_owner_header(client):
    assert client.get("/alerts").status_code == 401
    assert client.post("/alerts", json=_alert_body()).status_code == 401


def test_alert_lifecycle(client):
    created = client.post("/alerts", json=_alert_body(), headers=OWNER)
    assert created.status_code == 201
    alert = created.json()["data"]
    assert alert["target"] == "AAPL"
    assert alert["active"] is True

    assert client.get(f"/alerts/{alert['id']}", headers=OTHER).status_code == 404
    assert client.get("/alerts/active-count", headers=OWNER).json()["data"] == {"count": 1}

    toggled = client.post(f"/alerts/{alert['id']}/toggle", headers=OWNER)
    assert toggled.json()["data"]["active"] is False

    deleted = client.delete(f"/alerts/{alert['id']}", headers=OWNER)
    assert deleted.status_code == 204
    assert client.get(f"/alerts/{alert['id']}", headers=OWNER).status_code == 404


def test_alert_body_validation_is_422(client):
    response = client.post("/alerts", json=_alert_body(notify_address="nope"), headers=OWNER)

    assert response.status_code == 422


def test_toggle_triggered_alert_is_409(client, container):
    alert_id = client.post("/alerts", json=_alert_body(), headers=OWNER).json()["data"]["id"]
    stored = container.alert_store().list_active()[0]
    container.alert_store().mark_triggered(stored.id, Decimal("153"), utcnow())

    response = client.post(f"/alerts/{alert_id}/toggle", headers=OWNER)

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "alert_already_triggered"
    triggered = client.get("/alerts/triggered", headers=OWNER).json()["data"]
    assert [a["id"] for a in triggered] == [alert_id]


def test_budget_endpoints(client):
    rent = client.post(
        "/budgets",
        json={"name": "Rent", "amount": 1000, "currency": "USD", "categories": ["housing"]},
        headers=OWNER,
    )
    assert rent.status_code == 201
    trip = client.post(
        "/budgets",
        json={"name": "Trip", "amount": 500, "currency": "EUR", "categories": ["entertainment"]},
        headers=OWNER,
    ).json()["data"]

    summary = client.get("/budgets/summary", headers=OWNER).json()["data"]
    converted = client.get(
        f"/budgets/{trip['id']}/convert", params={"currency": "USD"}, headers=OWNER
    ).json()["data"]
    housing = client.get("/budgets", params={"category": "housing"}, headers=OWNER).json()["data"]
    updated = client.put(
        f"/budgets/{trip['id']}", json={"amount": 600}, headers=OWNER
    ).json()["data"]

    assert summary["total"] == 1543.5
    assert converted["converted_amount"] == 543.5
    assert [b["name"] for b in housing] == ["Rent"]
    assert updated["amount"] == 600.0
    assert client.get("/budgets", headers=OTHER).json()["data"] == []
    assert client.delete(f"/budgets/{trip['id']}", headers=OWNER).status_code == 204
