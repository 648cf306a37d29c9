import time

import pytest
from fastapi.testclient import TestClient

from src.api.main import create_app

CONTRACT = {
    "country": "US",
    "salary": 100000,
    "currency": "USD",
    "role": "Software Engineer",
    "start_date": "2025-01-01",
    "benefits": ["healthcare"],
}

COMPARE_PARAMS = {"country": "US", "salary": 100000, "currency": "USD", "role": "Software Engineer"}


@pytest.fixture
def client(engine):
    return TestClient(create_app(engine))


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "ok"
    assert body["seed_data_loaded"] is True
    assert body["seed_data_status"]["total_countries"]["deel"] == 3
    assert "timestamp" in body


def test_debug_seed_data(client):
    res = client.get("/debug/seed-data")
    assert res.status_code == 200
    assert res.json()["providers"]["oyster"] == ["BR", "GB", "US"]


def test_additional_costs(client):
    res = client.get("/rest/v2/eor/additional-costs/us")
    assert res.status_code == 200
    body = res.json()
    assert body["country"] == "US"
    assert body["employer_tax_rate"] == 0.1
    assert "roles" not in body


def test_additional_costs_unknown_country(client):
    res = client.get("/remote/eor/additional-costs/ZZ")
    assert res.status_code == 404
    body = res.json()
    assert body["error"] == "Country not found"
    assert body["available_countries"] == ["BR", "GB", "US"]


def test_contract_form(client):
    res = client.get("/oyster/forms/eor/create-contract/GB")
    assert res.status_code == 200
    fields = res.json()["fields"]
    assert fields["currency"]["values"] == ["USD", "GBP", "INR", "BRL", "EUR"]
    assert fields["role"]["values"] == ["Software Engineer", "Product Manager"]
    assert "healthcare" in fields["benefits"]["values"]


@pytest.mark.parametrize(
    "prefix,block",
    [("/rest/v2", "costs"), ("/remote", "breakdown"), ("/oyster", "data")],
)
def test_create_contract_returns_provider_shape(client, prefix, block):
    res = client.post(f"{prefix}/eor", json=CONTRACT)
    assert res.status_code == 200
    assert list(res.json()) == [block]


def test_primary_contract_costs(client):
    costs = client.post("/rest/v2/eor", json=CONTRACT).json()["costs"]
    assert costs["salary"] == 100000
    assert costs["tce"] > 100000


def test_create_contract_rejects_invalid_payload(client):
    res = client.post("/rest/v2/eor", json={**CONTRACT, "salary": -5, "currency": "DOLLARS"})
    assert res.status_code == 400
    body = res.json()
    assert body["error"] == "Invalid input"
    assert body["message"] == "Invalid payload"
    assert {err["loc"][-1] for err in body["details"]} == {"salary", "currency"}


def test_delayed_contract_flow(client, scheduler):
    res = client.post("/rest/v2/eor?delay=true", json=CONTRACT)
    assert res.status_code == 202
    contract_id = res.json()["contract_id"]

    details = client.get(f"/rest/v2/eor/contracts/{contract_id}/details").json()
    assert details["status"] == "pending"
    assert details["costs"] is None

    scheduler.advance(1)

    details = client.get(f"/rest/v2/eor/contracts/{contract_id}/details").json()
    assert details["status"] == "ready"
    assert details["costs"]["tce"] > 100000

    other_provider = client.get(f"/remote/eor/contracts/{contract_id}/details")
    assert other_provider.status_code == 404


def test_compare_and_review_flow(client):
    res = client.get("/quotes/compare", params=COMPARE_PARAMS)
    assert res.status_code == 200
    body = res.json()
    quote_id = body["id"]
    assert body["chosen_provider"] in {"deel", "remote", "oyster"}
    assert len(body["providers"]) == 3
    assert body["rules"]["reconciliation_rule_percent"] == 4.0
    assert set(body["validation"]) >= {"is_valid", "margin_percent", "risk_score", "warnings", "errors"}

    assert client.get(f"/quotes/{quote_id}").json()["id"] == quote_id
    assert client.get("/quotes/history").json()["items"][0]["id"] == quote_id

    res = client.post(f"/quotes/{quote_id}/review", json={"action": "REJECT"})
    assert res.status_code == 200
    assert res.json() == {"id": quote_id, "status": "rejected"}

    res = client.post(f"/quotes/{quote_id}/review", json={"action": "maybe"})
    assert res.status_code == 400
    assert res.json()["message"] == "action must be approve|reject"
    assert client.get(f"/quotes/{quote_id}").json()["status"] == "rejected"


def test_review_unknown_quote(client):
    res = client.post("/quotes/nope/review", json={"action": "approve"})
    assert res.status_code == 404


def test_compare_unknown_country(client):
    res = client.get("/quotes/compare", params={**COMPARE_PARAMS, "country": "ZZ"})
    assert res.status_code == 404
    assert res.json()["requested_country"] == "ZZ"


def test_compare_requires_all_fields(client):
    res = client.get("/quotes/compare", params={"country": "US"})
    assert res.status_code == 400


def test_mock_admin_seed_and_aliases(client):
    quote_id = client.get("/quotes/compare", params=COMPARE_PARAMS).json()["id"]

    res = client.post("/mock/seed")
    assert res.status_code == 200
    assert res.json() == {"status": "ok", "reloaded": True, "fallback": False}

    assert client.get("/mock/quotes/history").json()["items"][0]["id"] == quote_id
    assert client.get(f"/mock/quotes/{quote_id}").status_code == 200
    res = client.post(f"/mock/quotes/{quote_id}/review", json={"action": "approve"})
    assert res.json()["status"] == "approved"


def test_lifespan_runs_contract_scheduler(config, rate_tables):
    from src.quotes.engine import EORQuoteEngine
    from src.utils.scheduler import JobScheduler

    config.simulation.mock_delay_ms = 10
    scheduler = JobScheduler()
    engine = EORQuoteEngine(config, rate_tables=rate_tables, scheduler=scheduler)

    with TestClient(create_app(engine)) as client:
        assert scheduler.running is True
        contract_id = client.post("/rest/v2/eor?delay=true", json=CONTRACT).json()["contract_id"]

        status = "pending"
        deadline = time.monotonic() + 5
        while status == "pending" and time.monotonic() < deadline:
            time.sleep(0.02)
            status = client.get(f"/rest/v2/eor/contracts/{contract_id}/details").json()["status"]
        assert status == "ready"

    assert scheduler.running is False
