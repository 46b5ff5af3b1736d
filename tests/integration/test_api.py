"""Integration tests for API endpoints"""

import csv
import io
import json
import pytest
from datetime import date, timedelta
from fastapi.testclient import TestClient


def post_purchase(client: TestClient, **overrides) -> dict:
    body = {"date": "2026-01-03", "description": "Gym", "amount": 100}
    body.update(overrides)
    response = client.post("/api/transactions", json=body)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def seeded(client: TestClient, write_json):
    """Same purchases as sample_transactions, with a 5% staking APR"""
    write_json("settings.json", {"cashbackRate": 0.03, "stakingAPR": 0.05})
    post_purchase(client, date="2026-01-01", description="Groceries run", amount=100, category="Groceries")
    post_purchase(client, date="2026-01-11", description="Dinner", amount=50, category="Dining")
    post_purchase(client, date="2026-01-21", description="Bus pass", amount=20, category="Transport")
    post_purchase(client, date="2025-12-01", description="Laptop bag", amount=200, category="Shopping")
    return client


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "X-Request-ID" in response.headers


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    post_purchase(client)
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "cashback_transactions_created_total" in response.text


def test_create_transaction(client: TestClient):
    """Test POST /api/transactions returns the stored purchase"""
    data = post_purchase(client, description="  Gym  ")

    assert data["date"] == "2026-01-03"
    assert data["description"] == "Gym"
    assert data["category"] == "Uncategorized"
    assert data["amount"] == 100
    assert data["id"]


def test_posted_transaction_appears_once_in_monthly(client: TestClient):
    """Test $100 at 3% shows up as $3 cashback in its month"""
    created = post_purchase(client)

    response = client.get("/api/monthly?year=2026&month=1")

    assert response.status_code == 200
    data = response.json()
    assert data["label"] == "January 2026"
    assert data["totals"] == {"spent": 100, "cashback": 3, "count": 1}
    assert data["categorySummary"] == {"Uncategorized": 100}
    assert data["transactions"] == [{**created, "cashback": 3.0}]


@pytest.mark.parametrize(
    "body,field",
    [
        ({"date": "2026-01-03", "amount": 10}, "description"),
        ({"date": "2026-01-03", "description": "   ", "amount": 10}, "description"),
        ({"date": "2026-01-03", "description": "x", "amount": 0}, "amount"),
        ({"date": "2026-01-03", "description": "x", "amount": -4}, "amount"),
        ({"date": "2026-01-03", "description": "x", "amount": "lots"}, "amount"),
        ({"date": "2026-01-03", "description": "x", "amount": "100"}, "amount"),
        ({"date": "2026-01-03", "description": "x", "amount": True}, "amount"),
        ({"date": "2026-01-03", "description": "x", "amount": 0.005}, "amount"),
        ({"date": "2026-01-03", "description": "x", "amount": 12.345}, "amount"),
        ({"date": "03/01/2026", "description": "x", "amount": 10}, "date"),
        ({"date": "2026-02-30", "description": "x", "amount": 10}, "date"),
        ({"description": "x", "amount": 10}, "date"),
    ],
)
def test_create_transaction_validation(client: TestClient, data_dir, body, field):
    """Test invalid bodies are rejected with a field-specific 400"""
    response = client.post("/api/transactions", json=body)

    assert response.status_code == 400
    assert response.json()["detail"].startswith(field)
    assert not (data_dir / "transactions.json").exists()


def test_list_transactions_in_insertion_order(client: TestClient):
    ids = [post_purchase(client, description=str(i))["id"] for i in range(3)]

    response = client.get("/api/transactions")

    assert [t["id"] for t in response.json()] == ids


def test_delete_transaction(client: TestClient):
    """Test delete removes one entry and a second delete is a 404"""
    keep = post_purchase(client, description="Keep")
    drop = post_purchase(client, description="Drop")

    response = client.delete(f"/api/transactions/{drop['id']}")
    assert response.status_code == 200
    assert response.json() == {"ok": True, "deletedId": drop["id"]}

    again = client.delete(f"/api/transactions/{drop['id']}")
    assert again.status_code == 404

    remaining = client.get("/api/transactions").json()
    assert [t["id"] for t in remaining] == [keep["id"]]


def test_delete_unreadable_transaction(client: TestClient, data_dir, write_json):
    """Test a malformed stored entry is deleted cleanly by id"""
    write_json("transactions.json", [{"id": "bad", "date": "someday", "description": "?", "amount": 5}])

    response = client.delete("/api/transactions/bad")

    assert response.status_code == 200
    assert response.json() == {"ok": True, "deletedId": "bad"}
    assert json.loads((data_dir / "transactions.json").read_text(encoding="utf-8")) == []


def test_cent_amounts_accepted(client: TestClient):
    assert post_purchase(client, amount=12.34)["amount"] == 12.34
    assert post_purchase(client, amount=7.5)["amount"] == 7.5


def test_monthly_defaults_to_current_month(client: TestClient):
    """Test missing year/month use today's month (fixed at 2026-01-31)"""
    post_purchase(client)

    data = client.get("/api/monthly").json()

    assert (data["year"], data["month"]) == (2026, 1)
    assert data["totals"]["count"] == 1


@pytest.mark.parametrize(
    "query",
    ["year=1999&month=1", "year=2101&month=1", "year=2026&month=0", "year=2026&month=13", "year=abc"],
)
def test_invalid_period(client: TestClient, query):
    assert client.get(f"/api/monthly?{query}").status_code == 400
    assert client.get(f"/api/dashboard?{query}").status_code == 400


def test_monthly_category_breakdown(seeded: TestClient):
    data = seeded.get("/api/monthly?year=2026&month=1").json()

    assert data["categorySummary"] == {"Groceries": 100, "Dining": 50, "Transport": 20}
    assert sum(data["categorySummary"].values()) == pytest.approx(data["totals"]["spent"], abs=0.005)
    assert data["totals"]["cashback"] == 5.1


def test_dashboard(seeded: TestClient, data_dir, price_client):
    """Test full dashboard: totals, SOL position with one skip, staking to date"""
    response = seeded.get("/api/dashboard?year=2026&month=1")

    assert response.status_code == 200
    data = response.json()
    assert data["period"] == {"year": 2026, "month": 1, "label": "January 2026"}
    assert data["spending"] == {"count": 3, "totalSpent": 170}
    assert data["cashback"] == {"rate": 0.03, "totalCashbackUSD": 5.1}
    assert data["sol"] == {
        "totalSOL": 0.035,
        "totalCashbackUSD": 4.5,
        "avgPriceUSD": 128.57,
        "pricedCount": 2,
        "skippedCount": 1,
    }
    assert data["staking"] == {
        "apr": 0.05,
        "stakedSOL": 0.035,
        "estMonthlyRewardSOL": 0.000146,
        "estYearlyRewardSOL": 0.00175,
    }
    assert data["stakingToDate"] == {
        "asOf": "2026-01-31",
        "earnedSOL": 0.000541,
        "earnedUSD": 0.11,
        "priceUSD": 200.0,
        "skippedCount": 1,
    }

    # Fetched prices are persisted for next time
    cached = json.loads((data_dir / "prices.json").read_text(encoding="utf-8"))
    assert cached["sol"] == {"2026-01-01": 150.0, "2026-01-11": 100.0, "2025-12-01": 120.0}


def test_dashboard_uses_price_cache(seeded: TestClient, price_client):
    seeded.get("/api/dashboard?year=2026&month=1")
    calls_after_first = len(price_client.historical_calls)

    seeded.get("/api/dashboard?year=2026&month=1")

    # Only the date without any price is retried
    assert len(price_client.historical_calls) == calls_after_first + 1


def test_dashboard_survives_price_outage(seeded: TestClient, price_client):
    """Test every price missing degrades to skips, not an error"""
    price_client.historical = {}
    price_client.current = None

    data = seeded.get("/api/dashboard?year=2026&month=1").json()

    assert data["sol"]["totalSOL"] == 0
    assert data["sol"]["avgPriceUSD"] is None
    assert data["sol"]["skippedCount"] == 3
    assert data["stakingToDate"]["earnedUSD"] == 0
    assert data["stakingToDate"]["priceUSD"] is None
    assert data["stakingToDate"]["skippedCount"] == 4


def test_dashboard_empty_month(client: TestClient):
    data = client.get("/api/dashboard?year=2026&month=1").json()

    assert data["spending"] == {"count": 0, "totalSpent": 0}
    assert data["sol"]["avgPriceUSD"] is None


def test_historical_price_endpoint(client: TestClient, price_client):
    first = client.get("/api/price/sol?date=2026-01-01")
    second = client.get("/api/price/SOL?date=2026-01-01")

    assert first.status_code == 200
    assert first.json() == {"symbol": "SOL", "date": "2026-01-01", "priceUSD": 150.0, "source": "api"}
    assert second.json()["source"] == "cache"
    assert price_client.historical_calls.count(date(2026, 1, 1)) == 1


@pytest.mark.parametrize("query", ["date=2026-13-01", "date=yesterday", "date=2026-02-01", ""])
def test_historical_price_bad_date(client: TestClient, query):
    assert client.get(f"/api/price/sol?{query}").status_code == 400


def test_historical_price_upstream_failure(client: TestClient):
    response = client.get("/api/price/sol?date=2026-01-05")

    assert response.status_code == 502


def test_unknown_symbol(client: TestClient):
    assert client.get("/api/price/btc?date=2026-01-01").status_code == 404
    assert client.get("/api/price/btc/live").status_code == 404


def test_live_price(client: TestClient, price_client):
    first = client.get("/api/price/sol/live")
    second = client.get("/api/price/sol/live")

    assert first.status_code == 200
    assert first.json()["priceUSD"] == 200.0
    assert first.json()["stale"] is False
    assert first.json()["source"] == "api"
    assert second.json()["source"] == "cache"
    assert price_client.current_calls == 1


def test_live_price_stale_after_failed_refresh(client: TestClient, price_client):
    client.get("/api/price/sol/live")
    cache = client.app.state.live_price_cache
    cache.timestamp -= timedelta(hours=1)
    price_client.current = None

    data = client.get("/api/price/sol/live").json()

    assert data["stale"] is True
    assert data["priceUSD"] == 200.0


def test_live_price_never_fetched(client: TestClient, price_client):
    price_client.current = None

    assert client.get("/api/price/sol/live").status_code == 502


def test_settings(client: TestClient, write_json):
    write_json("settings.json", {"cashbackRate": 0.05, "stakingAPR": 0.07})

    assert client.get("/api/settings").json() == {"cashbackRate": 0.05, "stakingAPR": 0.07}


def test_corrupt_files_fall_back_to_defaults(client: TestClient, write_json):
    """Test unreadable settings, prices and categories never fail requests"""
    write_json("settings.json", "{{{")
    write_json("prices.json", "not json")
    write_json("categories.json", "[")
    post_purchase(client, date="2026-01-01")

    assert client.get("/api/settings").json() == {"cashbackRate": 0.03, "stakingAPR": 0.0473}
    assert "Uncategorized" in client.get("/api/categories").json()["categories"]
    dashboard = client.get("/api/dashboard?year=2026&month=1")
    assert dashboard.status_code == 200
    assert dashboard.json()["sol"]["pricedCount"] == 1


def test_category_lifecycle(client: TestClient):
    assert "Others" in client.get("/api/categories").json()["categories"]

    created = client.post("/api/categories", json={"name": " Pets "})
    assert created.status_code == 201
    assert created.json() == {"name": "Pets"}
    assert client.post("/api/categories", json={"name": "pets"}).status_code == 409
    assert client.post("/api/categories", json={"name": "   "}).status_code == 400

    post_purchase(client, category="Pets")
    in_use = client.delete("/api/categories/Pets")
    assert in_use.status_code == 409

    assert client.delete("/api/categories/Uncategorized").status_code == 400
    assert client.delete("/api/categories/Unknown").status_code == 404

    assert client.delete("/api/categories/Travel").json() == {"ok": True, "deleted": "Travel"}
    assert "Travel" not in client.get("/api/categories").json()["categories"]


def test_export_csv(client: TestClient):
    created = post_purchase(client, description="Gym, monthly")

    response = client.get("/api/export/transactions.csv")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="transactions.csv"' in response.headers["content-disposition"]
    rows = list(csv.DictReader(io.StringIO(response.text)))
    assert rows == [
        {
            "id": created["id"],
            "date": "2026-01-03",
            "description": "Gym, monthly",
            "category": "Uncategorized",
            "amount": "100.0",
            "cashback": "3.00",
        }
    ]


def test_export_json(client: TestClient):
    created = post_purchase(client)

    response = client.get("/api/export/transactions.json")

    assert response.status_code == 200
    assert 'filename="transactions.json"' in response.headers["content-disposition"]
    assert response.json() == [created]


def test_frontend_served(client: TestClient):
    response = client.get("/")

    assert response.status_code == 200
    assert "Cashback Tracker" in response.text
