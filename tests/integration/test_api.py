"""Integration tests for API endpoints"""

import pytest
from datetime import datetime
from fastapi.testclient import TestClient
from udp_balance.api import dependencies
from udp_balance.api.dependencies import get_ledger_client, get_now
from udp_balance.domain.exceptions import LedgerAPIError


def record(record_id, when, kind, amount, balance, description="Movement"):
    return {
        "id_UDPBalanceHistory": record_id,
        "transactionDate": when,
        "transactionType": kind,
        "amount": amount,
        "balanceAfterTransaction": balance,
        "description": description,
    }


@pytest.fixture
def raw_records():
    """Jan/Feb ledger in backend shape, delivered newest first"""
    return [
        record(3, "2024-02-01T09:00:00", "deposit", 50, 120),
        record(2, "2024-01-15T09:00:00", "withdrawal", -30, 70, 'Cash "ATM"'),
        record(1, "2024-01-01T09:00:00", "deposit", 100, 100),
    ]


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "udp-balance-analytics"}


def test_metrics_endpoint(client: TestClient, raw_records):
    """Test Prometheus metrics endpoint"""
    client.post("/v1/analytics/dashboard", json={"transactions": raw_records, "range": "all"})

    response = client.get("/metrics")
    assert response.status_code == 200
    assert "udp_dashboard_total" in response.text


def test_request_id_propagated(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"

    assert client.get("/health").headers["X-Request-ID"]


def test_dashboard_endpoint(client: TestClient, raw_records):
    """Test POST /v1/analytics/dashboard over the whole history"""
    response = client.post(
        "/v1/analytics/dashboard",
        json={"account_id": "5", "transactions": raw_records, "range": "all"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["account_id"] == "5"
    assert data["window"]["label"] == "all"
    assert [p["balance"] for p in data["series"]] == [100.0, 70.0, 120.0]
    assert [p["transaction_id"] for p in data["series"]] == ["1", "2", "3"]

    january, february = data["month_buckets"]
    assert january == {
        "label": "2024-01",
        "year": 2024,
        "month": 1,
        "income": 100.0,
        "expenses": 30.0,
        "net": 70.0,
        "transaction_count": 2,
        "end_balance": 70.0,
    }
    assert february["end_balance"] == 120.0

    assert data["series_summary"]["current_balance"] == 120.0
    assert data["series_summary"]["highest_balance"] == 120.0
    assert data["series_summary"]["lowest_balance"] == 70.0
    assert data["metrics"]["volatility_index"] == pytest.approx(50.714, abs=1e-3)
    assert data["type_buckets"][0]["type"] == "deposit"
    assert data["type_buckets"][0]["share_percent"] == pytest.approx(150 / 180 * 100)
    assert [t["id"] for t in data["recent_transactions"]] == ["3", "2", "1"]


def test_dashboard_explicit_dates(client: TestClient, raw_records):
    response = client.post(
        "/v1/analytics/dashboard",
        json={"transactions": raw_records, "start": "2024-01-15", "end": "2024-01-31"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["window"]["label"] == "custom"
    assert [p["transaction_id"] for p in data["series"]] == ["2"]


def test_dashboard_default_range_is_thirty_days(client: TestClient, raw_records):
    """Fixed clock is 2024-03-15, so nothing from Jan/Feb 1 falls in the last 30 days"""
    response = client.post("/v1/analytics/dashboard", json={"transactions": raw_records})

    assert response.status_code == 200
    data = response.json()
    assert data["window"]["label"] == "30d"
    assert data["series"] == []
    assert data["metrics"]["current_balance"] == 0.0


def test_dashboard_empty_ledger(client: TestClient):
    response = client.post("/v1/analytics/dashboard", json={"transactions": [], "range": "all"})

    assert response.status_code == 200
    data = response.json()
    assert data["series"] == []
    assert data["type_buckets"] == []
    assert data["month_buckets"] == []
    assert data["metrics"]["transaction_count"] == 0
    assert data["metrics"]["last_transaction"] is None
    assert data["type_summary"]["overall_average"] == 0.0


def test_dashboard_unparsable_timestamp(client: TestClient, raw_records):
    raw_records[1]["transactionDate"] = "31/31/2024"

    response = client.post("/v1/analytics/dashboard", json={"transactions": raw_records, "range": "all"})

    assert response.status_code == 422
    assert "2" in response.json()["detail"]


def test_dashboard_unknown_range(client: TestClient, raw_records):
    response = client.post("/v1/analytics/dashboard", json={"transactions": raw_records, "range": "2w"})
    assert response.status_code == 400


def test_dashboard_cache_reused(client: TestClient, raw_records, dashboard_cache):
    body = {"transactions": raw_records, "range": "all"}

    client.post("/v1/analytics/dashboard", json=body)
    client.post("/v1/analytics/dashboard", json=body)

    assert (dashboard_cache.hits, dashboard_cache.misses) == (1, 1)


def test_export_endpoint(client: TestClient, raw_records):
    """Test POST /v1/analytics/export returns a chronological CSV download"""
    response = client.post(
        "/v1/analytics/export",
        json={"account_id": "5", "transactions": raw_records, "start": "2024-01-01", "end": "2024-02-29"},
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="udp_balance_5_2024-01-01_2024-02-29.csv"' in response.headers["content-disposition"]
    assert response.text.split("\n") == [
        "Date,Type,Amount,BalanceAfter,Description",
        '01/01/2024 09:00,deposit,100,100,"Movement"',
        '15/01/2024 09:00,withdrawal,-30,70,"Cash "ATM""',
        '01/02/2024 09:00,deposit,50,120,"Movement"',
    ]


def test_export_as_given_with_escaping(client: TestClient, raw_records):
    response = client.post(
        "/v1/analytics/export",
        json={
            "transactions": raw_records,
            "range": "all",
            "chronological": False,
            "escape": "double_quotes",
        },
    )

    lines = response.text.split("\n")
    assert lines[1].startswith("01/02/2024")
    assert lines[2].endswith('"Cash ""ATM"""')
    # Open-ended window names the file after the exported rows
    assert "udp_balance_unknown_2024-01-01_2024-02-01.csv" in response.headers["content-disposition"]


def test_export_empty_is_header_only(client: TestClient):
    response = client.post("/v1/analytics/export", json={"transactions": [], "range": "all"})

    assert response.status_code == 200
    assert response.text == "Date,Type,Amount,BalanceAfter,Description"


def test_udp_dashboard_fetches_from_ledger(client: TestClient, fake_ledger):
    """Test GET /v1/udp/{udp_id}/dashboard with the fake ledger"""
    response = client.get("/v1/udp/42/dashboard", params={"range": "90d"})

    assert response.status_code == 200
    data = response.json()
    assert data["account_id"] == "42"
    assert data["metrics"]["transaction_count"] == 7
    assert data["metrics"]["current_balance"] == 2350.0
    assert [m["label"] for m in data["month_buckets"]] == ["2024-01", "2024-02", "2024-03"]

    udp_id, start, end = fake_ledger.calls[0]
    assert udp_id == "42"
    assert start is not None and end is not None


def test_udp_dashboard_all_range_is_unbounded(client: TestClient, fake_ledger):
    client.get("/v1/udp/42/dashboard", params={"range": "all"})
    assert fake_ledger.calls[0] == ("42", None, None)


def test_udp_export(client: TestClient):
    response = client.get(
        "/v1/udp/42/export",
        params={"start": "2024-03-01", "end": "2024-03-31", "escape": "double_quotes"},
    )

    assert response.status_code == 200
    assert "udp_balance_42_2024-03-01_2024-03-31.csv" in response.headers["content-disposition"]
    rows = response.text.split("\n")
    assert len(rows) == 4
    assert rows[1] == '10/03/2024 08:00,payment,-200,2300,"Rent"'


def test_udp_dashboard_ledger_unavailable(client: TestClient):
    class BrokenLedger:
        async def get_balance_history(self, udp_id, start=None, end=None):
            raise LedgerAPIError("Ledger API timeout after 5.0s")

    client.app.dependency_overrides[get_ledger_client] = lambda: BrokenLedger()

    response = client.get("/v1/udp/42/dashboard")

    assert response.status_code == 503
    assert response.json()["detail"] == "Ledger service unavailable"


def test_udp_dashboard_bad_date_bound(client: TestClient):
    response = client.get("/v1/udp/42/dashboard", params={"start": "not-a-date"})
    assert response.status_code == 400


def test_named_range_includes_seconds_old_transaction(client: TestClient):
    """A transaction from earlier in the current minute is part of the 7d window"""
    client.app.dependency_overrides[get_now] = lambda: datetime(2024, 3, 15, 12, 0, 45)

    response = client.post(
        "/v1/analytics/dashboard",
        json={"transactions": [record(1, "2024-03-15T12:00:30", "deposit", 10, 10)], "range": "7d"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["window"]["end"] == "2024-03-15T12:00:45"
    assert data["metrics"]["transaction_count"] == 1
    assert data["metrics"]["current_balance"] == 10.0


def test_get_now_keeps_seconds(monkeypatch):
    instant = datetime(2024, 3, 15, 12, 0, 45, 123456)
    monkeypatch.setattr(dependencies, "utc_now", lambda: instant)

    assert dependencies.get_now() == instant


def test_dashboard_null_transactions_is_empty(client: TestClient):
    response = client.post("/v1/analytics/dashboard", json={"transactions": None, "range": "all"})

    assert response.status_code == 200
    data = response.json()
    assert data["series"] == []
    assert data["type_buckets"] == []
    assert data["month_buckets"] == []
    assert data["metrics"]["transaction_count"] == 0


def test_export_null_transactions_is_header_only(client: TestClient):
    response = client.post("/v1/analytics/export", json={"transactions": None, "range": "all"})

    assert response.status_code == 200
    assert response.text == "Date,Type,Amount,BalanceAfter,Description"
