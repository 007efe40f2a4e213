"""Pytest fixtures for testing"""

import pytest
from datetime import datetime
from decimal import Decimal
from typing import Callable, List
from fastapi.testclient import TestClient
from udp_balance.api.main import create_app
from udp_balance.api.dependencies import get_dashboard_cache, get_ledger_client, get_now
from udp_balance.domain.models import Transaction, TransactionSet
from udp_balance.infrastructure.cache import DashboardCache


FIXED_NOW = datetime(2024, 3, 15, 12, 0)


class FakeLedgerClient:
    """In-memory stand-in for the ledger API"""

    def __init__(self, transactions: List[Transaction]):
        self.transactions = transactions
        self.calls: list = []

    async def get_balance_history(self, udp_id, start=None, end=None) -> TransactionSet:
        self.calls.append((udp_id, start, end))
        return TransactionSet(transactions=tuple(self.transactions), account_id=str(udp_id))


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def make_transaction() -> Callable[..., Transaction]:
    """Factory with sensible defaults so tests only spell out what they check"""
    counter = {"n": 0}

    def _make(
        timestamp: datetime,
        amount: str | int,
        balance_after: str | int,
        type: str = "deposit",
        description: str = "Test",
        id: str | None = None,
    ) -> Transaction:
        counter["n"] += 1
        return Transaction(
            id=id or f"tx_{counter['n']}",
            timestamp=timestamp,
            type=type,
            amount=Decimal(str(amount)),
            balance_after=Decimal(str(balance_after)),
            description=description,
        )

    return _make


@pytest.fixture
def scenario_transactions(make_transaction) -> List[Transaction]:
    """Jan/Feb ledger: +100 -> 100, -30 -> 70, +50 -> 120"""
    return [
        make_transaction(datetime(2024, 1, 1, 9, 0), 100, 100, type="deposit", id="jan_1"),
        make_transaction(datetime(2024, 1, 15, 9, 0), -30, 70, type="withdrawal", id="jan_15"),
        make_transaction(datetime(2024, 2, 1, 9, 0), 50, 120, type="deposit", id="feb_1"),
    ]


@pytest.fixture
def sample_transactions(make_transaction) -> List[Transaction]:
    """Three months of mixed activity, deliberately out of order"""
    return [
        make_transaction(datetime(2024, 3, 10, 8, 0), -200, 2300, type="payment", description="Rent"),
        make_transaction(datetime(2024, 1, 5, 10, 0), 2000, 2000, type="deposit", description="Salary"),
        make_transaction(datetime(2024, 1, 20, 18, 30), -150, 1850, type="payment", description="Groceries"),
        make_transaction(datetime(2024, 2, 5, 10, 0), 2000, 3850, type="deposit", description="Salary"),
        make_transaction(datetime(2024, 2, 14, 21, 0), -1350, 2500, type="transfer", description="Savings"),
        make_transaction(datetime(2024, 3, 12, 9, 15), 75, 2375, type="refund", description="Store refund"),
        make_transaction(datetime(2024, 3, 14, 16, 45), -25, 2350, type="fee", description="Monthly fee"),
    ]


@pytest.fixture
def fake_ledger(sample_transactions) -> FakeLedgerClient:
    return FakeLedgerClient(sample_transactions)


@pytest.fixture
def dashboard_cache() -> DashboardCache:
    return DashboardCache(maxsize=16)


@pytest.fixture
def client(fake_ledger: FakeLedgerClient, dashboard_cache: DashboardCache) -> TestClient:
    """Create FastAPI test client with a fixed clock, fresh cache and fake ledger"""
    app = create_app()
    app.dependency_overrides[get_now] = lambda: FIXED_NOW
    app.dependency_overrides[get_dashboard_cache] = lambda: dashboard_cache
    app.dependency_overrides[get_ledger_client] = lambda: fake_ledger
    return TestClient(app)
