"""Pytest fixtures for testing"""

import json
import pytest
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional
from fastapi.testclient import TestClient
from cashback_tracker.api.main import create_app
from cashback_tracker.api.dependencies import get_data_dir, get_price_client, get_today
from cashback_tracker.domain.exceptions import PriceAPIError
from cashback_tracker.domain.models import Transaction


TODAY = date(2026, 1, 31)


class FakePriceClient:
    """In-memory stand-in for PriceClient; unknown dates fail like the real API"""

    def __init__(self, historical: Optional[Dict[str, float]] = None, current: Optional[float] = None):
        self.historical = dict(historical or {})
        self.current = current
        self.historical_calls: List[date] = []
        self.current_calls = 0

    async def get_historical_price(self, day: date) -> float:
        self.historical_calls.append(day)
        if day.isoformat() not in self.historical:
            raise PriceAPIError(f"No price data for {day.isoformat()}")
        return self.historical[day.isoformat()]

    async def get_current_price(self) -> float:
        self.current_calls += 1
        if self.current is None:
            raise PriceAPIError("Price API error: 503")
        return self.current


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Empty data directory per test"""
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def price_client() -> FakePriceClient:
    return FakePriceClient(
        historical={"2026-01-01": 150.0, "2026-01-11": 100.0, "2025-12-01": 120.0},
        current=200.0,
    )


@pytest.fixture
def client(data_dir: Path, price_client: FakePriceClient) -> TestClient:
    """Create FastAPI test client backed by a temporary data directory"""
    app = create_app()

    app.dependency_overrides[get_data_dir] = lambda: data_dir
    app.dependency_overrides[get_price_client] = lambda: price_client
    app.dependency_overrides[get_today] = lambda: TODAY
    return TestClient(app)


@pytest.fixture
def write_json(data_dir: Path):
    """Write a raw document into the data directory"""

    def _write(name: str, content) -> Path:
        path = data_dir / name
        if isinstance(content, str):
            path.write_text(content, encoding="utf-8")
        else:
            path.write_text(json.dumps(content, indent=2), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def sample_transactions() -> list[Transaction]:
    """Three January purchases (one without a known price) and one December purchase"""
    return [
        Transaction(id="a", date=date(2026, 1, 1), description="Groceries run", amount=100.0, category="Groceries"),
        Transaction(id="b", date=date(2026, 1, 11), description="Dinner", amount=50.0, category="Dining"),
        Transaction(id="c", date=date(2026, 1, 21), description="Bus pass", amount=20.0, category="Transport"),
        Transaction(id="d", date=date(2025, 12, 1), description="Laptop bag", amount=200.0, category="Shopping"),
    ]
