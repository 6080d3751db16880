"""Pytest fixtures for testing"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import httpx
import pytest
from datetime import date, timedelta
from typing import Callable, Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from finhealth_gateway.api.main import create_app
from finhealth_gateway.api.dependencies import get_finance_client, recurring_cache
from finhealth_gateway.api.rate_limit import recurring_rate_limiter
from finhealth_gateway.infrastructure.clients.finance_api import FinanceAPIClient
from finhealth_gateway.infrastructure.database.models import Base
from finhealth_gateway.infrastructure.database.session import get_db
from finhealth_gateway.domain.models import ScoreInput, Transaction


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

FINANCE_API_BASE = "http://finance.test/rest/v1"


@pytest.fixture(autouse=True)
def reset_request_state() -> Generator[None, None, None]:
    """Module-level cache and rate limiter must not leak between tests"""
    recurring_cache.clear()
    recurring_rate_limiter.reset()
    yield
    recurring_cache.clear()
    recurring_rate_limiter.reset()


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def finance_rows() -> dict:
    """Rows served by the fake finance backend, keyed by table"""
    return {"transactions": [], "categories": []}


@pytest.fixture
def finance_requests() -> list:
    """Requests received by the fake finance backend"""
    return []


@pytest.fixture
def finance_transport(finance_rows: dict, finance_requests: list) -> httpx.MockTransport:
    """httpx transport that answers PostgREST-style table reads from finance_rows"""

    def handler(request: httpx.Request) -> httpx.Response:
        finance_requests.append(request)
        table = request.url.path.rsplit("/", 1)[-1]
        if table not in finance_rows:
            return httpx.Response(404, json={"message": "not found"})
        return httpx.Response(200, json=finance_rows[table])

    return httpx.MockTransport(handler)


@pytest.fixture
def make_finance_client(finance_transport: httpx.MockTransport) -> Callable[[], FinanceAPIClient]:
    def factory() -> FinanceAPIClient:
        return FinanceAPIClient(base_url=FINANCE_API_BASE, api_key="test-key", transport=finance_transport)

    return factory


@pytest.fixture
def client(db: Session, make_finance_client: Callable[[], FinanceAPIClient]) -> TestClient:
    """Create FastAPI test client with test database and fake finance backend"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_finance_client] = make_finance_client
    return TestClient(app)


@pytest.fixture
def healthy_input() -> ScoreInput:
    """Strong finances on every factor"""
    return ScoreInput(
        monthly_income=5000,
        monthly_savings=1000,
        total_savings=18000,
        monthly_expenses=3000,
        total_debt=0,
        debt_three_months_ago=0,
        bills_paid_on_time=12,
        total_bills=12,
        budgets_on_track=5,
        total_budgets=5,
    )


@pytest.fixture
def struggling_input() -> ScoreInput:
    """Rising debt, missed bills, no savings"""
    return ScoreInput(
        monthly_income=3000,
        monthly_savings=0,
        total_savings=200,
        monthly_expenses=2800,
        total_debt=22000,
        debt_three_months_ago=18000,
        bills_paid_on_time=7,
        total_bills=12,
        budgets_on_track=1,
        total_budgets=4,
    )


@pytest.fixture
def subscription_transactions() -> list[Transaction]:
    """Six months of monthly streaming charges plus weekly gym and one-off purchases"""
    base_date = date(2024, 1, 5)
    transactions = []

    # Monthly streaming subscription with varying payee spellings
    for month in range(6):
        transactions.append(
            Transaction(
                id=f"stream_{month}",
                payee_clean="Netflix" if month % 2 else None,
                payee_original="NETFLIX.COM",
                amount=-15.99,
                date=date(2024, month + 1, 5),
                category_id="cat_entertainment",
            )
        )

    # Weekly gym class
    for week in range(8):
        transactions.append(
            Transaction(
                id=f"gym_{week}",
                payee_clean="City Gym",
                payee_original="CITY GYM #42",
                amount=-12.00,
                date=base_date + timedelta(days=week * 7),
                category_id="cat_health",
            )
        )

    # One-off purchases
    transactions.append(
        Transaction(
            id="oneoff_1",
            payee_clean="Hardware Store",
            payee_original=None,
            amount=-89.50,
            date=date(2024, 2, 17),
            category_id=None,
        )
    )

    return transactions
