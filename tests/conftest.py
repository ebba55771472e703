"""Pytest fixtures for testing"""

import pytest
from datetime import date
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from budget_gateway.api.dependencies import health_cache
from budget_gateway.api.main import create_app
from budget_gateway.infrastructure.database.models import Base
from budget_gateway.infrastructure.database.session import get_db
from budget_gateway.domain.models import TransactionEvent


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Thursday; October 2026 has 31 days, so 10 days remain including today
TODAY = date(2026, 10, 22)


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


@pytest.fixture(autouse=True)
def clear_health_cache():
    """The cache is process-wide; start every test cold"""
    health_cache.clear()
    yield
    health_cache.clear()


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


def make_event(
    day: date,
    amount,
    type: str = "expense",
    category: str = "groceries",
    is_projected: bool = False,
    is_recurring: bool = False,
    source_id: str = "",
) -> TransactionEvent:
    return TransactionEvent(
        date=day,
        type=type,
        amount=Decimal(str(amount)),
        category=category,
        is_projected=is_projected,
        is_recurring=is_recurring,
        source_id=source_id or f"{type}-{day.isoformat()}-{amount}",
    )


@pytest.fixture
def sample_month_events() -> list[TransactionEvent]:
    """October ledger: salary, rent, groceries, and scheduled bills ahead of TODAY"""
    return [
        make_event(date(2026, 10, 1), 3000, type="income", category="salary", source_id="salary"),
        make_event(date(2026, 10, 2), 1200, category="rent", is_recurring=True, source_id="rent"),
        make_event(date(2026, 10, 16), 140, source_id="market-1"),
        make_event(date(2026, 10, 20), 70, source_id="market-2"),
        make_event(date(2026, 10, 27), 400, category="bills", is_projected=True, is_recurring=True, source_id="power"),
        make_event(date(2026, 10, 29), 300, type="income", category="freelance", is_projected=True, source_id="gig"),
    ]
