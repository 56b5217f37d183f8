"""Pytest fixtures for testing"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DISPLAY_TIMEZONE", "Europe/Istanbul")

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from payment_service.api.main import create_app
from payment_service.api.dependencies import get_clock
from payment_service.domain.banks import BankRegistry
from payment_service.domain.models import PayCommand
from payment_service.domain.payments import PaymentOrchestrator
from payment_service.infrastructure.database.models import Base
from payment_service.infrastructure.database.repositories import TransactionDetailRepository, TransactionRepository
from payment_service.infrastructure.database.session import get_db


# In-memory test database; StaticPool keeps one connection so every thread sees the same tables
TEST_DATABASE_URL = "sqlite://"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False}, poolclass=StaticPool)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FrozenClock:
    """Controllable UTC time source"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


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
def clock() -> FrozenClock:
    """Mid-morning UTC so a few hours either way stays on the same day"""
    return FrozenClock(datetime(2024, 3, 10, 9, 30, tzinfo=timezone.utc))


@pytest.fixture
def transactions(db: Session) -> TransactionRepository:
    return TransactionRepository(db)


@pytest.fixture
def details(db: Session) -> TransactionDetailRepository:
    return TransactionDetailRepository(db)


@pytest.fixture
def registry(transactions: TransactionRepository, details: TransactionDetailRepository, clock: FrozenClock) -> BankRegistry:
    return BankRegistry.default(transactions, details, clock)


@pytest.fixture
def orchestrator(registry: BankRegistry, transactions: TransactionRepository) -> PaymentOrchestrator:
    return PaymentOrchestrator(registry, transactions)


@pytest.fixture
def pay_command() -> PayCommand:
    return PayCommand(bank_id="akbank", total_amount=Decimal("1000.00"), order_reference="ORDER_001")


@pytest.fixture
def client(db: Session, clock: FrozenClock) -> TestClient:
    """Create FastAPI test client with test database and frozen clock"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    return TestClient(app)
