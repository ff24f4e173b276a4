"""Pytest fixtures for testing"""

import pytest
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from splitledger.api.main import create_app
from splitledger.infrastructure.database.models import Base
from splitledger.infrastructure.database.session import get_db
from splitledger.domain.models import Expense, ExpenseItem, Settlement, SettlementStatus, SplitMode


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


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


@pytest.fixture
def members() -> list[str]:
    return ["alice", "bob", "carol"]


@pytest.fixture
def dinner_itemized() -> Expense:
    """Itemized dinner paid by alice: 60 shared by alice/bob, 30 for carol"""
    return Expense(
        payer="alice",
        amount=Decimal("90"),
        split_mode=SplitMode.ITEMIZED,
        items=(
            ExpenseItem(description="x", amount=Decimal("60"), assigned_to=("alice", "bob")),
            ExpenseItem(description="y", amount=Decimal("30"), assigned_to=("carol",)),
        ),
    )


@pytest.fixture
def mixed_records(members: list[str]) -> tuple[list[Expense], list[Settlement]]:
    """A realistic group history: equal, subset and itemized expenses plus settlements"""
    expenses = [
        Expense(payer="alice", amount=Decimal("120.00"), split_mode=SplitMode.EQUAL, participants=tuple(members)),
        Expense(payer="bob", amount=Decimal("45.50"), split_mode=SplitMode.SUBSET, participants=("bob", "carol")),
        Expense(
            payer="carol",
            amount=Decimal("100.00"),
            split_mode=SplitMode.ITEMIZED,
            items=(
                ExpenseItem(description="pizza", amount=Decimal("33.33"), assigned_to=("alice", "bob", "carol")),
                ExpenseItem(description="wine", amount=Decimal("66.67"), assigned_to=("alice", "carol")),
            ),
        ),
        Expense(payer="bob", amount=Decimal("10.00"), split_mode=SplitMode.EQUAL, participants=("alice", "bob", "carol")),
    ]
    settlements = [
        Settlement(from_member="bob", to_member="alice", amount=Decimal("15.00"), status=SettlementStatus.CONFIRMED),
        Settlement(from_member="carol", to_member="alice", amount=Decimal("5.00"), status=SettlementStatus.PENDING),
    ]
    return expenses, settlements
