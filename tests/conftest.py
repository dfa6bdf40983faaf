"""Shared test fixtures for all test modules."""

import contextlib
import uuid
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import contract_events.models  # noqa: F401
from contract_events.core import database as db_module
from contract_events.core.database import Base, get_db
from contract_events.schemas.contract_terms import (
    ContractLine,
    ContractTerms,
    LineCycle,
    LineKind,
    PaymentMode,
)

# Create an in-memory SQLite engine with StaticPool so all connections
# share the same database state and there are no file-locking issues.
_test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
_TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_test_engine)


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test and truncate all data after.

    Patches the module-level engine and SessionLocal so all application code
    uses the in-memory test database. Clears data after each test.
    """
    original_engine = db_module.engine
    original_session = db_module.SessionLocal
    db_module.engine = _test_engine
    db_module.SessionLocal = _TestSessionLocal

    Base.metadata.create_all(bind=_test_engine)

    yield
    with _test_engine.connect() as conn:
        conn.execute(text("PRAGMA foreign_keys = OFF"))
        for table in reversed(Base.metadata.sorted_tables):
            with contextlib.suppress(OperationalError):
                conn.execute(table.delete())
        conn.execute(text("PRAGMA foreign_keys = ON"))
        conn.commit()

    db_module.engine = original_engine
    db_module.SessionLocal = original_session


@pytest.fixture
def db_session():
    """Create a database session for direct repository testing."""
    gen = get_db()
    db = next(gen)
    try:
        yield db
    finally:
        for _ in gen:
            pass


@pytest.fixture
def contract_id():
    return uuid.uuid4()


@pytest.fixture
def monthly_service_terms():
    """Three monthly service visits over three months, paid upfront."""
    return ContractTerms(
        start_date=date(2025, 2, 5),
        duration_value=3,
        selected_lines=[
            ContractLine(
                id="svc-1",
                name="Preventive maintenance",
                kind=LineKind.SERVICE,
                quantity=3,
                cycle=LineCycle.MONTHLY,
                unit_price=Decimal("1000"),
            )
        ],
        payment_mode=PaymentMode.PREPAID,
        grand_total=Decimal("3000"),
        currency="USD",
    )
