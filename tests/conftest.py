"""
Shared test fixtures.

Sets up an isolated SQLite test database so tests never touch
the real database. Tables are created before each test and
dropped after it, so every test starts from an empty ledger.
"""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from ledger_api.main import app
from ledger_api.models import Base
from ledger_api.models.base import build_engine, get_db
from ledger_api.services.book_service import BookService
from ledger_api.services.ledger_service import LedgerService


# SQLite needs no database server, so tests run anywhere.
# build_engine switches on foreign keys for cascades.
TEST_DATABASE_URL = "sqlite:///./test_ledger.db"

engine = build_engine(TEST_DATABASE_URL)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop them after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """Provide a database session for direct service testing."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def book_service(db_session):
    return BookService(db_session)


@pytest.fixture
def ledger_service(db_session):
    return LedgerService(db_session)


@pytest.fixture
def client(db_session):
    """
    Provide a test client with the test database.

    The get_db dependency is overridden so the FastAPI app
    uses the test session instead of the configured database.
    """
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def rent_book(book_service, ledger_service, db_session):
    """
    A ZAR book with two rent entries, the first of them voided.

    Assets:Receivable ends at -700 and Income:Rent at 700, over six
    transactions: four dated 2024 and the two legs of the reversal.
    """
    _, book = book_service.get_or_create_book("TestA", "ZAR")

    first = book_service.new_journal_entry(book, "Test Entry", datetime(2024, 1, 1))
    first.debit("Assets:Receivable", 500).credit("Income:Rent", 500)
    ledger_service.commit(first)

    second = book_service.new_journal_entry(book, "Test Entry 2", datetime(2024, 1, 2))
    second.debit("Assets:Receivable", 700).credit("Income:Rent", 700)
    ledger_service.commit(second)

    ledger_service.void(first, "Messed up")
    db_session.commit()
    return book


@pytest.fixture
def forex_book(book_service, ledger_service, db_session):
    """
    A USD book holding USD and ZAR.

    Trading:USD +600 USD, Trading:ZAR +10000 ZAR (bought at 0.1),
    Assets:Bank -1650 USD, Expenses:Fees +50 USD.
    """
    _, book = book_service.get_or_create_book("Forex test", "USD")

    entry = book_service.new_journal_entry(book, "Base investment")
    entry.credit("Trading:USD", 1650, "USD", 1).debit("Assets:Bank", 1650, "USD", 1)
    ledger_service.commit(entry)

    entry = book_service.new_journal_entry(book, "Buy 10000 ZAR for $1000")
    entry.credit("Trading:ZAR", 10000, "ZAR", 0.1)
    entry.debit("Trading:USD", 1050, "USD", 1)
    entry.credit("Expenses:Fees", 50, "USD", 1)
    ledger_service.commit(entry)

    db_session.commit()
    return book
