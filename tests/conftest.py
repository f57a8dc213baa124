"""
Shared test fixtures.

Sets up an isolated SQLite database so tests never touch the
real one. Tables are created before each test and dropped after
it, so every test starts from an empty ledger.
"""

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from general_ledger.main import app
from general_ledger.models import Base
from general_ledger.models.base import get_db
from general_ledger.models.enums import AccountType
from general_ledger.schemas.account import AccountCreate
from general_ledger.schemas.journal import JournalEntryCreate, LineItemCreate
from general_ledger.services.account_service import AccountService
from general_ledger.services.posting_service import PostingService


# SQLite needs no database server, so the suite runs anywhere.
TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)

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
def client(db_session):
    """
    Provide a test client bound to the test database.

    The get_db dependency is overridden so the app uses the
    same session the test inspects.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_account(db_session):
    """Factory: create and commit a chart-of-accounts entry."""
    service = AccountService(db_session)

    def _make(code, name, account_type, sub_type=None, is_active=True):
        account = service.create_account(AccountCreate(
            code=code,
            name=name,
            account_type=account_type,
            sub_type=sub_type,
            is_active=is_active,
        ))
        db_session.commit()
        return account

    return _make


@pytest.fixture
def post_entry(db_session):
    """
    Factory: post and commit a journal entry.

    Lines are (account, debit, credit) tuples; amounts may be
    given as strings or numbers.
    """
    service = PostingService(db_session)

    def _post(entry_date, lines, reference=None, description=None):
        entry = service.post(JournalEntryCreate(
            date=entry_date,
            reference=reference,
            description=description,
            items=[
                LineItemCreate(
                    account_id=account.id,
                    debit=Decimal(str(debit)),
                    credit=Decimal(str(credit)),
                )
                for account, debit, credit in lines
            ],
        ))
        db_session.commit()
        return entry

    return _post


@pytest.fixture
def small_business(make_account, post_entry):
    """
    A small, balanced ledger covering every account type.

    January 2024:
      01-02  owner invests 10,000 cash
      01-05  sells 2,500 of goods on account
      01-10  pays 1,200 rent from the bank
      01-15  customer pays 1,500 of the receivable into the bank
      01-20  buys 800 of supplies on credit (expense)
      02-01  sells 1,000 for cash
    """
    accounts = {
        "cash": make_account("1001", "Cash on Hand", AccountType.ASSET, "cash"),
        "bank": make_account("1002", "Bank Account", AccountType.ASSET),
        "ar": make_account("1100", "Accounts Receivable", AccountType.ASSET),
        "ap": make_account("2000", "Accounts Payable", AccountType.LIABILITY),
        "equity": make_account("3000", "Owner Equity", AccountType.EQUITY),
        "sales": make_account("4000", "Sales Revenue", AccountType.REVENUE),
        "rent": make_account("6000", "Rent Expense", AccountType.EXPENSE),
        "supplies": make_account("6300", "Supplies Expense", AccountType.EXPENSE),
    }
    a = accounts
    post_entry(date(2024, 1, 2), [(a["cash"], 10000, 0), (a["equity"], 0, 10000)], "CAP-1")
    post_entry(date(2024, 1, 5), [(a["ar"], 2500, 0), (a["sales"], 0, 2500)], "INV-1")
    post_entry(date(2024, 1, 10), [(a["rent"], 1200, 0), (a["bank"], 0, 1200)], "RENT-JAN")
    post_entry(date(2024, 1, 15), [(a["bank"], 1500, 0), (a["ar"], 0, 1500)], "PAY-INV-1")
    post_entry(date(2024, 1, 20), [(a["supplies"], 800, 0), (a["ap"], 0, 800)], "BILL-1")
    post_entry(date(2024, 2, 1), [(a["cash"], 1000, 0), (a["sales"], 0, 1000)], "SALE-1")
    return accounts
