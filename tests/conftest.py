"""Shared pytest fixtures for fincontrol tests."""

import tempfile
import os
from datetime import date, datetime, UTC
from decimal import Decimal
import pytest

from fincontrol.database.factories import create_sqlite_database
from fincontrol.domain.category import CategoryService
from fincontrol.domain.credit_card import CreditCardService
from fincontrol.domain.entities import Quote
from fincontrol.domain.entry import EntryService
from fincontrol.domain.investment import AssetService, InvestmentTransactionService
from fincontrol.domain.portfolio import PortfolioService
from fincontrol.domain.summary import SummaryService
from fincontrol.domain.user import UserService
from fincontrol.quotes.provider import QuoteProvider

# Fixed "today" for services whose results depend on the current date
FIXED_TODAY = date(2024, 3, 15)


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def user_service(temp_db):
    """Create a UserService with a temporary database."""
    return UserService(temp_db)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def credit_card_service(temp_db):
    """Create a CreditCardService with a temporary database."""
    return CreditCardService(temp_db)


@pytest.fixture
def entry_service(temp_db):
    """Create an EntryService whose clock is fixed at FIXED_TODAY."""
    return EntryService(temp_db, today=lambda: FIXED_TODAY)


@pytest.fixture
def summary_service(temp_db):
    """Create a SummaryService with a temporary database."""
    return SummaryService(temp_db)


@pytest.fixture
def asset_service(temp_db):
    """Create an AssetService with a temporary database."""
    return AssetService(temp_db)


@pytest.fixture
def investment_transaction_service(temp_db):
    """Create an InvestmentTransactionService with a temporary database."""
    return InvestmentTransactionService(temp_db)


@pytest.fixture
def portfolio_service(temp_db):
    """Create a PortfolioService with a temporary database."""
    return PortfolioService(temp_db)


@pytest.fixture
def sample_user(user_service):
    """Create a sample user for testing."""
    user_id = user_service.create_user(name="Test User", email="test@example.com")
    return user_service.get_user(user_id)


@pytest.fixture
def other_user(user_service):
    """Create a second user to check owner scoping."""
    user_id = user_service.create_user(name="Other User", email="other@example.com")
    return user_service.get_user(user_id)


@pytest.fixture
def sample_categories(category_service, sample_user):
    """Create expense and income categories and return their IDs by name."""
    categories = {
        "Utilities": "expense",
        "Groceries": "expense",
        "Housing": "expense",
        "Salary": "income",
        "Freelance": "income",
    }
    return {
        name: category_service.create_category(sample_user.id, name=name, category_type=category_type)
        for name, category_type in categories.items()
    }


@pytest.fixture
def sample_card(credit_card_service, sample_user):
    """Create a sample credit card."""
    card_id = credit_card_service.create_credit_card(
        sample_user.id, name="Nubank", brand="Mastercard", best_purchase_day=5
    )
    return credit_card_service.get_credit_card(sample_user.id, card_id)


class FakeQuoteProvider(QuoteProvider):
    """Quote provider serving canned responses and recording every call.

    ``responses`` maps a ticker to a price, to None (no data) or to an
    exception instance to raise.
    """

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.calls = []

    def fetch_quote(self, ticker):
        self.calls.append(ticker)
        response = self.responses.get(ticker)
        if isinstance(response, Exception):
            raise response
        if response is None:
            return None
        return Quote(
            ticker=ticker,
            price=Decimal(str(response)),
            percent_change=Decimal("1.25"),
            absolute_change=Decimal("0.40"),
            fetched_at=datetime.now(UTC),
        )


@pytest.fixture
def fake_provider():
    """Create an empty FakeQuoteProvider; tests fill in responses."""
    return FakeQuoteProvider()


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
