"""Shared pytest fixtures for fundbook tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from fundbook.database.factories import create_sqlite_database
from fundbook.domain.account import AccountService
from fundbook.domain.category import CategoryService
from fundbook.domain.entities import (
    Account,
    ReconciliationSession,
    SessionStatus,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from fundbook.domain.reconciliation import ReconciliationService
from fundbook.domain.season import SeasonService
from fundbook.domain.summary import SummaryService
from fundbook.domain.template import TemplateService
from fundbook.domain.transaction import TransactionService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def account_service(temp_db):
    return AccountService(temp_db)


@pytest.fixture
def category_service(temp_db):
    return CategoryService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    return TransactionService(temp_db)


@pytest.fixture
def reconciliation_service(temp_db):
    return ReconciliationService(temp_db)


@pytest.fixture
def template_service(temp_db):
    return TemplateService(temp_db)


@pytest.fixture
def season_service(temp_db):
    return SeasonService(temp_db)


@pytest.fixture
def summary_service(temp_db):
    return SummaryService(temp_db)


@pytest.fixture
def sample_account(account_service):
    """Create a checking account with a 100.00 opening balance."""
    account_id = account_service.create_account(name="Club Checking", opening_balance="100.00")
    return account_service.get_account(account_id)


@pytest.fixture
def sample_categories(category_service):
    """Create one income and one expense category; returns their IDs by name."""
    return {
        "Dues": category_service.create_category("Dues", "income"),
        "Supplies": category_service.create_category("Supplies", "expense"),
    }


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


def make_account(account_id=1, opening_balance="0", is_active=True, **kwargs):
    """Build an Account entity without touching a database."""
    return Account(
        id=account_id,
        name=kwargs.pop("name", f"Account {account_id}"),
        account_type="checking",
        opening_balance=Decimal(opening_balance),
        is_active=is_active,
        created_at=None,
        **kwargs,
    )


def make_txn(
    txn_id,
    amount,
    transaction_type=TransactionType.INCOME,
    status=TransactionStatus.UNCLEARED,
    account_id=1,
    txn_date=date(2024, 1, 1),
    **kwargs,
):
    """Build a Transaction entity without touching a database."""
    return Transaction(
        id=txn_id,
        account_id=account_id,
        date=txn_date,
        amount=Decimal(amount),
        transaction_type=transaction_type,
        status=status,
        **kwargs,
    )


def make_session(session_id=1, account_id=1, starting="0", ending="0", status=SessionStatus.IN_PROGRESS):
    return ReconciliationSession(
        id=session_id,
        account_id=account_id,
        statement_date=date(2024, 1, 31),
        statement_ending_balance=Decimal(ending),
        starting_balance=Decimal(starting),
        status=status,
    )
