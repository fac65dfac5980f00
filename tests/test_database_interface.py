"""Tests for the SQLAlchemy database implementation."""

import pytest
from dataclasses import replace
from datetime import date
from decimal import Decimal

from fundbook.database.base import Database
from fundbook.domain.entities import (
    Account,
    NewTransaction,
    ReconciliationSession,
    SessionStatus,
    TransactionStatus,
    TransactionType,
)
from fundbook.domain.errors import ConflictError, NotFoundError, PreconditionError


def _session(account_id):
    return ReconciliationSession(
        id=None,
        account_id=account_id,
        statement_date=date(2024, 1, 31),
        statement_ending_balance=Decimal("10.00"),
        starting_balance=Decimal("0.00"),
        status=SessionStatus.IN_PROGRESS,
    )


def test_implements_interface(temp_db):
    assert isinstance(temp_db, Database)


def test_returns_domain_entities(temp_db):
    account_id = temp_db.create_account(name="Cash Box", account_type="cash", opening_balance=Decimal("5.00"))
    account = temp_db.get_account(account_id)
    assert isinstance(account, Account)
    assert account.opening_balance == Decimal("5.00")
    assert temp_db.get_account(999) is None


def test_one_session_in_progress_per_account(temp_db):
    account_id = temp_db.create_account(name="Checking", account_type="checking", opening_balance=Decimal("0"))
    first = temp_db.create_reconciliation_session(_session(account_id))
    assert temp_db.get_in_progress_session(account_id).id == first

    with pytest.raises(ConflictError):
        temp_db.create_reconciliation_session(_session(account_id))

    temp_db.update_reconciliation_session_status(first, SessionStatus.CANCELLED)
    assert temp_db.get_in_progress_session(account_id) is None
    temp_db.create_reconciliation_session(_session(account_id))


def test_finish_rolls_back_on_failure(temp_db):
    account_id = temp_db.create_account(name="Checking", account_type="checking", opening_balance=Decimal("0"))
    good_id = temp_db.create_transaction(account_id, date(2024, 1, 2), Decimal("10.00"), TransactionType.INCOME)
    session_id = temp_db.create_reconciliation_session(_session(account_id))
    session = temp_db.get_reconciliation_session(session_id)

    good = temp_db.get_transaction(good_id)
    finished = replace(session, status=SessionStatus.FINISHED, transaction_count=2)
    reconciled = replace(good, status=TransactionStatus.RECONCILED, reconciliation_session_id=session_id)
    missing = replace(reconciled, id=999)

    with pytest.raises(NotFoundError):
        temp_db.finish_reconciliation(finished, [reconciled, missing])

    assert temp_db.get_transaction(good_id).status == TransactionStatus.UNCLEARED
    assert temp_db.get_reconciliation_session(session_id).status == SessionStatus.IN_PROGRESS


def test_finish_rejects_terminal_session(temp_db):
    account_id = temp_db.create_account(name="Checking", account_type="checking", opening_balance=Decimal("0"))
    session_id = temp_db.create_reconciliation_session(_session(account_id))
    temp_db.update_reconciliation_session_status(session_id, SessionStatus.CANCELLED)
    session = temp_db.get_reconciliation_session(session_id)

    with pytest.raises(PreconditionError):
        temp_db.finish_reconciliation(session, [])


def test_materialize_template(temp_db):
    account_id = temp_db.create_account(name="Checking", account_type="checking", opening_balance=Decimal("0"))
    template_id = temp_db.create_template(
        account_id=account_id,
        transaction_type=TransactionType.EXPENSE,
        amount=Decimal("30.00"),
        description="Insurance",
        rule="monthly",
        start_date=date(2024, 1, 15),
        end_date=None,
        next_occurrence_date=date(2024, 1, 15),
    )
    draft = NewTransaction(
        account_id=account_id,
        date=date(2024, 1, 15),
        amount=Decimal("30.00"),
        transaction_type=TransactionType.EXPENSE,
        description="Insurance",
        template_id=template_id,
    )
    (txn_id,) = temp_db.materialize_template(template_id, [draft], date(2024, 2, 15), True)

    assert temp_db.get_transaction(txn_id).template_id == template_id
    assert temp_db.get_template(template_id).next_occurrence_date == date(2024, 2, 15)


def test_category_by_path(temp_db):
    dues = temp_db.create_category("Dues", TransactionType.INCOME)
    youth = temp_db.create_category("Youth", TransactionType.INCOME, parent_id=dues)

    assert temp_db.get_category_by_path("Dues > Youth").id == youth
    assert temp_db.get_category_by_path("Dues > Youth", TransactionType.EXPENSE) is None
    assert temp_db.get_category_by_path("Youth") is None

    temp_db.set_category_parent(youth, None)
    assert temp_db.get_category_by_path("Youth").id == youth
