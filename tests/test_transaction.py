"""Tests for TransactionService."""

import pytest
from datetime import date
from decimal import Decimal

from fundbook.domain.entities import TransactionStatus, TransactionType
from fundbook.domain.errors import NotFoundError, PreconditionError, ValidationError


def test_create_transaction(transaction_service, sample_account, sample_categories):
    txn_id = transaction_service.create_transaction(
        sample_account.id, date(2024, 2, 1), "45.50", "income", "  Dues  ", sample_categories["Dues"]
    )
    txn = transaction_service.get_transaction(txn_id)
    assert txn.amount == Decimal("45.50")
    assert txn.transaction_type == TransactionType.INCOME
    assert txn.status == TransactionStatus.UNCLEARED
    assert txn.description == "Dues"
    assert txn.cleared_at is None


def test_create_cleared_sets_timestamp(transaction_service, sample_account):
    txn_id = transaction_service.create_transaction(
        sample_account.id, date(2024, 2, 1), "10", "expense", "Whistle", status="cleared"
    )
    assert transaction_service.get_transaction(txn_id).cleared_at is not None


@pytest.mark.parametrize("amount", ["0", "-3", "1.234"])
def test_amount_must_be_positive_cents(transaction_service, sample_account, amount):
    with pytest.raises(ValidationError):
        transaction_service.create_transaction(sample_account.id, date(2024, 2, 1), amount, "income", "X")


def test_cannot_create_reconciled(transaction_service, sample_account):
    with pytest.raises(ValidationError, match="reconciliation session"):
        transaction_service.create_transaction(
            sample_account.id, date(2024, 2, 1), "1", "income", "X", status="reconciled"
        )


def test_unknown_account(transaction_service, temp_db):
    with pytest.raises(NotFoundError):
        transaction_service.create_transaction(9, date(2024, 2, 1), "1", "income", "X")


def test_inactive_account(transaction_service, account_service, sample_account):
    account_service.deactivate_account(sample_account.id)
    with pytest.raises(PreconditionError):
        transaction_service.create_transaction(sample_account.id, date(2024, 2, 1), "1", "income", "X")


def test_category_type_mismatch(transaction_service, sample_account, sample_categories):
    with pytest.raises(PreconditionError):
        transaction_service.create_transaction(
            sample_account.id, date(2024, 2, 1), "1", "expense", "X", sample_categories["Dues"]
        )


def test_set_status(transaction_service, sample_account):
    txn_id = transaction_service.create_transaction(sample_account.id, date(2024, 2, 1), "1", "income", "X")

    transaction_service.set_status(txn_id, "cleared")
    txn = transaction_service.get_transaction(txn_id)
    assert txn.status == TransactionStatus.CLEARED
    assert txn.cleared_at is not None

    transaction_service.set_status(txn_id, "uncleared")
    txn = transaction_service.get_transaction(txn_id)
    assert txn.status == TransactionStatus.UNCLEARED
    assert txn.cleared_at is None

    with pytest.raises(ValidationError):
        transaction_service.set_status(txn_id, "reconciled")


def test_update_only_given_fields(transaction_service, sample_account):
    txn_id = transaction_service.create_transaction(sample_account.id, date(2024, 2, 1), "1", "income", "Old")
    transaction_service.update_transaction(txn_id, amount="2.00")

    txn = transaction_service.get_transaction(txn_id)
    assert txn.amount == Decimal("2.00")
    assert txn.description == "Old"
    assert txn.date == date(2024, 2, 1)


def test_delete(transaction_service, sample_account):
    txn_id = transaction_service.create_transaction(sample_account.id, date(2024, 2, 1), "1", "income", "X")
    transaction_service.delete_transaction(txn_id)
    assert transaction_service.get_transaction(txn_id) is None
    with pytest.raises(NotFoundError):
        transaction_service.delete_transaction(txn_id)


def test_list_filters(transaction_service, sample_account):
    for day in (1, 15, 28):
        transaction_service.create_transaction(sample_account.id, date(2024, 2, day), "1", "income", f"Day {day}")

    listed = transaction_service.list_transactions(start_date=date(2024, 2, 10))
    assert [t.date.day for t in listed] == [28, 15]

    listed = transaction_service.list_transactions(status=TransactionStatus.CLEARED)
    assert listed == []
