"""Tests for AccountService."""

import pytest
from datetime import date
from decimal import Decimal

from fundbook.domain.entities import TransactionStatus
from fundbook.domain.errors import ConflictError, DependencyError, NotFoundError, ValidationError


def test_create_account(account_service):
    account_id = account_service.create_account("Club Checking", opening_balance="250.00")
    account = account_service.get_account(account_id)
    assert account.name == "Club Checking"
    assert account.account_type == "checking"
    assert account.opening_balance == Decimal("250.00")
    assert account.is_active


def test_duplicate_name(account_service, sample_account):
    with pytest.raises(ConflictError):
        account_service.create_account("Club Checking")


@pytest.mark.parametrize(
    "kwargs, field",
    [
        ({"name": " "}, "name"),
        ({"name": "X", "account_type": "brokerage"}, "account_type"),
        ({"name": "X", "opening_balance": "-1"}, "opening_balance"),
        ({"name": "X", "opening_balance": "1e27"}, "opening_balance"),
        ({"name": "X", "fee_percentage": "101"}, "fee_percentage"),
        ({"name": "X", "fee_flat_amount": "-0.30"}, "fee_flat_amount"),
        ({"name": "X", "fee_percentage": "2.9"}, "fee_category_id"),
    ],
)
def test_create_account_validation(account_service, kwargs, field):
    with pytest.raises(ValidationError) as exc_info:
        account_service.create_account(**kwargs)
    assert exc_info.value.field == field


def test_fee_category_must_exist(account_service):
    with pytest.raises(NotFoundError):
        account_service.create_account("PayPal", "paypal", fee_percentage="2.9", fee_category_id=5)


def test_list_hides_inactive(account_service, sample_account):
    other = account_service.create_account("Petty Cash", "cash")
    account_service.deactivate_account(other)

    assert [a.id for a in account_service.list_accounts()] == [sample_account.id]
    assert len(account_service.list_accounts(include_inactive=True)) == 2


def test_delete_empty_account(account_service, sample_account):
    account_service.delete_account(sample_account.id)
    assert account_service.get_account(sample_account.id) is None


def test_delete_blocked_by_transactions(account_service, transaction_service, sample_account):
    transaction_service.create_transaction(sample_account.id, date(2024, 1, 2), "5", "income", "Raffle")
    with pytest.raises(DependencyError, match="1 transaction\\."):
        account_service.delete_account(sample_account.id)


def test_delete_unknown(account_service):
    with pytest.raises(NotFoundError):
        account_service.delete_account(404)


def test_balances_and_register(account_service, transaction_service, sample_account):
    transaction_service.create_transaction(sample_account.id, date(2024, 1, 10), "40", "expense", "Balls")
    transaction_service.create_transaction(
        sample_account.id, date(2024, 1, 5), "60", "income", "Dues", status="cleared"
    )

    balance = account_service.get_balances()[sample_account.id]
    assert balance.current_balance == Decimal("120.00")
    assert balance.total_income == Decimal("60")
    assert balance.total_expense == Decimal("40")
    assert balance.status_net[TransactionStatus.CLEARED] == Decimal("60")
    assert balance.status_net[TransactionStatus.UNCLEARED] == Decimal("-40")
    assert account_service.get_current_balance(sample_account.id) == Decimal("120.00")

    register = account_service.get_register(sample_account.id)
    assert [txn.description for txn, _ in register] == ["Dues", "Balls"]
    assert [balance for _, balance in register] == [Decimal("160.00"), Decimal("120.00")]


def test_delete_removes_reconciliation_history(account_service, reconciliation_service, sample_account):
    session_id, _ = reconciliation_service.create_session(sample_account.id, "2024-01-31", "100.00")
    reconciliation_service.cancel(session_id, sample_account.id)

    account_service.delete_account(sample_account.id)
    assert reconciliation_service.get_session(session_id) is None
