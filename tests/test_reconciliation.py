"""Tests for the pure reconciliation state machine and matching worksheet."""

import pytest
from dataclasses import replace
from datetime import date, datetime, UTC
from decimal import Decimal

from conftest import make_account, make_session, make_txn
from fundbook.domain.balances import account_balances
from fundbook.domain.entities import SessionStatus, TransactionStatus, TransactionType
from fundbook.domain.errors import NotFoundError, PreconditionError, ValidationError
from fundbook.domain.money import MoneyComparison
from fundbook.domain.reconciliation import (
    ReconciliationMatch,
    cancel_session,
    finish_session,
    matching_candidates,
    open_session,
)

NOW = datetime(2024, 2, 1, 12, 0, tzinfo=UTC)


class TestOpenSession:
    def test_starting_balance_is_reconciled_balance(self):
        transactions = [
            make_txn(1, "40.00", status=TransactionStatus.RECONCILED),
            make_txn(2, "15.00", TransactionType.EXPENSE, TransactionStatus.CLEARED),
        ]
        session = open_session(make_account(1, "100.00"), transactions, date(2024, 1, 31), "125.00")
        assert session.id is None
        assert session.status == SessionStatus.IN_PROGRESS
        assert session.starting_balance == Decimal("140.00")
        assert session.statement_ending_balance == Decimal("125.00")

    def test_other_accounts_are_ignored(self):
        transactions = [make_txn(1, "40.00", status=TransactionStatus.RECONCILED, account_id=2)]
        session = open_session(make_account(1, "10.00"), transactions, date(2024, 1, 31), "0")
        assert session.starting_balance == Decimal("10.00")

    def test_negative_statement_balance_is_allowed(self):
        session = open_session(make_account(1), [], date(2024, 1, 31), "-12.50")
        assert session.statement_ending_balance == Decimal("-12.50")

    def test_inactive_account_is_rejected(self):
        with pytest.raises(PreconditionError):
            open_session(make_account(1, is_active=False), [], date(2024, 1, 31), "0")


def test_matching_candidates_exclude_reconciled_and_sort():
    transactions = [
        make_txn(3, "1.00", txn_date=date(2024, 1, 5)),
        make_txn(1, "1.00", status=TransactionStatus.RECONCILED),
        make_txn(2, "1.00", txn_date=date(2024, 1, 2)),
        make_txn(4, "1.00", txn_date=date(2024, 1, 2), status=TransactionStatus.CLEARED),
        make_txn(5, "1.00", account_id=2),
    ]
    assert [t.id for t in matching_candidates(1, transactions)] == [2, 4, 3]


class TestFinishSession:
    def test_reconciles_selected_transactions(self):
        cleared_at = datetime(2024, 1, 20, tzinfo=UTC)
        transactions = [
            make_txn(1, "10.00"),
            make_txn(2, "5.00", status=TransactionStatus.CLEARED, cleared_at=cleared_at),
            make_txn(3, "7.00"),
        ]
        finished, reconciled = finish_session(make_session(), 1, transactions, [1, 2], now=NOW)

        assert finished.status == SessionStatus.FINISHED
        assert finished.finished_at == NOW
        assert finished.transaction_count == 2
        assert [t.id for t in reconciled] == [1, 2]
        assert all(t.status == TransactionStatus.RECONCILED for t in reconciled)
        assert all(t.reconciliation_session_id == 1 for t in reconciled)
        assert reconciled[0].cleared_at == NOW
        assert reconciled[1].cleared_at == cleared_at

    def test_duplicate_ids_count_once(self):
        finished, reconciled = finish_session(
            make_session(), 1, [make_txn(1, "10.00")], [1, 1], now=NOW
        )
        assert finished.transaction_count == 1
        assert len(reconciled) == 1

    def test_empty_selection_is_rejected(self):
        with pytest.raises(ValidationError):
            finish_session(make_session(), 1, [make_txn(1, "10.00")], [])

    def test_unknown_transaction(self):
        with pytest.raises(NotFoundError):
            finish_session(make_session(), 1, [make_txn(1, "10.00")], [99])

    def test_foreign_transaction(self):
        with pytest.raises(PreconditionError, match="does not belong"):
            finish_session(make_session(), 1, [make_txn(1, "10.00", account_id=2)], [1])

    def test_already_reconciled_transaction(self):
        txn = make_txn(1, "10.00", status=TransactionStatus.RECONCILED)
        with pytest.raises(PreconditionError):
            finish_session(make_session(), 1, [txn], [1])

    @pytest.mark.parametrize("status", [SessionStatus.FINISHED, SessionStatus.CANCELLED])
    def test_terminal_sessions_are_immutable(self, status):
        session = make_session(status=status)
        with pytest.raises(PreconditionError):
            finish_session(session, 1, [make_txn(1, "10.00")], [1])
        with pytest.raises(PreconditionError):
            cancel_session(session, 1)
        with pytest.raises(PreconditionError):
            ReconciliationMatch(session, [])

    def test_wrong_account_is_not_found(self):
        with pytest.raises(NotFoundError):
            finish_session(make_session(account_id=1), 2, [make_txn(1, "10.00")], [1])


def test_cancel_session():
    cancelled = cancel_session(make_session(), 1)
    assert cancelled.status == SessionStatus.CANCELLED
    assert cancelled.transaction_count == 0


class TestReconciliationMatch:
    def make_match(self):
        session = make_session(starting="100.00", ending="130.00")
        candidates = [
            make_txn(1, "50.00"),
            make_txn(2, "20.00", TransactionType.EXPENSE),
            make_txn(3, "9.99", TransactionType.EXPENSE),
        ]
        return ReconciliationMatch(session, candidates)

    def test_nothing_selected(self):
        match = self.make_match()
        assert match.selected_ids == []
        assert match.cleared_balance == Decimal("100.00")
        assert match.difference == Decimal("30.00")
        assert match.comparison == MoneyComparison.LESS

    def test_balanced_selection(self):
        match = self.make_match()
        match.select(1)
        match.select(2)
        assert match.selected_total == Decimal("30.00")
        assert match.is_balanced
        assert match.difference == Decimal("0.00")

    def test_toggle(self):
        match = self.make_match()
        assert match.toggle(3) is True
        assert match.is_selected(3)
        assert match.toggle(3) is False
        assert not match.is_selected(3)

    def test_select_all_and_clear(self):
        match = self.make_match()
        match.select_all()
        assert match.selected_ids == [1, 2, 3]
        assert match.cleared_balance == Decimal("120.01")
        match.clear()
        assert match.selected_ids == []

    def test_select_unknown_transaction(self):
        with pytest.raises(NotFoundError):
            self.make_match().select(42)

    def test_add_candidate_selects_by_default(self):
        match = self.make_match()
        match.add_candidate(make_txn(4, "10.00"))
        assert match.is_selected(4)

    def test_add_candidate_rejects_reconciled(self):
        match = self.make_match()
        with pytest.raises(PreconditionError):
            match.add_candidate(make_txn(4, "10.00", status=TransactionStatus.RECONCILED))

    def test_add_candidate_rejects_foreign(self):
        with pytest.raises(PreconditionError):
            self.make_match().add_candidate(make_txn(4, "10.00", account_id=2))

    def test_selection_does_not_change_transactions(self):
        match = self.make_match()
        match.select_all()
        assert all(t.status == TransactionStatus.UNCLEARED for t in match.candidates)


def test_club_month_end_to_end():
    """Balance an account, match every transaction and finish the session."""
    account = make_account(1, "1000.00")
    transactions = [
        make_txn(1, "500.00"),
        make_txn(2, "250.00"),
        make_txn(3, "250.00"),
        make_txn(4, "1000.00", TransactionType.EXPENSE),
    ]
    assert account_balances([account], transactions)[1].current_balance == Decimal("1000.00")

    session = replace(open_session(account, transactions, date(2024, 1, 31), "1000.00"), id=1)
    assert session.starting_balance == Decimal("1000.00")

    match = ReconciliationMatch(session, matching_candidates(1, transactions))
    match.select_all()
    assert match.comparison == MoneyComparison.EQUAL

    finished, reconciled = finish_session(session, 1, transactions, match.selected_ids, now=NOW)
    assert finished.status == SessionStatus.FINISHED
    assert finished.transaction_count == 4
    assert [t.status for t in reconciled] == [TransactionStatus.RECONCILED] * 4
