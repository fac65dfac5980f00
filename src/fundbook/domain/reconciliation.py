"""Bank reconciliation: session state machine and matching worksheet.

A session moves from ``in_progress`` to either ``finished`` or ``cancelled``
and never leaves a terminal state. The transition functions in this module
are pure and only accept an in-progress session; ReconciliationService
wires them to the database.
"""

import logging
from dataclasses import replace
from datetime import date, datetime, UTC
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from fundbook.database.base import Database
from fundbook.domain import errors
from fundbook.domain.balances import reconciled_balance
from fundbook.domain.entities import (
    Account,
    ReconciliationSession,
    SessionStatus,
    Transaction,
    TransactionStatus,
)
from fundbook.domain.errors import NotFoundError, PreconditionError, ValidationError
from fundbook.domain.money import MoneyComparison, MoneyLike, ZERO, compare_money, to_money
from fundbook.domain.validation import (
    validate_cancel_reconciliation,
    validate_create_reconciliation,
    validate_finish_reconciliation,
    validate_quick_transaction,
)

logger = logging.getLogger(__name__)


def require_in_progress(session: ReconciliationSession, account_id: Optional[int] = None) -> None:
    """Raise unless the session is in progress (and belongs to account_id, if given)."""
    if account_id is not None and session.account_id != account_id:
        raise NotFoundError(errors.session_not_found(session.id))
    if not session.is_in_progress:
        raise PreconditionError(errors.session_not_in_progress(session.id))


def open_session(
    account: Account,
    transactions: Iterable[Transaction],
    statement_date: date,
    statement_ending_balance: MoneyLike,
) -> ReconciliationSession:
    """Build a new in-progress session for an account.

    The starting balance is the account's reconciled balance at this moment
    and is stored as a snapshot.

    Raises:
        PreconditionError: If the account is inactive
    """
    if not account.is_active:
        raise PreconditionError(f"Account {account.id} is inactive")

    own_transactions = [t for t in transactions if t.account_id == account.id]
    return ReconciliationSession(
        id=None,
        account_id=account.id,
        statement_date=statement_date,
        statement_ending_balance=to_money(statement_ending_balance),
        starting_balance=reconciled_balance(account.opening_balance, own_transactions),
        status=SessionStatus.IN_PROGRESS,
    )


def matching_candidates(account_id: int, transactions: Iterable[Transaction]) -> list[Transaction]:
    """Transactions of an account that may be matched in a session.

    Reconciled transactions are never offered.
    """
    candidates = [
        t for t in transactions
        if t.account_id == account_id and t.status != TransactionStatus.RECONCILED
    ]
    return sorted(candidates, key=lambda t: (t.date, t.id))


def finish_session(
    session: ReconciliationSession,
    account_id: int,
    transactions: Iterable[Transaction],
    transaction_ids: Sequence[int],
    now: Optional[datetime] = None,
) -> tuple[ReconciliationSession, list[Transaction]]:
    """Finish a session, reconciling the selected transactions.

    Args:
        session: Session to finish, must be in progress
        account_id: Account the session and transactions belong to
        transactions: Known transactions, containing at least the selected ones
        transaction_ids: IDs of the transactions to mark reconciled
        now: Timestamp for ``finished_at`` and missing ``cleared_at`` values

    Returns:
        Tuple of the finished session and the reconciled transactions

    Raises:
        ValidationError: If no transactions are selected
        NotFoundError: If a selected transaction is unknown
        PreconditionError: If the session is not in progress, or a selected
            transaction belongs to another account or is already reconciled
    """
    require_in_progress(session, account_id)

    selected_ids = list(dict.fromkeys(transaction_ids))
    if not selected_ids:
        raise ValidationError("At least one transaction must be selected.", field="transaction_ids")

    by_id = {t.id: t for t in transactions}
    now = now or datetime.now(UTC)

    reconciled = []
    for txn_id in selected_ids:
        txn = by_id.get(txn_id)
        if txn is None:
            raise NotFoundError(errors.transaction_not_found(txn_id))
        if txn.account_id != account_id:
            raise PreconditionError(
                f"Transaction {txn_id} does not belong to account {account_id}"
            )
        if txn.is_reconciled:
            raise PreconditionError(errors.transaction_reconciled(txn_id))
        reconciled.append(
            replace(
                txn,
                status=TransactionStatus.RECONCILED,
                reconciliation_session_id=session.id,
                cleared_at=txn.cleared_at or now,
            )
        )

    finished = replace(
        session,
        status=SessionStatus.FINISHED,
        finished_at=now,
        transaction_count=len(reconciled),
    )
    return finished, reconciled


def cancel_session(session: ReconciliationSession, account_id: int) -> ReconciliationSession:
    """Cancel an in-progress session. Transactions are left untouched."""
    require_in_progress(session, account_id)
    return replace(session, status=SessionStatus.CANCELLED)


class ReconciliationMatch:
    """Selection worksheet for an in-progress session.

    Tracks which candidate transactions the user has ticked and reports how
    far the resulting balance is from the statement. Nothing is changed on
    the transactions until the session is finished.
    """

    def __init__(
        self,
        session: ReconciliationSession,
        candidates: Iterable[Transaction],
        selected_ids: Iterable[int] = (),
    ):
        require_in_progress(session)
        self.session = session
        self._candidates: dict[int, Transaction] = {}
        self._selected: dict[int, None] = {}
        for txn in candidates:
            self.add_candidate(txn, selected=False)
        for txn_id in selected_ids:
            self.select(txn_id)

    @property
    def candidates(self) -> list[Transaction]:
        return list(self._candidates.values())

    @property
    def selected_ids(self) -> list[int]:
        return list(self._selected)

    def is_selected(self, transaction_id: int) -> bool:
        return transaction_id in self._selected

    def add_candidate(self, txn: Transaction, selected: bool = True) -> None:
        """Offer a transaction for matching, selecting it by default.

        Raises:
            PreconditionError: If the transaction is reconciled or belongs to another account
        """
        if txn.account_id != self.session.account_id:
            raise PreconditionError(
                f"Transaction {txn.id} does not belong to account {self.session.account_id}"
            )
        if txn.is_reconciled:
            raise PreconditionError(errors.transaction_reconciled(txn.id))
        self._candidates[txn.id] = txn
        if selected:
            self._selected[txn.id] = None

    def select(self, transaction_id: int) -> None:
        if transaction_id not in self._candidates:
            raise NotFoundError(errors.transaction_not_found(transaction_id))
        self._selected[transaction_id] = None

    def deselect(self, transaction_id: int) -> None:
        self._selected.pop(transaction_id, None)

    def toggle(self, transaction_id: int) -> bool:
        """Flip a transaction's selection. Returns True if now selected."""
        if transaction_id in self._selected:
            self.deselect(transaction_id)
            return False
        self.select(transaction_id)
        return True

    def select_all(self) -> None:
        for txn_id in self._candidates:
            self._selected[txn_id] = None

    def clear(self) -> None:
        self._selected.clear()

    @property
    def selected_total(self) -> Decimal:
        """Signed sum of the selected transactions."""
        return sum((self._candidates[i].signed_amount for i in self._selected), ZERO)

    @property
    def cleared_balance(self) -> Decimal:
        return self.session.starting_balance + self.selected_total

    @property
    def difference(self) -> Decimal:
        """Statement ending balance minus the cleared balance."""
        return self.session.statement_ending_balance - self.cleared_balance

    @property
    def comparison(self) -> MoneyComparison:
        return compare_money(self.cleared_balance, self.session.statement_ending_balance)

    @property
    def is_balanced(self) -> bool:
        return self.comparison == MoneyComparison.EQUAL


class ReconciliationService:
    """Service running the reconciliation workflow against a database."""

    def __init__(self, db: Database):
        """Initialize reconciliation service.

        Args:
            db: Database instance
        """
        self.db = db

    def _get_account(self, account_id: int) -> Account:
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(errors.account_not_found(account_id))
        return account

    def _get_session(self, session_id: int, account_id: Optional[int] = None) -> ReconciliationSession:
        session = self.db.get_reconciliation_session(session_id)
        if session is None or (account_id is not None and session.account_id != account_id):
            raise NotFoundError(errors.session_not_found(session_id))
        return session

    def get_session(self, session_id: int) -> Optional[ReconciliationSession]:
        return self.db.get_reconciliation_session(session_id)

    def list_sessions(self, account_id: int) -> list[ReconciliationSession]:
        """List an account's sessions, newest first."""
        self._get_account(account_id)
        return self.db.list_reconciliation_sessions(account_id)

    def create_session(
        self, account_id, statement_date, statement_ending_balance
    ) -> tuple[int, bool]:
        """Open a reconciliation session for an account.

        If the account already has a session in progress, that session is
        returned instead of creating a second one.

        Returns:
            Tuple of (session ID, whether a new session was created)

        Raises:
            ValidationError: If the input is malformed
            NotFoundError: If the account does not exist
            PreconditionError: If the account is inactive
        """
        data = validate_create_reconciliation(account_id, statement_date, statement_ending_balance)
        account = self._get_account(data.account_id)

        existing = self.db.get_in_progress_session(account.id)
        if existing is not None:
            logger.debug(
                "Account %s already has session %s in progress", account.id, existing.id
            )
            return existing.id, False

        session = open_session(
            account,
            self.db.list_transactions(account_id=account.id),
            data.statement_date,
            data.statement_ending_balance,
        )
        session_id = self.db.create_reconciliation_session(session)
        logger.info(
            "Opened reconciliation session %s for account %s (starting balance %s)",
            session_id,
            account.id,
            session.starting_balance,
        )
        return session_id, True

    def get_match(self, session_id: int, selected_ids: Iterable[int] = ()) -> ReconciliationMatch:
        """Load the matching worksheet for an in-progress session.

        Transactions already attached to the session (added through
        quick-add) start out selected.
        """
        session = self._get_session(session_id)
        require_in_progress(session)
        candidates = matching_candidates(
            session.account_id, self.db.list_transactions(account_id=session.account_id)
        )
        attached = [t.id for t in candidates if t.reconciliation_session_id == session.id]
        return ReconciliationMatch(session, candidates, [*attached, *selected_ids])

    def quick_add_transaction(
        self,
        session_id,
        account_id,
        transaction_date,
        description,
        amount,
        transaction_type,
        category_id,
    ) -> int:
        """Create a transaction from within a session and attach it.

        Returns:
            ID of the new transaction

        Raises:
            ValidationError: If the input is malformed
            NotFoundError: If the account, session or category does not exist
            PreconditionError: If the session is not in progress, or the
                category is inactive or of the wrong type
        """
        data = validate_quick_transaction(
            session_id,
            account_id,
            transaction_date,
            description,
            amount,
            transaction_type,
            category_id,
        )
        account = self._get_account(data.account_id)
        if not account.is_active:
            raise PreconditionError(f"Account {account.id} is inactive")
        session = self._get_session(data.session_id, account.id)
        require_in_progress(session, account.id)

        category = self.db.get_category(data.category_id)
        if category is None:
            raise NotFoundError(errors.category_not_found(data.category_id))
        if not category.is_active:
            raise PreconditionError(f"Category {category.id} is inactive")
        if category.category_type != data.transaction_type:
            raise PreconditionError(errors.category_type_mismatch(data.transaction_type.value))

        txn_id = self.db.create_transaction(
            account_id=account.id,
            date=data.transaction_date,
            amount=data.amount,
            transaction_type=data.transaction_type,
            description=data.description,
            category_id=category.id,
            reconciliation_session_id=session.id,
        )
        logger.info("Added transaction %s to reconciliation session %s", txn_id, session.id)
        return txn_id

    def finish(self, session_id, account_id, transaction_ids) -> ReconciliationSession:
        """Finish a session, marking the selected transactions reconciled.

        The session and transaction updates are written in one database
        transaction.

        Raises:
            ValidationError: If the input is malformed or nothing is selected
            NotFoundError: If the session or a transaction does not exist
            PreconditionError: If the session is no longer in progress
        """
        data = validate_finish_reconciliation(session_id, account_id, transaction_ids)
        self._get_account(data.account_id)
        session = self._get_session(data.session_id, data.account_id)
        require_in_progress(session, data.account_id)

        transactions = self.db.get_transactions(data.transaction_ids)
        finished, reconciled = finish_session(
            session, data.account_id, transactions, data.transaction_ids
        )
        self.db.finish_reconciliation(finished, reconciled)
        logger.info(
            "Finished reconciliation session %s with %d transactions",
            finished.id,
            finished.transaction_count,
        )
        return finished

    def cancel(self, session_id, account_id) -> ReconciliationSession:
        """Cancel a session without changing any transaction."""
        data = validate_cancel_reconciliation(session_id, account_id)
        self._get_account(data.account_id)
        session = self._get_session(data.session_id, data.account_id)
        cancelled = cancel_session(session, data.account_id)
        self.db.update_reconciliation_session_status(cancelled.id, cancelled.status)
        logger.info("Cancelled reconciliation session %s", cancelled.id)
        return cancelled
