"""Transaction domain service."""

import logging
from datetime import date, datetime, UTC
from typing import Optional

from fundbook.database.base import Database
from fundbook.domain import errors
from fundbook.domain.entities import (
    Transaction as TransactionEntity,
    TransactionStatus,
    TransactionType,
)
from fundbook.domain.errors import NotFoundError, PreconditionError, ValidationError
from fundbook.domain.money import MoneyLike
from fundbook.domain.validation import (
    parse_description,
    parse_money_field,
    parse_transaction_type,
)

logger = logging.getLogger(__name__)


class TransactionService:
    """Service for managing transactions.

    Reconciled transactions are immutable: every change is rejected here.
    """

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def _get_mutable(self, transaction_id: int) -> TransactionEntity:
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(errors.transaction_not_found(transaction_id))
        if txn.is_reconciled:
            raise PreconditionError(errors.transaction_reconciled(transaction_id))
        return txn

    def create_transaction(
        self,
        account_id: int,
        date: date,
        amount: MoneyLike,
        transaction_type: TransactionType | str,
        description: str,
        category_id: Optional[int] = None,
        status: TransactionStatus | str = TransactionStatus.UNCLEARED,
    ) -> int:
        """Create a transaction.

        Args:
            account_id: Account ID
            date: Transaction date
            amount: Positive amount; the type gives the direction
            transaction_type: "income" or "expense"
            description: Description, at most 255 characters
            category_id: Optional category ID, must match the transaction type
            status: "uncleared" or "cleared"

        Returns:
            Transaction ID

        Raises:
            ValidationError: If a field is invalid
            NotFoundError: If account or category doesn't exist
            PreconditionError: If the account is inactive or the category
                doesn't fit the transaction
        """
        amount = parse_money_field(amount, "amount", positive=True, cents=True)
        transaction_type = parse_transaction_type(transaction_type)
        description = parse_description(description)
        try:
            status = TransactionStatus(status)
        except ValueError:
            raise ValidationError("Invalid status.", field="status")
        if status == TransactionStatus.RECONCILED:
            raise ValidationError(
                "Transactions can only be reconciled through a reconciliation session.",
                field="status",
            )

        # Verify account exists
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(errors.account_not_found(account_id))
        if not account.is_active:
            raise PreconditionError(f"Account {account_id} is inactive")

        # Verify category if provided
        if category_id is not None:
            self._check_category(category_id, transaction_type)

        txn_id = self.db.create_transaction(
            account_id=account_id,
            date=date,
            amount=amount,
            transaction_type=transaction_type,
            description=description,
            category_id=category_id,
            status=status,
            cleared_at=datetime.now(UTC) if status == TransactionStatus.CLEARED else None,
        )
        logger.debug("Created transaction %s on account %s", txn_id, account_id)
        return txn_id

    def _check_category(self, category_id: int, transaction_type: TransactionType) -> None:
        category = self.db.get_category(category_id)
        if category is None:
            raise NotFoundError(errors.category_not_found(category_id))
        if not category.is_active:
            raise PreconditionError(f"Category {category_id} is inactive")
        if category.category_type != transaction_type:
            raise PreconditionError(errors.category_type_mismatch(transaction_type.value))

    def get_transaction(self, transaction_id: int) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def set_status(self, transaction_id: int, status: TransactionStatus | str) -> None:
        """Mark a transaction cleared or uncleared.

        Raises:
            ValidationError: If status is not "cleared" or "uncleared"
            NotFoundError: If transaction doesn't exist
            PreconditionError: If the transaction is reconciled
        """
        try:
            status = TransactionStatus(status)
        except ValueError:
            raise ValidationError("Invalid status.", field="status")
        if status == TransactionStatus.RECONCILED:
            raise ValidationError(
                "Transactions can only be reconciled through a reconciliation session.",
                field="status",
            )

        txn = self._get_mutable(transaction_id)
        cleared_at = txn.cleared_at
        if status == TransactionStatus.CLEARED and cleared_at is None:
            cleared_at = datetime.now(UTC)
        elif status == TransactionStatus.UNCLEARED:
            cleared_at = None
        self.db.update_transaction_status(transaction_id, status, cleared_at)

    def update_transaction(
        self,
        transaction_id: int,
        date: Optional[date] = None,
        amount: Optional[MoneyLike] = None,
        description: Optional[str] = None,
        category_id: Optional[int] = None,
    ) -> None:
        """Update transaction fields.

        Only the fields that are given are changed.

        Raises:
            NotFoundError: If transaction or category doesn't exist
            PreconditionError: If the transaction is reconciled
        """
        txn = self._get_mutable(transaction_id)
        if amount is not None:
            amount = parse_money_field(amount, "amount", positive=True, cents=True)
        if description is not None:
            description = parse_description(description)
        if category_id is not None:
            self._check_category(category_id, txn.transaction_type)

        self.db.update_transaction(
            transaction_id=transaction_id,
            date=date,
            amount=amount,
            description=description,
            category_id=category_id,
        )

    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction.

        Args:
            transaction_id: Transaction ID to delete

        Raises:
            NotFoundError: If transaction doesn't exist
            PreconditionError: If the transaction is reconciled
        """
        self._get_mutable(transaction_id)
        self.db.delete_transaction(transaction_id)

    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
        status: Optional[TransactionStatus] = None,
    ) -> list[TransactionEntity]:
        """List transactions with filters, newest first."""
        return self.db.list_transactions(
            start_date=start_date,
            end_date=end_date,
            account_id=account_id,
            status=status,
        )
