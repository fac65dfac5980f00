"""Account domain service."""

import logging
from decimal import Decimal
from typing import Optional

from fundbook.database.base import Database
from fundbook.domain import errors
from fundbook.domain.balances import AccountBalance, account_balances, running_balances
from fundbook.domain.entities import Account as AccountEntity
from fundbook.domain.errors import ConflictError, DependencyError, NotFoundError, ValidationError
from fundbook.domain.money import ZERO, MoneyLike, to_money
from fundbook.domain.validation import parse_money_field

logger = logging.getLogger(__name__)

ACCOUNT_TYPES = ("checking", "savings", "paypal", "cash", "other")


class AccountService:
    """Service for managing accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self,
        name: str,
        account_type: str = "checking",
        opening_balance: Optional[MoneyLike] = None,
        fee_percentage: Optional[MoneyLike] = None,
        fee_flat_amount: Optional[MoneyLike] = None,
        fee_category_id: Optional[int] = None,
    ) -> int:
        """Create a new account.

        Args:
            name: Account name
            account_type: One of ACCOUNT_TYPES
            opening_balance: Balance before the first transaction (default 0)
            fee_percentage: Optional processing fee percentage (0-100)
            fee_flat_amount: Optional flat processing fee
            fee_category_id: Expense category for processing fees

        Returns:
            Account ID

        Raises:
            ValidationError: If any field is invalid
            ConflictError: If account name already exists
        """
        name = name.strip()
        if not name:
            raise ValidationError("Account name is required.", field="name")
        if account_type not in ACCOUNT_TYPES:
            raise ValidationError("Invalid account type.", field="account_type")

        balance = parse_money_field(
            opening_balance if opening_balance is not None else ZERO, "opening_balance", cents=True
        )
        if balance < 0:
            raise ValidationError("Opening balance cannot be negative.", field="opening_balance")

        percentage = to_money(fee_percentage) if fee_percentage is not None else None
        flat = (
            parse_money_field(fee_flat_amount, "fee_flat_amount", cents=True)
            if fee_flat_amount is not None
            else None
        )
        if percentage is not None and not (0 <= percentage <= 100):
            raise ValidationError("Fee percentage must be between 0 and 100.", field="fee_percentage")
        if flat is not None and flat < 0:
            raise ValidationError("Fee flat amount cannot be negative.", field="fee_flat_amount")
        has_fee = (percentage or 0) > 0 or (flat or 0) > 0
        if has_fee and fee_category_id is None:
            raise ValidationError(
                "Fee category is required when a fee percentage or flat amount is set.",
                field="fee_category_id",
            )
        if fee_category_id is not None and self.db.get_category(fee_category_id) is None:
            raise NotFoundError(errors.category_not_found(fee_category_id))

        # Check if account with same name exists
        for acc in self.db.list_accounts():
            if acc.name == name:
                raise ConflictError(f"Account with name '{name}' already exists")

        account_id = self.db.create_account(
            name=name,
            account_type=account_type,
            opening_balance=balance,
            fee_percentage=percentage,
            fee_flat_amount=flat,
            fee_category_id=fee_category_id,
        )
        logger.info("Created account %s (%s)", account_id, name)
        return account_id

    def get_account(self, account_id: int) -> Optional[AccountEntity]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def list_accounts(self, include_inactive: bool = False) -> list[AccountEntity]:
        """List accounts, active ones only unless include_inactive is set."""
        accounts = self.db.list_accounts()
        if include_inactive:
            return accounts
        return [acc for acc in accounts if acc.is_active]

    def deactivate_account(self, account_id: int) -> None:
        """Mark an account inactive. Its history is kept."""
        if self.db.get_account(account_id) is None:
            raise NotFoundError(errors.account_not_found(account_id))
        self.db.set_account_active(account_id, False)

    def delete_account(self, account_id: int) -> None:
        """Delete an account that has no transactions.

        Raises:
            NotFoundError: If account not found
            DependencyError: If the account has transactions
        """
        if self.db.get_account(account_id) is None:
            raise NotFoundError(errors.account_not_found(account_id))

        transaction_count = self.db.get_account_transaction_count(account_id)
        if transaction_count > 0:
            raise DependencyError(errors.account_delete_blocked(account_id, transaction_count))

        self.db.delete_account(account_id)

    def get_balances(self, include_inactive: bool = False) -> dict[int, AccountBalance]:
        """Compute balances for all listed accounts."""
        accounts = self.list_accounts(include_inactive=include_inactive)
        return account_balances(accounts, self.db.list_transactions())

    def get_register(self, account_id: int) -> list[tuple]:
        """Return the account register in chronological order.

        Returns:
            List of (transaction, balance after transaction) tuples
        """
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(errors.account_not_found(account_id))

        # Storage lists newest first
        transactions = list(reversed(self.db.list_transactions(account_id=account_id)))
        balances = running_balances(account.opening_balance, transactions)
        return [(txn, balances[txn.id]) for txn in transactions]

    def get_current_balance(self, account_id: int) -> Decimal:
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(errors.account_not_found(account_id))
        balances = account_balances([account], self.db.list_transactions(account_id=account_id))
        return balances[account_id].current_balance
