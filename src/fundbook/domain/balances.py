"""Balance calculations over accounts and their transactions."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Optional

from fundbook.domain.entities import Account, Transaction, TransactionStatus, TransactionType
from fundbook.domain.money import ZERO, MoneyLike, to_money


@dataclass
class AccountBalance:
    """Aggregated balance of one account.

    ``status_net`` holds the signed net of the account's transactions for
    each clearing status.
    """

    current_balance: Decimal
    total_income: Decimal = ZERO
    total_expense: Decimal = ZERO
    status_net: dict[TransactionStatus, Decimal] = field(
        default_factory=lambda: {status: ZERO for status in TransactionStatus}
    )


def apply_transaction(balance: Decimal, txn: Transaction) -> Decimal:
    """Return the balance after applying one transaction."""
    if txn.transaction_type == TransactionType.INCOME:
        return balance + txn.amount
    return balance - txn.amount


def account_balances(
    accounts: Iterable[Account], transactions: Iterable[Transaction]
) -> dict[int, AccountBalance]:
    """Compute the balance of each account.

    Transactions for accounts not in ``accounts`` are skipped, so callers may
    pass a filtered subset of accounts with the full transaction list.

    Returns:
        Mapping of account ID to AccountBalance
    """
    result: dict[int, AccountBalance] = {}
    for account in accounts:
        result[account.id] = AccountBalance(current_balance=to_money(account.opening_balance))

    for txn in transactions:
        entry = result.get(txn.account_id)
        if entry is None:
            continue

        if txn.transaction_type == TransactionType.INCOME:
            entry.total_income += txn.amount
            entry.current_balance += txn.amount
        else:
            entry.total_expense += txn.amount
            entry.current_balance -= txn.amount

        entry.status_net[txn.status] += txn.signed_amount

    return result


def running_balances(
    opening_balance: Optional[MoneyLike], transactions: Iterable[Transaction]
) -> dict[int, Decimal]:
    """Compute the balance after each transaction.

    Transactions must already be in chronological order; they are not
    sorted here. A transaction ID seen twice keeps the later balance.
    """
    result: dict[int, Decimal] = {}
    balance = to_money(opening_balance)
    for txn in transactions:
        balance = apply_transaction(balance, txn)
        result[txn.id] = balance
    return result


def reconciled_balance(
    opening_balance: Optional[MoneyLike], transactions: Iterable[Transaction]
) -> Decimal:
    """Balance of the opening amount plus reconciled transactions only.

    This is the balance as of the last finished reconciliation and seeds the
    starting balance of the next session.
    """
    balance = to_money(opening_balance)
    for txn in transactions:
        if txn.status == TransactionStatus.RECONCILED:
            balance = apply_transaction(balance, txn)
    return balance
