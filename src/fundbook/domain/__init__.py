"""Domain layer for fundbook.

The calculation core is exported here. Services that need a database are
imported from their own modules (e.g. ``fundbook.domain.account``).
"""

from fundbook.domain.money import MoneyComparison, compare_money, calculate_fee
from fundbook.domain.balances import (
    AccountBalance,
    account_balances,
    running_balances,
    reconciled_balance,
)
from fundbook.domain.recurrence import (
    add_interval,
    initial_occurrence,
    next_occurrence,
    resume_occurrence,
)
from fundbook.domain.payment_status import payment_status

__all__ = [
    "MoneyComparison",
    "compare_money",
    "calculate_fee",
    "AccountBalance",
    "account_balances",
    "running_balances",
    "reconciled_balance",
    "add_interval",
    "initial_occurrence",
    "next_occurrence",
    "resume_occurrence",
    "payment_status",
]
