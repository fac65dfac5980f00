"""Domain model entities for fundbook.

These are pure data classes representing bookkeeping concepts, independent
of the database schema. Calculations in the domain layer take and return
these records; persisting them is the job of the database layer.
"""

from dataclasses import dataclass
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionType(str, Enum):
    """Direction of a transaction."""

    INCOME = "income"
    EXPENSE = "expense"


class TransactionStatus(str, Enum):
    """Clearing status of a transaction."""

    UNCLEARED = "uncleared"
    CLEARED = "cleared"
    RECONCILED = "reconciled"


class SessionStatus(str, Enum):
    """Lifecycle status of a reconciliation session."""

    IN_PROGRESS = "in_progress"
    FINISHED = "finished"
    CANCELLED = "cancelled"


class RecurrenceRule(str, Enum):
    """Interval at which a recurring template fires."""

    WEEKLY = "weekly"
    BI_WEEKLY = "bi-weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUALLY = "annually"


class PaymentStatus(str, Enum):
    """Derived payment status of an enrollment."""

    UNPAID = "unpaid"
    PARTIAL = "partial"
    PAID = "paid"
    OVERPAID = "overpaid"


@dataclass(frozen=True)
class Account:
    """Bank account domain entity."""

    id: int
    name: str
    account_type: str
    opening_balance: Optional[Decimal]
    is_active: bool
    created_at: datetime
    fee_percentage: Optional[Decimal] = None
    fee_flat_amount: Optional[Decimal] = None
    fee_category_id: Optional[int] = None


@dataclass(frozen=True)
class Category:
    """Income or expense category domain entity.

    A category may sit under a parent of the same type.
    """

    id: int
    name: str
    category_type: TransactionType
    is_active: bool
    created_at: datetime
    parent_id: Optional[int] = None


@dataclass(frozen=True)
class CategoryTreeNode:
    """A category with its subcategories, for tree views."""

    category: Category
    children: tuple["CategoryTreeNode", ...] = ()


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity.

    ``amount`` is always non-negative; ``transaction_type`` gives the sign.
    """

    id: int
    account_id: int
    date: date
    amount: Decimal
    transaction_type: TransactionType
    status: TransactionStatus
    description: Optional[str] = None
    category_id: Optional[int] = None
    reconciliation_session_id: Optional[int] = None
    template_id: Optional[int] = None
    cleared_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def signed_amount(self) -> Decimal:
        """Amount with income positive and expense negative."""
        if self.transaction_type == TransactionType.INCOME:
            return self.amount
        return -self.amount

    @property
    def is_reconciled(self) -> bool:
        return self.status == TransactionStatus.RECONCILED


@dataclass(frozen=True)
class NewTransaction:
    """Transaction computed by the domain layer but not stored yet."""

    account_id: int
    date: date
    amount: Decimal
    transaction_type: TransactionType
    description: str
    category_id: Optional[int] = None
    template_id: Optional[int] = None
    status: TransactionStatus = TransactionStatus.UNCLEARED


@dataclass(frozen=True)
class ReconciliationSession:
    """Reconciliation session domain entity.

    ``starting_balance`` is a snapshot taken when the session is opened and
    is never recomputed afterwards.
    """

    id: Optional[int]
    account_id: int
    statement_date: date
    statement_ending_balance: Decimal
    starting_balance: Decimal
    status: SessionStatus
    finished_at: Optional[datetime] = None
    transaction_count: int = 0
    created_at: Optional[datetime] = None

    @property
    def is_in_progress(self) -> bool:
        return self.status == SessionStatus.IN_PROGRESS


@dataclass(frozen=True)
class RecurringTemplate:
    """Recurring transaction template domain entity.

    A template with ``is_active`` False is paused and has no next occurrence.
    """

    id: int
    account_id: int
    transaction_type: TransactionType
    amount: Decimal
    description: str
    rule: RecurrenceRule
    start_date: date
    end_date: Optional[date]
    next_occurrence_date: Optional[date]
    is_active: bool
    category_id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Season:
    """Fee-based program season domain entity."""

    id: int
    name: str
    fee_amount: Decimal
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Student:
    """Student domain entity."""

    id: int
    name: str
    guardian_name: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Enrollment:
    """Enrollment of a student in a season at a given fee."""

    id: int
    season_id: int
    student_id: int
    fee_amount: Decimal
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Payment:
    """Payment recorded against an enrollment."""

    id: int
    enrollment_id: int
    payment_date: date
    amount: Decimal
    payment_method: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class CategoryTotal:
    """Total of one category within a summary group."""

    name: str
    total: Decimal


@dataclass(frozen=True)
class CategoryGroup:
    """Totals of a top-level category and the categories below it.

    Amounts booked on the top-level category itself appear as a child
    named "(root)".
    """

    parent_name: str
    children: tuple[CategoryTotal, ...]
    subtotal: Decimal


@dataclass(frozen=True)
class SummaryReport:
    """Income and expense totals over a date range."""

    start_date: Optional[date]
    end_date: Optional[date]
    total_income: Decimal
    total_expenses: Decimal
    balance_by_status: dict[TransactionStatus, Decimal]
    income_by_category: tuple[CategoryGroup, ...]
    expenses_by_category: tuple[CategoryGroup, ...]
    transaction_count: int

    @property
    def net_change(self) -> Decimal:
        return self.total_income - self.total_expenses
