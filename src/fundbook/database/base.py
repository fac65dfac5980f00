"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional, Sequence
from datetime import date, datetime
from decimal import Decimal

# Import entities directly, not through fundbook.domain services
from fundbook.domain.entities import (
    Account,
    Category,
    Enrollment,
    NewTransaction,
    Payment,
    ReconciliationSession,
    RecurrenceRule,
    RecurringTemplate,
    Season,
    SessionStatus,
    Student,
    Transaction,
    TransactionStatus,
    TransactionType,
)


class Database(ABC):
    """Abstract database interface for fundbook."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        name: str,
        account_type: str,
        opening_balance: Decimal,
        fee_percentage: Optional[Decimal] = None,
        fee_flat_amount: Optional[Decimal] = None,
        fee_category_id: Optional[int] = None,
    ) -> int:
        """Create a new account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def list_accounts(self) -> list[Account]:
        """List all accounts."""
        pass

    @abstractmethod
    def set_account_active(self, account_id: int, is_active: bool) -> None:
        pass

    @abstractmethod
    def delete_account(self, account_id: int) -> None:
        pass

    @abstractmethod
    def get_account_transaction_count(self, account_id: int) -> int:
        pass

    # Category operations
    @abstractmethod
    def create_category(
        self, name: str, category_type: TransactionType, parent_id: Optional[int] = None
    ) -> int:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def get_category_by_name(self, name: str, category_type: TransactionType) -> Optional[Category]:
        pass

    @abstractmethod
    def get_category_by_path(
        self, path: str, category_type: Optional[TransactionType] = None
    ) -> Optional[Category]:
        """Get category by path (e.g., "Dues > Youth")."""
        pass

    @abstractmethod
    def list_categories(self, category_type: Optional[TransactionType] = None) -> list[Category]:
        """List categories, optionally filtered by type."""
        pass

    @abstractmethod
    def set_category_active(self, category_id: int, is_active: bool) -> None:
        pass

    @abstractmethod
    def set_category_parent(self, category_id: int, parent_id: Optional[int]) -> None:
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        account_id: int,
        date: date,
        amount: Decimal,
        transaction_type: TransactionType,
        description: Optional[str] = None,
        category_id: Optional[int] = None,
        status: TransactionStatus = TransactionStatus.UNCLEARED,
        reconciliation_session_id: Optional[int] = None,
        template_id: Optional[int] = None,
        cleared_at: Optional[datetime] = None,
    ) -> int:
        """Create a transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def get_transactions(self, transaction_ids: Sequence[int]) -> list[Transaction]:
        """Get the transactions with the given IDs. Unknown IDs are left out."""
        pass

    @abstractmethod
    def update_transaction(
        self,
        transaction_id: int,
        date: Optional[date] = None,
        amount: Optional[Decimal] = None,
        description: Optional[str] = None,
        category_id: Optional[int] = None,
    ) -> None:
        """Update the given transaction fields."""
        pass

    @abstractmethod
    def update_transaction_status(
        self, transaction_id: int, status: TransactionStatus, cleared_at: Optional[datetime]
    ) -> None:
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int) -> None:
        pass

    @abstractmethod
    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
        status: Optional[TransactionStatus] = None,
    ) -> list[Transaction]:
        """List transactions with optional filters, newest first."""
        pass

    # Reconciliation operations
    @abstractmethod
    def create_reconciliation_session(self, session: ReconciliationSession) -> int:
        """Store a new in-progress session. Returns session ID.

        Raises:
            ConflictError: If the account already has a session in progress
        """
        pass

    @abstractmethod
    def get_reconciliation_session(self, session_id: int) -> Optional[ReconciliationSession]:
        pass

    @abstractmethod
    def get_in_progress_session(self, account_id: int) -> Optional[ReconciliationSession]:
        pass

    @abstractmethod
    def list_reconciliation_sessions(self, account_id: int) -> list[ReconciliationSession]:
        pass

    @abstractmethod
    def update_reconciliation_session_status(self, session_id: int, status: SessionStatus) -> None:
        pass

    @abstractmethod
    def finish_reconciliation(
        self, session: ReconciliationSession, transactions: Sequence[Transaction]
    ) -> None:
        """Write a finished session and its reconciled transactions atomically."""
        pass

    # Recurring template operations
    @abstractmethod
    def create_template(
        self,
        account_id: int,
        transaction_type: TransactionType,
        amount: Decimal,
        description: str,
        rule: RecurrenceRule,
        start_date: date,
        end_date: Optional[date],
        next_occurrence_date: Optional[date],
        category_id: Optional[int] = None,
    ) -> int:
        pass

    @abstractmethod
    def get_template(self, template_id: int) -> Optional[RecurringTemplate]:
        pass

    @abstractmethod
    def list_templates(self, account_id: Optional[int] = None) -> list[RecurringTemplate]:
        pass

    @abstractmethod
    def update_template_schedule(
        self,
        template_id: int,
        rule: RecurrenceRule,
        start_date: date,
        end_date: Optional[date],
        next_occurrence_date: Optional[date],
    ) -> None:
        pass

    @abstractmethod
    def set_template_state(
        self, template_id: int, is_active: bool, next_occurrence_date: Optional[date]
    ) -> None:
        pass

    @abstractmethod
    def materialize_template(
        self,
        template_id: int,
        transactions: Sequence[NewTransaction],
        next_occurrence_date: Optional[date],
        is_active: bool,
    ) -> list[int]:
        """Create a template's transactions and advance it atomically.

        Returns the IDs of the created transactions.
        """
        pass

    # Season operations
    @abstractmethod
    def create_season(
        self, name: str, fee_amount: Decimal, start_date: Optional[date], end_date: Optional[date]
    ) -> int:
        pass

    @abstractmethod
    def get_season(self, season_id: int) -> Optional[Season]:
        pass

    @abstractmethod
    def list_seasons(self) -> list[Season]:
        pass

    @abstractmethod
    def create_student(self, name: str, guardian_name: Optional[str] = None) -> int:
        pass

    @abstractmethod
    def get_student(self, student_id: int) -> Optional[Student]:
        pass

    @abstractmethod
    def list_students(self) -> list[Student]:
        pass

    @abstractmethod
    def create_enrollments(
        self, season_id: int, enrollments: Sequence[tuple[int, Decimal]]
    ) -> list[int]:
        """Create (student_id, fee_amount) enrollments atomically.

        Raises:
            ConflictError: If a student is already enrolled in the season
        """
        pass

    @abstractmethod
    def get_enrollment(self, enrollment_id: int) -> Optional[Enrollment]:
        pass

    @abstractmethod
    def list_enrollments(self, season_id: int) -> list[Enrollment]:
        pass

    @abstractmethod
    def create_payment(
        self,
        enrollment_id: int,
        payment_date: date,
        amount: Decimal,
        payment_method: Optional[str] = None,
    ) -> int:
        pass

    @abstractmethod
    def list_payments(self, enrollment_id: int) -> list[Payment]:
        pass
