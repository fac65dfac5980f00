"""Shared domain error messages and error types."""

from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic.

    The ``field`` attribute names the offending input when the error
    belongs to a single field.
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class PreconditionError(DomainError):
    """Operation not allowed in the current state of the data."""


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def category_not_found(category_id: int) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def session_not_found(session_id: int) -> str:
    """Return message for missing reconciliation session."""
    return f"Reconciliation session {session_id} not found"


def template_not_found(template_id: int) -> str:
    """Return message for missing recurring template."""
    return f"Template {template_id} not found"


def season_not_found(season_id: int) -> str:
    return f"Season {season_id} not found"


def student_not_found(student_id: int) -> str:
    return f"Student {student_id} not found"


def enrollment_not_found(enrollment_id: int) -> str:
    return f"Enrollment {enrollment_id} not found"


def session_not_in_progress(session_id: Optional[int]) -> str:
    """Return message when a session has already been finished or cancelled."""
    return f"Reconciliation session {session_id} is no longer in progress"


def transaction_reconciled(transaction_id: int) -> str:
    """Return message when a reconciled transaction would be changed."""
    return f"Transaction {transaction_id} is reconciled and cannot be changed"


def category_type_mismatch(transaction_type: str) -> str:
    return f"Category type must match transaction type ({transaction_type})"


def account_delete_blocked(account_id: int, transaction_count: int) -> str:
    """Return message when account has dependent transactions."""
    return (
        f"Cannot delete account {account_id}: it has "
        f"{transaction_count} transaction{'s' if transaction_count != 1 else ''}. "
        "Please delete them first."
    )
