"""Input validation for workflow operations.

Each ``validate_*`` function checks raw input (strings from a form or the
command line, or already typed values) and returns a typed input record.
Failures raise ValidationError naming the offending field, before any
calculation or storage access happens.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from fundbook.domain.entities import RecurrenceRule, TransactionType
from fundbook.domain.errors import ValidationError
from fundbook.domain.money import MAX_MONEY, has_cent_precision, to_money
from fundbook.utils.date_parser import parse_date

MAX_DESCRIPTION_LENGTH = 255
MAX_PAYMENT_METHOD_LENGTH = 100


@dataclass(frozen=True)
class CreateReconciliationInput:
    account_id: int
    statement_date: date
    statement_ending_balance: Decimal


@dataclass(frozen=True)
class FinishReconciliationInput:
    session_id: int
    account_id: int
    transaction_ids: list[int]


@dataclass(frozen=True)
class CancelReconciliationInput:
    session_id: int
    account_id: int


@dataclass(frozen=True)
class QuickTransactionInput:
    session_id: int
    account_id: int
    transaction_date: date
    description: str
    amount: Decimal
    transaction_type: TransactionType
    category_id: int


@dataclass(frozen=True)
class TemplateInput:
    account_id: int
    transaction_type: TransactionType
    amount: Decimal
    description: str
    rule: RecurrenceRule
    start_date: date
    end_date: Optional[date]
    category_id: Optional[int]


@dataclass(frozen=True)
class EnrollmentInput:
    season_id: int
    student_ids: list[int]
    fee_amount: Optional[Decimal]


@dataclass(frozen=True)
class PaymentInput:
    enrollment_id: int
    payment_date: date
    amount: Decimal
    payment_method: Optional[str]


def parse_reference(value: Any, field: str) -> int:
    """Parse an entity reference (a positive integer ID)."""
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {field.replace('_', ' ')}.", field=field)
    if isinstance(value, int):
        reference = value
    else:
        text = str(value).strip() if value is not None else ""
        if not text.isdigit():
            raise ValidationError(f"Invalid {field.replace('_', ' ')}.", field=field)
        reference = int(text)
    if reference <= 0:
        raise ValidationError(f"Invalid {field.replace('_', ' ')}.", field=field)
    return reference


def parse_reference_list(value: Any, field: str) -> list[int]:
    """Parse a comma separated list of references, ignoring empty segments.

    Lists and tuples of references are accepted as well.
    """
    if isinstance(value, (list, tuple, set)):
        parts = list(value)
    else:
        parts = [p for p in (str(value or "")).split(",") if p.strip()]
    if not parts:
        raise ValidationError("At least one transaction must be selected.", field=field)
    return [parse_reference(p, field) for p in parts]


def parse_money_field(
    value: Any, field: str, *, positive: bool = False, non_negative: bool = False, cents: bool = False
) -> Decimal:
    """Parse a money amount for a named field."""
    label = field.replace("_", " ").capitalize()
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{label} is required.", field=field)
    try:
        amount = to_money(value)
    except ValueError:
        raise ValidationError(f"{label} must be a number.", field=field)
    if abs(amount) >= MAX_MONEY:
        raise ValidationError(f"{label} is too large.", field=field)
    if positive and amount <= 0:
        raise ValidationError(f"{label} must be greater than zero.", field=field)
    if non_negative and amount < 0:
        raise ValidationError(f"{label} must be zero or greater.", field=field)
    if cents and not has_cent_precision(amount):
        raise ValidationError(f"{label} must have at most 2 decimal places.", field=field)
    return amount


def parse_date_field(value: Any, field: str, required: bool = True) -> Optional[date]:
    """Parse a date for a named field. Empty optional dates become None."""
    label = field.replace("_", " ").capitalize()
    if isinstance(value, date):
        return value
    if value is None or not str(value).strip():
        if required:
            raise ValidationError(f"{label} is required.", field=field)
        return None
    try:
        return parse_date(str(value))
    except ValueError as e:
        raise ValidationError(f"{label} is invalid: {e}", field=field)


def parse_description(value: Any, field: str = "description") -> str:
    text = str(value).strip() if value is not None else ""
    if not text:
        raise ValidationError("Description is required.", field=field)
    if len(text) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(
            f"Description must be {MAX_DESCRIPTION_LENGTH} characters or fewer.", field=field
        )
    return text


def parse_transaction_type(value: Any, field: str = "transaction_type") -> TransactionType:
    try:
        return TransactionType(value)
    except ValueError:
        raise ValidationError("Invalid transaction type.", field=field)


def parse_recurrence_rule(value: Any, field: str = "rule") -> RecurrenceRule:
    try:
        return RecurrenceRule(value)
    except ValueError:
        raise ValidationError("Invalid recurrence rule.", field=field)


def validate_create_reconciliation(
    account_id: Any, statement_date: Any, statement_ending_balance: Any
) -> CreateReconciliationInput:
    """Validate input for opening a reconciliation session.

    The statement ending balance may be any sign.
    """
    return CreateReconciliationInput(
        account_id=parse_reference(account_id, "account_id"),
        statement_date=parse_date_field(statement_date, "statement_date"),
        statement_ending_balance=parse_money_field(
            statement_ending_balance, "statement_ending_balance"
        ),
    )


def validate_finish_reconciliation(
    session_id: Any, account_id: Any, transaction_ids: Any
) -> FinishReconciliationInput:
    """Validate input for finishing a reconciliation session."""
    return FinishReconciliationInput(
        session_id=parse_reference(session_id, "session_id"),
        account_id=parse_reference(account_id, "account_id"),
        transaction_ids=parse_reference_list(transaction_ids, "transaction_ids"),
    )


def validate_cancel_reconciliation(session_id: Any, account_id: Any) -> CancelReconciliationInput:
    return CancelReconciliationInput(
        session_id=parse_reference(session_id, "session_id"),
        account_id=parse_reference(account_id, "account_id"),
    )


def validate_quick_transaction(
    session_id: Any,
    account_id: Any,
    transaction_date: Any,
    description: Any,
    amount: Any,
    transaction_type: Any,
    category_id: Any,
) -> QuickTransactionInput:
    """Validate a transaction added from within a reconciliation session."""
    if category_id is None or (isinstance(category_id, str) and not category_id.strip()):
        raise ValidationError("Category is required.", field="category_id")
    return QuickTransactionInput(
        session_id=parse_reference(session_id, "session_id"),
        account_id=parse_reference(account_id, "account_id"),
        transaction_date=parse_date_field(transaction_date, "transaction_date"),
        description=parse_description(description),
        amount=parse_money_field(amount, "amount", positive=True, cents=True),
        transaction_type=parse_transaction_type(transaction_type),
        category_id=parse_reference(category_id, "category_id"),
    )


def validate_template(
    account_id: Any,
    transaction_type: Any,
    amount: Any,
    description: Any,
    rule: Any,
    start_date: Any,
    end_date: Any = None,
    category_id: Any = None,
) -> TemplateInput:
    """Validate input for creating or updating a recurring template."""
    has_category = category_id is not None and str(category_id).strip() != ""
    return TemplateInput(
        account_id=parse_reference(account_id, "account_id"),
        transaction_type=parse_transaction_type(transaction_type),
        amount=parse_money_field(amount, "amount", positive=True, cents=True),
        description=parse_description(description),
        rule=parse_recurrence_rule(rule),
        start_date=parse_date_field(start_date, "start_date"),
        end_date=parse_date_field(end_date, "end_date", required=False),
        category_id=parse_reference(category_id, "category_id") if has_category else None,
    )


def validate_payment(
    enrollment_id: Any, payment_date: Any, amount: Any, payment_method: Any = None
) -> PaymentInput:
    """Validate a payment against an enrollment."""
    method = (payment_method or "").strip() or None
    if method is not None and len(method) > MAX_PAYMENT_METHOD_LENGTH:
        raise ValidationError(
            f"Payment method must be {MAX_PAYMENT_METHOD_LENGTH} characters or fewer.",
            field="payment_method",
        )
    return PaymentInput(
        enrollment_id=parse_reference(enrollment_id, "enrollment_id"),
        payment_date=parse_date_field(payment_date, "payment_date"),
        amount=parse_money_field(amount, "amount", positive=True, cents=True),
        payment_method=method,
    )


def validate_enrollments(season_id: Any, student_ids: Any, fee_amount: Any = None) -> EnrollmentInput:
    """Validate a batch enrollment. The fee defaults to the season's when omitted."""
    if isinstance(student_ids, (list, tuple, set)):
        has_students = bool(student_ids)
    else:
        has_students = any(p.strip() for p in str(student_ids or "").split(","))
    if not has_students:
        raise ValidationError("At least one student is required.", field="student_ids")

    fee = None
    if fee_amount is not None and str(fee_amount).strip():
        fee = parse_money_field(fee_amount, "fee_amount", non_negative=True, cents=True)
    return EnrollmentInput(
        season_id=parse_reference(season_id, "season_id"),
        student_ids=parse_reference_list(student_ids, "student_ids"),
        fee_amount=fee,
    )
