"""Tests for workflow input validation."""

import pytest
from datetime import date
from decimal import Decimal

from fundbook.domain.entities import RecurrenceRule, TransactionType
from fundbook.domain.errors import ValidationError
from fundbook.domain.validation import (
    parse_money_field,
    parse_reference,
    parse_reference_list,
    validate_create_reconciliation,
    validate_enrollments,
    validate_finish_reconciliation,
    validate_payment,
    validate_quick_transaction,
    validate_template,
)


class TestParseReference:
    @pytest.mark.parametrize("value", [1, "1", " 42 "])
    def test_valid(self, value):
        assert parse_reference(value, "account_id") == int(str(value).strip())

    @pytest.mark.parametrize("value", [0, -3, "abc", "", None, True, "1.5"])
    def test_invalid(self, value):
        with pytest.raises(ValidationError) as exc_info:
            parse_reference(value, "account_id")
        assert exc_info.value.field == "account_id"
        assert str(exc_info.value) == "Invalid account id."

    def test_list_ignores_empty_segments(self):
        assert parse_reference_list("3,,4, ", "transaction_ids") == [3, 4]

    def test_list_accepts_sequences(self):
        assert parse_reference_list([5, "6"], "transaction_ids") == [5, 6]

    def test_empty_list(self):
        with pytest.raises(ValidationError, match="At least one transaction"):
            parse_reference_list(" , ", "transaction_ids")


class TestCreateReconciliation:
    def test_valid(self):
        data = validate_create_reconciliation("1", "2024-01-31", "-25.10")
        assert data.account_id == 1
        assert data.statement_date == date(2024, 1, 31)
        assert data.statement_ending_balance == Decimal("-25.10")

    def test_missing_statement_date(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_create_reconciliation(1, "", "10")
        assert exc_info.value.field == "statement_date"

    def test_bad_balance(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_create_reconciliation(1, "2024-01-31", "lots")
        assert exc_info.value.field == "statement_ending_balance"

    def test_balance_too_large(self):
        with pytest.raises(ValidationError, match="too large") as exc_info:
            validate_create_reconciliation(1, "2024-01-31", "1e27")
        assert exc_info.value.field == "statement_ending_balance"


class TestFinishReconciliation:
    def test_valid(self):
        data = validate_finish_reconciliation(2, 1, "7,8")
        assert data.transaction_ids == [7, 8]

    def test_nothing_selected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_finish_reconciliation(2, 1, [])
        assert exc_info.value.field == "transaction_ids"


class TestQuickTransaction:
    def valid_args(self, **overrides):
        args = dict(
            session_id=1,
            account_id=1,
            transaction_date="2024-01-15",
            description="Bank fee",
            amount="2.50",
            transaction_type="expense",
            category_id=3,
        )
        args.update(overrides)
        return args

    def test_valid(self):
        data = validate_quick_transaction(**self.valid_args())
        assert data.amount == Decimal("2.50")
        assert data.transaction_type == TransactionType.EXPENSE
        assert data.category_id == 3

    def test_category_required(self):
        with pytest.raises(ValidationError, match="Category is required."):
            validate_quick_transaction(**self.valid_args(category_id=None))

    @pytest.mark.parametrize("amount", ["0", "-5", "1.005", "1e27", "10000000000.00"])
    def test_amount_rejected(self, amount):
        with pytest.raises(ValidationError) as exc_info:
            validate_quick_transaction(**self.valid_args(amount=amount))
        assert exc_info.value.field == "amount"

    def test_amount_must_be_positive_message(self):
        with pytest.raises(ValidationError, match="Amount must be greater than zero."):
            validate_quick_transaction(**self.valid_args(amount="0"))

    def test_blank_description(self):
        with pytest.raises(ValidationError, match="Description is required."):
            validate_quick_transaction(**self.valid_args(description="   "))

    def test_long_description(self):
        with pytest.raises(ValidationError, match="255 characters"):
            validate_quick_transaction(**self.valid_args(description="x" * 256))

    def test_bad_type(self):
        with pytest.raises(ValidationError, match="Invalid transaction type."):
            validate_quick_transaction(**self.valid_args(transaction_type="transfer"))


class TestTemplate:
    def test_valid(self):
        data = validate_template(1, "income", "50", "Dues", "monthly", "2024-01-31")
        assert data.rule == RecurrenceRule.MONTHLY
        assert data.end_date is None
        assert data.category_id is None

    def test_bad_rule(self):
        with pytest.raises(ValidationError, match="Invalid recurrence rule."):
            validate_template(1, "income", "50", "Dues", "daily", "2024-01-31")


class TestPayment:
    def test_blank_method_becomes_none(self):
        data = validate_payment(1, "2024-03-01", "75", "  ")
        assert data.payment_method is None
        assert data.amount == Decimal("75")

    def test_zero_amount(self):
        with pytest.raises(ValidationError):
            validate_payment(1, "2024-03-01", "0")


class TestEnrollments:
    def test_fee_optional(self):
        data = validate_enrollments(1, "3,4")
        assert data.student_ids == [3, 4]
        assert data.fee_amount is None

    def test_fee_parsed(self):
        assert validate_enrollments(1, [3], "0").fee_amount == Decimal("0")

    def test_negative_fee(self):
        with pytest.raises(ValidationError):
            validate_enrollments(1, [3], "-1")

    def test_no_students(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_enrollments(1, "")
        assert exc_info.value.field == "student_ids"


def test_largest_storable_amount():
    assert parse_money_field("9999999999.99", "amount", positive=True, cents=True) == Decimal("9999999999.99")
