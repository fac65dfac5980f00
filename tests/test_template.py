"""Tests for recurring templates."""

import pytest
from datetime import date
from decimal import Decimal

from conftest import make_account
from fundbook.domain.entities import (
    Category,
    RecurrenceRule,
    RecurringTemplate,
    TransactionStatus,
    TransactionType,
)
from fundbook.domain.errors import NotFoundError, PreconditionError, ValidationError
from fundbook.domain.template import build_occurrence_transactions


@pytest.fixture
def fee_account(account_service, category_service):
    fee_category = category_service.create_category("Processing Fees", "expense")
    account_id = account_service.create_account(
        "PayPal",
        "paypal",
        fee_percentage="2.9",
        fee_flat_amount="0.30",
        fee_category_id=fee_category,
    )
    return account_id, fee_category


def make_template(**overrides):
    fields = dict(
        id=1,
        account_id=1,
        transaction_type=TransactionType.INCOME,
        amount=Decimal("100.00"),
        description="Dues",
        rule=RecurrenceRule.MONTHLY,
        start_date=date(2024, 1, 15),
        end_date=None,
        next_occurrence_date=date(2024, 2, 15),
        is_active=True,
    )
    fields.update(overrides)
    return RecurringTemplate(**fields)


class TestBuildOccurrenceTransactions:
    def test_plain_occurrence(self):
        drafts = build_occurrence_transactions(make_template(), make_account())
        assert len(drafts) == 1
        assert drafts[0].date == date(2024, 2, 15)
        assert drafts[0].amount == Decimal("100.00")
        assert drafts[0].template_id == 1
        assert drafts[0].status == TransactionStatus.UNCLEARED

    def test_income_with_fee(self):
        account = make_account(fee_percentage=Decimal("2.9"), fee_flat_amount=Decimal("0.30"), fee_category_id=7)
        category = Category(7, "Fees", TransactionType.EXPENSE, True, None)
        drafts = build_occurrence_transactions(make_template(), account, category)

        assert len(drafts) == 2
        fee = drafts[1]
        assert fee.transaction_type == TransactionType.EXPENSE
        assert fee.amount == Decimal("3.20")
        assert fee.category_id == 7
        assert fee.description == "Processing fee: Dues"

    def test_expense_has_no_fee(self):
        account = make_account(fee_percentage=Decimal("2.9"), fee_category_id=7)
        category = Category(7, "Fees", TransactionType.EXPENSE, True, None)
        template = make_template(transaction_type=TransactionType.EXPENSE)
        assert len(build_occurrence_transactions(template, account, category)) == 1

    def test_inactive_fee_category_skips_fee(self):
        account = make_account(fee_percentage=Decimal("2.9"), fee_category_id=7)
        category = Category(7, "Fees", TransactionType.EXPENSE, False, None)
        assert len(build_occurrence_transactions(make_template(), account, category)) == 1

    def test_no_pending_occurrence(self):
        with pytest.raises(PreconditionError):
            build_occurrence_transactions(make_template(next_occurrence_date=None), make_account())


class TestTemplateService:
    def test_create_sets_first_occurrence(self, sample_account, template_service):
        template_id = template_service.create_template(
            sample_account.id, "expense", "120.00", "Field rental", "monthly", "2024-01-31"
        )
        template = template_service.get_template(template_id)
        assert template.next_occurrence_date == date(2024, 1, 31)
        assert template.rule == RecurrenceRule.MONTHLY
        assert template.is_active

    def test_create_with_end_before_start(self, sample_account, template_service):
        template_id = template_service.create_template(
            sample_account.id, "expense", "10", "Never", "weekly", "2024-03-01", end_date="2024-02-01"
        )
        assert template_service.get_template(template_id).next_occurrence_date is None

    def test_create_validates(self, sample_account, template_service):
        with pytest.raises(ValidationError):
            template_service.create_template(sample_account.id, "expense", "0", "Zero", "monthly", "2024-01-01")

    def test_create_unknown_account(self, temp_db, template_service):
        with pytest.raises(NotFoundError):
            template_service.create_template(42, "expense", "10", "Rent", "monthly", "2024-01-01")

    def test_create_wrong_category_type(self, sample_account, sample_categories, template_service):
        with pytest.raises(PreconditionError):
            template_service.create_template(
                sample_account.id, "expense", "10", "Rent", "monthly", "2024-01-01",
                category_id=sample_categories["Dues"],
            )

    def test_generate_advances_with_month_end_clamp(self, sample_account, template_service, transaction_service):
        template_id = template_service.create_template(
            sample_account.id, "expense", "120.00", "Field rental", "monthly", "2024-01-31"
        )
        first = template_service.generate(template_id)
        assert template_service.get_template(template_id).next_occurrence_date == date(2024, 2, 29)
        template_service.generate(template_id)
        assert template_service.get_template(template_id).next_occurrence_date == date(2024, 3, 29)

        txn = transaction_service.get_transaction(first[0])
        assert txn.date == date(2024, 1, 31)
        assert txn.template_id == template_id
        assert txn.status == TransactionStatus.UNCLEARED

    def test_generate_with_fee(self, fee_account, template_service, transaction_service):
        account_id, fee_category = fee_account
        template_id = template_service.create_template(
            account_id, "income", "100.00", "Registration", "weekly", "2024-01-01"
        )
        income_id, fee_id = template_service.generate(template_id)

        fee = transaction_service.get_transaction(fee_id)
        assert transaction_service.get_transaction(income_id).amount == Decimal("100.00")
        assert fee.amount == Decimal("3.20")
        assert fee.transaction_type == TransactionType.EXPENSE
        assert fee.category_id == fee_category

    def test_last_occurrence_ends_template(self, sample_account, template_service):
        template_id = template_service.create_template(
            sample_account.id, "income", "5", "Raffle", "weekly", "2024-01-01", end_date="2024-01-10"
        )
        template_service.generate(template_id)
        assert template_service.get_template(template_id).next_occurrence_date == date(2024, 1, 8)
        template_service.generate(template_id)

        template = template_service.get_template(template_id)
        assert template.next_occurrence_date is None
        assert not template.is_active
        with pytest.raises(PreconditionError):
            template_service.generate(template_id)

    def test_pause_and_resume(self, sample_account, template_service):
        template_id = template_service.create_template(
            sample_account.id, "expense", "30", "Insurance", "monthly", "2024-01-15"
        )
        template_service.pause(template_id)
        paused = template_service.get_template(template_id)
        assert not paused.is_active
        assert paused.next_occurrence_date is None
        with pytest.raises(PreconditionError, match="paused"):
            template_service.generate(template_id)

        next_date = template_service.resume(template_id, today=date(2024, 4, 20))
        assert next_date == date(2024, 5, 15)
        resumed = template_service.get_template(template_id)
        assert resumed.is_active
        assert resumed.next_occurrence_date == date(2024, 5, 15)

    def test_resume_ended_template(self, sample_account, template_service):
        template_id = template_service.create_template(
            sample_account.id, "expense", "30", "Insurance", "monthly", "2024-01-15", end_date="2024-03-31"
        )
        template_service.pause(template_id)
        with pytest.raises(PreconditionError, match="ended"):
            template_service.resume(template_id, today=date(2024, 6, 1))

    def test_update_schedule(self, sample_account, template_service):
        template_id = template_service.create_template(
            sample_account.id, "expense", "30", "Insurance", "monthly", "2024-01-15"
        )
        next_date = template_service.update_schedule(
            template_id, rule="quarterly", today=date(2024, 2, 1)
        )
        assert next_date == date(2024, 4, 15)
        template = template_service.get_template(template_id)
        assert template.rule == RecurrenceRule.QUARTERLY
        assert template.next_occurrence_date == date(2024, 4, 15)

    def test_generate_due_catches_up(self, sample_account, template_service, transaction_service):
        template_id = template_service.create_template(
            sample_account.id, "income", "10", "Weekly dues", "weekly", "2024-01-01"
        )
        template = template_service.get_template(template_id)
        assert template_service.pending_occurrences(template, date(2024, 1, 20)) == [
            date(2024, 1, 1),
            date(2024, 1, 8),
            date(2024, 1, 15),
        ]

        created = template_service.generate_due(date(2024, 1, 20))
        assert len(created[template_id]) == 3
        assert template_service.get_template(template_id).next_occurrence_date == date(2024, 1, 22)
        assert len(transaction_service.list_transactions(account_id=sample_account.id)) == 3
        assert template_service.generate_due(date(2024, 1, 20)) == {}

    def test_list_due_skips_paused(self, sample_account, template_service):
        active = template_service.create_template(
            sample_account.id, "income", "10", "Dues", "weekly", "2024-01-01"
        )
        paused = template_service.create_template(
            sample_account.id, "income", "10", "Other", "weekly", "2024-01-01"
        )
        template_service.pause(paused)
        assert [t.id for t in template_service.list_due(date(2024, 1, 2))] == [active]
