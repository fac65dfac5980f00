"""Recurring template domain service.

A template stores its pending ``next_occurrence_date``. Generating from a
template materialises one uncleared transaction on that date (plus a
processing fee expense for income on accounts with a fee configuration) and
advances the date with the recurrence engine. Pausing clears the date;
resuming recomputes it from today.
"""

import logging
from datetime import date
from typing import Optional

from fundbook.database.base import Database
from fundbook.domain import errors
from fundbook.domain.entities import (
    Account,
    Category,
    NewTransaction,
    RecurringTemplate,
    TransactionType,
)
from fundbook.domain.errors import NotFoundError, PreconditionError
from fundbook.domain.money import calculate_fee
from fundbook.domain.recurrence import (
    initial_occurrence,
    next_occurrence,
    occurrences_through,
    resume_occurrence,
)
from fundbook.domain.validation import parse_date_field, parse_recurrence_rule, validate_template

logger = logging.getLogger(__name__)


def build_occurrence_transactions(
    template: RecurringTemplate,
    account: Account,
    fee_category: Optional[Category] = None,
) -> list[NewTransaction]:
    """Transactions to create for a template's pending occurrence.

    Income on an account with a fee configuration also produces a
    processing fee expense, when the fee is positive and the fee category is
    active.
    """
    if template.next_occurrence_date is None:
        raise PreconditionError(f"Template {template.id} has no upcoming occurrence")

    occurrence = template.next_occurrence_date
    drafts = [
        NewTransaction(
            account_id=template.account_id,
            date=occurrence,
            amount=template.amount,
            transaction_type=template.transaction_type,
            description=template.description,
            category_id=template.category_id,
            template_id=template.id,
        )
    ]

    if (
        template.transaction_type == TransactionType.INCOME
        and fee_category is not None
        and fee_category.is_active
    ):
        fee = calculate_fee(template.amount, account.fee_percentage, account.fee_flat_amount)
        if fee > 0:
            drafts.append(
                NewTransaction(
                    account_id=template.account_id,
                    date=occurrence,
                    amount=fee,
                    transaction_type=TransactionType.EXPENSE,
                    description=f"Processing fee: {template.description}",
                    category_id=fee_category.id,
                    template_id=template.id,
                )
            )
    return drafts


class TemplateService:
    """Service for managing recurring transaction templates."""

    def __init__(self, db: Database):
        """Initialize template service.

        Args:
            db: Database instance
        """
        self.db = db

    def _get(self, template_id: int) -> RecurringTemplate:
        template = self.db.get_template(template_id)
        if template is None:
            raise NotFoundError(errors.template_not_found(template_id))
        return template

    def _check_account_and_category(self, account_id: int, category_id, transaction_type) -> None:
        account = self.db.get_account(account_id)
        if account is None or not account.is_active:
            raise NotFoundError(errors.account_not_found(account_id))
        if category_id is None:
            return
        category = self.db.get_category(category_id)
        if category is None:
            raise NotFoundError(errors.category_not_found(category_id))
        if not category.is_active:
            raise PreconditionError(f"Category {category_id} is inactive")
        if category.category_type != transaction_type:
            raise PreconditionError(errors.category_type_mismatch(transaction_type.value))

    def create_template(
        self,
        account_id,
        transaction_type,
        amount,
        description,
        rule,
        start_date,
        end_date=None,
        category_id=None,
    ) -> int:
        """Create a template whose first occurrence is its start date.

        Returns:
            Template ID

        Raises:
            ValidationError: If any field is invalid
            NotFoundError: If account or category doesn't exist
            PreconditionError: If the category doesn't fit the template
        """
        data = validate_template(
            account_id, transaction_type, amount, description, rule, start_date, end_date, category_id
        )
        self._check_account_and_category(data.account_id, data.category_id, data.transaction_type)

        template_id = self.db.create_template(
            account_id=data.account_id,
            transaction_type=data.transaction_type,
            amount=data.amount,
            description=data.description,
            rule=data.rule,
            start_date=data.start_date,
            end_date=data.end_date,
            next_occurrence_date=initial_occurrence(data.start_date, data.end_date),
            category_id=data.category_id,
        )
        logger.info("Created %s template %s", data.rule.value, template_id)
        return template_id

    def get_template(self, template_id: int) -> Optional[RecurringTemplate]:
        return self.db.get_template(template_id)

    def list_templates(self, account_id: Optional[int] = None) -> list[RecurringTemplate]:
        return self.db.list_templates(account_id=account_id)

    def update_schedule(
        self,
        template_id: int,
        rule=None,
        start_date=None,
        end_date=None,
        clear_end_date: bool = False,
        today: Optional[date] = None,
    ) -> Optional[date]:
        """Change a template's rule, start or end date.

        When the schedule changes, the next occurrence is recomputed as the
        first occurrence on or after today.

        Returns:
            The template's next occurrence date after the update
        """
        template = self._get(template_id)
        new_rule = parse_recurrence_rule(rule) if rule is not None else template.rule
        new_start = parse_date_field(start_date, "start_date") if start_date is not None else template.start_date
        if clear_end_date:
            new_end = None
        elif end_date is not None:
            new_end = parse_date_field(end_date, "end_date", required=False)
        else:
            new_end = template.end_date

        next_date = template.next_occurrence_date
        changed = (new_rule, new_start, new_end) != (template.rule, template.start_date, template.end_date)
        if changed and template.is_active:
            next_date = resume_occurrence(new_start, new_rule, today or date.today(), new_end)

        self.db.update_template_schedule(
            template_id,
            rule=new_rule,
            start_date=new_start,
            end_date=new_end,
            next_occurrence_date=next_date,
        )
        return next_date

    def pause(self, template_id: int) -> None:
        """Pause a template. It has no next occurrence until resumed."""
        self._get(template_id)
        self.db.set_template_state(template_id, is_active=False, next_occurrence_date=None)
        logger.info("Paused template %s", template_id)

    def resume(self, template_id: int, today: Optional[date] = None) -> date:
        """Resume a paused template at its first occurrence on or after today.

        Returns:
            The next occurrence date

        Raises:
            PreconditionError: If the template's end date has passed
        """
        template = self._get(template_id)
        next_date = resume_occurrence(
            template.start_date, template.rule, today or date.today(), template.end_date
        )
        if next_date is None:
            raise PreconditionError("Cannot resume: template has ended (end date has passed)")

        self.db.set_template_state(template_id, is_active=True, next_occurrence_date=next_date)
        logger.info("Resumed template %s, next occurrence %s", template_id, next_date)
        return next_date

    def generate(self, template_id: int) -> list[int]:
        """Materialise the template's pending occurrence.

        Returns:
            IDs of the created transactions

        Raises:
            NotFoundError: If the template or its account doesn't exist
            PreconditionError: If the template is paused or has ended
        """
        template = self._get(template_id)
        if not template.is_active:
            raise PreconditionError("Template is paused. Resume it before generating.")
        if template.next_occurrence_date is None:
            raise PreconditionError(f"Template {template.id} has no upcoming occurrence")

        account = self.db.get_account(template.account_id)
        if account is None or not account.is_active:
            raise NotFoundError("Template account not found or inactive")

        fee_category = None
        if account.fee_category_id is not None:
            fee_category = self.db.get_category(account.fee_category_id)

        drafts = build_occurrence_transactions(template, account, fee_category)
        following = next_occurrence(
            template.start_date, template.rule, template.next_occurrence_date, template.end_date
        )
        txn_ids = self.db.materialize_template(
            template.id,
            drafts,
            next_occurrence_date=following,
            is_active=following is not None,
        )
        logger.info(
            "Generated %d transaction(s) from template %s for %s",
            len(txn_ids),
            template.id,
            template.next_occurrence_date,
        )
        return txn_ids

    def list_due(self, today: date) -> list[RecurringTemplate]:
        """Active templates with an occurrence on or before today."""
        return [
            t for t in self.db.list_templates()
            if t.is_active and t.next_occurrence_date is not None and t.next_occurrence_date <= today
        ]

    def pending_occurrences(self, template: RecurringTemplate, today: date) -> list[date]:
        """Occurrence dates of an active template that are due by today."""
        if not template.is_active:
            return []
        return occurrences_through(
            template.start_date, template.rule, template.next_occurrence_date, today, template.end_date
        )

    def generate_due(self, today: Optional[date] = None) -> dict[int, list[int]]:
        """Materialise every occurrence due on or before today.

        Templates that missed several runs are caught up one occurrence at a
        time.

        Returns:
            Mapping of template ID to the IDs of created transactions
        """
        today = today or date.today()
        created: dict[int, list[int]] = {}
        for template in self.list_due(today):
            ids: list[int] = []
            current = template
            while (
                current.is_active
                and current.next_occurrence_date is not None
                and current.next_occurrence_date <= today
            ):
                ids.extend(self.generate(current.id))
                current = self._get(current.id)
            created[template.id] = ids
        return created
