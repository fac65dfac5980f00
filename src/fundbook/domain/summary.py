"""Summary report domain service."""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from fundbook.database.base import Database
from fundbook.domain import errors
from fundbook.domain.category import PATH_SEPARATOR, CategoryService, category_path, descendant_ids, top_level_id
from fundbook.domain.entities import (
    Category,
    CategoryGroup,
    CategoryTotal,
    SummaryReport,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from fundbook.domain.errors import NotFoundError, ValidationError
from fundbook.domain.money import ZERO

logger = logging.getLogger(__name__)

ROOT_LABEL = "(root)"
UNCATEGORIZED = "Uncategorized"


def _group_and_child(category_id: Optional[int], index: dict[int, Category]) -> tuple[str, str]:
    if category_id is None or category_id not in index:
        return UNCATEGORIZED, ROOT_LABEL
    root_id = top_level_id(category_id, index)
    parent_name = index[root_id].name
    if root_id == category_id:
        return parent_name, ROOT_LABEL
    full_path = category_path(category_id, index)
    return parent_name, full_path[len(parent_name) + len(PATH_SEPARATOR):]


def build_category_groups(
    amounts_by_category: dict[Optional[int], Decimal], categories: Iterable[Category]
) -> list[CategoryGroup]:
    """Group per-category amounts under their top-level category.

    Groups and the children within each group are sorted by name.
    Transactions without a category form an "Uncategorized" group.
    """
    index = {c.id: c for c in categories}
    groups: dict[str, dict[str, Decimal]] = {}
    for category_id, amount in amounts_by_category.items():
        parent_name, child_name = _group_and_child(category_id, index)
        children = groups.setdefault(parent_name, {})
        children[child_name] = children.get(child_name, ZERO) + amount

    result = []
    for parent_name in sorted(groups):
        children = tuple(CategoryTotal(name, total) for name, total in sorted(groups[parent_name].items()))
        result.append(
            CategoryGroup(
                parent_name=parent_name,
                children=children,
                subtotal=sum((c.total for c in children), ZERO),
            )
        )
    return result


def summarize_transactions(
    transactions: Iterable[Transaction],
    categories: Iterable[Category],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> SummaryReport:
    """Total income and expenses, by category and by transaction status.

    ``balance_by_status`` holds the signed sum of the transactions in each
    status, so the three values add up to the net change.
    """
    categories = list(categories)
    balance_by_status = {status: ZERO for status in TransactionStatus}
    income_by_category: dict[Optional[int], Decimal] = {}
    expenses_by_category: dict[Optional[int], Decimal] = {}
    total_income = total_expenses = ZERO
    count = 0

    for txn in transactions:
        count += 1
        balance_by_status[txn.status] += txn.signed_amount
        if txn.transaction_type == TransactionType.INCOME:
            total_income += txn.amount
            bucket = income_by_category
        else:
            total_expenses += txn.amount
            bucket = expenses_by_category
        bucket[txn.category_id] = bucket.get(txn.category_id, ZERO) + txn.amount

    return SummaryReport(
        start_date=start_date,
        end_date=end_date,
        total_income=total_income,
        total_expenses=total_expenses,
        balance_by_status=balance_by_status,
        income_by_category=tuple(build_category_groups(income_by_category, categories)),
        expenses_by_category=tuple(build_category_groups(expenses_by_category, categories)),
        transaction_count=count,
    )


class SummaryService:
    """Service for building summary reports."""

    def __init__(self, db: Database):
        """Initialize summary service.

        Args:
            db: Database instance
        """
        self.db = db

    def build_summary(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
        category: Optional[str | int] = None,
    ) -> SummaryReport:
        """Build a summary report.

        Args:
            start_date: Optional start date filter (inclusive)
            end_date: Optional end date filter (inclusive)
            account_id: Optional account filter
            category: Optional category name, path or ID; only transactions
                in that category or below it are counted

        Returns:
            SummaryReport over the matching transactions

        Raises:
            ValidationError: If start_date is after end_date
            NotFoundError: If the account or category doesn't exist
        """
        if start_date is not None and end_date is not None and start_date > end_date:
            raise ValidationError("Start date must be on or before end date.", field="start_date")
        if account_id is not None and self.db.get_account(account_id) is None:
            raise NotFoundError(errors.account_not_found(account_id))

        categories = self.db.list_categories()
        transactions = self.db.list_transactions(
            start_date=start_date, end_date=end_date, account_id=account_id
        )
        if category is not None:
            category_id = CategoryService(self.db).resolve_category(category)
            wanted = descendant_ids(category_id, categories)
            transactions = [t for t in transactions if t.category_id in wanted]

        logger.debug(
            "Summarizing %d transaction(s) from %s to %s", len(transactions), start_date, end_date
        )
        return summarize_transactions(transactions, categories, start_date, end_date)
