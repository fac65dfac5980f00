"""Mapper functions to convert between domain models and SQLAlchemy models.

Enum-valued columns are stored as their string values and converted back
here, so the rest of the application only ever sees domain enums.
"""

from fundbook.domain import entities as domain
from fundbook.database.models import (
    Account as ORMAccount,
    Category as ORMCategory,
    Transaction as ORMTransaction,
    ReconciliationSession as ORMReconciliationSession,
    RecurringTemplate as ORMRecurringTemplate,
    Season as ORMSeason,
    Student as ORMStudent,
    Enrollment as ORMEnrollment,
    Payment as ORMPayment,
)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        name=orm_account.name,
        account_type=orm_account.account_type,
        opening_balance=orm_account.opening_balance,
        is_active=orm_account.is_active,
        created_at=orm_account.created_at,
        fee_percentage=orm_account.fee_percentage,
        fee_flat_amount=orm_account.fee_flat_amount,
        fee_category_id=orm_account.fee_category_id,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        name=orm_category.name,
        category_type=domain.TransactionType(orm_category.category_type),
        is_active=orm_category.is_active,
        created_at=orm_category.created_at,
        parent_id=orm_category.parent_id,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        account_id=orm_transaction.account_id,
        date=orm_transaction.date,
        amount=orm_transaction.amount,
        transaction_type=domain.TransactionType(orm_transaction.transaction_type),
        status=domain.TransactionStatus(orm_transaction.status),
        description=orm_transaction.description,
        category_id=orm_transaction.category_id,
        reconciliation_session_id=orm_transaction.reconciliation_session_id,
        template_id=orm_transaction.template_id,
        cleared_at=orm_transaction.cleared_at,
        created_at=orm_transaction.created_at,
    )


def session_to_domain(orm_session: ORMReconciliationSession) -> domain.ReconciliationSession:
    """Convert SQLAlchemy ReconciliationSession model to domain entity."""
    return domain.ReconciliationSession(
        id=orm_session.id,
        account_id=orm_session.account_id,
        statement_date=orm_session.statement_date,
        statement_ending_balance=orm_session.statement_ending_balance,
        starting_balance=orm_session.starting_balance,
        status=domain.SessionStatus(orm_session.status),
        finished_at=orm_session.finished_at,
        transaction_count=orm_session.transaction_count,
        created_at=orm_session.created_at,
    )


def template_to_domain(orm_template: ORMRecurringTemplate) -> domain.RecurringTemplate:
    """Convert SQLAlchemy RecurringTemplate model to domain entity."""
    return domain.RecurringTemplate(
        id=orm_template.id,
        account_id=orm_template.account_id,
        transaction_type=domain.TransactionType(orm_template.transaction_type),
        amount=orm_template.amount,
        description=orm_template.description,
        rule=domain.RecurrenceRule(orm_template.rule),
        start_date=orm_template.start_date,
        end_date=orm_template.end_date,
        next_occurrence_date=orm_template.next_occurrence_date,
        is_active=orm_template.is_active,
        category_id=orm_template.category_id,
        created_at=orm_template.created_at,
    )


def season_to_domain(orm_season: ORMSeason) -> domain.Season:
    return domain.Season(
        id=orm_season.id,
        name=orm_season.name,
        fee_amount=orm_season.fee_amount,
        start_date=orm_season.start_date,
        end_date=orm_season.end_date,
        created_at=orm_season.created_at,
    )


def student_to_domain(orm_student: ORMStudent) -> domain.Student:
    return domain.Student(
        id=orm_student.id,
        name=orm_student.name,
        guardian_name=orm_student.guardian_name,
        created_at=orm_student.created_at,
    )


def enrollment_to_domain(orm_enrollment: ORMEnrollment) -> domain.Enrollment:
    return domain.Enrollment(
        id=orm_enrollment.id,
        season_id=orm_enrollment.season_id,
        student_id=orm_enrollment.student_id,
        fee_amount=orm_enrollment.fee_amount,
        created_at=orm_enrollment.created_at,
    )


def payment_to_domain(orm_payment: ORMPayment) -> domain.Payment:
    return domain.Payment(
        id=orm_payment.id,
        enrollment_id=orm_payment.enrollment_id,
        payment_date=orm_payment.payment_date,
        amount=orm_payment.amount,
        payment_method=orm_payment.payment_method,
        created_at=orm_payment.created_at,
    )
