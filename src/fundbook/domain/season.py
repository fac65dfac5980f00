"""Season, enrollment and payment domain service."""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from fundbook.database.base import Database
from fundbook.domain import errors
from fundbook.domain.entities import Enrollment, Payment, PaymentStatus, Season
from fundbook.domain.errors import ConflictError, NotFoundError, ValidationError
from fundbook.domain.money import ZERO, MoneyComparison, MoneyLike, compare_money, round_money
from fundbook.domain.payment_status import payment_status
from fundbook.domain.validation import (
    parse_date_field,
    parse_money_field,
    validate_enrollments,
    validate_payment,
)

logger = logging.getLogger(__name__)

MAX_SEASON_NAME_LENGTH = 150


@dataclass(frozen=True)
class EnrollmentSummary:
    """Fee, payments and derived status of one enrollment."""

    enrollment: Enrollment
    student_name: str
    payments: list[Payment]
    total_paid: Decimal
    balance_due: Decimal
    payment_status: PaymentStatus


@dataclass(frozen=True)
class SeasonSummary:
    """Collection totals for a season."""

    season: Season
    enrollments: list[EnrollmentSummary]
    total_fees_expected: Decimal
    total_collected: Decimal
    total_outstanding: Decimal
    collection_rate: Decimal

    @property
    def total_enrolled(self) -> int:
        return len(self.enrollments)


def summarize_enrollment(
    enrollment: Enrollment, student_name: str, payments: Iterable[Payment]
) -> EnrollmentSummary:
    """Derive totals and payment status for an enrollment."""
    payments = list(payments)
    total_paid = sum((p.amount for p in payments), ZERO)
    return EnrollmentSummary(
        enrollment=enrollment,
        student_name=student_name,
        payments=payments,
        total_paid=total_paid,
        balance_due=enrollment.fee_amount - total_paid,
        payment_status=payment_status(enrollment.fee_amount, total_paid),
    )


def summarize_season(season: Season, enrollments: list[EnrollmentSummary]) -> SeasonSummary:
    expected = sum((e.enrollment.fee_amount for e in enrollments), ZERO)
    collected = sum((e.total_paid for e in enrollments), ZERO)
    owing = [e for e in enrollments if compare_money(e.balance_due, ZERO) == MoneyComparison.GREATER]
    outstanding = sum((e.balance_due for e in owing), ZERO)
    rate = round_money(collected * 100 / expected) if expected > 0 else ZERO
    return SeasonSummary(
        season=season,
        enrollments=enrollments,
        total_fees_expected=expected,
        total_collected=collected,
        total_outstanding=outstanding,
        collection_rate=rate,
    )


class SeasonService:
    """Service for seasons, student enrollments and payments."""

    def __init__(self, db: Database):
        """Initialize season service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_season(self, name: str, fee_amount: MoneyLike, start_date=None, end_date=None) -> int:
        """Create a season with a default enrollment fee.

        Raises:
            ValidationError: If a field is invalid
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Name is required.", field="name")
        if len(name) > MAX_SEASON_NAME_LENGTH:
            raise ValidationError(
                f"Name must be {MAX_SEASON_NAME_LENGTH} characters or fewer.", field="name"
            )
        fee = parse_money_field(fee_amount, "fee_amount", non_negative=True, cents=True)
        start = parse_date_field(start_date, "start_date", required=False)
        end = parse_date_field(end_date, "end_date", required=False)
        if start is not None and end is not None and start >= end:
            raise ValidationError("Start date must be before end date.", field="end_date")

        return self.db.create_season(name=name, fee_amount=fee, start_date=start, end_date=end)

    def get_season(self, season_id: int) -> Optional[Season]:
        return self.db.get_season(season_id)

    def list_seasons(self) -> list[Season]:
        return self.db.list_seasons()

    def create_student(self, name: str, guardian_name: Optional[str] = None) -> int:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Student name is required.", field="name")
        return self.db.create_student(name=name, guardian_name=(guardian_name or "").strip() or None)

    def list_students(self):
        return self.db.list_students()

    def enroll_students(
        self, season_id: int, student_ids: Iterable, fee_amount: Optional[MoneyLike] = None
    ) -> list[int]:
        """Enroll a batch of students in a season.

        The whole batch is rejected if it names a student twice or if any
        student is already enrolled.

        Args:
            season_id: Season ID
            student_ids: Student IDs to enroll
            fee_amount: Fee for these enrollments, defaults to the season fee

        Returns:
            IDs of the new enrollments

        Raises:
            ValidationError: If the batch is empty or the fee is invalid
            NotFoundError: If the season or a student doesn't exist
            ConflictError: If the batch contains a student twice or a student
                is already enrolled in the season
        """
        data = validate_enrollments(season_id, student_ids, fee_amount)
        season = self.db.get_season(data.season_id)
        if season is None:
            raise NotFoundError(errors.season_not_found(data.season_id))

        ids = data.student_ids
        if len(set(ids)) != len(ids):
            raise ConflictError("Duplicate students are not allowed.")
        fee = data.fee_amount if data.fee_amount is not None else season.fee_amount

        for student_id in ids:
            if self.db.get_student(student_id) is None:
                raise NotFoundError(errors.student_not_found(student_id))

        enrolled = {e.student_id for e in self.db.list_enrollments(season.id)}
        if enrolled.intersection(ids):
            raise ConflictError("One or more students are already enrolled in this season.")

        enrollment_ids = self.db.create_enrollments(season.id, [(sid, fee) for sid in ids])
        logger.info("Enrolled %d student(s) in season %s", len(enrollment_ids), season.id)
        return enrollment_ids

    def record_payment(self, enrollment_id, payment_date, amount, payment_method=None) -> int:
        """Record a payment against an enrollment.

        Raises:
            ValidationError: If a field is invalid
            NotFoundError: If the enrollment doesn't exist
        """
        data = validate_payment(enrollment_id, payment_date, amount, payment_method)
        if self.db.get_enrollment(data.enrollment_id) is None:
            raise NotFoundError(errors.enrollment_not_found(data.enrollment_id))

        payment_id = self.db.create_payment(
            enrollment_id=data.enrollment_id,
            payment_date=data.payment_date,
            amount=data.amount,
            payment_method=data.payment_method,
        )
        logger.info("Recorded payment of %s on enrollment %s", data.amount, data.enrollment_id)
        return payment_id

    def get_enrollment_summary(self, enrollment_id: int) -> EnrollmentSummary:
        enrollment = self.db.get_enrollment(enrollment_id)
        if enrollment is None:
            raise NotFoundError(errors.enrollment_not_found(enrollment_id))
        student = self.db.get_student(enrollment.student_id)
        return summarize_enrollment(
            enrollment,
            student.name if student else "Unknown",
            self.db.list_payments(enrollment_id),
        )

    def get_season_summary(self, season_id: int) -> SeasonSummary:
        season = self.db.get_season(season_id)
        if season is None:
            raise NotFoundError(errors.season_not_found(season_id))
        summaries = [self.get_enrollment_summary(e.id) for e in self.db.list_enrollments(season_id)]
        return summarize_season(season, summaries)
