"""Payment status of fee-based enrollments."""

from fundbook.domain.entities import PaymentStatus
from fundbook.domain.money import MoneyComparison, MoneyLike, compare_money


def payment_status(fee_amount: MoneyLike, total_paid: MoneyLike) -> PaymentStatus:
    """Derive the payment status from a fee and the total paid against it.

    A zero fee is always paid, even if stray payments exist.
    """
    if compare_money(fee_amount, 0) != MoneyComparison.GREATER:
        return PaymentStatus.PAID
    if compare_money(total_paid, 0) == MoneyComparison.EQUAL:
        return PaymentStatus.UNPAID

    comparison = compare_money(total_paid, fee_amount)
    if comparison == MoneyComparison.LESS:
        return PaymentStatus.PARTIAL
    if comparison == MoneyComparison.EQUAL:
        return PaymentStatus.PAID
    return PaymentStatus.OVERPAID
