"""Money helpers shared by the calculation core."""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation, getcontext, localcontext
from enum import Enum
from typing import Optional, Union

MoneyLike = Union[Decimal, int, float, str]

CENT = Decimal("0.01")
ZERO = Decimal("0")
# Largest magnitude a Numeric(12, 2) column holds is just below this.
MAX_MONEY = Decimal("10000000000")


class MoneyComparison(str, Enum):
    """Result of comparing two money amounts."""

    LESS = "less"
    EQUAL = "equal"
    GREATER = "greater"


def to_money(value: Optional[MoneyLike]) -> Decimal:
    """Normalize a numeric value to Decimal.

    Floats go through ``str`` so that ``0.1`` becomes ``Decimal("0.1")``
    rather than its binary expansion. ``None`` becomes zero.

    Raises:
        ValueError: If the value is not numeric
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Not a money amount: {value!r}")
    try:
        result = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"Not a money amount: {value!r}")
    if not result.is_finite():
        raise ValueError(f"Not a money amount: {value!r}")
    return result


def _precision_for(*values: Decimal) -> int:
    """Context precision that keeps every digit of values down to cents."""
    return max([getcontext().prec] + [v.adjusted() + 4 for v in values if v])


def round_money(value: MoneyLike) -> Decimal:
    """Round to cents, half up. Works for amounts of any magnitude."""
    amount = to_money(value)
    with localcontext() as ctx:
        ctx.prec = _precision_for(amount)
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def compare_money(a: MoneyLike, b: MoneyLike) -> MoneyComparison:
    """Compare two amounts at cent precision.

    Two amounts are equal when their difference rounds to zero at two
    decimal places.

    Examples:
        >>> compare_money(0.1 + 0.2, "0.3")
        <MoneyComparison.EQUAL: 'equal'>
    """
    a, b = to_money(a), to_money(b)
    with localcontext() as ctx:
        ctx.prec = _precision_for(a, b) + 1
        diff = round_money(a - b)
    if diff == 0:
        return MoneyComparison.EQUAL
    if diff < 0:
        return MoneyComparison.LESS
    return MoneyComparison.GREATER


def has_cent_precision(value: Decimal) -> bool:
    """Return True when value has at most two decimal places."""
    with localcontext() as ctx:
        ctx.prec = _precision_for(value)
        return value == value.quantize(CENT)


def calculate_fee(
    amount: MoneyLike,
    fee_percentage: Optional[MoneyLike] = None,
    fee_flat_amount: Optional[MoneyLike] = None,
) -> Decimal:
    """Compute a processing fee for an income amount.

    The fee is ``amount * percentage / 100`` plus the flat amount, rounded
    to cents. Missing or non-positive parts are ignored.
    """
    fee = ZERO
    percentage = to_money(fee_percentage)
    flat = to_money(fee_flat_amount)
    if percentage > 0:
        fee += to_money(amount) * percentage / Decimal(100)
    if flat > 0:
        fee += flat
    return round_money(fee)
