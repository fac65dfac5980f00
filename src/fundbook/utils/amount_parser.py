"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

CURRENCY_SYMBOLS = re.compile(r"[$€£¥]")


def parse_amount(amount_str: str) -> Decimal:
    """Parse a money amount typed by a user into a Decimal.

    Handles "123.45", "$123.45" and "1,234.56". Amounts are entered as
    positive numbers; income versus expense is given by the transaction
    type, so a sign or "(123.45)" notation is rejected.

    Raises:
        ValueError: If amount string cannot be parsed or is negative
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    text = amount_str.strip()
    if text.startswith("-") or (text.startswith("(") and text.endswith(")")):
        raise ValueError(f"Amount must be positive, got '{amount_str}'")

    text = CURRENCY_SYMBOLS.sub("", text).replace(",", "").strip()
    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return amount
