"""Tests for amount parsing."""

import pytest
from decimal import Decimal

from fundbook.utils.amount_parser import parse_amount


@pytest.mark.parametrize(
    "text, expected",
    [
        ("123.45", Decimal("123.45")),
        ("$1,234.56", Decimal("1234.56")),
        (" €20 ", Decimal("20")),
        ("0", Decimal("0")),
    ],
)
def test_valid_amounts(text, expected):
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["-5.00", "(5.00)"])
def test_negative_rejected(text):
    with pytest.raises(ValueError, match="must be positive"):
        parse_amount(text)


@pytest.mark.parametrize("text", ["", "   ", "abc", "NaN", "Infinity"])
def test_invalid(text):
    with pytest.raises(ValueError):
        parse_amount(text)
