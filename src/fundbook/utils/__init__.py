"""Utility functions for fundbook."""

from fundbook.utils.date_parser import parse_date
from fundbook.utils.amount_parser import parse_amount

__all__ = ["parse_date", "parse_amount"]
