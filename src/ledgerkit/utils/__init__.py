"""Utility functions for ledgerkit."""

from ledgerkit.utils.date_parser import parse_date, get_date_range
from ledgerkit.utils.amount_parser import parse_amount, round_krona, format_amount

__all__ = ["parse_date", "get_date_range", "parse_amount", "round_krona", "format_amount"]
