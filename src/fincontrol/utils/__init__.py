"""Utility functions for fincontrol."""

from fincontrol.utils.date_parser import parse_date, parse_entry_date, add_months, month_prefix
from fincontrol.utils.amount_parser import parse_amount

__all__ = ["parse_date", "parse_entry_date", "add_months", "month_prefix", "parse_amount"]
