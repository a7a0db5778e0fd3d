"""Utility functions."""
from .logger import setup_logger, log_parse_audit
from .number_parser import normalize_number, normalize_vat_rate, round_money, format_amount
from .date_parser import normalize_date, parse_calendar_date, normalize_date_string

__all__ = [
    'setup_logger',
    'log_parse_audit',
    'normalize_number',
    'normalize_vat_rate',
    'round_money',
    'format_amount',
    'normalize_date',
    'parse_calendar_date',
    'normalize_date_string',
]
