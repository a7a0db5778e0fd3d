"""Data models for VAT statement extraction."""
from .column_roles import ColumnRole, ColumnRoleMap
from .transaction import Transaction, Direction, Violation
from .totals import Totals, MonthlyBucket
from .parse_result import ParseResult

__all__ = [
    'ColumnRole',
    'ColumnRoleMap',
    'Transaction',
    'Direction',
    'Violation',
    'Totals',
    'MonthlyBucket',
    'ParseResult',
]
