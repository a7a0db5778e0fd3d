"""Transaction validation."""
from .transaction_validator import TransactionValidator, validate

__all__ = ['TransactionValidator', 'validate']
