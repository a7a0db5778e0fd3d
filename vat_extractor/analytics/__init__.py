"""VAT analytics."""
from .vat_aggregator import totals, monthly

__all__ = ['totals', 'monthly']
