"""VAT Statement Extractor - normalize statement exports into a VAT ledger."""

__version__ = "0.1.0"

from .parsers import parse_statement
from .analytics import totals, monthly
from .exporters import build_payload
from .pipeline import StatementPipeline

__all__ = ['__version__', 'parse_statement', 'totals', 'monthly', 'build_payload', 'StatementPipeline']
