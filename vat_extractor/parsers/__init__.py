"""Statement parsing engine."""
from .diagnostics import ParseEvent, ParseObserver, DiagnosticsCollector, LoggingObserver, CompositeObserver
from .header_resolver import normalize_header, find_header_row, resolve_columns
from .vat_text import ZERO_VAT_PHRASES, VatTextMatch, scan_vat_text, extract_vat, infer_vat_rate, has_zero_vat
from .record_builder import RecordBuilder
from .statement_parser import StatementParser, parse_statement

__all__ = [
    'ParseEvent',
    'ParseObserver',
    'DiagnosticsCollector',
    'LoggingObserver',
    'CompositeObserver',
    'normalize_header',
    'find_header_row',
    'resolve_columns',
    'ZERO_VAT_PHRASES',
    'VatTextMatch',
    'scan_vat_text',
    'extract_vat',
    'infer_vat_rate',
    'has_zero_vat',
    'RecordBuilder',
    'StatementParser',
    'parse_statement',
]
