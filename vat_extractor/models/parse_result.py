"""Parse result model."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from .column_roles import ColumnRoleMap
from .totals import MonthlyBucket, Totals
from .transaction import Transaction


@dataclass
class ParseResult:
    """
    Complete result of processing one statement file.

    Attributes:
        source: Originating filename
        transactions: Parsed and validated transactions
        totals: Aggregate VAT totals over valid transactions
        monthly: Monthly net VAT series
        success: Whether the file could be processed
        dialect: Name of the statement dialect used
        currency: Currency code of the statement
        role_map: Column role map resolved from the header
        error_message: User-facing message when processing failed
        warnings: Diagnostics worth surfacing (e.g. direction conflicts)
        processing_time: Time taken to process (seconds)
        generated_at: Timestamp of processing (UTC)
    """
    source: str
    transactions: List[Transaction] = field(default_factory=list)
    totals: Totals = field(default_factory=Totals)
    monthly: List[MonthlyBucket] = field(default_factory=list)
    success: bool = True
    dialect: Optional[str] = None
    currency: str = "RUB"
    role_map: Optional[ColumnRoleMap] = None
    error_message: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    processing_time: float = 0.0
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def transaction_count(self) -> int:
        """Get number of transactions."""
        return len(self.transactions)

    @property
    def invalid_transactions(self) -> List[Transaction]:
        """Get transactions carrying validation violations."""
        return [t for t in self.transactions if t.violations]

    @property
    def header_row_index(self) -> Optional[int]:
        """Row index the header was found at."""
        return self.role_map.header_row_index if self.role_map else None

    def to_payload(self) -> dict:
        """Consumer-facing payload for downstream accounting systems."""
        return {
            'operations': [t.to_dict() for t in self.transactions],
            'totals': self.totals.to_dict(),
            'generated_at': self.generated_at.isoformat(),
        }

    def to_dict(self) -> dict:
        """Convert parse result to dictionary."""
        return {
            'source': self.source,
            'success': self.success,
            'dialect': self.dialect,
            'currency': self.currency,
            'transaction_count': self.transaction_count,
            'invalid_count': len(self.invalid_transactions),
            'processing_time': round(self.processing_time, 2),
            'generated_at': self.generated_at.isoformat(),
            'layout': self.role_map.to_dict() if self.role_map else None,
            'totals': self.totals.to_dict(),
            'monthly': [bucket.to_dict() for bucket in self.monthly],
            'transactions': [t.to_dict() for t in self.transactions],
            'warnings': self.warnings,
            'error_message': self.error_message,
        }
