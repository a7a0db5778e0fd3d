"""Transaction data model."""
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple


class Direction(Enum):
    """VAT direction of a transaction."""
    INPUT = "input"    # VAT paid on purchases (deductible)
    OUTPUT = "output"  # VAT collected on sales (payable)


class Violation(str, Enum):
    """Validation violation codes attached to a transaction."""
    DATE_MISSING = "date_missing"
    DATE_IN_FUTURE = "date_in_future"
    DATE_TOO_OLD = "date_too_old"
    AMOUNT_NOT_FINITE = "amount_not_finite"
    AMOUNT_ZERO = "amount_zero"
    AMOUNT_TOO_LARGE = "amount_too_large"
    VAT_RATE_OUT_OF_RANGE = "vat_rate_out_of_range"
    VAT_AMOUNT_NOT_FINITE = "vat_amount_not_finite"
    VAT_AMOUNT_NEGATIVE = "vat_amount_negative"
    COUNTERPARTY_MISSING = "counterparty_missing"
    COUNTERPARTY_TOO_SHORT = "counterparty_too_short"
    COUNTERPARTY_TOO_LONG = "counterparty_too_long"
    COUNTERPARTY_NUMERIC = "counterparty_numeric"

    @property
    def message(self) -> str:
        """Human-readable description of the violation."""
        return VIOLATION_MESSAGES[self]


VIOLATION_MESSAGES = {
    Violation.DATE_MISSING: "Date is missing or could not be parsed",
    Violation.DATE_IN_FUTURE: "Date is in the future",
    Violation.DATE_TOO_OLD: "Date is earlier than the oldest accepted year",
    Violation.AMOUNT_NOT_FINITE: "Amount is not a number",
    Violation.AMOUNT_ZERO: "Amount is zero",
    Violation.AMOUNT_TOO_LARGE: "Amount is unrealistically large",
    Violation.VAT_RATE_OUT_OF_RANGE: "VAT rate must be between 0 and 100%",
    Violation.VAT_AMOUNT_NOT_FINITE: "VAT amount is not a number",
    Violation.VAT_AMOUNT_NEGATIVE: "VAT amount cannot be negative",
    Violation.COUNTERPARTY_MISSING: "Counterparty is missing",
    Violation.COUNTERPARTY_TOO_SHORT: "Counterparty name is too short",
    Violation.COUNTERPARTY_TOO_LONG: "Counterparty name is too long",
    Violation.COUNTERPARTY_NUMERIC: "Counterparty name cannot be digits only",
}


def _money(value: Decimal) -> Optional[float]:
    """JSON-friendly rendering of a Decimal amount (None when non-finite)."""
    if not value.is_finite():
        return None
    return round(float(value), 2)


@dataclass(frozen=True)
class Transaction:
    """
    A single tax-relevant statement operation.

    Attributes:
        id: Deterministic identity (source name + raw row index)
        date: Transaction date, time of day discarded
        amount: Signed amount (sign encodes debit/credit, not direction)
        vat_rate: VAT rate as a fraction
        vat_amount: VAT amount (non-negative once finalized)
        counterparty: Counterparty label, possibly empty
        direction: INPUT or OUTPUT
        source: Originating filename
        violations: Validation violations (empty means valid)
    """
    id: str
    date: Optional[date]
    amount: Decimal
    vat_rate: Decimal
    vat_amount: Decimal
    counterparty: str
    direction: Direction
    source: str
    violations: Tuple[Violation, ...] = ()

    @property
    def is_valid(self) -> bool:
        """Whether the transaction passed validation."""
        return not self.violations

    @property
    def has_vat(self) -> bool:
        """Whether the transaction carries a non-zero VAT amount."""
        return self.vat_amount.is_finite() and self.vat_amount != 0

    def to_dict(self) -> dict:
        """Convert transaction to dictionary."""
        result = {
            'id': self.id,
            'date': self.date.isoformat() if self.date else None,
            'amount': _money(self.amount),
            'vat_rate': float(self.vat_rate) if self.vat_rate.is_finite() else None,
            'vat_amount': _money(self.vat_amount),
            'counterparty': self.counterparty,
            'source': self.source,
            'direction': self.direction.value,
        }
        if self.violations:
            result['errors'] = [v.value for v in self.violations]
        return result
