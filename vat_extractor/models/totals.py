"""VAT totals and monthly bucket models."""
from dataclasses import dataclass
from decimal import Decimal

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class Totals:
    """
    Aggregate VAT position of a transaction set.

    Attributes:
        input_vat: VAT paid on purchases (deductible)
        output_vat: VAT collected on sales (payable)
        net_vat: output_vat - input_vat; positive is owed to the tax
            authority, negative is a refund due to the taxpayer
    """
    input_vat: Decimal = ZERO
    output_vat: Decimal = ZERO
    net_vat: Decimal = ZERO

    @property
    def position(self) -> str:
        """'payable', 'refundable' or 'nil' depending on net VAT sign."""
        if self.net_vat > 0:
            return "payable"
        if self.net_vat < 0:
            return "refundable"
        return "nil"

    def summary(self) -> dict:
        """Label and absolute amount of the net VAT position."""
        labels = {
            "payable": "VAT payable to the budget",
            "refundable": "VAT refundable from the budget",
            "nil": "No VAT due",
        }
        return {
            'description': labels[self.position],
            'amount': float(abs(self.net_vat)),
            'type': self.position,
        }

    def to_dict(self) -> dict:
        """Convert totals to dictionary."""
        return {
            'input_vat': float(self.input_vat),
            'output_vat': float(self.output_vat),
            'net_vat': float(self.net_vat),
        }


@dataclass(frozen=True)
class MonthlyBucket:
    """Net VAT contribution of one calendar month ("YYYY-MM")."""
    month: str
    input_vat: Decimal = ZERO
    output_vat: Decimal = ZERO
    net_vat: Decimal = ZERO

    def to_dict(self) -> dict:
        """Convert bucket to dictionary."""
        return {
            'month': self.month,
            'input_vat': float(self.input_vat),
            'output_vat': float(self.output_vat),
            'net_vat': float(self.net_vat),
        }
