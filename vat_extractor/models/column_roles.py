"""Column role model for statement header mapping."""
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Sequence


class ColumnRole(Enum):
    """Semantic meaning of a statement column."""
    DATE = "date"
    AMOUNT = "amount"
    DEBIT_AMOUNT = "debit_amount"
    CREDIT_AMOUNT = "credit_amount"
    VAT_RATE = "vat_rate"
    VAT_AMOUNT = "vat_amount"
    COUNTERPARTY = "counterparty"
    PAYMENT_PURPOSE = "payment_purpose"
    OPERATION_CODE = "operation_code"


@dataclass(frozen=True)
class ColumnRoleMap:
    """
    Immutable mapping of column roles to zero-based column indexes.

    Attributes:
        columns: Role to column index mapping
        header_row_index: Index of the row the map was built from
        degraded: True when no header row was recognised and row 0 was assumed
    """
    columns: Mapping[ColumnRole, int] = field(default_factory=dict)
    header_row_index: int = 0
    degraded: bool = False

    def __post_init__(self):
        """Freeze the underlying mapping."""
        object.__setattr__(self, 'columns', MappingProxyType(dict(self.columns)))

    def __contains__(self, role: ColumnRole) -> bool:
        return role in self.columns

    def __len__(self) -> int:
        return len(self.columns)

    def index_of(self, role: ColumnRole) -> Optional[int]:
        """Get column index for a role, or None when the role is unmapped."""
        return self.columns.get(role)

    def cell(self, row: Sequence[Any], role: ColumnRole) -> Any:
        """
        Get the cell a role points to in a row.

        Absent roles and short rows both yield None.
        """
        index = self.columns.get(role)
        if index is None or index >= len(row):
            return None
        return row[index]

    def to_dict(self) -> dict:
        """Convert role map to dictionary."""
        return {
            'header_row_index': self.header_row_index,
            'degraded': self.degraded,
            'columns': {role.value: index for role, index in self.columns.items()},
        }
