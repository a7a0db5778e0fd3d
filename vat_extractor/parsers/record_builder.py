"""Build transactions from raw statement rows."""
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, List, Optional, Sequence, Tuple

from ..config.dialect_loader import DialectConfig, normalize_operation_code
from ..config.settings import COUNTERPARTY_FALLBACK_LENGTH, VAT_TEXT_WINDOW
from ..models import ColumnRole, ColumnRoleMap, Direction, Transaction
from ..utils.date_parser import parse_calendar_date
from ..utils.number_parser import ZERO, normalize_number, normalize_vat_rate, round_money
from .diagnostics import (
    AMOUNT_AMBIGUOUS,
    AMOUNT_UNPARSEABLE,
    DIRECTION_CONFLICT,
    ROW_SKIPPED,
    ParseEvent,
    ParseObserver,
)
from .vat_text import VatTextMatch, contains_vat_keyword, extract_vat, scan_vat_text

NAN = Decimal("NaN")

CREDIT = "credit"
DEBIT = "debit"

# Dashes are used as "empty" placeholders in some exports
_PLACEHOLDER = re.compile(r'^[\s\-–—]*$')


def is_blank(cell: Any) -> bool:
    """Check whether a cell holds no value."""
    if cell is None:
        return True
    if isinstance(cell, str):
        return _PLACEHOLDER.match(cell) is not None
    if isinstance(cell, float):
        return cell != cell  # NaN
    return False


def cell_text(cell: Any) -> str:
    """Render a cell as single-line text."""
    if is_blank(cell):
        return ""
    if isinstance(cell, float) and cell.is_integer():
        cell = int(cell)
    return ' '.join(str(cell).split())


@dataclass(frozen=True)
class _RowContext:
    """Values shared by the VAT amount strategies for one row."""
    row: Sequence[Any]
    amount: Decimal
    rate: Decimal
    vat_text: Optional[VatTextMatch]


class RecordBuilder:
    """
    Turns raw rows into unvalidated transactions.

    One builder serves one statement: it holds the column role map, the
    source name used for transaction ids, and the dialect settings.
    """

    def __init__(
        self,
        role_map: ColumnRoleMap,
        source_name: str,
        dialect: Optional[DialectConfig] = None,
        observer: Optional[ParseObserver] = None,
        window: int = VAT_TEXT_WINDOW
    ):
        self.role_map = role_map
        self.source_name = source_name
        self.dialect = dialect or DialectConfig.default()
        self.observer = observer or ParseObserver()
        self.window = window

        self.operation_codes = self.dialect.operation_codes
        self.exempt_phrases = tuple(self.dialect.zero_vat_phrases)
        self.skip_patterns = [re.compile(p, re.IGNORECASE) for p in self.dialect.skip_patterns]

        # Evaluated in order; the first strategy returning a value wins
        self.vat_strategies: List[Callable[[_RowContext], Optional[Decimal]]] = [
            self._vat_from_column,
            self._vat_from_text,
            self._vat_from_rate,
        ]

    def build(self, row: Sequence[Any], row_index: int) -> Optional[Transaction]:
        """
        Build a transaction from a row.

        Args:
            row: Raw row
            row_index: Zero-based index of the row in the raw row set

        Returns:
            Transaction, or None when the row is skipped (empty, footer,
            or without a non-zero monetary value)
        """
        if all(is_blank(cell) for cell in row):
            self._skip(row_index, "empty row")
            return None

        if self._is_footer(row):
            self._skip(row_index, "summary row")
            return None

        amount, side = self._resolve_amount(row, row_index)
        if amount is None:
            self._skip(row_index, "no monetary value")
            return None

        purpose = cell_text(self.role_map.cell(row, ColumnRole.PAYMENT_PURPOSE))
        vat_text = scan_vat_text(purpose, self.window, self.exempt_phrases) if purpose else None

        context = _RowContext(
            row=row,
            amount=amount,
            rate=self._resolve_rate(row, vat_text),
            vat_text=vat_text,
        )

        return Transaction(
            id=f"{self.source_name}-{row_index}",
            date=parse_calendar_date(self.role_map.cell(row, ColumnRole.DATE)),
            amount=amount,
            vat_rate=context.rate,
            vat_amount=self._resolve_vat_amount(context),
            counterparty=self._resolve_counterparty(row, purpose),
            direction=self._resolve_direction(row, row_index, amount, side),
            source=self.source_name,
        )

    # --- amount -------------------------------------------------------------

    def _resolve_amount(self, row: Sequence[Any], row_index: int) -> Tuple[Optional[Decimal], Optional[str]]:
        """
        Signed amount of a row and the side (credit/debit) it came from.

        A debit/credit column pair is preferred over a single amount column.
        Credit amounts are positive, debit amounts negative.
        """
        debit_index = self.role_map.index_of(ColumnRole.DEBIT_AMOUNT)
        credit_index = self.role_map.index_of(ColumnRole.CREDIT_AMOUNT)

        if debit_index is not None or credit_index is not None:
            credit = self._money_cell(row, ColumnRole.CREDIT_AMOUNT, row_index)
            debit = self._money_cell(row, ColumnRole.DEBIT_AMOUNT, row_index)
            if _non_zero(credit):
                if _non_zero(debit) and debit_index != credit_index:
                    self.observer.notify(ParseEvent(
                        AMOUNT_AMBIGUOUS,
                        f"Both debit ({debit}) and credit ({credit}) are filled; using the credit amount",
                        row_index,
                        {'debit': str(debit), 'credit': str(credit)},
                    ))
                return abs(credit), CREDIT
            if _non_zero(debit):
                return -abs(debit), DEBIT

            # The signed amount column may be one of the pair itself
            if self.role_map.index_of(ColumnRole.AMOUNT) in (debit_index, credit_index):
                return None, None

        amount = self._money_cell(row, ColumnRole.AMOUNT, row_index)
        if _non_zero(amount):
            return amount, None
        return None, None

    def _money_cell(self, row: Sequence[Any], role: ColumnRole, row_index: int) -> Optional[Decimal]:
        """Parse a monetary cell; blank gives None, unparseable text gives NaN."""
        cell = self.role_map.cell(row, role)
        if is_blank(cell):
            return None

        value = normalize_number(cell)
        if value is None:
            if isinstance(cell, str):
                self.observer.notify(ParseEvent(
                    AMOUNT_UNPARSEABLE,
                    f"Could not parse {role.value} {cell!r}",
                    row_index,
                    {'role': role.value, 'value': cell},
                ))
                return NAN
            return None
        return value

    # --- VAT ----------------------------------------------------------------

    def _resolve_rate(self, row: Sequence[Any], vat_text: Optional[VatTextMatch]) -> Decimal:
        """Explicit rate column, else the rate stated in the purpose text, else 0."""
        cell = self.role_map.cell(row, ColumnRole.VAT_RATE)
        if not is_blank(cell):
            return normalize_vat_rate(cell)
        if vat_text is not None and vat_text.rate is not None:
            return vat_text.rate
        return ZERO

    def _resolve_vat_amount(self, context: _RowContext) -> Decimal:
        for strategy in self.vat_strategies:
            value = strategy(context)
            if value is not None:
                return value
        return ZERO

    def _vat_from_column(self, context: _RowContext) -> Optional[Decimal]:
        """Explicit VAT amount column; the cell may hold a phrase like "НДС 20% 1000.00"."""
        cell = self.role_map.cell(context.row, ColumnRole.VAT_AMOUNT)
        if is_blank(cell):
            return None

        if contains_vat_keyword(cell):
            from_text = extract_vat(cell, self.window, self.exempt_phrases)
            if from_text > 0:
                return from_text

        value = normalize_number(cell)
        if value is None or value == 0:
            return None
        return abs(value)

    def _vat_from_text(self, context: _RowContext) -> Optional[Decimal]:
        """VAT stated in the payment purpose; an exempt phrase settles it at 0."""
        match = context.vat_text
        if match is None:
            return None
        if match.exempt:
            return ZERO
        return match.amount if match.has_amount else None

    def _vat_from_rate(self, context: _RowContext) -> Optional[Decimal]:
        """|amount| x rate, rounded to cents."""
        if context.rate <= 0 or not context.amount.is_finite():
            return None
        return round_money(abs(context.amount) * context.rate)

    # --- direction & counterparty ---------------------------------------------

    def _resolve_direction(
        self,
        row: Sequence[Any],
        row_index: int,
        amount: Decimal,
        side: Optional[str]
    ) -> Direction:
        """
        Classify the VAT direction.

        Priority: recognised operation code, then the debit/credit column the
        amount came from, then the amount sign. A disagreeing lower-priority
        signal is reported as a conflict.
        """
        if side == CREDIT:
            placement = Direction.OUTPUT
        elif side == DEBIT:
            placement = Direction.INPUT
        elif amount.is_finite():
            placement = Direction.INPUT if amount < 0 else Direction.OUTPUT
        else:
            placement = None

        code = normalize_operation_code(self.role_map.cell(row, ColumnRole.OPERATION_CODE))
        by_code = self.operation_codes.get(code) if code else None

        if by_code is None:
            return placement or Direction.OUTPUT

        if placement is not None and placement != by_code:
            self.observer.notify(ParseEvent(
                DIRECTION_CONFLICT,
                f"Operation code {code} means {by_code.value} VAT "
                f"but the amount placement suggests {placement.value}",
                row_index,
                {'operation_code': code, 'direction': by_code.value, 'placement': placement.value},
            ))
        return by_code

    def _resolve_counterparty(self, row: Sequence[Any], purpose: str) -> str:
        """Counterparty column, or the start of the payment purpose when none is mapped."""
        if ColumnRole.COUNTERPARTY in self.role_map:
            return cell_text(self.role_map.cell(row, ColumnRole.COUNTERPARTY))
        return purpose[:COUNTERPARTY_FALLBACK_LENGTH]

    # --- skipping -------------------------------------------------------------

    def _is_footer(self, row: Sequence[Any]) -> bool:
        """
        Check the first non-empty cell against the summary row patterns.

        A row with a parseable date is a transaction, whatever its text says.
        Without a date column, matches in the counterparty or purpose column
        are names, not summary labels.
        """
        if ColumnRole.DATE in self.role_map:
            if parse_calendar_date(self.role_map.cell(row, ColumnRole.DATE)) is not None:
                return False
            text_columns = ()
        else:
            text_columns = (
                self.role_map.index_of(ColumnRole.COUNTERPARTY),
                self.role_map.index_of(ColumnRole.PAYMENT_PURPOSE),
            )

        first_index = next((i for i, cell in enumerate(row) if not is_blank(cell)), None)
        if first_index is None or first_index in text_columns:
            return False
        first = cell_text(row[first_index])
        return any(pattern.search(first) for pattern in self.skip_patterns)

    def _skip(self, row_index: int, reason: str) -> None:
        self.observer.notify(ParseEvent(ROW_SKIPPED, f"Skipped ({reason})", row_index, {'reason': reason}))


def _non_zero(value: Optional[Decimal]) -> bool:
    """True for NaN and for any finite non-zero value."""
    return value is not None and value != 0
