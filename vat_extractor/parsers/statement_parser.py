"""Statement parsing entry point: raw rows in, validated transactions out."""
from datetime import date
from typing import Any, List, Optional, Sequence

from ..config.dialect_loader import DialectConfig
from ..models import ColumnRole, ColumnRoleMap, Transaction
from ..validators.transaction_validator import TransactionValidator
from .diagnostics import HEADER_DEGRADED, HEADER_FOUND, ROLE_UNMAPPED, ParseEvent, ParseObserver
from .header_resolver import resolve_columns, synonyms_from_mapping
from .record_builder import RecordBuilder


class StatementParser:
    """
    Parses the raw rows of one statement.

    The parser performs no I/O and keeps no state between calls, so parsing
    the same rows twice yields identical transactions.
    """

    def __init__(
        self,
        dialect: Optional[DialectConfig] = None,
        observer: Optional[ParseObserver] = None,
        today: Optional[date] = None
    ):
        self.dialect = dialect
        self.observer = observer or ParseObserver()
        self.validator = TransactionValidator(today=today)

    def resolve(self, rows: Sequence[Sequence[Any]]) -> ColumnRoleMap:
        """Locate the header and map its columns, reporting what was found."""
        extra = synonyms_from_mapping(self.dialect.header_synonyms) if self.dialect else None
        role_map = resolve_columns(rows, extra)

        if role_map.degraded:
            self.observer.notify(ParseEvent(
                HEADER_DEGRADED,
                "No header row with a date column found; using the first row as header",
                0,
            ))
        else:
            self.observer.notify(ParseEvent(
                HEADER_FOUND,
                f"Header row found with {len(role_map)} mapped roles",
                role_map.header_row_index,
                role_map.to_dict(),
            ))

        for role in ColumnRole:
            if role not in role_map:
                self.observer.notify(ParseEvent(ROLE_UNMAPPED, f"No column for {role.value}", details={'role': role.value}))

        return role_map

    def parse(
        self,
        rows: Sequence[Sequence[Any]],
        source_name: str,
        role_map: Optional[ColumnRoleMap] = None
    ) -> List[Transaction]:
        """
        Parse rows below the header into validated transactions.

        Args:
            rows: Raw statement rows (preamble included)
            source_name: Originating filename, used in transaction ids
            role_map: Pre-resolved role map (resolved from rows when omitted)

        Returns:
            Transactions in row order; invalid ones carry their violations
        """
        if not rows:
            return []

        if role_map is None:
            role_map = self.resolve(rows)

        builder = RecordBuilder(role_map, source_name, self.dialect, self.observer)

        transactions = []
        for row_index in range(role_map.header_row_index + 1, len(rows)):
            transaction = builder.build(rows[row_index], row_index)
            if transaction is not None:
                transactions.append(self.validator.finalize(transaction))

        return transactions


def parse_statement(
    rows: Sequence[Sequence[Any]],
    source_name: str,
    dialect: Optional[DialectConfig] = None,
    observer: Optional[ParseObserver] = None,
    today: Optional[date] = None
) -> List[Transaction]:
    """
    Parse raw statement rows into validated transactions.

    Example:
        >>> rows = [["Дата", "Сумма", "Контрагент"], ["05.06.2024", "1 200,00", "ООО Ромашка"]]
        >>> [t.amount for t in parse_statement(rows, "demo.csv")]
        [Decimal('1200.00')]

    Args:
        rows: Raw rows as read from the file
        source_name: Originating filename
        dialect: Statement dialect settings (generic when omitted)
        observer: Receives parse diagnostics
        today: Reference date for the future-date check (defaults to today)

    Returns:
        List of transactions
    """
    return StatementParser(dialect, observer, today).parse(rows, source_name)
