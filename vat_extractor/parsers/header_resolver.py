"""Locate the header row of a statement and map its columns to roles."""
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from ..models import ColumnRole, ColumnRoleMap
from .synonyms import (
    DATE_ANCHORS_CONTAINS,
    DATE_ANCHORS_EXACT,
    HEADER_SYNONYMS,
    HeaderSynonym,
)

_PUNCTUATION = re.compile(r'[^\w\s]')


def normalize_header(cell: Any) -> str:
    """
    Normalize a header cell for synonym lookup.

    Lower-cases, replaces punctuation with spaces (Cyrillic and CJK letters
    are kept) and collapses whitespace.

    Example:
        >>> normalize_header("  Сумма по дебету, руб. ")
        'сумма по дебету руб'
    """
    if cell is None:
        return ""
    text = _PUNCTUATION.sub(' ', str(cell).lower())
    return ' '.join(text.split())


def is_date_anchor(cell: Any) -> bool:
    """Check whether a cell looks like the date column title of a header row."""
    normalized = normalize_header(cell)
    if not normalized:
        return False
    if normalized in DATE_ANCHORS_EXACT:
        return True
    return any(anchor in normalized for anchor in DATE_ANCHORS_CONTAINS)


def find_header_row(rows: Sequence[Sequence[Any]]) -> Optional[int]:
    """
    Find the header row by scanning top-down for a date anchor cell.

    Bank exports put a preamble (bank name, account, period) above the
    table, so the header is rarely on row 0.

    Args:
        rows: Raw statement rows

    Returns:
        Index of the header row or None if no row carries a date anchor
    """
    for index, row in enumerate(rows):
        if any(is_date_anchor(cell) for cell in row):
            return index
    return None


def synonyms_from_mapping(mapping: Mapping[str, Iterable[str]], locale: str = "dialect") -> List[HeaderSynonym]:
    """
    Build exact-match synonyms from a {role value: [phrases]} mapping.

    Raises:
        ValueError: If a role value is not a known column role
    """
    synonyms = []
    for role_value, phrases in mapping.items():
        role = ColumnRole(role_value)
        for phrase in phrases:
            synonyms.append(HeaderSynonym(locale, normalize_header(phrase), (role,)))
    return synonyms


def map_header_cells(header: Sequence[Any], synonyms: Sequence[HeaderSynonym]) -> Dict[ColumnRole, int]:
    """
    Map header cells to column roles.

    Each cell takes the roles of the first synonym it matches; a role keeps
    the leftmost column that claimed it.
    """
    columns: Dict[ColumnRole, int] = {}
    for index, cell in enumerate(header):
        normalized = normalize_header(cell)
        if not normalized:
            continue
        for synonym in synonyms:
            if synonym.matches(normalized):
                for role in synonym.roles:
                    columns.setdefault(role, index)
                break
    return columns


def resolve_columns(
    rows: Sequence[Sequence[Any]],
    extra_synonyms: Optional[Sequence[HeaderSynonym]] = None
) -> ColumnRoleMap:
    """
    Resolve the column role map of a statement.

    When no header row is found, row 0 is used as the header and the map is
    marked degraded. Rows above the header are preamble and play no part.

    Args:
        rows: Raw statement rows
        extra_synonyms: Dialect-specific synonyms, checked before the static table

    Returns:
        ColumnRoleMap (possibly empty)
    """
    synonyms = list(extra_synonyms or []) + list(HEADER_SYNONYMS)

    header_index = find_header_row(rows)
    degraded = header_index is None
    if degraded:
        header_index = 0

    header = rows[header_index] if rows else []
    return ColumnRoleMap(
        columns=map_header_cells(header, synonyms),
        header_row_index=header_index,
        degraded=degraded,
    )
