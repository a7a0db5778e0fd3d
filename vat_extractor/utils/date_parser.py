"""Smart date parsing for statement exports."""
import logging
import math
import numbers
import re
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Optional

from dateutil import parser as dateutil_parser

logger = logging.getLogger(__name__)

# Spreadsheet serial dates count days from this epoch (Lotus 1900 leap-year bug included)
SPREADSHEET_EPOCH = date(1899, 12, 30)

_DAY_FIRST = re.compile(r'^(\d{1,2})[./](\d{1,2})[./](\d{4}|\d{2})(?!\d)')
_JAPANESE = re.compile(r'^(\d{4})\s*年\s*(\d{1,2})\s*月\s*(\d{1,2})\s*日')
_YEAR_FIRST_SLASH = re.compile(r'^(\d{4})/(\d{1,2})/(\d{1,2})(?!\d)')
_ISO = re.compile(r'^(\d{4})-(\d{1,2})-(\d{1,2})(?!\d)')


def parse_calendar_date(raw: Any) -> Optional[date]:
    """
    Parse a cell value into a calendar date using multiple strategies.

    Strategy order:
    1. Native date/datetime objects (time of day is dropped)
    2. Spreadsheet serial numbers (days since 1899-12-30)
    3. DD.MM.YYYY / DD/MM/YYYY (2-digit years are 20xx)
    4. Japanese YYYY年MM月DD日 and YYYY/MM/DD
    5. ISO YYYY-MM-DD (optionally with a time part)
    6. dateutil, day first, after translating Russian month names

    Args:
        raw: Cell value

    Returns:
        date object or None if parsing fails
    """
    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, datetime):
        return raw.date()

    if isinstance(raw, date):
        return raw

    if isinstance(raw, (numbers.Real, Decimal)):
        return _from_serial(float(raw))

    if not isinstance(raw, str):
        return None

    date_string = ' '.join(raw.split())
    if not date_string:
        return None

    for pattern, order in (
        (_DAY_FIRST, 'dmy'),
        (_JAPANESE, 'ymd'),
        (_YEAR_FIRST_SLASH, 'ymd'),
        (_ISO, 'ymd'),
    ):
        match = pattern.match(date_string)
        if match:
            return _build_date(match.groups(), order, date_string)

    # Try dateutil parser as fallback (more flexible but slower)
    normalized = normalize_date_string(date_string)
    try:
        # dayfirst=True for Russian/European date format preference
        return dateutil_parser.parse(normalized, dayfirst=True).date()
    except (ValueError, OverflowError, TypeError):
        pass

    logger.debug(f"Could not parse date: {raw!r}")
    return None


def normalize_date(raw: Any) -> str:
    """
    Normalize a cell value to a canonical ISO date string.

    Never raises: unparseable input yields an empty string.

    Example:
        >>> normalize_date("31.12.2023") == normalize_date("2023-12-31") == "2023-12-31"
        True
    """
    parsed = parse_calendar_date(raw)
    return parsed.isoformat() if parsed else ""


def _from_serial(value: float) -> Optional[date]:
    """Convert a spreadsheet serial number to a date (whole days only)."""
    if not math.isfinite(value) or value < 1:
        return None
    try:
        return SPREADSHEET_EPOCH + timedelta(days=int(value))
    except OverflowError:
        return None


def _build_date(groups: tuple, order: str, original: str) -> Optional[date]:
    """Assemble a date from regex groups; invalid calendar values give None."""
    if order == 'dmy':
        day, month, year = (int(g) for g in groups)
        if len(groups[2]) == 2:
            year += 2000
    else:
        year, month, day = (int(g) for g in groups)

    try:
        return date(year, month, day)
    except ValueError:
        logger.debug(f"Invalid calendar date: {original!r}")
        return None


def normalize_date_string(date_str: str) -> str:
    """
    Normalize date string for consistent parsing.

    Translates Russian month names to English and removes the trailing
    year marker ("г.", "года").

    Args:
        date_str: Raw date string

    Returns:
        Normalized date string
    """
    # Remove extra whitespace
    normalized = ' '.join(date_str.split())

    # "5 июня 2017 г." / "5 июня 2017 года"
    normalized = re.sub(r'(\d{4})\s*(?:года|г\.?)(?=\s|$)', r'\1', normalized, flags=re.IGNORECASE)

    # Genitive forms first so that "мая" is not left half-translated
    russian_to_english_months = {
        'января': 'January',
        'февраля': 'February',
        'марта': 'March',
        'апреля': 'April',
        'мая': 'May',
        'июня': 'June',
        'июля': 'July',
        'августа': 'August',
        'сентября': 'September',
        'октября': 'October',
        'ноября': 'November',
        'декабря': 'December',
        'январь': 'January',
        'февраль': 'February',
        'март': 'March',
        'апрель': 'April',
        'май': 'May',
        'июнь': 'June',
        'июль': 'July',
        'август': 'August',
        'сентябрь': 'September',
        'октябрь': 'October',
        'ноябрь': 'November',
        'декабрь': 'December',
        # Abbreviated forms
        'янв': 'Jan',
        'фев': 'Feb',
        'мар': 'Mar',
        'апр': 'Apr',
        'июн': 'Jun',
        'июл': 'Jul',
        'авг': 'Aug',
        'сен': 'Sep',
        'окт': 'Oct',
        'ноя': 'Nov',
        'дек': 'Dec',
    }

    normalized_lower = normalized.lower()
    for russian, english in russian_to_english_months.items():
        if russian in normalized_lower:
            # Word boundaries keep 'мар' from matching inside 'марта'
            normalized = re.sub(
                r'\b' + re.escape(russian) + r'\.?(?=\s|$|,)',
                english,
                normalized,
                flags=re.IGNORECASE
            )
            normalized_lower = normalized.lower()

    return normalized
