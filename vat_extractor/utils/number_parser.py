"""Parse locale-ambiguous numbers, amounts and VAT rates."""
import math
import numbers
import re
import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

from ..config.settings import CURRENCY_SYMBOLS, DEFAULT_CURRENCY

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
CENTS = Decimal("0.01")

_CURRENCY_MARKERS = re.compile(r'(?i)руб(?:лей|ля|ль)?\.?|р\.|rub\b|[₽$€£¥円]')
_KOPECK_NOTATION = re.compile(r'^(\d+)-(\d{2})$')
_PLAIN_NUMBER = re.compile(r'^(?:\d+(?:\.\d+)?|\.\d+)$')
_MINUS_VARIANTS = ('−', '–', '—')


def normalize_number(raw: Any) -> Optional[Decimal]:
    """
    Parse a number from a spreadsheet cell.

    Handles various formats:
    - 1234.56 / 1234,56
    - 68 925,92 - space thousands separator (regular or non-breaking)
    - 202-83 - Russian kopeck notation (202.83)
    - 1,234.56 / 1.234,56 - mixed separators, the last one is decimal
    - (1234.56) / -1234.56 / −1234.56 - negative amounts
    - 1 234,56 руб. / ₽1234 - currency markers are ignored

    Args:
        raw: Cell value (str, int, float, Decimal or None)

    Returns:
        Decimal value or None if nothing parseable is found
    """
    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, Decimal):
        return raw if raw.is_finite() else None

    if isinstance(raw, numbers.Integral):
        return Decimal(int(raw))

    if isinstance(raw, numbers.Real):
        value = float(raw)
        if not math.isfinite(value):
            return None
        # repr() keeps the shortest round-tripping form (0.2, not 0.2000000000000000111)
        return Decimal(repr(value))

    if not isinstance(raw, str):
        return None

    cleaned = raw.replace('\u00a0', ' ').replace('\u202f', ' ').strip()
    if not cleaned:
        return None

    is_negative = False

    # Parentheses notation for negative
    if cleaned.startswith('(') and cleaned.endswith(')'):
        is_negative = True
        cleaned = cleaned[1:-1].strip()

    for minus in _MINUS_VARIANTS:
        if cleaned.startswith(minus):
            cleaned = '-' + cleaned[1:]

    cleaned = _CURRENCY_MARKERS.sub('', cleaned)
    cleaned = re.sub(r'\s+', '', cleaned)

    if cleaned.startswith('-'):
        is_negative = not is_negative
        cleaned = cleaned[1:]
    elif cleaned.startswith('+'):
        cleaned = cleaned[1:]

    kopeck = _KOPECK_NOTATION.match(cleaned)
    if kopeck:
        cleaned = f"{kopeck.group(1)}.{kopeck.group(2)}"
    elif ',' in cleaned and '.' in cleaned:
        if cleaned.rfind(',') > cleaned.rfind('.'):
            # 1.234,56
            cleaned = cleaned.replace('.', '').replace(',', '.')
        else:
            # 1,234.56
            cleaned = cleaned.replace(',', '')
    elif ',' in cleaned:
        if cleaned.count(',') > 1:
            cleaned = cleaned.replace(',', '')
        else:
            cleaned = cleaned.replace(',', '.')
    elif cleaned.count('.') > 1:
        cleaned = cleaned.replace('.', '')

    if not _PLAIN_NUMBER.match(cleaned):
        logger.debug(f"Could not parse number: {raw!r}")
        return None

    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        return None

    return -value if is_negative else value


def normalize_vat_rate(raw: Any) -> Decimal:
    """
    Normalize a VAT rate to a fraction.

    Accepts numbers (20, 0.2) and percent strings ("20%", "20,5").
    Values above 1 are treated as percentages and divided by 100.

    Args:
        raw: Rate cell value

    Returns:
        Rate as a Decimal fraction; 0 for empty, negative or unparseable input
    """
    if isinstance(raw, str):
        raw = raw.replace('%', '')

    value = normalize_number(raw)
    if value is None or value < 0:
        return ZERO

    return value / 100 if value > 1 else value


def round_money(value: Decimal) -> Decimal:
    """Round a monetary value to 2 decimal places (half away from zero)."""
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def format_amount(amount: Decimal, currency: str = DEFAULT_CURRENCY) -> str:
    """
    Format amount as currency string.

    Args:
        amount: Numeric amount
        currency: Currency code (RUB, USD, EUR, JPY)

    Returns:
        Formatted currency string
    """
    symbol = CURRENCY_SYMBOLS.get(currency, currency)

    # Format with thousands separator and 2 decimal places
    formatted = f"{abs(amount):,.2f}"

    if amount < 0:
        return f"-{symbol}{formatted}"
    else:
        return f"{symbol}{formatted}"
