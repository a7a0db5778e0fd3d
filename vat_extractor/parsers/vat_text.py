"""Extract VAT amounts and rates from free-text payment purposes."""
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, Optional

from ..config.settings import VAT_TEXT_WINDOW
from ..utils.number_parser import ZERO, normalize_number, normalize_vat_rate

# Phrases meaning "no VAT applies"; matched case-insensitively anywhere in the text
ZERO_VAT_PHRASES = (
    'без ндс',
    'ндс не облагается',
    'ндс не предусмотрен',
    'ндс не взимается',
    'ндс нет',
    'без налога (ндс)',
    'without vat',
    'not subject to vat',
    'vat exempt',
    'exempt from vat',
    'no vat',
    'vat not applicable',
    '非課税',
    '不課税',
    '免税',
)

_KEYWORD = re.compile(r'ндс|\bvat\b|消費税', re.IGNORECASE)

# 202-83, 21035.60, 68 925,92 (regular or non-breaking thousands spaces), 1,000.00
_AMOUNT_TOKEN = re.compile(
    r'(?<![\d.,])(\d{1,3}(?:[ \u00a0\u202f]\d{3})+|\d{1,3}(?:,\d{3})+(?=\.)|\d+)[.,\-]\d{2}(?!\d)'
)

# Date-shaped tokens ("2017-06" of 2017-06-05, "05.06" of 05.06.2017) and the text that continues them
_DATE_PREFIXES = (
    (re.compile(r'\d{4}-\d{2}'), re.compile(r'-\d')),
    (re.compile(r'\d{1,2}\.\d{2}'), re.compile(r'\.\d')),
)
_PERCENT_AFTER = re.compile(r'\s*%')

_RATE = re.compile(r'(?<![\d.,])(\d{1,2}(?:[.,]\d+)?)\s*%')
_RATE_LOOKBEHIND = 15


@dataclass(frozen=True)
class VatTextMatch:
    """
    What a payment purpose says about VAT.

    Attributes:
        amount: VAT amount found after the keyword (0 when exempt or none found)
        rate: VAT rate as a fraction, None when the text names no rate
        exempt: True when an exempt phrase ("Без НДС") was found
        keyword: The VAT keyword as written in the text
    """
    amount: Decimal = ZERO
    rate: Optional[Decimal] = None
    exempt: bool = False
    keyword: Optional[str] = None

    @property
    def has_amount(self) -> bool:
        return self.amount > 0


def has_zero_vat(text: Any, extra_phrases: Iterable[str] = ()) -> bool:
    """Check whether the text declares that no VAT applies."""
    if not isinstance(text, str) or not text:
        return False
    lowered = text.lower()
    return any(phrase.lower() in lowered for phrase in (*ZERO_VAT_PHRASES, *extra_phrases))


def contains_vat_keyword(text: Any) -> bool:
    """Check whether the text mentions VAT at all."""
    return isinstance(text, str) and _KEYWORD.search(text) is not None


def scan_vat_text(
    text: Any,
    window: int = VAT_TEXT_WINDOW,
    extra_exempt_phrases: Iterable[str] = ()
) -> Optional[VatTextMatch]:
    """
    Scan a payment purpose for VAT information.

    Exempt phrases are decisive. Otherwise the first VAT keyword is located
    and the text following it (up to ``window`` characters) is searched for
    money tokens. The last token wins, since statements phrase VAT as
    "НДС 20% - 16666.67". Tokens that are the start of a date ("2017-06-05",
    "05.06.2017") or carry a percent sign are ignored.

    Args:
        text: Payment purpose text
        window: Number of characters after the keyword to search
        extra_exempt_phrases: Additional exempt phrases (dialect-specific)

    Returns:
        VatTextMatch, or None when the text says nothing about VAT
    """
    if not isinstance(text, str) or not text:
        return None

    if has_zero_vat(text, extra_exempt_phrases):
        return VatTextMatch(amount=ZERO, rate=ZERO, exempt=True)

    keyword = _KEYWORD.search(text)
    if keyword is None:
        return None

    tail = text[keyword.end():keyword.end() + window]
    candidates = []
    for token in _AMOUNT_TOKEN.finditer(tail):
        rest = tail[token.end():]
        if _starts_date(token.group(0), rest) or _PERCENT_AFTER.match(rest):
            continue
        candidates.append(token.group(0))

    amount = ZERO
    if candidates:
        value = normalize_number(candidates[-1])
        if value is not None and value.is_finite():
            amount = value

    return VatTextMatch(
        amount=amount,
        rate=_rate_near(text, keyword, tail),
        exempt=False,
        keyword=keyword.group(0),
    )


def extract_vat(text: Any, window: int = VAT_TEXT_WINDOW, extra_exempt_phrases: Iterable[str] = ()) -> Decimal:
    """
    Extract the VAT amount from a payment purpose.

    Example:
        >>> extract_vat("В т.ч. НДС (20%) 202-83 руб.")
        Decimal('202.83')
        >>> extract_vat("Без НДС")
        Decimal('0')

    Returns:
        VAT amount, 0 when exempt or when nothing plausible is found
    """
    match = scan_vat_text(text, window, extra_exempt_phrases)
    return match.amount if match else ZERO


def infer_vat_rate(text: Any, extra_exempt_phrases: Iterable[str] = ()) -> Optional[Decimal]:
    """
    Infer the VAT rate stated in a payment purpose ("НДС 20%", "VAT 10 %").

    Returns:
        Rate as a fraction, 0 for exempt text, None when no rate is stated
    """
    match = scan_vat_text(text, extra_exempt_phrases=extra_exempt_phrases)
    return match.rate if match else None


def _rate_near(text: str, keyword: re.Match, tail: str) -> Optional[Decimal]:
    """Percentage after the keyword, else just before it ("20% НДС")."""
    rate = _RATE.search(tail)
    if rate is None:
        rate = _RATE.search(text[max(0, keyword.start() - _RATE_LOOKBEHIND):keyword.start()])
    if rate is None:
        return None
    return normalize_vat_rate(rate.group(1))


def _starts_date(token: str, rest: str) -> bool:
    return any(head.fullmatch(token) and tail.match(rest) for head, tail in _DATE_PREFIXES)
