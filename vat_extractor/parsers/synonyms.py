"""
Static header synonym table.

Each entry maps a normalized header phrase in one locale to one or more
column roles. Entries are matched in table order, so more specific phrases
come before generic ones.
"""
from dataclasses import dataclass
from typing import Iterable, Tuple

from ..models import ColumnRole

EXACT = "exact"
CONTAINS = "contains"


@dataclass(frozen=True)
class HeaderSynonym:
    """A header phrase and the column roles it assigns."""
    locale: str
    phrase: str
    roles: Tuple[ColumnRole, ...]
    match: str = EXACT

    def matches(self, normalized_cell: str) -> bool:
        """Check a normalized header cell against this phrase."""
        if self.match == CONTAINS:
            return self.phrase in normalized_cell
        return normalized_cell == self.phrase


_DATE = (ColumnRole.DATE,)
_AMOUNT = (ColumnRole.AMOUNT,)
_DEBIT = (ColumnRole.DEBIT_AMOUNT, ColumnRole.AMOUNT)
_CREDIT = (ColumnRole.CREDIT_AMOUNT, ColumnRole.AMOUNT)
_RATE = (ColumnRole.VAT_RATE,)
_VAT = (ColumnRole.VAT_AMOUNT,)
_PARTY = (ColumnRole.COUNTERPARTY,)
_PURPOSE = (ColumnRole.PAYMENT_PURPOSE,)
_CODE = (ColumnRole.OPERATION_CODE,)


def _entries(locale: str, match: str, groups: Iterable[Tuple[Tuple[ColumnRole, ...], Iterable[str]]]):
    return [
        HeaderSynonym(locale, phrase, roles, match)
        for roles, phrases in groups
        for phrase in phrases
    ]


HEADER_SYNONYMS: Tuple[HeaderSynonym, ...] = tuple(
    _entries("en", EXACT, [
        (_DATE, ["date", "transaction date", "posting date", "value date", "operation date"]),
        (_AMOUNT, ["amount", "sum", "total", "total amount", "value"]),
        (_DEBIT, ["debit", "debit amount", "paid out", "withdrawal", "withdrawals", "money out"]),
        (_CREDIT, ["credit", "credit amount", "paid in", "deposit", "deposits", "money in"]),
        (_RATE, ["vat", "vat_rate", "vat rate", "tax rate"]),
        (_VAT, ["vat_amount", "vat amount", "tax amount", "vat sum"]),
        (_PARTY, ["counterparty", "payee", "payer", "beneficiary", "customer", "supplier", "vendor"]),
        (_PURPOSE, ["description", "payment purpose", "purpose", "details", "narrative", "memo", "reference"]),
        (_CODE, ["operation code", "transaction code", "op code", "type code"]),
    ])
    + _entries("ru", EXACT, [
        (_DATE, ["дата", "дата операции", "дата проводки", "дата платежа", "дата документа"]),
        (_AMOUNT, ["сумма", "стоимость", "сумма операции", "сумма платежа", "сумма руб"]),
        (_DEBIT, ["сумма по дебету", "дебет", "расход", "списание", "списано"]),
        (_CREDIT, ["сумма по кредиту", "кредит", "приход", "поступление", "зачислено"]),
        (_RATE, ["ставка ндс", "ставка", "ндс"]),
        (_VAT, ["сумма ндс", "в т ч ндс", "в том числе ндс", "ндс руб"]),
        (_PARTY, ["контрагент", "клиент", "поставщик", "покупатель", "получатель", "плательщик",
                  "наименование контрагента"]),
        (_PURPOSE, ["назначение платежа", "назначение", "описание", "комментарий", "основание"]),
        (_CODE, ["во", "вид операции", "код операции", "шифр операции", "вид оп"]),
    ])
    + _entries("ja", EXACT, [
        (_DATE, ["日付", "取引日", "年月日", "取引日付"]),
        (_AMOUNT, ["金額", "取引金額"]),
        (_DEBIT, ["出金", "出金額", "支払金額", "お支払金額", "お引出し"]),
        (_CREDIT, ["入金", "入金額", "預入金額", "お預り金額", "お預入れ"]),
        (_RATE, ["税率", "消費税率"]),
        (_VAT, ["消費税", "消費税額", "税額"]),
        (_PARTY, ["取引先", "相手先", "取引先名"]),
        (_PURPOSE, ["摘要", "内容", "備考", "お取引内容"]),
        (_CODE, ["取引区分", "区分"]),
    ])
    # Partial phrases for decorated headers ("Сумма по дебету, руб.", "Дата проводки по счету")
    + _entries("ru", CONTAINS, [
        (_DATE, ["дата проводки", "дата операции"]),
        (_DEBIT, ["сумма по дебету"]),
        (_CREDIT, ["сумма по кредиту"]),
        (_VAT, ["сумма ндс"]),
        (_RATE, ["ставка ндс"]),
        (_PURPOSE, ["назначение платежа"]),
        (_PARTY, ["контрагент"]),
    ])
    + _entries("en", CONTAINS, [
        (_VAT, ["vat amount"]),
        (_RATE, ["vat rate"]),
        (_PURPOSE, ["payment purpose"]),
    ])
)

# A header row is recognised by a date anchor cell
DATE_ANCHORS_EXACT = frozenset({"дата", "date", "日付", "取引日"})
DATE_ANCHORS_CONTAINS = ("дата проводки", "дата операции")
