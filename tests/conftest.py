"""Pytest configuration and fixtures."""
from datetime import date
from decimal import Decimal

import pytest

from vat_extractor.config import DialectConfigLoader
from vat_extractor.config.settings import DIALECTS_DIR
from vat_extractor.models import Direction, Transaction


@pytest.fixture
def today():
    """Fixed reference date for validation."""
    return date(2024, 12, 31)


@pytest.fixture
def make_transaction():
    """Factory for valid transactions with overridable fields."""
    def _make(**overrides):
        fields = dict(
            id="test.csv-1",
            date=date(2024, 3, 15),
            amount=Decimal("1200.00"),
            vat_rate=Decimal("0.2"),
            vat_amount=Decimal("200.00"),
            counterparty="ООО Ромашка",
            direction=Direction.OUTPUT,
            source="test.csv",
        )
        fields.update(overrides)
        return Transaction(**fields)
    return _make


@pytest.fixture
def e2e_rows():
    """
    Three-row statement: one credit row with VAT in the purpose text,
    one debit row with an explicit VAT column, one zero-amount row.
    """
    return [
        ["Дата", "Сумма по дебету", "Сумма по кредиту", "Сумма НДС", "Контрагент", "Назначение платежа"],
        ["15.03.2024", None, "100000", None, "ООО Альфа", "Оплата по договору 12, НДС 20% - 16666.67"],
        ["20.03.2024", "50000", None, "8333.33", "ООО Бета", "Оплата аренды за март"],
        ["25.03.2024", "0", None, None, "ООО Гамма", "Корректировка"],
    ]


@pytest.fixture
def sber_rows():
    """Sberbank-style export: preamble, two-row header, ВО codes, footer."""
    return [
        ["ПАО СБЕРБАНК", None, None, None, None, None, None, None],
        ["Выписка операций по лицевому счету 40702810938000012345", None, None, None, None, None, None, None],
        ["за период с 01.06.2024 по 30.06.2024", None, None, None, None, None, None, None],
        [None, None, None, None, None, None, None, None],
        ["Дата проводки", "Счет", None, "Сумма по дебету", "Сумма по кредиту", "№ документа", "ВО",
         "Назначение платежа"],
        [None, "Дебет", "Кредит", None, None, None, None, None],
        ["05.06.2024", "40702810938000012345", "40702810100000054321", "12 000,00", None, "145", "01",
         "Оплата по счету 77 от 01.06.2024 за канцтовары. В т.ч. НДС (20%) 2000-00 руб."],
        ["10.06.2024", "40702810555000077777", "40702810938000012345", None, "60 000,00", "12", "02",
         "Оплата по договору поставки от 2017-06-05. В том числе НДС 20 % - 10000.00 рублей."],
        ["30.06.2024", "40702810938000012345", "70601810000000000000", "490,00", None, "3", "17",
         "Комиссия за ведение счета. Без НДС"],
        ["Итого", None, None, "12 490,00", "60 000,00", None, None, None],
        ["Количество операций", 3, None, None, None, None, None, None],
    ]


@pytest.fixture
def generic_rows():
    """Generic CSV layout with a signed amount and an explicit VAT rate column."""
    return [
        ["date", "amount", "vat_rate", "counterparty"],
        ["2024-01-10", "1200", "20", "Acme Ltd"],
        ["2024-01-20", "-600", "20%", "Supplier GmbH"],
        ["2024-02-05", "1000", "0", "Exempt Client"],
    ]


@pytest.fixture
def dialect_loader():
    """Loader over the packaged dialect files."""
    return DialectConfigLoader(DIALECTS_DIR)


@pytest.fixture
def sberbank_dialect(dialect_loader):
    """Packaged Sberbank dialect."""
    return dialect_loader.get_config("sberbank")
