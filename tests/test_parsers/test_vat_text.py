"""Tests for VAT text extraction."""
from decimal import Decimal

import pytest

from vat_extractor.parsers.vat_text import extract_vat, has_zero_vat, infer_vat_rate, scan_vat_text


class TestExtractVat:
    """Test VAT amount extraction from payment purposes."""

    @pytest.mark.parametrize("text, expected", [
        ("В т.ч. НДС (20%) 202-83 руб.", Decimal("202.83")),
        ("В том числе НДС 20 % - 21035.60 рублей.", Decimal("21035.60")),
        ("НДС 20% включенный в сумму - 68925,92", Decimal("68925.92")),
        ("Оплата по счету 15. Сумма 120000-00, в т.ч. НДС 20% 20 000,00", Decimal("20000.00")),
        ("Payment for services incl. VAT 20% 1,000.00", Decimal("1000.00")),
        ("消費税 10% 1000.00", Decimal("1000.00")),
    ])
    def test_amount_after_keyword(self, text, expected):
        """Test the last money token after the keyword wins."""
        assert extract_vat(text) == expected

    def test_exempt_phrase(self):
        """Test exempt phrases give zero."""
        assert extract_vat("Без НДС") == 0
        assert extract_vat("Оплата услуг. НДС не облагается. 1500.00") == 0
        assert extract_vat("Consulting, VAT exempt 250.00") == 0

    def test_date_not_read_as_amount(self):
        """Test ISO dates are not read as VAT amounts."""
        assert extract_vat("оплата услуг, дата 2017-06-05") == 0
        assert extract_vat("НДС по акту от 2017-06-05") == 0
        assert extract_vat("НДС по акту от 05.06.2017") == 0

    def test_date_after_amount(self):
        """Test a trailing document date does not replace the amount."""
        assert extract_vat("НДС 20% - 10000.00 по акту от 2017-06-05") == Decimal("10000.00")
        assert extract_vat("НДС 20% 500,00 от 05.06.2017") == Decimal("500.00")

    def test_amount_followed_by_separator(self):
        """Test amounts that are not date-shaped survive a following separator."""
        assert extract_vat("НДС 20% - 1500.00-2 этап") == Decimal("1500.00")
        assert extract_vat("НДС 20% 150.00/1 шт") == Decimal("150.00")
        assert extract_vat("в т.ч. НДС 2000-00.1") == Decimal("2000.00")

    def test_no_keyword(self):
        """Test text without a VAT keyword gives zero."""
        assert extract_vat("Оплата по договору 12 на сумму 1000.00") == 0

    def test_keyword_without_amount(self):
        """Test a bare keyword gives zero."""
        assert extract_vat("НДС 20%") == 0

    def test_percentage_not_read_as_amount(self):
        """Test rates written with decimals are not amounts."""
        assert extract_vat("НДС 20,00% 500.00") == Decimal("500.00")
        assert extract_vat("НДС 20,00 %") == 0

    def test_window_limits_search(self):
        """Test amounts far from the keyword are ignored."""
        text = "НДС" + " " * 130 + "500.00"
        assert extract_vat(text) == 0
        assert extract_vat(text, window=200) == Decimal("500.00")

    def test_non_string(self):
        """Test non-string input gives zero."""
        assert extract_vat(None) == 0
        assert extract_vat(123) == 0

    def test_dialect_exempt_phrase(self):
        """Test extra exempt phrases are honoured."""
        assert extract_vat("НДС не облаг. 100.00", extra_exempt_phrases=["ндс не облаг"]) == 0


class TestInferVatRate:
    """Test VAT rate inference."""

    def test_rate_after_keyword(self):
        """Test a rate after the keyword."""
        assert infer_vat_rate("в т.ч. НДС 20% 1000.00") == Decimal("0.2")

    def test_rate_with_space_and_parentheses(self):
        """Test spaced and parenthesised rates."""
        assert infer_vat_rate("НДС (10 %) 50.00") == Decimal("0.1")

    def test_rate_before_keyword(self):
        """Test a rate written before the keyword."""
        assert infer_vat_rate("в т.ч. 20% НДС 1000.00") == Decimal("0.2")

    def test_exempt_rate_is_zero(self):
        """Test exempt text gives a zero rate."""
        assert infer_vat_rate("Без НДС") == 0

    def test_no_rate(self):
        """Test missing rate gives None."""
        assert infer_vat_rate("НДС 1000.00") is None
        assert infer_vat_rate("Оплата") is None


class TestScanVatText:
    """Test combined scan results."""

    def test_exempt_flag(self):
        """Test exempt text is flagged."""
        match = scan_vat_text("Без НДС")
        assert match.exempt
        assert match.amount == 0

    def test_nothing_found(self):
        """Test text without VAT mentions gives None."""
        assert scan_vat_text("Оплата по договору") is None
        assert scan_vat_text("") is None

    def test_keyword_recorded(self):
        """Test the keyword as written is kept."""
        match = scan_vat_text("VAT 20% 40.00")
        assert match.keyword == "VAT"
        assert match.has_amount


class TestHasZeroVat:
    """Test exempt phrase detection."""

    def test_case_insensitive(self):
        """Test matching ignores case."""
        assert has_zero_vat("БЕЗ НДС")
        assert has_zero_vat("Not subject to VAT")
        assert has_zero_vat("非課税取引")

    def test_plain_text(self):
        """Test ordinary text is not exempt."""
        assert not has_zero_vat("В т.ч. НДС 20%")
        assert not has_zero_vat(None)
