"""Tests for the record builder."""
from datetime import date
from decimal import Decimal

import pytest

from vat_extractor.config import DialectConfig
from vat_extractor.models import ColumnRole, ColumnRoleMap, Direction
from vat_extractor.parsers.diagnostics import (
    AMOUNT_AMBIGUOUS,
    AMOUNT_UNPARSEABLE,
    DIRECTION_CONFLICT,
    ROW_SKIPPED,
    DiagnosticsCollector,
)
from vat_extractor.parsers.record_builder import RecordBuilder, cell_text, is_blank


@pytest.fixture
def pair_map():
    """Debit/credit layout with code, VAT amount and purpose columns."""
    return ColumnRoleMap({
        ColumnRole.DATE: 0,
        ColumnRole.DEBIT_AMOUNT: 1,
        ColumnRole.AMOUNT: 1,
        ColumnRole.CREDIT_AMOUNT: 2,
        ColumnRole.OPERATION_CODE: 3,
        ColumnRole.VAT_AMOUNT: 4,
        ColumnRole.PAYMENT_PURPOSE: 5,
    })


@pytest.fixture
def signed_map():
    """Signed amount layout with rate and counterparty columns."""
    return ColumnRoleMap({
        ColumnRole.DATE: 0,
        ColumnRole.AMOUNT: 1,
        ColumnRole.VAT_RATE: 2,
        ColumnRole.COUNTERPARTY: 3,
    })


class TestAmount:
    """Test amount resolution."""

    def test_credit_is_positive(self, pair_map):
        """Test credit amounts are positive."""
        tx = RecordBuilder(pair_map, "s.csv").build(["01.03.2024", None, "1 000,00", None, None, "x"], 1)
        assert tx.amount == Decimal("1000.00")

    def test_debit_is_negative(self, pair_map):
        """Test debit amounts are negative."""
        tx = RecordBuilder(pair_map, "s.csv").build(["01.03.2024", "500", None, None, None, "x"], 1)
        assert tx.amount == Decimal("-500")

    def test_signed_amount_column(self, signed_map):
        """Test a single signed amount column."""
        tx = RecordBuilder(signed_map, "s.csv").build(["2024-03-01", "-250.50", None, "Acme"], 1)
        assert tx.amount == Decimal("-250.50")

    def test_debit_and_credit_filled(self):
        """Test a row with both sides filled uses credit and reports it."""
        role_map = ColumnRoleMap({
            ColumnRole.DATE: 0,
            ColumnRole.DEBIT_AMOUNT: 1,
            ColumnRole.CREDIT_AMOUNT: 2,
            ColumnRole.COUNTERPARTY: 3,
        })
        collector = DiagnosticsCollector()

        tx = RecordBuilder(role_map, "s.csv", observer=collector).build(
            ["05.03.2024", "500,00", "1000,00", "ООО Альфа"], 4
        )

        assert tx.amount == Decimal("1000.00")
        assert tx.direction == Direction.OUTPUT
        events = collector.of_kind(AMOUNT_AMBIGUOUS)
        assert len(events) == 1
        assert events[0].row_index == 4
        assert events[0].details == {'debit': '500.00', 'credit': '1000.00'}

    def test_single_side_is_not_ambiguous(self, pair_map):
        """Test a zero on the other side is not reported."""
        collector = DiagnosticsCollector()
        RecordBuilder(pair_map, "s.csv", observer=collector).build(["01.03.2024", "0", "100", None, None, "x"], 1)
        assert collector.of_kind(AMOUNT_AMBIGUOUS) == []

    def test_unparseable_amount_is_nan(self, signed_map):
        """Test unparseable monetary text is kept as NaN."""
        tx = RecordBuilder(signed_map, "s.csv").build(["2024-03-01", "twelve", None, "Acme"], 1)
        assert tx is not None
        assert tx.amount.is_nan()


class TestSkipping:
    """Test skipped rows."""

    def test_empty_row(self, signed_map):
        """Test fully empty rows are skipped."""
        collector = DiagnosticsCollector()
        builder = RecordBuilder(signed_map, "s.csv", observer=collector)

        assert builder.build([None, "", "  ", None], 3) is None
        assert collector.of_kind(ROW_SKIPPED)[0].row_index == 3

    def test_zero_amount(self, signed_map):
        """Test zero-amount rows are skipped."""
        assert RecordBuilder(signed_map, "s.csv").build(["2024-03-01", "0", "20", "Acme"], 1) is None

    def test_blank_monetary_cells(self, pair_map):
        """Test rows without monetary values are skipped (sub-header rows)."""
        assert RecordBuilder(pair_map, "s.csv").build(["1", None, None, "2", None, "3"], 1) is None

    def test_text_in_amount_column_is_kept(self, pair_map):
        """Test text in a monetary column is reported, not silently dropped."""
        collector = DiagnosticsCollector()
        tx = RecordBuilder(pair_map, "s.csv", observer=collector).build(["01.03.2024", "n/a", None, None, None, "x"], 1)

        assert tx.amount.is_nan()
        assert collector.of_kind(AMOUNT_UNPARSEABLE)[0].details['role'] == 'debit_amount'

    def test_footer_word_in_dated_row(self):
        """Test a dated row is kept even when it starts with a summary word."""
        role_map = ColumnRoleMap({
            ColumnRole.COUNTERPARTY: 0,
            ColumnRole.DATE: 1,
            ColumnRole.AMOUNT: 2,
            ColumnRole.VAT_AMOUNT: 3,
        })
        builder = RecordBuilder(role_map, "b.csv")

        tx = builder.build(["Total Energies LLC", "2024-03-05", "1200.00", "200.00"], 1)

        assert tx.counterparty == "Total Energies LLC"
        assert tx.vat_amount == Decimal("200.00")
        assert builder.build(["Total", None, "1800.00", "300.00"], 3) is None

    def test_footer_word_in_counterparty_without_date_column(self):
        """Test counterparty names are not mistaken for summary labels."""
        role_map = ColumnRoleMap({ColumnRole.COUNTERPARTY: 0, ColumnRole.AMOUNT: 1})
        tx = RecordBuilder(role_map, "b.csv").build(["Итого-Сервис ООО", "500"], 1)
        assert tx.counterparty == "Итого-Сервис ООО"

    def test_footer_row(self, pair_map):
        """Test summary rows are skipped."""
        builder = RecordBuilder(pair_map, "s.csv")
        assert builder.build(["Итого", "12 490,00", "60 000,00", None, None, None], 9) is None
        assert builder.build(["Total", "10", "20", None, None, None], 10) is None

    def test_dialect_skip_pattern(self, pair_map):
        """Test dialect skip patterns extend the defaults."""
        dialect = DialectConfig({'skip_patterns': [r'^\s*сальдо']}, 'test')
        builder = RecordBuilder(pair_map, "s.csv", dialect=dialect)
        assert builder.build(["Сальдо на конец", None, "100", None, None, None], 5) is None


class TestDirection:
    """Test direction classification."""

    def test_operation_code_wins(self, pair_map):
        """Test a recognised operation code decides the direction."""
        tx = RecordBuilder(pair_map, "s.csv").build(["01.03.2024", "100", None, "17", None, "x"], 1)
        assert tx.direction == Direction.INPUT

    def test_numeric_operation_code(self, pair_map):
        """Test numeric code cells are normalized ("2" -> "02")."""
        tx = RecordBuilder(pair_map, "s.csv").build(["01.03.2024", None, "100", 2, None, "x"], 1)
        assert tx.direction == Direction.OUTPUT

    def test_credit_placement(self, pair_map):
        """Test credit placement means output without a code."""
        tx = RecordBuilder(pair_map, "s.csv").build(["01.03.2024", None, "100", None, None, "x"], 1)
        assert tx.direction == Direction.OUTPUT

    def test_debit_placement(self, pair_map):
        """Test debit placement means input without a code."""
        tx = RecordBuilder(pair_map, "s.csv").build(["01.03.2024", "100", None, "99", None, "x"], 1)
        assert tx.direction == Direction.INPUT

    def test_amount_sign(self, signed_map):
        """Test the sign decides without code or placement."""
        builder = RecordBuilder(signed_map, "s.csv")
        assert builder.build(["2024-03-01", "-10", None, "Acme"], 1).direction == Direction.INPUT
        assert builder.build(["2024-03-01", "10", None, "Acme"], 2).direction == Direction.OUTPUT

    def test_conflict_is_reported(self, pair_map):
        """Test disagreement between code and placement is reported."""
        collector = DiagnosticsCollector()
        builder = RecordBuilder(pair_map, "s.csv", observer=collector)

        tx = builder.build(["01.03.2024", None, "100", "01", None, "x"], 7)

        assert tx.direction == Direction.INPUT
        conflicts = collector.of_kind(DIRECTION_CONFLICT)
        assert len(conflicts) == 1
        assert conflicts[0].row_index == 7
        assert conflicts[0].details['placement'] == 'output'

    def test_no_conflict_when_signals_agree(self, pair_map):
        """Test agreeing signals are silent."""
        collector = DiagnosticsCollector()
        RecordBuilder(pair_map, "s.csv", observer=collector).build(["01.03.2024", None, "100", "02", None, "x"], 1)
        assert collector.of_kind(DIRECTION_CONFLICT) == []

    def test_dialect_operation_codes(self, pair_map):
        """Test dialect codes replace the defaults."""
        dialect = DialectConfig({'operation_codes': {'77': 'output'}}, 'test')
        builder = RecordBuilder(pair_map, "s.csv", dialect=dialect)

        assert builder.build(["01.03.2024", "100", None, "77", None, "x"], 1).direction == Direction.OUTPUT
        # '01' is unknown to this dialect, so debit placement decides
        assert builder.build(["01.03.2024", None, "100", "01", None, "x"], 2).direction == Direction.OUTPUT


class TestVatAmount:
    """Test VAT amount strategies."""

    def test_explicit_column_absolute(self, pair_map):
        """Test the VAT column is used as an absolute value."""
        tx = RecordBuilder(pair_map, "s.csv").build(["01.03.2024", "600", None, None, "-100,00", "НДС 20% 5.00"], 1)
        assert tx.vat_amount == Decimal("100.00")

    def test_explicit_column_with_phrase(self, pair_map):
        """Test a VAT column holding a phrase is read like purpose text."""
        tx = RecordBuilder(pair_map, "s.csv").build(["01.03.2024", "600", None, None, "в т.ч. НДС 100-00", None], 1)
        assert tx.vat_amount == Decimal("100.00")

    def test_purpose_text(self, pair_map):
        """Test VAT is read from the payment purpose."""
        tx = RecordBuilder(pair_map, "s.csv").build(
            ["01.03.2024", "1200", None, None, None, "Оплата, в т.ч. НДС (20%) 200-00 руб."], 1)
        assert tx.vat_amount == Decimal("200.00")
        assert tx.vat_rate == Decimal("0.2")

    def test_exempt_purpose_is_decisive(self):
        """Test an exempt purpose settles VAT at zero despite a rate."""
        role_map = ColumnRoleMap({
            ColumnRole.DATE: 0, ColumnRole.AMOUNT: 1, ColumnRole.VAT_RATE: 2, ColumnRole.PAYMENT_PURPOSE: 3,
        })
        tx = RecordBuilder(role_map, "s.csv").build(["01.03.2024", "1000", "20", "Услуги. Без НДС"], 1)
        assert tx.vat_amount == 0

    def test_rate_fallback(self, signed_map):
        """Test |amount| x rate rounded half-up."""
        tx = RecordBuilder(signed_map, "s.csv").build(["2024-03-01", "-1000.05", "10%", "Acme"], 1)
        assert tx.vat_amount == Decimal("100.01")
        assert tx.vat_rate == Decimal("0.1")

    def test_nothing_gives_zero(self, signed_map):
        """Test zero when no strategy applies."""
        tx = RecordBuilder(signed_map, "s.csv").build(["2024-03-01", "1000", None, "Acme"], 1)
        assert tx.vat_amount == 0
        assert tx.vat_rate == 0


class TestFields:
    """Test remaining fields."""

    def test_id_and_source(self, signed_map):
        """Test ids combine source name and raw row index."""
        tx = RecordBuilder(signed_map, "june.csv").build(["2024-03-01", "10", None, "Acme"], 12)
        assert tx.id == "june.csv-12"
        assert tx.source == "june.csv"

    def test_date(self, signed_map):
        """Test the date is parsed."""
        tx = RecordBuilder(signed_map, "s.csv").build(["15.03.2024", "10", None, "Acme"], 1)
        assert tx.date == date(2024, 3, 15)

    def test_counterparty_column(self, signed_map):
        """Test the counterparty column is used with whitespace collapsed."""
        tx = RecordBuilder(signed_map, "s.csv").build(["2024-03-01", "10", None, "  ООО   Ромашка "], 1)
        assert tx.counterparty == "ООО Ромашка"

    def test_counterparty_fallback_to_purpose(self, pair_map):
        """Test the purpose is truncated into the counterparty when no column exists."""
        purpose = "Оплата   по счету " + "x" * 200
        tx = RecordBuilder(pair_map, "s.csv").build(["01.03.2024", "10", None, None, None, purpose], 1)
        assert tx.counterparty.startswith("Оплата по счету x")
        assert len(tx.counterparty) == 80

    def test_short_row(self, pair_map):
        """Test rows shorter than the header are tolerated."""
        tx = RecordBuilder(pair_map, "s.csv").build(["01.03.2024", "10"], 1)
        assert tx.amount == Decimal("-10")
        assert tx.counterparty == ""


class TestCellHelpers:
    """Test cell helpers."""

    def test_is_blank(self):
        """Test blank detection."""
        assert is_blank(None)
        assert is_blank("  ")
        assert is_blank("—")
        assert is_blank(float("nan"))
        assert not is_blank(0)
        assert not is_blank("0")

    def test_cell_text(self):
        """Test cell rendering."""
        assert cell_text(7707083893.0) == "7707083893"
        assert cell_text(" a \n b ") == "a b"
        assert cell_text(None) == ""
