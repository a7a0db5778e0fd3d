"""Tests for dialect configuration loading."""
import pytest

from vat_extractor.config import DialectConfig, DialectConfigLoader, normalize_operation_code
from vat_extractor.config.dialect_loader import DEFAULT_OPERATION_CODES, DEFAULT_SKIP_PATTERNS
from vat_extractor.models import Direction


class TestNormalizeOperationCode:
    """Test operation code normalization."""

    @pytest.mark.parametrize("raw, expected", [
        ("01", "01"),
        ("1", "01"),
        (1, "01"),
        (17.0, "17"),
        (" 02 ", "02"),
        ("ПП", "пп"),
        (None, ""),
    ])
    def test_forms(self, raw, expected):
        """Test cell values map to one canonical code."""
        assert normalize_operation_code(raw) == expected


class TestDialectConfig:
    """Test dialect configuration properties."""

    def test_default(self):
        """Test the generic dialect."""
        dialect = DialectConfig.default()

        assert dialect.dialect_name == "generic"
        assert dialect.operation_codes == DEFAULT_OPERATION_CODES
        assert dialect.skip_patterns == DEFAULT_SKIP_PATTERNS
        assert dialect.header_synonyms == {}
        assert dialect.currency == "RUB"

    def test_operation_codes_replace_defaults(self):
        """Test configured codes replace the default table."""
        dialect = DialectConfig({'operation_codes': {1: 'OUTPUT', '9': 'input'}}, 'test')
        assert dialect.operation_codes == {'01': Direction.OUTPUT, '09': Direction.INPUT}

    def test_unknown_direction_ignored(self):
        """Test entries with unknown directions are dropped."""
        dialect = DialectConfig({'operation_codes': {'01': 'sideways', '02': 'output'}}, 'test')
        assert dialect.operation_codes == {'02': Direction.OUTPUT}

    def test_skip_patterns_extend_defaults(self):
        """Test dialect skip patterns are appended."""
        dialect = DialectConfig({'skip_patterns': ['^x']}, 'test')
        assert dialect.skip_patterns == DEFAULT_SKIP_PATTERNS + ['^x']

    def test_currency(self):
        """Test the configured currency."""
        assert DialectConfig({'currency': 'JPY'}, 'test').currency == 'JPY'


class TestDialectConfigLoader:
    """Test loading packaged and custom dialects."""

    def test_packaged_dialects(self, dialect_loader):
        """Test packaged dialect files are loaded."""
        assert "sberbank" in dialect_loader.get_all_dialects()
        assert "mufg" in dialect_loader.get_all_dialects()
        assert dialect_loader.supported_dialects_count >= 2

    def test_sberbank(self, sberbank_dialect):
        """Test the Sberbank dialect contents."""
        assert sberbank_dialect.currency == "RUB"
        assert sberbank_dialect.operation_codes['17'] == Direction.INPUT
        assert sberbank_dialect.operation_codes['02'] == Direction.OUTPUT
        assert "ВО" in sberbank_dialect.header_synonyms['operation_code']

    def test_case_insensitive_lookup(self, dialect_loader):
        """Test dialect names are case-insensitive."""
        assert dialect_loader.get_config("SberBank") is dialect_loader.get_config("sberbank")
        assert dialect_loader.get_config("unknown") is None

    def test_detect(self, dialect_loader):
        """Test detection by preamble identifiers."""
        detected = dialect_loader.detect_dialect("ПАО Сбербанк\nВыписка операций по лицевому счету")
        assert detected.dialect_name == "sberbank"

        detected = dialect_loader.detect_dialect("三菱UFJ銀行 入出金明細")
        assert detected.dialect_name == "mufg"

    def test_detect_nothing(self, dialect_loader):
        """Test unknown preambles give None."""
        assert dialect_loader.detect_dialect("Some Other Bank plc") is None

    def test_detect_only_preamble(self, dialect_loader):
        """Test identifiers deep in the file are ignored."""
        assert dialect_loader.detect_dialect("x" * 2500 + "ПАО СБЕРБАНК") is None

    def test_custom_directory(self, tmp_path):
        """Test loading from a custom directory."""
        (tmp_path / "tochka.yaml").write_text(
            "Tochka:\n  identifiers: ['Точка']\n  currency: RUB\n", encoding="utf-8"
        )
        (tmp_path / "broken.yaml").write_text("a: [unclosed\n", encoding="utf-8")

        loader = DialectConfigLoader(tmp_path)

        assert loader.get_all_dialects() == ["tochka"]
        assert loader.get_config("tochka").identifiers == ["Точка"]

    def test_missing_directory(self, tmp_path):
        """Test a missing directory gives no dialects."""
        assert DialectConfigLoader(tmp_path / "absent").supported_dialects_count == 0
