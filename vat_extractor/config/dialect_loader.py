"""Load and manage statement dialect configurations."""
import logging
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from ..models import Direction
from .settings import DIALECTS_DIR

logger = logging.getLogger(__name__)

# Sberbank-style "ВО" (operation kind) codes, recognised when no dialect overrides them
DEFAULT_OPERATION_CODES = {
    '01': Direction.INPUT,   # outgoing payment order
    '02': Direction.OUTPUT,  # incoming payment
    '17': Direction.INPUT,   # bank fees and commissions
}

# Footer/summary rows that carry amounts but are not operations
DEFAULT_SKIP_PATTERNS = [
    r'^\s*(итого|всего|total)\b',
    r'^\s*(входящий|исходящий)\s+остаток',
    r'^\s*(opening|closing)\s+balance',
    r'^\s*количество\s+операций',
    r'^\s*обороты\b',
]


def normalize_operation_code(raw) -> str:
    """Canonical form of an operation code cell ('1', 1, '01 ' -> '01')."""
    if raw is None:
        return ''
    if isinstance(raw, float) and raw.is_integer():
        raw = int(raw)
    code = str(raw).strip()
    return code.zfill(2) if code.isdigit() else code.lower()


class DialectConfig:
    """Represents a statement dialect configuration."""

    def __init__(self, config_dict: dict, dialect_name: str):
        """Initialize dialect config from dictionary."""
        self.dialect_name = dialect_name
        self._config = config_dict or {}

    @classmethod
    def default(cls) -> 'DialectConfig':
        """Generic dialect used when no statement-specific config applies."""
        return cls({}, 'generic')

    @property
    def identifiers(self) -> List[str]:
        """Get list of identifier strings found in statement preambles."""
        return self._config.get('identifiers', [])

    @property
    def operation_codes(self) -> Dict[str, Direction]:
        """Get operation code to VAT direction mapping."""
        raw_codes = self._config.get('operation_codes')
        if raw_codes is None:
            return dict(DEFAULT_OPERATION_CODES)

        codes = {}
        for code, direction in raw_codes.items():
            try:
                codes[normalize_operation_code(code)] = Direction(str(direction).lower())
            except ValueError:
                logger.warning(
                    f"Ignoring operation code {code!r} in dialect {self.dialect_name}: "
                    f"unknown direction {direction!r}"
                )
        return codes

    @property
    def header_synonyms(self) -> Dict[str, List[str]]:
        """Get extra header phrases per column role (role value -> phrases)."""
        return self._config.get('header_synonyms', {})

    @property
    def zero_vat_phrases(self) -> List[str]:
        """Get extra VAT-exempt phrases."""
        return self._config.get('zero_vat_phrases', [])

    @property
    def skip_patterns(self) -> List[str]:
        """Get footer skip patterns (defaults plus dialect-specific ones)."""
        return DEFAULT_SKIP_PATTERNS + self._config.get('skip_patterns', [])

    @property
    def currency(self) -> str:
        """Get currency code (e.g., 'RUB', 'JPY')."""
        return self._config.get('currency', 'RUB')


class DialectConfigLoader:
    """Loads and manages statement dialect configurations."""

    def __init__(self, config_dir: Path = DIALECTS_DIR):
        """
        Initialize config loader.

        Args:
            config_dir: Directory containing dialect YAML files
        """
        self.config_dir = config_dir
        self._configs: Dict[str, DialectConfig] = {}
        self._load_all_configs()

    def _load_all_configs(self) -> None:
        """Load all dialect configuration files."""
        if not self.config_dir.exists():
            logger.warning(f"Dialect config directory not found: {self.config_dir}")
            return

        yaml_files = sorted(self.config_dir.glob("*.yaml")) + sorted(self.config_dir.glob("*.yml"))

        if not yaml_files:
            logger.warning(f"No dialect config files found in {self.config_dir}")
            return

        for yaml_file in yaml_files:
            try:
                self._load_config(yaml_file)
            except (OSError, yaml.YAMLError, AttributeError) as e:
                logger.error(f"Failed to load config {yaml_file}: {e}")

        logger.info(f"Loaded {len(self._configs)} dialect configurations")

    def _load_config(self, yaml_file: Path) -> None:
        """
        Load a single dialect configuration file.

        Args:
            yaml_file: Path to YAML config file
        """
        with open(yaml_file, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        # Each YAML file has a top-level key with the dialect name
        # e.g., sberbank: {...}
        for dialect_name, config_dict in data.items():
            if isinstance(config_dict, dict):
                self._configs[dialect_name.lower()] = DialectConfig(config_dict, dialect_name)
                logger.debug(f"Loaded config for {dialect_name}")

    def get_config(self, dialect_name: str) -> Optional[DialectConfig]:
        """
        Get configuration for a specific dialect.

        Args:
            dialect_name: Dialect name (case-insensitive)

        Returns:
            DialectConfig object or None if not found
        """
        return self._configs.get(dialect_name.lower())

    def detect_dialect(self, text: str) -> Optional[DialectConfig]:
        """
        Detect dialect from statement preamble text using identifiers.

        Args:
            text: Preamble and header text of the statement

        Returns:
            DialectConfig object or None if no dialect matches
        """
        # Only check first 2000 characters (preamble/header section)
        header_text = text[:2000].lower()

        for dialect_name, config in self._configs.items():
            for identifier in config.identifiers:
                if identifier.lower() in header_text:
                    logger.info(f"Detected dialect: {dialect_name}")
                    return config

        logger.debug("No dialect identifiers found in statement preamble")
        return None

    def get_all_dialects(self) -> List[str]:
        """Get list of all known dialect names."""
        return list(self._configs.keys())

    @property
    def supported_dialects_count(self) -> int:
        """Get count of known dialects."""
        return len(self._configs)


# Singleton instance
_loader: Optional[DialectConfigLoader] = None


def get_dialect_loader() -> DialectConfigLoader:
    """Get singleton instance of DialectConfigLoader."""
    global _loader
    if _loader is None:
        _loader = DialectConfigLoader()
    return _loader
