"""Global settings and configuration."""
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent.parent
PACKAGE_DIR = Path(__file__).parent.parent

# Directories
DIALECTS_DIR = Path(os.getenv("DIALECTS_DIR", str(PACKAGE_DIR / "data" / "dialects")))
OUTPUT_DIR = Path(os.getenv("OUTPUT_DIR", str(PROJECT_ROOT / "output")))
LOGS_DIR = Path(os.getenv("LOGS_DIR", str(PROJECT_ROOT / "logs")))

# Input settings
MAX_FILE_SIZE_MB = int(os.getenv("MAX_FILE_SIZE_MB", "50"))
SUPPORTED_EXTENSIONS = (".csv", ".xls", ".xlsx")
ACCEPTED_MIME_TYPES = (
    "text/csv",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
)
CSV_ENCODINGS = ("utf-8-sig", "cp1251")

# Engine settings
VAT_TEXT_WINDOW = int(os.getenv("VAT_TEXT_WINDOW", "120"))
AMOUNT_CEILING = int(float(os.getenv("AMOUNT_CEILING", "1e9")))
MIN_VALID_YEAR = int(os.getenv("MIN_VALID_YEAR", "2000"))
COUNTERPARTY_FALLBACK_LENGTH = int(os.getenv("COUNTERPARTY_FALLBACK_LENGTH", "80"))
COUNTERPARTY_MIN_LENGTH = 2
COUNTERPARTY_MAX_LENGTH = 200
DEFAULT_DIALECT = os.getenv("DEFAULT_DIALECT", "")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = LOGS_DIR / "vat_extractor.log"

# Currency settings
DEFAULT_CURRENCY = "RUB"
CURRENCY_SYMBOLS = {
    "RUB": "₽",
    "USD": "$",
    "EUR": "€",
    "JPY": "¥",
}
