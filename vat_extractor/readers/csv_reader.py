"""CSV statement reader."""
import csv
import io
import logging
from typing import Any, List, Optional

from ..config.settings import CSV_ENCODINGS
from .base_reader import BaseReader, EmptyStatementError, UnreadableFileError, trim_trailing_empty_rows

logger = logging.getLogger(__name__)


class CSVReader(BaseReader):
    """
    Read CSV exports into raw rows.

    Russian bank exports are usually ';'-separated and cp1251-encoded, generic
    exports ','-separated UTF-8. Both the encoding and the delimiter are
    detected from the content.
    """

    extensions = (".csv",)
    DELIMITERS = (';', ',', '\t')
    SAMPLE_LINES = 30

    def __init__(self, encodings=CSV_ENCODINGS, delimiter: Optional[str] = None):
        """
        Initialize CSV reader.

        Args:
            encodings: Encodings to try, in order
            delimiter: Fixed delimiter (detected when omitted)
        """
        super().__init__()
        self.encodings = encodings
        self.delimiter = delimiter

    def read(self, data: bytes, filename: str = "") -> List[List[Any]]:
        text = self.decode(data, filename)
        if not text.strip():
            raise EmptyStatementError(f"File is empty: {filename}")

        delimiter = self.delimiter or self.detect_delimiter(text)
        logger.debug(f"Reading {filename} with delimiter {delimiter!r}")

        try:
            rows = [
                [cell if cell.strip() else None for cell in row]
                for row in csv.reader(io.StringIO(text), delimiter=delimiter)
            ]
        except csv.Error as e:
            raise UnreadableFileError(f"Could not read CSV file {filename}: {e}") from e

        rows = trim_trailing_empty_rows(rows)
        if not rows:
            raise EmptyStatementError(f"No rows found in {filename}")

        logger.info(f"Read {len(rows)} rows from {filename}")
        return rows

    def decode(self, data: bytes, filename: str = "") -> str:
        """
        Decode file content, trying each configured encoding.

        Raises:
            UnreadableFileError: If no encoding fits
        """
        for encoding in self.encodings:
            try:
                text = data.decode(encoding)
                logger.debug(f"Decoded {filename} as {encoding}")
                return text
            except UnicodeDecodeError:
                continue

        raise UnreadableFileError(
            f"Could not decode {filename} (tried {', '.join(self.encodings)})"
        )

    def detect_delimiter(self, text: str) -> str:
        """
        Pick the delimiter that splits the most sample lines into the most columns.

        Preamble lines rarely contain delimiters, so the widest split wins
        rather than the split of the first line.
        """
        sample = text.splitlines()[:self.SAMPLE_LINES]
        best_delimiter = self.DELIMITERS[0]
        best_score = (0, 0)

        for delimiter in self.DELIMITERS:
            try:
                widths = [len(row) for row in csv.reader(sample, delimiter=delimiter)]
            except csv.Error:
                continue
            if not widths:
                continue
            max_width = max(widths)
            score = (max_width, widths.count(max_width))
            if max_width > 1 and score > best_score:
                best_delimiter = delimiter
                best_score = score

        return best_delimiter
