"""Excel statement reader."""
import io
import logging
from typing import Any, List, Optional

import pandas as pd

from .base_reader import BaseReader, EmptyStatementError, UnreadableFileError, trim_trailing_empty_rows

logger = logging.getLogger(__name__)


class ExcelReader(BaseReader):
    """
    Read the first sheet of an Excel workbook into raw rows.

    Cells keep their native values (numbers, datetimes, text); formulas are
    not evaluated, the cached value stored in the file is used.
    """

    extensions = (".xlsx", ".xls")
    ENGINES = {
        ".xlsx": "openpyxl",
        ".xls": "xlrd",
    }

    def __init__(self, extension: Optional[str] = None):
        """
        Initialize Excel reader.

        Args:
            extension: Workbook format (".xlsx" or ".xls"); taken from the filename when omitted
        """
        super().__init__()
        self.extension = extension

    def read(self, data: bytes, filename: str = "") -> List[List[Any]]:
        engine = self._engine_for(filename)

        try:
            frame = pd.read_excel(io.BytesIO(data), sheet_name=0, header=None, engine=engine)
        except Exception as e:
            raise UnreadableFileError(f"Could not read Excel file {filename}: {e}") from e

        if frame.empty:
            raise EmptyStatementError(f"No rows found in {filename}")

        # NaN/NaT become None; object dtype keeps ints as ints
        frame = frame.astype(object).where(pd.notna(frame), None)
        rows = trim_trailing_empty_rows(frame.values.tolist())
        if not rows:
            raise EmptyStatementError(f"No rows found in {filename}")

        logger.info(f"Read {len(rows)} rows from {filename} (engine: {engine})")
        return rows

    def _engine_for(self, filename: str) -> str:
        if self.extension in self.ENGINES:
            return self.ENGINES[self.extension]
        lowered = filename.lower()
        for extension, engine in self.ENGINES.items():
            if lowered.endswith(extension):
                return engine
        return self.ENGINES[".xlsx"]
