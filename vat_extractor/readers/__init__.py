"""Statement file readers."""
from typing import Any, List, Optional

from .base_reader import (
    BaseReader,
    StatementInputError,
    UnsupportedFileError,
    UnreadableFileError,
    EmptyStatementError,
    check_supported,
)
from .csv_reader import CSVReader
from .excel_reader import ExcelReader


def get_reader(extension: str) -> BaseReader:
    """
    Get the reader for a file extension.

    Raises:
        UnsupportedFileError: If no reader handles the extension
    """
    extension = extension.lower()
    for reader in (CSVReader(), ExcelReader(extension)):
        if reader.can_handle(extension):
            return reader
    raise UnsupportedFileError(f"No reader for {extension!r} files")


def read_statement_rows(data: bytes, filename: str, mime_type: Optional[str] = None) -> List[List[Any]]:
    """Gate a file by type and read its raw rows."""
    extension = check_supported(filename, mime_type)
    return get_reader(extension).read(data, filename)


__all__ = [
    'BaseReader',
    'StatementInputError',
    'UnsupportedFileError',
    'UnreadableFileError',
    'EmptyStatementError',
    'check_supported',
    'CSVReader',
    'ExcelReader',
    'get_reader',
    'read_statement_rows',
]
