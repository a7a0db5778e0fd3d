"""Base reader abstract class and input errors."""
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, List, Optional

from ..config.settings import ACCEPTED_MIME_TYPES, MAX_FILE_SIZE_MB, SUPPORTED_EXTENSIONS


class StatementInputError(Exception):
    """Base exception for files that cannot be turned into statement rows."""
    pass


class UnsupportedFileError(StatementInputError):
    """File type is not one of the accepted spreadsheet formats."""
    pass


class UnreadableFileError(StatementInputError):
    """File has an accepted type but its content cannot be decoded."""
    pass


class EmptyStatementError(StatementInputError):
    """File decodes to no rows at all."""
    pass


def check_supported(filename: str, mime_type: Optional[str] = None) -> str:
    """
    Gate a file by extension or MIME type before any parse attempt.

    Args:
        filename: Original filename
        mime_type: MIME type reported by the uploader, if any

    Returns:
        Lower-cased extension of the file (".csv", ".xls" or ".xlsx");
        for MIME-only matches the extension implied by the MIME type

    Raises:
        UnsupportedFileError: If neither the extension nor the MIME type is accepted
    """
    extension = Path(filename).suffix.lower()
    if extension in SUPPORTED_EXTENSIONS:
        return extension

    if mime_type in ACCEPTED_MIME_TYPES:
        return {
            "text/csv": ".csv",
            "application/vnd.ms-excel": ".xls",
        }.get(mime_type, ".xlsx")

    raise UnsupportedFileError(
        f"Unsupported file type: {filename}. "
        f"Please upload a CSV or Excel file ({', '.join(SUPPORTED_EXTENSIONS)})"
    )


class BaseReader(ABC):
    """
    Abstract base class for statement readers.

    Readers turn file bytes into raw rows: lists of cell values with empty
    cells as None. They do not interpret headers or values.
    """

    extensions: tuple = ()

    def __init__(self):
        """Initialize the reader."""
        self.name = self.__class__.__name__

    @abstractmethod
    def read(self, data: bytes, filename: str = "") -> List[List[Any]]:
        """
        Read raw rows from file content.

        Args:
            data: File content
            filename: Original filename (used in messages)

        Returns:
            List of rows

        Raises:
            UnreadableFileError: If the content cannot be decoded
            EmptyStatementError: If the content holds no rows
        """
        pass

    def can_handle(self, extension: str) -> bool:
        """Check if this reader handles a file extension."""
        return extension.lower() in self.extensions

    def validate_file(self, file_path: Path) -> None:
        """
        Validate that the file exists, is non-empty and within the size limit.

        Raises:
            FileNotFoundError: If file doesn't exist
            UnreadableFileError: If the path is not a regular file or is too large
            EmptyStatementError: If the file is empty
        """
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        if not file_path.is_file():
            raise UnreadableFileError(f"Not a file: {file_path}")

        size = file_path.stat().st_size
        if size == 0:
            raise EmptyStatementError(f"File is empty: {file_path.name}")

        if size > MAX_FILE_SIZE_MB * 1024 * 1024:
            raise UnreadableFileError(
                f"File too large: {file_path.name} ({size / 1024 / 1024:.1f} MB, limit {MAX_FILE_SIZE_MB} MB)"
            )


def trim_trailing_empty_rows(rows: List[List[Any]]) -> List[List[Any]]:
    """Strip trailing empty rows (spreadsheets often pad the used range)."""
    end = len(rows)
    while end and all(cell is None or (isinstance(cell, str) and not cell.strip()) for cell in rows[end - 1]):
        end -= 1
    return rows[:end]
