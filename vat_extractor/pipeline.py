"""
Main statement pipeline - ETL orchestration.

Coordinates reading, parsing, validation, aggregation and export.
"""
import asyncio
import logging
import time
from datetime import date
from pathlib import Path
from typing import Any, List, Optional, Sequence

from .analytics import monthly, totals
from .config import DialectConfig, DialectConfigLoader, get_dialect_loader
from .config.settings import DEFAULT_CURRENCY, DEFAULT_DIALECT, MAX_FILE_SIZE_MB
from .exporters import ExcelExporter, export_payload_json
from .models import ColumnRole, ParseResult
from .parsers import CompositeObserver, DiagnosticsCollector, LoggingObserver, StatementParser
from .parsers.diagnostics import AMOUNT_AMBIGUOUS, AMOUNT_UNPARSEABLE, DIRECTION_CONFLICT, HEADER_DEGRADED
from .parsers.header_resolver import find_header_row
from .readers import (
    EmptyStatementError,
    StatementInputError,
    UnreadableFileError,
    check_supported,
    get_reader,
)
from .utils import log_parse_audit, setup_logger

logger = setup_logger()

# Diagnostics surfaced to the user as warnings
WARNING_EVENT_KINDS = (HEADER_DEGRADED, DIRECTION_CONFLICT, AMOUNT_AMBIGUOUS, AMOUNT_UNPARSEABLE)

# Rows scanned for dialect identifiers when no header row is found
PREAMBLE_FALLBACK_ROWS = 10


class StatementPipeline:
    """
    Main pipeline for VAT statement processing (ETL pattern).

    Phases:
    1. Extract - Gate the file type and read raw rows
    2. Transform - Detect dialect, parse, validate, aggregate
    3. Load - Export to Excel and/or JSON (optional)

    Each call builds a fresh result; the pipeline holds no per-file state.
    """

    def __init__(
        self,
        dialect_loader: Optional[DialectConfigLoader] = None,
        today: Optional[date] = None,
        exporter: Optional[ExcelExporter] = None
    ):
        """
        Initialize pipeline.

        Args:
            dialect_loader: Dialect configurations (shared loader by default)
            today: Fixed reference date for validation (current date by default)
            exporter: Excel exporter used for the load phase
        """
        self.dialect_loader = dialect_loader or get_dialect_loader()
        self.today = today
        self.exporter = exporter or ExcelExporter()

    def process_bytes(
        self,
        data: bytes,
        filename: str,
        mime_type: Optional[str] = None,
        dialect_name: Optional[str] = None,
        output_path: Optional[Path] = None,
        json_path: Optional[Path] = None
    ) -> ParseResult:
        """
        Process statement file content end-to-end.

        Args:
            data: File content
            filename: Original filename (also the transaction id prefix)
            mime_type: MIME type reported by the uploader, if any
            dialect_name: Dialect to use (auto-detected if None)
            output_path: Excel output path (no Excel export if None)
            json_path: JSON payload output path (no JSON export if None)

        Returns:
            ParseResult; failures come back with success=False and a message
        """
        logger.info("=" * 80)
        logger.info(f"Processing statement: {filename}")
        logger.info("=" * 80)

        start_time = time.time()

        try:
            # Phase 1: EXTRACT
            logger.info("Phase 1: EXTRACT")
            rows = self._read_rows(data, filename, mime_type)

            # Phase 2: TRANSFORM
            logger.info("Phase 2: TRANSFORM")
            dialect = self._detect_dialect(rows, dialect_name)

            collector = DiagnosticsCollector()
            parser = StatementParser(
                dialect=dialect,
                observer=CompositeObserver(collector, LoggingObserver(logger)),
                today=self.today,
            )
            role_map = parser.resolve(rows)
            transactions = parser.parse(rows, filename, role_map)

            warnings = [str(event) for event in collector.events if event.kind in WARNING_EVENT_KINDS]
            warnings.extend(self._layout_warnings(role_map))
            if not transactions:
                warnings.append("No transactions found in statement")

            result = ParseResult(
                source=filename,
                transactions=transactions,
                totals=totals(transactions),
                monthly=monthly(transactions),
                success=True,
                dialect=dialect.dialect_name if dialect else None,
                currency=dialect.currency if dialect else DEFAULT_CURRENCY,
                role_map=role_map,
                warnings=warnings,
            )
            logger.info(f"✓ Parsed {result.transaction_count} transactions "
                        f"({len(result.invalid_transactions)} with violations)")

            # Phase 3: LOAD
            if output_path is not None or json_path is not None:
                logger.info("Phase 3: LOAD (Export)")
                if output_path is not None:
                    self.exporter.export(result, output_path)
                if json_path is not None:
                    export_payload_json(result.to_payload(), json_path)

            result.processing_time = time.time() - start_time

            log_parse_audit(
                source=filename,
                dialect=result.dialect,
                success=True,
                transaction_count=result.transaction_count,
                invalid_count=len(result.invalid_transactions),
            )

            logger.info("=" * 80)
            logger.info(f"Processing complete in {result.processing_time:.2f} seconds")
            logger.info(f"  Transactions: {result.transaction_count}")
            logger.info(f"  Input VAT: {result.totals.input_vat}")
            logger.info(f"  Output VAT: {result.totals.output_vat}")
            logger.info(f"  Net VAT: {result.totals.net_vat} ({result.totals.position})")
            logger.info("=" * 80)

            return result

        except StatementInputError as e:
            log_parse_audit(source=filename, dialect=dialect_name, success=False, error=str(e))
            return self._create_error_result(filename, str(e), processing_time=time.time() - start_time)

        except Exception as e:
            logger.exception(f"Pipeline failed: {e}")
            log_parse_audit(source=filename, dialect=dialect_name, success=False, error=str(e))
            return self._create_error_result(
                filename,
                f"Processing failed: {e}",
                processing_time=time.time() - start_time
            )

    def process_file(self, file_path: Path, **kwargs) -> ParseResult:
        """
        Process a statement file from disk.

        Accepts the same keyword arguments as process_bytes().
        """
        file_path = Path(file_path)
        try:
            data = self._read_file_bytes(file_path)
        except (StatementInputError, OSError) as e:
            log_parse_audit(source=file_path.name, dialect=kwargs.get('dialect_name'), success=False, error=str(e))
            return self._create_error_result(file_path.name, str(e), processing_time=0.0)

        return self.process_bytes(data, file_path.name, **kwargs)

    async def aprocess_file(self, file_path: Path, **kwargs) -> ParseResult:
        """
        Process a statement file from disk without blocking the event loop on I/O.

        The file is read in a worker thread; parsing itself runs synchronously.
        """
        file_path = Path(file_path)
        try:
            data = await asyncio.to_thread(self._read_file_bytes, file_path)
        except (StatementInputError, OSError) as e:
            log_parse_audit(source=file_path.name, dialect=kwargs.get('dialect_name'), success=False, error=str(e))
            return self._create_error_result(file_path.name, str(e), processing_time=0.0)

        return self.process_bytes(data, file_path.name, **kwargs)

    def _read_file_bytes(self, file_path: Path) -> bytes:
        """Gate by extension, validate the file on disk, then read its content."""
        get_reader(check_supported(file_path.name)).validate_file(file_path)
        return file_path.read_bytes()

    def _read_rows(self, data: bytes, filename: str, mime_type: Optional[str]) -> List[List[Any]]:
        """Gate the file type, enforce size limits, and read raw rows."""
        extension = check_supported(filename, mime_type)

        if not data:
            raise EmptyStatementError(f"File is empty: {filename}")

        if len(data) > MAX_FILE_SIZE_MB * 1024 * 1024:
            raise UnreadableFileError(
                f"File too large: {filename} ({len(data) / 1024 / 1024:.1f} MB, limit {MAX_FILE_SIZE_MB} MB)"
            )

        reader = get_reader(extension)
        logger.info(f"Reading {filename} with {reader.name}")
        return reader.read(data, filename)

    def _detect_dialect(self, rows: Sequence[Sequence[Any]], dialect_name: Optional[str]) -> Optional[DialectConfig]:
        """
        Pick the dialect: explicit name, then preamble identifiers, then DEFAULT_DIALECT.

        Raises:
            StatementInputError: If an explicitly requested dialect is unknown
        """
        if dialect_name:
            config = self.dialect_loader.get_config(dialect_name)
            if config is None:
                raise StatementInputError(
                    f"Unknown dialect: {dialect_name}. "
                    f"Known dialects: {', '.join(self.dialect_loader.get_all_dialects()) or 'none'}"
                )
            logger.info(f"Using dialect: {config.dialect_name}")
            return config

        header_index = find_header_row(rows)
        preamble_end = header_index + 1 if header_index is not None else PREAMBLE_FALLBACK_ROWS
        preamble = "\n".join(
            " ".join(str(cell) for cell in row if cell is not None)
            for row in rows[:preamble_end]
        )

        config = self.dialect_loader.detect_dialect(preamble)
        if config is None and DEFAULT_DIALECT:
            config = self.dialect_loader.get_config(DEFAULT_DIALECT)

        if config is None:
            logger.info("No dialect detected, using generic rules")
        return config

    def _layout_warnings(self, role_map) -> List[str]:
        """Warn about layouts that cannot yield meaningful transactions."""
        warnings = []
        if ColumnRole.DATE not in role_map:
            warnings.append("No date column found")
        if not any(role in role_map for role in (
            ColumnRole.AMOUNT, ColumnRole.DEBIT_AMOUNT, ColumnRole.CREDIT_AMOUNT
        )):
            warnings.append("No amount column found")
        return warnings

    def _create_error_result(self, source: str, error_message: str, processing_time: float) -> ParseResult:
        """Create error result."""
        logger.error(error_message)

        return ParseResult(
            source=source,
            success=False,
            error_message=error_message,
            processing_time=processing_time
        )
