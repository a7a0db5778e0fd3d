"""
Excel exporter for parsed VAT statements.

Generates Excel workbook with 3 sheets:
1. Operations - Normalized transactions (invalid rows highlighted)
2. Totals - Input/output/net VAT and the parse summary
3. Monthly - Net VAT per calendar month
"""
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import openpyxl
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from ..config.settings import DEFAULT_CURRENCY, OUTPUT_DIR
from ..models import Direction, ParseResult

logger = logging.getLogger(__name__)


class ExcelExporter:
    """Export parse results to a formatted Excel workbook."""

    # Colors
    HEADER_COLOR = "366092"  # Dark blue
    WARNING_COLOR = "FFC7CE"  # Light red
    SUCCESS_COLOR = "C6EFCE"  # Light green
    INFO_COLOR = "FFEB9C"  # Light yellow

    CURRENCY_FORMATS = {
        'RUB': '#,##0.00 ₽',
        'EUR': '€#,##0.00',
        'USD': '$#,##0.00',
        'JPY': '¥#,##0',
    }

    DIRECTION_LABELS = {
        Direction.INPUT: "Input",
        Direction.OUTPUT: "Output",
    }

    def __init__(self, currency: str = DEFAULT_CURRENCY):
        """
        Initialize Excel exporter.

        Args:
            currency: Currency code used for number formats
        """
        self.currency_format = self.CURRENCY_FORMATS.get(currency.upper(), f'{currency} #,##0.00')

    def export(self, result: ParseResult, output_path: Path, highlight_invalid: bool = True) -> Path:
        """
        Export parse result to Excel.

        Args:
            result: Parse result to export
            output_path: Path for output Excel file
            highlight_invalid: Whether to highlight rows carrying violations

        Returns:
            Path to created Excel file
        """
        logger.info(f"Exporting to Excel: {output_path}")

        wb = openpyxl.Workbook()

        # Remove default sheet
        if "Sheet" in wb.sheetnames:
            wb.remove(wb["Sheet"])

        self._create_operations_sheet(wb, result, highlight_invalid)
        self._create_totals_sheet(wb, result)
        self._create_monthly_sheet(wb, result)

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)
        logger.info(f"Excel export complete: {output_path}")

        return output_path

    def _write_header(self, ws, headers) -> None:
        for col, header in enumerate(headers, 1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.font = Font(bold=True, color="FFFFFF")
            cell.fill = PatternFill(start_color=self.HEADER_COLOR, fill_type="solid")
            cell.alignment = Alignment(horizontal="center", vertical="center")

    def _create_operations_sheet(self, wb: openpyxl.Workbook, result: ParseResult, highlight_invalid: bool) -> None:
        """Create operations sheet with one row per transaction."""
        ws = wb.create_sheet("Operations", 0)

        headers = ["ID", "Date", "Counterparty", "Amount", "VAT Rate", "VAT Amount", "Direction", "Errors"]
        self._write_header(ws, headers)

        for row, txn in enumerate(result.transactions, 2):
            ws.cell(row=row, column=1, value=txn.id)
            ws.cell(row=row, column=2, value=txn.date.strftime("%Y-%m-%d") if txn.date else "")
            ws.cell(row=row, column=3, value=txn.counterparty)
            ws.cell(row=row, column=4, value=float(txn.amount) if txn.amount.is_finite() else "")
            ws.cell(row=row, column=5, value=float(txn.vat_rate))
            ws.cell(row=row, column=6, value=float(txn.vat_amount))
            ws.cell(row=row, column=7, value=self.DIRECTION_LABELS[txn.direction])
            ws.cell(row=row, column=8, value="; ".join(v.message for v in txn.violations))

            ws.cell(row=row, column=4).number_format = self.currency_format
            ws.cell(row=row, column=5).number_format = '0%'
            ws.cell(row=row, column=6).number_format = self.currency_format

            if highlight_invalid and txn.violations:
                for col in range(1, len(headers) + 1):
                    ws.cell(row=row, column=col).fill = PatternFill(
                        start_color=self.WARNING_COLOR,
                        fill_type="solid"
                    )

        for col in range(1, len(headers) + 1):
            ws.column_dimensions[get_column_letter(col)].width = 15

        # Text columns wider
        ws.column_dimensions['A'].width = 30
        ws.column_dimensions['C'].width = 50
        ws.column_dimensions['H'].width = 50

        ws.freeze_panes = "A2"

    def _create_totals_sheet(self, wb: openpyxl.Workbook, result: ParseResult) -> None:
        """Create totals sheet with the VAT position and parse summary."""
        ws = wb.create_sheet("Totals", 1)

        totals = result.totals
        summary = totals.summary()
        rows = [
            ("VAT TOTALS", None),
            ("Input VAT", float(totals.input_vat)),
            ("Output VAT", float(totals.output_vat)),
            ("Net VAT", float(totals.net_vat)),
            (summary['description'], summary['amount']),
            ("", None),
            ("PARSE SUMMARY", None),
            ("Source", result.source),
            ("Dialect", result.dialect or "generic"),
            ("Header Row", result.header_row_index),
            ("Transactions", result.transaction_count),
            ("Invalid Transactions", len(result.invalid_transactions)),
            ("Processing Time", f"{result.processing_time:.2f} seconds"),
            ("Generated At", result.generated_at.strftime("%Y-%m-%d %H:%M:%S UTC")),
        ]

        for row, (label, value) in enumerate(rows, 1):
            ws.cell(row=row, column=1, value=label)
            if value is not None:
                ws.cell(row=row, column=2, value=value)
            if label and label.isupper():
                ws.cell(row=row, column=1).font = Font(bold=True)

        for row in (2, 3, 4, 5):
            ws.cell(row=row, column=2).number_format = self.currency_format

        # Net position: payable in yellow, refund in green
        ws.cell(row=5, column=2).fill = PatternFill(
            start_color=self.INFO_COLOR if totals.position == "payable" else self.SUCCESS_COLOR,
            fill_type="solid"
        )

        row = len(rows) + 2
        if result.warnings:
            ws.cell(row=row, column=1, value="Warnings:")
            ws.cell(row=row, column=1).font = Font(bold=True)
            row += 1
            for warning in result.warnings:
                ws.cell(row=row, column=2, value=f"⚠ {warning}")
                ws.cell(row=row, column=2).fill = PatternFill(
                    start_color=self.INFO_COLOR,
                    fill_type="solid"
                )
                row += 1

        ws.column_dimensions['A'].width = 30
        ws.column_dimensions['B'].width = 60

    def _create_monthly_sheet(self, wb: openpyxl.Workbook, result: ParseResult) -> None:
        """Create monthly net VAT sheet."""
        ws = wb.create_sheet("Monthly", 2)

        headers = ["Month", "Input VAT", "Output VAT", "Net VAT"]
        self._write_header(ws, headers)

        for row, bucket in enumerate(result.monthly, 2):
            ws.cell(row=row, column=1, value=bucket.month)
            ws.cell(row=row, column=2, value=float(bucket.input_vat))
            ws.cell(row=row, column=3, value=float(bucket.output_vat))
            ws.cell(row=row, column=4, value=float(bucket.net_vat))
            for col in (2, 3, 4):
                ws.cell(row=row, column=col).number_format = self.currency_format

        for col in range(1, len(headers) + 1):
            ws.column_dimensions[get_column_letter(col)].width = 15


def generate_output_filename(
    source_name: str,
    extension: str = ".xlsx",
    output_dir: Optional[Path] = None
) -> Path:
    """
    Generate standardized output filename.

    Format: {source stem}_vat_{timestamp}{extension}

    Args:
        source_name: Name of the processed statement file
        extension: Output file extension
        output_dir: Output directory (default: OUTPUT_DIR)

    Returns:
        Path for output file
    """
    if output_dir is None:
        output_dir = OUTPUT_DIR

    stem = Path(source_name).stem.replace(" ", "_") or "statement"
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    return Path(output_dir) / f"{stem}_vat_{timestamp}{extension}"
