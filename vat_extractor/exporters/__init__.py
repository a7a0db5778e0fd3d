"""Result exporters."""
from .excel_exporter import ExcelExporter, generate_output_filename
from .payload import build_payload, export_payload_json

__all__ = ['ExcelExporter', 'generate_output_filename', 'build_payload', 'export_payload_json']
