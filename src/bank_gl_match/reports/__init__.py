"""Exports and reports for reconciliation results."""

from .csv_exporter import CsvExporter
from .excel_generator import ExcelReportGenerator
from .text_report import build_text_report, generate_text_report

__all__ = [
    "CsvExporter",
    "ExcelReportGenerator",
    "build_text_report",
    "generate_text_report",
]
