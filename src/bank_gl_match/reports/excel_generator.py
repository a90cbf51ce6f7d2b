"""
Excel report generator for reconciliation results.
Creates a multi-sheet workbook with formatted output.
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Optional
import logging

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Border, Side
from openpyxl.worksheet.worksheet import Worksheet

from ..models.transaction import ReconciliationOutcome
from ..config import ReconConfig
from ..utils.exceptions import ReportGenerationError

logger = logging.getLogger(__name__)

# Style definitions
HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True)
MATCH_FILL = PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid")
VARIANCE_FILL = PatternFill(start_color="FFEB9C", end_color="FFEB9C", fill_type="solid")
UNMATCHED_FILL = PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid")
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)


class ExcelReportGenerator:
    """Generates Excel reconciliation workbooks."""

    def __init__(self, config: ReconConfig):
        """
        Initialize the report generator.

        Args:
            config: Application configuration
        """
        self.config = config
        self.excel_config = config.output.excel
        self.sheet_names = self.excel_config.sheets

    def generate_report(
        self,
        outcome: ReconciliationOutcome,
        output_path: Path,
        year: str,
    ) -> Path:
        """
        Generate the complete reconciliation workbook.

        Args:
            outcome: Result of the matching engine
            output_path: Path for output file
            year: Reporting year shown on the summary sheet

        Returns:
            Path to generated report

        Raises:
            ReportGenerationError: If the workbook cannot be saved
        """
        logger.info(f"Generating Excel report: {output_path}")

        wb = Workbook()

        # Remove default sheet
        if wb.active:
            wb.remove(wb.active)

        self._create_summary_sheet(wb, outcome, year)
        self._create_matched_sheet(wb, outcome)
        self._create_unmatched_bank_sheet(wb, outcome)
        self._create_unmatched_ledger_sheet(wb, outcome)
        self._create_breakdown_sheet(wb, outcome)

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(output_path)
        except OSError as e:
            raise ReportGenerationError(f"Failed to save workbook {output_path}: {e}") from e

        logger.info(f"Report saved: {output_path}")
        return output_path

    def _sheet_name(self, key: str, default: str) -> str:
        return self.sheet_names.get(key, default)

    def _create_summary_sheet(
        self, wb: Workbook, outcome: ReconciliationOutcome, year: str
    ) -> None:
        """Create the summary sheet with key metrics."""
        ws = wb.create_sheet(self._sheet_name("summary", "Summary"))

        ws["A1"] = f"Bank Reconciliation Summary - {year}"
        ws["A1"].font = Font(size=16, bold=True)
        ws.merge_cells("A1:D1")

        rate = outcome.match_rate
        summary_data = [
            ("Generated:", datetime.now().strftime("%Y-%m-%d %H:%M:%S")),
            ("Config File:", self.config.config_file_path or "Default"),
            ("Total Bank Transactions:", outcome.total_bank),
            ("Total Ledger Transactions:", outcome.total_ledger),
            ("Matched:", len(outcome.matches)),
            ("Match Rate:", "n/a" if rate is None else f"{rate:.1f}%"),
            ("Unmatched Bank:", len(outcome.unmatched_bank)),
            ("Unmatched Ledger:", len(outcome.unmatched_ledger)),
            ("Processing Time:", f"{outcome.processing_time_seconds:.2f}s"),
        ]

        for i, (label, value) in enumerate(summary_data, start=3):
            ws[f"A{i}"] = label
            ws[f"B{i}"] = value

        row = len(summary_data) + 4
        ws[f"A{row}"] = "Matches by Pass"
        ws[f"A{row}"].font = Font(bold=True)
        for name, count in outcome.pass_counts.items():
            row += 1
            ws[f"A{row}"] = name
            ws[f"B{row}"] = count

        ws.column_dimensions["A"].width = 30
        ws.column_dimensions["B"].width = 40

    def _create_matched_sheet(self, wb: Workbook, outcome: ReconciliationOutcome) -> None:
        """Create the matched transactions sheet."""
        ws = wb.create_sheet(self._sheet_name("matched", "Matched"))
        headers = [
            "Match Type",
            "Bank Date",
            "Ledger Date",
            "Amount",
            "Bank Type",
            "Bank Vendor",
            "Ledger Name",
            "Ledger Trans #",
            "Ledger Type",
            "Ledger Memo",
            "Ledger Split",
            "Bank Description",
        ]
        self._write_headers(ws, headers)

        for row_num, match in enumerate(outcome.matches, start=2):
            row_data = [
                match.match_kind,
                match.bank_date,
                match.ledger_date,
                float(match.amount),
                match.bank_category.value,
                match.bank_vendor,
                match.ledger_names,
                match.ledger_transaction_ids,
                match.ledger_type,
                match.ledger_memos,
                match.ledger_split_labels,
                match.bank_description,
            ]
            fill = VARIANCE_FILL if match.needs_review else MATCH_FILL
            self._write_row(ws, row_num, row_data, fill)

        self._auto_fit_columns(ws)

    def _create_unmatched_bank_sheet(
        self, wb: Workbook, outcome: ReconciliationOutcome
    ) -> None:
        ws = wb.create_sheet(self._sheet_name("unmatched_bank", "Unmatched Bank"))
        self._write_headers(
            ws, ["Date", "Type", "Vendor", "Description", "Amount", "Source File"]
        )

        for row_num, record in enumerate(outcome.unmatched_bank, start=2):
            row_data = [
                record.date,
                record.category.value,
                record.vendor,
                record.description,
                float(record.amount),
                record.source_file,
            ]
            self._write_row(ws, row_num, row_data, UNMATCHED_FILL)

        self._auto_fit_columns(ws)

    def _create_unmatched_ledger_sheet(
        self, wb: Workbook, outcome: ReconciliationOutcome
    ) -> None:
        ws = wb.create_sheet(self._sheet_name("unmatched_ledger", "Unmatched Ledger"))
        self._write_headers(
            ws,
            ["Date", "Trans #", "Type", "Name", "Memo", "Split", "Debit", "Credit", "Amount"],
        )

        for row_num, record in enumerate(outcome.unmatched_ledger, start=2):
            row_data = [
                record.date,
                record.transaction_id,
                record.ledger_type,
                record.name,
                record.memo,
                record.split_label,
                float(record.debit),
                float(record.credit),
                float(record.amount),
            ]
            self._write_row(ws, row_num, row_data, UNMATCHED_FILL)

        self._auto_fit_columns(ws)

    def _create_breakdown_sheet(self, wb: Workbook, outcome: ReconciliationOutcome) -> None:
        """Create the match counts by match kind sheet."""
        ws = wb.create_sheet(self._sheet_name("breakdown", "Match Breakdown"))
        self._write_headers(ws, ["Match Type", "Count"])

        for row_num, (kind, count) in enumerate(outcome.matches_by_kind.items(), start=2):
            self._write_row(ws, row_num, [kind, count])

        self._auto_fit_columns(ws)

    def _write_headers(self, ws: Worksheet, headers: list[str]) -> None:
        for col, header in enumerate(headers, start=1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.fill = HEADER_FILL
            cell.font = HEADER_FONT
            cell.border = THIN_BORDER

    def _write_row(
        self, ws: Worksheet, row_num: int, row_data: list[Any], fill: Optional[PatternFill] = None
    ) -> None:
        for col, value in enumerate(row_data, start=1):
            cell = ws.cell(row=row_num, column=col, value=value)
            cell.border = THIN_BORDER
            if fill is not None:
                cell.fill = fill

    def _auto_fit_columns(self, ws: Worksheet) -> None:
        """Auto-fit column widths based on content."""
        for column_cells in ws.columns:
            max_length = max(
                (len(str(cell.value)) for cell in column_cells if cell.value is not None),
                default=0,
            )
            column = column_cells[0].column_letter
            ws.column_dimensions[column].width = min(max_length + 2, 50)
