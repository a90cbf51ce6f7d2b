"""
Delimited exports of matched pairs and unmatched records.
"""

from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any
import logging

import pandas as pd

from ..models.transaction import BankRecord, LedgerRecord, MatchResult
from ..config import ReconConfig
from ..utils.exceptions import ReportGenerationError

logger = logging.getLogger(__name__)

MATCHED_COLUMNS = [
    "Match_Type",
    "Bank_Date",
    "Ledger_Date",
    "Amount",
    "Bank_Type",
    "Bank_Vendor",
    "Ledger_Name",
    "Ledger_Trans_#",
    "Ledger_Type",
    "Ledger_Memo",
    "Ledger_Split",
    "Bank_Description",
]
BANK_COLUMNS = ["Date", "Type", "Vendor", "Description", "Amount", "Source_File"]
LEDGER_COLUMNS = [
    "Date",
    "Trans #",
    "Type",
    "Name",
    "Memo",
    "Split",
    "Debit",
    "Credit",
    "Amount",
]


def format_date(value: date) -> str:
    return value.strftime("%m/%d/%Y")


def format_amount(value: Decimal) -> str:
    return f"{value:.2f}"


class CsvExporter:
    """Writes reconciliation results as CSV files named by year."""

    def __init__(self, config: ReconConfig):
        self.output_config = config.output

    def export_matched(self, matches: list[MatchResult], output_dir: Path, year: str) -> Path:
        rows = [
            {
                "Match_Type": m.match_kind,
                "Bank_Date": format_date(m.bank_date),
                "Ledger_Date": format_date(m.ledger_date),
                "Amount": format_amount(m.amount),
                "Bank_Type": m.bank_category.value,
                "Bank_Vendor": m.bank_vendor,
                "Ledger_Name": m.ledger_names,
                "Ledger_Trans_#": m.ledger_transaction_ids,
                "Ledger_Type": m.ledger_type,
                "Ledger_Memo": m.ledger_memos,
                "Ledger_Split": m.ledger_split_labels,
                "Bank_Description": m.bank_description,
            }
            for m in matches
        ]
        path = output_dir / self.output_config.matched_filename.format(year=year)
        return self._write(rows, MATCHED_COLUMNS, path)

    def export_unmatched_bank(
        self, records: list[BankRecord], output_dir: Path, year: str
    ) -> Path:
        rows = [
            {
                "Date": format_date(r.date),
                "Type": r.category.value,
                "Vendor": r.vendor,
                "Description": r.description,
                "Amount": format_amount(r.amount),
                "Source_File": r.source_file,
            }
            for r in records
        ]
        path = output_dir / self.output_config.unmatched_bank_filename.format(year=year)
        return self._write(rows, BANK_COLUMNS, path)

    def export_unmatched_ledger(
        self, records: list[LedgerRecord], output_dir: Path, year: str
    ) -> Path:
        rows = [
            {
                "Date": format_date(r.date),
                "Trans #": r.transaction_id,
                "Type": r.ledger_type,
                "Name": r.name,
                "Memo": r.memo,
                "Split": r.split_label,
                "Debit": format_amount(r.debit),
                "Credit": format_amount(r.credit),
                "Amount": format_amount(r.amount),
            }
            for r in records
        ]
        path = output_dir / self.output_config.unmatched_ledger_filename.format(year=year)
        return self._write(rows, LEDGER_COLUMNS, path)

    def _write(self, rows: list[dict[str, Any]], columns: list[str], path: Path) -> Path:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            pd.DataFrame(rows, columns=columns).to_csv(path, index=False, encoding="utf-8")
        except OSError as e:
            raise ReportGenerationError(f"Failed to write {path}: {e}") from e

        logger.info(f"Created: {path.name} ({len(rows)} rows)")
        return path
