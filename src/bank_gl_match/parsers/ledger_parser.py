"""
Accounting ledger export parser.
Parses general ledger reports (xlsx/xls or csv) into ledger records.
"""

from pathlib import Path
from typing import Any, Optional
import logging

import pandas as pd

from ..models.transaction import LedgerRecord
from ..config import LEDGER_COLUMN_DEFAULTS, ReconConfig
from ..utils.exceptions import LedgerParseError
from .common import clean_text, is_blank, parse_amount, parse_date

logger = logging.getLogger(__name__)


class LedgerParser:
    """
    Parser for general ledger exports.

    Ledger reports carry a few title rows above the column headers, so the
    file is read without a header and the header row is located by content.
    """

    def __init__(self, config: ReconConfig):
        """
        Initialize the parser with configuration.

        Args:
            config: Application configuration object
        """
        self.config = config
        self.ledger_config = config.input.ledger
        self.column_mappings = self.ledger_config.column_mappings

    def parse_file(
        self, file_path: Path, year: Optional[int] = None
    ) -> list[LedgerRecord]:
        """
        Parse a ledger export and return ledger records.

        Args:
            file_path: Path to the workbook or CSV file
            year: Keep only records dated in this year (optional)

        Returns:
            List of ledger records in file order

        Raises:
            LedgerParseError: If parsing fails
        """
        logger.info(f"Parsing ledger file: {file_path}")

        df = self._read_raw(file_path)
        rows = df.values.tolist()
        if not rows:
            raise LedgerParseError(f"Ledger file is empty: {file_path}")

        header_index = self._find_header_row(rows)
        headers = [clean_text(cell) for cell in rows[header_index]]

        missing = [
            self._column(key)
            for key in ("date", "transaction_id")
            if self._column(key) not in headers
        ]
        if missing:
            raise LedgerParseError(
                f"Ledger header row {header_index} is missing columns: {', '.join(missing)}"
            )

        records = self._process_rows(headers, rows[header_index + 1 :], year)
        logger.info(f"Loaded {len(records)} ledger transactions")

        return records

    def _read_raw(self, file_path: Path) -> pd.DataFrame:
        """Read every cell of the first sheet without interpreting headers."""
        try:
            if file_path.suffix.lower() == ".csv":
                return pd.read_csv(
                    file_path,
                    header=None,
                    dtype=str,
                    keep_default_na=False,
                    encoding=self.ledger_config.encoding,
                )
            return pd.read_excel(file_path, sheet_name=0, header=None)
        except Exception as e:
            logger.error(f"Failed to read ledger file: {e}")
            raise LedgerParseError(f"Failed to read ledger file: {e}") from e

    def _find_header_row(self, rows: list[list[Any]]) -> int:
        """
        Locate the header row among the first few rows.

        Returns:
            Index of the first row containing a header marker, or the
            configured default
        """
        markers = set(self.ledger_config.header_markers)
        for i, row in enumerate(rows[: self.ledger_config.header_search_rows]):
            if markers.intersection(clean_text(cell) for cell in row):
                return i
        return min(self.ledger_config.default_header_row, len(rows) - 1)

    def _process_rows(
        self, headers: list[str], rows: list[list[Any]], year: Optional[int]
    ) -> list[LedgerRecord]:
        records: list[LedgerRecord] = []

        for offset, row in enumerate(rows, start=1):
            # Skip empty rows and report subtotal lines
            if not row or is_blank(row[0]):
                continue

            row_values = {header: value for header, value in zip(headers, row) if header}
            try:
                record = self._normalize_row(row_values, year)
            except ValueError as e:
                logger.warning(f"Row {offset} after header: {e}, skipping")
                continue
            if record:
                records.append(record)

        return records

    def _normalize_row(
        self, row: dict[str, Any], year: Optional[int]
    ) -> Optional[LedgerRecord]:
        """
        Convert a header-keyed row to a LedgerRecord.

        Returns:
            Ledger record, or None if the row is filtered out
        """
        transaction_id = clean_text(row.get(self._column("transaction_id")))
        if not transaction_id:
            return None

        record_date = parse_date(row.get(self._column("date")))
        if year and record_date.year != year:
            return None

        account = clean_text(row.get(self._column("account")))
        account_filters = self.ledger_config.account_filters
        if account and account_filters and not any(f in account for f in account_filters):
            return None

        split_label = clean_text(row.get(self._column("split")))
        # Split is the best available name when the Name column is empty
        name = clean_text(row.get(self._column("name"))) or split_label

        return LedgerRecord(
            date=record_date,
            transaction_id=transaction_id,
            ledger_type=clean_text(row.get(self._column("type"))),
            account=account,
            name=name,
            memo=clean_text(row.get(self._column("memo"))),
            split_label=split_label,
            debit=parse_amount(row.get(self._column("debit"))),
            credit=parse_amount(row.get(self._column("credit"))),
            amount=parse_amount(row.get(self._column("amount"))),
        )

    def _column(self, key: str) -> str:
        return self.column_mappings.get(key, LEDGER_COLUMN_DEFAULTS[key])
