"""
Bank statement CSV parser.
Reads statement exports and converts rows to bank records.
"""

from pathlib import Path
from typing import Optional
import logging

import pandas as pd

from ..models.transaction import BankCategory, BankRecord
from ..config import BANK_COLUMN_DEFAULTS, ReconConfig
from ..utils.exceptions import BankParseError
from .common import clean_text, parse_amount, parse_date

logger = logging.getLogger(__name__)

CATEGORIES = {category.value: category for category in BankCategory}


class BankStatementParser:
    """
    Parser for bank statement CSV files.

    Fee rows and rows outside the requested year are dropped here so the
    matching engine only sees matchable records.
    """

    def __init__(self, config: ReconConfig):
        """
        Initialize the parser with configuration.

        Args:
            config: Application configuration object
        """
        self.config = config
        self.bank_config = config.input.bank
        self.column_mappings = self.bank_config.column_mappings

    def parse_file(self, file_path: Path, year: Optional[int] = None) -> list[BankRecord]:
        """
        Parse a bank statement CSV file.

        Args:
            file_path: Path to the CSV file
            year: Keep only records dated in this year (optional)

        Returns:
            List of bank records in file order

        Raises:
            BankParseError: If the file cannot be read or lacks required columns
        """
        logger.info(f"Parsing bank CSV file: {file_path}")

        try:
            df = pd.read_csv(
                file_path,
                encoding=self.bank_config.encoding,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
            )
        except Exception as e:
            logger.error(f"Failed to read bank CSV file: {e}")
            raise BankParseError(f"Failed to read bank CSV file: {e}") from e

        required = [self._column(key) for key in ("date", "type", "amount")]
        missing = [col for col in required if col not in df.columns]
        if missing:
            raise BankParseError(f"Bank CSV is missing columns: {', '.join(missing)}")

        records = self._process_dataframe(df, year)
        logger.info(f"Loaded {len(records)} bank transactions")

        return records

    def _process_dataframe(
        self, df: pd.DataFrame, year: Optional[int]
    ) -> list[BankRecord]:
        records: list[BankRecord] = []
        excluded = set(self.bank_config.excluded_types)

        for idx, row in df.iterrows():
            try:
                record = self._normalize_row(row, excluded, year)
            except ValueError as e:
                logger.warning(f"Row {idx}: {e}, skipping")
                continue
            if record:
                records.append(record)

        return records

    def _normalize_row(
        self, row: pd.Series, excluded: set[str], year: Optional[int]
    ) -> Optional[BankRecord]:
        """
        Convert a CSV row to a BankRecord.

        Returns:
            Bank record, or None if the row is filtered out
        """
        record_date = parse_date(row.get(self._column("date")))
        if year and record_date.year != year:
            return None

        type_value = clean_text(row.get(self._column("type")))
        if type_value in excluded:
            return None

        category = CATEGORIES.get(type_value)
        if category is None:
            raise ValueError(f"unknown transaction type {type_value!r}")

        return BankRecord(
            date=record_date,
            category=category,
            vendor=clean_text(row.get(self._column("vendor"))),
            description=clean_text(row.get(self._column("description"))),
            amount=parse_amount(row.get(self._column("amount"))),
            source_file=clean_text(row.get(self._column("source_file"))),
        )

    def _column(self, key: str) -> str:
        return self.column_mappings.get(key, BANK_COLUMN_DEFAULTS[key])
