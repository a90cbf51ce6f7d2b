"""
Value parsing helpers shared by the bank and ledger parsers.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional
import numbers
import re

import pandas as pd

CENTS = Decimal("0.01")
EXCEL_EPOCH = date(1899, 12, 30)
US_DATE_PATTERN = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
YEAR_PATTERN = re.compile(r"\b(20\d{2})\b")


def is_blank(value: Any) -> bool:
    """True for None, NaN/NaT and whitespace-only strings."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def clean_text(value: Any) -> str:
    """Cell value as a stripped string, "" for blanks."""
    if is_blank(value):
        return ""
    # Spreadsheet readers turn integer ids into floats in columns with blanks
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def parse_date(value: Any) -> date:
    """
    Parse a date from a CSV or spreadsheet cell.

    Accepts date/datetime/Timestamp objects, Excel serial numbers,
    ``MM/DD/YYYY`` strings and anything ``pandas.to_datetime`` understands.

    Raises:
        ValueError: If the value is blank or cannot be parsed
    """
    if is_blank(value):
        raise ValueError("Missing date")

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    if isinstance(value, numbers.Real) and not isinstance(value, bool):
        return EXCEL_EPOCH + timedelta(days=int(value))

    text = str(value).strip()
    us_match = US_DATE_PATTERN.match(text)
    if us_match:
        month, day, year = (int(part) for part in us_match.groups())
        return date(year, month, day)

    try:
        return pd.to_datetime(text).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Unable to parse date: {value}") from e


def parse_amount(value: Any) -> Decimal:
    """
    Parse a money amount rounded to cents; blanks are zero.

    Raises:
        ValueError: If the value is not numeric
    """
    if is_blank(value):
        return Decimal("0")

    if isinstance(value, str):
        value = value.replace("$", "").replace(",", "").strip()

    try:
        amount = Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Invalid amount: {value!r}") from e

    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")

    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def extract_year_from_filename(filename: str) -> Optional[int]:
    """Find a standalone 4-digit year (20xx) in a file name."""
    match = YEAR_PATTERN.search(filename)
    return int(match.group(1)) if match else None
