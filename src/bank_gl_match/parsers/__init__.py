"""Parsers for bank statement and accounting ledger files."""

from .bank_parser import BankStatementParser
from .common import extract_year_from_filename
from .ledger_parser import LedgerParser

__all__ = ["BankStatementParser", "LedgerParser", "extract_year_from_filename"]
