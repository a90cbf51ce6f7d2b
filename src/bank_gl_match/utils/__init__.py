"""Utility modules."""

from .exceptions import (
    ReconciliationError,
    BankParseError,
    LedgerParseError,
    ConfigurationError,
    MatchStateError,
    ReportGenerationError,
)
from .logging_config import setup_logging

__all__ = [
    "ReconciliationError",
    "BankParseError",
    "LedgerParseError",
    "ConfigurationError",
    "MatchStateError",
    "ReportGenerationError",
    "setup_logging",
]
