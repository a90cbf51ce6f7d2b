"""Data models for reconciliation."""

from .transaction import (
    BankCategory,
    BankRecord,
    LedgerRecord,
    MatchResult,
    ReconciliationOutcome,
)

__all__ = [
    "BankCategory",
    "BankRecord",
    "LedgerRecord",
    "MatchResult",
    "ReconciliationOutcome",
]
