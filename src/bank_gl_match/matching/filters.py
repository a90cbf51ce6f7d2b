"""
Candidate predicates shared by the matching passes.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable

from ..models.transaction import BankCategory, LedgerRecord


def same_day(first: date, second: date) -> bool:
    return first == second


def within_days(first: date, second: date, days: int) -> bool:
    """Inclusive, symmetric calendar-day window."""
    return abs((first - second).days) <= days


def ledger_amount(record: LedgerRecord, category: BankCategory) -> Decimal:
    """Ledger side amount compared against a bank record of ``category``."""
    if category == BankCategory.DEPOSIT:
        return record.debit
    return record.credit


class TypeCompatibility:
    """Allow-lists of ledger types per bank category."""

    def __init__(self, deposit_types: Iterable[str], withdrawal_types: Iterable[str]):
        self._allowed = {
            BankCategory.DEPOSIT: frozenset(deposit_types),
            BankCategory.WITHDRAWAL: frozenset(withdrawal_types),
        }

    def is_compatible(self, category: BankCategory, ledger_type: str) -> bool:
        return ledger_type in self._allowed.get(category, frozenset())
