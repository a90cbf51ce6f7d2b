"""Pytest configuration and fixtures."""

from datetime import date
from decimal import Decimal
import logging

import pytest

from bank_gl_match.config import ReconConfig
from bank_gl_match.matching.engine import ReconciliationEngine
from bank_gl_match.models.transaction import BankCategory, BankRecord, LedgerRecord


def make_bank(
    day: date,
    amount: str,
    category: BankCategory = BankCategory.WITHDRAWAL,
    vendor: str = "",
    description: str = "",
) -> BankRecord:
    """Build a bank record; withdrawals are stored negative like a statement."""
    value = Decimal(amount)
    if category == BankCategory.WITHDRAWAL:
        value = -value
    return BankRecord(
        date=day,
        category=category,
        vendor=vendor,
        description=description,
        amount=value,
    )


def make_ledger(
    day: date,
    debit: str = "0",
    credit: str = "0",
    ledger_type: str = "Check",
    name: str = "",
    transaction_id: str = "1",
    memo: str = "",
) -> LedgerRecord:
    return LedgerRecord(
        date=day,
        transaction_id=transaction_id,
        ledger_type=ledger_type,
        account="Operating Account",
        name=name,
        memo=memo,
        split_label="Expenses",
        debit=Decimal(debit),
        credit=Decimal(credit),
        amount=Decimal(debit) - Decimal(credit),
    )


@pytest.fixture
def config():
    """Default configuration."""
    return ReconConfig()


@pytest.fixture
def engine(config):
    """Engine with default passes and the built-in synonym table."""
    return ReconciliationEngine(config)


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers the CLI installs so later tests don't log to closed streams."""
    yield
    logger = logging.getLogger("bank_gl_match")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
