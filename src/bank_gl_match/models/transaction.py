"""Data models for bank and ledger records and reconciliation results."""

from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional


class BankCategory(Enum):
    """Direction of a bank statement line."""

    DEPOSIT = "Deposit"  # Money in
    WITHDRAWAL = "Withdrawal"  # Money out


@dataclass
class BankRecord:
    """
    One bank statement line.

    ``amount`` is signed as it appears on the statement; matching always
    compares its absolute value.
    """

    date: date
    category: BankCategory
    vendor: str
    description: str
    amount: Decimal
    source_file: str = ""

    # Matching state, set once by the engine when the record is committed
    matched: bool = False

    @property
    def absolute_amount(self) -> Decimal:
        return abs(self.amount)


@dataclass
class LedgerRecord:
    """
    One accounting ledger line.

    Exactly one of ``debit``/``credit`` is normally non-zero, but both are
    always present.
    """

    date: date
    transaction_id: str
    ledger_type: str
    account: str
    name: str
    memo: str
    split_label: str
    debit: Decimal = Decimal("0")
    credit: Decimal = Decimal("0")
    amount: Decimal = Decimal("0")

    matched: bool = False


@dataclass(frozen=True)
class MatchResult:
    """A committed match between one bank record and one or more ledger records."""

    match_kind: str
    pass_name: str
    bank_date: date
    ledger_date: date
    amount: Decimal
    bank_category: BankCategory
    bank_vendor: str
    bank_description: str
    ledger_transaction_ids: str
    ledger_type: str
    ledger_names: str
    ledger_memos: str
    ledger_split_labels: str
    ledger_count: int = 1
    similarity: Optional[float] = None
    # Set for matches from the looser passes
    needs_review: bool = False

    @classmethod
    def from_records(
        cls,
        match_kind: str,
        pass_name: str,
        bank: BankRecord,
        ledger: list[LedgerRecord],
        similarity: Optional[float] = None,
        needs_review: bool = False,
    ) -> "MatchResult":
        """Build a match row, joining ledger fields when several records were consumed."""
        if not ledger:
            raise ValueError("A match needs at least one ledger record")

        first = ledger[0]
        if len(ledger) == 1:
            transaction_ids = first.transaction_id
            ledger_type = first.ledger_type
            names = first.name
            memos = first.memo
            split_labels = first.split_label
        else:
            transaction_ids = ", ".join(r.transaction_id for r in ledger)
            ledger_type = "Multiple"
            names = ", ".join(r.name for r in ledger)
            memos = " | ".join(r.memo for r in ledger)
            split_labels = " | ".join(r.split_label for r in ledger)

        return cls(
            match_kind=match_kind,
            pass_name=pass_name,
            bank_date=bank.date,
            ledger_date=first.date,
            amount=bank.absolute_amount,
            bank_category=bank.category,
            bank_vendor=bank.vendor,
            bank_description=bank.description,
            ledger_transaction_ids=transaction_ids,
            ledger_type=ledger_type,
            ledger_names=names,
            ledger_memos=memos,
            ledger_split_labels=split_labels,
            ledger_count=len(ledger),
            similarity=similarity,
            needs_review=needs_review,
        )


@dataclass
class ReconciliationOutcome:
    """Final partition of both inputs into matches and leftovers."""

    matches: list[MatchResult]
    unmatched_bank: list[BankRecord]
    unmatched_ledger: list[LedgerRecord]
    total_bank: int
    total_ledger: int

    # Match counts per pass in execution order
    pass_counts: dict[str, int] = field(default_factory=dict)
    processing_time_seconds: float = 0.0

    @property
    def match_rate(self) -> Optional[float]:
        """Percentage of bank records matched, or None when there are no bank records."""
        if self.total_bank == 0:
            return None
        return (len(self.matches) / self.total_bank) * 100

    @property
    def matched_ledger_count(self) -> int:
        return sum(m.ledger_count for m in self.matches)

    @property
    def matches_by_kind(self) -> dict[str, int]:
        """Match counts per match kind, most frequent first."""
        return dict(Counter(m.match_kind for m in self.matches).most_common())
