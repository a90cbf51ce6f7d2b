"""
Matching passes for bank to ledger reconciliation.
Each pass implements one strategy: which ledger records are candidates for a
bank record, and which of them (if any) it accepts.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import NamedTuple, Optional
import math

from ..models.transaction import BankRecord, LedgerRecord
from .filters import TypeCompatibility, ledger_amount, same_day, within_days
from .similarity import similarity
from .splits import find_split
from .vendors import VendorNormalizer


class Candidate(NamedTuple):
    """A ledger record together with its position in the ledger list."""

    index: int
    record: LedgerRecord


@dataclass
class PassSelection:
    """Ledger records a pass accepted for one bank record."""

    candidates: list[Candidate]
    match_kind: str
    similarity: Optional[float] = None
    needs_review: bool = True


class MatchingPass(ABC):
    """Abstract base class for matching passes."""

    # Stable identifier used in pass counts and logs
    name: str = ""
    # Human readable label for progress output
    label: str = ""
    # Whether matches from this pass should be checked by a person
    needs_review: bool = True

    @abstractmethod
    def is_candidate(self, bank: BankRecord, ledger: LedgerRecord) -> bool:
        """
        Check whether an unmatched ledger record is eligible for a bank record.

        Args:
            bank: Bank record being matched
            ledger: Unmatched ledger record

        Returns:
            True if the ledger record passes this pass's date/amount/type predicate
        """
        pass

    @abstractmethod
    def select(
        self, bank: BankRecord, candidates: list[Candidate]
    ) -> Optional[PassSelection]:
        """
        Decide which candidates, if any, match the bank record.

        Args:
            bank: Bank record being matched
            candidates: Eligible ledger records in ledger order

        Returns:
            The accepted selection, or None to leave the bank record unmatched
        """
        pass


class UniqueCandidatePass(MatchingPass):
    """Accepts only when exactly one candidate is eligible; ties are deferred."""

    match_kind: str = ""

    def select(
        self, bank: BankRecord, candidates: list[Candidate]
    ) -> Optional[PassSelection]:
        if len(candidates) != 1:
            return None
        return PassSelection(
            candidates=candidates,
            match_kind=self.match_kind,
            needs_review=self.needs_review,
        )


class ExactPass(UniqueCandidatePass):
    """Same calendar day and identical amount."""

    name = "exact"
    label = "Exact"
    match_kind = "Exact"
    needs_review = False

    def is_candidate(self, bank: BankRecord, ledger: LedgerRecord) -> bool:
        return same_day(bank.date, ledger.date) and (
            ledger_amount(ledger, bank.category) == bank.absolute_amount
        )


class NearDatePass(UniqueCandidatePass):
    """Identical amount with the dates within a window of days."""

    needs_review = False

    def __init__(self, window_days: int):
        self.window_days = window_days
        self.name = f"near_date_{window_days}d"
        self.label = f"±{window_days} days"
        self.match_kind = f"Near Date (±{window_days}d)"

    def is_candidate(self, bank: BankRecord, ledger: LedgerRecord) -> bool:
        return within_days(bank.date, ledger.date, self.window_days) and (
            ledger_amount(ledger, bank.category) == bank.absolute_amount
        )


class FuzzyAmountPass(UniqueCandidatePass):
    """Amount within a small absolute tolerance to absorb rounding and fees."""

    name = "fuzzy_amount"
    label = "Fuzzy"
    match_kind = "Fuzzy Amount"

    def __init__(self, window_days: int = 3, tolerance: Decimal = Decimal("1.00")):
        self.window_days = window_days
        self.tolerance = tolerance

    def is_candidate(self, bank: BankRecord, ledger: LedgerRecord) -> bool:
        if not within_days(bank.date, ledger.date, self.window_days):
            return False
        difference = abs(ledger_amount(ledger, bank.category) - bank.absolute_amount)
        return difference <= self.tolerance


class SplitPass(MatchingPass):
    """One bank record against 2 or 3 ledger records that sum to it."""

    name = "split"
    label = "Splits"

    def __init__(
        self,
        window_days: int = 5,
        tolerance: Decimal = Decimal("0.01"),
        max_size: int = 3,
    ):
        self.window_days = window_days
        self.tolerance = tolerance
        self.max_size = max_size

    def is_candidate(self, bank: BankRecord, ledger: LedgerRecord) -> bool:
        return within_days(bank.date, ledger.date, self.window_days) and (
            ledger_amount(ledger, bank.category) > 0
        )

    def select(
        self, bank: BankRecord, candidates: list[Candidate]
    ) -> Optional[PassSelection]:
        amounts = [ledger_amount(c.record, bank.category) for c in candidates]
        split = find_split(
            bank.absolute_amount,
            candidates,
            amounts,
            tolerance=self.tolerance,
            max_size=self.max_size,
        )
        if split is None:
            return None
        return PassSelection(
            candidates=list(split),
            match_kind=f"Split ({len(split)} transactions)",
            needs_review=self.needs_review,
        )


class VendorTypePass(MatchingPass):
    """
    Identical amount, compatible ledger type and a similar vendor name.

    Takes the first qualifying candidate in ledger order rather than the
    best scoring one.
    """

    name = "vendor_type"
    label = "Vendor"

    def __init__(
        self,
        normalizer: VendorNormalizer,
        compatibility: TypeCompatibility,
        window_days: int = 3,
        similarity_threshold: float = 0.6,
    ):
        self.normalizer = normalizer
        self.compatibility = compatibility
        self.window_days = window_days
        self.similarity_threshold = similarity_threshold

    def is_candidate(self, bank: BankRecord, ledger: LedgerRecord) -> bool:
        return (
            within_days(bank.date, ledger.date, self.window_days)
            and ledger_amount(ledger, bank.category) == bank.absolute_amount
            and self.compatibility.is_compatible(bank.category, ledger.ledger_type)
        )

    def select(
        self, bank: BankRecord, candidates: list[Candidate]
    ) -> Optional[PassSelection]:
        bank_vendor = self.normalizer.normalize(bank.vendor, bank.description)

        for candidate in candidates:
            ledger_vendor = self.normalizer.normalize(candidate.record.name)
            score = similarity(bank_vendor, ledger_vendor)

            if score > self.similarity_threshold or (
                bank_vendor == ledger_vendor and bank_vendor != ""
            ):
                return PassSelection(
                    candidates=[candidate],
                    match_kind=f"Vendor+Type ({_percent(score)}% similar)",
                    similarity=score,
                    needs_review=self.needs_review,
                )

        return None


def _percent(ratio: float) -> int:
    """Whole percentage, rounding halves up."""
    return math.floor(ratio * 100 + 0.5)
