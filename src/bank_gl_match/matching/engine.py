"""
Multi-pass matching engine for bank to ledger reconciliation.
Runs the matching passes in a fixed order over shared match state.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, Iterator, Mapping, Optional
import logging

from ..models.transaction import (
    BankRecord,
    LedgerRecord,
    MatchResult,
    ReconciliationOutcome,
)
from ..config import ReconConfig
from ..utils.exceptions import MatchStateError
from .filters import TypeCompatibility
from .strategies import (
    Candidate,
    ExactPass,
    FuzzyAmountPass,
    MatchingPass,
    NearDatePass,
    PassSelection,
    SplitPass,
    VendorTypePass,
)
from .vendors import VendorNormalizer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PassReport:
    """Progress notification emitted after each pass completes."""

    number: int
    name: str
    label: str
    matches: int
    matched_bank_total: int

    def __str__(self) -> str:
        return f"Pass {self.number} ({self.label}): {self.matches} matches"


ProgressCallback = Callable[[PassReport], None]


class MatchState:
    """
    Matched-state container shared by all passes of one reconciliation.

    Records are referenced by their position in the bank and ledger lists.
    """

    def __init__(self, bank: list[BankRecord], ledger: list[LedgerRecord]):
        self.bank = bank
        self.ledger = ledger
        self.matched_bank: set[int] = set()
        self.matched_ledger: set[int] = set()
        self.matches: list[MatchResult] = []

    def unmatched_bank(self) -> Iterator[tuple[int, BankRecord]]:
        for index, record in enumerate(self.bank):
            if index not in self.matched_bank:
                yield index, record

    def unmatched_ledger(self) -> list[Candidate]:
        return [
            Candidate(index, record)
            for index, record in enumerate(self.ledger)
            if index not in self.matched_ledger
        ]

    def commit(
        self, bank_index: int, selection: PassSelection, pass_name: str
    ) -> MatchResult:
        """
        Record a match and flag every record it consumes.

        All records are checked before any flag is set, so a rejected commit
        leaves the state untouched.

        Raises:
            MatchStateError: If any of the records is already matched
        """
        ledger_indices = [c.index for c in selection.candidates]

        if bank_index in self.matched_bank:
            raise MatchStateError(f"Bank record {bank_index} is already matched")
        already = [i for i in ledger_indices if i in self.matched_ledger]
        if already or len(set(ledger_indices)) != len(ledger_indices):
            raise MatchStateError(f"Ledger records {ledger_indices} are not all unmatched")

        bank = self.bank[bank_index]
        ledger = [self.ledger[i] for i in ledger_indices]
        result = MatchResult.from_records(
            selection.match_kind,
            pass_name,
            bank,
            ledger,
            similarity=selection.similarity,
            needs_review=selection.needs_review,
        )

        self.matched_bank.add(bank_index)
        bank.matched = True
        for index, record in zip(ledger_indices, ledger):
            self.matched_ledger.add(index)
            record.matched = True
        self.matches.append(result)

        logger.debug(
            f"{selection.match_kind}: bank #{bank_index} {bank.date} "
            f"{bank.absolute_amount} -> ledger {ledger_indices}"
        )
        return result


class ReconciliationEngine:
    """
    Main reconciliation engine that orchestrates the matching passes.

    Passes run strictly in order (exact, near date windows, splits, fuzzy
    amount, vendor and type); each one only sees the records earlier passes
    left unmatched.
    """

    def __init__(
        self,
        config: ReconConfig,
        extra_synonyms: Optional[Mapping[str, list[str]]] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        """
        Initialize the reconciliation engine.

        Args:
            config: Application configuration
            extra_synonyms: External vendor synonym groups merged into the
                built-in table
            progress_callback: Optional observer called after each pass
        """
        self.config = config
        self.normalizer = VendorNormalizer.from_config(config.vendors, extra_synonyms)
        self.progress_callback = progress_callback
        self.passes = self._build_passes()

    def _build_passes(self) -> list[MatchingPass]:
        """
        Build the enabled matching passes in their fixed order.

        Returns:
            List of passes
        """
        matching = self.config.matching
        passes: list[MatchingPass] = []

        if matching.exact.enabled:
            passes.append(ExactPass())

        if matching.near_date.enabled:
            for window in matching.near_date.windows:
                passes.append(NearDatePass(window))

        if matching.split.enabled:
            passes.append(
                SplitPass(
                    window_days=matching.split.window_days,
                    tolerance=matching.split.tolerance,
                    max_size=matching.split.max_size,
                )
            )

        if matching.fuzzy_amount.enabled:
            passes.append(
                FuzzyAmountPass(
                    window_days=matching.fuzzy_amount.window_days,
                    tolerance=matching.fuzzy_amount.tolerance,
                )
            )

        if matching.vendor_type.enabled:
            compatibility = TypeCompatibility(
                matching.type_compatibility.deposit,
                matching.type_compatibility.withdrawal,
            )
            passes.append(
                VendorTypePass(
                    self.normalizer,
                    compatibility,
                    window_days=matching.vendor_type.window_days,
                    similarity_threshold=matching.vendor_type.similarity_threshold,
                )
            )

        for matching_pass in passes:
            logger.debug(f"Loaded matching pass: {matching_pass.name}")

        return passes

    def reconcile(
        self,
        bank_records: list[BankRecord],
        ledger_records: list[LedgerRecord],
    ) -> ReconciliationOutcome:
        """
        Match bank records against ledger records.

        The inputs are copied, so the caller's records are never flagged.

        Args:
            bank_records: Bank statement lines in ingestion order
            ledger_records: Ledger lines in ingestion order

        Returns:
            Matches plus the bank and ledger records left unmatched
        """
        start_time = datetime.now()
        logger.info(
            f"Starting reconciliation: {len(bank_records)} bank records, "
            f"{len(ledger_records)} ledger records"
        )

        state = MatchState(
            [replace(r, matched=False) for r in bank_records],
            [replace(r, matched=False) for r in ledger_records],
        )

        pass_counts: dict[str, int] = {}
        for number, matching_pass in enumerate(self.passes, start=1):
            count = self._run_pass(matching_pass, state)
            pass_counts[matching_pass.name] = count

            report = PassReport(
                number=number,
                name=matching_pass.name,
                label=matching_pass.label,
                matches=count,
                matched_bank_total=len(state.matched_bank),
            )
            logger.info(str(report))
            if self.progress_callback:
                self.progress_callback(report)

        elapsed = (datetime.now() - start_time).total_seconds()

        outcome = ReconciliationOutcome(
            matches=list(state.matches),
            unmatched_bank=[r for _, r in state.unmatched_bank()],
            unmatched_ledger=[c.record for c in state.unmatched_ledger()],
            total_bank=len(state.bank),
            total_ledger=len(state.ledger),
            pass_counts=pass_counts,
            processing_time_seconds=elapsed,
        )

        rate = outcome.match_rate
        logger.info(
            f"Reconciliation complete in {elapsed:.2f}s: {len(outcome.matches)} matches "
            f"({'n/a' if rate is None else f'{rate:.1f}%'}), "
            f"{len(outcome.unmatched_bank)} bank and "
            f"{len(outcome.unmatched_ledger)} ledger records unmatched"
        )

        return outcome

    def _run_pass(self, matching_pass: MatchingPass, state: MatchState) -> int:
        """
        Run one pass over every bank record still unmatched.

        Args:
            matching_pass: Pass to run
            state: Shared match state, updated in place

        Returns:
            Number of matches committed by this pass
        """
        count = 0

        for bank_index, bank in list(state.unmatched_bank()):
            candidates = [
                c
                for c in state.unmatched_ledger()
                if matching_pass.is_candidate(bank, c.record)
            ]
            if not candidates:
                continue

            selection = matching_pass.select(bank, candidates)
            if selection is None:
                continue

            state.commit(bank_index, selection, matching_pass.name)
            count += 1

        return count
