"""
Plain-text reconciliation report.
"""

from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Iterable, Optional
import logging

from ..models.transaction import (
    BankCategory,
    BankRecord,
    LedgerRecord,
    ReconciliationOutcome,
)
from ..utils.exceptions import ReportGenerationError

logger = logging.getLogger(__name__)

RULE = "=" * 80

# (lower bound inclusive, upper bound exclusive, label)
AMOUNT_BANDS: list[tuple[Decimal, Optional[Decimal], str]] = [
    (Decimal("0"), Decimal("1000"), "Under $1,000"),
    (Decimal("1000"), Decimal("5000"), "$1,000 - $5,000"),
    (Decimal("5000"), Decimal("10000"), "$5,000 - $10,000"),
    (Decimal("10000"), Decimal("50000"), "$10,000 - $50,000"),
    (Decimal("50000"), None, "Over $50,000"),
]


def money(value: Decimal) -> str:
    return f"${value:,.2f}"


def percent(part: int, whole: int) -> str:
    """Percentage with one decimal, or n/a when there is nothing to divide by."""
    if whole == 0:
        return "n/a"
    return f"{part / whole * 100:.1f}%"


def _in_band(amount: Decimal, low: Decimal, high: Optional[Decimal]) -> bool:
    return amount >= low and (high is None or amount < high)


def _top_totals(items: Iterable[tuple[str, Decimal]], limit: int = 10) -> list[tuple[str, int, Decimal]]:
    counts: dict[str, int] = defaultdict(int)
    totals: dict[str, Decimal] = defaultdict(Decimal)
    for name, amount in items:
        counts[name] += 1
        totals[name] += amount
    ranked = sorted(totals, key=lambda name: totals[name], reverse=True)
    return [(name, counts[name], totals[name]) for name in ranked[:limit]]


def build_text_report(
    outcome: ReconciliationOutcome,
    bank_records: list[BankRecord],
    ledger_records: list[LedgerRecord],
    year: str,
    generated_at: Optional[datetime] = None,
) -> str:
    """
    Render the reconciliation report as text.

    Args:
        outcome: Result of the matching engine
        bank_records: All bank records fed to the engine
        ledger_records: All ledger records fed to the engine
        year: Reporting year shown in the title
        generated_at: Timestamp shown in the header (defaults to now)

    Returns:
        Report text
    """
    generated_at = generated_at or datetime.now()
    lines: list[str] = [
        RULE,
        f"BANK RECONCILIATION REPORT - {year}",
        RULE,
        f"Generated: {generated_at.strftime('%Y-%m-%d %H:%M:%S')}",
        "",
    ]

    deposits = [r for r in bank_records if r.category == BankCategory.DEPOSIT]
    withdrawals = [r for r in bank_records if r.category == BankCategory.WITHDRAWAL]
    lines += [
        "BANK SUMMARY:",
        f"  Total Transactions: {outcome.total_bank}",
        f"  Deposits: {len(deposits)} - {money(sum((r.absolute_amount for r in deposits), Decimal('0')))}",
        f"  Withdrawals: {len(withdrawals)} - {money(sum((r.absolute_amount for r in withdrawals), Decimal('0')))}",
        "",
    ]

    debits = [r for r in ledger_records if r.debit > 0]
    credits = [r for r in ledger_records if r.credit > 0]
    lines += [
        "LEDGER SUMMARY:",
        f"  Total Transactions: {outcome.total_ledger}",
        f"  Debits: {len(debits)} - {money(sum((r.debit for r in debits), Decimal('0')))}",
        f"  Credits: {len(credits)} - {money(sum((r.credit for r in credits), Decimal('0')))}",
        "",
    ]

    rate = outcome.match_rate
    lines += [
        "MATCHING RESULTS:",
        f"  Total Matched: {len(outcome.matches)}",
        f"  Match Rate: {'n/a' if rate is None else f'{rate:.1f}%'}",
        f"  Unmatched Bank: {len(outcome.unmatched_bank)}",
        f"  Unmatched Ledger: {len(outcome.unmatched_ledger)}",
        "",
    ]

    if outcome.matches:
        lines.append("MATCH BREAKDOWN:")
        for kind, count in outcome.matches_by_kind.items():
            lines.append(f"  {kind}: {count}")
        lines.append("")

    if outcome.unmatched_bank:
        open_deposits = [r for r in outcome.unmatched_bank if r.category == BankCategory.DEPOSIT]
        open_withdrawals = [
            r for r in outcome.unmatched_bank if r.category == BankCategory.WITHDRAWAL
        ]
        lines += [
            "UNMATCHED BANK:",
            f"  Deposits: {len(open_deposits)} - {money(sum((r.absolute_amount for r in open_deposits), Decimal('0')))}",
            f"  Withdrawals: {len(open_withdrawals)} - {money(sum((r.absolute_amount for r in open_withdrawals), Decimal('0')))}",
            "",
        ]

    if outcome.unmatched_ledger:
        open_debits = [r for r in outcome.unmatched_ledger if r.debit > 0]
        open_credits = [r for r in outcome.unmatched_ledger if r.credit > 0]
        lines += [
            "UNMATCHED LEDGER:",
            f"  Debits: {len(open_debits)} - {money(sum((r.debit for r in open_debits), Decimal('0')))}",
            f"  Credits: {len(open_credits)} - {money(sum((r.credit for r in open_credits), Decimal('0')))}",
            "",
        ]

    lines += [RULE, "STATISTICAL SUMMARY", RULE, ""]

    matched_deposits = sum(1 for m in outcome.matches if m.bank_category == BankCategory.DEPOSIT)
    matched_withdrawals = sum(
        1 for m in outcome.matches if m.bank_category == BankCategory.WITHDRAWAL
    )
    lines += [
        "MATCH RATE BY TRANSACTION TYPE:",
        f"  Deposits: {matched_deposits}/{len(deposits)} ({percent(matched_deposits, len(deposits))})",
        f"  Withdrawals: {matched_withdrawals}/{len(withdrawals)} "
        f"({percent(matched_withdrawals, len(withdrawals))})",
        "",
    ]

    lines.append("MATCH RATE BY AMOUNT RANGE:")
    for low, high, label in AMOUNT_BANDS:
        in_band = sum(1 for r in bank_records if _in_band(r.absolute_amount, low, high))
        if in_band == 0:
            continue
        matched = sum(1 for m in outcome.matches if _in_band(m.amount, low, high))
        lines.append(f"  {label}: {matched}/{in_band} ({percent(matched, in_band)})")
    lines.append("")

    if outcome.unmatched_bank:
        lines.append("TOP 10 UNMATCHED BANK VENDORS:")
        top = _top_totals((r.vendor, r.absolute_amount) for r in outcome.unmatched_bank)
        for vendor, count, total in top:
            lines.append(f"  {vendor}: {count} transactions, {money(total)}")
        lines.append("")

    if outcome.unmatched_ledger:
        lines.append("TOP 10 UNMATCHED LEDGER NAMES:")
        top = _top_totals((r.name, abs(r.debit + r.credit)) for r in outcome.unmatched_ledger)
        for name, count, total in top:
            lines.append(f"  {name}: {count} transactions, {money(total)}")
        lines.append("")

    lines.append(RULE)
    return "\n".join(lines)


def generate_text_report(
    outcome: ReconciliationOutcome,
    bank_records: list[BankRecord],
    ledger_records: list[LedgerRecord],
    output_path: Path,
    year: str,
) -> Path:
    """
    Write the text report to ``output_path``.

    Raises:
        ReportGenerationError: If the file cannot be written
    """
    report = build_text_report(outcome, bank_records, ledger_records, year)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(report, encoding="utf-8")
    except OSError as e:
        raise ReportGenerationError(f"Failed to write report {output_path}: {e}") from e

    logger.info(f"Created: {output_path.name}")
    return output_path
