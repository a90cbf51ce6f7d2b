"""
Command-line interface for the bank to accounting ledger matching tool.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional
import logging
import sys

import click
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .config import load_config, load_vendor_mappings, generate_default_config, ReconConfig
from .matching.engine import PassReport, ReconciliationEngine
from .models.transaction import ReconciliationOutcome
from .parsers.bank_parser import BankStatementParser
from .parsers.common import extract_year_from_filename
from .parsers.ledger_parser import LedgerParser
from .reports.csv_exporter import CsvExporter
from .reports.excel_generator import ExcelReportGenerator
from .reports.text_report import generate_text_report
from .utils.logging_config import setup_logging

console = Console()


@click.group()
@click.version_option(version=__version__)
def main():
    """Bank statement to accounting ledger matching tool."""
    pass


@main.command()
@click.argument("bank_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("ledger_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file (YAML)",
)
@click.option(
    "-m",
    "--mappings",
    type=click.Path(exists=True, path_type=Path),
    help="Extra vendor synonym groups (JSON or YAML)",
)
@click.option("--year", type=int, default=None, help="Only reconcile records dated in this year")
@click.option(
    "-o", "--output-dir", type=click.Path(file_okay=False, path_type=Path), help="Output directory"
)
@click.option("--excel", is_flag=True, help="Also write an Excel workbook")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("--dry-run", is_flag=True, help="Match and show summary without writing files")
def reconcile(
    bank_file: Path,
    ledger_file: Path,
    config: Optional[Path],
    mappings: Optional[Path],
    year: Optional[int],
    output_dir: Optional[Path],
    excel: bool,
    verbose: bool,
    dry_run: bool,
):
    """
    Match a bank statement CSV against an accounting ledger export.

    BANK_FILE: Path to the bank transactions CSV
    LEDGER_FILE: Path to the general ledger export (xlsx, xls or csv)
    """
    log_level = logging.DEBUG if verbose else logging.INFO
    setup_logging(log_level)

    try:
        recon_config = load_config(config)
        _apply_logging_config(recon_config, verbose)
        extra_synonyms = load_vendor_mappings(mappings) if mappings else None

        if year is None:
            year = (
                extract_year_from_filename(bank_file.name)
                or extract_year_from_filename(ledger_file.name)
                or datetime.now().year
            )
        console.print(f"Using year: [bold]{year}[/bold]")
        if extra_synonyms:
            console.print(f"Using {len(extra_synonyms)} external vendor mapping groups")

        pass_reports: list[PassReport] = []

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Loading bank transactions...", total=None)
            bank_records = BankStatementParser(recon_config).parse_file(bank_file, year)
            progress.update(task, completed=True)

            task = progress.add_task("Loading ledger transactions...", total=None)
            ledger_records = LedgerParser(recon_config).parse_file(ledger_file, year)
            progress.update(task, completed=True)

            task = progress.add_task("Running matching passes...", total=None)
            engine = ReconciliationEngine(
                recon_config,
                extra_synonyms=extra_synonyms,
                progress_callback=pass_reports.append,
            )
            outcome = engine.reconcile(bank_records, ledger_records)
            progress.update(task, completed=True)

        _display_passes(pass_reports)
        _display_summary(outcome)

        if dry_run:
            console.print("\n[yellow]Dry run - no files written[/yellow]")
            return

        if output_dir is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            output_dir = Path(
                recon_config.output.directory_template.format(year=year, timestamp=timestamp)
            )

        written = _write_outputs(
            recon_config, outcome, bank_records, ledger_records, output_dir, str(year), excel
        )
        for path in written:
            console.print(f"[green]Created: {path.name}[/green]")
        console.print(f"\n[green]Results saved to: {output_dir}[/green]")

    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        if verbose:
            console.print_exception()
        sys.exit(1)


@main.command("parse-bank")
@click.argument("bank_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-c", "--config", type=click.Path(exists=True, path_type=Path))
@click.option("--year", type=int, default=None)
def parse_bank(bank_file: Path, config: Optional[Path], year: Optional[int]):
    """
    Parse a bank statement CSV and display a transaction preview.

    BANK_FILE: Path to the bank transactions CSV
    """
    recon_config = load_config(config)
    parser = BankStatementParser(recon_config)

    try:
        records = parser.parse_file(bank_file, year)

        table = Table(title=f"Bank Transactions: {bank_file.name}")
        table.add_column("Date")
        table.add_column("Type")
        table.add_column("Vendor")
        table.add_column("Amount", justify="right")
        table.add_column("Description")

        for record in records[:20]:  # Show first 20
            table.add_row(
                str(record.date),
                record.category.value,
                record.vendor or "-",
                f"${record.amount:,.2f}",
                _truncate(record.description),
            )

        console.print(table)

        if len(records) > 20:
            console.print(f"\n... and {len(records) - 20} more transactions")

        console.print(f"\nTotal transactions: {len(records)}")

    except Exception as e:
        console.print(f"[red]Error parsing file: {e}[/red]")
        sys.exit(1)


@main.command("parse-ledger")
@click.argument("ledger_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-c", "--config", type=click.Path(exists=True, path_type=Path))
@click.option("--year", type=int, default=None)
def parse_ledger(ledger_file: Path, config: Optional[Path], year: Optional[int]):
    """
    Parse a general ledger export and display a transaction preview.

    LEDGER_FILE: Path to the general ledger export
    """
    recon_config = load_config(config)
    parser = LedgerParser(recon_config)

    try:
        records = parser.parse_file(ledger_file, year)

        table = Table(title=f"Ledger Transactions: {ledger_file.name}")
        table.add_column("Date")
        table.add_column("Trans #")
        table.add_column("Type")
        table.add_column("Name")
        table.add_column("Debit", justify="right")
        table.add_column("Credit", justify="right")

        for record in records[:20]:  # Show first 20
            table.add_row(
                str(record.date),
                record.transaction_id,
                record.ledger_type or "-",
                _truncate(record.name),
                f"${record.debit:,.2f}",
                f"${record.credit:,.2f}",
            )

        console.print(table)

        if len(records) > 20:
            console.print(f"\n... and {len(records) - 20} more transactions")

        console.print(f"\nTotal transactions: {len(records)}")

    except Exception as e:
        console.print(f"[red]Error parsing file: {e}[/red]")
        sys.exit(1)


@main.command("init-config")
@click.option(
    "-o", "--output", type=click.Path(path_type=Path), default=Path("config.yaml")
)
def init_config(output: Path):
    """Generate a sample configuration file."""
    generate_default_config(output)
    console.print(f"[green]Configuration file generated: {output}[/green]")


def _apply_logging_config(config: ReconConfig, verbose: bool) -> None:
    """Reconfigure logging from the loaded settings; --verbose still wins."""
    log_config = config.logging
    level = logging.DEBUG if verbose else logging.getLevelName(log_config.level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    log_file = Path(log_config.file) if log_config.file else None
    setup_logging(level, log_file=log_file, log_format=log_config.format)


def _write_outputs(
    config: ReconConfig,
    outcome: ReconciliationOutcome,
    bank_records: list,
    ledger_records: list,
    output_dir: Path,
    year: str,
    excel: bool,
) -> list[Path]:
    """Write CSV exports, the text report and optionally the workbook."""
    exporter = CsvExporter(config)
    written = [exporter.export_matched(outcome.matches, output_dir, year)]

    if outcome.unmatched_bank:
        written.append(exporter.export_unmatched_bank(outcome.unmatched_bank, output_dir, year))
    if outcome.unmatched_ledger:
        written.append(
            exporter.export_unmatched_ledger(outcome.unmatched_ledger, output_dir, year)
        )

    report_path = output_dir / config.output.report_filename.format(year=year)
    written.append(
        generate_text_report(outcome, bank_records, ledger_records, report_path, year)
    )

    if excel or config.output.excel.enabled:
        workbook_path = output_dir / config.output.excel.filename_template.format(year=year)
        written.append(ExcelReportGenerator(config).generate_report(outcome, workbook_path, year))

    return written


def _display_passes(reports: list[PassReport]) -> None:
    for report in reports:
        console.print(f"  {report}")


def _display_summary(outcome: ReconciliationOutcome) -> None:
    """Display reconciliation summary in console."""
    table = Table(title="Reconciliation Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    rate = outcome.match_rate
    table.add_row("Total Bank Transactions", str(outcome.total_bank))
    table.add_row("Total Ledger Transactions", str(outcome.total_ledger))
    table.add_row("Matched", str(len(outcome.matches)))
    table.add_row("Match Rate", "n/a" if rate is None else f"{rate:.1f}%")
    table.add_row("Unmatched Bank", str(len(outcome.unmatched_bank)))
    table.add_row("Unmatched Ledger", str(len(outcome.unmatched_ledger)))
    table.add_row("Processing Time", f"{outcome.processing_time_seconds:.2f}s")

    console.print(table)


def _truncate(text: str, width: int = 40) -> str:
    return text[:width] + "..." if len(text) > width else text


if __name__ == "__main__":
    main()
