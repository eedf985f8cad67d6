"""
Command-line interface for the reference search and duplicate detection tool.
"""

from pathlib import Path
from typing import Optional
import logging
import sys

import click
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .config import ReconConfig, load_config, generate_default_config
from .matching.duplicates import DuplicateDetector
from .matching.engine import ReferenceSearchEngine
from .matching.patterns import extract_patterns
from .models.transaction import DuplicateGroup, SearchResult, TransactionMatch
from .parsers.transaction_parser import TransactionParser
from .reports.excel_generator import ExcelReportGenerator
from .utils.logging_config import get_logger, setup_logging

console = Console()
logger = get_logger("cli")


@click.group()
@click.version_option(version=__version__)
def main():
    """Reference Search and Duplicate Detection for Bank Reconciliation."""
    pass


@main.command()
@click.argument("text")
def extract(text: str):
    """
    Extract reference patterns from a remittance text.

    TEXT: Free-text payment description
    """
    table = Table(title="Reference Patterns")
    table.add_column("Type", style="cyan")
    table.add_column("Value")
    table.add_column("Confidence", justify="right")
    table.add_column("Description")

    for pattern in extract_patterns(text):
        table.add_row(
            pattern.type.value,
            pattern.value,
            f"{pattern.confidence:.2f}",
            pattern.description,
        )

    console.print(table)


@main.command()
@click.argument("query")
@click.argument("transactions_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file (YAML)",
)
@click.option(
    "--fuzzy-fallback",
    is_flag=True,
    help="Run a fuzzy description search when nothing matches",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path),
    help="Output Excel file, or directory for a generated name",
)
@click.option(
    "--log-file", type=click.Path(path_type=Path), help="Also write logs to a rotating file"
)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def search(
    query: str,
    transactions_file: Path,
    config: Optional[Path],
    fuzzy_fallback: bool,
    output: Optional[Path],
    log_file: Optional[Path],
    verbose: bool,
):
    """
    Search transactions for a reference, amount or counterparty.

    QUERY: Invoice/PO/bank reference, amount or counterparty name
    TRANSACTIONS_FILE: Path to a JSON or CSV transaction export
    """
    setup_logging(logging.DEBUG if verbose else logging.INFO, log_file=log_file)

    try:
        recon_config = load_config(config)
        _apply_logging_config(recon_config, verbose, log_file)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Loading transactions...", total=None)
            transactions = TransactionParser(recon_config).parse_file(transactions_file)
            progress.update(task, completed=True)

            task = progress.add_task("Searching...", total=None)
            engine = ReferenceSearchEngine(recon_config)
            result = engine.search(query, transactions)

            fuzzy_matches: Optional[list[TransactionMatch]] = None
            if fuzzy_fallback and not result.matches:
                logger.info("No direct matches, falling back to fuzzy search")
                fuzzy_matches = engine.fuzzy_search(query, transactions)
            progress.update(task, completed=True)

        _display_search_result(result)
        if fuzzy_matches is not None:
            _display_matches("Fuzzy Matches", fuzzy_matches)

        if output:
            report_path = ExcelReportGenerator(recon_config).generate_report(
                output, search_result=result, fuzzy_matches=fuzzy_matches
            )
            console.print(f"\n[green]Report generated: {report_path}[/green]")

    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        if verbose:
            console.print_exception()
        sys.exit(1)


@main.command()
@click.argument("query")
@click.argument("transactions_file", type=click.Path(exists=True, path_type=Path))
@click.option("-c", "--config", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-t",
    "--threshold",
    type=click.FloatRange(0.0, 1.0),
    default=None,
    help="Minimum description similarity (0-1)",
)
@click.option(
    "--log-file", type=click.Path(path_type=Path), help="Also write logs to a rotating file"
)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def fuzzy(
    query: str,
    transactions_file: Path,
    config: Optional[Path],
    threshold: Optional[float],
    log_file: Optional[Path],
    verbose: bool,
):
    """
    Rank transactions by description similarity to a query.

    QUERY: Free-text description to look for
    TRANSACTIONS_FILE: Path to a JSON or CSV transaction export
    """
    setup_logging(logging.DEBUG if verbose else logging.INFO, log_file=log_file)

    try:
        recon_config = load_config(config)
        _apply_logging_config(recon_config, verbose, log_file)
        transactions = TransactionParser(recon_config).parse_file(transactions_file)
        matches = ReferenceSearchEngine(recon_config).fuzzy_search(
            query, transactions, threshold
        )
        _display_matches("Fuzzy Matches", matches)

    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        if verbose:
            console.print_exception()
        sys.exit(1)


@main.command()
@click.argument("transactions_file", type=click.Path(exists=True, path_type=Path))
@click.option("-c", "--config", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--tolerance-hours",
    type=click.FloatRange(min=0.0),
    default=None,
    help="Override value-date tolerance in hours",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path),
    help="Output Excel file, or directory for a generated name",
)
@click.option(
    "--log-file", type=click.Path(path_type=Path), help="Also write logs to a rotating file"
)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def duplicates(
    transactions_file: Path,
    config: Optional[Path],
    tolerance_hours: Optional[float],
    output: Optional[Path],
    log_file: Optional[Path],
    verbose: bool,
):
    """
    Find probable duplicate transactions.

    TRANSACTIONS_FILE: Path to a JSON or CSV transaction export
    """
    setup_logging(logging.DEBUG if verbose else logging.INFO, log_file=log_file)

    try:
        recon_config = load_config(config)
        _apply_logging_config(recon_config, verbose, log_file)
        transactions = TransactionParser(recon_config).parse_file(transactions_file)
        groups = DuplicateDetector(recon_config).find_duplicates(transactions, tolerance_hours)

        _display_duplicates(groups)

        if output:
            report_path = ExcelReportGenerator(recon_config).generate_report(
                output, duplicate_groups=groups
            )
            console.print(f"\n[green]Report generated: {report_path}[/green]")

    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        if verbose:
            console.print_exception()
        sys.exit(1)


@main.command("init-config")
@click.option(
    "-o", "--output", type=click.Path(path_type=Path), default=Path("config.yaml")
)
def init_config(output: Path):
    """Generate a sample configuration file."""
    generate_default_config(output)
    console.print(f"[green]Configuration file generated: {output}[/green]")


def _apply_logging_config(
    recon_config: ReconConfig, verbose: bool, log_file: Optional[Path] = None
) -> None:
    """Re-apply logging with the level and format from the loaded configuration."""
    level = logging.getLevelName(recon_config.logging.level.upper())
    if verbose or not isinstance(level, int):
        level = logging.DEBUG if verbose else logging.INFO
    setup_logging(level, log_file=log_file, log_format=recon_config.logging.format)


def _display_search_result(result: SearchResult) -> None:
    """Display patterns, matches and suggestions of a search."""
    patterns = ", ".join(f"{p.type.value}:{p.value}" for p in result.patterns)
    console.print(f"[cyan]Patterns:[/cyan] {patterns}")

    _display_matches(f"Matches for '{result.query}'", result.matches)

    if result.suggestions:
        console.print(f"[cyan]Suggestions:[/cyan] {', '.join(result.suggestions)}")

    console.print(
        f"\nFound {len(result.matches)} matches in {result.search_time_ms:.1f}ms"
    )


def _display_matches(title: str, matches: list[TransactionMatch]) -> None:
    """Display a ranked match table."""
    table = Table(title=title)
    table.add_column("ID")
    table.add_column("Type", style="cyan")
    table.add_column("Confidence", justify="right")
    table.add_column("Amount", justify="right")
    table.add_column("Counterparty")
    table.add_column("Reason")

    for match in matches:
        txn = match.transaction
        table.add_row(
            txn.id,
            match.match_type.value,
            f"{match.confidence:.0%}",
            f"{txn.amount.currency} {txn.amount.value:,.2f}",
            txn.counterparty.name,
            match.match_reason,
        )

    console.print(table)


def _display_duplicates(groups: list[DuplicateGroup]) -> None:
    """Display duplicate groups."""
    table = Table(title="Duplicate Groups")
    table.add_column("Group", justify="right")
    table.add_column("Original")
    table.add_column("Duplicates")
    table.add_column("Amount", justify="right")
    table.add_column("Description")

    for group_num, group in enumerate(groups, start=1):
        original = group.original
        description = original.description
        table.add_row(
            str(group_num),
            original.id,
            ", ".join(d.id for d in group.duplicates),
            f"{original.amount.currency} {original.amount.value:,.2f}",
            description[:40] + "..." if len(description) > 40 else description,
        )

    console.print(table)
    console.print(f"\nTotal duplicate groups: {len(groups)}")


if __name__ == "__main__":
    main()
