"""CLI for SettleUp using Typer."""

import logging
import sys
from decimal import Decimal
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import load_settings
from .currency import format_currency, to_decimal
from .exceptions import SettleUpError, ValidationError
from .export import ExportFormat
from .models import (
    Balance,
    CustomSplit,
    EqualSplit,
    PercentageSplit,
    Settlement,
    SplitStrategy,
)
from .service import SettlementService, load_snapshot
from .settlement import apply_settlements

app = typer.Typer(
    name="settle-up",
    help="Compute balances and settlements for shared group expenses",
)

console = Console()


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def format_money(amount_minor: int, currency: str, use_color: bool = True) -> str:
    """
    Format a signed amount for tables.

    Negative amounts (owes money) are red, positive amounts (is owed) green.
    """
    formatted = format_currency(amount_minor, currency)
    if not use_color or amount_minor == 0:
        return formatted
    color = "red" if amount_minor < 0 else "green"
    return f"[{color}]{formatted}[/{color}]"


def parse_shares(values: list[str]) -> dict[str, Decimal]:
    """
    Parse repeated ``ID=VALUE`` options into a mapping.

    Raises:
        ValidationError: If an entry is not of the form ID=VALUE
    """
    shares: dict[str, Decimal] = {}
    for value in values:
        pid, sep, amount = value.partition("=")
        if not sep or not pid.strip():
            raise ValidationError(f"Expected ID=VALUE, got '{value}'")
        shares[pid.strip()] = to_decimal(amount.strip())
    return shares


def display_balances(balances: list[Balance], currency: str):
    """Display balances in a table."""
    table = Table(title="Balances", show_header=True, header_style="bold magenta")
    table.add_column("Participant", style="cyan")
    table.add_column("Paid", justify="right")
    table.add_column("Should pay", justify="right")
    table.add_column("Net", justify="right")

    for balance in balances:
        table.add_row(
            balance.participant.name,
            format_currency(balance.paid, currency),
            format_currency(balance.should_pay, currency),
            format_money(balance.net, currency),
        )

    console.print(table)


def display_settlements(
    settlements: list[Settlement], balances: list[Balance], currency: str
):
    """Display settlements in a table, followed by a verification line."""
    if not settlements:
        console.print("\n[green]✓ Everyone is settled up. No transfers needed.[/green]")
        return

    table = Table(title="Settlements", show_header=True, header_style="bold magenta")
    table.add_column("From", style="cyan")
    table.add_column("To", style="cyan")
    table.add_column("Amount", justify="right")

    for settlement in settlements:
        table.add_row(
            settlement.from_participant.name,
            settlement.to_participant.name,
            format_currency(settlement.amount, currency),
        )

    console.print(table)

    residuals = apply_settlements(balances, settlements)
    if all(amount == 0 for amount in residuals.values()):
        console.print("  [green]✓ Transfers zero every balance[/green]")
    else:
        console.print(
            f"  [red]✗ Balances left after transfers: {escape(str(residuals))}[/red]"
        )


def _fail(error: Exception, verbose: bool):
    console.print(f"\n[bold red]Error:[/bold red] {escape(str(error))}")
    if verbose:
        raise error
    sys.exit(1)


@app.command()
def balances(
    event_file: Path = typer.Argument(..., help="Event snapshot JSON file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Show what each participant paid, owes and is owed."""
    setup_logging(verbose)

    try:
        settings = load_settings()
        service = SettlementService(settings)
        snapshot = load_snapshot(event_file)

        result = service.balances(snapshot)
        display_balances(result, snapshot.event.currency)

    except SettleUpError as e:
        _fail(e, verbose)


@app.command()
def settle(
    event_file: Path = typer.Argument(..., help="Event snapshot JSON file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Show the transfers that settle an event."""
    setup_logging(verbose)

    try:
        settings = load_settings()
        service = SettlementService(settings)
        snapshot = load_snapshot(event_file)

        console.print(f"\n[bold blue]Settling {snapshot.event.name}...[/bold blue]\n")
        event_balances = service.balances(snapshot)
        settlements = service.settlements(snapshot, event_balances)

        display_balances(event_balances, snapshot.event.currency)
        display_settlements(settlements, event_balances, snapshot.event.currency)

    except SettleUpError as e:
        _fail(e, verbose)


@app.command()
def split(
    amount: str = typer.Argument(..., help="Expense total in major units"),
    participants: list[str] = typer.Argument(..., help="Participant ids, in order"),
    strategy: SplitStrategy = typer.Option(
        SplitStrategy.EQUAL, "--strategy", "-s", help="How to divide the amount"
    ),
    share: list[str] = typer.Option(
        [], "--share", help="ID=VALUE: amount (custom) or percent (percentage)"
    ),
    currency: str | None = typer.Option(
        None, "--currency", help="Currency for display"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Compute the shares for a single expense."""
    setup_logging(verbose)

    try:
        settings = load_settings()
        service = SettlementService(settings)
        currency = currency or settings.default_currency

        params: EqualSplit | CustomSplit | PercentageSplit
        if strategy is SplitStrategy.EQUAL:
            params = EqualSplit()
        elif strategy is SplitStrategy.CUSTOM:
            params = CustomSplit(shares=parse_shares(share))
        else:
            params = PercentageSplit(percentages=parse_shares(share))

        shares = service.split_expense(amount, params, participants)

        table = Table(
            title=f"{strategy.value.capitalize()} split",
            show_header=True,
            header_style="bold magenta",
        )
        table.add_column("Participant", style="cyan")
        table.add_column("Share", justify="right")
        table.add_column("Minor units", justify="right", style="dim")
        for entry in shares:
            table.add_row(
                entry.participant_id,
                format_currency(entry.amount_minor, currency),
                str(entry.amount_minor),
            )
        console.print(table)

        total = sum(entry.amount_minor for entry in shares)
        console.print(f"  [green]✓ Shares total {total} minor units[/green]")

    except SettleUpError as e:
        _fail(e, verbose)


@app.command()
def export(
    event_file: Path = typer.Argument(..., help="Event snapshot JSON file"),
    fmt: ExportFormat = typer.Option(
        ExportFormat.TEXT, "--format", "-f", help="Report format"
    ),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Write to this file instead of stdout"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Export an event report as text, JSON or CSV."""
    setup_logging(verbose)

    try:
        settings = load_settings()
        service = SettlementService(settings)
        snapshot = load_snapshot(event_file)

        report = service.export(snapshot, fmt)

        if output is None:
            typer.echo(report)
            return

        if output.suffix == "":
            output = output.with_suffix(f".{fmt.file_extension}")
        output.write_text(report, encoding="utf-8")
        console.print(f"[green]✓ Wrote {fmt.value} report to {output}[/green]")

    except SettleUpError as e:
        _fail(e, verbose)


@app.command()
def stats(
    event_file: Path = typer.Argument(..., help="Event snapshot JSON file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Show spending statistics for an event."""
    setup_logging(verbose)

    try:
        settings = load_settings()
        service = SettlementService(settings)
        snapshot = load_snapshot(event_file)

        result = service.statistics(snapshot)
        currency = result.currency

        console.print(f"\n[bold]{snapshot.event.name}[/bold]")
        console.print(f"  Total: {format_currency(result.total, currency)}")
        console.print(f"  Participants: {result.participant_count}")
        console.print(f"  Per person: {format_currency(result.per_person, currency)}")
        console.print(f"  Expenses: {result.expense_count}")
        console.print(
            f"  Average expense: {format_currency(result.average_expense, currency)}"
        )
        console.print(
            f"  Largest expense: {format_currency(result.largest_expense, currency)}"
        )
        console.print()

        table = Table(title="By category", show_header=True, header_style="bold magenta")
        table.add_column("Category", style="yellow")
        table.add_column("Amount", justify="right")
        table.add_column("Share", justify="right", style="dim")
        for entry in result.by_category:
            table.add_row(
                entry.label,
                format_currency(entry.amount, currency),
                f"{entry.percentage}%",
            )
        console.print(table)

    except SettleUpError as e:
        _fail(e, verbose)


if __name__ == "__main__":
    app()
