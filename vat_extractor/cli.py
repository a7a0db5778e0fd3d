"""Command-line interface for the VAT statement extractor."""
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .config import get_dialect_loader
from .exporters import generate_output_filename
from .utils import format_amount
from .utils.logger import setup_logger

console = Console()
logger = setup_logger()


@click.group()
@click.version_option(version=__version__)
def cli():
    """VAT Statement Extractor - Normalize bank statement exports into a VAT ledger."""
    pass


@cli.command()
@click.argument('file_path', type=click.Path(exists=True, dir_okay=False))
@click.option('--output', '-o', type=click.Path(), help='Excel output path (default: next to the statement)')
@click.option('--json', 'json_path', type=click.Path(), help='Optional path to write the JSON payload')
@click.option('--dialect', '-d', help='Statement dialect (auto-detect if not specified)')
@click.option('--show-operations', is_flag=True, help='Print the parsed operations table')
def parse(file_path, output, json_path, dialect, show_operations):
    """
    Parse a statement and report its VAT position.

    FILE_PATH: Path to the statement export (CSV, XLS or XLSX)
    """
    console.print("\n[bold blue]VAT Statement Extractor[/bold blue]\n")

    file_path = Path(file_path)

    # Default output path
    if not output:
        output = generate_output_filename(file_path.name, output_dir=file_path.parent)

    console.print(f"[cyan]Processing:[/cyan] {file_path.name}")
    console.print(f"[cyan]Output:[/cyan] {output}")

    from .pipeline import StatementPipeline

    pipeline = StatementPipeline()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console
    ) as progress:
        progress.add_task("Parsing statement...", total=None)
        result = pipeline.process_file(
            file_path,
            dialect_name=dialect,
            output_path=Path(output),
            json_path=Path(json_path) if json_path else None,
        )

    if not result.success:
        console.print("\n[red]✗ Parsing failed[/red]")
        console.print(f"  Error: {result.error_message}")
        sys.exit(1)

    console.print("\n[green]✓ Parsing successful![/green]")
    console.print(f"  Dialect: {result.dialect or 'generic'}")
    console.print(f"  Header row: {result.header_row_index}")
    console.print(f"  Transactions: {result.transaction_count}")
    console.print(f"  With violations: {len(result.invalid_transactions)}")
    console.print(f"  Time: {result.processing_time:.2f}s")

    if show_operations and result.transactions:
        console.print(_operations_table(result))

    console.print(_totals_table(result))

    if result.monthly:
        console.print(_monthly_table(result))

    if result.warnings:
        console.print("\n[yellow]Warnings:[/yellow]")
        for warning in result.warnings:
            console.print(f"  ⚠ {warning}")

    console.print(f"\n[green]Excel workbook saved to {output}[/green]")
    if json_path:
        console.print(f"\n[green]JSON payload saved to {json_path}[/green]")


def _totals_table(result) -> Table:
    totals = result.totals
    table = Table(title="VAT Totals", show_header=True, header_style="bold magenta")
    table.add_column("Item", style="cyan")
    table.add_column("Amount", justify="right")
    table.add_row("Input VAT", format_amount(totals.input_vat, result.currency))
    table.add_row("Output VAT", format_amount(totals.output_vat, result.currency))

    colour = "red" if totals.position == "payable" else "green"
    table.add_row("Net VAT", f"[{colour}]{format_amount(totals.net_vat, result.currency)}[/{colour}]")
    table.add_row(totals.summary()['description'], format_amount(abs(totals.net_vat), result.currency))
    return table


def _monthly_table(result) -> Table:
    table = Table(title="Monthly Net VAT", show_header=True, header_style="bold magenta")
    table.add_column("Month", style="cyan")
    table.add_column("Input VAT", justify="right")
    table.add_column("Output VAT", justify="right")
    table.add_column("Net VAT", justify="right")
    for bucket in result.monthly:
        table.add_row(
            bucket.month,
            f"{bucket.input_vat:,.2f}",
            f"{bucket.output_vat:,.2f}",
            f"{bucket.net_vat:,.2f}",
        )
    return table


def _operations_table(result) -> Table:
    table = Table(title="Operations", show_header=True, header_style="bold magenta")
    table.add_column("Date", style="cyan")
    table.add_column("Counterparty")
    table.add_column("Amount", justify="right")
    table.add_column("VAT", justify="right")
    table.add_column("Direction")
    table.add_column("Errors", style="red")
    for txn in result.transactions:
        table.add_row(
            txn.date.isoformat() if txn.date else "",
            txn.counterparty[:40],
            f"{txn.amount:,.2f}" if txn.amount.is_finite() else "NaN",
            f"{txn.vat_amount:,.2f}",
            txn.direction.value,
            ", ".join(v.value for v in txn.violations),
        )
    return table


@cli.command()
def dialects():
    """List known statement dialects."""
    console.print("\n[bold blue]Statement Dialects[/bold blue]\n")

    loader = get_dialect_loader()

    if loader.supported_dialects_count == 0:
        console.print("[yellow]No dialect configurations found[/yellow]")
        console.print(f"[yellow]Add YAML files to: {loader.config_dir}[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Dialect", style="cyan")
    table.add_column("Identifiers", style="green")
    table.add_column("Operation Codes")

    for dialect_name in loader.get_all_dialects():
        config = loader.get_config(dialect_name)
        identifiers = ", ".join(config.identifiers[:3])
        if len(config.identifiers) > 3:
            identifiers += f" (+{len(config.identifiers) - 3} more)"
        codes = ", ".join(f"{code}={direction.value}" for code, direction in sorted(config.operation_codes.items()))
        table.add_row(dialect_name, identifiers, codes)

    console.print(table)
    console.print(f"\n[cyan]Total dialects:[/cyan] {loader.supported_dialects_count}")


def main():
    """Main entry point."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"\n[red]Error: {e}[/red]")
        logger.exception("Unhandled exception")
        sys.exit(1)


if __name__ == '__main__':
    main()
