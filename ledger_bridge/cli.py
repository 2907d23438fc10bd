"""Command-line interface for ledger-bridge."""
import click
import json
import sys
from pathlib import Path
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import DEFAULT_LAYOUT, get_layout_loader
from .config.settings import BALANCE_TOLERANCE, DEFAULT_CSV_LAYOUT
from .errors import LedgerBridgeError
from .formats import LAYOUT_HEURISTIC, LAYOUT_SIMPLE, StatementFormat
from .pipeline import ConversionPipeline, decode
from .utils.logger import setup_logger
from .validators import BalanceValidator

# Diagnostics go to stderr; stdout may carry the converted document
console = Console(stderr=True)
logger = setup_logger()

FORMAT_CHOICE = click.Choice([f.value for f in StatementFormat], case_sensitive=False)


def _fail(message: str) -> None:
    console.print(f"[red]✗ Error: {message}[/red]")
    sys.exit(1)


def _load_statement(file_path: str, fmt: str, csv_layout: str = None):
    try:
        return decode(Path(file_path).read_bytes(), fmt, csv_layout)
    except OSError as e:
        _fail(f"Could not read {file_path}: {e}")
    except LedgerBridgeError as e:
        _fail(str(e))


@click.group()
@click.version_option(version=__version__)
def cli():
    """Ledger Bridge - Convert bank statements between CSV, MT940 and CAMT.053."""
    pass


@cli.command()
@click.option('--in-format', 'in_format', required=True, type=FORMAT_CHOICE, help='Source format')
@click.option('--out-format', 'out_format', required=True, type=FORMAT_CHOICE, help='Target format')
@click.option('--input', '-i', 'input_path', type=click.Path(exists=True, dir_okay=False), help='Input file (default: stdin)')
@click.option('--output', '-o', 'output_path', type=click.Path(dir_okay=False), help='Output file (default: stdout)')
@click.option('--csv-layout', default=DEFAULT_CSV_LAYOUT, show_default=True,
              help='CSV layout: simple, heuristic or a layout profile name')
@click.option('--validate', 'perform_validation', is_flag=True, help='Reconcile balances before writing')
@click.option('--json', 'json_path', type=click.Path(dir_okay=False), help='Optional path to write result JSON')
def convert(in_format, out_format, input_path, output_path, csv_layout, perform_validation, json_path):
    """Convert a statement from one format to another."""
    if input_path:
        source = Path(input_path)
    else:
        source = sys.stdin.buffer.read()

    pipeline = ConversionPipeline()
    result = pipeline.process(
        source=source,
        input_format=in_format,
        output_format=out_format,
        csv_layout=csv_layout,
        perform_validation=perform_validation
    )

    if json_path:
        try:
            Path(json_path).write_text(json.dumps(result.to_dict(), indent=2, ensure_ascii=False), encoding='utf-8')
            console.print(f"[green]JSON result saved to {json_path}[/green]")
        except OSError as json_exc:
            console.print(f"[yellow]![/yellow] Failed to write JSON: {json_exc}")

    if not result.success:
        _fail(result.error_message)

    if perform_validation and not result.balance_reconciled:
        console.print("[yellow]Warnings:[/yellow]")
        for warning in result.warnings:
            console.print(f"  ⚠ {warning}")

    if output_path:
        try:
            Path(output_path).write_bytes(result.output)
        except OSError as e:
            _fail(f"Could not write {output_path}: {e}")
        console.print(f"[green]✓ Converted {result.transaction_count} transactions to {output_path}[/green]")
    else:
        stdout = sys.stdout.buffer
        stdout.write(result.output)
        stdout.flush()


@cli.command()
@click.argument('file_path', type=click.Path(exists=True, dir_okay=False))
@click.option('--format', '-f', 'fmt', required=True, type=FORMAT_CHOICE, help='Statement format')
@click.option('--csv-layout', default=None, help='Heuristic CSV layout profile')
def inspect(file_path, fmt, csv_layout):
    """
    Show a summary of a statement.

    FILE_PATH: Path to the statement file
    """
    statement = _load_statement(file_path, fmt, csv_layout)

    summary = Table(show_header=False, title=f"{Path(file_path).name} ({fmt})")
    summary.add_column("Field", style="cyan")
    summary.add_column("Value", style="green")
    summary.add_row("Account", statement.account_number)
    summary.add_row("Currency", statement.currency)
    summary.add_row(
        "Opening balance",
        f"{statement.signed_opening_balance:.2f} ({statement.opening_indicator.value}) "
        f"on {statement.opening_date.strftime('%Y-%m-%d')}"
    )
    summary.add_row(
        "Closing balance",
        f"{statement.signed_closing_balance:.2f} ({statement.closing_indicator.value}) "
        f"on {statement.closing_date.strftime('%Y-%m-%d')}"
    )
    summary.add_row("Transactions", str(statement.transaction_count))
    console.print(summary)

    if not statement.transactions:
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Date", style="cyan")
    table.add_column("Amount", justify="right")
    table.add_column("Type")
    table.add_column("Reference")
    table.add_column("Description")

    for txn in statement.transactions:
        colour = "green" if txn.signed_amount >= 0 else "red"
        table.add_row(
            txn.booking_date.strftime('%Y-%m-%d'),
            f"[{colour}]{txn.signed_amount:.2f}[/{colour}]",
            txn.transaction_type.value,
            txn.reference or "",
            txn.description[:60]
        )

    console.print(table)


@cli.command()
@click.argument('file_path', type=click.Path(exists=True, dir_okay=False))
@click.option('--format', '-f', 'fmt', required=True, type=FORMAT_CHOICE, help='Statement format')
@click.option('--csv-layout', default=None, help='Heuristic CSV layout profile')
@click.option('--tolerance', type=float, default=BALANCE_TOLERANCE, show_default=True,
              help='Maximum allowed difference')
def validate(file_path, fmt, csv_layout, tolerance):
    """
    Reconcile opening balance, transactions and closing balance.

    FILE_PATH: Path to the statement file
    """
    statement = _load_statement(file_path, fmt, csv_layout)

    validator = BalanceValidator(tolerance=tolerance)
    reconciled, messages = validator.perform_full_validation(statement)

    for message in messages:
        console.print(f"  {message}")

    if reconciled:
        console.print("[green]✓ Statement reconciles[/green]")
    else:
        console.print("[red]✗ Statement does not reconcile[/red]")
        sys.exit(1)


@cli.command()
def layouts():
    """List available CSV layouts."""
    loader = get_layout_loader()

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Layout", style="cyan")
    table.add_column("Kind", style="green")
    table.add_column("Default currency")

    table.add_row(LAYOUT_SIMPLE, "column names", "-")
    table.add_row(LAYOUT_HEURISTIC, "positional", DEFAULT_LAYOUT.default_currency)
    for name in loader.get_all_layouts():
        if name == DEFAULT_LAYOUT.name:
            continue
        table.add_row(name, "positional profile", loader.get_layout(name).default_currency)

    console.print(table)
    console.print(f"\n[cyan]Layout directory:[/cyan] {loader.layouts_dir}")


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
