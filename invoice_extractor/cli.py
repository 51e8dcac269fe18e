"""
Invoice Extractor CLI

Command-line interface for running the parser over OCR text files.

Examples:

    # Parse OCR output of one invoice
    invoice-extractor parse scan_001.txt

    # Parse several files with custom patterns and write a JSON report
    invoice-extractor parse ocr/*.txt -c my_patterns.yaml --json-report report.json

    # Read OCR text from stdin
    tesseract invoice.png - | invoice-extractor parse -

    # Validate a pattern file
    invoice-extractor check-config my_patterns.yaml
"""

import json
import sys
from pathlib import Path
from typing import Optional

import click
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .errors import PatternConfigError
from .models import ParsedInvoiceData
from .parser.patterns import PatternLoader
from .parser.validators import InvoiceRecordValidator
from .pipeline import InvoiceParser, ParserSettings


def setup_logging(verbose: bool = False, log_file: Optional[Path] = None):
    """Configure loguru logging."""
    # Remove default handler
    logger.remove()

    # Console logging
    log_level = "DEBUG" if verbose else "WARNING"
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{message}</cyan>",
        level=log_level,
        colorize=True
    )

    # File logging
    if log_file:
        logger.add(
            log_file,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}",
            level="DEBUG",
            rotation="10 MB"
        )


def read_text(path: Path) -> str:
    """Read OCR text from a file, or stdin for '-'."""
    if str(path) == '-':
        return sys.stdin.read()
    return path.read_text(encoding='utf-8')


def build_table(source: str, data: ParsedInvoiceData) -> Table:
    """Render one parsed record as a rich table."""
    status = "[green]valid[/]" if data.is_valid else "[red]incomplete[/]"
    table = Table(title=f"{escape(source)} ({status})", show_header=True, header_style="bold")
    table.add_column("Field")
    table.add_column("Value")
    table.add_column("Raw text", style="dim")

    table.add_row("Invoice number", data.invoice_number or "-", "")
    table.add_row("Issuer", data.issuer_name or "-", "")
    table.add_row("Issue date", data.issue_date.isoformat() if data.issue_date else "-", "")
    table.add_row(
        "Total",
        str(data.total_amount) if data.total_amount is not None else "-",
        data.raw_total_text or "",
    )
    table.add_row(
        "Tax",
        str(data.tax_amount) if data.tax_amount is not None else "-",
        data.raw_tax_text or "",
    )
    table.add_row("Currency", data.currency_code or "-", "")

    return table


@click.group()
@click.version_option(__version__, prog_name="invoice-extractor")
def main():
    """Extract invoice fields from OCR text."""


@main.command()
@click.argument(
    'input_paths',
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, allow_dash=True, path_type=Path),
)
@click.option(
    '--config', '-c',
    'config_path',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help='Path to patterns.yaml (default: bundled patterns)'
)
@click.option(
    '--default-currency',
    default='TRY',
    show_default=True,
    help='Currency code used when no currency marker is found'
)
@click.option(
    '--min-number-length',
    type=int,
    default=6,
    show_default=True,
    help='Shortest accepted invoice number'
)
@click.option(
    '--max-number-length',
    type=int,
    default=50,
    show_default=True,
    help='Longest accepted invoice number'
)
@click.option(
    '--json-report',
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help='Write parsed records and review warnings as JSON'
)
@click.option(
    '--verbose', '-v',
    is_flag=True,
    help='Enable verbose logging'
)
@click.option(
    '--log-file',
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help='Write logs to file'
)
def parse(
    input_paths: tuple[Path, ...],
    config_path: Optional[Path],
    default_currency: str,
    min_number_length: int,
    max_number_length: int,
    json_report: Optional[Path],
    verbose: bool,
    log_file: Optional[Path],
):
    """Parse OCR text files into invoice fields."""
    setup_logging(verbose=verbose, log_file=log_file)
    console = Console()

    settings = ParserSettings(
        default_currency=default_currency.upper(),
        invoice_number_min_length=min_number_length,
        invoice_number_max_length=max_number_length,
    )

    try:
        parser = InvoiceParser.from_file(config_path, settings)
    except PatternConfigError as e:
        console.print(f"[bold red]Initialization failed: {escape(str(e))}[/]")
        raise SystemExit(1)

    validator = InvoiceRecordValidator()
    reports = []

    for path in input_paths:
        source = 'stdin' if str(path) == '-' else str(path)
        try:
            text = read_text(path)
        except (OSError, UnicodeDecodeError) as e:
            console.print(f"[red]✗ Cannot read {escape(source)}: {escape(str(e))}[/]")
            reports.append({'source_file': source, 'error': str(e)})
            continue

        data = parser.parse(text)
        warnings = validator.review(data)
        if not data.is_valid:
            logger.warning(f"{source}: invoice number or total amount not found")

        console.print(build_table(source, data))
        for warning in warnings:
            console.print(f"  [yellow]⚠ {escape(warning)}[/]")

        reports.append({
            'source_file': source,
            'fields': data.to_dict(),
            'warnings': warnings,
        })

    if json_report:
        with open(json_report, 'w', encoding='utf-8') as f:
            json.dump(reports, f, indent=2, ensure_ascii=False)
        console.print(f"Report written to: {json_report}")


@main.command('check-config')
@click.argument('config_path', type=click.Path(dir_okay=False, path_type=Path))
def check_config(config_path: Path):
    """Validate a pattern file."""
    setup_logging()
    console = Console()

    try:
        config = PatternLoader.load(config_path)
    except PatternConfigError as e:
        console.print(f"[bold red]✗ {escape(str(e))}[/]")
        raise SystemExit(1)

    for name, patterns in config.to_dict().items():
        console.print(f"  {name}: {len(patterns)} pattern(s)")
    console.print(f"[green]✓ {config_path} is valid[/]")


if __name__ == "__main__":
    main()
