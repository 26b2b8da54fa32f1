#!/usr/bin/env python3
"""
Spreadsheet Import CLI

Validates an .xlsx workbook locally, shows the parsed rows page by page and
submits one sheet at a time to the import API.

Usage:
    # Show validation errors and the first page of a sheet
    python scripts/sheet_import_cli.py preview --file ledger.xlsx --sheet October

    # Import a sheet, dropping rows 3 and 7 first
    python scripts/sheet_import_cli.py import --file ledger.xlsx --sheet October --drop-row 3 --drop-row 7

    # Read back imported records
    python scripts/sheet_import_cli.py records October --page 2 --api-url http://localhost:8000/api
"""

import os
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import logging
from typing import Optional, Tuple

import click
from dotenv import load_dotenv

from services.formatting import format_amount, format_row, format_verified
from services.import_client import DEFAULT_API_URL, ImportSubmissionError, ImportSubmitter
from services.import_session import ImportSession
from services.sheet_parser import FileTooLargeError, WorkbookFormatError, ensure_within_size_limit

# Load environment variables
load_dotenv()

# Configure logging
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FILE = os.getenv('LOG_FILE', 'cli.log')

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(LOG_FILE)
    ]
)

logger = logging.getLogger('sheet_import_cli')

ALLOWED_EXTENSIONS = ('.xlsx',)
TABLE_HEADER = f"{'#':>4}  {'Name':<30} {'Amount':>18}  {'Date':<10}  Verified"


@click.group()
def cli():
    """Spreadsheet import CLI"""


def load_session(file_path: str) -> ImportSession:
    """Check, read and parse a workbook into a new session."""
    path = Path(file_path)

    if path.suffix.lower() not in ALLOWED_EXTENSIONS:
        click.echo(f"❌ Only .xlsx files are accepted: {path.name}", err=True)
        sys.exit(1)

    try:
        ensure_within_size_limit(path.stat().st_size)
        session = ImportSession()
        session.load(path.read_bytes())
    except FileTooLargeError:
        click.echo("❌ File size exceeds 2MB limit", err=True)
        sys.exit(1)
    except WorkbookFormatError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)

    return session


def select_sheet(session: ImportSession, sheet: Optional[str]):
    if not session.sheets:
        click.echo("❌ Workbook has no sheets", err=True)
        sys.exit(1)

    if sheet:
        try:
            session.select(sheet)
        except KeyError:
            labels = ', '.join(s.label for s in session.sheets)
            click.echo(f"❌ Sheet '{sheet}' not found. Available: {labels}", err=True)
            sys.exit(1)


def echo_errors(session: ImportSession):
    report = session.error_report()
    if not report:
        return

    click.echo("\n⚠️  Validation Errors")
    for label, lines in report.items():
        click.echo(f"Sheet: {label}")
        for line in lines:
            click.echo(f"  {line}")


def echo_page(session: ImportSession, page_number: int):
    rows = session.page(page_number)
    pages = session.page_count()
    page_number = min(max(page_number, 1), max(pages, 1))
    offset = (page_number - 1) * session.page_size

    click.echo(f"\nSheet: {session.selected_label}")
    click.echo(TABLE_HEADER)
    for position, row in enumerate(rows, 1):
        cells = format_row(row)
        click.echo(f"{offset + position:>4}  {cells['name']:<30} {cells['amount']:>18}  "
                   f"{cells['date']:<10}  {cells['verified']}")

    if not rows:
        click.echo("  (no valid rows)")
    if pages > 1:
        click.echo(f"\nPage {page_number} of {pages}")


@cli.command('preview')
@click.option('--file', '-f', 'file_path', required=True, type=click.Path(exists=True, dir_okay=False),
              help='Path to .xlsx file')
@click.option('--sheet', '-s', help='Sheet to show (default: first sheet)')
@click.option('--page', '-p', default=1, show_default=True, type=int, help='Page to show')
def preview_cmd(file_path: str, sheet: Optional[str], page: int):
    """Validate a workbook and show one page of a sheet."""
    session = load_session(file_path)
    select_sheet(session, sheet)

    echo_errors(session)
    echo_page(session, page)


@cli.command('import')
@click.option('--file', '-f', 'file_path', required=True, type=click.Path(exists=True, dir_okay=False),
              help='Path to .xlsx file')
@click.option('--sheet', '-s', help='Sheet to import (default: first sheet)')
@click.option('--drop-row', '-d', 'drop_rows', multiple=True, type=int,
              help='1-based position of a row to delete before import (repeatable)')
@click.option('--yes', '-y', is_flag=True, help='Delete rows without asking')
@click.option('--api-url', envvar='API_URL', default=DEFAULT_API_URL, show_default=True,
              help='Import API base URL')
def import_cmd(file_path: str, sheet: Optional[str], drop_rows: Tuple[int, ...],
               yes: bool, api_url: str):
    """Import the valid rows of one sheet."""
    session = load_session(file_path)
    select_sheet(session, sheet)
    echo_errors(session)

    # Highest position first so earlier positions stay valid
    for position in sorted(set(drop_rows), reverse=True):
        rows = session.current_sheet.rows
        if not 1 <= position <= len(rows):
            click.echo(f"⚠️  No row {position} in sheet '{session.selected_label}', skipping")
            continue

        page_number = (position - 1) // session.page_size + 1
        session.request_delete(page_number, (position - 1) % session.page_size)

        row = rows[position - 1]
        prompt = f"Delete row {position} ({row.name}, {format_amount(row.amount)})?"
        if yes or click.confirm(prompt, default=False):
            session.confirm_delete()
        else:
            session.cancel_delete()

    label = session.selected_label
    click.echo(f"\n📤 Importing {len(session.current_sheet.rows)} rows from '{label}' to {api_url}...")

    try:
        outcome = session.import_selected(ImportSubmitter(api_url))
    except ImportSubmissionError as e:
        logger.error(f"Import failed: {e}")
        click.echo(f"❌ Failed to import data: {e}", err=True)
        sys.exit(1)

    click.echo(f"✓ Successfully imported {outcome.imported} records. "
               f"{outcome.skipped} records were skipped.")


@cli.command('records')
@click.argument('sheet')
@click.option('--page', '-p', default=1, show_default=True, type=int, help='Page number')
@click.option('--limit', '-l', default=10, show_default=True, type=int, help='Records per page')
@click.option('--api-url', envvar='API_URL', default=DEFAULT_API_URL, show_default=True,
              help='Import API base URL')
def records_cmd(sheet: str, page: int, limit: int, api_url: str):
    """Show imported records of a sheet."""
    try:
        result = ImportSubmitter(api_url).fetch_records(sheet, page=page, limit=limit)
    except ImportSubmissionError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)

    click.echo(f"\nSheet: {sheet} ({result['total']} records)")
    for record in result['records']:
        click.echo(f"  {record['date']}  {record['name']:<30} "
                   f"{format_amount(record['amount']):>18}  {format_verified(bool(record.get('verified')))}")

    if result['pages'] > 1:
        click.echo(f"\nPage {page} of {result['pages']}")


if __name__ == '__main__':
    cli()
