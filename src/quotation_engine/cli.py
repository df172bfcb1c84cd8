#!/usr/bin/env python3
"""
Quotation Engine CLI
Renders billing tables and runs gated quotation actions from the terminal.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import httpx
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .catalog import build_index
from .client import QuotationClient
from .config import Settings
from .envelope import extract_list, extract_record
from .errors import IneligibleReason, MalformedResponse, describe_transport_failure
from .financial_calculator import FinancialCalculator, format_currency
from .lifecycle import status_counts
from .models import CatalogSet, QuotationFilter
from .session import QuotationDetail, cancel_from_detail, open_detail

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

console = Console()

REASON_MESSAGES = {
    IneligibleReason.ALREADY_CANCELED: "Quotation is already canceled",
    IneligibleReason.EXPIRED: "Quotation has expired",
    IneligibleReason.NOT_VALID: "Quotation is not in a valid state",
}


def setup_parser():
    """Set up command line argument parser."""
    parser = argparse.ArgumentParser(
        prog="quotation-engine",
        description="Quotation Engine - dealership quotation pricing and lifecycle",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  quotation-engine show quote.json                          # Billing table from a saved response
  quotation-engine show quote.json --accessories acc.json   # Price accessories from a catalog file
  quotation-engine list --page 2 --query VF8                # Fetch a page of quotations
  quotation-engine cancel 6650f1c2e4b0a1                    # Cancel a quotation if allowed
        """
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    subparsers = parser.add_subparsers(dest='command')

    show = subparsers.add_parser('show', help='Render the billing table of a saved quotation response')
    show.add_argument('path', help='JSON file holding a quotation response')
    show.add_argument('--accessories', help='JSON file holding the accessory catalog response')
    show.add_argument('--options', help='JSON file holding the option catalog response')

    listing = subparsers.add_parser('list', help='Fetch a page of quotations')
    listing.add_argument('--page', type=int, default=1)
    listing.add_argument('--limit', type=int)
    listing.add_argument('--query', help='Keyword search')
    listing.add_argument('--status', help='Status filter')

    detail = subparsers.add_parser('detail', help='Fetch a quotation and render its billing table')
    detail.add_argument('quotation_id')

    cancel = subparsers.add_parser('cancel', help='Cancel a quotation if its status allows it')
    cancel.add_argument('quotation_id')

    return parser


def _load_json(path: Optional[str]) -> Any:
    if not path:
        return None
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def render_detail(detail: QuotationDetail, currency: str = 'VND'):
    """Print the billing table, totals and available actions."""
    quotation = detail.quotation
    title = f"Quotation {quotation.code or quotation.id or ''}".strip()

    table = Table(title=title, show_lines=False)
    table.add_column("#", justify="right")
    table.add_column("Description")
    table.add_column("Unit")
    table.add_column("Qty", justify="right")
    table.add_column("Unit price", justify="right")
    table.add_column("Line total", justify="right")
    for row in detail.table.rows:
        table.add_row(
            str(row.sequence),
            row.label,
            row.unit,
            str(row.quantity),
            format_currency(row.unit_price, currency),
            format_currency(row.line_total, currency),
        )
    console.print(table)

    summary = FinancialCalculator(currency).summarize(quotation, detail.table)
    lines = [f"Grand total: [bold]{format_currency(detail.table.grand_total, currency)}[/bold]"]
    lines.append(f"Final total: [bold]{format_currency(summary.final_total)}[/bold]")
    if summary.reported_final is not None and not summary.matches_reported:
        lines.append(f"[yellow]Backend reported {format_currency(summary.reported_final)}[/yellow]")
    lines.append(f"Status: {quotation.status or 'valid'}")
    lines.append("Cancel: " + ("allowed" if detail.can_cancel else REASON_MESSAGES[detail.cancel_reason]))
    lines.append("Convert: " + ("allowed" if detail.can_convert else REASON_MESSAGES[detail.convert_reason]))
    console.print(Panel("\n".join(lines), border_style="blue"))


def show_file(path: str, accessories: Optional[str] = None, options: Optional[str] = None) -> int:
    quotation = extract_record(_load_json(path))
    if quotation is None:
        logger.error(f"❌ No quotation found in {path}")
        return 1
    catalogs = CatalogSet(
        accessories=build_index(_load_json(accessories)) if accessories else {},
        options=build_index(_load_json(options)) if options else {},
    )
    detail = QuotationDetail(quotation=quotation, catalogs=catalogs)
    detail.refresh()
    render_detail(detail, Settings.from_env().currency)
    return 0


async def list_quotations(settings: Settings, page: int, limit: Optional[int], query: Optional[str],
                          status: Optional[str]) -> int:
    async with QuotationClient(settings) as client:
        raw = await client.fetch_quotations(QuotationFilter(
            page=page, limit=limit or settings.page_size, query=query, status=status,
        ))
    result = extract_list(raw)
    if result.malformed:
        console.print("[yellow]⚠️  Unrecognized response from the quotation store[/yellow]")

    table = Table(title=f"Quotations (page {result.page or page}, {result.total} total)")
    table.add_column("Code")
    table.add_column("Customer")
    table.add_column("Status")
    table.add_column("Valid until")
    for quotation in result.quotations:
        table.add_row(
            quotation.code or quotation.id or "",
            quotation.customer_name or "",
            quotation.status or "valid",
            quotation.valid_until.date().isoformat() if quotation.valid_until else "",
        )
    console.print(table)
    console.print(status_counts(result.quotations))
    return 0


async def show_remote(settings: Settings, quotation_id: str) -> int:
    async with QuotationClient(settings) as client:
        detail = await open_detail(client, quotation_id)
    render_detail(detail, settings.currency)
    return 0


async def cancel_remote(settings: Settings, quotation_id: str) -> int:
    async with QuotationClient(settings) as client:
        detail = await open_detail(client, quotation_id)
        outcome = await cancel_from_detail(client, detail)
    if outcome.performed:
        console.print(f"[green]✅ Quotation {detail.quotation.code or quotation_id} canceled[/green]")
        return 0
    console.print(f"[yellow]{REASON_MESSAGES[outcome.reason]}[/yellow]")
    return 2


def report_failure(exc: Exception) -> int:
    failure = describe_transport_failure(exc)
    if failure.is_server_error:
        body = f"The server failed to process the request.\n\nDetails: {failure.message}"
        console.print(Panel(body, title="Server error", border_style="red"))
    else:
        console.print(f"[red]❌ Request rejected: {failure.message}[/red]")
        if failure.error_code:
            console.print(f"[dim]Error code: {failure.error_code}[/dim]")
    return 1


def main(argv=None):
    """Main CLI entry point."""
    parser = setup_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.command == 'show':
        for path in (args.path, args.accessories, args.options):
            if path and not Path(path).exists():
                logger.error(f"❌ File not found: {path}")
                return 1
        return show_file(args.path, args.accessories, args.options)

    if args.command is None:
        parser.print_help()
        return 1

    settings = Settings.from_env()
    try:
        if args.command == 'list':
            return asyncio.run(list_quotations(settings, args.page, args.limit, args.query, args.status))
        if args.command == 'detail':
            return asyncio.run(show_remote(settings, args.quotation_id))
        if args.command == 'cancel':
            return asyncio.run(cancel_remote(settings, args.quotation_id))
    except httpx.HTTPError as e:
        return report_failure(e)
    except MalformedResponse as e:
        logger.error(f"❌ {e}")
        return 1

    logger.error(f"❌ Unknown command: {args.command}")
    return 1


def cli():
    sys.exit(main())


if __name__ == '__main__':
    cli()
