"""
Command-line interface for Invoice Desk.

Usage:
    # Create the local database
    python -m invoice_desk init

    # Bulk import invoices (CSV or .xlsx)
    python -m invoice_desk import invoices.csv
    python -m invoice_desk import invoices.xlsx --dry-run

    # Write the import template
    python -m invoice_desk template invoice_template.csv

    # List or export invoices
    python -m invoice_desk list --status draft
    python -m invoice_desk list --customer "John Doe"
    python -m invoice_desk export invoices_export.csv

    # Convert an amount
    python -m invoice_desk convert 220 USD EUR --date 2024-03-15
"""
from __future__ import annotations
import argparse
import sys
from datetime import date
from typing import Optional
from loguru import logger

from .config import InvoiceDeskConfig
from .currency import SUPPORTED_CURRENCIES, CurrencyConverter, RateProviderClient
from .errors import (
    ImportParseError,
    ProviderUnavailableError,
    RateUnavailableError,
    StorageUnavailableError,
)
from .export import export_invoices_csv, format_amount
from .importer import BulkImporter, write_template
from .log import configure_logging
from .models import InvoiceStatus
from .services import InvoiceService
from .store import RecordStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="invoice_desk",
        description="Manage locally stored invoices",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--db", help="Database path (overrides INVOICE_DB_PATH)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init", help="Create the database and its indexes")

    imp = sub.add_parser("import", help="Bulk import invoices from CSV or Excel")
    imp.add_argument("file", help="Path to the import file")
    imp.add_argument("--dry-run", action="store_true", help="Validate only, store nothing")

    tpl = sub.add_parser("template", help="Write the bulk import template")
    tpl.add_argument("output", help="Where to write the CSV template")

    lst = sub.add_parser("list", help="List invoices")
    lst.add_argument("--status", choices=[s.value for s in InvoiceStatus])
    lst.add_argument("--customer", help="Only invoices billed to this customer name")

    exp = sub.add_parser("export", help="Export invoices to CSV")
    exp.add_argument("output", help="Where to write the CSV export")

    conv = sub.add_parser("convert", help="Convert an amount between currencies")
    conv.add_argument("amount", type=float)
    conv.add_argument("source", type=str.upper, choices=SUPPORTED_CURRENCIES)
    conv.add_argument("target", type=str.upper, choices=SUPPORTED_CURRENCIES)
    conv.add_argument(
        "--date",
        type=lambda s: date.fromisoformat(s),
        help="Use historical rates for this date (YYYY-MM-DD)",
    )
    return parser


def _run_import(args, invoices: InvoiceService) -> int:
    result = BulkImporter(invoices).import_file(args.file, dry_run=args.dry_run)
    if result.rejected:
        print("Import rejected:")
        for violation in result.violations:
            print(f"  {violation}")
        return 1
    print(result.summary())
    for failure in result.errors:
        print(f"  {failure}")
    return 0


def _run_list(args, invoices: InvoiceService) -> int:
    if args.customer:
        rows = invoices.by_customer(args.customer)
        if args.status:
            rows = [inv for inv in rows if inv.status.value == args.status]
    elif args.status:
        rows = invoices.by_status(args.status)
    else:
        rows = invoices.list()
    for inv in rows:
        print(
            f"{inv.invoice_number:<16} {inv.invoice_date.isoformat()}  "
            f"{inv.status.value:<8} {inv.customer_name:<24} "
            f"{format_amount(inv.grand_total):>12} {inv.currency}"
        )
    print(f"{len(rows)} invoices")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = InvoiceDeskConfig.from_env()
    if args.db:
        config.db_path = args.db

    configure_logging("DEBUG" if args.verbose else config.log_level, config.log_file)

    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        return 1

    if args.command == "template":
        path = write_template(args.output)
        print(f"Template written to {path}")
        return 0

    if args.command == "convert":
        try:
            with RateProviderClient(config) as client:
                converted = CurrencyConverter(client).convert(
                    args.amount, args.source, args.target, args.date
                )
        except RateUnavailableError as e:
            logger.error(str(e))
            return 1
        except ProviderUnavailableError as e:
            logger.error(f"Rate provider unavailable: {e}")
            return 1
        print(f"{format_amount(converted)} {args.target.upper()}")
        return 0

    try:
        with RecordStore(config.db_path) as store:
            invoices = InvoiceService(store, config)
            if args.command == "init":
                print(f"Database ready at {config.db_path}")
                return 0
            if args.command == "import":
                return _run_import(args, invoices)
            if args.command == "list":
                return _run_list(args, invoices)
            if args.command == "export":
                count = export_invoices_csv(invoices.list(), args.output)
                print(f"Exported {count} invoices to {args.output}")
                return 0
    except ImportParseError as e:
        logger.error(f"Cannot read import file: {e}")
        return 1
    except StorageUnavailableError as e:
        logger.error(f"Storage error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
