"""
Invoice Desk - invoice data and computation layer.

Keeps customers and invoices in a local SQLite-backed record store, derives
tax-inclusive totals, bulk-imports invoices from CSV or Excel files, and
converts computed totals between currencies for display.

Usage:
    from invoice_desk import RecordStore, InvoiceService, BulkImporter

    with RecordStore("invoice_desk.db") as store:
        invoices = InvoiceService(store)
        result = BulkImporter(invoices).import_file("invoices.csv")
"""

__version__ = "1.0.0"

from .config import InvoiceDeskConfig
from .currency import CurrencyConverter, RateProviderClient
from .errors import (
    DuplicateInvoiceNumberError,
    DuplicateKeyError,
    FieldError,
    ImportParseError,
    InvoiceDeskError,
    NotFoundError,
    ProviderUnavailableError,
    RateUnavailableError,
    StorageUnavailableError,
    ValidationError,
)
from .importer import BulkImporter, ImportResult, ImportState
from .models import Customer, Invoice, InvoiceItem, InvoiceStatus
from .services import CustomerService, InvoiceService
from .store import RecordStore
from .totals import compute_invoice_totals, compute_item_totals

__all__ = [
    "InvoiceDeskConfig",
    "CurrencyConverter",
    "RateProviderClient",
    "DuplicateInvoiceNumberError",
    "DuplicateKeyError",
    "FieldError",
    "ImportParseError",
    "InvoiceDeskError",
    "NotFoundError",
    "ProviderUnavailableError",
    "RateUnavailableError",
    "StorageUnavailableError",
    "ValidationError",
    "BulkImporter",
    "ImportResult",
    "ImportState",
    "Customer",
    "Invoice",
    "InvoiceItem",
    "InvoiceStatus",
    "CustomerService",
    "InvoiceService",
    "RecordStore",
    "compute_invoice_totals",
    "compute_item_totals",
    "__version__",
]
