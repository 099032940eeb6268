"""Shared fixtures for Invoice Desk tests."""
import json
import pytest

from invoice_desk.config import InvoiceDeskConfig
from invoice_desk.services import CustomerService, InvoiceService
from invoice_desk.store import RecordStore


@pytest.fixture
def config():
    """Config with an in-memory store and fast, offline-friendly settings."""
    return InvoiceDeskConfig(
        db_path=":memory:",
        default_currency="USD",
        unique_invoice_numbers=True,
        rates_api_url="https://rates.example.test/v4",
        rates_api_key=None,
        request_timeout=5,
        retry_attempts=1,
        retry_delay=0,
    )


@pytest.fixture
def store():
    """In-memory record store, closed after the test."""
    with RecordStore(":memory:") as s:
        yield s


@pytest.fixture
def invoices(store, config):
    return InvoiceService(store, config)


@pytest.fixture
def customers(store):
    return CustomerService(store)


@pytest.fixture
def invoice_data():
    return {
        "invoice_number": "INV-001",
        "customer_name": "John Doe",
        "customer_email": "john@example.com",
        "customer_address": "1 Main St",
        "invoice_date": "2024-03-15",
        "due_date": "2024-04-15",
        "items": [
            {"description": "Web Development", "quantity": 2, "unit_price": 100, "tax_rate": 10},
        ],
    }


def _make_csv(rows, columns=("customerName", "invoiceNumber", "issueDate", "dueDate", "items")):
    """Build import CSV text from dict rows; items lists are JSON-encoded."""
    import csv
    import io

    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=list(columns), lineterminator="\n")
    writer.writeheader()
    for row in rows:
        row = dict(row)
        if isinstance(row.get("items"), list):
            row["items"] = json.dumps(row["items"])
        writer.writerow(row)
    return buffer.getvalue()


def _import_row(number="INV-001", customer="John Doe", **overrides):
    row = {
        "customerName": customer,
        "invoiceNumber": number,
        "issueDate": "2024-03-15",
        "dueDate": "2024-04-15",
        "items": [{"description": "Web Development", "quantity": 2, "unitPrice": 100, "taxRate": 10}],
    }
    row.update(overrides)
    return row


@pytest.fixture
def make_csv():
    return _make_csv


@pytest.fixture
def import_row():
    return _import_row
