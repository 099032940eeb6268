"""
CSV export of computed invoices.

Writes the figures already stored on each invoice; totals are formatted
here, never recomputed.
"""
from __future__ import annotations
import csv
from pathlib import Path
from typing import IO, Iterable, Union

from .models import Invoice

EXPORT_COLUMNS = [
    "invoiceNumber",
    "customerName",
    "customerEmail",
    "issueDate",
    "dueDate",
    "currency",
    "status",
    "itemCount",
    "subtotal",
    "taxTotal",
    "grandTotal",
]


def format_amount(value: float) -> str:
    return f"{value:.2f}"


def invoice_to_row(invoice: Invoice) -> dict[str, str]:
    return {
        "invoiceNumber": invoice.invoice_number,
        "customerName": invoice.customer_name,
        "customerEmail": invoice.customer_email,
        "issueDate": invoice.invoice_date.isoformat(),
        "dueDate": invoice.due_date.isoformat(),
        "currency": invoice.currency,
        "status": invoice.status.value,
        "itemCount": str(len(invoice.items)),
        "subtotal": format_amount(invoice.subtotal),
        "taxTotal": format_amount(invoice.tax_total),
        "grandTotal": format_amount(invoice.grand_total),
    }


def write_invoices_csv(invoices: Iterable[Invoice], stream: IO[str]) -> int:
    """Write invoices to an open text stream; returns the number of rows."""
    writer = csv.DictWriter(stream, fieldnames=EXPORT_COLUMNS, lineterminator="\n")
    writer.writeheader()
    count = 0
    for invoice in invoices:
        writer.writerow(invoice_to_row(invoice))
        count += 1
    return count


def export_invoices_csv(invoices: Iterable[Invoice], path: Union[str, Path]) -> int:
    """Export invoices to a CSV file, creating parent directories as needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as handle:
        return write_invoices_csv(invoices, handle)
