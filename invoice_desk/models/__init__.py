"""
Entity schemas for Invoice Desk.

Customers and invoices (with embedded items) are pydantic models. The
``validate_*`` helpers report every field problem of a record as a list
instead of stopping at the first one.
"""
from typing import Any, Mapping

from ..errors import FieldError
from .base import collect_errors, load_model, new_id, next_timestamp, utcnow
from .customer import Customer
from .invoice import Invoice, InvoiceItem, InvoiceStatus


def validate_customer(data: Mapping[str, Any]) -> list[FieldError]:
    return collect_errors(Customer, data)


def validate_invoice(data: Mapping[str, Any]) -> list[FieldError]:
    return collect_errors(Invoice, data)


def validate_item(data: Mapping[str, Any]) -> list[FieldError]:
    return collect_errors(InvoiceItem, data)


__all__ = [
    "Customer",
    "Invoice",
    "InvoiceItem",
    "InvoiceStatus",
    "collect_errors",
    "load_model",
    "new_id",
    "next_timestamp",
    "utcnow",
    "validate_customer",
    "validate_invoice",
    "validate_item",
]
