"""
Total computation for invoice items and invoices.

Pure functions with no I/O. Amounts are plain floats and are never rounded
here; rounding to currency precision is left to whatever formats them.

Items can be passed as ``InvoiceItem`` models or as plain mappings using
either snake_case (``unit_price``) or camelCase (``unitPrice``) keys, so raw
form state can be recomputed directly.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Union

from .models import Invoice, InvoiceItem

ItemLike = Union[InvoiceItem, Mapping[str, Any]]

_KEY_ALIASES = {
    "quantity": ("quantity",),
    "unit_price": ("unit_price", "unitPrice"),
    "tax_rate": ("tax_rate", "taxRate"),
}


@dataclass(frozen=True)
class ItemTotals:
    subtotal: float
    tax_amount: float
    total: float


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: float
    tax_total: float
    grand_total: float


def _raw_value(item: ItemLike, field: str) -> float:
    if isinstance(item, InvoiceItem):
        return float(getattr(item, field))
    for key in _KEY_ALIASES[field]:
        value = item.get(key)
        if value is not None:
            return float(value)
    return 0.0


def compute_item_totals(item: ItemLike) -> ItemTotals:
    """
    Derive subtotal, tax amount and total for one item.

    subtotal = quantity * unit_price
    tax_amount = subtotal * tax_rate / 100
    total = subtotal + tax_amount

    Inputs are not clamped; a missing tax rate counts as 0.
    """
    quantity = _raw_value(item, "quantity")
    unit_price = _raw_value(item, "unit_price")
    tax_rate = _raw_value(item, "tax_rate")

    subtotal = quantity * unit_price
    tax_amount = subtotal * (tax_rate / 100)
    return ItemTotals(subtotal=subtotal, tax_amount=tax_amount, total=subtotal + tax_amount)


def compute_invoice_totals(items: Iterable[ItemLike]) -> InvoiceTotals:
    """
    Derive invoice totals from the raw fields of every item.

    Derived values already stored on the items are ignored, so stale items
    cannot leak wrong figures into the invoice.
    """
    subtotal = 0.0
    tax_total = 0.0
    for item in items:
        totals = compute_item_totals(item)
        subtotal += totals.subtotal
        tax_total += totals.tax_amount
    return InvoiceTotals(subtotal=subtotal, tax_total=tax_total, grand_total=subtotal + tax_total)


def apply_item_totals(item: InvoiceItem) -> InvoiceItem:
    """Return a copy of ``item`` with its derived fields recomputed."""
    totals = compute_item_totals(item)
    return item.model_copy(
        update={
            "subtotal": totals.subtotal,
            "tax_amount": totals.tax_amount,
            "total": totals.total,
        }
    )


def apply_invoice_totals(invoice: Invoice) -> Invoice:
    """Return a copy of ``invoice`` whose items and totals are all consistent."""
    items = [apply_item_totals(item) for item in invoice.items]
    totals = compute_invoice_totals(items)
    return invoice.model_copy(
        update={
            "items": items,
            "subtotal": totals.subtotal,
            "tax_total": totals.tax_total,
            "grand_total": totals.grand_total,
        }
    )


def totals_are_consistent(invoice: Invoice) -> bool:
    """Check that every derived field on ``invoice`` matches its raw inputs."""
    for item in invoice.items:
        if compute_item_totals(item) != ItemTotals(item.subtotal, item.tax_amount, item.total):
            return False
    expected = compute_invoice_totals(invoice.items)
    return expected == InvoiceTotals(invoice.subtotal, invoice.tax_total, invoice.grand_total)
