"""
Invoice records.

Every write path recomputes item and invoice totals before the record
reaches the store, so stored invoices always carry consistent derived
fields.
"""
from __future__ import annotations
import random
from datetime import date
from typing import Any, Mapping, Optional, Union
from loguru import logger

from ..config import InvoiceDeskConfig
from ..errors import DuplicateInvoiceNumberError, FieldError, NotFoundError, ValidationError
from ..models import Invoice, InvoiceStatus, load_model, new_id, next_timestamp, utcnow
from ..store import INVOICES, RecordStore
from ..totals import apply_invoice_totals

_SYSTEM_FIELDS = ("id", "created_at", "updated_at")
_DERIVED_FIELDS = ("subtotal", "tax_total", "grand_total")

# Attempts at drawing an unused number before giving up
_NUMBER_ATTEMPTS = 20


def _as_mapping(data: Union[Invoice, Mapping[str, Any]]) -> dict:
    if isinstance(data, Invoice):
        return data.model_dump()
    return dict(data)


class InvoiceService:
    """Repository for invoices backed by a ``RecordStore``."""

    partition = INVOICES.name

    def __init__(self, store: RecordStore, config: Optional[InvoiceDeskConfig] = None):
        self.store = store
        self.config = config or InvoiceDeskConfig.from_env()

    def _load(self, record: dict) -> Invoice:
        return Invoice.model_validate(record)

    def list(self) -> list[Invoice]:
        return [self._load(r) for r in self.store.get_all(self.partition)]

    def get(self, invoice_id: str) -> Optional[Invoice]:
        record = self.store.get(self.partition, invoice_id)
        return self._load(record) if record else None

    def _check_number_free(self, invoice_number: str, own_id: Optional[str] = None) -> None:
        if not self.config.unique_invoice_numbers:
            return
        holders = self.store.query_by_index(self.partition, "by_invoice_number", invoice_number)
        if any(r["id"] != own_id for r in holders):
            raise DuplicateInvoiceNumberError(invoice_number)

    def create(self, data: Union[Invoice, Mapping[str, Any]]) -> Invoice:
        """
        Create an invoice with a fresh identifier, timestamps and totals.

        Status defaults to draft and currency to the configured default.

        Raises:
            ValidationError: If the invoice is malformed
            DuplicateInvoiceNumberError: If the number is taken (when enforced)
            DuplicateKeyError: If the generated identifier collides
        """
        payload = {
            k: v for k, v in _as_mapping(data).items()
            if k not in _SYSTEM_FIELDS + _DERIVED_FIELDS
        }
        payload.setdefault("currency", self.config.default_currency)
        now = utcnow()
        invoice = load_model(
            Invoice, {**payload, "id": new_id(), "created_at": now, "updated_at": now}
        )
        invoice = apply_invoice_totals(invoice)

        self._check_number_free(invoice.invoice_number)
        self.store.add(self.partition, invoice.model_dump(mode="json"))
        logger.info(
            f"Created invoice {invoice.invoice_number} ({invoice.id}) "
            f"total {invoice.grand_total} {invoice.currency}"
        )
        return invoice

    def update(self, invoice_id: str, changes: Mapping[str, Any]) -> Invoice:
        """
        Merge ``changes`` into an existing invoice, recompute totals and bump
        ``updated_at``.

        Raises:
            NotFoundError: If the invoice does not exist
            ValidationError: If the merged invoice is invalid or the id changes
        """
        existing = self.get(invoice_id)
        if existing is None:
            raise NotFoundError(self.partition, invoice_id)
        if changes.get("id") not in (None, existing.id):
            raise ValidationError([FieldError("id", "identifier cannot be changed")])

        user_changes = {
            k: v for k, v in changes.items() if k not in _SYSTEM_FIELDS + _DERIVED_FIELDS
        }
        merged = {
            **existing.model_dump(),
            **user_changes,
            "id": existing.id,
            "created_at": existing.created_at,
            "updated_at": next_timestamp(existing.updated_at),
        }
        invoice = apply_invoice_totals(load_model(Invoice, merged))

        if invoice.invoice_number != existing.invoice_number:
            self._check_number_free(invoice.invoice_number, own_id=invoice.id)
        self.store.put(self.partition, invoice.model_dump(mode="json"))
        logger.info(f"Updated invoice {invoice.invoice_number} ({invoice.id})")
        return invoice

    def set_status(self, invoice_id: str, status: Union[InvoiceStatus, str]) -> Invoice:
        return self.update(invoice_id, {"status": InvoiceStatus(status)})

    def delete(self, invoice_id: str) -> None:
        """Delete an invoice together with its items."""
        self.store.delete(self.partition, invoice_id)

    def by_status(self, status: Union[InvoiceStatus, str]) -> list[Invoice]:
        status = InvoiceStatus(status)
        return [
            self._load(r)
            for r in self.store.query_by_index(self.partition, "by_status", status)
        ]

    def by_number(self, invoice_number: str) -> list[Invoice]:
        return [
            self._load(r)
            for r in self.store.query_by_index(
                self.partition, "by_invoice_number", invoice_number
            )
        ]

    def by_customer(self, customer_name: str) -> list[Invoice]:
        return [
            self._load(r)
            for r in self.store.query_by_index(
                self.partition, "by_customer_name", customer_name
            )
        ]

    def by_date_range(self, start: date, end: date) -> list[Invoice]:
        """Invoices dated within [start, end], oldest first."""
        return [
            self._load(r)
            for r in self.store.query_range(self.partition, "by_date", start, end)
        ]

    def generate_invoice_number(
        self,
        today: Optional[date] = None,
        rng: Optional[random.Random] = None,
    ) -> str:
        """
        Draw an invoice number of the form ``INV-YYYYMM-NNNN``.

        When uniqueness is enforced, numbers already in use are skipped.
        """
        today = today or date.today()
        rng = rng or random.Random()
        prefix = f"INV-{today.year}{today.month:02d}"

        for _ in range(_NUMBER_ATTEMPTS):
            number = f"{prefix}-{rng.randint(0, 9999):04d}"
            if not self.config.unique_invoice_numbers or not self.store.query_by_index(
                self.partition, "by_invoice_number", number
            ):
                return number
        raise DuplicateInvoiceNumberError(number)

    def stats(self) -> dict:
        """Count invoices per status and sum their grand totals."""
        invoices = self.list()
        counts = {status.value: 0 for status in InvoiceStatus}
        for invoice in invoices:
            counts[invoice.status.value] += 1
        return {
            "total": len(invoices),
            **counts,
            "total_amount": sum(i.grand_total for i in invoices),
        }
